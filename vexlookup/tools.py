"""The lookup tools: fetch documents, with caching, and render text answers."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .cache import FileCache
from .csaf import CSAF, dump_csaf, parse_csaf
from .vex import (
    VEXClient,
    VEXError,
    format_rhsa_citation,
    format_rhsa_summary,
    format_summary,
    format_vex_citation,
    get_affected_packages_by_document,
    is_package_affected_by_cve,
    is_package_fixed_by_rhsa,
)


class ToolError(Exception):
    """A tool could not produce an answer."""


class DocumentStore:
    """Fetches VEX and advisory documents, keeping recent ones in a file cache."""

    def __init__(self, client: VEXClient | None = None, cache: FileCache | None = None) -> None:
        self.client = client if client is not None else VEXClient()
        self.cache = cache if cache is not None else FileCache()

    def vex_document(self, cve_id: str) -> CSAF:
        """Return the VEX document for a CVE."""
        return self._document("vex_", cve_id, "VEX", self.client.get_vex_document)

    def rhsa_document(self, rhsa_id: str) -> CSAF:
        """Return the advisory document for an RHSA."""
        return self._document("rhsa_", rhsa_id, "RHSA", self.client.get_rhsa_document)

    def _document(
        self, prefix: str, ident: str, kind: str, fetch: Callable[[str], CSAF]
    ) -> CSAF:
        key = prefix + ident
        cached = self.cache.get(key)
        if cached:
            try:
                return parse_csaf(cached)
            except ValueError:
                pass
        try:
            doc = fetch(ident)
        except VEXError as exc:
            raise ToolError(f"failed to fetch {kind} document for {ident}: {exc}") from exc
        self.cache.put(key, dump_csaf(doc))
        return doc


def _bullets(items: Iterable[str]) -> str:
    return "".join(f"  • {item}\n" for item in items)


def _remediations(doc: CSAF) -> str:
    if not doc.vulnerabilities or not doc.vulnerabilities[0].remediations:
        return ""
    lines = ["\nRemediation Information:\n"]
    for remediation in doc.vulnerabilities[0].remediations:
        if remediation.url:
            lines.append(f"  • {remediation.category}: {remediation.url}\n")
        if remediation.details:
            lines.append(f"    Details: {remediation.details}\n")
    return "".join(lines)


def _matching_products(products: list[str]) -> str:
    return "Matching Products:\n" + _bullets(products) if products else ""


def lookup_cve(store: DocumentStore, cve: str) -> str:
    """Describe the VEX document of a CVE."""
    doc = store.vex_document(cve)
    return f"Red Hat VEX Document for {cve}\n\n" + format_summary(doc) + _remediations(doc)


def lookup_rhsa(store: DocumentStore, rhsa: str) -> str:
    """Describe the advisory document of an RHSA."""
    doc = store.rhsa_document(rhsa)
    return f"Red Hat Security Advisory {rhsa}\n\n" + format_rhsa_summary(doc) + _remediations(doc)


def check_package_affected(store: DocumentStore, cve: str, package: str) -> str:
    """Report whether a package is affected by a CVE."""
    doc = store.vex_document(cve)
    check = is_package_affected_by_cve(doc, package)
    return (
        f"Package Status Check: {package} in {cve}\n\n"
        f"Result: {check.reason}\n"
        f"Affected: {str(check.matched).lower()}\n\n"
        + _matching_products(check.products)
        + "\n"
        + format_vex_citation(doc)
    )


def check_package_fixed(store: DocumentStore, rhsa: str, package: str) -> str:
    """Report whether a package is fixed by an RHSA."""
    doc = store.rhsa_document(rhsa)
    check = is_package_fixed_by_rhsa(doc, package)
    return (
        f"Package Fix Status Check: {package} in {rhsa}\n\n"
        f"Result: {check.reason}\n"
        f"Fixed: {str(check.matched).lower()}\n\n"
        + _matching_products(check.products)
        + "\n"
        + format_rhsa_citation(doc)
    )


_SECTIONS = (
    ("affected", "⚠️  AFFECTED Packages:\n"),
    ("fixed", "✅ FIXED Packages:\n"),
    ("not_affected", "✅ NOT AFFECTED Packages:\n"),
    ("under_investigation", "🔍 UNDER INVESTIGATION Packages:\n"),
)


def list_affected_packages(store: DocumentStore, identifier: str) -> str:
    """List the packages of a CVE or RHSA document grouped by status."""
    upper = identifier.upper()
    if upper.startswith("CVE-"):
        doc = store.vex_document(identifier)
        doc_type, citation = "CVE", format_vex_citation
    elif upper.startswith("RHSA-"):
        doc = store.rhsa_document(identifier)
        doc_type, citation = "RHSA", format_rhsa_citation
    else:
        raise ToolError(
            f"invalid ID format: {identifier} (must be CVE-YYYY-NNNN or RHSA-YYYY:NNNN)"
        )

    groups = get_affected_packages_by_document(doc)
    parts = [f"Packages Affected by {doc_type} {identifier}\n\n"]
    for key, heading in _SECTIONS:
        packages = groups.get(key, [])
        if packages:
            parts.append(heading + _bullets(packages) + "\n")

    total_affected = len(groups.get("affected", [])) + len(groups.get("fixed", []))
    parts.append("Summary:\n")
    parts.append(f"  • Total Affected/Fixed: {total_affected}\n")
    parts.append(f"  • Total Not Affected: {len(groups.get('not_affected', []))}\n")
    parts.append(
        f"  • Total Under Investigation: {len(groups.get('under_investigation', []))}\n"
    )
    parts.append("\n" + citation(doc))
    return "".join(parts)