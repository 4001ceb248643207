"""Fetching Red Hat VEX and advisory documents and answering questions about them."""

from __future__ import annotations

from typing import NamedTuple

import requests

from .csaf import CSAF, parse_csaf

VEX_BASE_URL = "https://access.redhat.com/security/data/csaf/v2/vex"
CSAF_BASE_URL = "https://security.access.redhat.com/data/csaf/v2/advisories"
DEFAULT_TIMEOUT = 30.0


class VEXError(Exception):
    """Base class for errors raised while looking up documents."""


class InvalidIDError(VEXError, ValueError):
    """The CVE or RHSA identifier is malformed."""


class DocumentNotFoundError(VEXError):
    """The server has no document for the identifier."""


class FetchError(VEXError):
    """The document could not be fetched or parsed."""


class PackageCheck(NamedTuple):
    """Outcome of checking a package against a document."""

    matched: bool
    reason: str
    products: list[str]


class VEXClient:
    """Fetches CSAF documents from the Red Hat security data service."""

    def __init__(
        self,
        vex_base_url: str = VEX_BASE_URL,
        csaf_base_url: str = CSAF_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.vex_base_url = vex_base_url
        self.csaf_base_url = csaf_base_url
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def get_vex_document(self, cve_id: str) -> CSAF:
        """Fetch the VEX document for a CVE such as CVE-2024-1234."""
        if not cve_id.upper().startswith("CVE-"):
            raise InvalidIDError(f"invalid CVE ID format: {cve_id}")
        cve_id = cve_id.upper()
        parts = cve_id.split("-")
        if len(parts) != 3 or not parts[1] or not parts[2] or len(parts[1]) != 4:
            raise InvalidIDError(f"invalid CVE ID format: {cve_id}")
        url = f"{self.vex_base_url}/{parts[1]}/{cve_id.lower()}.json"
        return self._fetch(url, "VEX document", cve_id, f"VEX document not found for CVE {cve_id}")

    def get_rhsa_document(self, rhsa_id: str) -> CSAF:
        """Fetch the advisory document for an RHSA such as RHSA-2024:1234."""
        if not rhsa_id.upper().startswith("RHSA-"):
            raise InvalidIDError(f"invalid RHSA ID format: {rhsa_id}")
        rhsa_id = rhsa_id.upper()
        parts = rhsa_id.split("-")
        if len(parts) != 2:
            raise InvalidIDError(f"invalid RHSA ID format: {rhsa_id}")
        year_and_num = parts[1].split(":")
        if (
            len(year_and_num) != 2
            or not year_and_num[0]
            or not year_and_num[1]
            or len(year_and_num[0]) != 4
        ):
            raise InvalidIDError(f"invalid RHSA ID format: {rhsa_id}")
        file_name = rhsa_id.replace(":", "_").lower()
        url = f"{self.csaf_base_url}/{year_and_num[0]}/{file_name}.json"
        return self._fetch(url, "RHSA document", rhsa_id, f"RHSA document not found for {rhsa_id}")

    def _fetch(self, url: str, kind: str, ident: str, not_found: str) -> CSAF:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"failed to fetch {kind}: {exc}") from exc
        with response:
            if response.status_code == 404:
                raise DocumentNotFoundError(not_found)
            if response.status_code != 200:
                raise FetchError(
                    f"HTTP error {response.status_code} when fetching {kind} for {ident}"
                )
            try:
                body = response.content
            except requests.RequestException as exc:
                raise FetchError(f"failed to read response body: {exc}") from exc
        try:
            return parse_csaf(body)
        except ValueError as exc:
            raise FetchError(f"failed to parse {kind}: {exc}") from exc


def _matching(products: list[str], package_name: str) -> list[str]:
    needle = package_name.lower()
    return [product for product in products if needle in product.lower()]


def is_package_affected_by_cve(doc: CSAF, package_name: str) -> PackageCheck:
    """Tell whether a package appears as affected or fixed in a VEX document."""
    matches: list[str] = []
    for vuln in doc.vulnerabilities:
        for key in ("known_affected", "fixed"):
            matches.extend(_matching(vuln.product_status.get(key, []), package_name))
    if matches:
        return PackageCheck(True, "Package is affected by this CVE", matches)

    for vuln in doc.vulnerabilities:
        found = _matching(vuln.product_status.get("known_not_affected", []), package_name)
        if found:
            return PackageCheck(False, "Package is explicitly marked as not affected", found[:1])

    return PackageCheck(False, "Package not found in VEX document", [])


def is_package_fixed_by_rhsa(doc: CSAF, package_name: str) -> PackageCheck:
    """Tell whether a package appears as fixed in an advisory document."""
    matches: list[str] = []
    for vuln in doc.vulnerabilities:
        matches.extend(_matching(vuln.product_status.get("fixed", []), package_name))
    if matches:
        return PackageCheck(True, "Package is fixed by this RHSA", matches)

    for vuln in doc.vulnerabilities:
        mentioned = [
            product
            for key in ("known_affected", "under_investigation", "known_not_affected")
            for product in vuln.product_status.get(key, [])
        ]
        found = _matching(mentioned, package_name)
        if found:
            return PackageCheck(False, "Package found but not fixed by this RHSA", found[:1])

    return PackageCheck(False, "Package not found in RHSA document", [])


_PACKAGE_GROUPS = (
    ("known_affected", "affected"),
    ("fixed", "fixed"),
    ("known_not_affected", "not_affected"),
    ("under_investigation", "under_investigation"),
)

_STATUS_KEYS = ("fixed", "known_affected", "known_not_affected", "under_investigation")


def get_affected_packages_by_document(doc: CSAF) -> dict[str, list[str]]:
    """Group the products of a document as affected, fixed, not_affected and under_investigation."""
    result: dict[str, list[str]] = {}
    for vuln in doc.vulnerabilities:
        for status_key, group in _PACKAGE_GROUPS:
            if status_key in vuln.product_status:
                result.setdefault(group, []).extend(vuln.product_status[status_key])
    return result


def get_vulnerability_status(doc: CSAF) -> dict[str, int]:
    """Count the products of a document under each status."""
    counts: dict[str, int] = {}
    for vuln in doc.vulnerabilities:
        for key in _STATUS_KEYS:
            if key in vuln.product_status:
                counts[key] = counts.get(key, 0) + len(vuln.product_status[key])
    return counts


def get_affected_products(doc: CSAF) -> list[str]:
    """List the known-affected and fixed products of a document."""
    return [
        product
        for vuln in doc.vulnerabilities
        for key in ("known_affected", "fixed")
        for product in vuln.product_status.get(key, [])
    ]


def get_severity(doc: CSAF) -> str:
    """Return the first impact rating in the document, or 'unknown'."""
    for vuln in doc.vulnerabilities:
        for threat in vuln.threats:
            if threat.category == "impact":
                return threat.details
    return "unknown"


def _last_updated(doc: CSAF) -> str | None:
    released = doc.document.tracking.current_release_date
    return released.strftime("%Y-%m-%d") if released is not None else None


def _summary(doc: CSAF, citation: str) -> str:
    status = get_vulnerability_status(doc)
    lines = [f"Document: {doc.document.tracking.id}\n"]
    if doc.document.title:
        lines.append(f"Title: {doc.document.title}\n")
    lines.append(f"Severity: {get_severity(doc)}\n")
    updated = _last_updated(doc)
    if updated is not None:
        lines.append(f"Last Updated: {updated}\n")
    lines.append("\nProduct Status:\n")
    for key, label in (
        ("fixed", "Fixed"),
        ("known_affected", "Known Affected"),
        ("known_not_affected", "Not Affected"),
        ("under_investigation", "Under Investigation"),
    ):
        if status.get(key, 0) > 0:
            lines.append(f"  • {label}: {status[key]} products\n")
    lines.append("\n" + citation)
    return "".join(lines)


def format_summary(doc: CSAF) -> str:
    """Human-readable summary of a VEX document."""
    return _summary(doc, format_vex_citation(doc))


def format_rhsa_summary(doc: CSAF) -> str:
    """Human-readable summary of an advisory document."""
    return _summary(doc, format_rhsa_citation(doc))


def _citation(doc: CSAF, heading: str, label: str, url: str) -> str:
    lines = [f"📄 **{heading} Source Citation:**\n", f"**{label}**: `{doc.document.tracking.id}`\n"]
    if doc.document.title:
        lines.append(f'**Title**: "{doc.document.title}"\n')
    updated = _last_updated(doc)
    if updated is not None:
        lines.append(f"**Last Updated**: {updated}\n")
    lines.append(f"**URL**: `{url}`")
    return "".join(lines)


def format_vex_citation(doc: CSAF) -> str:
    """Source citation for a VEX document."""
    return _citation(
        doc, "VEX", "Red Hat VEX Document", generate_vex_url(doc.document.tracking.id)
    )


def format_rhsa_citation(doc: CSAF) -> str:
    """Source citation for an advisory document."""
    return _citation(
        doc, "RHSA", "Red Hat Security Advisory", generate_rhsa_url(doc.document.tracking.id)
    )


def generate_vex_url(cve_id: str) -> str:
    """URL of the VEX document for a CVE, or '' if the identifier is malformed."""
    if not cve_id.upper().startswith("CVE-"):
        return ""
    parts = cve_id.upper().split("-")
    if len(parts) != 3:
        return ""
    return f"{VEX_BASE_URL}/{parts[1]}/{cve_id.lower()}.json"


def generate_rhsa_url(rhsa_id: str) -> str:
    """URL of the advisory document for an RHSA, or '' if the identifier is malformed."""
    if not rhsa_id.upper().startswith("RHSA-"):
        return ""
    parts = rhsa_id.upper().split("-")
    if len(parts) != 2:
        return ""
    year_and_num = parts[1].split(":")
    if len(year_and_num) != 2:
        return ""
    file_name = rhsa_id.replace(":", "_").lower()
    return f"{CSAF_BASE_URL}/{year_and_num[0]}/{file_name}.json"