import json

import pytest
import responses

from vexlookup.cache import FileCache
from vexlookup.csaf import parse_csaf
from vexlookup.tools import (
    DocumentStore,
    ToolError,
    check_package_affected,
    check_package_fixed,
    list_affected_packages,
    lookup_cve,
    lookup_rhsa,
)
from vexlookup.vex import (
    CSAF_BASE_URL,
    VEX_BASE_URL,
    VEXClient,
    format_rhsa_citation,
    format_rhsa_summary,
    format_summary,
    format_vex_citation,
)

CVE_URL = f"{VEX_BASE_URL}/2024/cve-2024-1234.json"
RHSA_URL = f"{CSAF_BASE_URL}/2024/rhsa-2024_1234.json"


def _document(doc_id):
    return {
        "document": {
            "title": "Test Vulnerability",
            "tracking": {"id": doc_id, "current_release_date": "2024-05-01T00:00:00Z"},
        },
        "vulnerabilities": [
            {
                "cve": "CVE-2024-1234",
                "product_status": {
                    "fixed": ["package1-fixed", "package2-fixed"],
                    "known_affected": ["package3-affected"],
                    "known_not_affected": ["package4-safe", "package5-safe"],
                    "under_investigation": ["package6-investigating"],
                },
                "threats": [{"category": "impact", "details": "Important"}],
                "remediations": [
                    {
                        "category": "vendor_fix",
                        "details": "Update the packages",
                        "url": "https://errata.example.com/fix",
                    }
                ],
            }
        ],
    }


CVE_DOC = _document("CVE-2024-1234")
RHSA_DOC = _document("RHSA-2024:1234")


@pytest.fixture
def http():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, CVE_URL, json=CVE_DOC)
        rsps.add(responses.GET, RHSA_URL, json=RHSA_DOC)
        yield rsps


@pytest.fixture
def store(tmp_path):
    return DocumentStore(VEXClient(), FileCache(tmp_path))


def test_lookup_cve(http, store):
    text = lookup_cve(store, "CVE-2024-1234")
    doc = parse_csaf(json.dumps(CVE_DOC))
    assert text.startswith("Red Hat VEX Document for CVE-2024-1234\n\n" + format_summary(doc))
    assert "\nRemediation Information:\n" in text
    assert "  • vendor_fix: https://errata.example.com/fix\n" in text
    assert text.endswith("    Details: Update the packages\n")


def test_lookup_rhsa(http, store):
    text = lookup_rhsa(store, "RHSA-2024:1234")
    doc = parse_csaf(json.dumps(RHSA_DOC))
    assert text.startswith("Red Hat Security Advisory RHSA-2024:1234\n\n" + format_rhsa_summary(doc))
    assert "Remediation Information:" in text


def test_store_uses_cache(http, store):
    first = store.vex_document("CVE-2024-1234")
    second = store.vex_document("CVE-2024-1234")
    assert len(http.calls) == 1
    assert first == second
    assert store.cache.get("vex_CVE-2024-1234") is not None


def test_corrupt_cache_is_refetched(http, store):
    store.cache.put("vex_CVE-2024-1234", "not json")
    doc = store.vex_document("CVE-2024-1234")
    assert doc.document.tracking.id == "CVE-2024-1234"
    assert len(http.calls) == 1


def test_not_found_is_wrapped(store):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, CVE_URL, status=404)
        with pytest.raises(ToolError, match="failed to fetch VEX document for CVE-2024-1234"):
            store.vex_document("CVE-2024-1234")


def test_invalid_cve_is_wrapped(store):
    with pytest.raises(ToolError, match="invalid CVE ID format"):
        lookup_cve(store, "CVE-24-1")


def test_check_package_affected(http, store):
    text = check_package_affected(store, "CVE-2024-1234", "package3")
    doc = store.vex_document("CVE-2024-1234")
    assert text.startswith("Package Status Check: package3 in CVE-2024-1234\n\n")
    assert "Result: Package is affected by this CVE\n" in text
    assert "Affected: true\n" in text
    assert "  • package3-affected\n" in text
    assert text.endswith("\n" + format_vex_citation(doc))


def test_check_package_not_found(http, store):
    text = check_package_affected(store, "CVE-2024-1234", "nonexistent")
    assert "Result: Package not found in VEX document\n" in text
    assert "Affected: false\n" in text
    assert "Matching Products:" not in text


def test_check_package_fixed(http, store):
    text = check_package_fixed(store, "RHSA-2024:1234", "package1")
    doc = store.rhsa_document("RHSA-2024:1234")
    assert "Result: Package is fixed by this RHSA\n" in text
    assert "Fixed: true\n" in text
    assert "  • package1-fixed\n" in text
    assert text.endswith("\n" + format_rhsa_citation(doc))


def test_list_affected_packages_for_cve(http, store):
    text = list_affected_packages(store, "CVE-2024-1234")
    assert text.startswith("Packages Affected by CVE CVE-2024-1234\n\n")
    order = [
        text.index("AFFECTED Packages:"),
        text.index("FIXED Packages:"),
        text.index("NOT AFFECTED Packages:"),
        text.index("UNDER INVESTIGATION Packages:"),
    ]
    assert order == sorted(order)
    for product in ("package1-fixed", "package4-safe", "package6-investigating"):
        assert f"  • {product}\n" in text
    assert "  • Total Affected/Fixed: 3\n" in text
    assert "  • Total Not Affected: 2\n" in text
    assert "  • Total Under Investigation: 1\n" in text
    assert "VEX Source Citation" in text


def test_list_affected_packages_for_rhsa(http, store):
    text = list_affected_packages(store, "rhsa-2024:1234")
    assert text.startswith("Packages Affected by RHSA rhsa-2024:1234\n\n")
    assert "RHSA Source Citation" in text


def test_list_affected_packages_invalid_id(store):
    with pytest.raises(ToolError, match="invalid ID format: GHSA-1"):
        list_affected_packages(store, "GHSA-1")