# vexlookup

Query Red Hat security data for a CVE or a Red Hat Security Advisory (RHSA).
For a CVE it reads the VEX document. For an RHSA it reads the CSAF advisory.
It can tell you:

- the severity, the title, the last update date and how many products are in each status;
- whether a package is affected by a CVE;
- whether a package is fixed by an RHSA;
- every package that is affected, fixed, not affected or under investigation.

## Installation

```
pip install vexlookup
```

## As an MCP tool server

```
vexlookup
```

This starts a Model Context Protocol server. It reads one JSON-RPC message per line from standard input and writes each answer as one line to standard output. It stops when standard input closes. It answers `initialize`, `ping`, `tools/list` and `tools/call`, and it accepts `notifications/...` messages. It offers these tools:

| Tool | Arguments | Purpose |
|------|-----------|---------|
| `lookup_cve` | `cve` | Summary of the VEX document for a CVE, with remediation details |
| `lookup_rhsa` | `rhsa` | Summary of the CSAF advisory for an RHSA, with remediation details |
| `is_package_affected_by_cve` | `cve`, `package` | Whether a package is affected by a CVE |
| `is_package_fixed_by_rhsa` | `rhsa`, `package` | Whether a package is fixed by an RHSA |
| `list_affected_packages` | `id` | Packages grouped by status, for a CVE or an RHSA |

Every argument is a required string. A tool that cannot answer, for example because the identifier is malformed or the document does not exist, returns its error message as text with `isError` set.

The server keeps fetched documents for five minutes as `.cache` files in the system temporary directory.

Give CVE identifiers in the form `CVE-2024-1234` and RHSA identifiers in the form `RHSA-2024:1234`. Case does not matter. A package matches a product when the package name appears anywhere in the product ID, ignoring case.

## As a library

`vexlookup.vex.VEXClient` fetches documents. It does not cache them.

```python
from vexlookup.vex import VEXClient, is_package_affected_by_cve, format_summary

client = VEXClient()
doc = client.get_vex_document("CVE-2024-1234")
print(format_summary(doc))

check = is_package_affected_by_cve(doc, "openssl")
print(check.matched, check.reason, check.products)
```

An identifier that is not well formed raises `InvalidIDError`, which is also a `ValueError`. A document that the server does not have raises `DocumentNotFoundError`. Other network, HTTP or parsing failures raise `FetchError`. All three derive from `VEXError`.

`vexlookup.vex` also provides `is_package_fixed_by_rhsa`, `get_affected_packages_by_document`, `get_vulnerability_status`, `get_affected_products`, `get_severity`, `format_rhsa_summary`, `format_vex_citation`, `format_rhsa_citation`, `generate_vex_url` and `generate_rhsa_url`.

The tool functions in `vexlookup.tools` return the same text as the server tools. They take a `DocumentStore`, which puts a `FileCache` in front of the client:

```python
from vexlookup.cache import FileCache
from vexlookup.tools import DocumentStore, list_affected_packages
from vexlookup.vex import VEXClient

store = DocumentStore(VEXClient(), FileCache())
print(list_affected_packages(store, "RHSA-2024:1234"))
```

`FileCache(directory, max_age)` defaults to the system temporary directory and 300 seconds. Through a `DocumentStore` or a tool function, every failure is raised as `ToolError`.

The document model lives in `vexlookup.csaf`. `parse_csaf` reads JSON text into a `CSAF` object, and `dump_csaf` writes it back. Only the fields this package uses are kept: the title, the category, the tracking ID and release date, and for each vulnerability its CVE, product status, threats and remediations.

## Running the tests

```
pip install "vexlookup[test]"
pytest
```