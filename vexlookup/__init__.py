"""Look up Red Hat VEX and CSAF advisory data for CVE and RHSA identifiers, with an MCP stdio server."""

__version__ = "0.1.0"