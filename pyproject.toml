[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vexlookup"
version = "0.1.0"
description = "Look up Red Hat VEX and CSAF security advisory data for CVE and RHSA identifiers, as a library or an MCP tool server on stdio"
requires-python = ">=3.10"
dependencies = [
    "requests",
]
keywords = ["vex", "csaf", "cve", "rhsa", "security", "advisory", "mcp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
vexlookup = "vexlookup.server:main"

[tool.hatch.build.targets.wheel]
packages = ["vexlookup"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
