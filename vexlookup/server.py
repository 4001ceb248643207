"""A Model Context Protocol server on standard input and output exposing the lookup tools."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TextIO

from .tools import (
    DocumentStore,
    ToolError,
    check_package_affected,
    check_package_fixed,
    list_affected_packages,
    lookup_cve,
    lookup_rhsa,
)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "vexlookup"
SERVER_VERSION = "0.1.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


@dataclass(frozen=True)
class _Tool:
    description: str
    params: tuple[tuple[str, str], ...]
    handler: Callable[..., str]

    def schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                name: {"type": "string", "description": text} for name, text in self.params
            },
            "required": [name for name, _ in self.params],
        }


_TOOLS: dict[str, _Tool] = {
    "lookup_cve": _Tool(
        "Look up detailed Red Hat VEX document information for a CVE ID",
        (("cve", "The CVE ID to look up (e.g., CVE-2024-1234)"),),
        lookup_cve,
    ),
    "lookup_rhsa": _Tool(
        "Look up detailed Red Hat CSAF advisory information for an RHSA ID",
        (("rhsa", "The RHSA ID to look up (e.g., RHSA-2024:1234)"),),
        lookup_rhsa,
    ),
    "is_package_affected_by_cve": _Tool(
        "Check if a specific package is affected by a CVE",
        (
            ("cve", "The CVE ID to check"),
            ("package", "The package name to check if affected"),
        ),
        check_package_affected,
    ),
    "is_package_fixed_by_rhsa": _Tool(
        "Check if a specific package is fixed by an RHSA",
        (
            ("rhsa", "The RHSA ID to check"),
            ("package", "The package name to check if fixed"),
        ),
        check_package_fixed,
    ),
    "list_affected_packages": _Tool(
        "List all packages affected by a CVE or RHSA",
        (("id", "The CVE or RHSA ID to list affected packages for"),),
        list_affected_packages,
    ),
}


class _RPCError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class MCPServer:
    """Answers JSON-RPC requests, one JSON message per line."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.store = store if store is not None else DocumentStore()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

    def handle(self, message: Any) -> dict[str, Any] | None:
        """Answer one decoded message; return None for notifications."""
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            return _error(
                message.get("id") if isinstance(message, dict) else None,
                INVALID_REQUEST,
                "invalid request",
            )
        is_notification = "id" not in message
        request_id = message.get("id")
        method = message["method"]
        params = message.get("params") or {}
        try:
            if not isinstance(params, dict):
                raise _RPCError(INVALID_PARAMS, "params must be an object")
            result = self._dispatch(method, params)
        except _RPCError as exc:
            return None if is_notification else _error(request_id, exc.code, exc.message)
        if is_notification:
            return None
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    def _dispatch(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        if method == "initialize":
            requested = params.get("protocolVersion")
            return {
                "protocolVersion": requested if isinstance(requested, str) else PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            }
        if method == "ping" or method.startswith("notifications/"):
            return {}
        if method == "tools/list":
            return {
                "tools": [
                    {"name": name, "description": tool.description, "inputSchema": tool.schema()}
                    for name, tool in _TOOLS.items()
                ]
            }
        if method == "tools/call":
            return self._call_tool(params)
        raise _RPCError(METHOD_NOT_FOUND, f"method not found: {method}")

    def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        tool = _TOOLS.get(name) if isinstance(name, str) else None
        if tool is None:
            raise _RPCError(INVALID_PARAMS, f"unknown tool: {name}")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise _RPCError(INVALID_PARAMS, "arguments must be an object")
        values = []
        for param, _ in tool.params:
            value = arguments.get(param)
            if not isinstance(value, str):
                raise _RPCError(INVALID_PARAMS, f"missing or invalid argument: {param}")
            values.append(value)
        try:
            text = tool.handler(self.store, *values)
        except ToolError as exc:
            return {"content": [{"type": "text", "text": str(exc)}], "isError": True}
        return {"content": [{"type": "text", "text": text}]}

    def serve(self) -> None:
        """Read requests from stdin until it closes, writing each answer to stdout."""
        for line in self.stdin:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                response: Any = _error(None, PARSE_ERROR, "parse error")
            else:
                if isinstance(message, list):
                    response = [r for m in message if (r := self.handle(m)) is not None] or None
                else:
                    response = self.handle(message)
            if response is not None:
                self.stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
                self.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Run the server on standard input and output."""
    parser = argparse.ArgumentParser(
        prog="vexlookup",
        description="Serve Red Hat VEX and security advisory lookups over MCP on stdio.",
    )
    parser.parse_args(argv)
    MCPServer().serve()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())