"""A small Model Context Protocol server speaking JSON-RPC over stdio or SSE."""

from __future__ import annotations

import json
import logging
import queue
import sys
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import IO, Any
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

_KEEPALIVE_SECONDS = 10.0


@dataclass
class ToolParameter:
    """One named argument of a tool, described as a JSON schema property."""

    name: str
    type: str = "string"
    description: str = ""
    required: bool = False
    enum: tuple[str, ...] = ()
    default: Any = None

    def to_schema(self) -> dict:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass
class Tool:
    """A callable tool offered to MCP clients."""

    name: str
    description: str = ""
    parameters: list[ToolParameter] = field(default_factory=list)

    def to_dict(self) -> dict:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.parameters},
        }
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return {"name": self.name, "description": self.description, "inputSchema": schema}


@dataclass
class ToolResult:
    """The text outcome of a tool call, optionally marked as an error."""

    content: str
    is_error: bool = False

    @classmethod
    def text(cls, text: str) -> ToolResult:
        return cls(content=text)

    @classmethod
    def error(cls, text: str) -> ToolResult:
        return cls(content=text, is_error=True)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"content": [{"type": "text", "text": self.content}]}
        if self.is_error:
            out["isError"] = True
        return out


Handler = Callable[[dict], ToolResult]


class _RpcError(Exception):
    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code


def _error(msg_id: Any, code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}


class McpServer:
    """Dispatches MCP requests to registered tools."""

    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        self.log_level = "info"
        self._tools: dict[str, tuple[Tool, Handler]] = {}

    @property
    def tools(self) -> list[Tool]:
        return [tool for tool, _ in self._tools.values()]

    def add_tool(self, tool: Tool, handler: Handler) -> None:
        self._tools[tool.name] = (tool, handler)

    def handle_message(self, message: Any) -> dict | None:
        """Answer one JSON-RPC message; notifications get no answer."""
        if not isinstance(message, dict):
            return _error(None, INVALID_REQUEST, "invalid request")
        msg_id = message.get("id")
        if message.get("jsonrpc") != "2.0" or not isinstance(message.get("method"), str):
            return _error(msg_id, INVALID_REQUEST, "invalid request")
        if "id" not in message:
            return None
        params = message.get("params")
        if params is None:
            params = {}
        try:
            if not isinstance(params, dict):
                raise _RpcError(INVALID_PARAMS, "params must be an object")
            result = self._dispatch(message["method"], params)
        except _RpcError as exc:
            return _error(msg_id, exc.code, str(exc))
        except Exception as exc:  # recover from failing handlers
            logger.debug("request %r failed: %s", message["method"], exc)
            return _error(msg_id, INTERNAL_ERROR, str(exc))
        return {"jsonrpc": "2.0", "id": msg_id, "result": result}

    def _dispatch(self, method: str, params: dict) -> dict:
        if method == "initialize":
            return {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {
                    "resources": {"subscribe": True, "listChanged": True},
                    "logging": {},
                    "tools": {},
                },
                "serverInfo": {"name": self.name, "version": self.version},
            }
        if method == "ping":
            return {}
        if method == "tools/list":
            return {"tools": [tool.to_dict() for tool in self.tools]}
        if method == "tools/call":
            return self._call_tool(params)
        if method == "resources/list":
            return {"resources": []}
        if method == "resources/templates/list":
            return {"resourceTemplates": []}
        if method == "logging/setLevel":
            level = params.get("level")
            if not isinstance(level, str):
                raise _RpcError(INVALID_PARAMS, "level must be a string")
            self.log_level = level
            return {}
        raise _RpcError(METHOD_NOT_FOUND, f"method not found: {method}")

    def _call_tool(self, params: dict) -> dict:
        name = params.get("name")
        entry = self._tools.get(name) if isinstance(name, str) else None
        if entry is None:
            raise _RpcError(INVALID_PARAMS, f"tool not found: {name}")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise _RpcError(INVALID_PARAMS, "arguments must be an object")
        _, handler = entry
        return handler(arguments).to_dict()

    def _handle_text(self, text: str) -> dict | None:
        try:
            message = json.loads(text)
        except ValueError as exc:
            return _error(None, PARSE_ERROR, f"parse error: {exc}")
        return self.handle_message(message)

    def serve_stdio(self, stdin: IO[str] | None = None, stdout: IO[str] | None = None) -> None:
        """Read newline-delimited JSON-RPC messages until the input ends."""
        stdin = stdin if stdin is not None else sys.stdin
        stdout = stdout if stdout is not None else sys.stdout
        for line in stdin:
            line = line.strip()
            if not line:
                continue
            response = self._handle_text(line)
            if response is not None:
                stdout.write(json.dumps(response, ensure_ascii=False) + "\n")
                stdout.flush()

    def _make_sse_server(self, host: str, port: int, base_url: str) -> ThreadingHTTPServer:
        sessions: dict[str, queue.Queue] = {}
        lock = threading.Lock()
        server = self
        base = base_url.rstrip("/")

        class _Handler(BaseHTTPRequestHandler):
            def log_message(self, fmt: str, *args: Any) -> None:
                logger.debug(fmt, *args)

            def _send_plain(self, status: int, text: str) -> None:
                body = text.encode()
                self.send_response(status)
                self.send_header("Content-Type", "text/plain; charset=utf-8")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def do_GET(self) -> None:
                if urlsplit(self.path).path != "/sse":
                    self._send_plain(404, "not found")
                    return
                session_id = uuid.uuid4().hex
                outbox: queue.Queue = queue.Queue()
                with lock:
                    sessions[session_id] = outbox
                try:
                    self.send_response(200)
                    self.send_header("Content-Type", "text/event-stream")
                    self.send_header("Cache-Control", "no-cache")
                    self.send_header("Connection", "keep-alive")
                    self.end_headers()
                    endpoint = f"{base}/message?sessionId={session_id}"
                    self.wfile.write(f"event: endpoint\ndata: {endpoint}\n\n".encode())
                    while True:
                        try:
                            payload = outbox.get(timeout=_KEEPALIVE_SECONDS)
                        except queue.Empty:
                            self.wfile.write(b": ping\n\n")
                            continue
                        self.wfile.write(f"event: message\ndata: {payload}\n\n".encode())
                except OSError:
                    pass
                finally:
                    with lock:
                        sessions.pop(session_id, None)

            def do_POST(self) -> None:
                parts = urlsplit(self.path)
                if parts.path != "/message":
                    self._send_plain(404, "not found")
                    return
                session_id = parse_qs(parts.query).get("sessionId", [""])[0]
                with lock:
                    outbox = sessions.get(session_id)
                if outbox is None:
                    self._send_plain(400, "Invalid session ID")
                    return
                length = int(self.headers.get("Content-Length") or 0)
                text = self.rfile.read(length).decode("utf-8", errors="replace")
                response = server._handle_text(text)
                if response is not None:
                    outbox.put(json.dumps(response, ensure_ascii=False))
                self._send_plain(202, "Accepted")

        httpd = ThreadingHTTPServer((host, port), _Handler)
        httpd.daemon_threads = True
        return httpd

    def serve_sse(self, host: str, port: int, base_url: str) -> None:
        """Serve MCP over server-sent events until interrupted."""
        httpd = self._make_sse_server(host, port, base_url)
        try:
            httpd.serve_forever()
        finally:
            httpd.server_close()