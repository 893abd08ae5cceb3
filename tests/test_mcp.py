import http.client
import io
import json
import threading

import pytest

from kubehelper.mcp import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PROTOCOL_VERSION,
    McpServer,
    Tool,
    ToolParameter,
    ToolResult,
)


def _echo(arguments):
    return ToolResult.text(arguments.get("word", ""))


def _boom(arguments):
    raise ValueError("exploded")


@pytest.fixture
def server():
    srv = McpServer("demo", "1.2.3")
    srv.add_tool(
        Tool("echo", "Echo a word", [ToolParameter("word", required=True, enum=("a", "b"))]),
        _echo,
    )
    srv.add_tool(Tool("boom", "Always fails"), _boom)
    return srv


def _request(method, params=None, msg_id=1):
    msg = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params is not None:
        msg["params"] = params
    return msg


def test_parameter_schema_includes_set_fields():
    param = ToolParameter("limit", type="number", description="how many", default=50)
    assert param.to_schema() == {"type": "number", "description": "how many", "default": 50}


def test_parameter_schema_keeps_empty_string_default():
    assert ToolParameter("namespace", default="").to_schema()["default"] == ""


def test_tool_dict_lists_required_parameters():
    tool = Tool("t", "d", [ToolParameter("x", required=True), ToolParameter("y")])
    data = tool.to_dict()
    assert data["inputSchema"]["required"] == ["x"]
    assert set(data["inputSchema"]["properties"]) == {"x", "y"}


def test_tool_dict_omits_required_when_none():
    assert "required" not in Tool("t", "d").to_dict()["inputSchema"]


def test_tool_result_dicts():
    assert ToolResult.text("hi").to_dict() == {"content": [{"type": "text", "text": "hi"}]}
    assert ToolResult.error("bad").to_dict()["isError"] is True


def test_initialize_reports_server_info(server):
    response = server.handle_message(_request("initialize", {}))
    result = response["result"]
    assert result["serverInfo"] == {"name": "demo", "version": "1.2.3"}
    assert result["protocolVersion"] == PROTOCOL_VERSION
    assert "tools" in result["capabilities"]


def test_ping_returns_empty_result(server):
    assert server.handle_message(_request("ping", msg_id=7)) == {"jsonrpc": "2.0", "id": 7, "result": {}}


def test_tools_list_in_registration_order(server):
    tools = server.handle_message(_request("tools/list"))["result"]["tools"]
    assert [t["name"] for t in tools] == ["echo", "boom"]


def test_tools_call_routes_arguments(server):
    response = server.handle_message(_request("tools/call", {"name": "echo", "arguments": {"word": "a"}}))
    assert response["result"]["content"][0]["text"] == "a"


def test_tools_call_unknown_tool(server):
    response = server.handle_message(_request("tools/call", {"name": "nope"}))
    assert response["error"]["code"] == INVALID_PARAMS


def test_handler_exception_becomes_internal_error(server):
    response = server.handle_message(_request("tools/call", {"name": "boom"}))
    assert response["error"] == {"code": INTERNAL_ERROR, "message": "exploded"}


def test_unknown_method(server):
    assert server.handle_message(_request("does/not/exist"))["error"]["code"] == METHOD_NOT_FOUND


def test_notification_gets_no_answer(server):
    assert server.handle_message({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_invalid_request(server):
    assert server.handle_message(["not", "an", "object"])["error"]["code"] == INVALID_REQUEST
    assert server.handle_message({"id": 1, "method": "ping"})["error"]["code"] == INVALID_REQUEST


def test_set_log_level(server):
    server.handle_message(_request("logging/setLevel", {"level": "debug"}))
    assert server.log_level == "debug"


def test_serve_stdio_answers_each_line(server):
    stdin = io.StringIO(
        json.dumps(_request("ping", msg_id=1))
        + "\n\n{broken\n"
        + json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"})
        + "\n"
        + json.dumps(_request("tools/call", {"name": "echo", "arguments": {"word": "b"}}, msg_id=2))
        + "\n"
    )
    stdout = io.StringIO()
    server.serve_stdio(stdin, stdout)
    lines = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert len(lines) == 3
    assert lines[0]["id"] == 1
    assert lines[1]["error"]["code"] == PARSE_ERROR
    assert lines[2]["result"]["content"][0]["text"] == "b"


def test_sse_round_trip(server):
    httpd = server._make_sse_server("127.0.0.1", 0, "http://127.0.0.1")
    port = httpd.server_address[1]
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        stream = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
        stream.request("GET", "/sse")
        resp = stream.getresponse()
        assert resp.status == 200
        assert resp.fp.readline() == b"event: endpoint\n"
        endpoint = resp.fp.readline().decode().strip().removeprefix("data: ")
        resp.fp.readline()
        path = endpoint.removeprefix("http://127.0.0.1")
        assert path.startswith("/message?sessionId=")

        post = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
        post.request("POST", path, body=json.dumps(_request("ping", msg_id=9)))
        assert post.getresponse().status == 202
        post.close()

        assert resp.fp.readline() == b"event: message\n"
        data = resp.fp.readline().decode().strip().removeprefix("data: ")
        assert json.loads(data) == {"jsonrpc": "2.0", "id": 9, "result": {}}

        bad = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
        bad.request("POST", "/message?sessionId=unknown", body="{}")
        assert bad.getresponse().status == 400
        bad.close()
        stream.close()
    finally:
        httpd.shutdown()
        httpd.server_close()