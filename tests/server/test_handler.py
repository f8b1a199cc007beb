"""Protocol handler behaviour, exercised without any transport."""

import threading
from collections.abc import Mapping
from functools import partial
from typing import Any

import anyio
import pytest

from bmi_health_mcp.capabilities import CapabilityCatalog
from bmi_health_mcp.exceptions import (
    InvalidArguments,
    ToolExecutionFailed,
    ToolExecutionTimeout,
    UnknownResource,
    UnknownTool,
)
from bmi_health_mcp.metrics import compute_summary
from bmi_health_mcp.server.handler import ProtocolHandler
from bmi_health_mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    LATEST_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    REQUEST_TIMEOUT,
    RESOURCE_NOT_FOUND,
    JSONRPCErrorResponse,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResultResponse,
)

pytestmark = pytest.mark.anyio

TOOL = "bmi-health-calculator"


class SpyEngine:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def __call__(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(dict(arguments))
        return compute_summary(arguments)


def request(method: str, params: dict[str, Any] | None = None, id: int = 1) -> JSONRPCRequest:
    return JSONRPCRequest(id=id, method=method, params=params)


async def test_list_capabilities_names_match_invoke(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    tools = handler.list_capabilities().tools

    assert [tool.name for tool in tools] == [TOOL]
    tool = tools[0]
    assert tool.input_schema["additionalProperties"] is False
    assert tool.annotations is not None and tool.annotations.read_only_hint is True
    assert tool.security_schemes == [{"type": "noauth"}]
    for listed in tools:
        result = await handler.invoke_tool(listed.name, {})
        assert result.structured_content is not None


async def test_invoke_tool_computes_summary(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    result = await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75, "gender": "male"})

    structured = result.structured_content
    assert structured is not None
    assert structured["ready"] is True
    assert structured["height_cm"] == 180
    assert structured["gender"] == "male"
    assert "age_years" not in structured
    assert structured["summary"]["bmi"] == 23.1
    assert structured["summary"]["bmi_category"] == "Normal weight"
    assert len(structured["suggested_followups"]) == 4
    assert result.content == []
    assert result.is_error is False


async def test_invoke_tool_attaches_widget_metadata(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)
    entry = catalog.get_tool(TOOL)

    result = await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75})

    assert result.meta is not None
    assert result.meta["openai/outputTemplate"] == entry.widget.template_uri
    embedded = result.meta["openai.com/widget"]
    assert embedded["type"] == "resource"
    assert embedded["resource"]["mimeType"] == "text/html+skybridge"
    assert embedded["resource"]["text"] == entry.widget.html


@pytest.mark.parametrize(
    "arguments",
    [
        {"height_cm": "tall"},
        {"height_cm": 180, "weight_kg": 75, "shoe_size": 44},
        {"gender": "other"},
        {"activity_level": "couch"},
    ],
)
async def test_invalid_arguments_never_reach_engine(catalog: CapabilityCatalog, arguments: dict[str, Any]):
    engine = SpyEngine()
    handler = ProtocolHandler(catalog, engine=engine)

    with pytest.raises(InvalidArguments) as exc_info:
        await handler.invoke_tool(TOOL, arguments)

    assert engine.calls == []
    assert exc_info.value.error.code == INVALID_PARAMS
    assert exc_info.value.error.data["kind"] == "InvalidArguments"


async def test_valid_arguments_reach_engine_once(catalog: CapabilityCatalog):
    engine = SpyEngine()
    handler = ProtocolHandler(catalog, engine=engine)

    await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75})

    assert engine.calls == [{"height_cm": 180, "weight_kg": 75}]


async def test_unknown_tool(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    with pytest.raises(UnknownTool):
        await handler.invoke_tool("no-such-tool", {})

    response = await handler.handle_message(request("tools/call", {"name": "no-such-tool"}))
    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == INVALID_PARAMS
    assert response.error.data["kind"] == "UnknownTool"


async def test_engine_failure_is_request_level(catalog: CapabilityCatalog):
    fail = True

    def flaky(arguments: Mapping[str, Any]) -> dict[str, Any]:
        if fail:
            raise RuntimeError("secret internals")
        return compute_summary(arguments)

    handler = ProtocolHandler(catalog, engine=flaky)

    with pytest.raises(ToolExecutionFailed) as exc_info:
        await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75})
    assert "secret" not in str(exc_info.value)

    fail = False
    result = await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75})
    assert result.structured_content is not None


class AsyncEngine:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        self.calls += 1
        await anyio.sleep(0)
        return compute_summary(arguments)


async def scaled_engine(arguments: Mapping[str, Any], scale: float) -> dict[str, Any]:
    return compute_summary({**arguments, "weight_kg": arguments["weight_kg"] * scale})


@pytest.mark.parametrize(
    "engine",
    [AsyncEngine(), partial(scaled_engine, scale=1.0)],
    ids=["async-call-method", "partial-coroutine-function"],
)
async def test_async_callable_engines_are_awaited(catalog: CapabilityCatalog, engine: Any):
    handler = ProtocolHandler(catalog, engine=engine)

    result = await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75})

    assert result.structured_content is not None
    assert result.structured_content["summary"]["bmi"] == 23.1
    if isinstance(engine, AsyncEngine):
        assert engine.calls == 1


@pytest.mark.parametrize("arguments", [[1], "height_cm=180", 180])
async def test_non_object_arguments_are_invalid_arguments(catalog: CapabilityCatalog, arguments: Any):
    engine = SpyEngine()
    handler = ProtocolHandler(catalog, engine=engine)

    response = await handler.handle_message(request("tools/call", {"name": TOOL, "arguments": arguments}))

    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == INVALID_PARAMS
    assert response.error.data["kind"] == "InvalidArguments"
    assert engine.calls == []


async def test_schema_valid_extremes_return_summary(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    response = await handler.handle_message(
        request(
            "tools/call",
            {
                "name": TOOL,
                "arguments": {"height_cm": -180, "weight_kg": 75, "waist_cm": 90, "neck_cm": 38, "gender": "male"},
            },
        )
    )
    assert isinstance(response, JSONRPCResultResponse)
    assert response.result["structuredContent"]["summary"]["body_fat_pct"] is None

    response = await handler.handle_message(
        request("tools/call", {"name": TOOL, "arguments": {"height_cm": 180, "weight_kg": 1e308}}, id=2)
    )
    assert isinstance(response, JSONRPCResultResponse)
    summary = response.result["structuredContent"]["summary"]
    assert summary["bmi"] is None
    assert summary["tdee_calories"] is None
    assert summary["bmi_category"] == "Obese"


async def test_engine_returning_wrong_shape_fails_output_validation(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog, engine=lambda arguments: {"bmi": "twenty"})

    with pytest.raises(ToolExecutionFailed):
        await handler.invoke_tool(TOOL, {"height_cm": 180, "weight_kg": 75})


async def test_slow_engine_times_out_and_handler_recovers(catalog: CapabilityCatalog):
    slow = True

    async def engine(arguments: Mapping[str, Any]) -> dict[str, Any]:
        if slow:
            await anyio.sleep(5)
        return compute_summary(arguments)

    handler = ProtocolHandler(catalog, engine=engine, tool_timeout=0.05)

    response = await handler.handle_message(request("tools/call", {"name": TOOL, "arguments": {}}))
    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == REQUEST_TIMEOUT
    assert response.error.data["kind"] == "ToolExecutionTimeout"

    slow = False
    response = await handler.handle_message(request("tools/call", {"name": TOOL, "arguments": {}}, id=2))
    assert isinstance(response, JSONRPCResultResponse)
    assert response.id == 2


async def test_sync_engine_timeout(catalog: CapabilityCatalog):
    release = threading.Event()

    def blocking(arguments: Mapping[str, Any]) -> dict[str, Any]:
        release.wait(5)
        return compute_summary(arguments)

    handler = ProtocolHandler(catalog, engine=blocking, tool_timeout=0.05)

    with pytest.raises(ToolExecutionTimeout):
        await handler.invoke_tool(TOOL, {})
    release.set()


async def test_handle_message_ignores_notifications_and_responses(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    assert await handler.handle_message(JSONRPCNotification(method="notifications/initialized")) is None
    assert await handler.handle_message(JSONRPCResultResponse(id=1, result={})) is None


async def test_handle_message_unknown_method(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    response = await handler.handle_message(request("prompts/list"))

    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == METHOD_NOT_FOUND


async def test_handle_message_malformed_params(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)

    response = await handler.handle_message(request("resources/read", {"url": "oops"}))

    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == INVALID_PARAMS


@pytest.mark.parametrize(
    ("client_version", "negotiated"),
    [("2024-11-05", "2024-11-05"), ("2025-03-26", "2025-03-26"), ("1999-01-01", LATEST_PROTOCOL_VERSION)],
)
async def test_initialize_negotiates_version(catalog: CapabilityCatalog, client_version: str, negotiated: str):
    handler = ProtocolHandler(catalog)
    params = {"protocolVersion": client_version, "capabilities": {}, "clientInfo": {"name": "test", "version": "1"}}

    response = await handler.handle_message(request("initialize", params))

    assert isinstance(response, JSONRPCResultResponse)
    assert response.result["protocolVersion"] == negotiated
    assert response.result["serverInfo"]["name"] == "bmi-health-calculator"
    assert response.result["capabilities"] == {"resources": {}, "tools": {}}


async def test_ping(catalog: CapabilityCatalog):
    response = await ProtocolHandler(catalog).handle_message(request("ping"))
    assert isinstance(response, JSONRPCResultResponse)
    assert response.result == {}


async def test_resources(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)
    uri = catalog.get_tool(TOOL).widget.template_uri

    listed = await handler.handle_message(request("resources/list"))
    assert isinstance(listed, JSONRPCResultResponse)
    assert [resource["uri"] for resource in listed.result["resources"]] == [uri]

    templates = await handler.handle_message(request("resources/templates/list"))
    assert isinstance(templates, JSONRPCResultResponse)
    assert templates.result["resourceTemplates"][0]["uriTemplate"] == uri

    read = await handler.handle_message(request("resources/read", {"uri": uri}))
    assert isinstance(read, JSONRPCResultResponse)
    contents = read.result["contents"][0]
    assert contents["mimeType"] == "text/html+skybridge"
    assert contents["text"].startswith("<!doctype html>")
    assert contents["_meta"]["openai/widgetAccessible"] is True

    with pytest.raises(UnknownResource):
        handler.read_resource("ui://widget/missing.html")
    missing = await handler.handle_message(request("resources/read", {"uri": "ui://widget/missing.html"}))
    assert isinstance(missing, JSONRPCErrorResponse)
    assert missing.error.code == RESOURCE_NOT_FOUND


async def test_unexpected_error_becomes_internal_error(catalog: CapabilityCatalog, monkeypatch: pytest.MonkeyPatch):
    handler = ProtocolHandler(catalog)

    def broken() -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(handler, "list_capabilities", broken)

    response = await handler.handle_message(request("tools/list"))

    assert isinstance(response, JSONRPCErrorResponse)
    assert response.error.code == INTERNAL_ERROR
    assert response.error.message == "Internal error"


async def test_aclose_runs_cleanups_once(catalog: CapabilityCatalog):
    handler = ProtocolHandler(catalog)
    calls: list[str] = []

    async def first() -> None:
        calls.append("first")

    async def second() -> None:
        calls.append("second")

    handler.add_cleanup(first)
    handler.add_cleanup(second)

    await handler.aclose()
    await handler.aclose()

    assert calls == ["second", "first"]
