"""Protocol handler: answers one session's JSON-RPC requests.

A handler owns no transport and no shared mutable state. It reads the
process-wide `CapabilityCatalog`, delegates tool calls to the computation
engine, and turns every outcome, including failures, into a JSON-RPC
response for the session to push back to its client.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from contextlib import AsyncExitStack
from datetime import datetime, timezone
from functools import partial
from typing import Any

import anyio
import anyio.to_thread
import jsonschema
from pydantic import BaseModel, ValidationError

from bmi_health_mcp.capabilities import SUGGESTED_FOLLOWUPS, CapabilityCatalog, ToolEntry
from bmi_health_mcp.exceptions import (
    InvalidArguments,
    ProtocolError,
    ToolExecutionFailed,
    ToolExecutionTimeout,
)
from bmi_health_mcp.metrics import compute_summary
from bmi_health_mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    LATEST_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    SUPPORTED_METHODS,
    SUPPORTED_PROTOCOL_VERSIONS,
    CallToolRequest,
    CallToolResult,
    ClientRequest,
    ClientRequestAdapter,
    EmptyResult,
    ErrorData,
    InitializeRequest,
    InitializeRequestParams,
    InitializeResult,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    ListResourcesRequest,
    ListResourcesResult,
    ListResourceTemplatesRequest,
    ListResourceTemplatesResult,
    ListToolsRequest,
    ListToolsResult,
    PingRequest,
    ReadResourceRequest,
    ReadResourceResult,
    TextResourceContents,
)
from bmi_health_mcp.utilities.logging import sanitize_arguments
from bmi_health_mcp.widget import WIDGET_MIME_TYPE

logger = logging.getLogger(__name__)

Engine = Callable[[Mapping[str, Any]], dict[str, Any] | Awaitable[dict[str, Any]]]
CleanupCallback = Callable[[], Awaitable[None]]

# Inputs echoed back next to the summary so the widget can prefill its form
ECHOED_INPUTS = ("height_cm", "weight_kg", "age_years", "gender", "activity_level")


class ProtocolHandler:
    """Per-session request handler.

    Args:
        catalog: the shared, read-only capability tables
        engine: computes the metric summary from validated arguments; either a
            plain function (run in a worker thread) or a coroutine function
        tool_timeout: seconds one computation may take, ``None`` for no bound
    """

    def __init__(
        self,
        catalog: CapabilityCatalog,
        engine: Engine = compute_summary,
        tool_timeout: float | None = None,
    ) -> None:
        self.catalog = catalog
        self.engine = engine
        self.tool_timeout = tool_timeout
        self._exit_stack = AsyncExitStack()
        self._closed = False

    # -- read-only operations -------------------------------------------------

    def list_capabilities(self) -> ListToolsResult:
        return ListToolsResult(tools=[entry.tool for entry in self.catalog.tools.values()])

    def list_resources(self) -> ListResourcesResult:
        return ListResourcesResult(resources=list(self.catalog.resources.values()))

    def list_resource_templates(self) -> ListResourceTemplatesResult:
        return ListResourceTemplatesResult(resource_templates=list(self.catalog.resource_templates))

    def read_resource(self, uri: str) -> ReadResourceResult:
        _, widget = self.catalog.get_resource(uri)
        return ReadResourceResult(
            contents=[
                TextResourceContents(
                    uri=widget.template_uri,
                    mime_type=WIDGET_MIME_TYPE,
                    text=widget.html,
                    meta=dict(self.catalog.tools[widget.id].presentation),
                )
            ]
        )

    def initialize(self, params: InitializeRequestParams) -> InitializeResult:
        if params.protocol_version in SUPPORTED_PROTOCOL_VERSIONS:
            version = params.protocol_version
        else:
            version = LATEST_PROTOCOL_VERSION
        logger.info(
            "Initialize from %s %s (protocol %s, negotiated %s)",
            params.client_info.name,
            params.client_info.version,
            params.protocol_version,
            version,
        )
        return InitializeResult(
            protocol_version=version,
            capabilities=self.catalog.capabilities,
            server_info=self.catalog.server_info,
        )

    def ping(self) -> EmptyResult:
        return EmptyResult()

    # -- tool invocation ------------------------------------------------------

    async def invoke_tool(self, name: str, arguments: Any) -> CallToolResult:
        """Validate, compute and wrap one tool call.

        Raises:
            UnknownTool: ``name`` is not in the catalog
            InvalidArguments: the arguments do not satisfy the input schema;
                the engine is never called in that case
            ToolExecutionTimeout: the engine exceeded ``tool_timeout``
            ToolExecutionFailed: the engine raised, or its result does not
                satisfy the output schema
        """
        entry = self.catalog.get_tool(name)
        if arguments is None:
            arguments = {}

        try:
            jsonschema.validate(instance=arguments, schema=entry.tool.input_schema)
        except jsonschema.ValidationError as e:
            raise InvalidArguments(name, e.message, list(e.absolute_path)) from e
        arguments = dict(arguments)

        summary = await self._run_engine(entry, arguments)

        structured: dict[str, Any] = {
            "ready": True,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        structured.update({key: arguments[key] for key in ECHOED_INPUTS if arguments.get(key) is not None})
        structured["summary"] = summary
        structured["suggested_followups"] = list(SUGGESTED_FOLLOWUPS)

        if entry.tool.output_schema is not None:
            try:
                jsonschema.validate(instance=structured, schema=entry.tool.output_schema)
            except jsonschema.ValidationError as e:
                logger.error("Output validation error for %s: %s", name, e.message)
                raise ToolExecutionFailed(name) from e

        logger.debug("Tool %s returned %s", name, summary)
        return CallToolResult(content=[], structured_content=structured, meta=self._result_meta(entry))

    async def _run_engine(self, entry: ToolEntry, arguments: dict[str, Any]) -> dict[str, Any]:
        name = entry.tool.name
        try:
            with anyio.fail_after(self.tool_timeout):
                if _is_async_callable(self.engine):
                    return await self.engine(arguments)
                # A timed-out worker thread is abandoned, not killed; the engine is pure
                return await anyio.to_thread.run_sync(partial(self.engine, arguments), abandon_on_cancel=True)
        except TimeoutError as e:
            logger.warning("Tool %s timed out after %ss", name, self.tool_timeout)
            raise ToolExecutionTimeout(name, self.tool_timeout or 0.0) from e
        except Exception as e:
            allowed = entry.tool.input_schema.get("properties", {}).keys()
            logger.exception("Tool %s failed with arguments %s", name, sanitize_arguments(arguments, allowed))
            raise ToolExecutionFailed(name) from e

    def _result_meta(self, entry: ToolEntry) -> dict[str, Any]:
        widget = entry.widget
        return {
            **entry.presentation,
            "openai.com/widget": {
                "type": "resource",
                "resource": {
                    "uri": widget.template_uri,
                    "mimeType": WIDGET_MIME_TYPE,
                    "text": widget.html,
                    "title": widget.title,
                },
            },
        }

    # -- message dispatch -----------------------------------------------------

    async def handle_message(self, message: JSONRPCMessage) -> JSONRPCResponse | None:
        """Answer one inbound message. Never raises.

        Notifications and client responses need no answer and yield ``None``.
        """
        if not isinstance(message, JSONRPCRequest):
            logger.debug("Ignoring %s", type(message).__name__)
            return None

        if message.method not in SUPPORTED_METHODS:
            return JSONRPCErrorResponse(
                id=message.id,
                error=ErrorData(code=METHOD_NOT_FOUND, message=f"Method not found: {message.method}"),
            )

        try:
            request = ClientRequestAdapter.validate_python(message.model_dump(by_alias=True))
        except ValidationError as e:
            return JSONRPCErrorResponse(
                id=message.id,
                error=ErrorData(
                    code=INVALID_PARAMS,
                    message=f"Invalid params for {message.method}",
                    data={"kind": "InvalidParams", "errors": e.errors(include_url=False, include_context=False)},
                ),
            )

        try:
            result = await self._dispatch(request)
        except ProtocolError as e:
            logger.info("Request %s (%s) failed: %s", message.id, message.method, e)
            return JSONRPCErrorResponse(id=message.id, error=e.error)
        except Exception:
            logger.exception("Handler error for %s", message.method)
            return JSONRPCErrorResponse(
                id=message.id,
                error=ErrorData(code=INTERNAL_ERROR, message="Internal error"),
            )

        return JSONRPCResultResponse(id=message.id, result=result.model_dump(by_alias=True, exclude_none=True))

    async def _dispatch(self, request: ClientRequest) -> BaseModel:
        match request:
            case InitializeRequest(params=params):
                return self.initialize(params)
            case PingRequest():
                return self.ping()
            case ListToolsRequest():
                return self.list_capabilities()
            case CallToolRequest(params=params):
                return await self.invoke_tool(params.name, params.arguments)
            case ListResourcesRequest():
                return self.list_resources()
            case ListResourceTemplatesRequest():
                return self.list_resource_templates()
            case ReadResourceRequest(params=params):
                return self.read_resource(params.uri)
            case _:
                raise TypeError(f"Unhandled request type: {type(request).__name__}")

    # -- release --------------------------------------------------------------

    def add_cleanup(self, callback: CleanupCallback) -> None:
        """Register an async callback run once by `aclose`, last added first."""
        self._exit_stack.push_async_callback(callback)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._exit_stack.aclose()


def _is_async_callable(obj: Any) -> bool:
    while isinstance(obj, partial):
        obj = obj.func

    return inspect.iscoroutinefunction(obj) or (
        callable(obj) and inspect.iscoroutinefunction(getattr(obj, "__call__", None))
    )
