"""Types for tool listing and invocation."""

from typing import Annotated, Any, Literal

from pydantic import Field

from bmi_health_mcp.types.base import MCPModel, RequestBase, RequestParams, Result
from bmi_health_mcp.types.content import ContentBlock
from bmi_health_mcp.types.resources import PaginatedRequestParams


class ToolAnnotations(MCPModel):
    """Additional properties describing a Tool to clients."""

    destructive_hint: Annotated[bool | None, Field(alias="destructiveHint")] = None
    idempotent_hint: Annotated[bool | None, Field(alias="idempotentHint")] = None
    open_world_hint: Annotated[bool | None, Field(alias="openWorldHint")] = None
    read_only_hint: Annotated[bool | None, Field(alias="readOnlyHint")] = None
    title: str | None = None


class Tool(MCPModel):
    """Definition of a tool the server provides."""

    name: str
    input_schema: Annotated[dict[str, Any], Field(alias="inputSchema")]

    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None
    annotations: ToolAnnotations | None = None
    description: str | None = None
    output_schema: Annotated[dict[str, Any] | None, Field(alias="outputSchema")] = None
    security_schemes: Annotated[list[dict[str, Any]] | None, Field(alias="securitySchemes")] = None
    title: str | None = None


# noinspection PyTypeChecker
class ListToolsRequest(RequestBase[Literal["tools/list"], PaginatedRequestParams | None]):
    """Request to list available tools."""

    method: Literal["tools/list"] = "tools/list"
    params: PaginatedRequestParams | None = None


class ListToolsResult(Result):
    """Server's response to a tools/list request."""

    tools: list[Tool]
    next_cursor: Annotated[str | None, Field(alias="nextCursor")] = None


class CallToolRequestParams(RequestParams):
    """Parameters for tools/call request."""

    name: str
    arguments: Any = None


class CallToolRequest(RequestBase[Literal["tools/call"], CallToolRequestParams]):
    """Request to call a tool."""

    method: Literal["tools/call"] = "tools/call"


class CallToolResult(Result):
    """Server's response to a tools/call request."""

    content: list[ContentBlock]
    structured_content: Annotated[dict[str, Any] | None, Field(alias="structuredContent")] = None
    is_error: Annotated[bool, Field(alias="isError")] = False
