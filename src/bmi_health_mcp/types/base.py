"""Base models shared by every MCP request and result type."""

from typing import Annotated, Any, Final, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from bmi_health_mcp.types.json_rpc import JSONRPCBase, RequestId

LATEST_PROTOCOL_VERSION: Final[str] = "2025-06-18"

SUPPORTED_PROTOCOL_VERSIONS: Final[tuple[str, ...]] = (
    "2024-11-05",
    "2025-03-26",
    LATEST_PROTOCOL_VERSION,
)

ProgressToken = str | int


class MCPModel(BaseModel):
    """Base class for all MCP domain types. Allows extra fields for forward compatibility."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RequestMeta(MCPModel):
    """Metadata for MCP requests."""

    progress_token: Annotated[ProgressToken | None, Field(alias="progressToken")] = None


class RequestParams(MCPModel):
    """Base class for MCP request parameters with _meta support."""

    meta: Annotated[RequestMeta | None, Field(alias="_meta")] = None


class Result(MCPModel):
    """Base class for MCP results with _meta support."""

    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


class EmptyResult(Result):
    """A result carrying nothing but optional metadata (ping)."""


MethodT = TypeVar("MethodT", bound=str)
ParamsT = TypeVar("ParamsT", bound=RequestParams | None)


class RequestBase(JSONRPCBase, Generic[MethodT, ParamsT]):
    """A typed client request; `method` is the union discriminator."""

    id: RequestId
    method: MethodT
    params: ParamsT


# Every request kind the protocol handler answers
RequestMethod = Literal[
    "initialize",
    "ping",
    "tools/list",
    "tools/call",
    "resources/list",
    "resources/templates/list",
    "resources/read",
]
