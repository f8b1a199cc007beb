"""Types for the initialize handshake and ping."""

from typing import Annotated, Literal

from pydantic import Field

from bmi_health_mcp.types.base import RequestBase, RequestParams, Result
from bmi_health_mcp.types.common import ClientCapabilities, Implementation, ServerCapabilities


class InitializeRequestParams(RequestParams):
    """Parameters for the initialize request."""

    protocol_version: Annotated[str, Field(alias="protocolVersion")]
    capabilities: ClientCapabilities
    client_info: Annotated[Implementation, Field(alias="clientInfo")]


class InitializeRequest(RequestBase[Literal["initialize"], InitializeRequestParams]):
    """Sent from client to server when first connecting."""

    method: Literal["initialize"] = "initialize"
    params: InitializeRequestParams


class InitializeResult(Result):
    """Server's response to an initialize request."""

    protocol_version: Annotated[str, Field(alias="protocolVersion")]
    capabilities: ServerCapabilities
    server_info: Annotated[Implementation, Field(alias="serverInfo")]
    instructions: str | None = None


# noinspection PyTypeChecker
class PingRequest(RequestBase[Literal["ping"], RequestParams | None]):
    """Liveness check issued by either side."""

    method: Literal["ping"] = "ping"
    params: RequestParams | None = None
