"""Tagged union of every client request the protocol handler answers.

A raw `JSONRPCRequest` is narrowed into exactly one variant by its `method`
field, so the handler can dispatch with an exhaustive `match`.
"""

from typing import Annotated, Final, get_args

from pydantic import Field, TypeAdapter

from bmi_health_mcp.types.base import RequestMethod
from bmi_health_mcp.types.initialize import InitializeRequest, PingRequest
from bmi_health_mcp.types.resources import ListResourcesRequest, ListResourceTemplatesRequest, ReadResourceRequest
from bmi_health_mcp.types.tools import CallToolRequest, ListToolsRequest

ClientRequest = Annotated[
    InitializeRequest
    | PingRequest
    | ListToolsRequest
    | CallToolRequest
    | ListResourcesRequest
    | ListResourceTemplatesRequest
    | ReadResourceRequest,
    Field(discriminator="method"),
]

ClientRequestAdapter: TypeAdapter[ClientRequest] = TypeAdapter(ClientRequest)

SUPPORTED_METHODS: Final[frozenset[str]] = frozenset(get_args(RequestMethod))
