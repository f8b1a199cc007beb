from bmi_health_mcp.types.base import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    EmptyResult,
    MCPModel,
    RequestParams,
    Result,
)
from bmi_health_mcp.types.common import ClientCapabilities, Implementation, ServerCapabilities
from bmi_health_mcp.types.content import ContentBlock, EmbeddedResource, TextContent
from bmi_health_mcp.types.initialize import InitializeRequest, InitializeRequestParams, InitializeResult, PingRequest
from bmi_health_mcp.types.json_rpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    REQUEST_TIMEOUT,
    RESOURCE_NOT_FOUND,
    ErrorData,
    JSONRPCErrorResponse,
    JSONRPCMessage,
    JSONRPCMessageAdapter,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCResultResponse,
    RequestId,
)
from bmi_health_mcp.types.requests import SUPPORTED_METHODS, ClientRequest, ClientRequestAdapter
from bmi_health_mcp.types.resources import (
    ListResourcesRequest,
    ListResourcesResult,
    ListResourceTemplatesRequest,
    ListResourceTemplatesResult,
    ReadResourceRequest,
    ReadResourceRequestParams,
    ReadResourceResult,
    Resource,
    ResourceTemplate,
    TextResourceContents,
)
from bmi_health_mcp.types.tools import (
    CallToolRequest,
    CallToolRequestParams,
    CallToolResult,
    ListToolsRequest,
    ListToolsResult,
    Tool,
    ToolAnnotations,
)

__all__ = [
    "LATEST_PROTOCOL_VERSION",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "SUPPORTED_METHODS",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "REQUEST_TIMEOUT",
    "RESOURCE_NOT_FOUND",
    "CallToolRequest",
    "CallToolRequestParams",
    "CallToolResult",
    "ClientCapabilities",
    "ClientRequest",
    "ClientRequestAdapter",
    "ContentBlock",
    "EmbeddedResource",
    "EmptyResult",
    "ErrorData",
    "Implementation",
    "InitializeRequest",
    "InitializeRequestParams",
    "InitializeResult",
    "JSONRPCErrorResponse",
    "JSONRPCMessage",
    "JSONRPCMessageAdapter",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCResultResponse",
    "ListResourcesRequest",
    "ListResourcesResult",
    "ListResourceTemplatesRequest",
    "ListResourceTemplatesResult",
    "ListToolsRequest",
    "ListToolsResult",
    "MCPModel",
    "PingRequest",
    "ReadResourceRequest",
    "ReadResourceRequestParams",
    "ReadResourceResult",
    "RequestId",
    "RequestParams",
    "Resource",
    "ResourceTemplate",
    "Result",
    "ServerCapabilities",
    "TextContent",
    "TextResourceContents",
    "Tool",
    "ToolAnnotations",
]
