"""BMI Health Calculator served over the MCP HTTP+SSE transport.

Clients open an SSE stream, learn a per-session message endpoint from the
first event, POST JSON-RPC requests to it and receive the responses on the
stream. The single tool computes BMI, ideal weight range, body fat and daily
calorie needs, and its results render in an embedded HTML widget.
"""

from .capabilities import CapabilityCatalog, build_catalog
from .exceptions import (
    HealthMCPError,
    InvalidArguments,
    MissingSessionId,
    ProtocolError,
    RequestBodyTooLarge,
    SessionError,
    ToolExecutionFailed,
    ToolExecutionTimeout,
    TransportClosed,
    UnknownResource,
    UnknownSession,
    UnknownTool,
    WidgetAssetsNotFound,
)
from .metrics import compute_summary
from .server.app import create_app
from .settings import Settings

__all__ = [
    "CapabilityCatalog",
    "HealthMCPError",
    "InvalidArguments",
    "MissingSessionId",
    "ProtocolError",
    "RequestBodyTooLarge",
    "SessionError",
    "Settings",
    "ToolExecutionFailed",
    "ToolExecutionTimeout",
    "TransportClosed",
    "UnknownResource",
    "UnknownSession",
    "UnknownTool",
    "WidgetAssetsNotFound",
    "build_catalog",
    "compute_summary",
    "create_app",
]
