"""Error taxonomy for the health calculator server.

Three families share the `HealthMCPError` root:

- `ProtocolError` subclasses are request-level and recoverable. The protocol
  handler turns them into JSON-RPC error responses; the session stays usable.
- `SessionError` subclasses are request-level at the HTTP boundary. The
  dispatcher turns them into a status code for that one request.
- `TransportClosed` is session-terminal. Whoever observes it ends the session.
"""

from typing import Any, ClassVar

from bmi_health_mcp.types.json_rpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    REQUEST_TIMEOUT,
    RESOURCE_NOT_FOUND,
    ErrorData,
)


class HealthMCPError(Exception):
    """Base error for the health calculator server."""


class ProtocolError(HealthMCPError):
    """A request-level failure reported to the peer as a JSON-RPC error.

    Attributes:
        error: The ErrorData sent to the client. `data.kind` names the
               exception class so clients can tell failures apart without
               parsing messages.
    """

    code: ClassVar[int] = INTERNAL_ERROR
    error: ErrorData

    def __init__(self, message: str, **data: Any):
        super().__init__(message)
        self.error = ErrorData(code=self.code, message=message, data={"kind": type(self).__name__, **data})


class UnknownTool(ProtocolError):
    """The requested tool name is not in the tool table."""

    code = INVALID_PARAMS

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}", name=name)
        self.name = name


class UnknownResource(ProtocolError):
    """The requested resource URI is not registered."""

    code = RESOURCE_NOT_FOUND

    def __init__(self, uri: str):
        super().__init__(f"Unknown resource: {uri}", uri=uri)
        self.uri = uri


class InvalidArguments(ProtocolError):
    """Tool arguments failed validation against the declared input schema."""

    code = INVALID_PARAMS

    def __init__(self, tool: str, diagnostic: str, path: list[str | int] | None = None):
        super().__init__(f"Input validation error: {diagnostic}", tool=tool, diagnostic=diagnostic, path=path or [])
        self.tool = tool
        self.diagnostic = diagnostic


class ToolExecutionFailed(ProtocolError):
    """The computation engine raised. The peer only sees a generic message."""

    code = INTERNAL_ERROR

    def __init__(self, tool: str, message: str = "Tool execution failed"):
        super().__init__(message, tool=tool)
        self.tool = tool


class ToolExecutionTimeout(ToolExecutionFailed):
    """The computation engine did not answer within the configured bound."""

    code = REQUEST_TIMEOUT

    def __init__(self, tool: str, timeout: float):
        super().__init__(tool, f"Tool execution timed out after {timeout:g}s")
        self.error.data["timeout"] = timeout
        self.timeout = timeout


class SessionError(HealthMCPError):
    """A message-endpoint request that cannot be routed to a session."""

    status_code: ClassVar[int] = 400


class MissingSessionId(SessionError):
    """The POST carried no session identifier."""

    status_code = 400

    def __init__(self, param: str = "sessionId"):
        super().__init__(f"Missing {param} query parameter")


class UnknownSession(SessionError):
    """No live session has this identifier (never created, or already destroyed)."""

    status_code = 404

    def __init__(self, session_id: str):
        super().__init__("Unknown session")
        self.session_id = session_id


class RequestBodyTooLarge(SessionError):
    """The POST body exceeded the configured cap."""

    status_code = 413

    def __init__(self, max_body_bytes: int):
        super().__init__(f"Request body exceeds max_body_bytes={max_body_bytes}")
        self.max_body_bytes = max_body_bytes


class TransportClosed(HealthMCPError):
    """The session's stream is gone; nothing more can be pushed or delivered."""

    def __init__(self, session_id: str):
        super().__init__(f"Transport for session {session_id} is closed")
        self.session_id = session_id


class WidgetAssetsNotFound(HealthMCPError):
    """The widget HTML has not been built into the assets directory."""
