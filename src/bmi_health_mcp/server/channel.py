"""SSE channel: the per-session pipe between HTTP and the protocol handler.

Two memory object streams carry traffic. Inbound messages arrive through
`deliver` (called by the POST endpoint) and are read by the session loop via
`incoming`. Outbound responses are queued by `push` and written to the open
``text/event-stream`` response by `serve`, in the order they were pushed.

Closing is signalled through an explicit event carrying one `CloseReason`.
Whoever needs to know that the channel is gone awaits `wait_closed`.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import AsyncIterator
from enum import Enum

import anyio
from sse_starlette.sse import EventSourceResponse, ServerSentEvent
from starlette.types import Receive, Scope, Send

from bmi_health_mcp.exceptions import TransportClosed
from bmi_health_mcp.types import JSONRPCMessage

logger = logging.getLogger(__name__)

MAX_RECORDED_ERRORS = 32


class ConnectionState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class CloseReason(str, Enum):
    DISCONNECTED = "disconnected"
    """The client went away or the response finished."""

    CLOSED = "closed"
    """The server closed the channel."""

    ERROR = "error"
    """Writing the stream failed."""


class SseChannel:
    """One session's transport.

    Args:
        session_id: the identifier advertised in the endpoint event
        buffer_size: messages each direction may queue before senders wait
    """

    def __init__(self, session_id: str, buffer_size: int = 16) -> None:
        self.session_id = session_id
        self._inbound_writer, self._inbound_reader = anyio.create_memory_object_stream[JSONRPCMessage](buffer_size)
        self._outbound_writer, self._outbound_reader = anyio.create_memory_object_stream[JSONRPCMessage](buffer_size)
        self._closed = anyio.Event()
        self._close_reason: CloseReason | None = None
        self.errors: deque[Exception] = deque(maxlen=MAX_RECORDED_ERRORS)

    @property
    def state(self) -> ConnectionState:
        return ConnectionState.CLOSED if self._close_reason is not None else ConnectionState.OPEN

    @property
    def close_reason(self) -> CloseReason | None:
        return self._close_reason

    async def push(self, message: JSONRPCMessage) -> None:
        """Queue a message for the SSE stream.

        Raises:
            TransportClosed: the channel is closed; the message is dropped
        """
        if self._close_reason is not None:
            raise TransportClosed(self.session_id)
        try:
            await self._outbound_writer.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise TransportClosed(self.session_id) from e

    async def deliver(self, message: JSONRPCMessage) -> None:
        """Hand a message received over HTTP to the session loop."""
        if self._close_reason is not None:
            raise TransportClosed(self.session_id)
        try:
            await self._inbound_writer.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise TransportClosed(self.session_id) from e

    async def incoming(self) -> AsyncIterator[JSONRPCMessage]:
        """Yield inbound messages in arrival order until the channel closes."""
        try:
            async for message in self._inbound_reader:
                yield message
        except anyio.ClosedResourceError:
            return

    async def _sse_events(self, message_uri: str) -> AsyncIterator[ServerSentEvent]:
        yield ServerSentEvent(event="endpoint", data=message_uri)
        try:
            async for message in self._outbound_reader:
                logger.debug("Sending message via SSE on %s: %s", self.session_id, message)
                yield ServerSentEvent(event="message", data=message.model_dump_json(by_alias=True, exclude_none=True))
        except anyio.ClosedResourceError:
            return

    async def serve(self, scope: Scope, receive: Receive, send: Send, *, message_uri: str, ping_interval: int) -> None:
        """Stream this channel as a ``text/event-stream`` response.

        Returns once the client disconnects or the channel is closed. A write
        failure is recorded, not raised. Either way the channel is closed on
        return.
        """
        response = EventSourceResponse(self._sse_events(message_uri), ping=ping_interval)
        reason = CloseReason.DISCONNECTED
        try:
            await response(scope, receive, send)
        except Exception as e:
            self.report_error(e)
            reason = CloseReason.ERROR
        finally:
            await self.aclose(reason)

    def report_error(self, exc: Exception) -> None:
        """Record a fault that does not by itself end the channel."""
        self.errors.append(exc)
        logger.warning("Transport error on session %s: %s", self.session_id, exc)

    async def aclose(self, reason: CloseReason = CloseReason.CLOSED) -> None:
        """Close both directions. Only the first call's reason is kept."""
        if self._close_reason is not None:
            return
        self._close_reason = reason
        # Writers first so readers drain and stop, then readers to wake blocked senders
        self._outbound_writer.close()
        self._inbound_writer.close()
        self._outbound_reader.close()
        self._inbound_reader.close()
        self._closed.set()
        logger.debug("Channel %s closed (%s)", self.session_id, reason.value)

    async def wait_closed(self) -> CloseReason:
        await self._closed.wait()
        assert self._close_reason is not None
        return self._close_reason
