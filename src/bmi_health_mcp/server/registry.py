"""Session registry: the one owner of every live session in the process."""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import uuid4

import anyio

from bmi_health_mcp.exceptions import UnknownSession
from bmi_health_mcp.server.channel import CloseReason, SseChannel
from bmi_health_mcp.server.handler import ProtocolHandler
from bmi_health_mcp.server.session import ServerSession

logger = logging.getLogger(__name__)

HandlerFactory = Callable[[], ProtocolHandler]
ChannelFactory = Callable[[str], SseChannel]


class SessionRegistry:
    """Maps session ids to live sessions.

    Ids are ``uuid4().hex`` strings: 122 random bits, so an id of a destroyed
    session does not come back in practice. Only ids of live sessions are
    checked for collisions.
    Creation and removal are serialized by a lock; lookups read the map
    directly.

    Args:
        handler_factory: builds a fresh protocol handler for each session
        channel_factory: builds the channel for a given session id
    """

    def __init__(self, handler_factory: HandlerFactory, channel_factory: ChannelFactory) -> None:
        self._handler_factory = handler_factory
        self._channel_factory = channel_factory
        self._sessions: dict[str, ServerSession] = {}
        self._lock = anyio.Lock()

    async def create(self) -> str:
        async with self._lock:
            session_id = uuid4().hex
            while session_id in self._sessions:
                session_id = uuid4().hex
            self._sessions[session_id] = ServerSession(
                session_id,
                self._channel_factory(session_id),
                self._handler_factory(),
            )
        logger.info("Created new session with ID: %s", session_id)
        return session_id

    def lookup(self, session_id: str) -> ServerSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise UnknownSession(session_id) from None

    async def destroy(self, session_id: str) -> None:
        """Remove a session and release its channel and handler. Safe to repeat."""
        with anyio.CancelScope(shield=True):
            async with self._lock:
                session = self._sessions.pop(session_id, None)
            if session is None:
                return
            await session.channel.aclose(CloseReason.CLOSED)
            await session.handler.aclose()
        logger.info("Destroyed session %s (%s)", session_id, session.channel.close_reason.value)

    async def reap(self, session_id: str) -> None:
        """Wait for the session's channel to close, then destroy the session."""
        try:
            session = self.lookup(session_id)
        except UnknownSession:
            return
        reason = await session.channel.wait_closed()
        logger.debug("Channel for session %s closed: %s", session_id, reason.value)
        await self.destroy(session_id)

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.destroy(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
