"""A session binds one channel to one protocol handler."""

from __future__ import annotations

import logging

import anyio

from bmi_health_mcp.exceptions import TransportClosed
from bmi_health_mcp.server.channel import CloseReason, SseChannel
from bmi_health_mcp.server.handler import ProtocolHandler

logger = logging.getLogger(__name__)


class ServerSession:
    def __init__(self, session_id: str, channel: SseChannel, handler: ProtocolHandler) -> None:
        self.session_id = session_id
        self.channel = channel
        self.handler = handler

    async def run(self) -> None:
        """Answer inbound messages one at a time, in arrival order.

        Ends when the channel closes. A failed push means the client can no
        longer be reached, so the session ends instead of retrying.
        """
        try:
            async for message in self.channel.incoming():
                logger.debug("Session %s received %s", self.session_id, message)
                response = await self.handler.handle_message(message)
                if response is not None:
                    await self.channel.push(response)
        except TransportClosed:
            logger.info("Session %s lost its transport", self.session_id)
        finally:
            with anyio.CancelScope(shield=True):
                await self.channel.aclose(CloseReason.CLOSED)

    def __repr__(self) -> str:
        return f"ServerSession({self.session_id!r}, {self.channel.state.value})"
