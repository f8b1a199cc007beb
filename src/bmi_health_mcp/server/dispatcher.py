"""HTTP entry points for the SSE transport.

The client opens ``GET <sse_path>`` and keeps it open; the first event tells
it where to POST. Each ``POST <message_path>?sessionId=...`` carries one
JSON-RPC message and is acknowledged with ``202 Accepted``; the answer
arrives later as a ``message`` event on the stream.

```
Client                                        Server
  | GET /mcp  ------------------------------->  | create session
  | <-- event: endpoint                         |
  |     data: /mcp/messages?sessionId=<id>      |
  | POST /mcp/messages?sessionId=<id> ------->  | deliver
  | <-- 202 Accepted                            |
  | <-- event: message (JSON-RPC response)      |
```
"""

from __future__ import annotations

import logging

import anyio
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from bmi_health_mcp.exceptions import (
    MissingSessionId,
    RequestBodyTooLarge,
    SessionError,
    TransportClosed,
    UnknownSession,
)
from bmi_health_mcp.server.registry import SessionRegistry
from bmi_health_mcp.server.session import ServerSession
from bmi_health_mcp.settings import Settings
from bmi_health_mcp.transport_security import TransportSecurityGuard
from bmi_health_mcp.types import JSONRPCMessageAdapter

logger = logging.getLogger(__name__)

SESSION_ID_PARAM = "sessionId"


async def read_request_body(request: Request, max_body_bytes: int) -> bytes:
    """Read the body, giving up as soon as it exceeds ``max_body_bytes``."""
    content_length = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit() and int(content_length) > max_body_bytes:
        raise RequestBodyTooLarge(max_body_bytes)

    body = bytearray()
    async for chunk in request.stream():
        if len(body) + len(chunk) > max_body_bytes:
            raise RequestBodyTooLarge(max_body_bytes)
        body.extend(chunk)
    return bytes(body)


class SessionStream:
    """ASGI response that runs one session for as long as its stream is open."""

    def __init__(self, registry: SessionRegistry, session_id: str, message_path: str, ping_interval: int) -> None:
        self.registry = registry
        self.session_id = session_id
        self.message_path = message_path
        self.ping_interval = ping_interval

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            session = self.registry.lookup(self.session_id)
        except UnknownSession as e:
            # Shut down between create and stream start
            await PlainTextResponse(str(e), status_code=e.status_code)(scope, receive, send)
            return

        root_path = scope.get("root_path", "")
        message_uri = f"{root_path}{self.message_path}?{SESSION_ID_PARAM}={self.session_id}"

        try:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self.registry.reap, self.session_id)
                tg.start_soon(session.run)
                await session.channel.serve(
                    scope,
                    receive,
                    send,
                    message_uri=message_uri,
                    ping_interval=self.ping_interval,
                )
                tg.cancel_scope.cancel()
        finally:
            await self.registry.destroy(self.session_id)


class SessionDispatcher:
    """Routes stream and message requests to sessions in the registry."""

    def __init__(self, registry: SessionRegistry, settings: Settings) -> None:
        self.registry = registry
        self.settings = settings
        self.security = TransportSecurityGuard(settings.transport_security)

    async def handle_stream(self, request: Request) -> Response | SessionStream:
        error_response = await self.security.validate_request(request)
        if error_response is not None:
            return error_response

        try:
            session_id = await self.registry.create()
        except Exception:
            logger.exception("Failed to create session")
            return PlainTextResponse("Failed to establish SSE connection", status_code=500)

        logger.debug("Opening SSE stream for session %s", session_id)
        return SessionStream(
            self.registry,
            session_id,
            message_path=self.settings.message_path,
            ping_interval=self.settings.sse_ping_interval,
        )

    def _session_for(self, request: Request) -> ServerSession:
        session_id = request.query_params.get(SESSION_ID_PARAM)
        if not session_id:
            raise MissingSessionId(SESSION_ID_PARAM)
        return self.registry.lookup(session_id)

    async def handle_post_message(self, request: Request) -> Response:
        error_response = await self.security.validate_request(request, is_post=True)
        if error_response is not None:
            return error_response

        try:
            session = self._session_for(request)
            body = await read_request_body(request, self.settings.max_body_bytes)
        except SessionError as e:
            logger.warning("Rejected message: %s", e)
            return PlainTextResponse(str(e), status_code=e.status_code)

        try:
            message = JSONRPCMessageAdapter.validate_json(body)
        except ValidationError as e:
            logger.warning("Failed to parse message for session %s", session.session_id)
            session.channel.report_error(e)
            return PlainTextResponse("Could not parse message", status_code=400)

        try:
            await session.channel.deliver(message)
        except TransportClosed:
            logger.warning("Session %s closed before its message was delivered", session.session_id)
            return PlainTextResponse("Failed to process message", status_code=500)

        return PlainTextResponse("Accepted", status_code=202)
