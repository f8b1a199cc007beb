"""Starlette application wiring."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

from bmi_health_mcp.capabilities import CapabilityCatalog, build_catalog
from bmi_health_mcp.metrics import compute_summary
from bmi_health_mcp.server.channel import SseChannel
from bmi_health_mcp.server.dispatcher import SessionDispatcher
from bmi_health_mcp.server.handler import Engine, ProtocolHandler
from bmi_health_mcp.server.registry import SessionRegistry
from bmi_health_mcp.settings import Settings

logger = logging.getLogger(__name__)


async def health(request: Request) -> Response:
    return PlainTextResponse("OK")


def create_app(
    settings: Settings | None = None,
    engine: Engine | None = None,
    catalog: CapabilityCatalog | None = None,
) -> Starlette:
    """Build the ASGI application.

    The catalog is built here, once, so a missing widget build fails at
    startup rather than on the first request.
    """
    settings = settings or Settings()
    catalog = catalog or build_catalog(settings)

    registry = SessionRegistry(
        handler_factory=partial(
            ProtocolHandler,
            catalog,
            engine or compute_summary,
            settings.tool_timeout_seconds,
        ),
        channel_factory=partial(SseChannel, buffer_size=settings.channel_buffer_size),
    )
    dispatcher = SessionDispatcher(registry, settings)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info("BMI health calculator ready with %d tool(s)", len(catalog.tools))
        try:
            yield
        finally:
            logger.info("Shutting down %d open session(s)", len(registry))
            await registry.close_all()

    app = Starlette(
        debug=settings.debug,
        routes=[
            Route(settings.sse_path, endpoint=dispatcher.handle_stream, methods=["GET"]),
            Route(settings.message_path, endpoint=dispatcher.handle_post_message, methods=["POST"]),
            Route(settings.health_path, endpoint=health, methods=["GET"]),
        ],
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=settings.cors_allow_origins,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["content-type"],
            )
        ],
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.registry = registry
    return app
