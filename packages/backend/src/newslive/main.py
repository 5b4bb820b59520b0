"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown: the two Redis clients and
the realtime gateway's channel subscription. Middleware, CORS, error
handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newslive import __version__
from newslive.api import api_router
from newslive.api.errors import register_exception_handlers
from newslive.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Unlike optional real-time extras, Redis is the database
    here, so a failed connection aborts startup.
    """
    from newslive.realtime.gateway import RealtimeGateway
    from newslive.store.connection import close_redis, create_redis

    logger.info(
        "newslive.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    app.state.redis = await create_redis(settings.redis_url)
    # A subscribed connection can't issue regular commands
    app.state.subscriber = await create_redis(settings.redis_url)
    logger.info("newslive.redis_connected", url=settings.redis_url)

    app.state.gateway = RealtimeGateway(app.state.subscriber, settings.news_channel)
    await app.state.gateway.start()

    try:
        yield
    finally:
        logger.info("newslive.shutdown")
        try:
            await app.state.gateway.stop()
        finally:
            await close_redis(app.state.subscriber)
            await close_redis(app.state.redis)


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="NewsLive API",
        description="Real-time news portal — articles, auth, and live updates",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → handler

    from newslive.middleware.request_id import RequestIdMiddleware
    from newslive.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router)

    from newslive.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: newslive.main:app)
app = create_app()
