from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from support_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from support_chat.api.middleware.metrics import RequestTimingMiddleware
from support_chat.api.v1.routers import (
    admin_sessions,
    health,
    messages,
    sessions,
    ws,
)
from support_chat.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    QueryTimeoutError,
    UpstreamError,
    ValidationError,
)
from support_chat.config import settings
from support_chat.infrastructure.bus.redis_pubsub import (
    RedisPubSubPublisher,
    RedisPubSubSubscriber,
)
from support_chat.infrastructure.db.session import dispose_engine
from support_chat.infrastructure.ws.registry import ConnectionRegistry
from support_chat.infrastructure.ws.relay import LocalRelay, PubSubRelay, registry_dispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    subscriber: RedisPubSubSubscriber | None = None
    if settings.RELAY_BACKEND == "redis":
        app.state.relay = PubSubRelay(
            RedisPubSubPublisher(app.state.redis, settings.REDIS_PUBSUB_CHANNEL),
        )
        subscriber = RedisPubSubSubscriber(
            app.state.redis,
            settings.REDIS_PUBSUB_CHANNEL,
            registry_dispatcher(app.state.connections),
            reconnect_delay=settings.RELAY_RECONNECT_SECONDS,
        )
        await subscriber.start()
    logger.info("Realtime relay backend: %s", settings.RELAY_BACKEND)

    yield

    if subscriber is not None:
        await subscriber.stop()
    await app.state.connections.close_all()
    await app.state.redis.aclose()
    await dispose_engine()
    logger.info("Redis and database pools closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Support Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.connections = ConnectionRegistry()
    app.state.relay = LocalRelay(app.state.connections)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(sessions.router)
    app.include_router(messages.router)
    app.include_router(admin_sessions.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(QueryTimeoutError)
    async def _timeout(_req: Request, exc: QueryTimeoutError) -> JSONResponse:
        return JSONResponse(status_code=504, content={"detail": exc.detail})

    @app.exception_handler(UpstreamError)
    @app.exception_handler(SQLAlchemyError)
    async def _upstream(req: Request, exc: Exception) -> JSONResponse:
        logger.error("Upstream failure on %s %s", req.method, req.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
