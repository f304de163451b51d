from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from telemed_realtime.api.deps import build_verifier
from telemed_realtime.api.middleware.correlation_id import CorrelationIdMiddleware
from telemed_realtime.api.v1.routers import health, ws
from telemed_realtime.config import settings
from telemed_realtime.infrastructure.db.uow import sqlalchemy_uow
from telemed_realtime.realtime.gatekeeper import ConnectionGatekeeper
from telemed_realtime.realtime.hub import RealtimeHub
from telemed_realtime.realtime.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    dispatcher = NotificationDispatcher(
        sqlalchemy_uow,
        max_attempts=settings.NOTIFICATION_MAX_ATTEMPTS,
        base_delay=settings.NOTIFICATION_RETRY_BASE_SECONDS,
        max_delay=settings.NOTIFICATION_RETRY_MAX_SECONDS,
    )
    app.state.notifications = dispatcher
    app.state.hub = RealtimeHub(sqlalchemy_uow, dispatcher)
    app.state.gatekeeper = ConnectionGatekeeper(build_verifier(), sqlalchemy_uow)
    logger.info("Realtime hub ready (verify_mode=%s)", settings.JWT_VERIFY_MODE)

    yield

    await dispatcher.close()
    logger.info("Realtime hub stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="TeleMed Realtime Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health.router)
    app.include_router(ws.router)

    return app
