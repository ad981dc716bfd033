"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (Redis pub/sub, broadcast task,
telemetry, DB engine dispose).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.messaging import (
    RedisStatusChangePublisher,
    run_status_change_broadcast,
)
from app.infrastructure.persistence.database import dispose_engine, get_engine
from app.shared.telemetry.telemetry import get_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: SQL instrumentation (postgres + telemetry), then, when Redis is
    enabled, the Redis publisher and the status_changed broadcast task. If
    Redis cannot be reached the in-process publisher set by create_app stays.
    Shutdown: broadcast task cancel, publisher disconnect, telemetry flush,
    SQL engine dispose.
    """
    settings = get_settings()
    telemetry = get_telemetry()

    # ---- Startup ----
    if settings.database_backend == "postgres" and telemetry is not None:
        engine = get_engine()
        if engine is not None:
            telemetry.instrument_sqlalchemy(engine)

    app.state.redis_publisher = None
    app.state.status_broadcast_task = None
    if settings.redis_enabled:
        if telemetry is not None:
            telemetry.instrument_redis()
        publisher = RedisStatusChangePublisher()
        await publisher.connect()
        if publisher.is_available():
            app.state.redis_publisher = publisher
            app.state.status_publisher = publisher
            app.state.status_broadcast_task = asyncio.create_task(
                run_status_change_broadcast(app)
            )
        else:
            logger.warning("Redis unavailable; status_changed stays in-process")

    yield

    # ---- Shutdown ----
    broadcast_task = app.state.status_broadcast_task
    if broadcast_task is not None:
        broadcast_task.cancel()
        try:
            await broadcast_task
        except asyncio.CancelledError:
            pass
        logger.info("status_changed broadcast task stopped")

    if app.state.redis_publisher is not None:
        await app.state.redis_publisher.disconnect()

    if telemetry is not None:
        telemetry.shutdown()
        logger.info("Telemetry shutdown complete")

    if settings.database_backend == "postgres":
        await dispose_engine()
        logger.info("Database engine disposed")
