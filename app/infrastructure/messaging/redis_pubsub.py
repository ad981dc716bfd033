"""Redis Pub/Sub for committed status changes.

The publisher writes each StatusChangedEvent as JSON to the tenant's
channel (status_changed:{tenant_id}). run_status_change_broadcast,
started by the app lifespan, pattern-subscribes to every tenant channel
and pushes each message to that tenant's WebSocket connections, so every
API worker reaches every connected client.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import redis.asyncio as redis

from app.core.config import get_settings
from app.domain.events import STATUS_CHANGED, StatusChangedEvent

logger = logging.getLogger(__name__)


class _RedisPubSubBase:
    """Shared Redis connection and channel logic for status_changed pub/sub."""

    CHANNEL_PREFIX = STATUS_CHANGED

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=(
                        self.settings.redis_password.get_secret_value()
                        if self.settings.redis_password
                        else None
                    ),
                    max_connections=self.settings.redis_max_connections,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            self.redis = None
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    @classmethod
    def channel_for(cls, tenant_id: str) -> str:
        return f"{cls.CHANNEL_PREFIX}:{tenant_id}"

    @classmethod
    def tenant_from_channel(cls, channel: Any) -> str | None:
        """Tenant id encoded in a channel name, or None for foreign channels."""
        if isinstance(channel, bytes):
            channel = channel.decode(errors="replace")
        if not isinstance(channel, str):
            return None
        prefix, sep, tenant_id = channel.partition(":")
        if not sep or prefix != cls.CHANNEL_PREFIX or not tenant_id:
            return None
        return tenant_id


class RedisStatusChangePublisher(_RedisPubSubBase):
    """Implements IStatusChangePublisher over Redis PUBLISH."""

    async def publish_status_changed(self, event: StatusChangedEvent) -> bool:
        """Publish to the tenant channel.

        Returns:
            True if published, False if Redis unavailable or the publish failed.
        """
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping status_changed publish")
            return False
        channel = self.channel_for(event.tenant_id)
        try:
            await self.redis.publish(channel, json.dumps(event.to_dict()))
        except (redis.RedisError, OSError):
            logger.exception("Failed to publish status_changed to %s", channel)
            return False
        logger.debug("Published status_changed to %s: task %s", channel, event.task_id)
        return True


async def run_status_change_broadcast(app: Any, pubsub_source: _RedisPubSubBase | None = None) -> None:
    """Subscribe to status_changed:* and push each event to the tenant's WebSocket connections.

    Call as a background task from lifespan when Redis is enabled. Cancelling the task stops the loop.
    """
    source = pubsub_source or _RedisPubSubBase()
    await source.connect()
    if not source.is_available() or source.redis is None:
        logger.warning("Redis not available, status_changed broadcast not started")
        return
    pubsub = source.redis.pubsub()
    try:
        await pubsub.psubscribe(f"{source.CHANNEL_PREFIX}:*")
        logger.info("Subscribed to %s:* for WebSocket broadcast", source.CHANNEL_PREFIX)
        async for message in pubsub.listen():
            if message["type"] != "pmessage":
                continue
            tenant_id = source.tenant_from_channel(message.get("channel"))
            if tenant_id is None:
                continue
            try:
                event = StatusChangedEvent.from_dict(json.loads(message["data"]))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError):
                logger.exception("Failed to parse status_changed message")
                continue
            manager = getattr(app.state, "ws_manager", None)
            if manager is not None:
                await manager.broadcast_to_tenant(tenant_id, event.to_dict())
    except asyncio.CancelledError:
        logger.info("status_changed broadcast task cancelled")
    except Exception:
        logger.exception("status_changed broadcast error")
    finally:
        await pubsub.punsubscribe()
        await pubsub.aclose()
        await source.disconnect()
