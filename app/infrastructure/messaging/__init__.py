"""Messaging: status_changed publishers (Redis pub/sub and in-process)."""

from app.infrastructure.messaging.local import InProcessStatusChangePublisher
from app.infrastructure.messaging.redis_pubsub import (
    RedisStatusChangePublisher,
    run_status_change_broadcast,
)

__all__ = [
    "InProcessStatusChangePublisher",
    "RedisStatusChangePublisher",
    "run_status_change_broadcast",
]
