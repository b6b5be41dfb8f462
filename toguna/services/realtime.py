"""Dashboard notifications stored in the database and fanned out over Redis pub/sub."""

import json
import logging
from typing import Any

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from toguna.config import get_settings
from toguna.models.notification import Notification, NotificationType

settings = get_settings()
logger = logging.getLogger(__name__)

_redis: redis.Redis | None = None


def set_redis(client: redis.Redis | None) -> None:
    """Register the connection pool opened by the application lifespan."""
    global _redis
    _redis = client


async def publish_event(event: str, payload: dict[str, Any]) -> bool:
    """Push an event to subscribers. Failures are logged, never raised."""
    if _redis is None:
        return False
    message = json.dumps({"event": event, "payload": payload}, ensure_ascii=False, default=str)
    try:
        await _redis.publish(settings.notification_channel, message)
        return True
    except Exception as e:
        logger.warning(f"Realtime publish of {event} failed: {e}")
        return False


async def notify(
    db: AsyncSession,
    notification_type: NotificationType,
    title: str,
    message: str,
    operator_id: int | None = None,
    data: dict | None = None,
) -> Notification:
    """Store a notification in the caller's transaction.

    Nothing is published here. Once the caller has committed it passes the
    notification to `publish_notification`.
    """
    notification = Notification(
        operator_id=operator_id,
        notification_type=notification_type,
        title=title,
        message=message,
        data=data,
        is_read=False,
    )
    db.add(notification)
    await db.flush()
    return notification


async def publish_notification(notification: Notification) -> bool:
    """Publish a committed notification to dashboards."""
    return await publish_event(
        "notification",
        {
            "id": notification.id,
            "operator_id": notification.operator_id,
            "type": notification.notification_type.value,
            "title": notification.title,
            "message": notification.message,
            "data": notification.data,
        },
    )
