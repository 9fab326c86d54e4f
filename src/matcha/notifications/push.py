"""Push a notification over Redis pub/sub for per-user real-time delivery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from matcha.db.models import Notification

logger = structlog.get_logger()


def notification_payload(notification: Notification) -> dict:
    """WebSocket event body for a freshly created notification."""
    return {
        "event": "notification",
        "data": {
            "id": notification.id,
            "user_id": notification.to_user_id,
            "from_user_id": notification.from_user_id,
            "type": notification.type,
            "message": notification.message,
            "target_id": notification.target_id,
            "read": False,
            "created_at": notification.created_at.isoformat() if notification.created_at else None,
        },
    }


async def push_notification_to_user(redis: object | None, notification: Notification) -> None:
    """Publish a notification to ``ws:user:{to_user_id}``.

    The notification must already be flushed (have an ``id``). Delivery is
    best effort: the row is the source of truth.
    """
    if redis is None:
        return

    try:
        await redis.publish(  # type: ignore[attr-defined]
            f"ws:user:{notification.to_user_id}",
            json.dumps(notification_payload(notification)),
        )
    except Exception:
        logger.warning("notification_push_failed", user_id=notification.to_user_id, exc_info=True)
