"""Notification creation, fan-out and inbox management.

Notifications are:
1. Persisted in the database
2. Pushed to the recipient via Redis pub/sub (picked up by the WebSocket gateway)

Types: like, unlike, view, message, video_call, match, date, announcement, other, connection
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.db.models import NOTIFICATION_TYPES, Notification, User
from matcha.notifications.push import push_notification_to_user

logger = structlog.get_logger()

VALID_TYPES = frozenset(NOTIFICATION_TYPES)


async def create_notification(
    db: AsyncSession,
    to_user_id: int,
    message: str,
    from_user_id: int | None = None,
    type_: str = "other",
    target_id: str | None = None,
    redis: Any | None = None,
) -> Notification:
    """Create a notification and push it to the recipient."""
    if type_ not in VALID_TYPES:
        raise ValueError(f"Invalid notification type: {type_}. Must be one of {sorted(VALID_TYPES)}")

    notification = Notification(
        to_user_id=to_user_id,
        from_user_id=from_user_id,
        type=type_,
        message=message,
        target_id=target_id,
        read=False,
        created_at=datetime.now(timezone.utc),
    )
    db.add(notification)
    await db.flush()

    await push_notification_to_user(redis, notification)
    return notification


async def notify_all_users(
    db: AsyncSession,
    message: str,
    from_user_id: int | None = None,
    type_: str = "other",
    target_id: str | None = None,
    exclude_user_id: int | None = None,
    redis: Any | None = None,
) -> int:
    """Send the same notification to every user. Returns the number created."""
    result = await db.execute(select(User.id).order_by(User.id))
    sent = 0
    for (uid,) in result.all():
        if uid == exclude_user_id:
            continue
        await create_notification(
            db, uid, message, from_user_id=from_user_id, type_=type_, target_id=target_id, redis=redis,
        )
        sent += 1
    return sent


async def get_notifications(db: AsyncSession, user_id: int) -> list[Notification]:
    """All of a user's notifications, most recent first."""
    result = await db.execute(
        select(Notification)
        .where(Notification.to_user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().unique().all())


async def mark_as_read(db: AsyncSession, user_id: int, notification_id: int) -> bool:
    """Mark a single notification as read. Returns True if found."""
    result = await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.to_user_id == user_id)
        .values(read=True)
    )
    await db.flush()
    return result.rowcount > 0


async def mark_all_as_read(db: AsyncSession, user_id: int) -> int:
    """Mark all unread notifications as read. Returns count updated."""
    result = await db.execute(
        update(Notification)
        .where(Notification.to_user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.flush()
    return result.rowcount


async def delete_notification(db: AsyncSession, user_id: int, notification_id: int) -> bool:
    """Delete one of the user's notifications. Returns True if found."""
    result = await db.execute(
        delete(Notification).where(
            Notification.id == notification_id,
            Notification.to_user_id == user_id,
        )
    )
    await db.flush()
    return result.rowcount > 0


async def get_unread_count(db: AsyncSession, user_id: int) -> int:
    """Get count of unread notifications."""
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.to_user_id == user_id, Notification.read.is_(False))
    )
    return result.scalar_one()
