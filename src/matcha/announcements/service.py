"""Announcement CRUD and notification fan-out."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, or_, select, update

from matcha.db.models import Announcement
from matcha.notifications.service import notify_all_users

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _as_utc(value: datetime | None) -> datetime | None:
    """Normalize client-supplied timestamps to UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def get_announcement(db: AsyncSession, announcement_id: int) -> Announcement | None:
    result = await db.execute(
        select(Announcement)
        .where(Announcement.id == announcement_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().unique().one_or_none()


async def list_announcements(db: AsyncSession) -> list[Announcement]:
    """Every announcement, newest first."""
    result = await db.execute(
        select(Announcement).order_by(Announcement.created_at.desc(), Announcement.id.desc())
    )
    return list(result.scalars().unique().all())


async def list_active_announcements(db: AsyncSession, now: datetime | None = None) -> list[Announcement]:
    """Active announcements that have not expired yet, newest first."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        select(Announcement)
        .where(
            Announcement.is_active.is_(True),
            or_(Announcement.expires_at.is_(None), Announcement.expires_at > now),
        )
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
    )
    return list(result.scalars().unique().all())


async def create_announcement(
    db: AsyncSession,
    title: str,
    content: str,
    created_by: int,
    expires_at: datetime | None = None,
    redis: Any | None = None,
) -> Announcement:
    """
    Create an announcement and notify every other user about it.

    The author does not receive a notification. Caller commits.
    """
    announcement = Announcement(
        title=title,
        content=content,
        created_by=created_by,
        created_at=datetime.now(timezone.utc),
        expires_at=_as_utc(expires_at),
        is_active=True,
    )
    db.add(announcement)
    await db.flush()
    logger.info("announcement_created", announcement_id=announcement.id, created_by=created_by)

    sent = await notify_all_users(
        db,
        f"New announcement: {title}",
        from_user_id=created_by,
        type_="announcement",
        target_id=str(announcement.id),
        exclude_user_id=created_by,
        redis=redis,
    )
    logger.info("announcement_fanout", announcement_id=announcement.id, recipients=sent)

    await db.refresh(announcement, attribute_names=["author"])
    return announcement


async def deactivate_announcement(db: AsyncSession, announcement_id: int) -> bool:
    """Hide an announcement without deleting it. Returns True if found."""
    result = await db.execute(
        update(Announcement).where(Announcement.id == announcement_id).values(is_active=False)
    )
    await db.flush()
    return result.rowcount > 0


async def delete_announcement(db: AsyncSession, announcement_id: int) -> bool:
    """Delete an announcement. Returns True if found."""
    result = await db.execute(delete(Announcement).where(Announcement.id == announcement_id))
    await db.flush()
    return result.rowcount > 0
