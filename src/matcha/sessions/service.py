"""User activity sessions: start/end bookkeeping and total activity time."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from matcha.db.models import UserSession
from matcha.visits.service import MAX_IP_LENGTH

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _aware(value: datetime) -> datetime:
    # Plain timestamp columns come back naive; stored values are always UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def start_session(
    db: AsyncSession,
    user_id: int,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserSession:
    """Open a new session for the user. Caller commits."""
    session = UserSession(
        user_id=user_id,
        started_at=datetime.now(timezone.utc),
        ip_address=ip_address[:MAX_IP_LENGTH] if ip_address else None,
        user_agent=user_agent,
    )
    db.add(session)
    await db.flush()
    return session


async def end_session(db: AsyncSession, session_id: int, now: datetime | None = None) -> UserSession | None:
    """Close an open session and store its whole-minute duration.

    Returns None if the session does not exist or was already ended.
    """
    result = await db.execute(
        select(UserSession).where(UserSession.id == session_id, UserSession.ended_at.is_(None))
    )
    session = result.scalar_one_or_none()
    if session is None:
        return None

    now = now or datetime.now(timezone.utc)
    elapsed = now - _aware(session.started_at)
    if elapsed.total_seconds() < 0:
        logger.warning("session_ends_before_start", session_id=session.id, started_at=session.started_at.isoformat())
    session.ended_at = now
    session.duration_minutes = max(0, int(elapsed.total_seconds() // 60))
    await db.flush()
    logger.info("session_ended", session_id=session.id, user_id=session.user_id, minutes=session.duration_minutes)
    return session


async def get_active_session(db: AsyncSession, user_id: int) -> UserSession | None:
    """The user's most recently started session that is still open."""
    result = await db.execute(
        select(UserSession)
        .where(UserSession.user_id == user_id, UserSession.ended_at.is_(None))
        .order_by(UserSession.started_at.desc(), UserSession.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def total_activity_minutes(db: AsyncSession, user_id: int) -> int:
    """Sum of the durations of the user's finished sessions."""
    result = await db.execute(
        select(func.coalesce(func.sum(UserSession.duration_minutes), 0)).where(
            UserSession.user_id == user_id,
            UserSession.duration_minutes.is_not(None),
        )
    )
    return int(result.scalar_one())
