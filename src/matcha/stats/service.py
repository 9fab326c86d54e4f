"""Site-wide statistics for the admin dashboard.

Totals, per-day time series and the user location snapshot behind the globe
view. Every function is a single aggregate query.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, func, select
from sqlalchemy.orm import aliased

from matcha.db.models import DateEvent, Like, Message, ProfileView, SiteVisit, User, UserSession
from matcha.visits.service import get_recent_logins

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

# Time series name -> timestamp column it is bucketed on
TIME_SERIES_COLUMNS: dict[str, InstrumentedAttribute[Any]] = {
    "visits": SiteVisit.visited_at,
    "messages": Message.created_at,
    "profile-views": ProfileView.visited_at,
    "dates": DateEvent.created_at,
    "sessions": UserSession.started_at,
}


async def _count_rows(db: AsyncSession, model: type) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def count_matches(db: AsyncSession) -> int:
    """Number of user pairs that liked each other (each pair counted once)."""
    other = aliased(Like)
    result = await db.execute(
        select(func.count())
        .select_from(Like)
        .join(
            other,
            and_(other.liker_id == Like.liked_id, other.liked_id == Like.liker_id),
        )
        .where(Like.liker_id < Like.liked_id)
    )
    return result.scalar_one()


async def get_site_stats(db: AsyncSession, recent_logins_limit: int = 5) -> dict:
    """Overall totals plus the most recent logins."""
    return {
        "total_users": await _count_rows(db, User),
        "total_messages": await _count_rows(db, Message),
        "total_dates": await _count_rows(db, DateEvent),
        "total_matches": await count_matches(db),
        "recent_logins": await get_recent_logins(db, recent_logins_limit),
    }


async def count_per_day(
    db: AsyncSession,
    column: InstrumentedAttribute[Any],
    days: int = 30,
    now: datetime | None = None,
) -> list[dict]:
    """Group rows by calendar day of ``column`` over the last ``days`` days, oldest first.

    Days without rows are absent from the result.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)
    day = func.date(column)
    result = await db.execute(
        select(day.label("date"), func.count().label("count"))
        .where(column >= cutoff)
        .group_by(day)
        .order_by(day)
    )
    # Postgres returns a date, SQLite an ISO string; both render as YYYY-MM-DD
    return [{"date": str(row.date), "count": row.count} for row in result.all()]


async def get_time_series(db: AsyncSession, series: str, days: int = 30) -> list[dict]:
    """Per-day counts for one of the named series in TIME_SERIES_COLUMNS."""
    try:
        column = TIME_SERIES_COLUMNS[series]
    except KeyError:
        msg = f"Unknown time series: {series}"
        raise ValueError(msg) from None
    return await count_per_day(db, column, days)


async def get_user_locations(db: AsyncSession) -> list[dict]:
    """Users with known coordinates and their online status."""
    result = await db.execute(
        select(
            User.id,
            User.username,
            User.latitude,
            User.longitude,
            User.city,
            User.country,
            User.online_status,
        )
        .where(User.latitude.is_not(None), User.longitude.is_not(None))
        .order_by(User.id)
    )
    return [dict(row._mapping) for row in result.all()]
