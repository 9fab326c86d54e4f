"""Site-visit logging and per-user traffic aggregation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import desc, func, select

from matcha.db.models import SiteVisit, User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

# Matches the site_visits.ip_address column width
MAX_IP_LENGTH = 45


async def record_visit(
    db: AsyncSession,
    user_id: int,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SiteVisit:
    """Insert a visit row for an authenticated request. Caller commits."""
    visit = SiteVisit(
        user_id=user_id,
        visited_at=datetime.now(timezone.utc),
        ip_address=ip_address[:MAX_IP_LENGTH] if ip_address else None,
        user_agent=user_agent,
    )
    db.add(visit)
    await db.flush()
    return visit


async def get_recent_visits(db: AsyncSession, limit: int = 100) -> list[dict]:
    """Most recent visits joined with the visitor's username, newest first."""
    result = await db.execute(
        select(SiteVisit, User.username)
        .join(User, User.id == SiteVisit.user_id)
        .order_by(desc(SiteVisit.visited_at), desc(SiteVisit.id))
        .limit(limit)
    )
    return [
        {
            "id": visit.id,
            "user_id": visit.user_id,
            "username": username,
            "visited_at": visit.visited_at,
            "ip_address": visit.ip_address,
            "user_agent": visit.user_agent,
        }
        for visit, username in result.all()
    ]


async def count_visits_by_user(db: AsyncSession) -> list[dict]:
    """Visit count for every user, including users who never visited, highest first."""
    visit_count = func.count(SiteVisit.id).label("visit_count")
    result = await db.execute(
        select(User.id, User.username, visit_count)
        .outerjoin(SiteVisit, SiteVisit.user_id == User.id)
        .group_by(User.id, User.username)
        .order_by(desc(visit_count), User.id)
    )
    return [
        {"id": row.id, "username": row.username, "visit_count": row.visit_count}
        for row in result.all()
    ]


async def get_recent_logins(db: AsyncSession, limit: int = 5) -> list[dict]:
    """Latest visit per user with location, for the most recently seen users."""
    last_visit = (
        select(SiteVisit.user_id, func.max(SiteVisit.visited_at).label("visited_at"))
        .group_by(SiteVisit.user_id)
        .subquery()
    )
    result = await db.execute(
        select(User.username, last_visit.c.visited_at, User.city, User.country)
        .join(last_visit, last_visit.c.user_id == User.id)
        .order_by(desc(last_visit.c.visited_at))
        .limit(limit)
    )
    return [
        {
            "username": row.username,
            "visited_at": row.visited_at,
            "city": row.city,
            "country": row.country,
        }
        for row in result.all()
    ]
