"""Statistics response schemas."""

from __future__ import annotations

from pydantic import BaseModel

from matcha.visits.schemas import RecentLoginResponse


class SiteStatsResponse(BaseModel):
    """Totals shown on the admin dashboard header cards."""

    total_users: int
    total_messages: int
    total_dates: int
    total_matches: int
    recent_logins: list[RecentLoginResponse] = []


class TimeSeriesPoint(BaseModel):
    """One day of a time series chart."""

    date: str
    count: int


class UserLocationResponse(BaseModel):
    id: int
    username: str
    latitude: float
    longitude: float
    city: str | None = None
    country: str | None = None
    online_status: bool = False
