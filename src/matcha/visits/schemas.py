"""Site-visit response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class VisitResponse(BaseModel):
    id: int
    user_id: int
    username: str
    visited_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None


class VisitStatsResponse(BaseModel):
    id: int
    username: str
    visit_count: int


class RecentLoginResponse(BaseModel):
    username: str
    visited_at: datetime | None = None
    city: str | None = None
    country: str | None = None
