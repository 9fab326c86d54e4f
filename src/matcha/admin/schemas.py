"""Admin response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AdminUserResponse(BaseModel):
    """Full user record as seen by the admin. Never carries the password digest."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    is_banned: bool
    is_email_verified: bool
    latitude: float | None = None
    longitude: float | None = None
    city: str | None = None
    country: str | None = None
    online_status: bool = False
    created_at: datetime | None = None


class PublicUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: str | None = None
    last_name: str | None = None
    city: str | None = None
    country: str | None = None
    online_status: bool = False


class ProfileVisitResponse(PublicUserResponse):
    """A user from a profile-view relation, with the time of the view."""

    visited_at: datetime


class UserDetailsResponse(BaseModel):
    user: AdminUserResponse
    blocked_users: list[PublicUserResponse] = []
    liked_users: list[PublicUserResponse] = []
    liked_by_users: list[PublicUserResponse] = []
    viewed_profiles: list[ProfileVisitResponse] = []
    profile_viewers: list[ProfileVisitResponse] = []
    matches: list[PublicUserResponse] = []
    total_messages: int
    total_dates: int
    total_activity_minutes: int
