"""Notification response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    from_user_id: int | None = None
    from_username: str | None = None
    type: str
    message: str
    target_id: str | None = None
    read: bool
    created_at: datetime


class UnreadCountResponse(BaseModel):
    unread_count: int
