"""Announcement request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class AnnouncementCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1, description="Markdown body")
    expires_at: datetime | None = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "must not be blank"
            raise ValueError(msg)
        return v


class AnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    created_by: int
    created_by_username: str | None = None
    created_at: datetime
    expires_at: datetime | None = None
    is_active: bool
