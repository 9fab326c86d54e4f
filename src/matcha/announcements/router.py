"""Announcement endpoints: admin management and read access for all users."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.announcements.schemas import AnnouncementCreateRequest, AnnouncementResponse
from matcha.announcements.service import (
    create_announcement,
    deactivate_announcement,
    delete_announcement,
    get_announcement,
    list_active_announcements,
    list_announcements,
)
from matcha.auth.dependencies import get_current_user, require_admin
from matcha.database import get_session
from matcha.db.models import Announcement, User
from matcha.redis_client import get_redis_or_none
from matcha.schemas import DataResponse, MessageResponse

logger = structlog.get_logger()

admin_router = APIRouter(prefix="/admin/announcements", tags=["Admin"])
router = APIRouter(prefix="/announcements", tags=["Announcements"])


def _announcement_response(a: Announcement) -> AnnouncementResponse:
    return AnnouncementResponse(
        id=a.id,
        title=a.title,
        content=a.content,
        created_by=a.created_by,
        created_by_username=a.author.username if a.author else None,
        created_at=a.created_at,
        expires_at=a.expires_at,
        is_active=a.is_active,
    )


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.get("", response_model=DataResponse[list[AnnouncementResponse]])
async def admin_list_announcements(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """All announcements, including inactive and expired ones."""
    announcements = await list_announcements(db)
    return DataResponse(data=[_announcement_response(a) for a in announcements])


@admin_router.post("", response_model=DataResponse[AnnouncementResponse], status_code=201)
async def admin_create_announcement(
    body: AnnouncementCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Create an announcement and notify every other user."""
    announcement = await create_announcement(
        db,
        body.title,
        body.content,
        admin.id,
        expires_at=body.expires_at,
        redis=get_redis_or_none(),
    )
    await db.commit()
    return DataResponse(data=_announcement_response(announcement))


@admin_router.delete("/{announcement_id}", status_code=204)
async def admin_delete_announcement(
    announcement_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete an announcement."""
    if not await delete_announcement(db, announcement_id):
        raise HTTPException(status_code=404, detail="Announcement not found")
    await db.commit()
    logger.info("announcement_deleted", announcement_id=announcement_id)
    return Response(status_code=204)


@admin_router.patch("/{announcement_id}/deactivate", response_model=MessageResponse)
async def admin_deactivate_announcement(
    announcement_id: int,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Deactivate an announcement."""
    if not await deactivate_announcement(db, announcement_id):
        raise HTTPException(status_code=404, detail="Announcement not found")
    await db.commit()
    return MessageResponse(message="Announcement deactivated")


# ---------------------------------------------------------------------------
# Public (authenticated)
# ---------------------------------------------------------------------------


@router.get("", response_model=DataResponse[list[AnnouncementResponse]])
async def active_announcements(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Active, unexpired announcements."""
    announcements = await list_active_announcements(db)
    return DataResponse(data=[_announcement_response(a) for a in announcements])


@router.get("/{announcement_id}", response_model=DataResponse[AnnouncementResponse])
async def announcement_detail(
    announcement_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Get announcement details by ID."""
    announcement = await get_announcement(db, announcement_id)
    if announcement is None:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return DataResponse(data=_announcement_response(announcement))
