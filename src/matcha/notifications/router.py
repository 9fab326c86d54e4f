"""Notification inbox endpoints for the current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.auth.dependencies import get_current_user
from matcha.database import get_session
from matcha.db.models import Notification, User
from matcha.notifications.schemas import NotificationResponse, UnreadCountResponse
from matcha.notifications.service import (
    delete_notification,
    get_notifications,
    get_unread_count,
    mark_all_as_read,
    mark_as_read,
)
from matcha.schemas import DataResponse, MessageResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _notification_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        user_id=n.to_user_id,
        from_user_id=n.from_user_id,
        from_username=n.sender.username if n.sender else None,
        type=n.type,
        message=n.message,
        target_id=n.target_id,
        read=n.read,
        created_at=n.created_at,
    )


@router.get("", response_model=DataResponse[list[NotificationResponse]])
async def list_notifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """List the current user's notifications, newest first."""
    notifications = await get_notifications(db, user.id)
    return DataResponse(data=[_notification_response(n) for n in notifications])


@router.get("/unread-count", response_model=DataResponse[UnreadCountResponse])
async def unread_notification_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Get unread notification count."""
    count = await get_unread_count(db, user.id)
    return DataResponse(data=UnreadCountResponse(unread_count=count))


@router.post("/read-all", response_model=MessageResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Mark all notifications as read."""
    count = await mark_all_as_read(db, user.id)
    await db.commit()
    return MessageResponse(message=f"Marked {count} notifications as read")


@router.post("/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Mark a notification as read."""
    found = await mark_as_read(db, user.id, notification_id)
    if not found:
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return MessageResponse(message="Notification marked as read")


@router.delete("/{notification_id}", status_code=204)
async def remove_notification(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete one of the current user's notifications."""
    found = await delete_notification(db, user.id, notification_id)
    if not found:
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return Response(status_code=204)
