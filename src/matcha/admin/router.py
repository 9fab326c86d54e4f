"""Admin-only endpoints: user management and site-visit analytics."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.admin.schemas import AdminUserResponse, UserDetailsResponse
from matcha.admin.service import (
    CannotDeleteSelfError,
    delete_user,
    get_user_by_username,
    get_user_details,
    list_users,
)
from matcha.auth.dependencies import require_admin
from matcha.database import get_session
from matcha.db.models import User
from matcha.schemas import DataResponse
from matcha.visits.schemas import VisitResponse, VisitStatsResponse
from matcha.visits.service import count_visits_by_user, get_recent_visits

router = APIRouter(prefix="/admin", tags=["Admin"])


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=DataResponse[list[AdminUserResponse]])
async def admin_list_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Get all users."""
    users = await list_users(db)
    return DataResponse(data=[AdminUserResponse.model_validate(u) for u in users])


@router.delete("/users/{user_id}", status_code=204)
async def admin_delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete a user by ID."""
    try:
        found = await delete_user(db, user_id, acting_user_id=admin.id)
    except CannotDeleteSelfError as e:
        raise HTTPException(status_code=400, detail="Cannot delete yourself") from e
    if not found:
        raise HTTPException(status_code=404, detail="User not found")
    await db.commit()
    return Response(status_code=204)


@router.get("/users/{username}/details", response_model=DataResponse[UserDetailsResponse])
async def admin_user_details(
    username: str,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Detailed information about a specific user."""
    user = await get_user_by_username(db, username)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    details = await get_user_details(db, user)
    return DataResponse(data=UserDetailsResponse.model_validate(details, from_attributes=True))


# ---------------------------------------------------------------------------
# Site visits
# ---------------------------------------------------------------------------


@router.get("/visits", response_model=DataResponse[list[VisitResponse]])
async def admin_recent_visits(
    limit: int = Query(100, ge=1, le=1000),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Most recent site visits."""
    return DataResponse(data=[VisitResponse(**v) for v in await get_recent_visits(db, limit)])


@router.get("/visits/stats", response_model=DataResponse[list[VisitStatsResponse]])
async def admin_visit_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    """Visit counts by user."""
    return DataResponse(data=[VisitStatsResponse(**s) for s in await count_visits_by_user(db)])
