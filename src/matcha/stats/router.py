"""Dashboard statistics endpoints: any authenticated user may read them."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.auth.dependencies import get_current_user
from matcha.config import get_settings
from matcha.database import get_session
from matcha.schemas import DataResponse
from matcha.stats.schemas import SiteStatsResponse, TimeSeriesPoint, UserLocationResponse
from matcha.stats.service import get_site_stats, get_time_series, get_user_locations

router = APIRouter(
    prefix="/admin/stats",
    tags=["Stats"],
    dependencies=[Depends(get_current_user)],
)

DaysQuery = Query(30, ge=1, le=365, description="Number of days to fetch")


@router.get("", response_model=DataResponse[SiteStatsResponse])
async def site_stats(db: AsyncSession = Depends(get_session)) -> dict:
    """Overall website statistics."""
    stats = await get_site_stats(db, get_settings().recent_logins_limit)
    return {"data": stats}


@router.get("/visits-over-time", response_model=DataResponse[list[TimeSeriesPoint]])
async def visits_over_time(days: int = DaysQuery, db: AsyncSession = Depends(get_session)) -> dict:
    """Site visits grouped by day."""
    return {"data": await get_time_series(db, "visits", days)}


@router.get("/messages-over-time", response_model=DataResponse[list[TimeSeriesPoint]])
async def messages_over_time(days: int = DaysQuery, db: AsyncSession = Depends(get_session)) -> dict:
    """Messages sent grouped by day."""
    return {"data": await get_time_series(db, "messages", days)}


@router.get("/profile-views-over-time", response_model=DataResponse[list[TimeSeriesPoint]])
async def profile_views_over_time(days: int = DaysQuery, db: AsyncSession = Depends(get_session)) -> dict:
    """Profile views grouped by day."""
    return {"data": await get_time_series(db, "profile-views", days)}


@router.get("/dates-over-time", response_model=DataResponse[list[TimeSeriesPoint]])
async def dates_over_time(days: int = DaysQuery, db: AsyncSession = Depends(get_session)) -> dict:
    """Scheduled dates grouped by day."""
    return {"data": await get_time_series(db, "dates", days)}


@router.get("/sessions-over-time", response_model=DataResponse[list[TimeSeriesPoint]])
async def sessions_over_time(days: int = DaysQuery, db: AsyncSession = Depends(get_session)) -> dict:
    """User sessions started, grouped by day."""
    return {"data": await get_time_series(db, "sessions", days)}


@router.get("/user-locations", response_model=DataResponse[list[UserLocationResponse]])
async def user_locations(db: AsyncSession = Depends(get_session)) -> dict:
    """All users with coordinates and their online status, for the globe view."""
    return {"data": await get_user_locations(db)}
