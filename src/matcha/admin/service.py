"""Admin user management business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import and_, delete, desc, func, select
from sqlalchemy.orm import aliased

from matcha.db.models import BlockedUser, DateEvent, Like, Message, ProfileView, User
from matcha.sessions.service import total_activity_minutes

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class CannotDeleteSelfError(Exception):
    """Raised when an admin tries to delete their own account."""


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def delete_user(db: AsyncSession, user_id: int, acting_user_id: int) -> bool:
    """
    Delete a user; dependent rows go with it through ON DELETE CASCADE.

    Returns False if the user does not exist.

    Raises:
        CannotDeleteSelfError: If ``user_id`` is the acting admin.
    """
    if await db.get(User, user_id) is None:
        return False
    if user_id == acting_user_id:
        raise CannotDeleteSelfError
    await db.execute(delete(User).where(User.id == user_id))
    await db.flush()
    logger.info("user_deleted", user_id=user_id, deleted_by=acting_user_id)
    return True


async def _users_via(db: AsyncSession, id_column, where_clause) -> list[User]:  # noqa: ANN001
    """Users whose id appears in ``id_column`` of rows matching ``where_clause``."""
    result = await db.execute(
        select(User).where(User.id.in_(select(id_column).where(where_clause))).order_by(User.id)
    )
    return list(result.scalars().all())


async def _profile_visits(db: AsyncSession, user_id: int, *, as_viewer: bool) -> list[dict]:
    """Profiles the user viewed (as_viewer) or users who viewed the user, newest first."""
    join_on = ProfileView.viewed_id if as_viewer else ProfileView.viewer_id
    owner = ProfileView.viewer_id if as_viewer else ProfileView.viewed_id
    result = await db.execute(
        select(User, ProfileView.visited_at)
        .join(ProfileView, join_on == User.id)
        .where(owner == user_id)
        .order_by(desc(ProfileView.visited_at))
    )
    return [
        {
            "id": user.id,
            "username": user.username,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "city": user.city,
            "country": user.country,
            "online_status": user.online_status,
            "visited_at": visited_at,
        }
        for user, visited_at in result.all()
    ]


async def _matches(db: AsyncSession, user_id: int) -> list[User]:
    """Users who liked ``user_id`` back."""
    back = aliased(Like)
    matched_ids = (
        select(Like.liked_id)
        .join(back, and_(back.liker_id == Like.liked_id, back.liked_id == Like.liker_id))
        .where(Like.liker_id == user_id)
    )
    result = await db.execute(select(User).where(User.id.in_(matched_ids)).order_by(User.id))
    return list(result.scalars().all())


async def _count(db: AsyncSession, model: type, where_clause) -> int:  # noqa: ANN001
    result = await db.execute(select(func.count()).select_from(model).where(where_clause))
    return result.scalar_one()


async def get_user_details(db: AsyncSession, user: User) -> dict:
    """Everything the admin user page shows about one user."""
    return {
        "user": user,
        "blocked_users": await _users_via(db, BlockedUser.blocked_id, BlockedUser.blocker_id == user.id),
        "liked_users": await _users_via(db, Like.liked_id, Like.liker_id == user.id),
        "liked_by_users": await _users_via(db, Like.liker_id, Like.liked_id == user.id),
        "viewed_profiles": await _profile_visits(db, user.id, as_viewer=True),
        "profile_viewers": await _profile_visits(db, user.id, as_viewer=False),
        "matches": await _matches(db, user.id),
        "total_messages": await _count(db, Message, Message.sender_id == user.id),
        "total_dates": await _count(db, DateEvent, DateEvent.initiator_id == user.id),
        "total_activity_minutes": await total_activity_minutes(db, user.id),
    }
