"""Notification inbox endpoint tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from matcha.db.models import Notification, User
from tests.conftest import create_user


async def _seed(db: AsyncSession, to_user: User, count: int = 2, from_user: User | None = None) -> list[Notification]:
    now = datetime.now(timezone.utc)
    items = [
        Notification(
            to_user_id=to_user.id,
            from_user_id=from_user.id if from_user else None,
            type="like",
            message=f"notification {i}",
            created_at=now - timedelta(minutes=count - i),
        )
        for i in range(count)
    ]
    db.add_all(items)
    await db.commit()
    return items


class TestNotificationsAPI:
    @pytest.mark.asyncio
    async def test_list_empty(self, user_client: AsyncClient):
        response = await user_client.get("/notifications")
        assert response.status_code == 200
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_list_newest_first_with_sender(
        self, user_client: AsyncClient, regular_user: User, db_session: AsyncSession
    ):
        bob = await create_user(db_session, "bob")
        await _seed(db_session, regular_user, 2, from_user=bob)

        response = await user_client.get("/notifications")
        data = response.json()["data"]
        assert [n["message"] for n in data] == ["notification 1", "notification 0"]
        assert data[0]["from_username"] == "bob"
        assert data[0]["from_user_id"] == bob.id
        assert data[0]["user_id"] == regular_user.id
        assert data[0]["read"] is False

    @pytest.mark.asyncio
    async def test_only_own_notifications(self, user_client: AsyncClient, db_session: AsyncSession):
        bob = await create_user(db_session, "bob")
        await _seed(db_session, bob, 3)
        response = await user_client.get("/notifications")
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_unread_count_and_mark_read(
        self, user_client: AsyncClient, regular_user: User, db_session: AsyncSession
    ):
        items = await _seed(db_session, regular_user, 3)

        count = await user_client.get("/notifications/unread-count")
        assert count.json() == {"data": {"unread_count": 3}}

        response = await user_client.post(f"/notifications/{items[0].id}/read")
        assert response.status_code == 200

        count = await user_client.get("/notifications/unread-count")
        assert count.json()["data"]["unread_count"] == 2

    @pytest.mark.asyncio
    async def test_mark_all_read(self, user_client: AsyncClient, regular_user: User, db_session: AsyncSession):
        await _seed(db_session, regular_user, 3)
        response = await user_client.post("/notifications/read-all")
        assert response.status_code == 200
        assert response.json()["message"] == "Marked 3 notifications as read"

        count = await user_client.get("/notifications/unread-count")
        assert count.json()["data"]["unread_count"] == 0

    @pytest.mark.asyncio
    async def test_mark_read_not_found(self, user_client: AsyncClient):
        response = await user_client.post("/notifications/99999/read")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_touch_others_notifications(self, user_client: AsyncClient, db_session: AsyncSession):
        bob = await create_user(db_session, "bob")
        items = await _seed(db_session, bob, 1)
        assert (await user_client.post(f"/notifications/{items[0].id}/read")).status_code == 404
        assert (await user_client.delete(f"/notifications/{items[0].id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, user_client: AsyncClient, regular_user: User, db_session: AsyncSession):
        items = await _seed(db_session, regular_user, 2)
        response = await user_client.delete(f"/notifications/{items[0].id}")
        assert response.status_code == 204

        listing = await user_client.get("/notifications")
        assert [n["id"] for n in listing.json()["data"]] == [items[1].id]
