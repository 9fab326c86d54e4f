"""Shared test fixtures.

Each test gets a fresh in-memory SQLite database built from the ORM
metadata; the app's ``get_session`` dependency is pointed at it.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from matcha.auth.session_token import create_session_token
from matcha.config import get_settings
from matcha.database import get_session
from matcha.db.base import Base
from matcha.db.models import User
from matcha.main import create_app

ADMIN_USERNAME = get_settings().admin_username


async def create_user(db: AsyncSession, username: str, **fields: Any) -> User:
    """Insert a verified, unbanned user unless overridden."""
    values: dict[str, Any] = {
        "email": f"{username}@example.com",
        "first_name": username.capitalize(),
        "last_name": "Test",
        "password_digest": "$2a$12$notarealhash",
        "is_email_verified": True,
        "is_banned": False,
    }
    values.update(fields)
    user = User(username=username, **values)
    db.add(user)
    await db.commit()
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_session_token(user.id)}"}


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and assertions."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    application = create_app()

    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_session] = _override_session
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client without credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, ADMIN_USERNAME, city="Lisbon", country="Portugal")


@pytest_asyncio.fixture
async def regular_user(db_session: AsyncSession) -> User:
    return await create_user(db_session, "alice", city="Paris", country="France")


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_user: User) -> AsyncClient:
    """Client authenticated as the admin account."""
    client.headers.update(auth_headers(admin_user))
    return client


@pytest_asyncio.fixture
async def user_client(client: AsyncClient, regular_user: User) -> AsyncClient:
    """Client authenticated as a regular (non-admin) user."""
    client.headers.update(auth_headers(regular_user))
    return client
