from __future__ import annotations

import asyncio
import os
import tempfile
from typing import Any, Awaitable, Callable, Generator

# Point the app at a throwaway SQLite database before anything imports settings.
_DB_DIR = tempfile.mkdtemp(prefix="murmur-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base
from app.db.session import async_session_maker, engine
from app.main import app

API = "/api/v1"


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def fresh_database() -> None:
    asyncio.run(_reset_schema())


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def run_db() -> Callable[[Callable[[AsyncSession], Awaitable[Any]]], Any]:
    """Run an async callback against a committed database session."""

    def _run(fn: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        async def _inner() -> Any:
            async with async_session_maker() as session:
                result = await fn(session)
                await session.commit()
                return result

        return asyncio.run(_inner())

    return _run


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, username: str, password: str = "secret123", **overrides: str):
    payload = {
        "email": f"{username}@example.com",
        "username": username,
        "password": password,
        "first_name": username.capitalize(),
        "last_name": "Tester",
    }
    payload.update(overrides)
    return client.post(f"{API}/auth/register", json=payload)


def login(client: TestClient, identifier: str, password: str = "secret123"):
    return client.post(f"{API}/auth/login", json={"identifier": identifier, "password": password})


@pytest.fixture()
def make_user(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Register and log in a user; returns its id, username, tokens and headers."""

    def _make(username: str, password: str = "secret123") -> dict[str, Any]:
        resp = register(client, username, password)
        assert resp.status_code == 201, resp.text
        resp = login(client, username, password)
        assert resp.status_code == 200, resp.text
        data = resp.json()["data"]
        return {
            "id": data["user"]["id"],
            "username": username,
            "access_token": data["access_token"],
            "refresh_token": data["refresh_token"],
            "headers": auth_headers(data["access_token"]),
        }

    return _make
