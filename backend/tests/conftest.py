import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GEMINI_API_KEY", "")

import uuid
import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from memevsmeme.main import app
from memevsmeme.db import Base, get_session
import memevsmeme.models.user  # noqa: F401
import memevsmeme.models.challenge  # noqa: F401
import memevsmeme.models.meme  # noqa: F401
import memevsmeme.models.battle  # noqa: F401
import memevsmeme.models.template  # noqa: F401
import memevsmeme.models.comment  # noqa: F401


@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    async def _get_test_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _get_test_session
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_session, None)


@pytest.fixture
def register_login(client):
    """Register a fresh user and return (auth headers, user json)."""
    async def _register_login(username: str | None = None):
        username = username or f"user_{uuid.uuid4().hex[:8]}"
        r = await client.post("/api/auth/register", json={
            "username": username, "password": "supersecret", "confirm_password": "supersecret",
        })
        assert r.status_code == 201, r.text
        user = r.json()
        r = await client.post("/api/auth/login", json={"username": username, "password": "supersecret"})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access']}"}, user

    return _register_login
