"""
Pytest configuration for StockScan backend tests.

API tests run the real FastAPI app over httpx's ASGITransport against an
in-memory SQLite database. Redis and the vision client are replaced through
dependency overrides.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-jwt-signing-0123456789")
os.environ.setdefault("OPENAI_API_KEY", "")

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.dependencies import get_redis
from app.core.security import create_access_token
from app.main import app
from app.models import Base
from app.models.user import User


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the token revocation check."""

    def __init__(self) -> None:
        self.keys: set[str] = set()

    async def exists(self, *names: str) -> int:
        return sum(1 for name in names if name in self.keys)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_redis() -> FakeRedis:
        return fake_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory) -> Callable[..., Awaitable[User]]:
    """Factory that inserts a user row, as the auth provider would."""

    async def _make_user(name: str = "Test User", is_active: bool = True) -> User:
        async with session_factory() as session:
            user = User(
                email=f"{name.lower().replace(' ', '_')}_{uuid.uuid4().hex[:8]}@example.com",
                display_name=name,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build a Bearer header for a user."""

    def _auth_headers(user: User, jti: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user.id), jti=jti)}"}

    return _auth_headers
