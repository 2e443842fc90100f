"""Shared fixtures: in-memory database, ASGI client and identity tokens."""

import os

# Settings are read at import time; point them at test values first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("IDENTITY_JWT_SECRET", "test-identity-secret")
os.environ.setdefault("IDENTITY_JWT_ALGORITHM", "HS256")
os.environ.setdefault("IDENTITY_API_URL", "")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_async_session
from app.api.deps import get_identity_profile_loader
from app.main import app
from app.models import SavingsGoal, User

TEST_SECRET = os.environ["IDENTITY_JWT_SECRET"]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_session_factory):
    """API client with the DB session and identity provider overridden."""
    async def override_get_async_session():
        async with test_session_factory() as session:
            yield session

    async def passthrough_profile(identity):
        return identity

    async def override_profile_loader():
        return passthrough_profile

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_identity_profile_loader] = override_profile_loader

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def make_token(external_id="user_2abc", expires_in=timedelta(hours=1), **claims):
    payload = {
        "sub": external_id,
        "iat": datetime.now(timezone.utc),
        "exp": datetime.now(timezone.utc) + expires_in,
        **claims,
    }
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token(first_name='Ada', last_name='Okafor', email='ada@example.org')}"}


@pytest.fixture
async def seed_user(test_db):
    """The user behind the default `auth_headers` token."""
    user = User(external_id="user_2abc", name="Ada Okafor", email="ada@example.org")
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def seed_goal(test_db, seed_user):
    """target=100.00, current=80.00, not completed."""
    goal = SavingsGoal(
        user_id=seed_user.id,
        name="Emergency fund",
        target_amount=Decimal("100.00"),
        current_amount=Decimal("80.00"),
        is_completed=False,
    )
    test_db.add(goal)
    await test_db.commit()
    await test_db.refresh(goal)
    return goal


@pytest.fixture
def token_factory():
    """Signs session tokens for arbitrary identities: token_factory("user_x", first_name=...)."""
    return make_token
