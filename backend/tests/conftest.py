"""
PIM Backend — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service/repository unit tests
    ├── test_settings:   Settings bound to a temporary SQLite file
    ├── database:        Database with all tables created
    ├── test_client:     HTTPX AsyncClient talking to create_app() in-process
    ├── make_token:      mints HS256 JWTs signed with the test secret
    └── auth_headers:    Authorization header for a given user id
"""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

# Set before any pim import: pim.config builds its default Settings at import time
TEST_JWT_SECRET = "test-secret-not-for-production"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["AUTH_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from pim.config import Settings
from pim.database import Database
from pim.main import create_app


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
        result = await note_service.get_note(mock_db_session, note_id, "u1")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_result():
    """
    Returns a builder for MagicMocks shaped like a SQLAlchemy Result.

    make_result(scalar_one_or_none=note)   → for find()
    make_result(scalars=[n1, n2])          → for list()
    make_result(scalar=True)               → for exists()
    make_result(rowcount=0)                → for delete()
    """
    def _build(scalar_one_or_none=None, scalars=None, scalar=None, rowcount=None):
        result = MagicMock()
        result.scalar_one_or_none.return_value = scalar_one_or_none
        result.scalars.return_value.all.return_value = scalars or []
        result.scalar.return_value = scalar
        result.rowcount = rowcount
        return result

    return _build


# ══════════════════════════════════════════════════════════════════════════
# Auth Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_token():
    """
    Returns a function minting signed tokens.

    make_token("u1")                      → {"sub": "u1", "exp": now + 1h}
    make_token("u1", claim="uid")         → {"uid": "u1", ...}
    make_token("u1", secret="other")      → signed with a different key
    make_token("u1", expires_in=-60)      → already expired
    make_token("u1", expires_in=None)     → no exp claim at all
    """
    def _make(
        user_id,
        claim="sub",
        secret=TEST_JWT_SECRET,
        expires_in=3600,
        **extra_claims,
    ):
        claims = {claim: user_id, **extra_claims}
        if expires_in is not None:
            claims["exp"] = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    """auth_headers("u1") → {"Authorization": "Bearer <token for u1>"}"""
    def _headers(user_id):
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a fresh SQLite file for each test."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'pim_test.db'}",
        auth_jwt_secret=TEST_JWT_SECRET,
        auth_jwt_public_key=None,
        auth_jwt_algorithms="HS256",
        auth_jwt_issuer=None,
        auth_jwt_audience=None,
        auth_cookie_name="session",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """Database with every table created; disposed after the test."""
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def test_client(test_settings, database):
    """
    HTTPX AsyncClient routed directly into the app (no server, no lifespan).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(settings=test_settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
