"""
Scholar Stream Backend: Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_store: MongoStore stand-in with one mock per collection
    ├── admin_token / moderator_token / student_token: signed JWTs
    ├── auth_headers: builds an Authorization header from a token
    └── test_client: HTTPX AsyncClient bound to the app, store overridden

No MongoDB, no Stripe: every driver call is a mock.
"""

import os

# Must be set before any scholarstream import: settings load at import time
os.environ["JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_not_real"
os.environ["CLIENT_URL"] = "http://localhost:5173"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from scholarstream.config import settings


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

def make_cursor(docs: Optional[List[Dict[str, Any]]] = None) -> MagicMock:
    """
    A chainable stand-in for an AsyncCursor.

    `find().sort().limit()` returns the same object; `to_list()` is awaited.
    """
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs or []))
    return cursor


def make_collection() -> MagicMock:
    collection = MagicMock()
    collection.find.return_value = make_cursor()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.aggregate = AsyncMock(return_value=make_cursor())
    return collection


def make_token(role: str = "student", email: str = "student@example.com", **claims: Any) -> str:
    payload = {"email": email, "role": role, **claims}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_store():
    """
    Provides a mock MongoStore.

    Usage:
        async def test_get_user(mock_store):
            mock_store.users.find_one.return_value = {"email": "a@b.com"}
            result = await user_service.get_user_by_email(mock_store, "A@B.com")
    """
    store = MagicMock()
    store.users = make_collection()
    store.scholarships = make_collection()
    store.applications = make_collection()
    store.reviews = make_collection()
    store.ping = AsyncMock()
    store.close = AsyncMock()
    return store


@pytest.fixture
def admin_token():
    return make_token(role="admin", email="admin@example.com")


@pytest.fixture
def moderator_token():
    return make_token(role="moderator", email="mod@example.com")


@pytest.fixture
def student_token():
    return make_token(role="student", email="student@example.com")


@pytest.fixture
def auth_headers():
    def _headers(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest_asyncio.fixture
async def test_client(mock_store):
    """
    Provides an async HTTP client talking to the app in-process.

    ASGITransport does not run the lifespan, so no real MongoClient is
    created; `get_store` is overridden with `mock_store` instead.
    """
    from scholarstream.database import get_store
    from scholarstream.main import app

    app.dependency_overrides[get_store] = lambda: mock_store
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
