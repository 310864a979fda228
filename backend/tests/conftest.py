"""
SpellNote Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures:
    ├── mock_db_session: AsyncMock session; add()/flush() emulate an insert
    ├── speller_responder: builds a YandexSpellerClient on httpx.MockTransport
    ├── valid_auth: Basic Authorization header for user 1
    └── test_client: HTTPX AsyncClient bound to the FastAPI app
"""

import base64
import os
from datetime import datetime, timezone
from typing import Callable, List
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SPELLER_API_URL"] = "http://speller.test/services/spellservice.json/checkText"
os.environ["SPELLER_RETRY_MAX_ATTEMPTS"] = "1"
os.environ["CORRECTION_FAILURE_POLICY"] = "reject"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.services.yandex_speller import YandexSpellerClient  # noqa: E402

SPELLER_URL = os.environ["SPELLER_API_URL"]


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    add() records objects in `session.added`; flush() gives the last added
    object an id and created_at, as the database would on INSERT.
    execute() returns a result whose scalar() is True (credential check passes).
    """
    session = AsyncMock()
    session.added = []

    def _add(obj):
        session.added.append(obj)

    async def _flush():
        if session.added:
            obj = session.added[-1]
            obj.id = len(session.added)
            obj.created_at = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    auth_result = MagicMock()
    auth_result.scalar.return_value = True

    session.add = MagicMock(side_effect=_add)
    session.flush = AsyncMock(side_effect=_flush)
    session.execute = AsyncMock(return_value=auth_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def speller_responder() -> Callable[..., YandexSpellerClient]:
    """
    Factory for a YandexSpellerClient whose HTTP traffic is served by a handler.

    Usage:
        client = speller_responder(lambda request: httpx.Response(200, json=[]))
        client.requests  # every httpx.Request the handler saw
    """

    def _build(handler, **kwargs) -> YandexSpellerClient:
        seen: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        kwargs.setdefault("retry_min_wait", 0)
        kwargs.setdefault("retry_max_wait", 0)
        client = YandexSpellerClient(
            api_url=SPELLER_URL,
            transport=httpx.MockTransport(_record),
            **kwargs,
        )
        client.requests = seen
        return client

    return _build


@pytest.fixture
def valid_auth():
    token = base64.b64encode(b"One:password").decode("ascii")
    return {"Authorization": f"Basic {token}"}


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed straight into the FastAPI app (no server, no lifespan).

    Dependency overrides set by a test are cleared afterwards.
    """
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
