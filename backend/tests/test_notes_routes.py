"""
SpellNote Backend - HTTP Route Tests
======================================

What:  Requests through the full FastAPI stack (middleware, handlers, routes)
       with the database session and correction pipeline overridden.

What we test:
    ✅ POST /add-note → 201 with corrected content
    ✅ 401 with WWW-Authenticate when credentials are missing or wrong
    ✅ 415 when the body is not declared JSON
    ✅ 400 for bad bodies and bad user_id
    ✅ Speller failures → 503 / 502 with the failure kind
    ✅ GET /notes lists with X-Total-Count
    ✅ /health reports degraded and unhealthy states
    ✅ create_app(config) drives the failure policy end to end
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from app.config import Settings
from app.database import get_db_session
from app.main import app, create_app
from app.routes.notes import get_correction_pipeline
from app.services.correction_pipeline import CorrectionPipeline

CATT_RESPONSE = b'[{"code":1,"pos":19,"row":0,"col":19,"len":4,"word":"catt","s":["cat"]}]'


@pytest.fixture
def override_db(mock_db_session):
    async def _session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _session
    return mock_db_session


@pytest.fixture
def use_speller(speller_responder):
    """Route the app's correction pipeline through a mocked speller handler."""

    def _install(handler):
        speller = speller_responder(handler)
        pipeline = CorrectionPipeline(speller)
        app.dependency_overrides[get_correction_pipeline] = lambda: pipeline
        return speller

    return _install


class TestAddNote:

    @pytest.mark.asyncio
    async def test_creates_corrected_note(self, test_client, override_db, use_speller, valid_auth):
        use_speller(lambda request: httpx.Response(200, content=CATT_RESPONSE))

        response = await test_client.post(
            "/add-note",
            json={"user_id": 1, "content": "I have a dog and a catt"},
            headers=valid_auth,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["content"] == "I have a dog and a cat"
        assert body["user_id"] == 1
        assert body["is_corrected"] is True
        assert "X-Request-ID" in response.headers
        override_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_credentials(self, test_client, override_db, use_speller):
        speller = use_speller(lambda request: httpx.Response(200, content=b"[]"))

        response = await test_client.post("/add-note", json={"user_id": 1, "content": "hi"})

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Basic"
        assert response.json()["message"] == "Invalid user credentials"
        assert speller.requests == []

    @pytest.mark.asyncio
    async def test_wrong_credentials(self, test_client, override_db, use_speller, valid_auth):
        denied = MagicMock()
        denied.scalar.return_value = False
        override_db.execute = AsyncMock(return_value=denied)
        use_speller(lambda request: httpx.Response(200, content=b"[]"))

        response = await test_client.post(
            "/add-note", json={"user_id": 2, "content": "hi"}, headers=valid_auth
        )

        assert response.status_code == 401
        assert override_db.added == []

    @pytest.mark.asyncio
    async def test_non_json_content_type(self, test_client, override_db, use_speller, valid_auth):
        use_speller(lambda request: httpx.Response(200, content=b"[]"))

        response = await test_client.post(
            "/add-note",
            content=b"user_id=1&content=hi",
            headers={**valid_auth, "Content-Type": "text/plain"},
        )

        assert response.status_code == 415
        assert response.json()["error"] == "unsupported_media_type"

    @pytest.mark.asyncio
    async def test_missing_content_field(self, test_client, override_db, use_speller, valid_auth):
        use_speller(lambda request: httpx.Response(200, content=b"[]"))

        response = await test_client.post("/add-note", json={"user_id": 1}, headers=valid_auth)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_speller_error_status_rejects_note(
        self, test_client, override_db, use_speller, valid_auth
    ):
        use_speller(lambda request: httpx.Response(500, text="internal"))

        response = await test_client.post(
            "/add-note", json={"user_id": 1, "content": "catt"}, headers=valid_auth
        )

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "speller_unavailable"
        assert body["details"] == {"kind": "service", "status_code": 500}
        assert override_db.added == []

    @pytest.mark.asyncio
    async def test_unreadable_speller_body_rejects_note(
        self, test_client, override_db, use_speller, valid_auth
    ):
        use_speller(lambda request: httpx.Response(200, content=b"not json"))

        response = await test_client.post(
            "/add-note", json={"user_id": 1, "content": "catt"}, headers=valid_auth
        )

        assert response.status_code == 502
        assert response.json()["details"]["kind"] == "decode"

    @pytest.mark.asyncio
    async def test_empty_content_stored_without_speller_call(
        self, test_client, override_db, use_speller, valid_auth
    ):
        speller = use_speller(lambda request: httpx.Response(500))

        response = await test_client.post(
            "/add-note", json={"user_id": 1, "content": ""}, headers=valid_auth
        )

        assert response.status_code == 201
        assert response.json()["content"] == ""
        assert speller.requests == []


class TestListNotes:

    @pytest.mark.asyncio
    async def test_lists_user_notes(self, test_client, override_db, valid_auth):
        allowed = MagicMock()
        allowed.scalar.return_value = True

        note = MagicMock()
        note.id = 7
        note.user_id = 1
        note.content = "I have a dog and a cat"
        note.is_corrected = True
        note.created_at = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        rows = MagicMock()
        rows.scalars.return_value.all.return_value = [note]

        override_db.execute = AsyncMock(side_effect=[allowed, rows])

        response = await test_client.get("/notes", params={"user_id": 1}, headers=valid_auth)

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        assert response.json()[0]["id"] == 7

    @pytest.mark.asyncio
    async def test_non_numeric_user_id(self, test_client, override_db, valid_auth):
        response = await test_client.get("/notes", params={"user_id": "abc"}, headers=valid_auth)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_user_id(self, test_client, override_db, valid_auth):
        response = await test_client.get("/notes", headers=valid_auth)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_credentials(self, test_client, override_db):
        response = await test_client.get("/notes", params={"user_id": 1})
        assert response.status_code == 401


class _DownEngine:
    def connect(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestHealth:

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_down(
        self, test_client, speller_responder, monkeypatch
    ):
        monkeypatch.setattr("app.routes.health.engine", _DownEngine())
        speller = speller_responder(lambda request: httpx.Response(200, content=b"[]"))
        monkeypatch.setattr(app.state, "correction_pipeline", CorrectionPipeline(speller))

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"
        assert body["speller"] == "available"

    @pytest.mark.asyncio
    async def test_speller_down_reported(self, test_client, speller_responder, monkeypatch):
        monkeypatch.setattr("app.routes.health.engine", _DownEngine())
        speller = speller_responder(lambda request: httpx.Response(503))
        monkeypatch.setattr(app.state, "correction_pipeline", CorrectionPipeline(speller))

        response = await test_client.get("/health")

        assert response.json()["speller"] == "unavailable"


class TestAppConfiguration:
    """Policy and pipeline come from the Settings passed to create_app()."""

    @staticmethod
    def build_app(mock_db_session, speller, **overrides):
        config = Settings(**overrides)
        configured = create_app(config)

        async def _session():
            yield mock_db_session

        configured.dependency_overrides[get_db_session] = _session
        configured.state.correction_pipeline = CorrectionPipeline(speller)
        return configured

    @pytest.mark.asyncio
    async def test_store_uncorrected_policy_from_config(
        self, mock_db_session, speller_responder, valid_auth
    ):
        speller = speller_responder(lambda request: httpx.Response(500))
        configured = self.build_app(
            mock_db_session, speller, correction_failure_policy="store_uncorrected"
        )

        async with AsyncClient(
            transport=ASGITransport(app=configured), base_url="http://test"
        ) as client:
            response = await client.post(
                "/add-note",
                json={"user_id": 1, "content": "I have a dog and a catt"},
                headers=valid_auth,
            )

        assert response.status_code == 201
        body = response.json()
        assert body["content"] == "I have a dog and a catt"
        assert body["is_corrected"] is False
        assert mock_db_session.added[0].is_corrected is False

    @pytest.mark.asyncio
    async def test_reject_policy_from_config(
        self, mock_db_session, speller_responder, valid_auth
    ):
        speller = speller_responder(lambda request: httpx.Response(500))
        configured = self.build_app(mock_db_session, speller, correction_failure_policy="reject")

        async with AsyncClient(
            transport=ASGITransport(app=configured), base_url="http://test"
        ) as client:
            response = await client.post(
                "/add-note", json={"user_id": 1, "content": "catt"}, headers=valid_auth
            )

        assert response.status_code == 503
        assert mock_db_session.added == []

    def test_state_carries_config(self):
        config = Settings(correction_failure_policy="store_uncorrected", speller_timeout=1.5)
        configured = create_app(config)

        assert configured.state.settings is config
        assert configured.state.correction_failure_policy == "store_uncorrected"
        assert configured.state.correction_pipeline.speller.timeout == 1.5
