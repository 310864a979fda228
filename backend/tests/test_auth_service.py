"""
SpellNote Backend - AuthService Unit Tests
============================================

What we test:
    ✅ Matching credentials pass
    ✅ Missing credentials and mismatches raise AuthenticationError
    ✅ Lookup failure raises DatabaseError
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.security import HTTPBasicCredentials
from sqlalchemy.exc import OperationalError

from app.exceptions import AuthenticationError, DatabaseError
from app.services.auth_service import AuthService


class TestVerifyUser:

    def setup_method(self):
        self.service = AuthService()
        self.credentials = HTTPBasicCredentials(username="One", password="password")

    @pytest.mark.asyncio
    async def test_matching_credentials(self, mock_db_session):
        await self.service.verify_user(mock_db_session, 1, self.credentials)
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_credentials(self, mock_db_session):
        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.verify_user(mock_db_session, 1, None)

        assert exc_info.value.context["reason"] == "missing"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mismatched_credentials(self, mock_db_session):
        result = MagicMock()
        result.scalar.return_value = False
        mock_db_session.execute = AsyncMock(return_value=result)

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.verify_user(mock_db_session, 2, self.credentials)

        assert exc_info.value.message == "Invalid user credentials"

    @pytest.mark.asyncio
    async def test_lookup_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("refused"))
        )

        with pytest.raises(DatabaseError):
            await self.service.verify_user(mock_db_session, 1, self.credentials)
