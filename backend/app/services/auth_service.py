"""
SpellNote Backend - Credential Check
======================================

What:  Confirms that the Basic credentials on a request belong to the user
       the request acts on.
How:   One EXISTS query over users(id, username, password).
Who:   Called by both note routes before any other work.
"""

import logging
from typing import Optional

from fastapi.security import HTTPBasicCredentials
from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, DatabaseError
from app.models.user import User

logger = logging.getLogger(__name__)


class AuthService:

    async def verify_user(
        self,
        db: AsyncSession,
        user_id: int,
        credentials: Optional[HTTPBasicCredentials],
    ) -> None:
        """
        Raise unless `credentials` match the stored username/password of `user_id`.

        Raises:
            AuthenticationError: No/invalid Basic header, or no matching user row.
            DatabaseError: The lookup itself failed.
        """
        if credentials is None:
            raise AuthenticationError(context={"user_id": user_id, "reason": "missing"})

        query = select(
            exists().where(
                User.id == user_id,
                User.username == credentials.username,
                User.password == credentials.password,
            )
        )

        try:
            result = await db.execute(query)
            is_valid = bool(result.scalar())
        except SQLAlchemyError as e:
            logger.error("Credential lookup failed for user %d: %s", user_id, e)
            raise DatabaseError(context={"user_id": user_id, "error_type": type(e).__name__})

        if not is_valid:
            logger.info("Rejected credentials for user %d", user_id)
            raise AuthenticationError(context={"user_id": user_id, "reason": "mismatch"})


auth_service = AuthService()
