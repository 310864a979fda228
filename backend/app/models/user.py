"""
SpellNote Backend - User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table: the accounts allowed to write notes.
Who:   Read by AuthService.verify_user(); never written by the API.

Passwords are stored and compared as given. The service trusts a small
internal user base and performs one equality check per request.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login name sent in the Basic Authorization header",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Compared verbatim with the Basic Authorization password",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
