"""
SpellNote Backend - Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; created at startup by
       database.create_tables().
Who:   Used by NoteService for inserts and per-user listing.

Table Design:
    - Integer primary key, assigned by the database
    - user_id: owner, references users.id
    - content: the text as stored (corrected unless is_corrected is False)
    - is_corrected: False only when the note was stored under the
      store_uncorrected policy after a correction failure
    - created_at: UTC with timezone

    Index on (user_id, created_at):
        Serves the only read pattern, "all notes of one user".
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Note(Base):
    """
    A stored note.

    Lifecycle:
        1. POST /add-note authenticates the user
        2. Content goes through CorrectionPipeline
        3. Row is inserted with the corrected content (is_corrected=True),
           or with the submitted content (is_corrected=False) when the
           store_uncorrected policy absorbed a correction failure
        4. Rows are never updated or deleted by the API
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner of the note",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Note text after spelling correction",
    )

    is_corrected: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
        comment="False when stored without correction after a speller failure",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_user_id_created_at", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, user_id={self.user_id}, "
            f"is_corrected={self.is_corrected})>"
        )
