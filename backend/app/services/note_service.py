"""
SpellNote Backend - Note Service (Business Logic Orchestrator)
================================================================

What:  Coordinates correct → persist for new notes, and per-user listing.
How:   Composes CorrectionPipeline with database operations.
Who:   Called by the note route handlers after authentication.

Orchestration Flow (POST /add-note):
    ┌──────────┐    ┌──────────────┐    ┌──────────────────┐    ┌──────────┐
    │  Route   │───▶│ AuthService  │───▶│CorrectionPipeline│───▶│  Store   │
    │          │    │ (credentials)│    │ (speller)        │    │  (DB)    │
    └──────────┘    └──────────────┘    └──────────────────┘    └──────────┘

Correction failure policy (chosen by the caller, default "reject"):
    reject:            CorrectionError propagates, nothing is stored
    store_uncorrected: the submitted text is stored with is_corrected=False
                       and a WARNING is logged

NoteService is stateless: the session, pipeline and policy arrive per call.
"""

import logging
from typing import List

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import CorrectionError, DatabaseError
from app.models.note import Note
from app.schemas.note import NoteCreate, NoteResponse
from app.services.correction_pipeline import CorrectionPipeline

logger = logging.getLogger(__name__)

STORE_UNCORRECTED = "store_uncorrected"


class NoteService:
    """
    Business logic layer for note operations.

    Responsibilities:
        - create_note(): correct and persist one note
        - list_user_notes(): every note of one user, oldest first
    """

    async def create_note(
        self,
        db: AsyncSession,
        payload: NoteCreate,
        pipeline: CorrectionPipeline,
        failure_policy: str = "reject",
    ) -> NoteResponse:
        """
        Correct the submitted content and store the note.

        Args:
            db: Async database session (injected by FastAPI)
            payload: Validated request body
            pipeline: The correction pipeline to run the content through
            failure_policy: "reject" or "store_uncorrected"

        Returns:
            NoteResponse for the stored row.

        Raises:
            CorrectionError subclasses: correction failed and policy is "reject"
            DatabaseError: the insert failed
        """
        is_corrected = True
        try:
            content = await pipeline.correct(payload.content)
        except CorrectionError as e:
            if failure_policy != STORE_UNCORRECTED:
                logger.warning(
                    "Rejecting note for user %d: correction failed (%s): %s",
                    payload.user_id,
                    e.kind,
                    e.message,
                )
                raise
            logger.warning(
                "Storing note for user %d UNCORRECTED: correction failed (%s): %s",
                payload.user_id,
                e.kind,
                e.message,
            )
            content = payload.content
            is_corrected = False

        note = Note(user_id=payload.user_id, content=content, is_corrected=is_corrected)
        try:
            db.add(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to insert note for user %d: %s", payload.user_id, e)
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"user_id": payload.user_id, "error_type": type(e).__name__},
            )

        logger.info(
            "Note %s created for user %d (%d chars, corrected=%s)",
            note.id,
            note.user_id,
            len(content),
            is_corrected,
        )
        return NoteResponse.model_validate(note)

    async def list_user_notes(self, db: AsyncSession, user_id: int) -> List[NoteResponse]:
        """
        Return all notes owned by `user_id`, oldest first.

        Query plan:
            SELECT ... FROM notes WHERE user_id = :user_id ORDER BY created_at, id
            → served by idx_notes_user_id_created_at

        Raises:
            DatabaseError: Query execution failed
        """
        query = (
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(asc(Note.created_at), asc(Note.id))
        )
        try:
            result = await db.execute(query)
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes of user %d: %s", user_id, e)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        return [NoteResponse.model_validate(note) for note in notes]


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
