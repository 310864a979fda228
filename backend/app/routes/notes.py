"""
SpellNote Backend - Notes Route Handlers
==========================================

What:  GET /notes?user_id= (list) and POST /add-note (create).
How:   Authenticates the Basic credentials against the user in the request,
       then delegates to NoteService.
Who:   Called by note-taking clients.

Both routes require `Authorization: Basic base64(username:password)` for
the user named by `user_id`. POST /add-note also requires
`Content-Type: application/json`.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import UnsupportedMediaTypeError
from app.schemas.note import ErrorResponse, NoteCreate, NoteResponse
from app.services.auth_service import auth_service
from app.services.correction_pipeline import CorrectionPipeline
from app.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

# auto_error=False: a missing header becomes our AuthenticationError (401 JSON)
basic_auth = HTTPBasic(auto_error=False)


# ── Dependencies ──────────────────────────────────────────────────────────

def get_correction_pipeline(request: Request) -> CorrectionPipeline:
    """The pipeline built once in create_app() and kept on app.state."""
    return request.app.state.correction_pipeline


def get_failure_policy(request: Request) -> str:
    """The correction failure policy chosen by create_app() from its config."""
    return request.app.state.correction_failure_policy


def require_json(request: Request) -> None:
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() != "application/json":
        raise UnsupportedMediaTypeError(content_type=content_type or None)


# ── Routes ────────────────────────────────────────────────────────────────

@router.get(
    "/notes",
    response_model=List[NoteResponse],
    responses={
        200: {"description": "All notes of the user, oldest first"},
        400: {"description": "Missing or invalid user_id", "model": ErrorResponse},
        401: {"description": "Invalid user credentials", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List a user's notes",
)
async def list_notes(
    response: Response,
    user_id: int = Query(..., ge=1, description="Owner whose notes to return"),
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    await auth_service.verify_user(db, user_id, credentials)

    notes = await note_service.list_user_notes(db, user_id)

    response.headers["X-Total-Count"] = str(len(notes))
    return notes


@router.post(
    "/add-note",
    status_code=201,
    response_model=NoteResponse,
    dependencies=[Depends(require_json)],
    responses={
        201: {"description": "Note corrected and stored", "model": NoteResponse},
        400: {"description": "Invalid request body", "model": ErrorResponse},
        401: {"description": "Invalid user credentials", "model": ErrorResponse},
        415: {"description": "Content-Type is not application/json", "model": ErrorResponse},
        502: {"description": "Spell checker returned an unusable response", "model": ErrorResponse},
        503: {"description": "Spell checker unreachable or failing", "model": ErrorResponse},
    },
    summary="Correct and store a note",
    description=(
        "Runs the note content through the spell checking service and stores the "
        "corrected text. When correction fails the note is rejected, unless the "
        "server runs with CORRECTION_FAILURE_POLICY=store_uncorrected."
    ),
)
async def add_note(
    payload: NoteCreate,
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    db: AsyncSession = Depends(get_db_session),
    pipeline: CorrectionPipeline = Depends(get_correction_pipeline),
    failure_policy: str = Depends(get_failure_policy),
) -> NoteResponse:
    await auth_service.verify_user(db, payload.user_id, credentials)

    logger.info(
        "Received note: user_id=%d, %d chars", payload.user_id, len(payload.content)
    )

    return await note_service.create_note(
        db=db,
        payload=payload,
        pipeline=pipeline,
        failure_policy=failure_policy,
    )
