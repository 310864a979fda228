"""
SpellNote Backend - Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the HTTP contract of the notes API.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate OpenAPI documentation.
Who:   Used by route handlers as body/return types and by NoteService.

Schemas are separate from the SQLAlchemy models so the API never exposes
columns it does not mean to (user passwords, internal indexes).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """
    What:  Body of POST /add-note.

    Example:
        {"user_id": 1, "content": "I have a dog and a catt"}
    """
    user_id: int = Field(ge=1, description="Owner of the note; must match the Basic credentials")
    content: str = Field(max_length=10_000, description="Free text to correct and store")

    @field_validator("content")
    @classmethod
    def reject_nul(cls, v: str) -> str:
        if "\x00" in v:
            raise ValueError("content must not contain NUL characters")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  A stored note.
    Who:   Returned by POST /add-note and as items of GET /notes.
    """
    id: int = Field(description="Note identifier")
    user_id: int = Field(description="Owner of the note")
    content: str = Field(description="Stored text (corrected unless is_corrected is false)")
    is_corrected: bool = Field(description="Whether the content went through spelling correction")
    created_at: datetime = Field(description="When the note was created (UTC ISO 8601)")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "speller_unavailable",
            "message": "Spell checking service returned HTTP 500",
            "details": {"kind": "service", "status_code": 500},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """What:  Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    speller: str = Field(description="Spell checker status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
