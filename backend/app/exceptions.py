"""
SpellNote Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    SpellNoteError (base)
    ├── AuthenticationError          → 401 Unauthorized
    ├── UnsupportedMediaTypeError    → 415 Unsupported Media Type
    ├── DatabaseError                → 500 Internal Server Error
    └── CorrectionError              (spell-check pipeline failures)
        ├── TransportFailure         → 503 Service Unavailable
        ├── ServiceFailure           → 503 Service Unavailable
        ├── DecodeFailure            → 502 Bad Gateway
        └── MalformedCandidate       → 502 Bad Gateway

Request body and query validation is left to FastAPI (RequestValidationError → 400).

Correction failures are raised, never returned. Each subclass carries a
stable `kind` string so callers and API consumers can tell them apart
without isinstance chains.
"""

from typing import Any, Dict, Optional


class SpellNoteError(Exception):
    """
    Base exception for all SpellNote application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partly returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = dict(context or {})
        super().__init__(self.message)


class AuthenticationError(SpellNoteError):
    """
    Raised when the Basic credentials are missing, unparsable, or do not
    match the user the request acts on.

    HTTP:    401 Unauthorized (with WWW-Authenticate: Basic)

    The message never says which part of the check failed.
    """

    def __init__(
        self,
        message: str = "Invalid user credentials",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnsupportedMediaTypeError(SpellNoteError):
    """HTTP 415: the request body is not declared as application/json."""

    def __init__(
        self,
        content_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["content_type"] = content_type
        super().__init__(message="Content-Type must be application/json", context=ctx)


class DatabaseError(SpellNoteError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. Query details
    are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Correction Pipeline Failures
# ══════════════════════════════════════════════════════════════════════════


class CorrectionError(SpellNoteError):
    """
    Base for every failure of the text-correction pipeline.

    Callers catch this one type and branch on `kind` (or on the subclass)
    to decide between rejecting the note and storing it uncorrected.
    """

    kind = "correction"

    def __init__(
        self,
        message: str = "Text correction failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx.setdefault("kind", self.kind)
        super().__init__(message=message, context=ctx)


class TransportFailure(CorrectionError):
    """
    The request to the spell checker could not be built or delivered.

    Covers invalid endpoint URLs, DNS/connect/read errors and timeouts.

    Attributes:
        stage:     "request" when the request could not be constructed,
                   "send" when it was built but not delivered/answered.
        timed_out: True when the configured timeout elapsed.
    """

    kind = "transport"

    def __init__(
        self,
        message: str = "Could not reach the spell checking service",
        stage: str = "send",
        timed_out: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["stage"] = stage
        ctx["timed_out"] = timed_out
        super().__init__(message=message, context=ctx)
        self.stage = stage
        self.timed_out = timed_out


class ServiceFailure(CorrectionError):
    """The spell checker answered with a non-2xx HTTP status."""

    kind = "service"

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["status_code"] = status_code
        super().__init__(
            message=message or f"Spell checking service returned HTTP {status_code}",
            context=ctx,
        )
        self.status_code = status_code


class DecodeFailure(CorrectionError):
    """The spell checker's response body is not a well-formed candidate list."""

    kind = "decode"

    def __init__(
        self,
        message: str = "Spell checking service returned an unreadable response",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MalformedCandidate(CorrectionError):
    """
    One correction candidate cannot be applied to the text.

    Reasons: empty suggestion list, negative or out-of-range span,
    a position lower than its predecessor's, or a span overlapping
    its predecessor. `index` is the candidate's place in the response.
    """

    kind = "malformed_candidate"

    def __init__(
        self,
        reason: str,
        index: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = dict(context or {})
        ctx["reason"] = reason
        if index is not None:
            ctx["index"] = index
        message = f"Malformed correction candidate: {reason}"
        if index is not None:
            message = f"Malformed correction candidate #{index}: {reason}"
        super().__init__(message=message, context=ctx)
        self.reason = reason
        self.index = index
