"""
SpellNote Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐  │
    │  │POST /add-note│ │ GET /notes  │ │ GET /health  │  │
    │  └──────────────┘ └─────────────┘ └──────────────┘  │
    │                                                     │
    │  app.state: settings, correction_pipeline, policy   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config validation → CREATE TABLE IF NOT EXISTS
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.config import Settings, settings
from app.database import create_tables, dispose_engine
from app.exceptions import (
    AuthenticationError,
    CorrectionError,
    DatabaseError,
    DecodeFailure,
    MalformedCandidate,
    SpellNoteError,
    UnsupportedMediaTypeError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from app.routes import health, notes
from app.services.correction_pipeline import CorrectionPipeline

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings = settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s

    Handlers:
        - stdout, always
        - append-mode file at config.log_file, when set
    Both carry RequestIDLogFilter so `request_id` is always defined.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s"

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
    for handler in handlers:
        handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    config: Settings = app.state.settings
    setup_logging(config)
    logger.info("=" * 60)
    logger.info("SpellNote Backend %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if config.db_create_tables:
        try:
            await create_tables()
        except (SQLAlchemyError, OSError) as e:
            # The server still starts; /health reports the database as down
            logger.error("Could not create database tables: %s", str(e))

    logger.info("Spell checker: %s (timeout %.1fs)", config.speller_api_url, config.speller_timeout)
    logger.info("Correction failure policy: %s", config.correction_failure_policy)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SpellNote Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _correction_status(exc: CorrectionError) -> int:
    """502 when the speller answered with garbage, 503 when it did not answer usefully."""
    if isinstance(exc, (DecodeFailure, MalformedCandidate)):
        return 502
    return 503


def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler map:
        RequestValidationError     → 400 Bad Request
        AuthenticationError        → 401 Unauthorized
        UnsupportedMediaTypeError  → 415 Unsupported Media Type
        TransportFailure           → 503 Service Unavailable
        ServiceFailure             → 503 Service Unavailable
        DecodeFailure              → 502 Bad Gateway
        MalformedCandidate         → 502 Bad Gateway
        DatabaseError              → 500 Internal Server Error
        SpellNoteError (base)      → 500 Internal Server Error
        Exception (fallback)       → 500 Internal Server Error

    Responses never include stack traces or SQL; those are logged.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("Request validation failed: %s", errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Invalid request", {"errors": errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Basic"},
        )

    @app.exception_handler(UnsupportedMediaTypeError)
    async def handle_unsupported_media_type(request: Request, exc: UnsupportedMediaTypeError):
        return JSONResponse(
            status_code=415,
            content=_error_body("unsupported_media_type", exc.message, exc.context),
        )

    @app.exception_handler(CorrectionError)
    async def handle_correction_error(request: Request, exc: CorrectionError):
        status_code = _correction_status(exc)
        error = "speller_bad_response" if status_code == 502 else "speller_unavailable"
        # Only the classification is returned; bodies and request ids stay in logs
        details = {
            key: exc.context[key]
            for key in ("kind", "status_code", "timed_out", "reason", "index")
            if key in exc.context
        }
        logger.error("Correction failed (%s): %s", exc.kind, exc.message)
        return JSONResponse(
            status_code=status_code,
            content=_error_body(error, exc.message, details),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(SpellNoteError)
    async def handle_application_error(request: Request, exc: SpellNoteError):
        logger.error("Application error: %s", exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unexpected error: %s", str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Settings = settings) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="SpellNote API",
        description=(
            "Minimal note-taking service. Submitted notes are spell-checked by an "
            "external service and stored with the corrected text."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Everything a request needs from configuration is read from app.state
    app.state.settings = config
    app.state.correction_pipeline = CorrectionPipeline.from_settings(config)
    app.state.correction_failure_policy = config.correction_failure_policy

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
