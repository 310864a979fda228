"""
SpellNote Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and container probes.
How:   Checks the database (SELECT 1) and the spell checker (one tiny
       check request) and returns an aggregate status.

Status levels:
    - healthy:   Database and spell checker reachable
    - degraded:  Spell checker unreachable (notes are rejected or stored
                 uncorrected, depending on policy)
    - unhealthy: Database unreachable
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.database import engine
from app.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db_status = "connected"
    speller_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Spell Checker ───────────────────────────────────────────────
    pipeline = request.app.state.correction_pipeline
    if not await pipeline.speller.health_check():
        speller_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        speller=speller_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
