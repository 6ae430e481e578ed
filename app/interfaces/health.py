"""
Health check router.

Liveness/readiness probe. Reports the application version and whether
the purchase database answers a trivial query. No business logic.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.interfaces.copytrade.dependencies import get_engine
from app.interfaces.copytrade.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status, version and database reachability.",
)
def health_check(engine: Engine = Depends(get_engine)) -> HealthResponse:
    """Return current application health status."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Health check: database unreachable (%s)", type(exc).__name__)
        return HealthResponse(status="degraded", version=settings.version, database="unavailable")
    return HealthResponse(status="ok", version=settings.version, database="ok")
