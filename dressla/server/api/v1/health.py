"""
Health Check Endpoints.

Liveness, database readiness and version endpoints used by the load balancer
and deployment checks.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dressla import __version__
from dressla.core.database import get_session
from dressla.core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check that the API process is up.",
    response_description="Status object.",
)
async def health_check():
    return {"status": "ok"}


@router.get(
    "/health/ready",
    summary="Readiness Check",
    description="Check that the database answers a trivial query.",
    responses={503: {"description": "Database unreachable"}},
)
async def readiness_check(session: AsyncSession = Depends(get_session)):
    """
    Readiness check.

    Runs ``SELECT 1`` on a pooled connection. Returns 503 with
    ``database: "unavailable"`` when the query fails.
    """
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "degraded", "database": "unavailable"})
    return {"status": "ok", "database": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    return {"version": __version__, "schema_version": "v1"}
