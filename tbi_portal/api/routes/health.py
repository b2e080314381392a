"""Health Routes — liveness and database readiness for the container platform."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from tbi_portal import __version__
from tbi_portal.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def liveness():
    return {"status": "healthy", "service": "tbi-portal-api", "version": __version__}


@router.get("/ready")
async def readiness():
    """503 until the database answers."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": {"database": "unavailable"}},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
