"""Liveness and readiness probes."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from photoshelf import __version__
from photoshelf.api.deps import DBSession
from photoshelf.core.config import settings

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=Dict[str, Any],
    summary="Health Check",
    description="Check if the API service is running.",
)
async def health_check() -> Dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.APP_ENV,
        "version": __version__,
    }


@router.get(
    "/health/ready",
    response_model=Dict[str, Any],
    summary="Readiness Check",
    description="Check if the service can reach its database and upload directory.",
)
async def readiness_check(db: DBSession) -> Dict[str, Any]:
    """Report database connectivity and upload directory state.

    Returns:
        ``status`` is ``ready`` only when every check is healthy.
    """
    checks: Dict[str, Dict[str, str]] = {}

    try:
        (await db.execute(text("SELECT 1"))).scalar()
        checks["database"] = {"status": "healthy", "message": "Connected"}
    except SQLAlchemyError as e:
        checks["database"] = {"status": "unhealthy", "message": str(e)}

    upload_path = settings.upload_path
    if upload_path.is_dir():
        checks["storage"] = {"status": "healthy", "message": str(upload_path)}
    else:
        checks["storage"] = {"status": "unhealthy", "message": f"{upload_path} is missing"}

    ready = all(check["status"] == "healthy" for check in checks.values())
    return {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
