"""
Health check routes.
Probes for load-balancer and orchestrator readiness.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import time
import logging

from app.db.database import get_db
from app.db.models import utcnow
from app.db.repositories import PackageRepository
from app.core.rate_limiting import limiter, HEALTH_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

# Track startup time for uptime reporting
_STARTUP_TIME = time.time()


@router.get("/")
@limiter.limit(HEALTH_LIMIT)
async def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Check system health: database connectivity, catalogue size, uptime.
    Safe when db is None (graceful degradation).
    """
    uptime_s = int(time.time() - _STARTUP_TIME)
    health = {
        "status": "healthy",
        "database": "unavailable",
        "packages": 0,
        "uptime_seconds": uptime_s,
        "timestamp": utcnow().isoformat(),
    }

    if db is None:
        health["status"] = "degraded"
        health["database"] = "unavailable"
        return health

    try:
        result = PackageRepository(db).count()
        health["database"] = "available"
        health["packages"] = result or 0
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        health["status"] = "degraded"

    return health


@router.get("/ready")
@limiter.limit(HEALTH_LIMIT)
async def readiness_check(request: Request, db: Session = Depends(get_db)):
    """Returns 200 only when database is accessible, 503 otherwise. Safe when db is None."""
    if db is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "error": "database unavailable", "timestamp": utcnow().isoformat()},
        )
    try:
        db.execute(text("SELECT 1"))
        return {"ready": True, "timestamp": utcnow().isoformat()}
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {str(e)}")
        return JSONResponse(status_code=503, content={"ready": False, "error": str(e)})


@router.get("/live")
async def liveness_check():
    """Liveness probe. Returns 200 if service is running."""
    return {"alive": True, "uptime_seconds": int(time.time() - _STARTUP_TIME), "timestamp": utcnow().isoformat()}
