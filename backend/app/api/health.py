"""
Health check routes.
Probes for load-balancer liveness/readiness. The catalog lives in memory,
so serving does not depend on the listing store once startup is done.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional
import time

from app.db.database import get_db, ping
from app.core.rate_limiting import limiter, HEALTH_LIMIT

router = APIRouter(prefix="/health", tags=["health"])

_STARTUP_TIME = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _uptime() -> int:
    return int(time.time() - _STARTUP_TIME)


@router.get("/")
@limiter.limit(HEALTH_LIMIT)
async def health_check(request: Request):
    """
    Catalog size and source, uptime.
    Degraded while no catalog is loaded or the loaded catalog is empty.
    """
    catalog = getattr(request.app.state, "catalog", None)
    listings = len(catalog) if catalog is not None else 0
    return {
        "status": "healthy" if listings else "degraded",
        "listings": listings,
        "catalog_source": catalog.source if catalog is not None else "none",
        "uptime_seconds": _uptime(),
        "timestamp": _now(),
    }


@router.get("/ready")
@limiter.limit(HEALTH_LIMIT)
def readiness_check(request: Request, db: Optional[Session] = Depends(get_db)):
    """Ready once the catalog is loaded; also reports listing store connectivity."""
    catalog = getattr(request.app.state, "catalog", None)
    return {
        "ready": catalog is not None,
        "database": "available" if ping(db) else "unavailable",
        "timestamp": _now(),
    }


@router.get("/live")
async def liveness_check():
    """Liveness probe. Returns 200 if the process is serving."""
    return {"alive": True, "uptime_seconds": _uptime(), "timestamp": _now()}
