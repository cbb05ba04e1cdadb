"""
Health Check Endpoints

Liveness and readiness probes.
"""

from datetime import datetime, timezone
from typing import Dict, Any
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from destinations.api.deps import get_container
from destinations.core.container import AppContainer

router = APIRouter(tags=["health"])


@router.get("/health")
@router.get("/healthz")
async def health_check(container: AppContainer = Depends(get_container)) -> Dict[str, Any]:
    """Basic liveness check."""
    settings = container.settings
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/status")
async def detailed_status(container: AppContainer = Depends(get_container)):
    """Readiness check covering the database and the job workers."""
    database_ok = await container.db_manager.health_check()
    workers_ok = container.job_tracker.is_running
    healthy = database_ok and workers_ok

    body = {
        "status": "ok" if healthy else "degraded",
        "services": {
            "database": "ok" if database_ok else "unavailable",
            "job_workers": "ok" if workers_ok else "stopped",
        },
        "jobs": container.job_tracker.stats(),
        "queries": container.db_manager.query_monitor.get_stats(),
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
