"""Health check endpoints for Addon Mirror.

Provides Kubernetes-compatible health probes:
- /health: Basic health check
- /health/ready: Readiness probe (is a complete snapshot being served?)

A snapshot missing some tracked repositories, or an empty snapshot
published because the first reload failed, is reported as degraded.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from addonmirror import __version__
from addonmirror.repos.store import RepositoryService
from gateway.api.deps import get_service

router = APIRouter(tags=["health"])


def check_snapshot(service: RepositoryService) -> Dict[str, Any]:
    """Describe the published snapshot and the last reload."""
    state = service.store.state()
    if state is None:
        return {"status": "unavailable"}

    snapshot = state.snapshot
    return {
        "status": "degraded" if service.is_degraded else "healthy",
        "generation": state.generation,
        "published_at": state.published_at.isoformat(),
        "tracked": len(service.repositories),
        **snapshot.summary(),
        "failed": [failure.to_dict() for failure in snapshot.failures],
        "last_error": service.last_error,
        "last_reload_at": service.last_reload_at.isoformat() if service.last_reload_at else None,
    }


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if the application is running.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
async def readiness_probe(service: RepositoryService = Depends(get_service)):
    """
    Readiness probe.

    Returns 200 when a snapshot with every tracked repository is published,
    503 otherwise.
    """
    check = check_snapshot(service)
    ready = check["status"] == "healthy"

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "degraded",
            "checks": {"snapshot": check},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
