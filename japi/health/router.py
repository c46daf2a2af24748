"""Probes for load balancers and orchestrators.

``/health/live`` only says the process answers. ``/health/ready`` also reports
whether the Cassandra-backed services were wired at startup; the application
keeps serving (with 503 on the comment routes) when they were not.
"""

from fastapi import APIRouter, Request

from japi.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


def services_ready(request: Request) -> bool:
    state = request.app.state
    return bool(
        getattr(state, "comment_service", None)
        and getattr(state, "api_key_service", None)
    )


@router.get("")
async def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/live")
async def liveness() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    settings = get_settings()
    return {
        "status": "ready",
        "environment": settings.environment,
        "debug": settings.debug,
        "database": services_ready(request),
    }
