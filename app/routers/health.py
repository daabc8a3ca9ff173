# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from app.config import settings
from app.dependencies import MetadataStoreDep, ObjectStoreDep

router = APIRouter()

VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    metadata_store: str
    object_store: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(object_store: ObjectStoreDep, metadata_store: MetadataStoreDep):
    """
    Readiness check endpoint.

    Checks that the metadata table and the storage bucket are reachable.
    """
    checks = ChecksResponse(metadata_store="unknown", object_store="unknown")

    try:
        await run_in_threadpool(metadata_store.count)
        checks.metadata_store = "healthy"
    except Exception as e:
        checks.metadata_store = f"unhealthy: {str(e)[:50]}"

    try:
        await run_in_threadpool(object_store.list_names)
        checks.object_store = "healthy"
    except Exception as e:
        checks.object_store = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.metadata_store == "healthy" and checks.object_store == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )
