"""
Health check endpoints with dependency monitoring

Provides two endpoints:
- GET /api/health - Basic health check
- GET /api/health/dependencies - Supabase database and storage status
"""
import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from supportdesk import __version__
from supportdesk.config import get_settings
from supportdesk.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Application start time for uptime calculation
APP_START_TIME = time.time()

CHECK_TIMEOUT_SECONDS = 5.0

# Cache for dependency check results
_dependency_cache: Optional["DependencyHealth"] = None
_cache_timestamp: float = 0.0
CACHE_TTL_SECONDS = 30.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """Basic health check response"""
    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")
    uptime_seconds: float = Field(..., description="Application uptime in seconds")


class DependencyStatus(BaseModel):
    """Status of a single dependency"""
    name: str = Field(..., description="Dependency name")
    status: str = Field(..., description="Status: healthy, degraded, unhealthy")
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    error_message: Optional[str] = Field(None, description="Error message if unhealthy")


class DependencyHealth(BaseModel):
    """Dependency health check response"""
    overall_status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    dependencies: Dict[str, DependencyStatus] = Field(..., description="Individual dependency statuses")
    checked_at: datetime = Field(default_factory=_utcnow, description="Check timestamp")


# ============================================================================
# Dependency Check Functions
# ============================================================================

async def _timed_check(name: str, probe, failure_status: str) -> DependencyStatus:
    """Run a blocking probe in a thread with a timeout and report its latency"""
    start = time.time()
    try:
        await asyncio.wait_for(asyncio.to_thread(probe), timeout=CHECK_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(f"{name} health check timed out")
        return DependencyStatus(
            name=name,
            status=failure_status,
            error_message=f"Request timed out after {CHECK_TIMEOUT_SECONDS:g} seconds"
        )
    except Exception as e:
        logger.error(f"{name} health check failed: {e}")
        return DependencyStatus(name=name, status=failure_status, error_message=str(e))

    latency = (time.time() - start) * 1000
    return DependencyStatus(name=name, status="healthy", latency_ms=round(latency, 2))


async def check_supabase(client: Any) -> DependencyStatus:
    """Check the tickets table answers a trivial query"""
    if client is None:
        return DependencyStatus(name="supabase", status="unhealthy", error_message="Supabase not configured")
    return await _timed_check(
        "supabase",
        lambda: client.table("tickets").select("id").limit(1).execute(),
        failure_status="unhealthy"
    )


async def check_storage(client: Any) -> DependencyStatus:
    """Check the attachments bucket exists"""
    if client is None:
        return DependencyStatus(name="storage", status="degraded", error_message="Supabase not configured")
    return await _timed_check(
        "storage",
        lambda: client.storage.get_bucket(settings.attachments_bucket),
        failure_status="degraded"
    )


def determine_overall_status(dependencies: Dict[str, DependencyStatus]) -> str:
    """
    Determine overall system status based on dependency health

    Critical services: Supabase database
    Non-critical services: attachment storage
    """
    if dependencies.get("supabase") and dependencies["supabase"].status == "unhealthy":
        return "unhealthy"

    if any(dep.status in ("degraded", "unhealthy") for dep in dependencies.values()):
        return "degraded"

    return "healthy"


# ============================================================================
# API Endpoints
# ============================================================================

@router.get("", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def basic_health_check() -> HealthResponse:
    """
    Basic health check endpoint

    Always returns 200 OK; does not check external dependencies.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - APP_START_TIME, 2)
    )


@router.get("/dependencies", response_model=DependencyHealth, status_code=status.HTTP_200_OK)
async def dependency_health_check(request: Request) -> DependencyHealth:
    """
    Dependency health check endpoint

    Results are cached for 30 seconds. Always returns 200 OK with details.
    """
    global _dependency_cache, _cache_timestamp

    current_time = time.time()
    if _dependency_cache and (current_time - _cache_timestamp) < CACHE_TTL_SECONDS:
        logger.debug("Returning cached dependency health check results")
        return _dependency_cache

    client = getattr(request.app.state, "supabase", None)
    supabase_status, storage_status = await asyncio.gather(
        check_supabase(client),
        check_storage(client)
    )
    dependencies = {"supabase": supabase_status, "storage": storage_status}

    result = DependencyHealth(
        overall_status=determine_overall_status(dependencies),
        dependencies=dependencies
    )
    _dependency_cache = result
    _cache_timestamp = current_time
    return result
