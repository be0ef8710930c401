# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# /health        process is up, no dependencies touched
# /health/ready  users table and storage bucket reachable, plus which
#                optional providers are configured
# /health/live   liveness for container restarts
# =============================================================================

from datetime import datetime, timezone
from typing import Annotated, Callable

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from supabase import Client

from app import __version__
from app.config import settings
from app.dependencies import get_supabase_client

router = APIRouter()


class HealthResponse(BaseModel):
    """Status payload shared by all three endpoints."""
    status: str
    timestamp: str
    environment: str | None = None
    version: str | None = None
    checks: dict[str, str] = Field(default_factory=dict)
    providers: dict[str, bool] = Field(default_factory=dict)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _readiness_checks(client: Client) -> dict[str, Callable[[], object]]:
    return {
        "database": lambda: client.table("users").select("id").limit(1).execute(),
        "storage": lambda: client.storage.get_bucket(settings.STORAGE_BUCKET),
    }


@router.get("/health", response_model=HealthResponse, response_model_exclude_defaults=True)
async def health_check():
    """Basic health status for load balancers."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=__version__,
    )


@router.get("/health/ready", response_model=HealthResponse, response_model_exclude_defaults=True)
async def readiness_check(client: Annotated[Client, Depends(get_supabase_client)]):
    """
    Readiness check endpoint.

    Degraded when the database or storage bucket cannot be reached. Missing
    optional providers (email, LLM, embeddings, Replicate) are reported but
    never make the service unready; the features using them fail on call.
    """
    checks: dict[str, str] = {}
    for name, check in _readiness_checks(client).items():
        try:
            check()
            checks[name] = "healthy"
        except Exception as e:
            checks[name] = f"unhealthy: {str(e)[:50]}"

    return HealthResponse(
        status="ready" if all(v == "healthy" for v in checks.values()) else "degraded",
        timestamp=_now(),
        checks=checks,
        providers={
            "postmark": settings.has_postmark,
            "llm": settings.has_llm,
            "cloudflare": settings.has_cloudflare,
            "replicate": settings.has_replicate,
        },
    )


@router.get("/health/live", response_model=HealthResponse, response_model_exclude_defaults=True)
async def liveness_check():
    return HealthResponse(status="alive", timestamp=_now())
