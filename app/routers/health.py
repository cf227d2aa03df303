"""
Health Check Router - LeadGen Maturity Assessment
app/routers/health.py

Returns service status, version and dependency checks. Dependencies that
are not configured are reported but do not degrade the service; the
results cache is optional.
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Dict
from datetime import datetime, timezone
import logging

import redis
from snowflake.connector.errors import Error as SnowflakeError

from app.config import settings
from app.services.cache import get_cache
from app.services.snowflake import get_snowflake_connection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])



#  Schemas


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]



#  Dependency Health Checks


def _short(e: Exception) -> str:
    msg = str(e)
    return msg[:100] + "..." if len(msg) > 100 else msg


async def check_snowflake() -> str:
    """Check Snowflake connection health."""
    missing = [
        name for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD")
        if not getattr(settings, name)
    ]
    if missing:
        return f"not configured: Missing {', '.join(missing)}"

    try:
        conn = get_snowflake_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT CURRENT_USER()")
            result = cursor.fetchone()
            cursor.close()
        finally:
            conn.close()
        return f"healthy (User: {result[0]})"
    except SnowflakeError as e:
        logger.warning("snowflake_health_failed", extra={"error": _short(e)})
        return f"unhealthy: {_short(e)}"


async def check_redis() -> str:
    """Check Redis connection health (cache is optional)."""
    cache = get_cache()
    if not cache:
        return "unavailable: caching disabled"
    try:
        cache.ping()
        return "healthy"
    except redis.RedisError as e:
        return f"unavailable: {_short(e)}"


def check_collaborators() -> Dict[str, str]:
    return {
        "narrative_generator": "configured" if settings.narrative_enabled else "not configured (fallback summaries)",
        "hubspot": "configured" if settings.hubspot_enabled else "not configured",
    }



#  Main Health Check Route


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "Service healthy"},
        503: {"description": "A configured dependency is unhealthy"},
    },
    summary="Health check",
    description="Service status, version and dependency checks.",
)
async def health_check():
    """Check health of all dependencies."""
    dependencies = {
        "snowflake": await check_snowflake(),
        "redis": await check_redis(),
        **check_collaborators(),
    }

    degraded = any(v.startswith("unhealthy") for v in dependencies.values())

    response = HealthResponse(
        status="degraded" if degraded else "healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies=dependencies,
    )

    if not degraded:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )



#  Individual Service Health Checks


@router.get("/health/snowflake", summary="Check Snowflake connection")
async def health_snowflake():
    result = await check_snowflake()
    return {
        "service": "snowflake",
        "status": result,
        "is_healthy": result.startswith("healthy"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/redis", summary="Check Redis connection")
async def health_redis():
    result = await check_redis()
    return {
        "service": "redis",
        "status": result,
        "is_healthy": result.startswith("healthy"),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
