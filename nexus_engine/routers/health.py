"""
Health Check Router - Nexus Intelligence Engine
nexus_engine/routers/health.py

Reports the state of the optional collaborators. Redis is only checked
when CACHE_ENABLED is set, using a set/get/delete round trip. The text
generator reports live or offline.
"""

from datetime import datetime, timezone
from typing import Dict

import redis
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from nexus_engine import __version__
from nexus_engine.config import get_settings
from nexus_engine.services.redis_cache import RedisCache

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]


HEALTH_CACHE_KEY = "health:check"


class CacheCheck(BaseModel):
    timestamp: datetime


async def check_redis() -> str:
    """Check Redis health with a set/get/delete round trip."""
    settings = get_settings()
    if not settings.CACHE_ENABLED:
        return "disabled"
    try:
        cache = RedisCache(settings.REDIS_URL)
        written = CacheCheck(timestamp=datetime.now(timezone.utc))
        cache.set(HEALTH_CACHE_KEY, written, ttl_seconds=60)
        read = cache.get(HEALTH_CACHE_KEY, CacheCheck)
        cache.delete(HEALTH_CACHE_KEY)
        cache.client.close()
        if read != written:
            return "unhealthy: cache round trip mismatch"
        return "healthy"
    except (redis.RedisError, ConnectionError) as e:
        error_msg = str(e)[:100] + "..." if len(str(e)) > 100 else str(e)
        return f"unhealthy: {error_msg}"


def check_text_generation() -> str:
    return "live" if get_settings().llm_enabled else "offline"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        200: {"description": "All enabled dependencies healthy"},
        503: {"description": "An enabled dependency is unhealthy"},
    },
    summary="Health check",
)
async def health_check():
    dependencies = {
        "redis": await check_redis(),
        "text_generation": check_text_generation(),
    }
    healthy = not any(v.startswith("unhealthy") for v in dependencies.values())

    response = HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        dependencies=dependencies,
    )
    if healthy:
        return response
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
