"""
Health check endpoints.
"""

from typing import Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
import redis.asyncio as redis

from config import settings
from routers.schemas import ApiResponse

router = APIRouter()


async def _database_status() -> str:
    from database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        return f"down: {exc}"
    return "up"


async def _redis_status() -> str:
    client = redis.from_url(settings.REDIS_URL)
    try:
        await client.ping()
    except Exception as exc:
        return f"down: {exc}"
    finally:
        await client.aclose()
    return "up"


def _media_host_status() -> str:
    configured = all(
        (settings.CLOUDINARY_CLOUD_NAME, settings.CLOUDINARY_API_KEY, settings.CLOUDINARY_API_SECRET)
    )
    return "configured" if configured else "missing"


@router.get("/healthcheck", response_model=ApiResponse[dict])
async def healthcheck():
    """Plain OK envelope for load balancers."""
    return ApiResponse.ok({}, "Ok")


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Reports the state of the store, Redis and the media host configuration.
    """
    components: Dict[str, str] = {
        "api": "up",
        "database": await _database_status(),
        "redis": await _redis_status(),
        "media_host": _media_host_status(),
    }
    degraded = any(value.startswith("down") for value in components.values())
    return {"status": "degraded" if degraded else "healthy", **components}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes-style liveness probe."""
    return {"alive": True}


@router.get("/health/ready")
async def readiness_check():
    """Kubernetes-style readiness probe; uploads need media host credentials."""
    if _media_host_status() != "configured":
        return JSONResponse(status_code=503, content={"ready": False, "missing": ["CLOUDINARY"]})
    return {"ready": True}
