"""
Per-client request quotas for the credential endpoints.

Counters live in Redis so every API process shares them; when Redis cannot be
reached each process falls back to its own in-memory window.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Optional, Tuple

from fastapi import Request
import redis.asyncio as redis
from redis.exceptions import RedisError

from config import settings
from services.errors import TooManyRequests


logger = logging.getLogger(__name__)

KEY_PREFIX = "videotube:rate"

# key -> (hits in current window, window end as epoch seconds)
_local_counters: Dict[str, Tuple[int, float]] = {}
_local_lock = asyncio.Lock()


def client_key(request: Request, scope: str) -> str:
    """Identify the caller by the peer address; the forwarded header only stands in when there is none."""
    if request.client and request.client.host:
        caller = request.client.host
    else:
        caller = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip() or "unknown"
    return f"{KEY_PREFIX}:{scope}:{caller}"


async def _redis_hits(key: str, window_seconds: int) -> int:
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        hits = await client.incr(key)
        if hits == 1:
            await client.expire(key, window_seconds)
    finally:
        await client.aclose()
    return int(hits)


async def _local_hits(key: str, window_seconds: int) -> int:
    now = time.time()
    async with _local_lock:
        hits, window_end = _local_counters.get(key, (0, now + window_seconds))
        if now >= window_end:
            hits, window_end = 0, now + window_seconds
        hits += 1
        _local_counters[key] = (hits, window_end)
    return hits


def rate_limit(
    scope: str,
    limit_setting: str,
    window_seconds: Optional[int] = None,
) -> Callable[[Request], Awaitable[None]]:
    """Dependency factory rejecting callers above the configured hits per window with 429."""

    async def _dependency(request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED or getattr(request.app.state, "disable_rate_limits", False):
            return

        window = int(window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS)
        key = client_key(request, scope)
        try:
            hits = await _redis_hits(key, window)
        except (RedisError, OSError) as exc:
            logger.debug("Redis unavailable for rate limit %s: %s", scope, exc)
            hits = await _local_hits(key, window)

        if hits > int(getattr(settings, limit_setting)):
            logger.info("rate_limited scope=%s key=%s", scope, key)
            raise TooManyRequests(f"Too many {scope} attempts, try again later")

    return _dependency
