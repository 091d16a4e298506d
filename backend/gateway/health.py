"""Readiness checks for the stat document store."""

from __future__ import annotations

import time
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.logging_config import get_logger
from gateway.stat_store import INDEX_KEY

logger = get_logger(__name__)


class HealthMonitor:
    """Pings Redis and reads the stat index size."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis

    async def check_all(self) -> dict[str, Any]:
        store = await self._check_store()
        return {
            "status": "healthy" if store["status"] == "ok" else "degraded",
            "checks": {"store": store},
        }

    async def _check_store(self) -> dict[str, Any]:
        start = time.perf_counter()
        try:
            await self.redis.ping()
            stat_count = await self.redis.zcard(INDEX_KEY)
        except (RedisError, OSError) as e:
            logger.error("health_check_store_failed", error=str(e))
            return {"status": "error"}

        return {
            "status": "ok",
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "stats": stat_count,
        }
