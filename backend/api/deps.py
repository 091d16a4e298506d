"""Shared API dependencies.

Builds the request-scoped StatService: the store over the shared Redis
pool plus base URLs derived from the incoming request.
"""

from __future__ import annotations

from fastapi import Depends, Request

import redis.asyncio as aioredis
from app.config import Settings, get_settings
from app.dependencies import get_redis
from gateway.stat_store import StatStore
from services.stat_service import BaseUrls, StatService, derive_base_urls


def get_stat_store(redis: aioredis.Redis = Depends(get_redis)) -> StatStore:
    return StatStore(redis)


def get_base_urls(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> BaseUrls:
    """Derive API/UI base URLs from the request's scheme and host."""
    return derive_base_urls(
        scheme=request.url.scheme,
        netloc=request.url.netloc,
        settings=settings,
        root_path=request.scope.get("root_path", ""),
    )


def get_stat_service(
    store: StatStore = Depends(get_stat_store),
    urls: BaseUrls = Depends(get_base_urls),
) -> StatService:
    return StatService(store, urls)
