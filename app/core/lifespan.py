"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py; no
business logic here, only wiring of infrastructure (Firestore client,
behavior action gateway, Redis permission cache).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.actions import build_http_behavior_actions
from app.infrastructure.firebase import close_firebase, init_firebase
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: Firestore client, behavior action HTTP client, Redis cache
    (if enabled). Shutdown runs in reverse.
    """
    settings = get_settings()

    # ---- Startup ----
    if not init_firebase(settings):
        if settings.require_firestore:
            raise RuntimeError("Firestore is required but could not be initialized")
        logger.warning("Firestore not configured; object store routes will return 503")

    # Shared HTTP client for behavior actions (connection reuse).
    app.state.actions_http_client = httpx.AsyncClient(
        timeout=settings.behavior_actions_timeout_seconds
    )
    app.state.behavior_actions = build_http_behavior_actions(
        app.state.actions_http_client, settings.behavior_actions_base_url
    )

    if settings.redis_enabled:
        from app.infrastructure.cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    yield

    # ---- Shutdown ----
    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()

    if getattr(app.state, "actions_http_client", None) is not None:
        await app.state.actions_http_client.aclose()
        app.state.actions_http_client = None
        logger.info("Behavior action HTTP client closed")

    await close_firebase()
