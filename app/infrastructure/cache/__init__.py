"""Cache: Redis-backed permission cache."""

from app.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
