"""
Redis Caching Layer.

Cache-aside caching for catalog read paths:
- JSON payloads (list pages, item details, search results, stats)
- TTL-bounded staleness
- Pattern-based invalidation after mutations

Usage:
    from catalog.cache import RedisCache, CacheKeys

    cache = RedisCache(settings)
    cache.open()

    data = cache.get_or_compute(CacheKeys.item("pipe", pipe_id), 600, load_pipe)
    cache.invalidate_entity("pipe", pipe_id)
"""

from catalog.cache.cache_keys import CacheKeys
from catalog.cache.redis_client import RedisCache

__all__ = [
    "RedisCache",
    "CacheKeys",
]
