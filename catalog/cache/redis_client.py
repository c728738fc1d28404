"""
Redis cache-aside client.

Provides an explicitly constructed cache client with:
- Lazy, thread-safe connection setup (one pooled client per instance)
- JSON serialization for API response payloads
- Read-through helper (get_or_compute)
- SCAN-based pattern invalidation
- Graceful degradation when Redis is unavailable

The instance is owned by the host process: build it at startup, call open(),
and close() it at shutdown. Nothing in this module is a global singleton.
"""

import json
import threading
from collections.abc import Callable
from typing import Any, Optional, TypeVar

import redis

from catalog.cache.cache_keys import CacheKeys
from catalog.config import Settings, get_settings
from catalog.constants import ItemType
from catalog.logging import get_logger

logger = get_logger("cache")

T = TypeVar("T")


class RedisCache:
    """
    Redis cache client used by every read path of the catalog.

    Every operation is best-effort: Redis errors and undecodable payloads are
    logged and reported as a miss (reads) or a failed no-op (writes). Errors
    raised by a compute callback are never caught here.

    Usage:
        cache = RedisCache(settings)
        cache.open()

        payload = cache.get_or_compute(
            CacheKeys.item(ItemType.PIPE, pipe_id),
            ttl=600,
            compute=lambda: load_pipe(pipe_id),
        )

        cache.invalidate_entity(ItemType.PIPE, pipe_id)
        cache.close()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional["redis.Redis"] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self._lock = threading.Lock()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _create_client(self) -> "redis.Redis":
        pool = redis.ConnectionPool(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=self.settings.redis_password,
            max_connections=50,
            socket_timeout=self.settings.redis_socket_timeout,
            socket_connect_timeout=self.settings.redis_socket_timeout,
            decode_responses=True,
        )
        return redis.Redis(connection_pool=pool)

    @property
    def client(self) -> "redis.Redis":
        """Redis client, created on first use and reused afterwards."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._create_client()
        return self._client

    def open(self) -> bool:
        """
        Verify connectivity. Call once at application startup.

        Returns:
            True if Redis answered a PING, False otherwise. A False result does
            not disable the cache; later calls will retry the connection.
        """
        try:
            self.client.ping()
        except redis.RedisError as e:
            logger.warning(
                "redis_connection_failed",
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                error=str(e),
            )
            return False

        logger.info("redis_connected", host=self.settings.redis_host, port=self.settings.redis_port)
        return True

    def close(self) -> None:
        """Release the connection pool. Call at application shutdown."""
        with self._lock:
            client, self._client = self._client, None
        if client is None:
            return
        try:
            client.close()
        except redis.RedisError as e:
            logger.warning("redis_close_error", error=str(e))
        logger.info("redis_disconnected")

    # =========================================================================
    # JSON Operations
    # =========================================================================

    def get(self, key: str) -> Any | None:
        """
        Get a cached payload.

        Returns:
            The deserialized payload, or None on miss, undecodable payload,
            or any Redis error.
        """
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning("cache_get_error", key=key, error=str(e))
            return None

        if raw is None:
            logger.debug("cache_miss", key=key)
            return None

        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("cache_payload_invalid", key=key, error=str(e))
            return None

        logger.debug("cache_hit", key=key)
        return value

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """
        Store a JSON-serializable payload with an expiry.

        Args:
            key: Cache key
            value: Data to cache
            ttl: Time-to-live in seconds

        Returns:
            True if cached successfully, False otherwise
        """
        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("cache_serialize_error", key=key, error=str(e))
            return False

        try:
            self.client.setex(key, ttl, serialized)
        except redis.RedisError as e:
            logger.warning("cache_set_error", key=key, error=str(e))
            return False

        logger.debug("cache_set", key=key, ttl=ttl)
        return True

    def get_or_compute(self, key: str, ttl: int, compute: Callable[[], T]) -> T:
        """
        Get from cache or compute and cache the result.

        compute() runs only on a miss. Its exceptions propagate unchanged, and
        a None result is returned without being cached.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        result = compute()
        if result is not None:
            self.set(key, result, ttl)
        return result

    # =========================================================================
    # Key Operations
    # =========================================================================

    def delete(self, key: str) -> bool:
        """Delete a key from cache."""
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.warning("cache_delete_error", key=key, error=str(e))
            return False
        return True

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Keys are enumerated with SCAN (non-blocking on the server) and removed
        with a single DEL.

        Args:
            pattern: Redis glob pattern (e.g. "pipes:*")

        Returns:
            Number of keys deleted
        """
        try:
            keys = list(self.client.scan_iter(match=pattern, count=500))
            if not keys:
                return 0
            deleted = int(self.client.delete(*keys) or 0)
        except redis.RedisError as e:
            logger.warning("cache_delete_pattern_error", pattern=pattern, error=str(e))
            return 0

        logger.info("cache_pattern_deleted", pattern=pattern, keys=deleted)
        return deleted

    # =========================================================================
    # Invalidation
    # =========================================================================

    def invalidate_entity(self, entity_type: str | ItemType, entity_id: str | None = None) -> None:
        """
        Invalidate everything a mutation of one entity can make stale.

        Order: all list variants of the type, the entity itself, the admin
        stats aggregate, then every cached search.
        """
        self.delete_pattern(CacheKeys.list_pattern(entity_type))
        if entity_id is not None:
            self.delete(CacheKeys.item(entity_type, entity_id))
        self.delete(CacheKeys.STATS)
        self.delete_pattern(CacheKeys.search_pattern())

        logger.info(
            "cache_invalidate",
            entity_type=entity_type.value if isinstance(entity_type, ItemType) else entity_type,
            entity_id=entity_id,
        )

    def invalidate_comments(self, item_type: str | ItemType, item_id: str) -> int:
        """Drop every cached comment page of one item."""
        return self.delete_pattern(CacheKeys.comments_pattern(item_type, item_id))

    # =========================================================================
    # Health Check
    # =========================================================================

    def health_check(self) -> dict[str, Any]:
        """Get cache health status."""
        status: dict[str, Any] = {"host": self.settings.redis_host}
        try:
            self.client.ping()
        except redis.RedisError as e:
            status["status"] = "unavailable"
            status["error"] = str(e)
            return status

        status["status"] = "healthy"
        try:
            memory_info = self.client.info("memory")
            if isinstance(memory_info, dict):
                status["memory_used"] = memory_info.get("used_memory_human", "unknown")
        except redis.RedisError:
            status["status"] = "degraded"
        return status
