"""
FastAPI dependency injection module.

Provides centralized dependencies for:
- Database sessions
- The cache instance owned by the application
- Client metadata (IP address)
"""

from fastapi import Request

from catalog.cache import RedisCache
from catalog.db import get_db


def get_cache(request: Request) -> RedisCache:
    """The RedisCache built at startup and stored on app.state."""
    return request.app.state.cache


def get_client_ip(request: Request) -> str | None:
    """
    Get the client IP address from the request.

    Handles X-Forwarded-For header for reverse proxy setups.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


__all__ = ["get_db", "get_cache", "get_client_ip"]
