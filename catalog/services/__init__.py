"""
Catalog services.

Plain functions taking a SQLAlchemy session (and the cache where they read
or invalidate cached data). Routers call these; tests call them directly.
"""

from . import (
    admin_service,
    catalog_service,
    image_service,
    interaction_service,
    moderation_service,
    presenters,
    search_service,
    stats_service,
)

__all__ = [
    "admin_service",
    "catalog_service",
    "image_service",
    "interaction_service",
    "moderation_service",
    "presenters",
    "search_service",
    "stats_service",
]
