"""
Dashboard aggregates for the back office.
"""

from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from catalog.cache import CacheKeys, RedisCache
from catalog.config import get_settings
from catalog.constants import ItemType
from catalog.models import Comment, Image, Rating, User
from catalog.repositories import item_repository


def _count(session: Session, model, **filters) -> int:
    return session.query(func.count(model.id)).filter_by(**filters).scalar() or 0


def _compute_stats(session: Session) -> dict[str, Any]:
    stats: dict[str, Any] = {
        f"total_{item_type.plural}": item_repository(session, item_type).count_active()
        for item_type in ItemType
    }
    stats.update(
        total_comments=_count(session, Comment),
        pending_comments=_count(session, Comment, is_approved=False),
        active_users=_count(session, User, is_active=True),
        total_images=_count(session, Image),
        total_ratings=_count(session, Rating),
    )
    return stats


def get_stats(session: Session, cache: RedisCache) -> dict[str, Any]:
    """Active item counts, moderation backlog and media totals."""
    return cache.get_or_compute(
        CacheKeys.STATS,
        get_settings().cache_ttl_stats,
        lambda: _compute_stats(session),
    )
