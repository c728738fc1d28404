"""
Public catalog reads: filtered list pages and item details.

Both reads go through the cache-aside layer; misses hit the database.
"""

from typing import Any

from sqlalchemy.orm import Session

from catalog.cache import CacheKeys, RedisCache
from catalog.config import get_settings
from catalog.constants import ItemType
from catalog.exceptions import ItemNotFoundError
from catalog.logging import get_logger
from catalog.repositories import ImageRepository, ItemFilters, RatingRepository, item_repository

from . import presenters

logger = get_logger("services.catalog")


def _build_list_page(session: Session, item_type: ItemType, filters: ItemFilters) -> dict[str, Any]:
    repo = item_repository(session, item_type)
    items, total = repo.list_active(filters)

    ids = [item.id for item in items]
    featured = ImageRepository(session).featured_for_items(item_type.value, ids)
    ratings = RatingRepository(session).aggregates(item_type.value, ids)

    data = []
    for item in items:
        row = presenters.public_item(item)
        row["featured_image"] = presenters.featured_image(featured.get(item.id))
        row.update(presenters.rating_summary(ratings.get(item.id)))
        data.append(row)

    logger.debug("catalog_list_computed", item_type=item_type.value, total=total)
    return {
        "data": data,
        "pagination": presenters.pagination(filters.page, filters.limit, total),
        "filters": repo.filter_options(),
    }


def list_items(
    session: Session, cache: RedisCache, item_type: ItemType, filters: ItemFilters
) -> dict[str, Any]:
    """Page of active items with featured image, rating summary and filter options."""
    settings = get_settings()
    return cache.get_or_compute(
        CacheKeys.item_list(item_type, filters.as_params()),
        settings.cache_ttl_list,
        lambda: _build_list_page(session, item_type, filters),
    )


def _build_detail(session: Session, item_type: ItemType, item_id: str) -> dict[str, Any] | None:
    item = item_repository(session, item_type).get_active(item_id)
    if item is None:
        return None

    images = ImageRepository(session).for_item(item_type.value, item_id)
    aggregate = RatingRepository(session).aggregates(item_type.value, [item_id]).get(item_id)

    detail = presenters.public_item(item)
    detail["images"] = [presenters.gallery_image(image) for image in images]
    detail.update(presenters.rating_summary(aggregate))
    return detail


def get_item(session: Session, cache: RedisCache, item_type: ItemType, item_id: str) -> dict[str, Any]:
    """
    Detail of one active item with its gallery.

    Raises:
        ItemNotFoundError: If the item does not exist or is inactive. Misses
            are not cached, so the next request checks the database again.
    """
    settings = get_settings()
    detail = cache.get_or_compute(
        CacheKeys.item(item_type, item_id),
        settings.cache_ttl_detail,
        lambda: _build_detail(session, item_type, item_id),
    )
    if detail is None:
        raise ItemNotFoundError(item_type.value, item_id)
    return detail
