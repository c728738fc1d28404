"""
Cross-catalog text search.
"""

from typing import Any

from sqlalchemy.orm import Session

from catalog.cache import CacheKeys, RedisCache
from catalog.config import get_settings
from catalog.constants import MAX_PAGE_SIZE, MIN_SEARCH_LENGTH, ItemType
from catalog.exceptions import InvalidRequestError
from catalog.repositories import item_repository

from . import presenters

# Extra fields shown per result, besides type, id, name, brand and url
RESULT_FIELDS = {
    ItemType.PIPE: ("country", "material", "shape"),
    ItemType.TOBACCO: ("blend_type", "strength"),
    ItemType.ACCESSORY: ("category",),
}


def _result_row(item_type: ItemType, item) -> dict[str, Any]:
    row = {"type": item_type.value, "id": item.id, "name": item.name, "brand": item.brand}
    for field in RESULT_FIELDS[item_type]:
        row[field] = getattr(item, field)
    row["url"] = f"/{item_type.plural}/{item.id}"
    return row


def normalize_query(q: str | None, type_: str | None, page: int, limit: int) -> tuple[str, ItemType | None]:
    """
    Validate search parameters.

    Raises:
        InvalidRequestError: On a short query, unknown type or bad pagination.
    """
    term = (q or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise InvalidRequestError(
            f"Search query must be at least {MIN_SEARCH_LENGTH} characters", code="INVALID_QUERY"
        )
    if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
        raise InvalidRequestError("Invalid pagination parameters", code="INVALID_PAGINATION")
    if not type_:
        return term, None
    try:
        return term, ItemType.from_plural(type_)
    except ValueError:
        raise InvalidRequestError(f"Invalid search type: {type_}", code="INVALID_TYPE") from None


def _run_search(
    session: Session, term: str, item_type: ItemType | None, page: int, limit: int
) -> dict[str, Any]:
    results: list[dict[str, Any]] = []
    if item_type is not None:
        items, _ = item_repository(session, item_type).search(term, (page - 1) * limit, limit)
        results = [_result_row(item_type, item) for item in items]
    else:
        # Each type gets an equal share of the first page
        share = max(1, limit // 3)
        for each_type in ItemType:
            items, _ = item_repository(session, each_type).search(term, 0, share)
            results.extend(_result_row(each_type, item) for item in items)

    return {
        "query": term,
        "results": results,
        "pagination": presenters.pagination(page, limit, len(results)),
    }


def search(
    session: Session,
    cache: RedisCache,
    q: str | None,
    type_: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict[str, Any]:
    """Case-insensitive substring search across one or all item types."""
    term, item_type = normalize_query(q, type_, page, limit)
    params = {
        "q": term,
        "type": item_type.plural if item_type else None,
        "page": page,
        "limit": limit,
    }
    return cache.get_or_compute(
        CacheKeys.search(params),
        get_settings().cache_ttl_search,
        lambda: _run_search(session, term, item_type, page, limit),
    )
