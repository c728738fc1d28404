"""
Cache key management.

Centralized cache key definitions to:
- Prevent key collisions
- Enable pattern-based invalidation
- Document cache structure
"""

import json
from collections.abc import Mapping
from typing import Any

from catalog.constants import ITEM_TYPE_PLURALS, ItemType


def _fingerprint(params: Mapping[str, Any]) -> str:
    """Serialize query parameters so equal parameter sets map to the same key."""
    present = {k: v for k, v in params.items() if v is not None}
    return json.dumps(present, sort_keys=True, separators=(",", ":"), default=str)


def _namespace(entity_type: str | ItemType) -> tuple[str, str]:
    """Return (singular, plural) namespaces for an entity type."""
    singular = entity_type.value if isinstance(entity_type, ItemType) else str(entity_type)
    try:
        plural = ITEM_TYPE_PLURALS[ItemType(singular)]
    except ValueError:
        plural = f"{singular}s"
    return singular, plural


class CacheKeys:
    """
    Centralized cache key definitions.

    Naming convention:
        - <type>:<id>                     -> single item detail
        - <plural>:<json-of-filters>      -> filtered, paginated list
        - search:<json-of-query>          -> search results
        - comments:<type>:<id>:<page>:<limit> -> approved comment page
        - admin:stats                     -> dashboard aggregates

    Examples:
        - pipe:3f2a...                    -> Pipe detail
        - pipes:{"brand":"A","page":1}    -> Pipe list filtered by brand
        - accessories:{"limit":20,"page":1}
    """

    STATS = "admin:stats"
    SEARCH_PREFIX = "search"
    COMMENTS_PREFIX = "comments"

    @staticmethod
    def item(entity_type: str | ItemType, entity_id: str) -> str:
        """Cache key for a single item."""
        singular, _ = _namespace(entity_type)
        return f"{singular}:{entity_id}"

    @staticmethod
    def item_list(entity_type: str | ItemType, params: Mapping[str, Any]) -> str:
        """Cache key for a filtered list query."""
        _, plural = _namespace(entity_type)
        return f"{plural}:{_fingerprint(params)}"

    @staticmethod
    def search(params: Mapping[str, Any]) -> str:
        return f"{CacheKeys.SEARCH_PREFIX}:{_fingerprint(params)}"

    @staticmethod
    def comments(item_type: str | ItemType, item_id: str, page: int, limit: int) -> str:
        singular, _ = _namespace(item_type)
        return f"{CacheKeys.COMMENTS_PREFIX}:{singular}:{item_id}:{page}:{limit}"

    # Pattern keys for bulk invalidation
    @staticmethod
    def list_pattern(entity_type: str | ItemType) -> str:
        """Pattern matching every cached list variant of an entity type."""
        _, plural = _namespace(entity_type)
        return f"{plural}:*"

    @staticmethod
    def search_pattern() -> str:
        return f"{CacheKeys.SEARCH_PREFIX}:*"

    @staticmethod
    def comments_pattern(item_type: str | ItemType, item_id: str) -> str:
        singular, _ = _namespace(item_type)
        return f"{CacheKeys.COMMENTS_PREFIX}:{singular}:{item_id}:*"
