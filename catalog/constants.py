"""
Application constants for the pipe catalog.

Contains item types, upload limits and moderation word lists.
"""

from enum import Enum


class ItemType(str, Enum):
    """Catalog item kinds. Values are the singular names stored in the database."""

    PIPE = "pipe"
    TOBACCO = "tobacco"
    ACCESSORY = "accessory"

    @property
    def plural(self) -> str:
        return ITEM_TYPE_PLURALS[self]

    @classmethod
    def from_plural(cls, plural: str) -> "ItemType":
        """Resolve a URL segment such as ``accessories`` to its item type."""
        for item_type, name in ITEM_TYPE_PLURALS.items():
            if name == plural:
                return item_type
        raise ValueError(f"Unknown item type: {plural}")


ITEM_TYPE_PLURALS = {
    ItemType.PIPE: "pipes",
    ItemType.TOBACCO: "tobaccos",
    ItemType.ACCESSORY: "accessories",
}


# =============================================================================
# Pagination
# =============================================================================

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_COMMENT_PAGE_SIZE = 50
DEFAULT_COMMENT_PAGE_SIZE = 10
MIN_SEARCH_LENGTH = 2


# =============================================================================
# Comments & Ratings
# =============================================================================

MAX_COMMENT_LENGTH = 2000
MAX_AUTHOR_NAME_LENGTH = 100
BLOCKED_COMMENT_WORDS = ("spam", "fake", "scam")
MIN_RATING = 1
MAX_RATING = 5


# =============================================================================
# Images
# =============================================================================

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}

RESPONSIVE_SIZES = {
    "original": {"width": 1920, "height": 1280, "quality": 90},
    "large": {"width": 1200, "height": 800, "quality": 85},
    "medium": {"width": 800, "height": 600, "quality": 80},
    "small": {"width": 400, "height": 300, "quality": 75},
    "thumbnail": {"width": 200, "height": 200, "quality": 70},
}

THUMBNAIL_SIZE = 300
THUMBNAIL_QUALITY = 80
