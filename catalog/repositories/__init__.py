"""
Repository layer for data access.

Repositories wrap SQLAlchemy queries per aggregate and never commit.
"""

from .base import BaseRepository
from .comment_repository import CommentRepository
from .image_repository import ImageRepository
from .item_repository import (
    ITEM_REPOSITORIES,
    AccessoryFilters,
    AccessoryRepository,
    ItemFilters,
    ItemRepository,
    PipeFilters,
    PipeRepository,
    TobaccoFilters,
    TobaccoRepository,
    item_repository,
)
from .rating_repository import RatingRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ItemRepository",
    "PipeRepository",
    "TobaccoRepository",
    "AccessoryRepository",
    "ITEM_REPOSITORIES",
    "item_repository",
    "ItemFilters",
    "PipeFilters",
    "TobaccoFilters",
    "AccessoryFilters",
    "ImageRepository",
    "CommentRepository",
    "RatingRepository",
    "UserRepository",
]
