"""
Unified SQLAlchemy models for the pipe catalog.

Single source of truth for all database models.

Usage:
    from catalog.models import Pipe, Tobacco, Accessory, Image
"""

from .base import Base
from .items import ITEM_MODELS, Accessory, CatalogItemMixin, Pipe, Tobacco
from .media import Comment, Image, Rating
from .user import User

__all__ = [
    # Base
    "Base",
    # Items
    "CatalogItemMixin",
    "Pipe",
    "Tobacco",
    "Accessory",
    "ITEM_MODELS",
    # Item attachments
    "Image",
    "Comment",
    "Rating",
    # Admin
    "User",
]
