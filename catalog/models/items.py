"""
Catalog item SQLAlchemy models: pipes, tobaccos and accessories.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.constants import ItemType

from .base import Base, generate_id, utcnow


class CatalogItemMixin:
    """Columns shared by every catalog item."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    observations: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class Pipe(CatalogItemMixin, Base):
    """
    Smoking pipe.

    Public listings filter on brand and country; search also covers
    material and shape.
    """
    __tablename__ = "pipes"

    item_type = ItemType.PIPE

    brand: Mapped[str] = mapped_column(String(255), index=True)
    model: Mapped[str] = mapped_column(String(255), default="")
    material: Mapped[str] = mapped_column(String(128))
    shape: Mapped[str] = mapped_column(String(128))
    finish: Mapped[str] = mapped_column(String(128))
    filter_type: Mapped[str] = mapped_column(String(64))
    stem_material: Mapped[str] = mapped_column(String(128))
    year: Mapped[Optional[int]] = mapped_column(Integer)
    country: Mapped[str] = mapped_column(String(128), default="", index=True)


class Tobacco(CatalogItemMixin, Base):
    """
    Pipe tobacco blend.

    strength, room_note and taste are 1-10 scores.
    """
    __tablename__ = "tobaccos"

    item_type = ItemType.TOBACCO

    brand: Mapped[str] = mapped_column(String(255), index=True)
    blend_type: Mapped[str] = mapped_column(String(128), index=True)
    contents: Mapped[str] = mapped_column(Text, default="")
    cut: Mapped[str] = mapped_column(String(128), default="")
    strength: Mapped[int] = mapped_column(Integer, default=5)
    room_note: Mapped[int] = mapped_column(Integer, default=5)
    taste: Mapped[int] = mapped_column(Integer, default=5)


class Accessory(CatalogItemMixin, Base):
    """Pipe accessory (tools, pouches, lighters...). Brand is optional."""
    __tablename__ = "accessories"

    item_type = ItemType.ACCESSORY

    brand: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    category: Mapped[str] = mapped_column(String(128), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)


ITEM_MODELS: dict[ItemType, type[Pipe] | type[Tobacco] | type[Accessory]] = {
    ItemType.PIPE: Pipe,
    ItemType.TOBACCO: Tobacco,
    ItemType.ACCESSORY: Accessory,
}
