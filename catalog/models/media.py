"""
Item-attached SQLAlchemy models: images, comments and ratings.

These rows reference catalog items polymorphically through
(item_type, item_id) rather than a foreign key.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, generate_id, utcnow


class Image(Base):
    """Processed image stored under the upload directory."""
    __tablename__ = "images"
    __table_args__ = (Index("ix_images_item", "item_type", "item_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    item_id: Mapped[str] = mapped_column(String(36))
    item_type: Mapped[str] = mapped_column(String(16))
    filename: Mapped[str] = mapped_column(String(255))
    original_name: Mapped[str] = mapped_column(String(255))
    file_size: Mapped[int] = mapped_column(Integer)
    mime_type: Mapped[str] = mapped_column(String(64))
    width: Mapped[int] = mapped_column(Integer)
    height: Mapped[int] = mapped_column(Integer)
    alt_text: Mapped[str] = mapped_column(String(255), default="")
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class Comment(Base):
    """Visitor comment. Hidden until a moderator approves it."""
    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_item", "item_type", "item_id", "is_approved"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    item_id: Mapped[str] = mapped_column(String(36))
    item_type: Mapped[str] = mapped_column(String(16))
    content: Mapped[str] = mapped_column(Text)
    author_name: Mapped[Optional[str]] = mapped_column(String(100))
    session_id: Mapped[str] = mapped_column(String(255))
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    moderated_by: Mapped[Optional[str]] = mapped_column(String(255))
    moderated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class Rating(Base):
    """One 1-5 star rating per (item, visitor session)."""
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("item_type", "item_id", "session_id", name="uq_ratings_item_session"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    item_id: Mapped[str] = mapped_column(String(36))
    item_type: Mapped[str] = mapped_column(String(16))
    session_id: Mapped[str] = mapped_column(String(255))
    rating: Mapped[int] = mapped_column(Integer)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)
