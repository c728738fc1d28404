"""
ORM-to-JSON conversion for API payloads.

Everything returned from here is plain JSON-ready data so it can be cached
verbatim and served from the cache without further conversion.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from catalog.models import Comment, Image

PUBLIC_EXCLUDED_COLUMNS = {"is_active", "updated_at"}


def isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def round_rating(value: float) -> float:
    """Round an average to one decimal, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def rating_summary(aggregate: tuple[float, int] | None) -> dict[str, Any]:
    """average_rating / rating_count pair; 0 and 0 for unrated items."""
    if not aggregate or aggregate[1] == 0:
        return {"average_rating": 0, "rating_count": 0}
    average, count = aggregate
    return {"average_rating": round_rating(average), "rating_count": count}


def serialize_columns(instance, exclude: set[str] | frozenset = frozenset()) -> dict[str, Any]:
    """All mapped columns of a row, datetimes as ISO strings."""
    data = {}
    for column in instance.__table__.columns:
        if column.key in exclude:
            continue
        value = getattr(instance, column.key)
        data[column.key] = isoformat(value) if isinstance(value, datetime) else value
    return data


def public_item(item) -> dict[str, Any]:
    return serialize_columns(item, PUBLIC_EXCLUDED_COLUMNS)


def featured_image(image: Image | None) -> dict[str, Any] | None:
    if image is None:
        return None
    return {"id": image.id, "filename": image.filename, "alt_text": image.alt_text}


def gallery_image(image: Image) -> dict[str, Any]:
    return {
        "id": image.id,
        "filename": image.filename,
        "alt_text": image.alt_text,
        "is_featured": image.is_featured,
        "sort_order": image.sort_order,
    }


def image_record(image: Image) -> dict[str, Any]:
    data = serialize_columns(image)
    data["url"] = f"/uploads/{image.filename}"
    return data


def public_comment(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "content": comment.content,
        "author_name": comment.author_name,
        "created_at": isoformat(comment.created_at),
    }


def admin_comment(comment: Comment) -> dict[str, Any]:
    return serialize_columns(comment)


def pagination(page: int, limit: int, total: int) -> dict[str, int]:
    return {"page": page, "limit": limit, "total": total, "pages": -(-total // limit) if limit else 0}


def admin_pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    total_pages = -(-total // limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_count": total,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }
