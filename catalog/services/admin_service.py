"""
Back-office item management.

Every mutation commits first and then invalidates the cache entries the
change can make stale, before the result is handed back to the caller.
"""

from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.config import get_settings
from catalog.constants import MAX_PAGE_SIZE, ItemType
from catalog.exceptions import InvalidRequestError, ItemNotFoundError
from catalog.logging import get_logger
from catalog.repositories import (
    CommentRepository,
    ImageRepository,
    RatingRepository,
    item_repository,
)

from . import presenters

logger = get_logger("services.admin")


def _get_or_404(session: Session, item_type: ItemType, item_id: str):
    item = item_repository(session, item_type).get_by_id(item_id)
    if item is None:
        raise ItemNotFoundError(item_type.value, item_id)
    return item


def remove_upload(filename: str) -> None:
    """Delete an uploaded file; a file that is already gone is not an error."""
    path = Path(get_settings().upload_dir) / filename
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("upload_remove_failed", filename=filename, error=str(e))


def list_items(
    session: Session,
    item_type: ItemType,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> dict[str, Any]:
    """All items of a type, including inactive ones, with their first image."""
    if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
        raise InvalidRequestError("Invalid pagination parameters", code="INVALID_PAGINATION")

    items, total = item_repository(session, item_type).list_admin(
        (page - 1) * limit, limit, search=search, sort_by=sort_by, sort_order=sort_order
    )
    first_images = ImageRepository(session).first_for_items(
        item_type.value, [item.id for item in items]
    )

    rows = []
    for item in items:
        row = presenters.serialize_columns(item)
        image = first_images.get(item.id)
        row["images"] = [presenters.gallery_image(image)] if image else []
        rows.append(row)

    return {
        item_type.plural: rows,
        "pagination": presenters.admin_pagination(page, limit, total),
    }


def get_item(session: Session, item_type: ItemType, item_id: str) -> dict[str, Any]:
    item = _get_or_404(session, item_type, item_id)
    data = presenters.serialize_columns(item)
    data["images"] = [
        presenters.image_record(image)
        for image in ImageRepository(session).for_item(item_type.value, item_id)
    ]
    return data


def create_item(
    session: Session, cache: RedisCache, item_type: ItemType, data: dict[str, Any]
) -> dict[str, Any]:
    item = item_repository(session, item_type).create(**data)
    session.commit()

    cache.invalidate_entity(item_type, item.id)

    logger.info(f"{item_type.value}_created", item_id=item.id, name=item.name)
    return presenters.serialize_columns(item)


def update_item(
    session: Session,
    cache: RedisCache,
    item_type: ItemType,
    item_id: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    _get_or_404(session, item_type, item_id)
    item = item_repository(session, item_type).update(item_id, **data)
    session.commit()

    cache.invalidate_entity(item_type, item_id)

    logger.info(f"{item_type.value}_updated", item_id=item_id)
    return presenters.serialize_columns(item)


def delete_item(session: Session, cache: RedisCache, item_type: ItemType, item_id: str) -> dict[str, Any]:
    """Delete an item together with its images, comments and ratings."""
    _get_or_404(session, item_type, item_id)

    filenames = ImageRepository(session).delete_for_item(item_type.value, item_id)
    CommentRepository(session).delete_for_item(item_type.value, item_id)
    RatingRepository(session).delete_for_item(item_type.value, item_id)
    item_repository(session, item_type).delete(item_id)
    session.commit()

    for filename in filenames:
        remove_upload(filename)

    cache.invalidate_entity(item_type, item_id)
    cache.invalidate_comments(item_type, item_id)

    logger.info(f"{item_type.value}_deleted", item_id=item_id, images=len(filenames))
    return {"message": f"{item_type.value.capitalize()} deleted successfully"}


def toggle_status(
    session: Session, cache: RedisCache, item_type: ItemType, item_id: str, is_active: Any
) -> dict[str, Any]:
    if not isinstance(is_active, bool):
        raise InvalidRequestError("is_active must be a boolean", code="INVALID_STATUS")

    _get_or_404(session, item_type, item_id)
    item = item_repository(session, item_type).update(item_id, is_active=is_active)
    session.commit()

    cache.invalidate_entity(item_type, item_id)

    logger.info(f"{item_type.value}_status_changed", item_id=item_id, is_active=is_active)
    return {
        "message": f"{item_type.value.capitalize()} {'activated' if is_active else 'deactivated'} successfully",
        "item": presenters.serialize_columns(item),
    }
