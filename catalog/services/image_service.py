"""
Image uploads and gallery management for catalog items.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.config import get_settings
from catalog.constants import ALLOWED_IMAGE_TYPES, ItemType
from catalog.exceptions import (
    ImageProcessingError,
    InvalidRequestError,
    ItemNotFoundError,
    UploadFailedError,
)
from catalog.images import ImageOptions, process_image
from catalog.logging import LogContext, get_logger, log_timing
from catalog.models import Image
from catalog.repositories import ImageRepository, item_repository

from . import presenters
from .admin_service import remove_upload

logger = get_logger("services.image")


@dataclass(frozen=True)
class UploadedFile:
    """One file of a multipart upload, already read into memory."""

    filename: str
    content_type: str
    data: bytes


def _parse_item_type(value: str) -> ItemType:
    try:
        return ItemType(value)
    except ValueError:
        raise InvalidRequestError(f"Invalid item type: {value}", code="INVALID_ITEM_TYPE") from None


def validate_uploads(files: list[UploadedFile]) -> None:
    """
    Check count, size and content type of an upload batch.

    Raises:
        InvalidRequestError: If the batch is empty or breaks a limit.
    """
    settings = get_settings()
    if not files:
        raise InvalidRequestError("No images uploaded", code="NO_IMAGES")
    if len(files) > settings.max_upload_files:
        raise InvalidRequestError(
            f"Too many files (max {settings.max_upload_files})", code="TOO_MANY_FILES"
        )
    for upload in files:
        if upload.content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidRequestError(
                f"Unsupported file type: {upload.content_type}", code="INVALID_FILE_TYPE"
            )
        if len(upload.data) > settings.max_upload_size_bytes:
            raise InvalidRequestError(
                f"File too large: {upload.filename} (max {settings.max_upload_size_mb}MB)",
                code="FILE_TOO_LARGE",
            )


@log_timing("image_upload")
def upload_images(
    session: Session,
    cache: RedisCache,
    item_id: str,
    item_type: str,
    files: list[UploadedFile],
    alt_text: str | None = None,
) -> dict[str, Any]:
    """
    Process uploaded files and append them to an item's gallery.

    Files that fail to decode are skipped and logged.

    Raises:
        UploadFailedError: If not a single file could be processed.
    """
    settings = get_settings()
    kind = _parse_item_type(item_type)
    validate_uploads(files)
    if item_repository(session, kind).get_by_id(item_id) is None:
        raise ItemNotFoundError(kind.value, item_id)

    options = ImageOptions(
        width=settings.image_width,
        height=settings.image_height,
        quality=settings.image_quality,
        format=settings.image_format,
    )
    images = ImageRepository(session)
    created: list[Image] = []
    written: list[str] = []

    try:
        with LogContext(item_type=kind.value, item_id=item_id):
            for upload in files:
                try:
                    processed = process_image(upload.data, settings.upload_dir, options, upload.filename)
                except ImageProcessingError as e:
                    logger.warning("image_upload_skipped", filename=upload.filename, error=e.message)
                    continue
                written.append(processed.filename)

                created.append(
                    images.create(
                        item_id=item_id,
                        item_type=kind.value,
                        filename=processed.filename,
                        original_name=upload.filename or processed.filename,
                        file_size=processed.file_size,
                        mime_type=processed.mime_type,
                        width=processed.width,
                        height=processed.height,
                        alt_text=alt_text or upload.filename or "",
                        sort_order=images.max_sort_order(kind.value, item_id) + 1,
                    )
                )

        if not created:
            raise UploadFailedError("Failed to process any images")

        session.commit()
    except Exception:
        # No rows were committed, so no processed file may stay on disk
        session.rollback()
        for filename in written:
            remove_upload(filename)
        raise

    cache.invalidate_entity(kind, item_id)

    logger.info("images_uploaded", item_type=kind.value, item_id=item_id, count=len(created))
    return {
        "message": f"Successfully uploaded {len(created)} image(s)",
        "images": [presenters.image_record(image) for image in created],
    }


def _get_image(session: Session, image_id: str) -> Image:
    image = ImageRepository(session).get_by_id(image_id)
    if image is None:
        raise ItemNotFoundError("image", image_id)
    return image


def delete_image(session: Session, cache: RedisCache, image_id: str) -> dict[str, Any]:
    """Remove an image and close the gap in its item's sort order."""
    image = _get_image(session, image_id)
    item_type, item_id, filename = image.item_type, image.item_id, image.filename

    images = ImageRepository(session)
    images.delete(image_id)
    images.renumber(item_type, item_id)
    session.commit()

    remove_upload(filename)
    cache.invalidate_entity(item_type, item_id)

    logger.info("image_deleted", image_id=image_id, item_type=item_type, item_id=item_id)
    return {"message": "Image deleted successfully"}


def reorder_image(session: Session, cache: RedisCache, image_id: str, sort_order: Any) -> dict[str, Any]:
    if isinstance(sort_order, bool) or not isinstance(sort_order, int) or sort_order < 1:
        raise InvalidRequestError("sort_order must be a positive integer", code="INVALID_SORT_ORDER")

    image = _get_image(session, image_id)
    image.sort_order = sort_order
    session.commit()

    cache.invalidate_entity(image.item_type, image.item_id)
    return {"message": "Image order updated", "image": presenters.image_record(image)}


def toggle_featured(session: Session, cache: RedisCache, image_id: str, is_featured: Any) -> dict[str, Any]:
    if not isinstance(is_featured, bool):
        raise InvalidRequestError("is_featured must be a boolean", code="INVALID_FEATURED")

    image = _get_image(session, image_id)
    image.is_featured = is_featured
    session.commit()

    cache.invalidate_entity(image.item_type, image.item_id)
    return {
        "message": f"Image {'featured' if is_featured else 'unfeatured'} successfully",
        "image": presenters.image_record(image),
    }
