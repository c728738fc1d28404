"""
Visitor interactions: comment threads and star ratings.
"""

from typing import Any

from sqlalchemy.orm import Session

from catalog.cache import CacheKeys, RedisCache
from catalog.config import get_settings
from catalog.constants import (
    BLOCKED_COMMENT_WORDS,
    MAX_AUTHOR_NAME_LENGTH,
    MAX_COMMENT_LENGTH,
    MAX_COMMENT_PAGE_SIZE,
    MAX_RATING,
    MIN_RATING,
    ItemType,
)
from catalog.exceptions import InvalidRequestError, ItemNotFoundError
from catalog.logging import get_logger
from catalog.repositories import CommentRepository, RatingRepository, item_repository

from . import presenters

logger = get_logger("services.interaction")


def _require_active_item(session: Session, item_type: ItemType, item_id: str) -> None:
    if item_repository(session, item_type).get_active(item_id) is None:
        raise ItemNotFoundError(item_type.value, item_id)


# =============================================================================
# Comments
# =============================================================================


def list_comments(
    session: Session,
    cache: RedisCache,
    item_type: ItemType,
    item_id: str,
    page: int = 1,
    limit: int = 10,
) -> dict[str, Any]:
    """Approved comments of an active item, newest first."""
    if page < 1 or not 1 <= limit <= MAX_COMMENT_PAGE_SIZE:
        raise InvalidRequestError("Invalid pagination parameters", code="INVALID_PAGINATION")

    _require_active_item(session, item_type, item_id)

    def compute() -> dict[str, Any]:
        comments, total = CommentRepository(session).approved_for_item(
            item_type.value, item_id, (page - 1) * limit, limit
        )
        return {
            "comments": [presenters.public_comment(c) for c in comments],
            "pagination": presenters.pagination(page, limit, total),
        }

    return cache.get_or_compute(
        CacheKeys.comments(item_type, item_id, page, limit),
        get_settings().cache_ttl_comments,
        compute,
    )


def validate_comment(content: str | None, author_name: str | None, session_id: str | None) -> tuple[str, str | None]:
    """
    Check a submitted comment and return its trimmed content and author.

    Raises:
        InvalidRequestError: On empty, oversized or blocked content, or a
            missing session id.
    """
    text = (content or "").strip()
    if not text:
        raise InvalidRequestError("Comment content is required", code="MISSING_CONTENT")
    if len(text) > MAX_COMMENT_LENGTH:
        raise InvalidRequestError(
            f"Comment is too long (max {MAX_COMMENT_LENGTH} characters)", code="CONTENT_TOO_LONG"
        )
    author = author_name.strip() if author_name else None
    if author and len(author) > MAX_AUTHOR_NAME_LENGTH:
        raise InvalidRequestError(
            f"Author name is too long (max {MAX_AUTHOR_NAME_LENGTH} characters)",
            code="AUTHOR_NAME_TOO_LONG",
        )
    if not session_id:
        raise InvalidRequestError("Session ID is required", code="MISSING_SESSION")

    lowered = text.lower()
    if any(word in lowered for word in BLOCKED_COMMENT_WORDS):
        raise InvalidRequestError(
            "Comment contains inappropriate content", code="INAPPROPRIATE_CONTENT"
        )
    return text, author or None


def add_comment(
    session: Session,
    cache: RedisCache,
    item_type: ItemType,
    item_id: str,
    content: str | None,
    session_id: str | None,
    author_name: str | None = None,
    ip_address: str | None = None,
) -> dict[str, Any]:
    """Store a comment pending moderation."""
    text, author = validate_comment(content, author_name, session_id)
    _require_active_item(session, item_type, item_id)

    comment = CommentRepository(session).create(
        item_type=item_type.value,
        item_id=item_id,
        content=text,
        author_name=author,
        session_id=session_id,
        ip_address=ip_address,
        is_approved=False,
    )
    session.commit()

    cache.invalidate_comments(item_type, item_id)
    cache.delete(CacheKeys.STATS)

    logger.info("comment_submitted", item_type=item_type.value, item_id=item_id, comment_id=comment.id)
    return {
        "message": "Comment submitted for moderation",
        "comment": {
            "id": comment.id,
            "content": comment.content,
            "author_name": comment.author_name,
            "created_at": presenters.isoformat(comment.created_at),
            "is_approved": comment.is_approved,
        },
    }


# =============================================================================
# Ratings
# =============================================================================


def rate_item(
    session: Session,
    cache: RedisCache,
    item_type: ItemType,
    item_id: str,
    rating: Any,
    session_id: str | None,
    ip_address: str | None = None,
) -> dict[str, Any]:
    """Create or replace the session's rating and return the new summary."""
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRequestError(
            f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}", code="INVALID_RATING"
        )
    if not session_id:
        raise InvalidRequestError("Session ID is required", code="MISSING_SESSION")

    _require_active_item(session, item_type, item_id)

    ratings = RatingRepository(session)
    record = ratings.upsert(item_type.value, item_id, session_id, rating, ip_address)
    session.commit()

    cache.invalidate_entity(item_type, item_id)

    summary = presenters.rating_summary(ratings.aggregates(item_type.value, [item_id]).get(item_id))
    logger.info("rating_submitted", item_type=item_type.value, item_id=item_id, rating=rating)
    return {
        "message": "Rating submitted",
        "rating": {
            "id": record.id,
            "rating": record.rating,
            "created_at": presenters.isoformat(record.created_at),
        },
        **summary,
    }
