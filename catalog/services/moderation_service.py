"""
Comment moderation queue.
"""

from typing import Any

from sqlalchemy.orm import Session

from catalog.cache import CacheKeys, RedisCache
from catalog.constants import MAX_PAGE_SIZE
from catalog.exceptions import InvalidRequestError, ItemNotFoundError
from catalog.logging import get_logger
from catalog.models import Comment
from catalog.models.base import utcnow
from catalog.repositories import CommentRepository

from . import presenters

logger = get_logger("services.moderation")

COMMENT_STATUSES = ("pending", "approved", "all")


def _invalidate_thread(cache: RedisCache, comment: Comment) -> None:
    cache.invalidate_comments(comment.item_type, comment.item_id)
    cache.delete(CacheKeys.STATS)


def list_comments(session: Session, status: str = "pending", page: int = 1, limit: int = 20) -> dict[str, Any]:
    if status not in COMMENT_STATUSES:
        raise InvalidRequestError(f"Invalid status: {status}", code="INVALID_STATUS")
    if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
        raise InvalidRequestError("Invalid pagination parameters", code="INVALID_PAGINATION")

    repo = CommentRepository(session)
    comments, total = repo.list_by_status(status, (page - 1) * limit, limit)
    return {
        "comments": [presenters.admin_comment(c) for c in comments],
        "pagination": presenters.admin_pagination(page, limit, total),
        "counts": repo.status_counts(),
    }


def moderate_comment(
    session: Session, cache: RedisCache, comment_id: str, is_approved: Any, moderator: str
) -> dict[str, Any]:
    """Approve or reject a comment, recording who did it and when."""
    if not isinstance(is_approved, bool):
        raise InvalidRequestError("is_approved must be a boolean", code="INVALID_STATUS")

    repo = CommentRepository(session)
    comment = repo.get_by_id(comment_id)
    if comment is None:
        raise ItemNotFoundError("comment", comment_id)

    comment.is_approved = is_approved
    comment.moderated_by = moderator
    comment.moderated_at = utcnow()
    session.commit()

    _invalidate_thread(cache, comment)

    logger.info("comment_moderated", comment_id=comment_id, is_approved=is_approved, moderator=moderator)
    return {
        "message": f"Comment {'approved' if is_approved else 'rejected'} successfully",
        "comment": presenters.admin_comment(comment),
    }


def delete_comment(session: Session, cache: RedisCache, comment_id: str) -> dict[str, Any]:
    repo = CommentRepository(session)
    comment = repo.get_by_id(comment_id)
    if comment is None:
        raise ItemNotFoundError("comment", comment_id)

    repo.delete(comment_id)
    session.commit()

    _invalidate_thread(cache, comment)

    logger.info("comment_deleted", comment_id=comment_id)
    return {"message": "Comment deleted successfully"}


def bulk_approve(session: Session, cache: RedisCache, comment_ids: Any, moderator: str) -> dict[str, Any]:
    if not isinstance(comment_ids, list) or not comment_ids or not all(isinstance(i, str) for i in comment_ids):
        raise InvalidRequestError("comment_ids must be a non-empty list", code="INVALID_COMMENT_IDS")

    repo = CommentRepository(session)
    touched = session.query(Comment).filter(Comment.id.in_(comment_ids)).all()
    updated = repo.bulk_update(
        comment_ids, is_approved=True, moderated_by=moderator, moderated_at=utcnow()
    )
    session.commit()

    for item_type, item_id in {(c.item_type, c.item_id) for c in touched}:
        cache.invalidate_comments(item_type, item_id)
    cache.delete(CacheKeys.STATS)

    logger.info("comments_bulk_approved", count=updated, moderator=moderator)
    return {"message": f"{updated} comment(s) approved successfully", "updated_count": updated}
