"""
Admin endpoints for comment moderation and dashboard stats.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.constants import MAX_PAGE_SIZE
from catalog.models import User
from catalog.services import moderation_service, stats_service

from ..auth.dependencies import get_current_admin
from ..dependencies import get_cache, get_db
from ..schemas import BulkApproveRequest, ModerateCommentRequest

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats")
def get_stats(
    _: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return stats_service.get_stats(db, cache)


# =============================================================================
# Comments
# =============================================================================


@router.get("/comments")
def list_comments(
    status: str = Query("pending", pattern="^(pending|approved|all)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    _: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return moderation_service.list_comments(db, status, page, limit)


@router.patch("/comments/bulk-approve")
def bulk_approve(
    payload: BulkApproveRequest,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return moderation_service.bulk_approve(db, cache, payload.comment_ids, admin.email)


@router.patch("/comments/{comment_id}/moderate")
def moderate_comment(
    comment_id: str,
    payload: ModerateCommentRequest,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return moderation_service.moderate_comment(db, cache, comment_id, payload.is_approved, admin.email)


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: str,
    _: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return moderation_service.delete_comment(db, cache, comment_id)
