"""
Cross-catalog search endpoint.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.constants import DEFAULT_PAGE_SIZE
from catalog.services import search_service

from ..dependencies import get_cache, get_db

router = APIRouter(prefix="/search", tags=["search"])


@router.get("")
def search(
    q: str | None = None,
    item_type: str | None = Query(None, alias="type", description="pipes, tobaccos or accessories"),
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    """Case-insensitive search; validation errors are reported as 400."""
    return search_service.search(db, cache, q, item_type, page, limit)
