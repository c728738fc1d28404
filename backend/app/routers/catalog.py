"""
Public catalog endpoints: list, detail, comments and ratings per item type.

One router per item type is built from the same factory so that pipes,
tobaccos and accessories expose identical routes.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.constants import (
    DEFAULT_COMMENT_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    MAX_COMMENT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ItemType,
)
from catalog.repositories import AccessoryFilters, ItemFilters, PipeFilters, TobaccoFilters
from catalog.services import catalog_service, interaction_service

from ..dependencies import get_cache, get_client_ip, get_db
from ..schemas import CommentCreateRequest, RatingCreateRequest

# =============================================================================
# Filter Parameters
# =============================================================================


def pipe_filters(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    brand: str | None = None,
    country: str | None = None,
    search: str | None = None,
) -> PipeFilters:
    return PipeFilters(page=page, limit=limit, brand=brand, country=country, search=search)


def tobacco_filters(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    brand: str | None = None,
    blend_type: str | None = None,
    search: str | None = None,
) -> TobaccoFilters:
    return TobaccoFilters(page=page, limit=limit, brand=brand, blend_type=blend_type, search=search)


def accessory_filters(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    brand: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> AccessoryFilters:
    return AccessoryFilters(page=page, limit=limit, brand=brand, category=category, search=search)


FILTER_DEPENDENCIES = {
    ItemType.PIPE: pipe_filters,
    ItemType.TOBACCO: tobacco_filters,
    ItemType.ACCESSORY: accessory_filters,
}


# =============================================================================
# Router Factory
# =============================================================================


def build_item_router(item_type: ItemType) -> APIRouter:
    router = APIRouter(prefix=f"/{item_type.plural}", tags=[item_type.plural])

    @router.get("")
    def list_items(
        filters: ItemFilters = Depends(FILTER_DEPENDENCIES[item_type]),
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return catalog_service.list_items(db, cache, item_type, filters)

    @router.get("/{item_id}")
    def get_item(
        item_id: str,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return catalog_service.get_item(db, cache, item_type, item_id)

    @router.get("/{item_id}/comments")
    def list_comments(
        item_id: str,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_COMMENT_PAGE_SIZE, ge=1, le=MAX_COMMENT_PAGE_SIZE),
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return interaction_service.list_comments(db, cache, item_type, item_id, page, limit)

    @router.post("/{item_id}/comments", status_code=status.HTTP_201_CREATED)
    def add_comment(
        item_id: str,
        payload: CommentCreateRequest,
        request: Request,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return interaction_service.add_comment(
            db,
            cache,
            item_type,
            item_id,
            content=payload.content,
            session_id=payload.session_id,
            author_name=payload.author_name,
            ip_address=get_client_ip(request),
        )

    @router.post("/{item_id}/rating")
    def rate_item(
        item_id: str,
        payload: RatingCreateRequest,
        request: Request,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return interaction_service.rate_item(
            db,
            cache,
            item_type,
            item_id,
            rating=payload.rating,
            session_id=payload.session_id,
            ip_address=get_client_ip(request),
        )

    return router


routers = [build_item_router(item_type) for item_type in ItemType]
