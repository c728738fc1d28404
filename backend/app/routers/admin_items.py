"""
Admin CRUD endpoints for catalog items.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.constants import MAX_PAGE_SIZE, ItemType
from catalog.services import admin_service

from ..auth.dependencies import get_current_admin
from ..dependencies import get_cache, get_db
from ..schemas import AccessoryPayload, PipePayload, TobaccoPayload, ToggleStatusRequest

PAYLOAD_MODELS = {
    ItemType.PIPE: PipePayload,
    ItemType.TOBACCO: TobaccoPayload,
    ItemType.ACCESSORY: AccessoryPayload,
}


def build_admin_item_router(item_type: ItemType) -> APIRouter:
    router = APIRouter(
        prefix=f"/admin/{item_type.plural}",
        tags=["admin"],
        dependencies=[Depends(get_current_admin)],
    )
    payload_model = PAYLOAD_MODELS[item_type]

    @router.get("")
    def list_items(
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = Query("desc", pattern="^(asc|desc)$"),
        db: Session = Depends(get_db),
    ):
        return admin_service.list_items(db, item_type, page, limit, search, sort_by, sort_order)

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: payload_model,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return admin_service.create_item(db, cache, item_type, payload.model_dump())

    @router.get("/{item_id}")
    def get_item(item_id: str, db: Session = Depends(get_db)):
        return admin_service.get_item(db, item_type, item_id)

    @router.put("/{item_id}")
    def update_item(
        item_id: str,
        payload: payload_model,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return admin_service.update_item(db, cache, item_type, item_id, payload.model_dump())

    @router.delete("/{item_id}")
    def delete_item(
        item_id: str,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return admin_service.delete_item(db, cache, item_type, item_id)

    @router.patch("/{item_id}/toggle-status")
    def toggle_status(
        item_id: str,
        payload: ToggleStatusRequest,
        db: Session = Depends(get_db),
        cache: RedisCache = Depends(get_cache),
    ):
        return admin_service.toggle_status(db, cache, item_type, item_id, payload.is_active)

    return router


routers = [build_admin_item_router(item_type) for item_type in ItemType]
