"""
Admin endpoints for image uploads and gallery management.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from catalog.cache import RedisCache
from catalog.services import image_service
from catalog.services.image_service import UploadedFile

from ..auth.dependencies import get_current_admin
from ..dependencies import get_cache, get_db
from ..schemas import ReorderImageRequest, ToggleFeaturedRequest

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(get_current_admin)])


@router.post("/upload-images")
def upload_images(
    item_id: str = Form(...),
    item_type: str = Form(...),
    alt_text: str | None = Form(None),
    images: list[UploadFile] = File(...),
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    files = [
        UploadedFile(
            filename=upload.filename or "",
            content_type=upload.content_type or "",
            data=upload.file.read(),
        )
        for upload in images
    ]
    return image_service.upload_images(db, cache, item_id, item_type, files, alt_text)


@router.delete("/images/{image_id}")
def delete_image(
    image_id: str,
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return image_service.delete_image(db, cache, image_id)


@router.patch("/images/{image_id}/reorder")
def reorder_image(
    image_id: str,
    payload: ReorderImageRequest,
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return image_service.reorder_image(db, cache, image_id, payload.sort_order)


@router.patch("/images/{image_id}/toggle-featured")
def toggle_featured(
    image_id: str,
    payload: ToggleFeaturedRequest,
    db: Session = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
):
    return image_service.toggle_featured(db, cache, image_id, payload.is_featured)
