"""
Pydantic schemas for request and response validation.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, field_validator

from catalog.constants import MAX_RATING, MIN_RATING


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# =============================================================================
# Auth
# =============================================================================


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    name: str | None = None
    last_login: datetime | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# =============================================================================
# Catalog items (admin)
# =============================================================================


class ItemPayload(BaseModel):
    """Fields shared by every item type. Strings are trimmed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    observations: str | None = None
    is_active: bool = True

    @field_validator("observations", mode="before")
    @classmethod
    def blank_observations_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class PipePayload(ItemPayload):
    brand: str = Field(min_length=1, max_length=255)
    model: str = ""
    material: str = Field(min_length=1)
    shape: str = Field(min_length=1)
    finish: str = Field(min_length=1)
    filter_type: str = Field(min_length=1)
    stem_material: str = Field(min_length=1)
    year: int | None = Field(default=None, ge=1800, le=2100)
    country: str = ""


class TobaccoPayload(ItemPayload):
    brand: str = Field(min_length=1, max_length=255)
    blend_type: str = Field(min_length=1)
    contents: str = Field(min_length=1)
    cut: str = Field(min_length=1)
    strength: int = Field(ge=1, le=7)
    room_note: int = Field(ge=1, le=10)
    taste: int = Field(ge=1, le=10)


class AccessoryPayload(ItemPayload):
    brand: str | None = None
    category: str = Field(min_length=1)
    description: str = Field(min_length=1)

    @field_validator("brand", mode="before")
    @classmethod
    def blank_brand_to_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class ToggleStatusRequest(BaseModel):
    is_active: StrictBool


# =============================================================================
# Images (admin)
# =============================================================================


class ReorderImageRequest(BaseModel):
    sort_order: int = Field(ge=1)


class ToggleFeaturedRequest(BaseModel):
    is_featured: StrictBool


# =============================================================================
# Comments & ratings
# =============================================================================


class CommentCreateRequest(BaseModel):
    content: str | None = None
    author_name: str | None = None
    session_id: str | None = None


class RatingCreateRequest(BaseModel):
    rating: Any = Field(default=None, description=f"Integer from {MIN_RATING} to {MAX_RATING}")
    session_id: str | None = None


class ModerateCommentRequest(BaseModel):
    is_approved: StrictBool


class BulkApproveRequest(BaseModel):
    comment_ids: list[str] = Field(min_length=1)
