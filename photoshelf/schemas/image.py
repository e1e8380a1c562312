"""Image record, listing and tag schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, computed_field, field_validator

from photoshelf.core.validators import sanitize_text_input
from photoshelf.schemas.common import CamelModel

UPLOADS_URL_PREFIX = "/uploads"


class ImageResponse(CamelModel):
    """Stored image metadata as returned to clients."""

    id: int
    user_id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None
    exif_data: Optional[Dict[str, Any]] = None
    custom_tags: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field  # type: ignore[misc]
    @property
    def url(self) -> str:
        return f"{UPLOADS_URL_PREFIX}/{self.filename}"

    @computed_field  # type: ignore[misc]
    @property
    def thumbnail_url(self) -> str:
        return f"{UPLOADS_URL_PREFIX}/thumbnails/{self.filename}"


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ImageListData(CamelModel):
    images: List[ImageResponse]
    pagination: Pagination


class TagsUpdateRequest(CamelModel):
    """Free-text tags; blank or missing clears them."""

    custom_tags: Optional[str] = Field(default=None)

    @field_validator("custom_tags")
    @classmethod
    def clean_tags(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_text_input(v)
