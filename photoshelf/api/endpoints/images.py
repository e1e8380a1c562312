"""
Image endpoints: upload, list, fetch, tag, delete, download and edit.

Every route is scoped to the authenticated user; another user's image
id behaves exactly like a missing one (404).
"""

import asyncio
import logging
import math
from typing import Optional

from fastapi import APIRouter, File, Query, UploadFile, status
from fastapi.responses import FileResponse, Response
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from photoshelf.api.deps import CurrentUser, DBSession, Pagination, Processor
from photoshelf.core.config import settings
from photoshelf.core.exceptions import (
    DatabaseException,
    NotFoundException,
    PayloadTooLargeException,
    ValidationException,
)
from photoshelf.editing import (
    DegenerateRegionError,
    RasterDecodeError,
    apply_edits,
    encode_raster,
)
from photoshelf.models import Image, User
from photoshelf.schemas.common import ApiResponse, MessageResponse
from photoshelf.schemas.editing import EditImageRequest
from photoshelf.schemas.image import (
    ImageListData,
    ImageResponse,
    Pagination as PaginationData,
    TagsUpdateRequest,
)
from photoshelf.services.storage import FileNotFoundStorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["Images"])

UPLOAD_CHUNK_SIZE = 1024 * 1024


async def _get_owned_image(db: DBSession, user: User, image_id: int) -> Image:
    result = await db.execute(
        select(Image).where(Image.id == image_id, Image.user_id == user.id)
    )
    image = result.scalars().first()
    if image is None:
        raise NotFoundException("Image not found", details={"id": image_id})
    return image


async def _read_limited(upload: UploadFile, limit: int) -> bytes:
    """Read an upload in chunks, stopping as soon as it exceeds ``limit``."""
    chunks = []
    total = 0
    while chunk := await upload.read(UPLOAD_CHUNK_SIZE):
        total += len(chunk)
        if total > limit:
            raise PayloadTooLargeException(
                f"File too large. Maximum size: {limit / 1024 / 1024:.0f}MB",
                details={"max_bytes": limit},
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.post(
    "",
    response_model=ApiResponse[ImageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image",
)
async def upload_image(
    db: DBSession,
    current_user: CurrentUser,
    processor: Processor,
    image: Optional[UploadFile] = File(None, description="Image file (JPEG, PNG, GIF, WebP)"),
) -> ApiResponse[ImageResponse]:
    """Store an uploaded image with its dimensions, EXIF and thumbnail.

    Raises:
        ValidationException: No file, or a content type that is not allowed.
        PayloadTooLargeException: File exceeds MAX_FILE_SIZE.
        DatabaseException: The record could not be written; the stored
            files are removed again.
    """
    if image is None or not image.filename:
        raise ValidationException("Please choose an image to upload")

    if image.content_type not in settings.allowed_mime_types:
        raise ValidationException(
            "Only image files are allowed (JPEG, PNG, GIF, WebP)",
            details={"content_type": image.content_type},
        )

    contents = await _read_limited(image, settings.MAX_FILE_SIZE)
    # Pillow work runs in a worker thread
    processed = await asyncio.to_thread(processor.process_upload, image.filename, contents)

    record = Image(
        user_id=current_user.id,
        filename=processed.filename,
        original_name=image.filename,
        mime_type=image.content_type,
        size=processed.size,
        width=processed.width,
        height=processed.height,
        exif_data=processed.exif_data,
    )
    db.add(record)
    try:
        await db.flush()
    except SQLAlchemyError as e:
        processor.storage.delete_image_files(processed.filename)
        logger.error(f"Failed to save record for {processed.filename}: {e}")
        raise DatabaseException("Failed to save image record") from e
    await db.refresh(record)

    logger.info(f"User {current_user.id} uploaded image {record.id} ({record.filename})")
    return ApiResponse(
        message="Image uploaded successfully",
        data=ImageResponse.model_validate(record),
    )


@router.get(
    "",
    response_model=ApiResponse[ImageListData],
    summary="List images",
)
async def list_images(
    db: DBSession,
    current_user: CurrentUser,
    pagination: Pagination,
    tag: Optional[str] = Query(None, description="Only images whose tags contain this text"),
) -> ApiResponse[ImageListData]:
    """List the user's images, newest first."""
    conditions = [Image.user_id == current_user.id]
    tag = (tag or "").strip()
    if tag:
        conditions.append(Image.custom_tags.ilike(f"%{_escape_like(tag)}%", escape="\\"))

    total = (
        await db.execute(select(func.count(Image.id)).where(*conditions))
    ).scalar_one()

    result = await db.execute(
        select(Image)
        .where(*conditions)
        .order_by(Image.created_at.desc(), Image.id.desc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    images = [ImageResponse.model_validate(img) for img in result.scalars().all()]

    return ApiResponse(
        data=ImageListData(
            images=images,
            pagination=PaginationData(
                page=pagination.page,
                limit=pagination.limit,
                total=total,
                total_pages=math.ceil(total / pagination.limit),
            ),
        )
    )


@router.get(
    "/{image_id}",
    response_model=ApiResponse[ImageResponse],
    summary="Get one image",
)
async def get_image(
    image_id: int,
    db: DBSession,
    current_user: CurrentUser,
) -> ApiResponse[ImageResponse]:
    image = await _get_owned_image(db, current_user, image_id)
    return ApiResponse(data=ImageResponse.model_validate(image))


@router.patch(
    "/{image_id}/tags",
    response_model=ApiResponse[ImageResponse],
    summary="Update tags",
)
async def update_tags(
    image_id: int,
    payload: TagsUpdateRequest,
    db: DBSession,
    current_user: CurrentUser,
) -> ApiResponse[ImageResponse]:
    """Replace the image's free-text tags (blank clears them)."""
    image = await _get_owned_image(db, current_user, image_id)
    image.custom_tags = payload.custom_tags
    await db.flush()
    await db.refresh(image)

    return ApiResponse(
        message="Tags updated successfully",
        data=ImageResponse.model_validate(image),
    )


@router.delete(
    "/{image_id}",
    response_model=MessageResponse,
    summary="Delete an image",
)
async def delete_image(
    image_id: int,
    db: DBSession,
    current_user: CurrentUser,
    processor: Processor,
) -> MessageResponse:
    """Delete the record, then its file and thumbnail (best effort)."""
    image = await _get_owned_image(db, current_user, image_id)
    filename = image.filename

    await db.delete(image)
    # Files go only once the row is gone for good
    await db.commit()

    processor.storage.delete_image_files(filename)
    logger.info(f"User {current_user.id} deleted image {image_id}")
    return MessageResponse(message="Image deleted successfully")


@router.get(
    "/{image_id}/file",
    summary="Download the stored file",
    response_class=FileResponse,
)
async def download_image(
    image_id: int,
    db: DBSession,
    current_user: CurrentUser,
    processor: Processor,
    thumbnail: bool = False,
) -> FileResponse:
    image = await _get_owned_image(db, current_user, image_id)
    path = processor.storage.path_for(image.filename, thumbnail=thumbnail)
    if not path.is_file():
        raise NotFoundException("Image file not found on disk")

    return FileResponse(
        path,
        media_type=image.mime_type,
        filename=image.original_name,
    )


@router.post(
    "/{image_id}/edit",
    summary="Render an edited copy",
    response_class=Response,
    responses={200: {"content": {"image/png": {}, "image/jpeg": {}, "image/webp": {}}}},
)
async def edit_image(
    image_id: int,
    payload: EditImageRequest,
    db: DBSession,
    current_user: CurrentUser,
    processor: Processor,
) -> Response:
    """Apply adjustments and/or a crop and return the encoded result.

    The stored asset is never modified.

    Raises:
        NotFoundException: Unknown image or missing file.
        ValidationException: Degenerate crop region or undecodable asset.
    """
    image = await _get_owned_image(db, current_user, image_id)

    try:
        raster = await asyncio.to_thread(processor.load_raster, image.filename)
    except FileNotFoundStorageError:
        raise NotFoundException("Image file not found on disk")
    except RasterDecodeError as e:
        raise ValidationException(str(e), details={"id": image_id})

    try:
        edited = await asyncio.to_thread(apply_edits, raster, payload.to_edit_request())
    except DegenerateRegionError as e:
        crop = payload.crop.model_dump() if payload.crop else None
        raise ValidationException(str(e), details={"crop": crop})

    data, media_type = await asyncio.to_thread(encode_raster, edited, payload.format)
    logger.info(
        f"Rendered edit of image {image_id}: {raster.width}x{raster.height} -> "
        f"{edited.width}x{edited.height} ({payload.format})"
    )
    return Response(content=data, media_type=media_type)
