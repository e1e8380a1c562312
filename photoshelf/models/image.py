"""Image model for uploaded photos.

This module defines the Image model which stores the metadata of a
stored asset; the bytes themselves live on the filesystem under
``UPLOAD_DIR`` (thumbnail under ``UPLOAD_DIR/thumbnails``).
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import JSON, BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photoshelf.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from photoshelf.models.user import User


class Image(Base, TimestampMixin):
    """Represents an uploaded image owned by a user.

    Attributes:
        id: Primary key identifier.
        user_id: Foreign key to the owning user.
        filename: Unique stored filename (also the thumbnail's name).
        original_name: Filename as sent by the client.
        mime_type: Content type accepted at upload.
        size: File size in bytes.
        width: Pixel width, if it could be read.
        height: Pixel height, if it could be read.
        exif_data: Picked EXIF fields, if any.
        custom_tags: Free-text tags entered by the user.
        user: Related User model.
    """

    __tablename__ = "images"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filename: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    exif_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    custom_tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="images")
