"""Database models."""

from photoshelf.models.base import Base, TimestampMixin
from photoshelf.models.image import Image
from photoshelf.models.user import User

__all__ = ["Base", "TimestampMixin", "Image", "User"]
