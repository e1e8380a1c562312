"""Dependency injection utilities for API endpoints.

This module provides common dependencies used across API routes,
such as database sessions, pagination, the authenticated user and
the upload processor.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Query, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from photoshelf.core.config import settings
from photoshelf.core.exceptions import UnauthorizedException
from photoshelf.core.security import decode_access_token
from photoshelf.models import User
from photoshelf.services.database import get_db
from photoshelf.services.image_processor import ImageProcessor
from photoshelf.services.storage import StorageManager

# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]

bearer_scheme = HTTPBearer(auto_error=False)


class PaginationParams:
    """Page-based pagination parameters for list endpoints.

    Attributes:
        page: 1-based page number.
        limit: Maximum number of records per page.
    """

    def __init__(
        self,
        page: Annotated[int, Query(ge=1, description="Page number (1-based)")] = 1,
        limit: Annotated[
            int, Query(ge=1, le=100, description="Records per page")
        ] = 20,
    ) -> None:
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# Type alias for pagination dependency
Pagination = Annotated[PaginationParams, Depends()]


async def get_current_user(
    db: DBSession,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> User:
    """Resolve the user behind the ``Authorization: Bearer`` token.

    Raises:
        UnauthorizedException: Token missing, invalid, expired, or its
            user no longer exists.
    """
    if not credentials:
        raise UnauthorizedException("Missing authentication token")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub", ""))
    except (TypeError, ValueError):
        raise UnauthorizedException("Invalid or expired token")

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedException("User no longer exists")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


@lru_cache
def get_image_processor() -> ImageProcessor:
    """Shared upload processor bound to the configured upload directory."""
    storage = StorageManager(settings.upload_path)
    return ImageProcessor(storage, thumbnail_size=settings.THUMBNAIL_SIZE)


Processor = Annotated[ImageProcessor, Depends(get_image_processor)]
