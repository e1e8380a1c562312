"""Account and authentication schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from photoshelf.core.validators import validate_email, validate_username
from photoshelf.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Registration payload."""

    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v)


class LoginRequest(CamelModel):
    """Login payload; users log in with their email."""

    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None


class TokenData(CamelModel):
    """Returned by register and login."""

    user: UserResponse
    token: str
