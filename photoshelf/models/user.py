"""User model for account credentials.

Owns the images uploaded under the account.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photoshelf.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from photoshelf.models.image import Image


class User(Base, TimestampMixin):
    """Represents a registered account.

    Attributes:
        id: Primary key identifier.
        username: Unique display/login name.
        email: Unique email address used to log in.
        password_hash: bcrypt hash of the password.
        images: Images owned by this user.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    images: Mapped[list["Image"]] = relationship(
        "Image",
        back_populates="user",
        cascade="all, delete-orphan",
    )
