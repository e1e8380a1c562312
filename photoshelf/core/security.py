"""
Password hashing and JWT access tokens.

Passwords are hashed with bcrypt through passlib; access tokens are
HS256 JWTs signed with ``JWT_SECRET_KEY`` whose ``sub`` claim is the
user id (as a string, per RFC 7519).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from photoshelf.core.config import settings
from photoshelf.core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12,
)


def hash_password(password: str) -> str:
    """
    Hash a password for storage.

    Args:
        password: Plain text password

    Returns:
        str: bcrypt hash, salt embedded
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its stored hash (constant-time).
    """
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: Any,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        subject: Token subject, usually the user id
        expires_delta: Token lifetime (default JWT_EXPIRATION_HOURS)
        extra_claims: Additional payload entries

    Returns:
        str: Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.JWT_EXPIRATION_HOURS))

    to_encode: Dict[str, Any] = dict(extra_claims or {})
    to_encode.update({
        "sub": str(subject),
        "exp": expire,
        "iat": now,
    })

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT token.

    Raises:
        UnauthorizedException: signature invalid, token expired or malformed
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise UnauthorizedException("Invalid or expired token")
