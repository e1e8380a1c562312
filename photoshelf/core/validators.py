"""
Input validation and sanitization helpers shared by request schemas.
"""

import re
import unicodedata
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
USERNAME_PATTERN = re.compile(r"^[\w.-]+$")

MAX_TAGS_LENGTH = 1000


def validate_email(email: str) -> str:
    """
    Validate email address format.

    A basic format check; deliverability is not verified.

    Returns:
        str: Normalized (stripped, lower-cased) email

    Raises:
        ValueError: If email format is invalid
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValueError("Email is required")
    if len(email) > 254:
        raise ValueError("Email too long (max 254 characters)")
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def validate_username(username: str) -> str:
    username = (username or "").strip()
    if not USERNAME_PATTERN.match(username):
        raise ValueError("Username may only contain letters, digits, '.', '_' and '-'")
    return username


def sanitize_text_input(text: Optional[str], max_length: int = MAX_TAGS_LENGTH) -> Optional[str]:
    """
    Clean free text before storing it.

    Strips surrounding whitespace and null bytes, normalizes Unicode
    (NFKC) and truncates to ``max_length``. Blank input becomes ``None``.
    """
    if text is None:
        return None

    text = text.replace("\x00", "").strip()
    text = unicodedata.normalize("NFKC", text)
    if len(text) > max_length:
        text = text[:max_length]
    return text or None
