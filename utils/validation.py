"""
Input validation utilities for guest-entered data.
"""

import re
from typing import Optional

# Permissive local@domain.tld shape; no RFC 5322 compliance intended
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return not value or not value.strip()


def validate_email(email: str) -> bool:
    """
    Validate email address shape.

    Args:
        email: Email address string

    Returns:
        True if it looks like local@domain.tld, False otherwise
    """
    if not email or not isinstance(email, str):
        return False

    return bool(_EMAIL_PATTERN.match(email))


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text.

    Args:
        text: Input text
        max_length: Optional maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Remove control characters except newlines and tabs
    sanitized = re.sub(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]", "", str(text))

    sanitized = sanitized.strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
