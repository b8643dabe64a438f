"""
Input validators - framework-agnostic, pure functions.

Validators return booleans; services decide which error to raise.
"""

from __future__ import annotations

from typing import Optional

import validators as _validators

MIN_TEMP_PASSWORD_LENGTH = 8


def normalize_email(email: Optional[str]) -> str:
    """Strip surrounding whitespace; ``None`` becomes ``""``."""
    return (email or "").strip()


def validate_email(email: Optional[str]) -> bool:
    """Return True if *email* is a non-empty, syntactically valid address."""
    if not email:
        return False
    return bool(_validators.email(email))


def validate_app_id(app_id: Optional[str]) -> bool:
    """Return True if *app_id* is a non-blank string."""
    return bool(app_id and app_id.strip())


def validate_temp_password(password: Optional[str]) -> bool:
    """Return True if *password* is present and at least 8 characters long."""
    return password is not None and len(password) >= MIN_TEMP_PASSWORD_LENGTH


def validate_continue_url(url: Optional[str]) -> bool:
    """Return True if *url* is empty or an absolute http(s) URL."""
    if not url:
        return True
    if not url.lower().startswith(("http://", "https://")):
        return False
    return bool(_validators.url(url))
