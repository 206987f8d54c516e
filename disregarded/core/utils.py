"""
Shared utility functions.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone


SHORT_ID_ALPHABET = string.ascii_letters + string.digits


def generate_short_id(length: int = 5) -> str:
    """
    Generate a random alphanumeric identifier.
    
    Uniqueness is not guaranteed here; the store rejects collisions
    and the caller retries.
    """
    return "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(length))


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)
