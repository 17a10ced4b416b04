from __future__ import annotations

import secrets
import string
from typing import Callable, Optional

from ..core.config import settings

_ALPHABET = string.digits + string.ascii_uppercase
_SUFFIX_LEN = 6
MAX_ATTEMPTS = 10


def generate_quote_number(prefix: Optional[str] = None) -> str:
    """Return ``PRE-XXXXXX`` with six random base-36 characters."""
    pfx = (prefix or settings.QUOTE_NUMBER_PREFIX or "PRE").strip().upper()
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LEN))
    return f"{pfx}-{suffix}"


def unique_quote_number(exists: Callable[[str], bool], prefix: Optional[str] = None) -> str:
    """Draw numbers until ``exists`` reports a free one for the tenant."""
    for _ in range(MAX_ATTEMPTS):
        candidate = generate_quote_number(prefix)
        if not exists(candidate):
            return candidate
    raise RuntimeError(f"Could not allocate a free quote number after {MAX_ATTEMPTS} attempts")
