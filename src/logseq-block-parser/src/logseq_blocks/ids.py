"""Block identifier utilities.

Logseq identifies blocks with lowercase UUID strings stored in ``id::``
properties. This module validates and generates them.
"""

import re
import uuid
from typing import Optional


UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"

_UUID_REGEX = re.compile(rf"^{UUID_PATTERN}$", re.IGNORECASE)


def is_valid_block_id(value: object) -> bool:
    """Check whether a value is a well-formed block identifier.

    Args:
        value: Candidate identifier (anything; non-strings are never valid)

    Returns:
        True if value is an 8-4-4-4-12 hex UUID string (any case)

    Examples:
        >>> is_valid_block_id("65f3a8e0-1234-5678-9abc-def012345678")
        True
        >>> is_valid_block_id("not-a-uuid")
        False
    """
    return isinstance(value, str) and _UUID_REGEX.match(value) is not None


def normalize_block_id(value: object) -> Optional[str]:
    """Return the lowercase form of a valid identifier, or None."""
    if not is_valid_block_id(value):
        return None
    return value.lower()


def generate_block_id() -> str:
    """
    Generate a fresh random block identifier (UUID v4).

    Returns:
        UUID string in standard lowercase format

    Example:
        >>> generate_block_id()
        "f47ac10b-58cc-4372-a567-0e02b2c3d479"
    """
    return str(uuid.uuid4())
