"""
Core Utilities.

Shared utility functions used across the package.
"""

from datetime import datetime, timezone

MASK = "****"


def utc_now() -> datetime:
    """
    Return current UTC time as a timezone-aware datetime.

    Request signing renders an explicit UTC offset, so the tzinfo
    is kept on the value.
    """
    return datetime.now(timezone.utc)


def mask_secret(value: str, visible: int = 4) -> str:
    """
    Mask a secret for display, keeping only its trailing characters.

    Secrets of `visible` characters or fewer are fully masked.

    Example:
        mask_secret("wJalrXUtnFEMI") -> "****FEMI"
    """
    if len(value) > visible:
        return MASK + value[-visible:]
    return MASK
