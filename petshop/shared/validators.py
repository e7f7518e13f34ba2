"""Shared validation utilities"""

import uuid
from datetime import datetime, timezone
from typing import Optional


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize an absolute instant for storage and comparison.

    Aware datetimes are converted to UTC; naive datetimes are taken as UTC.
    The result is naive so that equality against stored values is exact on
    every backend.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def from_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Mark a stored naive UTC instant as UTC before it leaves the service"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
