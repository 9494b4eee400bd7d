"""Shared utility helpers used across services."""
import uuid
from datetime import datetime, timezone

from crm.exceptions import ValidationError


def utcnow() -> datetime:
    """Return timezone-aware UTC now. Replaces deprecated datetime.utcnow()."""
    return datetime.now(timezone.utc)


def parse_uuid(value, label: str) -> uuid.UUID:
    """Parse a UUID coming from a query string or payload, or raise ValidationError."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}: {value!r}") from None


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def model_snapshot(instance) -> dict:
    """Column values of a model row, keyed by attname (FKs as `<name>_id`)."""
    return {f.attname: getattr(instance, f.attname) for f in instance._meta.concrete_fields}


def positive_int(value, label: str, default: int) -> int:
    """Parse a page/limit style query parameter; blank means `default`."""
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a positive integer") from None
    if number < 1:
        raise ValidationError(f"{label} must be a positive integer")
    return number
