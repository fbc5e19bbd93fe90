"""Shared column defaults for models."""

from datetime import datetime, timezone

from bson import ObjectId


def new_object_id() -> str:
    """Return a new time-sortable 24-hex identifier."""
    return str(ObjectId())


def is_object_id(value) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
