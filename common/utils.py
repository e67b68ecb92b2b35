"""Utility helper functions shared by the storage and model layers."""

import uuid
from datetime import datetime, timezone


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        Current timestamp as ISO format string
    """
    return datetime.now(timezone.utc).isoformat()


def base_mime_type(type_: str) -> str:
    """
    Strip parameters from a MIME type.

    Args:
        type_: MIME type, possibly with parameters (e.g., "text/plain; charset=utf-8")

    Returns:
        Lower-cased type token without parameters
    """
    return type_.split(';', 1)[0].strip().lower()


def is_bytes_like(data) -> bool:
    return isinstance(data, (bytes, bytearray, memoryview))
