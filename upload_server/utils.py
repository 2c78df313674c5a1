"""Utility helper functions for the upload server."""

import re
from datetime import datetime, timezone

from upload_server.exceptions import InvalidArgumentError

FILE_ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9._-]{0,199}$')


def utc_now() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def validate_file_id(file_id: str) -> str:
    """
    Check that an upload identifier is usable as a file name.

    Args:
        file_id: Client-supplied identifier

    Returns:
        The identifier, unchanged

    Raises:
        InvalidArgumentError: If the identifier is empty or contains
            characters outside [A-Za-z0-9._-]
    """
    if not file_id:
        raise InvalidArgumentError("file_id is required")
    if not FILE_ID_PATTERN.fullmatch(file_id):
        raise InvalidArgumentError(
            "file_id must be 1-200 characters of letters, digits, '.', '_' or '-' "
            "and start with a letter or digit"
        )
    return file_id


def parse_positive_int(value, name: str) -> int:
    """
    Parse a strictly positive integer from a query or form value.

    Raises:
        InvalidArgumentError: If the value is missing, not an integer, or <= 0
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgumentError(f"{name} is required")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{name} must be a positive integer")
    if number <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer")
    return number
