"""
Input sanitization utilities for event records and user-provided field names.
"""
import re
from typing import Any

# Stringified missing values produced upstream; never valid chart categories.
MISSING_SENTINELS = frozenset({"", "undefined", "null"})

MAX_FIELD_NAME_LENGTH = 200


def is_valid_category_value(value: Any) -> bool:
    """
    Check whether a record value can be used as a grouping key.

    Only strings count. Empty strings and the "undefined"/"null" sentinels
    are rejected.
    """
    return isinstance(value, str) and value not in MISSING_SENTINELS


def validate_field_name(name: str) -> bool:
    """
    Validate that a dimension field name is safe to look up and log.

    Args:
        name: Field name to validate

    Returns:
        True if safe, False otherwise
    """
    if not name or len(name) > MAX_FIELD_NAME_LENGTH:
        return False

    if not name.strip():
        return False

    # Control characters (including newlines) are never part of a record field
    if re.search(r'[\x00-\x1f\x7f-\x9f]', name):
        return False

    return True


def sanitize_for_logging(value: str, max_length: int = 500) -> str:
    """
    Sanitize value for safe logging (prevents log injection).

    Args:
        value: Value to sanitize
        max_length: Maximum length

    Returns:
        Sanitized value safe for logging
    """
    if not value:
        return ""

    # Remove newlines and carriage returns
    value = re.sub(r'[\r\n]', ' ', value)

    # Remove other control characters
    value = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value
