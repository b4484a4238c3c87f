"""
Safe field access for loosely-typed event records.

Event records are open mappings from field name to scalar. Nothing here
mutates a record; a record that is not a mapping behaves as if every
field were missing.
"""
from typing import Any, Mapping, Optional

from app.core.sanitization import is_valid_category_value


def field_value(record: Any, field: str) -> Any:
    if not isinstance(record, Mapping):
        return None
    return record.get(field)


def text_value(record: Any, field: str) -> Optional[str]:
    """Return the field as a grouping key, or None when missing, non-string or a sentinel."""
    value = field_value(record, field)
    return value if is_valid_category_value(value) else None
