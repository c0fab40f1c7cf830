"""Custom field helpers.

Jira returns custom fields as ``customfield_NNNNN`` keys holding arbitrary
JSON. Only scalar values are shown; objects and arrays (users, options,
sprints...) have no useful one-line rendering.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

CUSTOM_FIELD_PREFIX = "customfield_"


class FieldKind(str, Enum):
    """Kind of a decoded JSON field value."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    OBJECT = "object"
    ARRAY = "array"

    @property
    def is_scalar(self) -> bool:
        return self not in (FieldKind.OBJECT, FieldKind.ARRAY)


def field_kind(value: Any) -> FieldKind:
    """Classify a value decoded from JSON."""
    # bool before number: bool is an int subclass
    if value is None:
        return FieldKind.NULL
    if isinstance(value, bool):
        return FieldKind.BOOL
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if isinstance(value, str):
        return FieldKind.STRING
    if isinstance(value, dict):
        return FieldKind.OBJECT
    if isinstance(value, (list, tuple)):
        return FieldKind.ARRAY
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def editable_custom_fields(raw_fields: dict, edit_metadata: dict) -> list[tuple[str, Any]]:
    """Return ``(display name, value)`` for editable scalar custom fields.

    Args:
        raw_fields: The issue's ``fields`` object
        edit_metadata: ``{field_key: descriptor}`` from the edit metadata call

    Returns:
        Pairs sorted by display name.
    """
    result = []
    for key, value in raw_fields.items():
        if not key.startswith(CUSTOM_FIELD_PREFIX):
            continue
        descriptor = edit_metadata.get(key)
        if descriptor is None:
            continue
        if not field_kind(value).is_scalar:
            continue
        name = descriptor.get("name", key) if isinstance(descriptor, dict) else key
        result.append((name, value))

    return sorted(result, key=lambda pair: pair[0])
