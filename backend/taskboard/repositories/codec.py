"""
Taskboard Backend — JSON Document Codec
========================================

Normalizes the free-form JSON columns (custom_fields, tags, metadata,
entity_data) on their way in and out of storage.

    write: None → empty value; anything else must survive a JSON round trip
    read:  NULL, '' or a stored JSON null → empty value ({} or [])
"""

import json
from typing import Any, Callable

from taskboard.exceptions import ValidationError

EmptyFactory = Callable[[], Any]


def encode_document(value: Any, field: str, empty: EmptyFactory) -> Any:
    """Returns a plain JSON-compatible copy of `value`, or raises ValidationError."""
    if value is None:
        return empty()
    try:
        return json.loads(json.dumps(value, allow_nan=False))
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Field '{field}' is not a valid JSON document",
            field=field,
            context={"error": str(exc)},
        ) from exc


def decode_document(raw: Any, field: str, empty: EmptyFactory) -> Any:
    """Decodes a stored document; drivers may hand back text, bytes or parsed values."""
    if raw is None or raw == "" or raw == b"":
        return empty()
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise ValidationError(
                f"Stored value of '{field}' is not valid JSON",
                field=field,
                context={"error": str(exc)},
            ) from exc
    if raw is None:
        return empty()
    return raw
