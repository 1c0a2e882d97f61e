from __future__ import annotations

import re

from ..models.dataset import Row
from ..validation.coercion import JSONParseError, parse_json, to_text

"""Best-effort correction suggestions for validation messages.

Heuristics only:
- malformed AttributesJSON: quote bare keys, turn single quotes into double
  quotes, re-parse; when still invalid fall back to "{}" (lossy by nature).
- malformed RequestedTaskIDs: keep the tokens starting with "T".

Anything else yields None. Nothing here raises.
"""

__all__ = [
    "EMPTY_JSON_OBJECT",
    "ROW_REF_RE",
    "correction_field",
    "row_index_from_message",
    "suggest_correction",
    "apply_correction",
]

EMPTY_JSON_OBJECT = "{}"
ROW_REF_RE = re.compile(r"Row (\d+):")
_BARE_KEY_RE = re.compile(r"(\w+):", re.ASCII)


def row_index_from_message(message: str) -> int | None:
    """0-based row index referenced by a "Row N:" message, if any."""
    match = ROW_REF_RE.search(message)
    if not match:
        return None
    return int(match.group(1)) - 1


def correction_field(message: str) -> str | None:
    """Column a correction for this message should be written to."""
    if "AttributesJSON" in message:
        return "AttributesJSON"
    if "RequestedTaskIDs" in message:
        return "RequestedTaskIDs"
    return None


def _repair_json(text: str) -> str:
    fixed = _BARE_KEY_RE.sub(r'"\1":', text).replace("'", '"')
    try:
        parse_json(fixed)
    except JSONParseError:
        return EMPTY_JSON_OBJECT
    return fixed


def suggest_correction(message: str, row: Row) -> str | None:
    """Suggest a replacement cell value for the field a message complains about."""
    if "Invalid JSON" in message:
        attributes = to_text(row.get("AttributesJSON"))
        if attributes and attributes != "INVALID_JSON":
            return _repair_json(attributes)

    if "RequestedTaskIDs" in message:
        task_ids = to_text(row.get("RequestedTaskIDs"))
        kept = [t for t in task_ids.split(",") if t.strip().startswith("T")]
        if kept:
            return ",".join(kept)

    return None


def apply_correction(message: str, rows: list[Row], correction: str) -> list[Row] | None:
    """Return a new row list with the correction written into the referenced row.

    Returns None when the message names no row in range or no correctable field.
    """
    index = row_index_from_message(message)
    field = correction_field(message)
    if index is None or field is None or not 0 <= index < len(rows):
        return None
    updated = list(rows)
    new_row = dict(updated[index])
    new_row[field] = correction
    updated[index] = new_row
    return updated
