from __future__ import annotations

import json
from typing import Any

from ..models.command import Condition, ConditionOperator, MutationPreview, ParsedCommand
from ..models.dataset import Row
from ..validation.coercion import display_text, to_number

"""Mutation preview for parsed commands.

preview_command() never touches the input rows: every row is copied and, when
the command condition holds (or there is none), exactly one field of the copy
is overwritten. The caller either commits preview.rows as the new dataset
snapshot in one replacement or drops the preview.
"""

__all__ = [
    "condition_matches",
    "preview_command",
    "count_changed_rows",
]


def condition_matches(condition: Condition | None, row: Row) -> bool:
    """Evaluate a command condition against a row (no condition -> True)."""
    if condition is None:
        return True
    row_value = row.get(condition.field)
    op = condition.operator
    if op is ConditionOperator.EQUALS:
        return display_text(row_value) == display_text(condition.value)
    if op is ConditionOperator.CONTAINS:
        return display_text(condition.value).lower() in display_text(row_value).lower()
    if op is ConditionOperator.GREATER:
        return to_number(row_value) > to_number(condition.value)
    if op is ConditionOperator.LESS:
        return to_number(row_value) < to_number(condition.value)
    return True


def _serialize(row: Row) -> str:
    return json.dumps(row, ensure_ascii=False, default=str)


def count_changed_rows(before: list[Row], after: list[Row]) -> int:
    """Number of positions whose serialized row differs."""
    return sum(1 for old, new in zip(before, after, strict=True) if _serialize(old) != _serialize(new))


def preview_command(command: ParsedCommand, rows: list[Row]) -> MutationPreview:
    """Compute candidate rows for a command without committing them."""
    candidate: list[Row] = []
    for row in rows:
        new_row: dict[str, Any] = dict(row)
        if condition_matches(command.condition, row):
            new_row[command.field] = command.value
        candidate.append(new_row)
    return MutationPreview(
        command=command,
        rows=candidate,
        affected_rows=count_changed_rows(rows, candidate),
    )
