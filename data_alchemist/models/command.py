from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .dataset import DatasetKind, Row

"""Parsed modification command and mutation preview models.

Both structures are transient: a ParsedCommand lives only until its preview
is applied or cancelled.
"""

__all__ = [
    "CommandAction",
    "ConditionOperator",
    "Condition",
    "ParsedCommand",
    "MutationPreview",
]


class CommandAction(Enum):
    CHANGE = "change"
    SET = "set"
    UPDATE = "update"


class ConditionOperator(Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER = "greater"
    LESS = "less"


@dataclass(frozen=True)
class Condition:
    """Row filter attached to a command (field <operator> value)."""
    field: str
    operator: ConditionOperator
    value: str | int | float


@dataclass(frozen=True)
class ParsedCommand:
    """Structured result of interpreting an imperative sentence."""
    action: CommandAction
    field: str
    value: str | int | float
    dataset: DatasetKind
    condition: Condition | None = None

    def describe(self) -> str:
        text = f"{self.action.value} {self.field} to {self.value} on {self.dataset.value}"
        if self.condition is not None:
            c = self.condition
            text += f" where {c.field} {c.operator.value} {c.value}"
        return text


@dataclass(frozen=True)
class MutationPreview:
    """Candidate rows computed from a command, not yet committed."""
    command: ParsedCommand
    rows: list[Row]
    affected_rows: int
