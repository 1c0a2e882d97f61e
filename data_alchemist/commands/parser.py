from __future__ import annotations

import re

from ..models.command import CommandAction, Condition, ConditionOperator, ParsedCommand
from ..models.dataset import DatasetKind

"""Imperative sentence -> ParsedCommand.

Three fixed templates, tried in this order (case-insensitive):

1. "change all PriorityLevels to <int>"
2. "set MaxLoadPerPhase to <int> for <group> workers"
3. "update all <group> clients priority to <int>"

Any other phrasing yields None. Captured group names keep the case typed by
the user, so the resulting condition compares case-sensitively.
"""

__all__ = [
    "COMMAND_EXAMPLES",
    "NOT_UNDERSTOOD_MESSAGE",
    "parse_command",
]

COMMAND_EXAMPLES = (
    "Change all PriorityLevels to 5",
    "Set MaxLoadPerPhase to 2 for GroupB workers",
)

NOT_UNDERSTOOD_MESSAGE = (
    "Could not understand the command. Try: "
    + " or ".join(f"'{example}'" for example in COMMAND_EXAMPLES)
)

_CHANGE_PRIORITY_RE = re.compile(
    r"change\s+all\s+prioritylevels?\s+to\s+(\d+)", re.IGNORECASE | re.ASCII
)
_SET_WORKER_LOAD_RE = re.compile(
    r"set\s+maxloadperphase\s+to\s+(\d+)\s+for\s+(\w+)\s+workers?", re.IGNORECASE | re.ASCII
)
_UPDATE_GROUP_PRIORITY_RE = re.compile(
    r"update\s+all\s+(\w+)\s+clients?\s+priority\s+to\s+(\d+)", re.IGNORECASE | re.ASCII
)


def parse_command(text: str) -> ParsedCommand | None:
    """Interpret a modification sentence.

    Returns:
        ParsedCommand, or None when the sentence matches no template
    """
    match = _CHANGE_PRIORITY_RE.search(text)
    if match:
        return ParsedCommand(
            action=CommandAction.CHANGE,
            field="PriorityLevel",
            value=int(match.group(1)),
            dataset=DatasetKind.CLIENTS,
        )

    match = _SET_WORKER_LOAD_RE.search(text)
    if match:
        return ParsedCommand(
            action=CommandAction.SET,
            field="MaxLoadPerPhase",
            value=int(match.group(1)),
            dataset=DatasetKind.WORKERS,
            condition=Condition(
                field="WorkerGroup",
                operator=ConditionOperator.EQUALS,
                value=match.group(2),
            ),
        )

    match = _UPDATE_GROUP_PRIORITY_RE.search(text)
    if match:
        return ParsedCommand(
            action=CommandAction.UPDATE,
            field="PriorityLevel",
            value=int(match.group(2)),
            dataset=DatasetKind.CLIENTS,
            condition=Condition(
                field="GroupTag",
                operator=ConditionOperator.EQUALS,
                value=match.group(1),
            ),
        )

    return None
