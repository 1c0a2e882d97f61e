from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Sequence
from typing import Any

from ..models.dataset import DatasetKind, Row
from ..models.validation_issue import ValidationIssue
from .coercion import (
    JSONParseError,
    display_text,
    is_integer_array,
    parse_json,
    to_number,
    to_text,
)

"""Per-dataset validators.

validate_dataset(kind, rows) is a pure function: same rows in, same issue list
out. It never raises; a cell that cannot be checked produces an issue entry
instead of aborting the scan.

Check order is fixed per dataset:
1. required columns (one aggregate issue, dataset level)
2. per row, in row order: duplicate identity key, then the field checks

Field checks for a column reported missing are skipped, so an absent column
is reported exactly once.
"""

__all__ = [
    "REQUIRED_COLUMNS",
    "validate_dataset",
    "validate",
    "missing_columns",
]

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[DatasetKind, tuple[str, ...]] = {
    DatasetKind.CLIENTS: (
        "ClientID", "ClientName", "PriorityLevel", "RequestedTaskIDs", "GroupTag", "AttributesJSON",
    ),
    DatasetKind.WORKERS: (
        "WorkerID", "WorkerName", "Skills", "AvailableSlots", "MaxLoadPerPhase",
        "WorkerGroup", "QualificationLevel",
    ),
    DatasetKind.TASKS: (
        "TaskID", "TaskName", "Category", "Duration", "RequiredSkills", "PreferredPhases",
        "MaxConcurrent",
    ),
}

TASK_IDS_RE = re.compile(r"T\d+(,T\d+)*", re.ASCII)
PHASE_RANGE_RE = re.compile(r"\d+-\d+", re.ASCII)

# センチネル値: これらはチェック対象外
INVALID_JSON_SENTINEL = "INVALID_JSON"
NOT_A_LIST_SENTINEL = "not_a_list"
PHASES_SENTINEL = "7"


def missing_columns(kind: DatasetKind, rows: Sequence[Row]) -> list[str]:
    """Required columns absent from the header (first row keys).

    An empty dataset has no header to inspect and reports nothing.
    """
    if not rows:
        return []
    present = set(rows[0].keys())
    return [c for c in REQUIRED_COLUMNS[kind] if c not in present]


def _got(value: Any) -> str:
    return f'got "{display_text(value)}"'


def _in_range(value: Any, low: float, high: float) -> bool:
    n = to_number(value)
    return not math.isnan(n) and low <= n <= high


class _Scan:
    """Mutable state for one validation pass (issues + seen identity keys)."""

    def __init__(self, kind: DatasetKind, rows: Sequence[Row]) -> None:
        self.kind = kind
        self.rows = rows
        self.issues: list[ValidationIssue] = []
        self.seen_ids: set[str] = set()
        self.missing = set(missing_columns(kind, rows))

    def has(self, column: str) -> bool:
        return column not in self.missing

    def add(self, row_number: int, detail: str) -> None:
        self.issues.append(ValidationIssue.for_row(self.kind, row_number, detail))

    def check_duplicate(self, row: Row, row_number: int) -> None:
        id_column = self.kind.id_column
        key = to_text(row.get(id_column))
        if not key:
            return
        if key in self.seen_ids:
            self.add(row_number, f'Duplicate {id_column} "{key}"')
        else:
            self.seen_ids.add(key)


def _check_clients(scan: _Scan, row: Row, n: int) -> None:
    if scan.has("PriorityLevel") and not _in_range(row.get("PriorityLevel"), 1, 5):
        scan.add(n, f"PriorityLevel must be 1-5, {_got(row.get('PriorityLevel'))}")

    if scan.has("RequestedTaskIDs"):
        task_ids = to_text(row.get("RequestedTaskIDs"))
        if task_ids and not TASK_IDS_RE.fullmatch(task_ids):
            scan.add(
                n,
                f'RequestedTaskIDs should be comma-separated T-prefixed IDs, got "{task_ids}"',
            )

    if scan.has("AttributesJSON"):
        attributes = to_text(row.get("AttributesJSON"))
        if attributes and attributes != INVALID_JSON_SENTINEL:
            try:
                parse_json(attributes)
            except JSONParseError:
                scan.add(n, f'Invalid JSON in AttributesJSON: "{attributes}"')


def _check_workers(scan: _Scan, row: Row, n: int) -> None:
    if scan.has("AvailableSlots"):
        slots = to_text(row.get("AvailableSlots"))
        if slots and slots != NOT_A_LIST_SENTINEL:
            try:
                parsed = parse_json(slots)
            except JSONParseError:
                scan.add(n, f'AvailableSlots should be valid JSON array, got "{slots}"')
            else:
                if not is_integer_array(parsed):
                    scan.add(n, f'AvailableSlots should be array of numbers, got "{slots}"')

    if scan.has("MaxLoadPerPhase"):
        max_load = to_number(row.get("MaxLoadPerPhase"))
        if math.isnan(max_load) or max_load < 0:
            scan.add(n, f"MaxLoadPerPhase must be >= 0, {_got(row.get('MaxLoadPerPhase'))}")

    if scan.has("QualificationLevel") and not _in_range(row.get("QualificationLevel"), 1, 5):
        scan.add(n, f"QualificationLevel must be 1-5, {_got(row.get('QualificationLevel'))}")


def _check_tasks(scan: _Scan, row: Row, n: int) -> None:
    if scan.has("Duration"):
        duration = to_number(row.get("Duration"))
        if math.isnan(duration) or duration <= 0:
            scan.add(n, f"Duration must be > 0, {_got(row.get('Duration'))}")

    if scan.has("PreferredPhases"):
        phases = to_text(row.get("PreferredPhases"))
        if phases and phases != PHASES_SENTINEL:
            try:
                parsed = parse_json(phases)
            except JSONParseError:
                # "1-3" のような範囲表記は許容
                if not PHASE_RANGE_RE.fullmatch(phases):
                    scan.add(
                        n,
                        f'PreferredPhases should be JSON array or range format, got "{phases}"',
                    )
            else:
                if not is_integer_array(parsed):
                    scan.add(n, f'PreferredPhases should be array of numbers, got "{phases}"')

    if scan.has("MaxConcurrent"):
        max_concurrent = to_number(row.get("MaxConcurrent"))
        if math.isnan(max_concurrent) or max_concurrent <= 0:
            scan.add(n, f"MaxConcurrent must be > 0, {_got(row.get('MaxConcurrent'))}")


_ROW_CHECKS: dict[DatasetKind, Callable[[_Scan, Row, int], None]] = {
    DatasetKind.CLIENTS: _check_clients,
    DatasetKind.WORKERS: _check_workers,
    DatasetKind.TASKS: _check_tasks,
}


def validate_dataset(kind: DatasetKind | str, rows: Sequence[Row]) -> list[ValidationIssue]:
    """Validate every row of a dataset and collect all issues.

    Args:
        kind: Dataset kind (or its name)
        rows: Rows in source order

    Returns:
        Ordered list of ValidationIssue. Empty when the data is clean.
    """
    kind = DatasetKind.parse(kind)
    scan = _Scan(kind, rows)
    if scan.missing:
        missing = [c for c in REQUIRED_COLUMNS[kind] if c in scan.missing]
        scan.issues.append(
            ValidationIssue.for_dataset(kind, f"Missing required columns: {', '.join(missing)}")
        )

    check_row = _ROW_CHECKS[kind]
    for index, row in enumerate(rows):
        row_number = index + 1
        try:
            scan.check_duplicate(row, row_number)
            check_row(scan, row, row_number)
        except Exception as e:  # 行単位で継続 (スキャン全体は止めない)
            logger.debug(f"{kind.value} row {row_number} could not be checked: {e}")
            scan.add(row_number, f"could not be validated ({type(e).__name__}: {e})")

    logger.debug(f"validated {kind.value}: rows={len(rows)} issues={len(scan.issues)}")
    return scan.issues


def validate(kind: DatasetKind | str, rows: Sequence[Row]) -> list[str]:
    """Issue messages for a dataset, in evaluation order."""
    return [issue.message for issue in validate_dataset(kind, rows)]
