from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime

from .dataset import DatasetKind

"""ValidationIssue model.

Issues are advisory findings tied to a dataset row. They never block editing
or export and are recomputed wholesale after every mutation.

row uses 1-based numbering; -1 marks dataset-level findings (missing
required columns) where no single row is at fault.
"""

__all__ = [
    "DATASET_LEVEL_ROW",
    "ValidationIssue",
]

DATASET_LEVEL_ROW = -1


@dataclass(frozen=True)
class ValidationIssue:
    """One validation finding.

    Attributes:
        dataset: Dataset the issue belongs to
        row: Row number (1-based). -1 for dataset-level issues
        message: Full human readable message, including the "Row N:" prefix
    """
    dataset: DatasetKind
    row: int
    message: str

    @staticmethod
    def for_row(dataset: DatasetKind, row: int, detail: str) -> ValidationIssue:
        return ValidationIssue(dataset=dataset, row=row, message=f"Row {row}: {detail}")

    @staticmethod
    def for_dataset(dataset: DatasetKind, message: str) -> ValidationIssue:
        return ValidationIssue(dataset=dataset, row=DATASET_LEVEL_ROW, message=message)

    @property
    def row_index(self) -> int | None:
        """0-based index into the dataset rows, None for dataset-level issues."""
        if self.row == DATASET_LEVEL_ROW:
            return None
        return self.row - 1

    def __str__(self) -> str:
        return self.message

    def to_json_line(self, source: str | None = None) -> str:
        """Serialize to the issue log JSON Lines format (fixed key set)."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        payload = {
            "timestamp": ts,
            "dataset": self.dataset.value,
            "source": source or "",
            "row": self.row,
            "message": self.message,
        }
        return json.dumps(payload, ensure_ascii=False)
