from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Dataset domain model and DatasetKind enum.

A Dataset is an ordered, never-sorted sequence of loosely typed rows read from
a CSV or XLSX file. Rows keep whatever columns the source declared; extra
columns are carried verbatim.

Datasets are replaced wholesale on every edit (copy-on-write at dataset
granularity), so the model is frozen and helpers return new instances.
"""

__all__ = [
    "DatasetKind",
    "Dataset",
    "Row",
]

Row = dict[str, Any]


class DatasetKind(Enum):
    """The three supported tables.

    Each kind has an identity column which is expected to be unique within the
    dataset; uniqueness is only reported by validation, never enforced.
    """
    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"

    @property
    def id_column(self) -> str:
        return _ID_COLUMNS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: str | DatasetKind) -> DatasetKind:
        """Resolve a kind from its name (case-insensitive)."""
        if isinstance(value, DatasetKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            choices = ", ".join(k.value for k in cls)
            raise ValueError(f"unknown dataset '{value}' (expected one of: {choices})") from e


_ID_COLUMNS = {
    DatasetKind.CLIENTS: "ClientID",
    DatasetKind.WORKERS: "WorkerID",
    DatasetKind.TASKS: "TaskID",
}


@dataclass(frozen=True)
class Dataset:
    """Current snapshot of one table.

    columns keeps the header order declared by the source file; rows are
    plain dicts (column name -> cell value).
    """
    kind: DatasetKind
    rows: list[Row] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    source: str | None = None  # 読み込み元ファイル名 (不明なら None)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def with_rows(self, rows: list[Row]) -> Dataset:
        """Return a new snapshot holding rows, keeping kind/source.

        The column list is extended with any column first seen in the new rows
        so that exports keep every field.
        """
        columns = list(self.columns)
        seen = set(columns)
        for row in rows:
            for col in row:
                if col not in seen:
                    seen.add(col)
                    columns.append(col)
        return Dataset(kind=self.kind, rows=rows, columns=columns, source=self.source)
