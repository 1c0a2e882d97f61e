from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.validation_issue import ValidationIssue

"""Validation issue log (JSON Lines).

- fixed key set per line: timestamp, dataset, source, row, message
- one file per run: `<dir>/issues-YYYYMMDD-HHMMSS.log` (UTC), created lazily
- records are buffered in memory and appended on flush()
"""

__all__ = [
    "IssueLogBuffer",
]

DEFAULT_LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer of validation issues. Flush writes JSON Lines.

    Single-threaded use only.
    """

    def __init__(self, directory: Path = DEFAULT_LOGS_DIR) -> None:
        self.directory = directory
        self._records: list[tuple[ValidationIssue, str | None]] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.directory / f"issues-{stamp}.log"
        return self._file_path

    def append(self, issue: ValidationIssue, source: str | None = None) -> None:
        self._records.append((issue, source))

    def extend(self, issues: list[ValidationIssue], source: str | None = None) -> None:
        for issue in issues:
            self.append(issue, source)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path:
        if not self._records:
            return self.file_path  # 空の場合はパス確定のみ
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for issue, source in self._records:
                f.write(issue.to_json_line(source) + "\n")
        self._records.clear()
        return fp
