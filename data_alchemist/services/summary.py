from __future__ import annotations

from collections.abc import Mapping

from ..models.dataset import DatasetKind

"""SUMMARY line rendering.

Format:
    SUMMARY datasets={loaded} rows={rows} issues={issues} clients={n} workers={n} tasks={n}

The per-dataset counts are issue counts.
"""


def render_summary_line(
    row_counts: Mapping[DatasetKind, int],
    issue_counts: Mapping[DatasetKind, int],
) -> str:
    """Render the SUMMARY line for a validation run.

    Examples:
        >>> rows = {DatasetKind.CLIENTS: 3, DatasetKind.WORKERS: 0, DatasetKind.TASKS: 2}
        >>> issues = {DatasetKind.CLIENTS: 1, DatasetKind.TASKS: 0}
        >>> render_summary_line(rows, issues)
        'SUMMARY datasets=2 rows=5 issues=1 clients=1 workers=0 tasks=0'
    """
    loaded = sum(1 for kind in DatasetKind if row_counts.get(kind, 0) > 0)
    total_rows = sum(row_counts.get(kind, 0) for kind in DatasetKind)
    total_issues = sum(issue_counts.get(kind, 0) for kind in DatasetKind)
    per_kind = " ".join(f"{kind.value}={issue_counts.get(kind, 0)}" for kind in DatasetKind)
    return f"SUMMARY datasets={loaded} rows={total_rows} issues={total_issues} {per_kind}"
