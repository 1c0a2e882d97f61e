from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from ..models.dataset import DatasetKind, Row
from ..models.insights import InsightSeverity, ValidationInsight
from ..validation.coercion import to_fixed, to_number, to_text

"""Data quality insights ("smart scan")."""

__all__ = [
    "priority_variance_insights",
    "skill_gap_insights",
    "generate_validation_insights",
]

LOW_VARIANCE_THRESHOLD = 0.5


def priority_variance_insights(clients: Sequence[Row]) -> list[ValidationInsight]:
    """Warn when clients' PriorityLevel values barely differ.

    Uses the population variance of every numeric PriorityLevel.
    """
    priorities = [p for p in (to_number(c.get("PriorityLevel")) for c in clients) if not math.isnan(p)]
    if not priorities:
        return []
    mean = sum(priorities) / len(priorities)
    variance = sum((p - mean) ** 2 for p in priorities) / len(priorities)
    if not variance < LOW_VARIANCE_THRESHOLD:
        return []
    return [
        ValidationInsight(
            severity=InsightSeverity.WARNING,
            message=(
                "Low priority variance detected. Most clients have similar priority levels "
                f"(avg: {to_fixed(mean)})"
            ),
            field="PriorityLevel",
            suggested_fix="Consider diversifying priority levels for better resource allocation",
        )
    ]


def _skill_set(rows: Sequence[Row], column: str) -> dict[str, None]:
    # 挿入順を保持する集合として dict を使用
    skills: dict[str, None] = {}
    for row in rows:
        for skill in to_text(row.get(column)).split(","):
            normalized = skill.strip().lower()
            if normalized:
                skills[normalized] = None
    return skills


def skill_gap_insights(workers: Sequence[Row], tasks: Sequence[Row]) -> list[ValidationInsight]:
    """Report required task skills no worker offers (one error insight)."""
    available = _skill_set(workers, "Skills")
    missing = [skill for skill in _skill_set(tasks, "RequiredSkills") if skill not in available]
    if not missing:
        return []
    names = ", ".join(missing)
    return [
        ValidationInsight(
            severity=InsightSeverity.ERROR,
            message=f"Missing worker skills: {names}",
            field="RequiredSkills",
            suggested_fix=f"Add workers with skills: {names}",
        )
    ]


def generate_validation_insights(
    datasets: Mapping[DatasetKind, Sequence[Row]],
) -> list[ValidationInsight]:
    clients = datasets.get(DatasetKind.CLIENTS) or []
    workers = datasets.get(DatasetKind.WORKERS) or []
    tasks = datasets.get(DatasetKind.TASKS) or []
    return priority_variance_insights(clients) + skill_gap_insights(workers, tasks)
