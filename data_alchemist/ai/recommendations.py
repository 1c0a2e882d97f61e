from __future__ import annotations

import math
from collections import Counter
from collections.abc import Mapping, Sequence

from ..models.dataset import DatasetKind, Row
from ..models.insights import RuleRecommendation
from ..models.rules import RuleType
from ..validation.coercion import to_fixed, to_number, to_text

"""Rule recommendations mined from the datasets.

Both analyses are pure batch passes with no state kept between calls.
"""

__all__ = [
    "co_occurrence_recommendations",
    "load_limit_recommendations",
    "generate_rule_recommendations",
]

TOP_PAIRS = 3
MIN_PAIR_COUNT = 2
MAX_CO_RUN_CONFIDENCE = 0.9
HIGH_LOAD_THRESHOLD = 3
LOAD_CAP_FACTOR = 0.8
LOAD_LIMIT_CONFIDENCE = 0.8


def _task_ids(row: Row) -> list[str]:
    return [t for t in to_text(row.get("RequestedTaskIDs")).split(",") if t]


def co_occurrence_recommendations(clients: Sequence[Row]) -> list[RuleRecommendation]:
    """Suggest coRun rules for task pairs requested together by several clients.

    Every unordered pair within a row is tallied under its sorted task IDs, so
    "T2,T1" counts toward the same pair as "T1,T2". The three most frequent
    pairs are considered and only those seen at least twice are recommended.
    """
    pairs: Counter[tuple[str, str]] = Counter()
    for client in clients:
        ids = _task_ids(client)
        for i in range(len(ids)):
            for j in range(i + 1, len(ids)):
                first, second = sorted((ids[i], ids[j]))
                pairs[(first, second)] += 1

    # 同数の場合は初出順 (安定ソート)
    ranked = sorted(pairs.items(), key=lambda item: item[1], reverse=True)[:TOP_PAIRS]
    recommendations: list[RuleRecommendation] = []
    for (first, second), count in ranked:
        if count < MIN_PAIR_COUNT:
            continue
        recommendations.append(
            RuleRecommendation(
                id=f"coRun-{first}-{second}",
                type=RuleType.CO_RUN,
                description=f"Tasks {first} and {second} often co-occur ({count} times)",
                confidence=min(count / 5, MAX_CO_RUN_CONFIDENCE),
                reasoning=f"Found {count} clients requesting both tasks together",
                suggested_parameters={"taskIds": [first, second]},
            )
        )
    return recommendations


def load_limit_recommendations(workers: Sequence[Row]) -> list[RuleRecommendation]:
    """Suggest loadLimit rules for worker groups with a high mean MaxLoadPerPhase."""
    totals: dict[str, list[float]] = {}
    for worker in workers:
        group = to_text(worker.get("WorkerGroup"))
        raw_load = worker.get("MaxLoadPerPhase")
        load = to_number(raw_load) if to_text(raw_load) else 0.0
        totals.setdefault(group, []).append(load)

    recommendations: list[RuleRecommendation] = []
    for group, loads in totals.items():
        mean = sum(loads) / len(loads)
        if not (math.isfinite(mean) and mean > HIGH_LOAD_THRESHOLD):
            continue
        recommendations.append(
            RuleRecommendation(
                id=f"loadLimit-{group}",
                type=RuleType.LOAD_LIMIT,
                description=f"{group} workers have high average load ({to_fixed(mean)})",
                confidence=LOAD_LIMIT_CONFIDENCE,
                reasoning=(
                    f"Average MaxLoadPerPhase for {group} is {to_fixed(mean)}, "
                    "suggesting potential overload"
                ),
                suggested_parameters={"group": group, "maxLoad": math.floor(mean * LOAD_CAP_FACTOR)},
            )
        )
    return recommendations


def generate_rule_recommendations(
    datasets: Mapping[DatasetKind, Sequence[Row]],
) -> list[RuleRecommendation]:
    """All recommendations: co-occurrence first, then load limits."""
    clients = datasets.get(DatasetKind.CLIENTS) or []
    workers = datasets.get(DatasetKind.WORKERS) or []
    return co_occurrence_recommendations(clients) + load_limit_recommendations(workers)
