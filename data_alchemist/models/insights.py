from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .rules import Rule, RuleType

"""Recommendation and insight models produced by the analysis service."""

__all__ = [
    "InsightSeverity",
    "RuleRecommendation",
    "ValidationInsight",
]


class InsightSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class RuleRecommendation:
    """A suggested rule derived from statistics over the datasets."""
    id: str
    type: RuleType
    description: str
    confidence: float  # 0.0 - 1.0
    reasoning: str
    suggested_parameters: dict[str, Any] = field(default_factory=dict)

    def to_rule(self) -> Rule:
        """Accepting a recommendation turns it into an exportable rule."""
        return Rule(
            type=self.type,
            description=self.description,
            parameters=dict(self.suggested_parameters),
        )


@dataclass(frozen=True)
class ValidationInsight:
    """A data quality observation, not tied to any rule."""
    severity: InsightSeverity
    message: str
    field: str | None = None
    row_index: int | None = None
    suggested_fix: str | None = None
