from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

"""Rule and prioritization weight models.

Rules are opaque records destined for export: nothing in the application
evaluates them against the datasets. The same holds for the prioritization
weights, which are pure configuration.
"""

__all__ = [
    "RULES_EXPORT_VERSION",
    "RuleType",
    "Rule",
    "PrioritizationWeights",
    "WEIGHT_EXPORT_NAMES",
    "build_rules_export",
]

RULES_EXPORT_VERSION = "1.0"

WEIGHT_MIN = 0
WEIGHT_MAX = 10

# export 名 (camelCase) -> フィールド名
WEIGHT_EXPORT_NAMES = {
    "priorityLevel": "priority_level",
    "maxConcurrent": "max_concurrent",
    "skillFit": "skill_fit",
    "fairness": "fairness",
    "cost": "cost",
    "efficiency": "efficiency",
}


class RuleType(Enum):
    """Fixed set of rule types offered by the rules builder."""
    CO_RUN = "coRun"
    SLOT_RESTRICTION = "slotRestriction"
    LOAD_LIMIT = "loadLimit"
    PHASE_WINDOW = "phaseWindow"
    REGEX_MATCH = "regexMatch"
    PRECEDENCE_OVERRIDE = "precedenceOverride"

    @property
    def label(self) -> str:
        return _RULE_LABELS[self]


_RULE_LABELS = {
    RuleType.CO_RUN: "Co-Run Tasks",
    RuleType.SLOT_RESTRICTION: "Slot Restriction",
    RuleType.LOAD_LIMIT: "Load Limit",
    RuleType.PHASE_WINDOW: "Phase Window",
    RuleType.REGEX_MATCH: "Regex Match",
    RuleType.PRECEDENCE_OVERRIDE: "Precedence Override",
}


@dataclass(frozen=True)
class Rule:
    """A user authored (or accepted) rule."""
    type: RuleType
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


@dataclass(frozen=True)
class PrioritizationWeights:
    """Six named sliders, integers 0-10.

    Field names are exported in camelCase to match prioritization.json.
    """
    priority_level: int = 5
    max_concurrent: int = 3
    skill_fit: int = 7
    fairness: int = 4
    cost: int = 6
    efficiency: int = 8

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"weight '{name}' must be an integer, got {value!r}")
            if not WEIGHT_MIN <= value <= WEIGHT_MAX:
                raise ValueError(f"weight '{name}' must be {WEIGHT_MIN}-{WEIGHT_MAX}, got {value}")

    def to_dict(self) -> dict[str, int]:
        values = asdict(self)
        return {export: values[name] for export, name in WEIGHT_EXPORT_NAMES.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PrioritizationWeights:
        """Build from the camelCase export keys. Missing keys keep defaults."""
        kwargs = {WEIGHT_EXPORT_NAMES[k]: v for k, v in data.items() if k in WEIGHT_EXPORT_NAMES}
        return cls(**kwargs)


def build_rules_export(rules: list[Rule], created_at: datetime | None = None) -> dict[str, Any]:
    """Build the rules.json document.

    Returns:
        {version, rules: [{type, description, parameters}], metadata: {createdAt, totalRules}}
    """
    created = created_at or datetime.now(UTC)
    return {
        "version": RULES_EXPORT_VERSION,
        "rules": [r.to_dict() for r in rules],
        "metadata": {
            "createdAt": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "totalRules": len(rules),
        },
    }
