from __future__ import annotations

import itertools
from datetime import datetime
from typing import Any

from ..models.insights import RuleRecommendation
from ..models.rules import Rule, RuleType, build_rules_export

"""Rules builder: the in-memory list of authored rules.

Rules are never evaluated; the builder only collects them for rules.json.
"""

__all__ = [
    "RulesBuilder",
]


class RulesBuilder:
    def __init__(self) -> None:
        self._rules: dict[int, Rule] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules.values())

    def items(self) -> list[tuple[int, Rule]]:
        return list(self._rules.items())

    def add_rule(
        self,
        rule_type: RuleType | str,
        description: str,
        parameters: dict[str, Any] | None = None,
    ) -> int | None:
        """Add a rule; blank descriptions are ignored.

        Returns:
            The new rule id, or None when nothing was added
        """
        if not description.strip():
            return None
        rule = Rule(type=RuleType(rule_type), description=description, parameters=dict(parameters or {}))
        return self.add(rule)

    def add(self, rule: Rule) -> int:
        rule_id = next(self._ids)
        self._rules[rule_id] = rule
        return rule_id

    def accept(self, recommendation: RuleRecommendation) -> int:
        return self.add(recommendation.to_rule())

    def remove_rule(self, rule_id: int) -> bool:
        return self._rules.pop(rule_id, None) is not None

    def export(self, created_at: datetime | None = None) -> dict[str, Any]:
        return build_rules_export(self.rules, created_at)
