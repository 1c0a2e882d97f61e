"""Domain models for the data-alchemist editor core.

This package contains the value types shared by the validators, parsers,
analysis service and the workspace.
"""

from .command import CommandAction, Condition, ConditionOperator, MutationPreview, ParsedCommand
from .dataset import Dataset, DatasetKind, Row
from .insights import InsightSeverity, RuleRecommendation, ValidationInsight
from .rules import PrioritizationWeights, Rule, RuleType, build_rules_export
from .validation_issue import DATASET_LEVEL_ROW, ValidationIssue

__all__ = [
    # Datasets
    "Dataset",
    "DatasetKind",
    "Row",
    "ValidationIssue",
    "DATASET_LEVEL_ROW",
    # Commands
    "CommandAction",
    "Condition",
    "ConditionOperator",
    "ParsedCommand",
    "MutationPreview",
    # Rules / analysis
    "Rule",
    "RuleType",
    "PrioritizationWeights",
    "build_rules_export",
    "RuleRecommendation",
    "ValidationInsight",
    "InsightSeverity",
]
