"""Analysis service boundary.

Callers talk to an AIService; the shipped implementation is a deterministic
stub built on regex tables and batch statistics. Every method is a coroutine
so a real language-model backend can be swapped in without touching callers.
The stub's only suspension point is an artificial delay.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from ..commands.parser import parse_command
from ..models.command import ParsedCommand
from ..models.dataset import DatasetKind, Row
from ..models.insights import RuleRecommendation, ValidationInsight
from .corrections import suggest_correction
from .insights import generate_validation_insights
from .recommendations import generate_rule_recommendations

Datasets = Mapping[DatasetKind, Sequence[Row]]


@dataclass(frozen=True)
class AiLatency:
    """Simulated delay per operation, in seconds (0 disables the delay)."""

    parse_command: float = 0.5
    recommendations: float = 1.0
    insights: float = 0.8
    corrections: float = 0.3


NO_LATENCY = AiLatency(parse_command=0.0, recommendations=0.0, insights=0.0, corrections=0.0)


class AIService(Protocol):
    async def parse_modification_command(self, command: str) -> ParsedCommand | None:
        """Interpret a modification sentence, None when not understood."""

    async def generate_rule_recommendations(self, datasets: Datasets) -> list[RuleRecommendation]:
        """Suggest rules from patterns in the data."""

    async def generate_validation_insights(self, datasets: Datasets) -> list[ValidationInsight]:
        """Report data quality observations."""

    async def suggest_correction(self, message: str, row: Row, kind: DatasetKind) -> str | None:
        """Suggest a replacement value for the cell a validation message refers to."""


class StubAIService:
    """Deterministic stand-in for a model-backed service."""

    def __init__(self, latency: AiLatency = AiLatency()) -> None:
        self.latency = latency

    async def _delay(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    async def parse_modification_command(self, command: str) -> ParsedCommand | None:
        await self._delay(self.latency.parse_command)
        return parse_command(command)

    async def generate_rule_recommendations(self, datasets: Datasets) -> list[RuleRecommendation]:
        await self._delay(self.latency.recommendations)
        return generate_rule_recommendations(datasets)

    async def generate_validation_insights(self, datasets: Datasets) -> list[ValidationInsight]:
        await self._delay(self.latency.insights)
        return generate_validation_insights(datasets)

    async def suggest_correction(self, message: str, row: Row, kind: DatasetKind) -> str | None:
        await self._delay(self.latency.corrections)
        return suggest_correction(message, row)
