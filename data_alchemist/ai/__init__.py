"""Deterministic analysis stub: recommendations, insights, corrections."""

from .corrections import apply_correction, suggest_correction
from .insights import generate_validation_insights
from .recommendations import generate_rule_recommendations
from .service import NO_LATENCY, AiLatency, AIService, StubAIService

__all__ = [
    "AIService",
    "AiLatency",
    "NO_LATENCY",
    "StubAIService",
    "apply_correction",
    "generate_rule_recommendations",
    "generate_validation_insights",
    "suggest_correction",
]
