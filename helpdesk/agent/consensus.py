"""
Consensus scoring.

Consensus rewards a high average confidence and penalizes disagreement:
``mean * (1 - sqrt(population variance))``, clamped to [0, 1]. Decisions
may be ``AgentDecision`` models or the plain result dicts produced by
question graph nodes.
"""
import math
from collections.abc import Iterable, Mapping
from typing import Any

from helpdesk.agent.prompts import (
    RECOMMENDATION_HIGH,
    RECOMMENDATION_LOW,
    RECOMMENDATION_MEDIUM,
)


def _confidence_of(decision: Any) -> float:
    if isinstance(decision, Mapping):
        value = decision.get("confidence") or decision.get("overall_confidence")
    else:
        value = getattr(decision, "confidence", None) or getattr(decision, "overall_confidence", None)

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def collect_confidences(decisions: Iterable[Any]) -> list[float]:
    """Positive, finite confidences of the given decisions."""
    confidences = (_confidence_of(d) for d in decisions)
    return [c for c in confidences if math.isfinite(c) and c > 0]


def calculate_consensus(decisions: Iterable[Any]) -> float:
    confidences = collect_confidences(decisions)
    if not confidences:
        return 0.0

    average = sum(confidences) / len(confidences)
    variance = sum((c - average) ** 2 for c in confidences) / len(confidences)

    # Higher consensus when variance is lower
    score = average * (1 - math.sqrt(variance))

    return min(max(score, 0.0), 1.0)


def synthesize_recommendation(consensus: float) -> str:
    if consensus > 0.8:
        return RECOMMENDATION_HIGH
    if consensus > 0.6:
        return RECOMMENDATION_MEDIUM
    return RECOMMENDATION_LOW
