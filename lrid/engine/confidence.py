# lrid/engine/confidence.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .instrument import ConfidencePolicy
from .scoring import round_score

LEVEL_HIGH = "High"
LEVEL_MEDIUM = "Medium"
LEVEL_CAUTION = "Caution"


@dataclass
class ConfidenceOutcome:
    score: float
    level: str
    drivers: List[str] = field(default_factory=list)


def level_for(score: float, policy: ConfidencePolicy) -> str:
    if score >= policy.high_level:
        return LEVEL_HIGH
    if score >= policy.medium_level:
        return LEVEL_MEDIUM
    return LEVEL_CAUTION


def score_confidence(
    policy: ConfidencePolicy,
    *,
    too_fast: bool = False,
    straight_lining: bool = False,
    low_variance: bool = False,
    short_text_count: int = 0,
    consistency_mismatches: int = 0,
    high_stakes: bool = False,
) -> ConfidenceOutcome:
    """
    Additive penalties from 1.0, one driver string per applied penalty.
    Straight-lining supersedes low variance.
    """
    score = 1.0
    drivers: List[str] = []

    def penalise(amount: float, reason: str) -> None:
        nonlocal score
        if amount <= 0:
            return
        score -= amount
        drivers.append(f"{reason} (-{amount:.2f})")

    if too_fast:
        penalise(policy.too_fast, "Completed faster than the expected minimum time")

    if straight_lining:
        penalise(policy.straight_lining, "Straight-lining across scale answers")
    elif low_variance:
        penalise(policy.low_variance, "Low variance across scale answers")

    if consistency_mismatches > 0:
        amount = min(policy.consistency_cap, policy.consistency_mismatch * consistency_mismatches)
        penalise(amount, f"{consistency_mismatches} consistency mismatch(es) between declared values and narrative")

    if short_text_count > 0:
        penalise(policy.short_text, f"{short_text_count} open-text answer(s) below minimum length")

    if high_stakes:
        penalise(policy.high_stakes, "High-stakes red flags present")

    score = round_score(max(0.0, min(1.0, score)))
    return ConfidenceOutcome(score=score, level=level_for(score, policy), drivers=drivers)
