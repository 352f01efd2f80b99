# lrid/engine/draft.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .confidence import LEVEL_HIGH, ConfidenceOutcome, score_confidence
from .consistency import ConsistencyOutcome, run_consistency_checks
from .instrument import Instrument
from .red_flags import RedFlagOutcome, detect_red_flags
from .responses import ResponseSet
from .scoring import AggregateScore, DimensionScore, compute_aggregates, score_dimensions
from .validation import ValidationResult, validate_responses

logger = logging.getLogger(__name__)

ENGINE_VERSION = "1.0.0"

ACTION_AUTO_PUBLISH = "AUTO_PUBLISH"
ACTION_REVIEW = "REVIEW"
ACTION_DEBRIEF = "DEBRIEF"

NARRATIVE_FIELDS = ("executive_summary", "risk_notes", "recommendations")


@dataclass(frozen=True)
class Draft:
    case_id: str
    instrument_id: str
    instrument_version: str
    engine_version: str
    generated_at: str

    respondent: Dict[str, Any]
    validation: ValidationResult
    confidence: ConfidenceOutcome
    consistency: ConsistencyOutcome
    red_flags: RedFlagOutcome
    dimensions: Dict[str, DimensionScore]
    aggregates: Dict[str, AggregateScore]
    scoring_warnings: List[str]

    recommendation: str
    recommendation_reasons: List[str]
    narrative: Dict[str, str] = field(default_factory=lambda: {k: "" for k in NARRATIVE_FIELDS})

    def to_dict(self) -> dict:
        out = asdict(self)
        out["validation"] = self.validation.to_dict()
        return out


def recommend(validation: ValidationResult, confidence: ConfidenceOutcome, red_flags: RedFlagOutcome):
    """
    AUTO_PUBLISH only with no hard errors, High confidence and high-stakes OFF.
    High-stakes routes to DEBRIEF, everything else to REVIEW.
    """
    reasons: List[str] = []
    if red_flags.high_stakes:
        reasons.append(f"High-stakes red flags: {', '.join(red_flags.triggered)}")
    if validation.hard_errors:
        reasons.append(f"{len(validation.hard_errors)} hard validation error(s)")
    if confidence.level != LEVEL_HIGH:
        reasons.append(f"Confidence level is {confidence.level}")

    if red_flags.high_stakes:
        return ACTION_DEBRIEF, reasons
    if reasons:
        return ACTION_REVIEW, reasons
    return ACTION_AUTO_PUBLISH, reasons


def build_draft(
    instrument: Instrument,
    responses: ResponseSet,
    now: Optional[datetime] = None,
) -> Draft:
    """
    Total over response data: always returns a Draft. Response problems are
    recorded in the Draft (status FAIL for hard errors), never raised.
    """
    validation = validate_responses(instrument, responses)
    valid = validation.valid_answers

    dimensions, scoring_warnings = score_dimensions(instrument, valid)
    aggregates = compute_aggregates(instrument, dimensions)
    consistency = run_consistency_checks(instrument, valid)
    red_flags = detect_red_flags(instrument, valid)

    confidence = score_confidence(
        instrument.confidence,
        too_fast=validation.too_fast,
        straight_lining=validation.straight_lining,
        low_variance=validation.low_variance,
        short_text_count=len(validation.short_text_questions),
        consistency_mismatches=consistency.mismatch_count,
        high_stakes=red_flags.high_stakes,
    )
    action, reasons = recommend(validation, confidence, red_flags)

    stamp = (now or datetime.now(timezone.utc)).isoformat()
    case_id = responses.resolved_case_id

    logger.debug(
        "draft %s: validation=%s confidence=%s high_stakes=%s action=%s",
        case_id, validation.status, confidence.level, red_flags.high_stakes, action,
    )

    return Draft(
        case_id=case_id,
        instrument_id=instrument.id,
        instrument_version=instrument.version,
        engine_version=ENGINE_VERSION,
        generated_at=stamp,
        respondent=responses.respondent.model_dump(),
        validation=validation,
        confidence=confidence,
        consistency=consistency,
        red_flags=red_flags,
        dimensions=dimensions,
        aggregates=aggregates,
        scoring_warnings=scoring_warnings,
        recommendation=action,
        recommendation_reasons=reasons,
    )
