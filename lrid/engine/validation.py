# lrid/engine/validation.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .instrument import Instrument, Question
from .responses import ResponseSet

PASS = "PASS"
FAIL = "FAIL"


@dataclass
class ValidationResult:
    status: str  # PASS / FAIL
    hard_errors: List[str] = field(default_factory=list)
    soft_warnings: List[str] = field(default_factory=list)

    missing_required: List[str] = field(default_factory=list)
    invalid_questions: List[str] = field(default_factory=list)
    short_text_questions: List[str] = field(default_factory=list)
    completeness: Dict[str, int] = field(default_factory=dict)

    duration_seconds: float = 0.0
    too_fast: bool = False
    straight_lining: bool = False
    low_variance: bool = False

    # conforming answers only; everything downstream reads from here
    valid_answers: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def passed(self) -> bool:
        return self.status == PASS

    def to_dict(self) -> dict:
        out = asdict(self)
        out.pop("valid_answers", None)
        return out


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _type_error(q: Question, value: Any) -> Optional[str]:
    """Return a reason string when `value` does not satisfy the question's type."""
    if q.type == "scale":
        if not isinstance(value, int) or isinstance(value, bool):
            return "expected an integer"
        if not (q.scale.min <= value <= q.scale.max):
            return f"expected a value in [{q.scale.min}, {q.scale.max}]"
        return None

    if q.type == "choice":
        if not isinstance(value, str) or value not in q.options:
            return f"expected one of {q.options}"
        return None

    if q.type == "yes_no":
        if not isinstance(value, bool):
            return "expected true/false"
        return None

    if q.type == "text":
        if not isinstance(value, str):
            return "expected text"
        return None

    # consistency probe: numeric or string
    if not (_is_number(value) or isinstance(value, str)):
        return "expected a number or text"
    return None


def validate_responses(instrument: Instrument, responses: ResponseSet) -> ValidationResult:
    hard: List[str] = []
    soft: List[str] = []
    valid: Dict[str, Any] = {}
    invalid: List[str] = []
    seen: set[str] = set()

    # ---------- consent ----------
    if responses.consent is not None and responses.consent is not True:
        hard.append("Consent not granted")

    # ---------- per-answer type conformance ----------
    for n, ans in enumerate(responses.answers, start=1):
        qid = ans.question_id
        if not isinstance(qid, str) or not qid.strip():
            hard.append(f"Answer {n} has no valid question id")
            continue
        if qid in seen:
            # first answer wins; later duplicates are ignored
            soft.append(f"Duplicate answer for {qid} ignored")
            continue
        seen.add(qid)

        q = instrument.question(qid)
        if q is None:
            hard.append(f"Answer references unknown question {qid}")
            invalid.append(qid)
            continue

        reason = _type_error(q, ans.value)
        if reason:
            hard.append(f"Invalid answer for {qid} ({q.type}): {reason}")
            invalid.append(qid)
            continue

        valid[qid] = ans.value

    # ---------- completeness ----------
    required = instrument.required_ids
    missing = [qid for qid in required if qid not in seen]
    for qid in missing:
        hard.append(f"Missing required answer: {qid}")

    answered_total = len(responses.answers)
    if instrument.expected_questions > 0 and answered_total != instrument.expected_questions:
        soft.append(
            f"Expected {instrument.expected_questions} answers but got {answered_total}"
        )

    # ---------- short open text ----------
    short: List[str] = []
    for q in instrument.questions:
        if q.type != "text" or q.min_length <= 0 or q.id not in valid:
            continue
        if len(valid[q.id].strip()) < q.min_length:
            short.append(q.id)
            soft.append(f"Answer to {q.id} is shorter than {q.min_length} characters")

    # ---------- timing ----------
    if not responses.reported_duration_usable:
        soft.append(f"Reported duration {responses.duration_seconds!r} ignored: not a non-negative number")
    duration = responses.resolved_duration()
    min_seconds = instrument.min_expected_seconds
    too_fast = min_seconds > 0 and 0 < duration < min_seconds
    if too_fast:
        soft.append(
            f"Duration {duration:g}s is below the expected minimum of {min_seconds}s "
            "(may indicate rushed completion)"
        )

    # ---------- answer patterns ----------
    numeric = [
        valid[q.id] for q in instrument.questions
        if q.type == "scale" and q.id in valid
    ]
    distinct = len(set(numeric))
    enough = len(numeric) >= instrument.pattern_min_answers
    straight_lining = enough and distinct == 1
    low_variance = enough and distinct <= 2
    if straight_lining:
        soft.append(f"Straight-lining: all {len(numeric)} scale answers are {numeric[0]}")
    elif low_variance:
        soft.append(f"Low variance: {len(numeric)} scale answers use only {distinct} distinct values")

    completeness = {
        "expected": instrument.expected_questions,
        "answered_total": answered_total,
        "answered_valid": len(valid),
        "required_total": len(required),
        "required_answered": len(required) - len(missing),
    }

    return ValidationResult(
        status=FAIL if hard else PASS,
        hard_errors=hard,
        soft_warnings=soft,
        missing_required=missing,
        invalid_questions=invalid,
        short_text_questions=short,
        completeness=completeness,
        duration_seconds=duration,
        too_fast=too_fast,
        straight_lining=straight_lining,
        low_variance=low_variance,
        valid_answers=valid,
    )
