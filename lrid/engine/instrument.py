# lrid/engine/instrument.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


QuestionType = Literal["scale", "choice", "yes_no", "text", "consistency"]
Severity = Literal["LOW", "MEDIUM", "HIGH"]

BAND_RISK = "Risk Zone"
BAND_MIXED = "Mixed"
BAND_STRONG = "Strong"


class InstrumentConfigError(RuntimeError):
    pass


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Dimension(_Frozen):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ScaleRange(_Frozen):
    min: int = 1
    max: int = 5


class Question(_Frozen):
    id: str = Field(..., min_length=1)
    dimension: str = Field(..., min_length=1)
    type: QuestionType
    prompt: str = ""
    required: bool = True

    # type-specific constraints
    scale: ScaleRange = Field(default_factory=ScaleRange)
    options: List[str] = Field(default_factory=list)
    min_length: int = Field(0, ge=0)


class Bands(_Frozen):
    """
    Two cut points partition a score into three labels.
    score <= risk_max -> Risk Zone, score <= mixed_max -> Mixed, above -> Strong.
    """
    risk_max: float = 2.79
    mixed_max: float = 3.30

    def classify(self, score: float) -> str:
        if score <= self.risk_max:
            return BAND_RISK
        if score <= self.mixed_max:
            return BAND_MIXED
        return BAND_STRONG


class AggregateIndex(_Frozen):
    id: str = Field(..., min_length=1)
    name: str = ""
    dimensions: List[str] = Field(..., min_length=1)


class ConsistencySet(_Frozen):
    id: str = Field(..., min_length=1)
    check_question: str
    questions: List[str] = Field(..., min_length=1)
    severity: Severity = "MEDIUM"
    keywords: List[str] = Field(default_factory=list)  # empty -> instrument-wide keywords


class ConsistencyConfig(_Frozen):
    high_integrity_threshold: float = 4
    exception_keywords: List[str] = Field(default_factory=list)
    sets: List[ConsistencySet] = Field(default_factory=list)


class RedFlagTrigger(_Frozen):
    questions: List[str] = Field(..., min_length=1)
    keywords: List[str] = Field(..., min_length=1)


class RedFlagRule(_Frozen):
    id: str = Field(..., min_length=1)
    name: str = ""
    severity: Severity = "MEDIUM"
    trigger: RedFlagTrigger


class SnippetPolicy(_Frozen):
    before: int = Field(40, ge=0)
    after: int = Field(120, ge=1)
    max_length: int = Field(160, ge=20)


class ConfidencePolicy(_Frozen):
    too_fast: float = 0.15
    straight_lining: float = 0.25
    low_variance: float = 0.10
    consistency_mismatch: float = 0.10
    consistency_cap: float = 0.30
    short_text: float = 0.05
    high_stakes: float = 0.0

    high_level: float = 0.80
    medium_level: float = 0.65


class Instrument(_Frozen):
    id: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    title: str = ""

    expected_questions: int = Field(0, ge=0)
    min_expected_seconds: int = Field(0, ge=0)
    pattern_min_answers: int = Field(10, ge=1)

    dimensions: List[Dimension] = Field(..., min_length=1)
    questions: List[Question] = Field(..., min_length=1)
    bands: Bands = Field(default_factory=Bands)
    aggregates: List[AggregateIndex] = Field(default_factory=list)
    consistency: ConsistencyConfig = Field(default_factory=ConsistencyConfig)
    red_flags: List[RedFlagRule] = Field(default_factory=list)
    snippets: SnippetPolicy = Field(default_factory=SnippetPolicy)
    confidence: ConfidencePolicy = Field(default_factory=ConfidencePolicy)

    @model_validator(mode="after")
    def _check_references(self) -> "Instrument":
        dim_ids = [d.id for d in self.dimensions]
        if len(set(dim_ids)) != len(dim_ids):
            raise ValueError("Duplicate dimension id")

        q_ids = [q.id for q in self.questions]
        if len(set(q_ids)) != len(q_ids):
            raise ValueError("Duplicate question id")

        questions = {q.id: q for q in self.questions}
        for q in self.questions:
            if q.dimension not in dim_ids:
                raise ValueError(f"Question {q.id} references unknown dimension {q.dimension}")
            if q.type in ("scale", "consistency") and q.scale.min > q.scale.max:
                raise ValueError(f"Question {q.id} has scale min > max")
            if q.type == "choice" and not q.options:
                raise ValueError(f"Choice question {q.id} has no options")

        for label, ids in (
            ("aggregate", [a.id for a in self.aggregates]),
            ("consistency set", [s.id for s in self.consistency.sets]),
            ("red-flag rule", [r.id for r in self.red_flags]),
        ):
            if len(set(ids)) != len(ids):
                raise ValueError(f"Duplicate {label} id")

        if self.bands.risk_max >= self.bands.mixed_max:
            raise ValueError("bands.risk_max must be below bands.mixed_max")

        for agg in self.aggregates:
            unknown = [d for d in agg.dimensions if d not in dim_ids]
            if unknown:
                raise ValueError(f"Aggregate {agg.id} references unknown dimensions {unknown}")

        for cs in self.consistency.sets:
            check = questions.get(cs.check_question)
            if check is None or check.type != "consistency":
                raise ValueError(f"Consistency set {cs.id} needs a consistency-type check question")
            unknown = [qid for qid in cs.questions if qid not in questions]
            if unknown:
                raise ValueError(f"Consistency set {cs.id} references unknown questions {unknown}")
            if not (cs.keywords or self.consistency.exception_keywords):
                raise ValueError(f"Consistency set {cs.id} has no keywords")

        for rule in self.red_flags:
            for qid in rule.trigger.questions:
                q = questions.get(qid)
                if q is None or q.type != "text":
                    raise ValueError(f"Red-flag rule {rule.id} must reference open-text questions, got {qid}")

        if self.confidence.medium_level > self.confidence.high_level:
            raise ValueError("confidence.medium_level must not exceed confidence.high_level")

        return self

    # ---------- lookups ----------
    def question(self, question_id: str) -> Optional[Question]:
        return self._question_index().get(question_id)

    def _question_index(self) -> Dict[str, Question]:
        return {q.id: q for q in self.questions}

    def questions_for(self, dimension_id: str) -> List[Question]:
        return [q for q in self.questions if q.dimension == dimension_id]

    def score_range(self, dimension_id: str) -> Tuple[int, int]:
        """Lowest and highest score a dimension mean can take."""
        scales = [q.scale for q in self.questions_for(dimension_id) if q.type == "scale"]
        if not scales:
            scales = [q.scale for q in self.questions if q.type == "scale"] or [ScaleRange()]
        return min(s.min for s in scales), max(s.max for s in scales)

    @property
    def required_ids(self) -> List[str]:
        return [q.id for q in self.questions if q.required]


def load_instrument(data: Any) -> Instrument:
    """
    Parse an instrument definition. Any structural problem is fatal: there is
    no meaningful draft without a valid instrument.
    """
    if not isinstance(data, dict) or not data:
        raise InstrumentConfigError("Instrument definition missing or not an object")
    try:
        return Instrument.model_validate(data)
    except ValidationError as e:
        raise InstrumentConfigError(f"Malformed instrument: {e}") from e


def load_instrument_file(path: str | Path) -> Instrument:
    p = Path(path)
    if not p.exists():
        raise InstrumentConfigError(f"Instrument file missing: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise InstrumentConfigError(f"Instrument file unreadable: {p}: {e}") from e
    return load_instrument(data)
