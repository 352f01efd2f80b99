# lrid/engine/responses.py
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .precedence import resolve_value

UNKNOWN_CASE = "UNKNOWN_CASE"


class Respondent(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    organisation: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class Answer(BaseModel):
    # both judged by the validator, not rejected here
    question_id: Any = None
    value: Any = None

    model_config = ConfigDict(extra="ignore")


class ResponseSet(BaseModel):
    case_id: Optional[str] = None
    respondent: Respondent = Field(default_factory=Respondent)
    consent: Any = None
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None
    answers: List[Answer] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("case_id", mode="before")
    @classmethod
    def _case_id_as_text(cls, v: Any):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("answers", mode="before")
    @classmethod
    def _answers_as_records(cls, v: Any):
        if not isinstance(v, list):
            return []
        return [a if isinstance(a, (dict, Answer)) else {"value": a} for a in v]

    @property
    def resolved_case_id(self) -> str:
        return resolve_value(None, self.case_id, UNKNOWN_CASE)

    @property
    def reported_duration_usable(self) -> bool:
        d = self.duration_seconds
        return d is None or (math.isfinite(d) and d >= 0)

    def resolved_duration(self) -> float:
        """
        Explicit duration, else the timestamp difference, else 0.
        A negative or non-finite explicit duration counts as absent.
        """
        def _from_timestamps() -> float:
            if not (self.started_at and self.submitted_at):
                return 0.0
            try:
                delta = self.submitted_at - self.started_at
            except TypeError:
                # naive vs aware timestamps
                return 0.0
            return max(0.0, delta.total_seconds())

        explicit = self.duration_seconds if self.reported_duration_usable else None
        return float(resolve_value(None, explicit, _from_timestamps))
