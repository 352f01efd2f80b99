# lrid/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, List, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .models import CaseStatusEnum


class SubmitOut(BaseModel):
    ok: bool = True
    case_id: str
    validation_status: str
    recommendation: str
    confidence_level: str
    high_stakes: bool
    hard_errors: List[str] = Field(default_factory=list)


class CaseSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    case_id: str
    respondent_name: Optional[str] = None
    status: CaseStatusEnum
    validation_status: str
    recommendation: str
    confidence_score: Optional[float] = None
    confidence_level: Optional[str] = None
    high_stakes: bool = False
    instrument_version: Optional[str] = None
    created_at: Optional[datetime] = None


class CaseList(BaseModel):
    ok: bool = True
    cases: List[CaseSummary] = Field(default_factory=list)


class ApprovalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: str
    decision: str
    operator_id: Optional[str] = None
    operator_notes: str = ""
    approval: dict = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @field_validator("operator_notes", mode="before")
    @classmethod
    def _coerce_notes(cls, v: Any):
        return v or ""
