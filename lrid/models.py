# lrid/models.py
from __future__ import annotations

import enum
import json
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Enum as SAEnum,
    ForeignKey,
    DateTime,
    Float,
    Boolean,
    Integer,
    Text,
)
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator, TEXT

from .db import Base


# -------------------------
# SQLite-safe JSON document
# -------------------------
class JsonDoc(TypeDecorator):
    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "{}"
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False, default=str)
        if isinstance(value, str):
            s = value.strip()
            return s if s else "{}"
        return "{}"

    def process_result_value(self, value, dialect):
        if not value:
            return {}
        try:
            return json.loads(value)
        except ValueError:
            return {}


class CaseStatusEnum(str, enum.Enum):
    DRAFTED = "DRAFTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    REVISE = "REVISE"


class ActionEnum(str, enum.Enum):
    SUBMIT_RESPONSES = "SUBMIT_RESPONSES"
    BUILD_DRAFT = "BUILD_DRAFT"
    SAVE_APPROVAL = "SAVE_APPROVAL"
    RENDER_REPORT = "RENDER_REPORT"
    RELOAD_INSTRUMENT = "RELOAD_INSTRUMENT"
    FAILURE_LOG = "FAILURE_LOG"


DECISION_TO_STATUS = {
    "APPROVE": CaseStatusEnum.APPROVED,
    "REJECT": CaseStatusEnum.REJECTED,
    "REVISE": CaseStatusEnum.REVISE,
}


class Case(Base):
    __tablename__ = "cases"

    case_id = Column(String, primary_key=True, index=True)
    respondent_name = Column(String, nullable=True)
    status = Column(SAEnum(CaseStatusEnum), nullable=False, default=CaseStatusEnum.DRAFTED)

    # Draft summary (denormalised for listing)
    validation_status = Column(String, nullable=False)   # PASS / FAIL
    recommendation = Column(String, nullable=False)      # AUTO_PUBLISH / REVIEW / DEBRIEF
    confidence_score = Column(Float, nullable=True)
    confidence_level = Column(String, nullable=True)
    high_stakes = Column(Boolean, default=False)

    # Raw input + immutable draft record
    responses = Column(JsonDoc, nullable=False)
    draft = Column(JsonDoc, nullable=False)

    # Provenance
    instrument_version = Column(String, nullable=True)
    app_version = Column(String, nullable=True)
    schema_version = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(String, ForeignKey("cases.case_id"), nullable=False, index=True)

    decision = Column(String, nullable=False)
    operator_id = Column(String, nullable=True)
    operator_notes = Column(Text, default="")

    # Full approval document (overrides included) + derived report payload
    approval = Column(JsonDoc, nullable=False)
    payload = Column(JsonDoc, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)

    case_id = Column(String, nullable=True, index=True)
    action = Column(SAEnum(ActionEnum), nullable=False)
    actor_type = Column(String, default="SYSTEM")
    payload = Column(Text, default="{}")

    app_version = Column(String, default="dev")
    schema_version = Column(String, default="dev")

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
