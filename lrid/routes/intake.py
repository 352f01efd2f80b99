# lrid/routes/intake.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..audit import record_event
from ..db import get_db
from ..instrument_store import get_instrument
from ..settings import get_settings

from lrid.engine.draft import build_draft
from lrid.engine.instrument import Instrument
from lrid.engine.responses import ResponseSet

router = APIRouter(prefix="/api/intake", tags=["intake"])
settings = get_settings()


@router.post("/submit", response_model=schemas.SubmitOut, status_code=201)
def submit(
    submission: ResponseSet,
    db: Session = Depends(get_db),
    instrument: Instrument = Depends(get_instrument),
):
    if not submission.case_id or not submission.case_id.strip():
        raise HTTPException(400, "Missing case_id")

    case_id = submission.case_id.strip()
    if db.query(models.Case).filter(models.Case.case_id == case_id).first():
        raise HTTPException(409, f"Case {case_id} already submitted")

    record_event(db, models.ActionEnum.SUBMIT_RESPONSES, case_id, {"answers": len(submission.answers)}, "RESPONDENT")

    # Engine is total over response data; only instrument errors escape.
    draft = build_draft(instrument, submission.model_copy(update={"case_id": case_id}))
    draft_doc = draft.to_dict()

    new_case = models.Case(
        case_id=case_id,
        respondent_name=submission.respondent.name,
        status=models.CaseStatusEnum.DRAFTED,
        validation_status=draft.validation.status,
        recommendation=draft.recommendation,
        confidence_score=draft.confidence.score,
        confidence_level=draft.confidence.level,
        high_stakes=draft.red_flags.high_stakes,
        responses=submission.model_dump(mode="json"),
        draft=draft_doc,
        instrument_version=instrument.version,
        app_version=settings.APP_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )

    try:
        db.add(new_case)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Duplicate insert")

    record_event(db, models.ActionEnum.BUILD_DRAFT, case_id, {
        "validation_status": draft.validation.status,
        "confidence": draft.confidence.score,
        "high_stakes": draft.red_flags.high_stakes,
        "recommendation": draft.recommendation,
    })

    return schemas.SubmitOut(
        case_id=case_id,
        validation_status=draft.validation.status,
        recommendation=draft.recommendation,
        confidence_level=draft.confidence.level,
        high_stakes=draft.red_flags.high_stakes,
        hard_errors=draft.validation.hard_errors,
    )
