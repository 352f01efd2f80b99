# lrid/routes/approvals.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from .. import models, schemas
from ..audit import record_event, record_failure
from ..db import get_db
from ..instrument_store import get_instrument
from ..report import UnknownReportError, render_report
from .drafts import get_case_or_404

from lrid.engine.approval import Approval, ApprovalError, build_report_payload
from lrid.engine.instrument import Instrument

router = APIRouter(prefix="/api", tags=["approvals"])


def _latest_approval(db: Session, case_id: str) -> models.Approval | None:
    return (
        db.query(models.Approval)
          .filter(models.Approval.case_id == case_id)
          .order_by(models.Approval.id.desc())
          .first()
    )


@router.get("/approvals/{case_id}", response_model=schemas.ApprovalOut)
def get_approval(case_id: str, db: Session = Depends(get_db)):
    get_case_or_404(db, case_id)
    row = _latest_approval(db, case_id)
    if not row:
        raise HTTPException(404, "Approval not found")
    return row


@router.post("/approvals/{case_id}", response_model=schemas.ApprovalOut, status_code=201)
def save_approval(
    case_id: str,
    approval: Approval,
    db: Session = Depends(get_db),
    instrument: Instrument = Depends(get_instrument),
):
    case = get_case_or_404(db, case_id)
    if approval.case_id and approval.case_id != case_id:
        raise HTTPException(400, "case_id in body does not match URL")
    approval = approval.model_copy(update={"case_id": case_id})

    # Derived artifact; the stored draft stays as generated.
    try:
        payload = build_report_payload(instrument, case.draft, approval)
    except ApprovalError as e:
        record_failure(db, "approval", e, case_id, "APPROVAL_REJECTED")
        raise

    row = models.Approval(
        case_id=case_id,
        decision=approval.decision,
        operator_id=approval.operator_id,
        operator_notes=approval.operator_notes,
        approval=approval.model_dump(),
        payload=payload,
    )
    db.add(row)
    case.status = models.DECISION_TO_STATUS[approval.decision]
    db.commit()
    db.refresh(row)

    record_event(db, models.ActionEnum.SAVE_APPROVAL, case_id, {
        "decision": approval.decision,
        "operator_id": approval.operator_id,
        "overridden": payload["overridden"],
    }, "OPERATOR")
    return row


@router.get("/reports/{case_id}/{kind}", response_class=HTMLResponse)
def report(case_id: str, kind: str, db: Session = Depends(get_db)):
    get_case_or_404(db, case_id)
    row = _latest_approval(db, case_id)
    if not row or row.decision != "APPROVE":
        raise HTTPException(409, "Case has no approved report payload")

    try:
        html = render_report(kind, row.payload)
    except UnknownReportError:
        raise HTTPException(404, f"Unknown report kind: {kind}")

    record_event(db, models.ActionEnum.RENDER_REPORT, case_id, {"kind": kind})
    return HTMLResponse(html)
