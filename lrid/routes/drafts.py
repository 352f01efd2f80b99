# lrid/routes/drafts.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db

router = APIRouter(prefix="/api", tags=["drafts"])


def get_case_or_404(db: Session, case_id: str) -> models.Case:
    obj = db.query(models.Case).filter(models.Case.case_id == case_id).first()
    if not obj:
        raise HTTPException(404, "Case not found")
    return obj


@router.get("/list", response_model=schemas.CaseList)
def list_cases(
    status: models.CaseStatusEnum | None = None,
    high_stakes: bool | None = None,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    q = db.query(models.Case)
    if status:
        q = q.filter(models.Case.status == status)
    if high_stakes is not None:
        q = q.filter(models.Case.high_stakes == high_stakes)

    rows = q.order_by(models.Case.created_at.desc().nullslast()).limit(limit).all()
    return schemas.CaseList(cases=[schemas.CaseSummary.model_validate(r) for r in rows])


@router.get("/drafts/{case_id}")
def read_draft(case_id: str, db: Session = Depends(get_db)):
    obj = get_case_or_404(db, case_id)
    return {"ok": True, "status": obj.status.value, "draft": obj.draft}
