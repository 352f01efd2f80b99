# lrid/routes/ops.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Header
from sqlalchemy.orm import Session
from sqlalchemy import text

from .. import models
from ..audit import record_event
from ..db import get_db
from ..instrument_store import instrument_cache
from ..settings import get_settings

router = APIRouter(prefix="/api", tags=["operations"])
settings = get_settings()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Deep health check: database connection and instrument load.
    """
    status = {"ok": True, "version": settings.APP_VERSION, "time": datetime.now(timezone.utc).isoformat(), "checks": {}}

    try:
        db.execute(text("SELECT 1"))
        status["checks"]["database"] = "ok"
    except Exception as e:
        status["ok"] = False
        status["checks"]["database"] = f"failed: {str(e)}"
        raise HTTPException(503, detail=status)

    instrument = instrument_cache.get()
    status["checks"]["instrument"] = f"{instrument.id} v{instrument.version}"
    return status


@router.post("/instrument/reload")
def reload_instrument(x_admin_key: str = Header(None), db: Session = Depends(get_db)):
    """
    Explicit invalidation point for the cached instrument.
    """
    if x_admin_key != settings.ADMIN_KEY:
        raise HTTPException(403, "Unauthorized")

    instrument_cache.invalidate()
    instrument = instrument_cache.get()
    record_event(db, models.ActionEnum.RELOAD_INSTRUMENT, None, {"version": instrument.version}, "OPERATOR")
    return {"ok": True, "instrument": instrument.id, "version": instrument.version}


@router.get("/events/recent")
def recent_events(limit: int = 50, case_id: str | None = None, db: Session = Depends(get_db)):
    limit = max(1, min(limit, 200))
    q = db.query(models.Event)
    if case_id:
        q = q.filter(models.Event.case_id == case_id)
    rows = q.order_by(models.Event.id.desc()).limit(limit).all()
    return [
        {
            "id": str(r.id),
            "case_id": r.case_id,
            "action": (r.action.value if hasattr(r.action, "value") else str(r.action)),
            "actor_type": r.actor_type,
            "created_at": r.created_at,
        }
        for r in rows
    ]
