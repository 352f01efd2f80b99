# lrid/audit.py
from __future__ import annotations

import json

from sqlalchemy.orm import Session

from . import models
from .logging_config import log_event, log_failure
from .settings import get_settings

settings = get_settings()


def record_event(db: Session, action: models.ActionEnum, case_id: str | None, payload: dict, actor_type: str = "SYSTEM"):
    evt = models.Event(
        case_id=case_id,
        action=action,
        actor_type=actor_type,
        payload=json.dumps(payload, ensure_ascii=False, default=str),
        app_version=settings.APP_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )
    db.add(evt)
    db.commit()
    log_event(action.value, f"case={case_id}", payload)


def record_failure(
    db: Session,
    stage: str,
    error: Exception | str,
    case_id: str | None = None,
    error_code: str = "INTERNAL_FALLBACK",
) -> str:
    payload = log_failure(error_code, {"stage": stage, "error": str(error), "case_id": case_id})
    evt = models.Event(
        case_id=case_id,
        action=models.ActionEnum.FAILURE_LOG,
        actor_type="SYSTEM",
        payload=json.dumps(payload, ensure_ascii=False, default=str),
        app_version=settings.APP_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )
    db.add(evt)
    db.commit()
    db.refresh(evt)
    return str(evt.id)
