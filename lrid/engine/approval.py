# lrid/engine/approval.py
from __future__ import annotations

import copy
import math
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

from .instrument import Instrument
from .precedence import resolve_value
from .scoring import DimensionScore, band_for, compute_aggregates, round_score
from .validation import FAIL

Decision = Literal["APPROVE", "REJECT", "REVISE"]


class ApprovalError(ValueError):
    pass


class Approval(BaseModel):
    case_id: Optional[str] = None
    decision: Decision = "APPROVE"
    operator_id: Optional[str] = None
    operator_notes: str = ""
    executive_summary_override: str = ""
    risk_notes_override: str = ""
    recommendations_override: str = ""
    dimension_overrides: Dict[str, FiniteFloat] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


def _default_executive_summary(aggregates: Dict[str, dict], confidence: dict) -> str:
    parts = []
    for agg in aggregates.values():
        if agg["score"] is None:
            parts.append(f"{agg['name']}: no data")
        else:
            parts.append(f"{agg['name']}: {agg['score']:.2f} ({agg['band']})")
    parts.append(f"Confidence: {confidence.get('level', 'n/a')}")
    return "; ".join(parts) + "."


def _default_risk_notes(draft: dict) -> str:
    red = draft.get("red_flags") or {}
    triggered = red.get("triggered") or []
    consistency = draft.get("consistency") or {}
    notes = []
    if triggered:
        notes.append(f"Red flags triggered: {', '.join(triggered)}.")
    if consistency.get("mismatch_count"):
        notes.append(f"{consistency['mismatch_count']} consistency mismatch(es) to discuss.")
    return " ".join(notes) or "No red flags or consistency mismatches detected."


def _default_recommendations(dimensions: Dict[str, dict]) -> str:
    weak = [d["name"] for d in dimensions.values() if d["item_count"] and d["band"] == "Risk Zone"]
    if not weak:
        return "No dimension falls in the Risk Zone."
    return f"Development focus: {', '.join(weak)}."


def build_report_payload(
    instrument: Instrument,
    draft: Dict[str, Any],
    approval: Approval,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Derive the report payload from a stored draft plus a human approval.
    The draft dict is deep-copied; the original is never modified.
    """
    if approval.decision == "APPROVE" and (draft.get("validation") or {}).get("status") == FAIL:
        if not approval.operator_notes.strip():
            raise ApprovalError("Approving a draft with hard validation errors requires operator notes")

    known = {d.id for d in instrument.dimensions}
    unknown = sorted(set(approval.dimension_overrides) - known)
    if unknown:
        raise ApprovalError(f"Override for unknown dimension(s): {', '.join(unknown)}")

    for dim_id, value in approval.dimension_overrides.items():
        low, high = instrument.score_range(dim_id)
        if not (math.isfinite(value) and low <= value <= high):
            raise ApprovalError(f"Override for {dim_id} must be a number in [{low}, {high}], got {value!r}")

    src = copy.deepcopy(draft)
    dims_in = src.get("dimensions") or {}

    resolved: Dict[str, DimensionScore] = {}
    for dim in instrument.dimensions:
        base = dims_in.get(dim.id) or {}
        override = approval.dimension_overrides.get(dim.id)
        score = float(resolve_value(override, base.get("score"), 0.0))
        item_count = int(base.get("item_count") or 0)
        if override is not None:
            item_count = max(item_count, 1)
        resolved[dim.id] = DimensionScore(
            dimension_id=dim.id,
            name=dim.name,
            score=round_score(score),
            band=band_for(score, instrument.bands),
            item_count=item_count,
        )

    aggregates = compute_aggregates(instrument, resolved)
    dimensions_out = {k: asdict(v) for k, v in resolved.items()}
    aggregates_out = {k: asdict(v) for k, v in aggregates.items()}

    narrative_in = src.get("narrative") or {}
    confidence = src.get("confidence") or {}
    narrative = {
        "executive_summary": resolve_value(
            approval.executive_summary_override,
            narrative_in.get("executive_summary"),
            lambda: _default_executive_summary(aggregates_out, confidence),
        ),
        "risk_notes": resolve_value(
            approval.risk_notes_override,
            narrative_in.get("risk_notes"),
            lambda: _default_risk_notes(src),
        ),
        "recommendations": resolve_value(
            approval.recommendations_override,
            narrative_in.get("recommendations"),
            lambda: _default_recommendations(dimensions_out),
        ),
    }

    generated = (now or datetime.now(timezone.utc))
    respondent = src.get("respondent") or {}

    return {
        "case_id": resolve_value(approval.case_id, src.get("case_id"), "UNKNOWN_CASE"),
        "meta": {
            "subject_name": resolve_value(None, respondent.get("name"), "Unknown"),
            "organisation": respondent.get("organisation") or "",
            "report_date": generated.date().isoformat(),
            "instrument_version": src.get("instrument_version"),
        },
        "approval": approval.model_dump(),
        "draft_recommendation": src.get("recommendation"),
        "validation_status": (src.get("validation") or {}).get("status"),
        "confidence": confidence,
        "red_flags": src.get("red_flags") or {},
        "consistency": src.get("consistency") or {},
        "dimensions": dimensions_out,
        "aggregates": aggregates_out,
        "overridden": sorted(approval.dimension_overrides),
        "narrative": narrative,
        "generated_at": generated.isoformat(),
    }
