# lrid/engine/consistency.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .instrument import ConsistencySet, Instrument
from .precedence import resolve_value
from .snippets import extract_snippet

OK = "OK"
MISMATCH = "MISMATCH"
ATTENTION = "ATTENTION"


@dataclass
class ConsistencyResult:
    set_id: str
    status: str  # OK / MISMATCH
    severity: str
    evidence: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ConsistencyOutcome:
    status: str  # OK / ATTENTION
    mismatch_count: int = 0
    results: List[ConsistencyResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def check_set(
    instrument: Instrument, cs: ConsistencySet, valid_answers: Mapping[str, Any]
) -> ConsistencyResult:
    keywords = resolve_value(cs.keywords or None, instrument.consistency.exception_keywords, [])

    narrative = " ".join(
        str(valid_answers[qid])
        for qid in cs.questions
        if qid != cs.check_question and isinstance(valid_answers.get(qid), str)
    )
    lowered = narrative.lower()
    matched = [kw for kw in keywords if kw.lower() in lowered]

    declared = valid_answers.get(cs.check_question)
    declared_num = _as_number(declared)
    high_integrity = (
        declared_num is not None
        and declared_num >= instrument.consistency.high_integrity_threshold
    )

    evidence: Dict[str, Any] = {
        "check_question": cs.check_question,
        "declared_value": declared,
        "matched_keywords": matched,
    }
    if matched:
        evidence["snippet"] = extract_snippet(narrative, matched, instrument.snippets)

    status = MISMATCH if (matched and high_integrity) else OK
    return ConsistencyResult(set_id=cs.id, status=status, severity=cs.severity, evidence=evidence)


def run_consistency_checks(
    instrument: Instrument, valid_answers: Mapping[str, Any]
) -> ConsistencyOutcome:
    """
    Keyword heuristic: narrative exception language vs a high self-reported
    integrity value. Sets with any missing/invalid answer are skipped, never
    reported OK.
    """
    results: List[ConsistencyResult] = []
    skipped: List[str] = []
    warnings: List[str] = []

    for cs in instrument.consistency.sets:
        needed = [cs.check_question] + [q for q in cs.questions if q != cs.check_question]
        missing = [qid for qid in needed if qid not in valid_answers]
        if missing:
            skipped.append(cs.id)
            warnings.append(
                f"Consistency set {cs.id} skipped: no valid answer for {', '.join(missing)}"
            )
            continue
        results.append(check_set(instrument, cs, valid_answers))

    mismatches = sum(1 for r in results if r.status == MISMATCH)
    return ConsistencyOutcome(
        status=ATTENTION if mismatches else OK,
        mismatch_count=mismatches,
        results=results,
        skipped=skipped,
        warnings=warnings,
    )
