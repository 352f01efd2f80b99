# lrid/engine/red_flags.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from .instrument import Instrument, RedFlagRule
from .snippets import extract_snippet, first_keyword_hit

PRESENT = "PRESENT"
NONE = "NONE"


@dataclass
class RedFlagResult:
    rule_id: str
    name: str
    status: str  # PRESENT / NONE
    severity: str
    evidence: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class RedFlagOutcome:
    high_stakes: bool
    triggered: List[str] = field(default_factory=list)
    results: List[RedFlagResult] = field(default_factory=list)


def evaluate_rule(
    instrument: Instrument, rule: RedFlagRule, valid_answers: Mapping[str, Any]
) -> RedFlagResult:
    evidence: List[Dict[str, Any]] = []
    keywords = rule.trigger.keywords

    for qid in rule.trigger.questions:
        text = valid_answers.get(qid)
        if not isinstance(text, str) or not text.strip():
            continue
        lowered = text.lower()
        if not any(kw.lower() in lowered for kw in keywords if kw.strip()):
            continue

        hit = first_keyword_hit(" ".join(text.split()), keywords)
        evidence.append({
            "question_id": qid,
            "keyword": hit[1] if hit else None,
            "snippet": extract_snippet(text, keywords, instrument.snippets),
        })

    return RedFlagResult(
        rule_id=rule.id,
        name=rule.name or rule.id,
        status=PRESENT if evidence else NONE,
        severity=rule.severity,
        evidence=evidence,
    )


def is_high_stakes(results: List[RedFlagResult]) -> bool:
    """Any HIGH rule triggered, or two or more distinct rules triggered."""
    triggered = [r for r in results if r.status == PRESENT]
    if any(r.severity == "HIGH" for r in triggered):
        return True
    return len({r.rule_id for r in triggered}) >= 2


def detect_red_flags(instrument: Instrument, valid_answers: Mapping[str, Any]) -> RedFlagOutcome:
    results = [evaluate_rule(instrument, rule, valid_answers) for rule in instrument.red_flags]
    return RedFlagOutcome(
        high_stakes=is_high_stakes(results),
        triggered=[r.rule_id for r in results if r.status == PRESENT],
        results=results,
    )
