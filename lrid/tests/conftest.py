# lrid/tests/conftest.py
import copy
import json

import pytest

from lrid.engine.instrument import load_instrument
from lrid.engine.responses import ResponseSet
from lrid.settings import DEFAULT_INSTRUMENT_PATH

SCALE_VALUES = [4, 5, 4, 3, 4, 5, 4, 4, 5, 3, 4, 4, 5, 4, 4, 3, 4, 5]

CLEAN_TEXT = {
    "Q21": "We agreed the release plan early and escalated the one open risk to the steering group before the deadline.",
    "Q22": "The team re-planned the scope with the client, documented the trade-offs and delivered the reduced release on time.",
    "Q23": "A colleague flagged a data quality issue and we paused the launch for a day to fix it together.",
}


@pytest.fixture(scope="session")
def instrument_data():
    with open(DEFAULT_INSTRUMENT_PATH, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def raw_instrument(instrument_data):
    """Mutable copy of the packaged instrument definition."""
    return copy.deepcopy(instrument_data)


@pytest.fixture
def instrument(instrument_data):
    return load_instrument(instrument_data)


def good_answers(**overrides) -> list[dict]:
    """Clean, fully answered submission for the packaged instrument."""
    values = {f"Q{i}": v for i, v in enumerate(SCALE_VALUES, start=1)}
    values.update(CLEAN_TEXT)
    values.update({"Q19": "Monthly", "Q20": True, "Q24": 5})
    values.update(overrides)
    return [{"question_id": qid, "value": v} for qid, v in values.items()]


def make_responses(answers=None, drop=(), **fields) -> ResponseSet:
    answers = good_answers() if answers is None else answers
    payload = {
        "case_id": "CASE_TEST",
        "respondent": {"id": "r1", "name": "Alex Doe", "organisation": "Acme"},
        "consent": True,
        "duration_seconds": 600,
        "answers": [a for a in answers if not (isinstance(a, dict) and a.get("question_id") in drop)],
    }
    payload.update(fields)
    return ResponseSet.model_validate(payload)
