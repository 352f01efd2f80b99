# lrid/tests/test_validation.py
import pytest

from lrid.engine.responses import ResponseSet
from lrid.engine.validation import validate_responses
from lrid.tests.conftest import good_answers, make_responses


def test_clean_submission_passes_without_warnings(instrument):
    out = validate_responses(instrument, make_responses())
    assert out.status == "PASS"
    assert out.hard_errors == []
    assert out.soft_warnings == []
    assert out.completeness["answered_valid"] == 24
    assert out.completeness["required_answered"] == out.completeness["required_total"]


def test_missing_required_answer_is_hard_error(instrument):
    out = validate_responses(instrument, make_responses(drop={"Q5"}))
    assert out.status == "FAIL"
    assert out.missing_required == ["Q5"]
    assert "Missing required answer: Q5" in out.hard_errors
    assert any("Expected 24 answers" in w for w in out.soft_warnings)


def test_optional_question_may_be_skipped(instrument):
    out = validate_responses(instrument, make_responses(drop={"Q23"}))
    assert out.status == "PASS"
    assert out.missing_required == []


def test_consent_must_be_explicitly_true(instrument):
    assert "Consent not granted" in validate_responses(instrument, make_responses(consent=False)).hard_errors
    assert "Consent not granted" in validate_responses(instrument, make_responses(consent="yes")).hard_errors
    assert validate_responses(instrument, make_responses(consent=None)).status == "PASS"


def test_type_nonconforming_answers_are_excluded(instrument):
    answers = good_answers(Q1=7, Q2="4", Q3=True, Q19="Daily", Q20="yes", Q21=123)
    out = validate_responses(instrument, make_responses(answers))

    assert out.status == "FAIL"
    assert set(out.invalid_questions) == {"Q1", "Q2", "Q3", "Q19", "Q20", "Q21"}
    for qid in out.invalid_questions:
        assert qid not in out.valid_answers
    # answered but invalid is not also reported missing
    assert out.missing_required == []


def test_consistency_probe_accepts_number_or_text(instrument):
    assert validate_responses(instrument, make_responses(good_answers(Q24="always"))).status == "PASS"
    assert validate_responses(instrument, make_responses(good_answers(Q24=4.5))).status == "PASS"
    out = validate_responses(instrument, make_responses(good_answers(Q24=[5])))
    assert "Q24" in out.invalid_questions


def test_unknown_question_is_hard_error(instrument):
    answers = good_answers() + [{"question_id": "Q99", "value": 3}]
    out = validate_responses(instrument, make_responses(answers))
    assert out.status == "FAIL"
    assert any("unknown question Q99" in e for e in out.hard_errors)


def test_duplicate_answer_keeps_first(instrument):
    answers = good_answers() + [{"question_id": "Q1", "value": 1}]
    out = validate_responses(instrument, make_responses(answers))
    assert out.valid_answers["Q1"] == 4
    assert any("Duplicate answer for Q1" in w for w in out.soft_warnings)


def test_short_open_text_is_soft_warning(instrument):
    out = validate_responses(instrument, make_responses(good_answers(Q21="Too short.")))
    assert out.status == "PASS"
    assert out.short_text_questions == ["Q21"]


def test_fast_completion_is_soft_warning(instrument):
    out = validate_responses(instrument, make_responses(duration_seconds=100))
    assert out.status == "PASS"
    assert out.too_fast is True
    assert any("below the expected minimum" in w for w in out.soft_warnings)


def test_unknown_duration_is_not_flagged(instrument):
    out = validate_responses(instrument, make_responses(duration_seconds=None))
    assert out.duration_seconds == 0
    assert out.too_fast is False


def test_duration_falls_back_to_timestamps(instrument):
    resp = make_responses(
        duration_seconds=None,
        started_at="2026-01-01T10:00:00Z",
        submitted_at="2026-01-01T10:01:30Z",
    )
    out = validate_responses(instrument, resp)
    assert out.duration_seconds == 90
    assert out.too_fast is True


def test_straight_lining_detected(instrument):
    scale = {f"Q{i}": 4 for i in range(1, 19)}
    out = validate_responses(instrument, make_responses(good_answers(**scale)))
    assert out.straight_lining is True
    assert out.low_variance is True
    assert any(w.startswith("Straight-lining") for w in out.soft_warnings)
    assert not any(w.startswith("Low variance") for w in out.soft_warnings)


def test_nine_identical_answers_do_not_trigger_straight_lining(instrument):
    answers = good_answers(**{f"Q{i}": 3 for i in range(1, 10)})
    out = validate_responses(instrument, make_responses(answers, drop={f"Q{i}" for i in range(10, 19)}))
    assert out.straight_lining is False
    assert out.low_variance is False


def test_ten_identical_answers_trigger_straight_lining(instrument):
    answers = good_answers(**{f"Q{i}": 3 for i in range(1, 11)})
    out = validate_responses(instrument, make_responses(answers, drop={f"Q{i}" for i in range(11, 19)}))
    assert out.straight_lining is True


def test_two_distinct_values_is_low_variance(instrument):
    scale = {f"Q{i}": (4 if i % 2 else 5) for i in range(1, 19)}
    out = validate_responses(instrument, make_responses(good_answers(**scale)))
    assert out.straight_lining is False
    assert out.low_variance is True


def test_to_dict_hides_answer_values(instrument):
    data = validate_responses(instrument, make_responses()).to_dict()
    assert "valid_answers" not in data
    assert data["status"] == "PASS"


@pytest.mark.parametrize(
    "bad_answer",
    [
        {"question_id": 7, "value": 3},
        {"question_id": None, "value": 3},
        {"question_id": "  ", "value": 3},
        {"value": 3},
        "Q1=3",
    ],
)
def test_answer_without_usable_question_id_is_hard_error(instrument, bad_answer):
    responses = make_responses(good_answers() + [bad_answer])
    out = validate_responses(instrument, responses)

    assert out.status == "FAIL"
    assert "Answer 25 has no valid question id" in out.hard_errors
    assert out.completeness["answered_valid"] == 24
    assert out.completeness["answered_total"] == 25


def test_non_list_answers_parse_as_empty(instrument):
    responses = ResponseSet.model_validate({"case_id": "CASE_TEST", "consent": True, "answers": "oops"})
    out = validate_responses(instrument, responses)
    assert out.status == "FAIL"
    assert out.completeness["answered_total"] == 0
    assert "Missing required answer: Q1" in out.hard_errors


@pytest.mark.parametrize("duration", [-5, float("nan"), float("inf")])
def test_unusable_duration_is_ignored_with_warning(instrument, duration):
    out = validate_responses(instrument, make_responses(duration_seconds=duration))

    assert out.status == "PASS"
    assert out.duration_seconds == 0.0
    assert out.too_fast is False
    assert any(w.startswith("Reported duration") for w in out.soft_warnings)


def test_negative_duration_falls_back_to_timestamps(instrument):
    responses = make_responses(
        duration_seconds=-30,
        started_at="2026-01-05T10:00:00+00:00",
        submitted_at="2026-01-05T10:02:00+00:00",
    )
    out = validate_responses(instrument, responses)
    assert out.duration_seconds == 120.0
    assert out.too_fast is True


def test_numeric_case_id_is_accepted(instrument):
    assert make_responses(case_id=4711).resolved_case_id == "4711"
