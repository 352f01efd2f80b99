# lrid/tests/test_red_flags.py
import pytest

from lrid.engine.instrument import SnippetPolicy
from lrid.engine.red_flags import RedFlagResult, detect_red_flags, is_high_stakes
from lrid.engine.snippets import extract_snippet
from lrid.engine.validation import validate_responses
from lrid.tests.conftest import good_answers, make_responses


def _detect(instrument, **overrides):
    valid = validate_responses(instrument, make_responses(good_answers(**overrides))).valid_answers
    return detect_red_flags(instrument, valid)


# -------------------------
# SNIPPETS
# -------------------------
def test_snippet_contains_keyword_and_is_bounded():
    policy = SnippetPolicy()
    text = "... the deadline forced me to skip the review step ..."
    snippet = extract_snippet(text, ["skip"], policy)
    assert "skip" in snippet
    assert len(snippet) <= policy.max_length


def test_snippet_window_is_clipped_on_both_sides():
    policy = SnippetPolicy(before=40, after=120, max_length=160)
    text = ("a" * 200) + " we decided to skip the review " + ("b" * 300)
    snippet = extract_snippet(text, ["skip"], policy)

    assert snippet.startswith("...")
    assert snippet.endswith("...")
    assert "skip" in snippet
    assert len(snippet) <= 160
    assert len(snippet) < len(text)


@pytest.mark.parametrize("max_length", [20, 25, 30, 45, 50])
def test_snippet_keeps_keyword_under_small_max_length(max_length):
    policy = SnippetPolicy(before=40, after=120, max_length=max_length)
    text = ("x" * 100) + " skip " + ("y" * 100)
    snippet = extract_snippet(text, ["skip"], policy)
    assert "skip" in snippet
    assert len(snippet) <= max_length
    assert snippet.startswith("...")
    assert snippet.endswith("...")


def test_snippet_keyword_at_end_of_long_text():
    policy = SnippetPolicy()
    text = ("a" * 300) + " then we had to skip"
    snippet = extract_snippet(text, ["skip"], policy)

    assert snippet.startswith("...")
    assert snippet.endswith("skip")
    assert len(snippet) <= policy.max_length


def test_snippet_keyword_longer_than_after_window():
    policy = SnippetPolicy(before=10, after=3, max_length=40)
    text = ("x" * 50) + " we had to cut corners on testing " + ("z" * 50)
    snippet = extract_snippet(text, ["cut corners"], policy)

    assert "cut corners" in snippet
    assert len(snippet) <= 40


def test_snippet_without_keyword_returns_leading_slice():
    policy = SnippetPolicy(max_length=30)
    text = "This answer talks about something unrelated for quite a while."
    snippet = extract_snippet(text, ["bypass"], policy)
    assert snippet.endswith("...")
    assert len(snippet) <= 30
    assert text.startswith(snippet[:-3])

    assert extract_snippet("Short text.", ["bypass"], policy) == "Short text."


def test_snippet_uses_earliest_hit_case_insensitively():
    policy = SnippetPolicy(before=0, after=20, max_length=40)
    snippet = extract_snippet("We SKIPPED it, then took a shortcut later on in the project", ["shortcut", "skip"], policy)
    assert snippet.startswith("...SKIPPED")


# -------------------------
# RULES
# -------------------------
def test_clean_answers_trigger_nothing(instrument):
    out = _detect(instrument)
    assert out.high_stakes is False
    assert out.triggered == []
    assert all(r.status == "NONE" for r in out.results)


def test_single_medium_rule_is_not_high_stakes(instrument):
    out = _detect(instrument, Q23="I raised an issue once and was sidelined from the next project for it.")
    assert out.triggered == ["RF_RETALIATION"]
    assert out.high_stakes is False


def test_two_medium_rules_are_high_stakes(instrument):
    out = _detect(
        instrument,
        Q21="The deadline forced me to skip the review step on the release.",
        Q23="I raised an issue once and was sidelined from the next project for it.",
    )
    assert set(out.triggered) == {"RF_DEADLINE_SHORTCUT", "RF_RETALIATION"}
    assert out.high_stakes is True


def test_single_high_rule_is_high_stakes(instrument):
    out = _detect(instrument, Q22="We shipped the order without approval from finance to make the date.")
    assert out.triggered == ["RF_CONTROL_BYPASS"]
    assert out.high_stakes is True


def test_evidence_per_matching_question(instrument):
    out = _detect(
        instrument,
        Q21="The deadline forced me to SKIP the review step on the release.",
        Q22="We had to skip testing on two modules to make the launch date.",
    )
    rule = next(r for r in out.results if r.rule_id == "RF_DEADLINE_SHORTCUT")
    assert rule.status == "PRESENT"
    assert [e["question_id"] for e in rule.evidence] == ["Q21", "Q22"]
    assert all("skip" in e["snippet"].lower() for e in rule.evidence)
    assert rule.evidence[0]["keyword"] == "skip"


def test_high_stakes_aggregate_rules():
    medium_a = RedFlagResult("A", "A", "PRESENT", "MEDIUM")
    medium_b = RedFlagResult("B", "B", "PRESENT", "MEDIUM")
    high = RedFlagResult("C", "C", "PRESENT", "HIGH")
    high_off = RedFlagResult("D", "D", "NONE", "HIGH")

    assert is_high_stakes([medium_a]) is False
    assert is_high_stakes([medium_a, medium_b]) is True
    assert is_high_stakes([high]) is True
    assert is_high_stakes([medium_a, high_off]) is False
