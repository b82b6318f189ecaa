from datetime import datetime
from types import SimpleNamespace

import pytest

from formbuilder.stats.aggregation import (
    dashboard_stats,
    parse_rating,
    percentage,
    round_half_up,
    summarize_form,
    summarize_question,
)


def question(id, type, options=None, title="Q"):
    return SimpleNamespace(id=id, title=title, type=type, options=options)


def responses_for(question_id, values):
    return [
        SimpleNamespace(answers=[SimpleNamespace(question_id=question_id, value=value)])
        for value in values
    ]


def test_multiple_choice_counts_and_percentages():
    q = question(1, "multiple_choice", ["A", "B"])
    summary = summarize_question(q, responses_for(1, ["A", "A", "B"]))

    assert summary.total_responses == 3
    assert summary.option_counts["A"].count == 2
    assert summary.option_counts["A"].percentage == 67
    assert summary.option_counts["B"].count == 1
    assert summary.option_counts["B"].percentage == 33


def test_multiple_choice_lists_unchosen_options_and_ignores_unknown_values():
    q = question(1, "multiple_choice", ["Yes", "No", "Maybe"])
    summary = summarize_question(q, responses_for(1, ["Yes", "yes", "Other"]))

    assert list(summary.option_counts) == ["Yes", "No", "Maybe"]
    assert summary.option_counts["Yes"].count == 1
    assert summary.option_counts["No"].count == 0
    assert summary.option_counts["Maybe"].percentage == 0
    # unmatched answers still count toward the denominator
    assert summary.total_responses == 3
    assert summary.option_counts["Yes"].percentage == 33


def test_rating_discards_non_numeric_values():
    q = question(2, "rating")
    summary = summarize_question(q, responses_for(2, ["3", "5", "bad", "4"]))

    assert summary.average == 4.0
    assert summary.total_responses == 3
    assert {star: c.count for star, c in summary.rating_counts.items()} == {1: 0, 2: 0, 3: 1, 4: 1, 5: 1}
    assert summary.rating_counts[5].percentage == 33


def test_rating_average_rounds_to_one_decimal():
    q = question(2, "rating")
    summary = summarize_question(q, responses_for(2, ["4", "4", "5"]))
    assert summary.average == 4.3


def test_rating_without_valid_values_averages_zero():
    q = question(2, "rating")
    summary = summarize_question(q, responses_for(2, ["", "n/a"]))

    assert summary.average == 0
    assert summary.total_responses == 0
    assert all(c.count == 0 and c.percentage == 0 for c in summary.rating_counts.values())


def test_text_counts_non_empty_answers_and_previews_five():
    q = question(3, "text")
    values = ["newest", "", "b", "c", "   ", "d", "e", "f"]
    summary = summarize_question(q, responses_for(3, values))

    assert summary.total_responses == 6
    assert summary.recent == ["newest", "b", "c", "d", "e"]


def test_only_first_answer_per_response_is_used():
    q = question(1, "multiple_choice", ["A", "B"])
    response = SimpleNamespace(answers=[
        SimpleNamespace(question_id=1, value="A"),
        SimpleNamespace(question_id=1, value="B"),
        SimpleNamespace(question_id=9, value="B"),
    ])
    summary = summarize_question(q, [response])

    assert summary.total_responses == 1
    assert summary.option_counts["A"].count == 1
    assert summary.option_counts["B"].count == 0


def test_summarize_form_keeps_question_order():
    questions = [question(1, "text"), question(2, "rating"), question(3, "multiple_choice", ["X"])]
    responses = [SimpleNamespace(answers=[
        SimpleNamespace(question_id=2, value="5"),
        SimpleNamespace(question_id=3, value="X"),
    ])]
    summary = summarize_form(7, questions, responses)

    assert summary.form_id == 7
    assert summary.total_responses == 1
    assert [s.type for s in summary.questions] == ["text", "rating", "multiple_choice"]
    assert summary.questions[0].total_responses == 0


def test_unknown_question_type_is_rejected():
    with pytest.raises(ValueError):
        summarize_question(question(1, "slider"), [])


@pytest.mark.parametrize("value,expected", [
    ("4", 4),
    (" 5 ", 5),
    ("5 stars", 5),
    ("-2", -2),
    ("4.9", 4),
    ("999999999", 999999999),
    ("1" + "0" * 400, None),
    ("9" * 5000, None),
    ("bad", None),
    ("", None),
])
def test_parse_rating(value, expected):
    assert parse_rating(value) == expected


def test_rounding_is_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(0.25, 1) == 0.3
    assert percentage(1, 8) == 13
    assert percentage(0, 0) == 0


def test_dashboard_stats():
    forms = [
        SimpleNamespace(id=1, is_published=True, response_count=2, created_at=datetime(2024, 1, 1)),
        SimpleNamespace(id=2, is_published=False, response_count=0, created_at=datetime(2024, 3, 1)),
        SimpleNamespace(id=3, is_published=True, response_count=5, created_at=datetime(2024, 2, 1)),
    ]
    forms = [_as_form(f) for f in forms]
    stats = dashboard_stats(forms)

    assert stats.total_forms == 3
    assert stats.total_responses == 7
    assert stats.active_forms == 2
    assert stats.avg_responses_per_form == 2.3
    assert [f.id for f in stats.top_forms] == [3, 1, 2]
    assert [f.id for f in stats.recent_forms] == [2, 3, 1]


def test_dashboard_stats_without_forms():
    stats = dashboard_stats([])
    assert stats.total_forms == 0
    assert stats.avg_responses_per_form == 0
    assert stats.top_forms == []


def _as_form(ns):
    from formbuilder.forms.schemas import FormWithCount

    return FormWithCount(
        id=ns.id,
        title=f"Form {ns.id}",
        is_published=ns.is_published,
        created_by=1,
        created_at=ns.created_at,
        response_count=ns.response_count,
    )


def test_rating_ignores_oversized_numbers():
    q = question(2, "rating")
    values = ["1" + "0" * 400, "9" * 5000, "4"]
    summary = summarize_question(q, responses_for(2, values))

    assert summary.total_responses == 1
    assert summary.average == 4.0
    assert summary.rating_counts[4].count == 1
