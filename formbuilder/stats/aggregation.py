"""
Pure summary statistics over a form's questions and responses.

Inputs are duck-typed: ORM rows and pydantic read models both work, as long
as questions expose ``id``, ``title``, ``type`` and ``options`` and responses
expose ``answers`` whose items expose ``question_id`` and ``value``. Nothing
here touches the database.
"""
import math
import re
from typing import Iterable, List, Optional, Sequence

from .schemas import (
    ChoiceCount,
    DashboardStats,
    FormSummary,
    MultipleChoiceSummary,
    QuestionSummary,
    RatingSummary,
    TextSummary,
)

PREVIEW_LIMIT = 5
RATING_SCALE = (1, 2, 3, 4, 5)
DASHBOARD_LIMIT = 5

# At most nine digits; longer runs are not usable ratings
_LEADING_INT = re.compile(r"^\s*([+-]?\d{1,9})(?!\d)")


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percentage(count: int, total: int) -> int:
    if total == 0:
        return 0
    return int(round_half_up(count / total * 100))


def parse_rating(value: str) -> Optional[int]:
    """Leading-integer parse: "4" and "5 stars" parse, "bad" and "" do not."""
    match = _LEADING_INT.match(value or "")
    if match is None:
        return None
    return int(match.group(1))


def _type_value(question) -> str:
    return getattr(question.type, "value", question.type)


def answers_for_question(question, responses: Iterable) -> List[str]:
    """First answer to ``question`` in each response, in response order."""
    values = []
    for response in responses:
        for answer in response.answers:
            if answer.question_id == question.id:
                values.append(answer.value)
                break
    return values


def _summarize_text(question, values: List[str]) -> TextSummary:
    non_empty = [value for value in values if value.strip()]
    return TextSummary(
        question_id=question.id,
        title=question.title,
        total_responses=len(non_empty),
        recent=non_empty[:PREVIEW_LIMIT],
    )


def _summarize_multiple_choice(question, values: List[str]) -> MultipleChoiceSummary:
    total = len(values)
    option_counts = {}
    for option in question.options or []:
        count = sum(1 for value in values if value == option)
        option_counts[option] = ChoiceCount(count=count, percentage=percentage(count, total))
    return MultipleChoiceSummary(
        question_id=question.id,
        title=question.title,
        total_responses=total,
        option_counts=option_counts,
    )


def _summarize_rating(question, values: List[str]) -> RatingSummary:
    ratings = [rating for rating in map(parse_rating, values) if rating is not None]
    total = len(ratings)
    average = round_half_up(sum(ratings) / total, 1) if total else 0.0
    rating_counts = {}
    for star in RATING_SCALE:
        count = ratings.count(star)
        rating_counts[star] = ChoiceCount(count=count, percentage=percentage(count, total))
    return RatingSummary(
        question_id=question.id,
        title=question.title,
        total_responses=total,
        average=average,
        rating_counts=rating_counts,
    )


_SUMMARIZERS = {
    "text": _summarize_text,
    "multiple_choice": _summarize_multiple_choice,
    "rating": _summarize_rating,
}


def summarize_question(question, responses: Sequence) -> QuestionSummary:
    summarizer = _SUMMARIZERS.get(_type_value(question))
    if summarizer is None:
        raise ValueError(f"Unknown question type: {question.type!r}")
    return summarizer(question, answers_for_question(question, responses))


def summarize_form(form_id: int, questions: Sequence, responses: Sequence) -> FormSummary:
    return FormSummary(
        form_id=form_id,
        total_responses=len(responses),
        questions=[summarize_question(question, responses) for question in questions],
    )


def dashboard_stats(forms: Sequence) -> DashboardStats:
    """Figures for the owner dashboard; ``forms`` carry ``response_count``."""
    total_forms = len(forms)
    total_responses = sum(form.response_count or 0 for form in forms)
    active_forms = sum(1 for form in forms if form.is_published)
    avg = round_half_up(total_responses / total_forms, 1) if total_forms else 0.0

    top_forms = sorted(forms, key=lambda form: form.response_count or 0, reverse=True)
    recent_forms = sorted(
        forms,
        key=lambda form: (form.created_at is not None, form.created_at or 0, form.id),
        reverse=True,
    )
    return DashboardStats(
        total_forms=total_forms,
        total_responses=total_responses,
        active_forms=active_forms,
        avg_responses_per_form=avg,
        top_forms=top_forms[:DASHBOARD_LIMIT],
        recent_forms=recent_forms[:DASHBOARD_LIMIT],
    )
