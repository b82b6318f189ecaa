"""
CSV serialization of raw (non-aggregated) responses.
"""
import csv
import io
import re
from typing import List, Sequence

FIXED_HEADERS = ["Submitted At", "Name", "Email"]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9 _.-]+")


def _format_timestamp(value) -> str:
    if value is None:
        return ""
    return value.isoformat()


def build_rows(questions: Sequence, responses: Sequence) -> List[List[str]]:
    """Header row plus one row per response; missing answers are empty strings."""
    ordered = sorted(questions, key=lambda q: (q.order_index, q.id))
    rows = [FIXED_HEADERS + [question.title for question in ordered]]
    for response in responses:
        by_question = {}
        for answer in response.answers:
            by_question.setdefault(answer.question_id, answer.value)
        row = [
            _format_timestamp(response.submitted_at),
            response.respondent_name or "",
            response.respondent_email or "",
        ]
        row.extend(by_question.get(question.id, "") or "" for question in ordered)
        rows.append(row)
    return rows


def responses_to_csv(questions: Sequence, responses: Sequence) -> str:
    """Every field is double-quoted and embedded quotes are doubled."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(build_rows(questions, responses))
    return buffer.getvalue()


def export_filename(title: str) -> str:
    safe = _UNSAFE_FILENAME_CHARS.sub("_", title or "").strip() or "form"
    return f"{safe}-responses.csv"
