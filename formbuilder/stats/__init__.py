from .aggregation import dashboard_stats, summarize_form, summarize_question
from .export import export_filename, responses_to_csv

__all__ = [
    "dashboard_stats",
    "summarize_form",
    "summarize_question",
    "export_filename",
    "responses_to_csv",
]
