from typing import Annotated, Dict, List, Literal, Union
from pydantic import Field

from ..schemas import CamelModel
from ..forms.schemas import FormWithCount


class ChoiceCount(CamelModel):
    count: int = 0
    percentage: int = 0


class TextSummary(CamelModel):
    question_id: int
    title: str
    type: Literal["text"] = "text"
    total_responses: int = Field(..., description="Number of non-empty answers")
    recent: List[str] = Field(default_factory=list, description="Newest answers first")


class MultipleChoiceSummary(CamelModel):
    question_id: int
    title: str
    type: Literal["multiple_choice"] = "multiple_choice"
    total_responses: int
    option_counts: Dict[str, ChoiceCount]


class RatingSummary(CamelModel):
    question_id: int
    title: str
    type: Literal["rating"] = "rating"
    total_responses: int = Field(..., description="Number of parseable ratings")
    average: float
    rating_counts: Dict[int, ChoiceCount]


QuestionSummary = Annotated[
    Union[TextSummary, MultipleChoiceSummary, RatingSummary],
    Field(discriminator="type"),
]


class FormSummary(CamelModel):
    form_id: int
    total_responses: int
    questions: List[QuestionSummary] = Field(default_factory=list)


class DashboardStats(CamelModel):
    total_forms: int
    total_responses: int
    active_forms: int
    avg_responses_per_form: float
    top_forms: List[FormWithCount] = Field(default_factory=list)
    recent_forms: List[FormWithCount] = Field(default_factory=list)
