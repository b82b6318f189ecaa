from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from ..schemas import INT32_MAX, CamelModel, RequestModel
from ..forms.schemas import QuestionRead


class AnswerSubmit(RequestModel):
    question_id: int = Field(..., gt=0, le=INT32_MAX)
    value: str = Field(..., max_length=10000)

    @field_validator('value', mode='before')
    @classmethod
    def stringify_numbers(cls, v):
        # Rating widgets may post numbers; answers are stored as text
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class SubmissionCreate(RequestModel):
    """Public submission payload"""
    respondent_name: Optional[str] = Field(None, max_length=255)
    respondent_email: Optional[str] = Field(None, max_length=255)
    answers: List[AnswerSubmit] = Field(default_factory=list)

    @field_validator('respondent_name', 'respondent_email')
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and len(v.strip()) == 0:
            return None
        return v


class SubmissionResult(CamelModel):
    success: bool = True


class AnswerRead(CamelModel):
    id: int
    response_id: int
    question_id: int
    value: str
    question: QuestionRead


class ResponseRead(CamelModel):
    id: int
    form_id: int
    submitted_at: Optional[datetime] = None
    respondent_name: Optional[str] = None
    respondent_email: Optional[str] = None
    answers: List[AnswerRead] = Field(default_factory=list)
