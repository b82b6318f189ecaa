from pydantic import Field, StringConstraints, TypeAdapter, field_validator
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime

from ..schemas import INT32_MAX, INT32_MIN, CamelModel, RequestModel
from .models import QuestionType

FormTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
QuestionTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OrderIndex = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]

# --- Form Schemas ---

class FormCreate(RequestModel):
    title: FormTitle
    description: Optional[str] = None
    is_published: bool = False

class FormUpdate(RequestModel):
    title: Optional[FormTitle] = None
    description: Optional[str] = None
    is_published: Optional[bool] = None

    @field_validator("title", "is_published")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

class FormRead(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    is_published: bool
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class FormWithCount(FormRead):
    response_count: int = 0

# --- Question Schemas ---

def _reject_options(v):
    if v:
        raise ValueError("options are only allowed for multiple_choice questions")
    return None

class QuestionBase(RequestModel):
    title: QuestionTitle
    is_required: bool = False
    order_index: OrderIndex

class TextQuestion(QuestionBase):
    type: Literal["text"]
    options: Optional[List[str]] = None

    @field_validator("options")
    @classmethod
    def validate_options(cls, v):
        return _reject_options(v)

class RatingQuestion(QuestionBase):
    type: Literal["rating"]
    options: Optional[List[str]] = None

    @field_validator("options")
    @classmethod
    def validate_options(cls, v):
        return _reject_options(v)

class MultipleChoiceQuestion(QuestionBase):
    type: Literal["multiple_choice"]
    options: List[str] = Field(..., min_length=1)

    @field_validator("options")
    @classmethod
    def validate_options(cls, v):
        if any(not option.strip() for option in v):
            raise ValueError("options must be non-empty strings")
        return v

QuestionCreate = Annotated[
    Union[TextQuestion, MultipleChoiceQuestion, RatingQuestion],
    Field(discriminator="type"),
]

question_adapter = TypeAdapter(QuestionCreate)

class QuestionUpdate(RequestModel):
    title: Optional[QuestionTitle] = None
    type: Optional[QuestionType] = None
    options: Optional[List[str]] = None
    is_required: Optional[bool] = None
    order_index: Optional[OrderIndex] = None

    @field_validator("title", "type", "is_required", "order_index")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

class QuestionRead(CamelModel):
    id: int
    form_id: int
    title: str
    type: QuestionType
    options: Optional[List[str]] = None
    is_required: bool
    order_index: int

class FormDetail(FormRead):
    questions: List[QuestionRead] = Field(default_factory=list)
