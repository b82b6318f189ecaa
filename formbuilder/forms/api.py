import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from pydantic import ValidationError

from ..auth.dependencies import get_current_user
from ..auth.models import User as UserModel
from ..exceptions import client_error_from_validation
from ..storage import Storage, get_storage
from . import schemas
from .dependencies import get_owned_form, get_owned_question
from .models import Form, Question

logger = logging.getLogger(__name__)
router = APIRouter()


async def list_forms_with_counts(storage: Storage, user_id: int) -> List[schemas.FormWithCount]:
    forms = await storage.get_forms_by_user(user_id)
    return [
        schemas.FormWithCount.model_validate(form).model_copy(
            update={"response_count": await storage.get_response_count(form.id)}
        )
        for form in forms
    ]

# --- Form Endpoints ---

@router.get("/forms", response_model=List[schemas.FormWithCount])
async def read_forms(
    storage: Storage = Depends(get_storage),
    current_user: UserModel = Depends(get_current_user)
):
    """The caller's forms, newest first, each with its response count."""
    return await list_forms_with_counts(storage, current_user.id)

@router.get("/forms/{form_id}", response_model=schemas.FormDetail)
async def read_form(
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    questions = await storage.get_questions_by_form(form.id)
    base = schemas.FormRead.model_validate(form)
    return schemas.FormDetail(
        **base.model_dump(),
        questions=[schemas.QuestionRead.model_validate(q) for q in questions]
    )

@router.post("/forms", response_model=schemas.FormRead, status_code=status.HTTP_201_CREATED)
async def create_form(
    form_data: schemas.FormCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserModel = Depends(get_current_user)
):
    form = await storage.create_form(current_user.id, form_data.model_dump())
    logger.info(f"User {current_user.id} created form {form.id}")
    return form

@router.put("/forms/{form_id}", response_model=schemas.FormRead)
async def update_form(
    form_data: schemas.FormUpdate,
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    update_data = form_data.model_dump(exclude_unset=True)
    if "is_published" in update_data and update_data["is_published"] != form.is_published:
        logger.info(f"Form {form.id} published={update_data['is_published']}")
    return await storage.update_form(form.id, update_data)

@router.delete("/forms/{form_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_form(
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    await storage.delete_form(form.id)
    logger.info(f"Deleted form {form.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# --- Question Endpoints ---

@router.post(
    "/forms/{form_id}/questions",
    response_model=schemas.QuestionRead,
    status_code=status.HTTP_201_CREATED
)
async def create_question(
    question: schemas.QuestionCreate,
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    return await storage.create_question(form.id, question.model_dump())

@router.put("/questions/{question_id}", response_model=schemas.QuestionRead)
async def update_question(
    question_data: schemas.QuestionUpdate,
    question: Question = Depends(get_owned_question),
    storage: Storage = Depends(get_storage)
):
    """
    Applies a partial update. The merged question must still be a valid
    text, multiple_choice or rating question; switching away from
    multiple_choice drops the options.
    """
    patch = question_data.model_dump(exclude_unset=True)
    merged = {
        "title": question.title,
        "type": question.type,
        "options": question.options,
        "is_required": question.is_required,
        "order_index": question.order_index,
    }
    if "type" in patch:
        patch["type"] = patch["type"].value
        if patch["type"] != "multiple_choice" and "options" not in patch:
            merged["options"] = None
    merged.update(patch)

    try:
        validated = schemas.question_adapter.validate_python(merged)
    except ValidationError as e:
        raise client_error_from_validation(e.errors(), prefix=("body",))

    return await storage.update_question(question.id, validated.model_dump())

@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question: Question = Depends(get_owned_question),
    storage: Storage = Depends(get_storage)
):
    await storage.delete_question(question.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
