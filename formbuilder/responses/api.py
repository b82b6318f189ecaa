import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response as HTTPResponse

from ..exceptions import ClientError
from ..forms.dependencies import get_owned_form, get_published_form
from ..forms.models import Form
from ..forms.schemas import FormDetail, FormRead, QuestionRead
from ..stats.export import export_filename, responses_to_csv
from ..storage import Storage, get_storage
from . import schemas

logger = logging.getLogger(__name__)
router = APIRouter()

# --- Public Endpoints ---

@router.get("/public/forms/{form_id}", response_model=FormDetail)
async def read_public_form(
    form: Form = Depends(get_published_form),
    storage: Storage = Depends(get_storage)
):
    questions = await storage.get_questions_by_form(form.id)
    base = FormRead.model_validate(form)
    return FormDetail(
        **base.model_dump(),
        questions=[QuestionRead.model_validate(q) for q in questions]
    )

@router.post(
    "/public/forms/{form_id}/responses",
    response_model=schemas.SubmissionResult,
    status_code=status.HTTP_201_CREATED
)
async def submit_response(
    submission: schemas.SubmissionCreate,
    form: Form = Depends(get_published_form),
    storage: Storage = Depends(get_storage)
):
    """
    Records one response with its answers. Every answer must target a
    question of this form, at most once. Required questions are not checked.
    """
    question_ids = {q.id for q in await storage.get_questions_by_form(form.id)}
    errors = []
    seen = set()
    for index, answer in enumerate(submission.answers):
        field = f"body.answers.{index}.questionId"
        if answer.question_id not in question_ids:
            errors.append({"field": field, "message": "Question does not belong to this form"})
        elif answer.question_id in seen:
            errors.append({"field": field, "message": "Question answered more than once"})
        seen.add(answer.question_id)
    if errors:
        raise ClientError(errors)

    response = await storage.submit_response(
        form.id,
        [(answer.question_id, answer.value) for answer in submission.answers],
        respondent_name=submission.respondent_name,
        respondent_email=submission.respondent_email
    )
    logger.info(f"Response {response.id} submitted to form {form.id} with {len(submission.answers)} answers")
    return schemas.SubmissionResult(success=True)

# --- Owner Endpoints ---

@router.get("/forms/{form_id}/responses", response_model=List[schemas.ResponseRead])
async def read_responses(
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    return await storage.get_responses_by_form(form.id)

@router.get("/forms/{form_id}/export", response_class=HTTPResponse)
async def export_responses(
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    responses = await storage.get_responses_by_form(form.id)
    questions = await storage.get_questions_by_form(form.id)
    content = responses_to_csv(questions, responses)
    logger.info(f"Exported {len(responses)} responses for form {form.id}")
    return HTTPResponse(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(form.title)}"'}
    )
