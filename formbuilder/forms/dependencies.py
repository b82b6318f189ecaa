from fastapi import Depends

from ..auth.dependencies import get_current_user
from ..auth.models import User
from ..exceptions import ForbiddenException, NotFoundException
from ..storage import Storage, get_storage
from .models import Form, Question


def ensure_owner(form: Form, user: User) -> Form:
    if form.created_by != user.id:
        raise ForbiddenException()
    return form


async def get_owned_form(
    form_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Form:
    """Loads the form in the path; 404 if missing, 403 if the caller is not its creator."""
    form = await storage.get_form_or_raise(form_id)
    return ensure_owner(form, current_user)


async def get_owned_question(
    question_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Question:
    question = await storage.get_question(question_id)
    if question is None:
        raise NotFoundException("Question", question_id)
    form = await storage.get_form_or_raise(question.form_id)
    ensure_owner(form, current_user)
    return question


async def get_published_form(
    form_id: int,
    storage: Storage = Depends(get_storage),
) -> Form:
    """Public lookup: unpublished forms are indistinguishable from missing ones."""
    form = await storage.get_public_form(form_id)
    if form is None or not form.is_published:
        raise NotFoundException("Form", form_id)
    return form
