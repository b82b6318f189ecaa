from fastapi import APIRouter, Depends

from ..auth.dependencies import get_current_user
from ..auth.models import User as UserModel
from ..forms.api import list_forms_with_counts
from ..forms.dependencies import get_owned_form
from ..forms.models import Form
from ..storage import Storage, get_storage
from .aggregation import dashboard_stats, summarize_form
from .schemas import DashboardStats, FormSummary

router = APIRouter()


@router.get("/forms/{form_id}/summary", response_model=FormSummary)
async def read_form_summary(
    form: Form = Depends(get_owned_form),
    storage: Storage = Depends(get_storage)
):
    """Per-question statistics computed from the raw responses."""
    questions = await storage.get_questions_by_form(form.id)
    responses = await storage.get_responses_by_form(form.id)
    return summarize_form(form.id, questions, responses)


@router.get("/stats", response_model=DashboardStats)
async def read_dashboard_stats(
    storage: Storage = Depends(get_storage),
    current_user: UserModel = Depends(get_current_user)
):
    forms = await list_forms_with_counts(storage, current_user.id)
    return dashboard_stats(forms)
