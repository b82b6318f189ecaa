"""
Storage gateway: the only component that talks to the database.

A ``Storage`` is bound to one ``AsyncSession`` for the lifetime of a request.
It applies no authorization or visibility rules; those belong to the routes.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .auth.models import User
from .database import get_async_db
from .exceptions import ConflictException, NotFoundException
from .schemas import INT32_MAX
from .forms.models import Form, Question
from .responses.models import Answer, Response

logger = logging.getLogger(__name__)


def _storable_id(value: int) -> bool:
    return 0 < value <= INT32_MAX


class Storage:

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Users ---

    async def get_user(self, user_id: int) -> Optional[User]:
        if not _storable_id(user_id):
            return None
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(self, username: str, password_hash: str) -> User:
        """Create a user; raises ConflictException if the username is taken."""
        if await self.get_user_by_username(username) is not None:
            raise ConflictException(f"Username '{username}' already exists")

        user = User(username=username, password=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            await self.db.rollback()
            raise ConflictException(f"Username '{username}' already exists")
        await self.db.refresh(user)
        logger.info(f"Created user {user.id} ({username})")
        return user

    # --- Forms ---

    async def get_forms_by_user(self, user_id: int) -> List[Form]:
        result = await self.db.execute(
            select(Form)
            .where(Form.created_by == user_id)
            .order_by(Form.created_at.desc(), Form.id.desc())
        )
        return list(result.scalars().all())

    async def get_form(self, form_id: int) -> Optional[Form]:
        if not _storable_id(form_id):
            return None
        result = await self.db.execute(select(Form).where(Form.id == form_id))
        return result.scalar_one_or_none()

    async def get_public_form(self, form_id: int) -> Optional[Form]:
        # Callers check is_published themselves
        return await self.get_form(form_id)

    async def get_form_or_raise(self, form_id: int) -> Form:
        form = await self.get_form(form_id)
        if form is None:
            raise NotFoundException("Form", form_id)
        return form

    async def create_form(self, user_id: int, data: Dict[str, Any]) -> Form:
        form = Form(created_by=user_id, **data)
        self.db.add(form)
        await self.db.commit()
        await self.db.refresh(form)
        return form

    async def update_form(self, form_id: int, data: Dict[str, Any]) -> Optional[Form]:
        """Partial update; always bumps updated_at."""
        form = await self.get_form(form_id)
        if form is None:
            return None

        for key, value in data.items():
            setattr(form, key, value)
        form.updated_at = func.now()

        await self.db.commit()
        await self.db.refresh(form)
        return form

    async def delete_form(self, form_id: int) -> bool:
        """Deletes the form with its questions, responses and answers."""
        form = await self.get_form(form_id)
        if form is None:
            return False
        await self.db.delete(form)
        await self.db.commit()
        return True

    # --- Questions ---

    async def get_questions_by_form(self, form_id: int) -> List[Question]:
        result = await self.db.execute(
            select(Question)
            .where(Question.form_id == form_id)
            .order_by(Question.order_index.asc(), Question.id.asc())
        )
        return list(result.scalars().all())

    async def get_question(self, question_id: int) -> Optional[Question]:
        if not _storable_id(question_id):
            return None
        result = await self.db.execute(select(Question).where(Question.id == question_id))
        return result.scalar_one_or_none()

    async def create_question(self, form_id: int, data: Dict[str, Any]) -> Question:
        question = Question(form_id=form_id, **data)
        self.db.add(question)
        await self.db.commit()
        await self.db.refresh(question)
        return question

    async def update_question(self, question_id: int, data: Dict[str, Any]) -> Optional[Question]:
        question = await self.get_question(question_id)
        if question is None:
            return None

        for key, value in data.items():
            setattr(question, key, value)

        await self.db.commit()
        await self.db.refresh(question)
        return question

    async def delete_question(self, question_id: int) -> bool:
        question = await self.get_question(question_id)
        if question is None:
            return False
        await self.db.delete(question)
        await self.db.commit()
        return True

    # --- Responses ---

    async def get_responses_by_form(self, form_id: int) -> List[Response]:
        """Newest first, each with its answers and every answer's question."""
        result = await self.db.execute(
            select(Response)
            .where(Response.form_id == form_id)
            .options(selectinload(Response.answers).selectinload(Answer.question))
            .order_by(Response.submitted_at.desc(), Response.id.desc())
        )
        return list(result.scalars().all())

    async def create_response(
        self,
        form_id: int,
        respondent_name: Optional[str] = None,
        respondent_email: Optional[str] = None
    ) -> Response:
        """Stages a response row; the caller owns the transaction."""
        response = Response(
            form_id=form_id,
            respondent_name=respondent_name,
            respondent_email=respondent_email
        )
        self.db.add(response)
        await self.db.flush()
        return response

    async def create_answer(self, response_id: int, question_id: int, value: str) -> Answer:
        """Stages an answer row; the caller owns the transaction."""
        answer = Answer(response_id=response_id, question_id=question_id, value=value)
        self.db.add(answer)
        await self.db.flush()
        return answer

    async def submit_response(
        self,
        form_id: int,
        answers: Iterable[Tuple[int, str]],
        respondent_name: Optional[str] = None,
        respondent_email: Optional[str] = None
    ) -> Response:
        """Inserts a response and all of its answers as one unit, or nothing."""
        try:
            response = await self.create_response(form_id, respondent_name, respondent_email)
            for question_id, value in answers:
                await self.create_answer(response.id, question_id, value)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(response)
        return response

    async def get_response_count(self, form_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Response.id)).where(Response.form_id == form_id)
        )
        return result.scalar() or 0


async def get_storage(db: AsyncSession = Depends(get_async_db)) -> Storage:
    return Storage(db)
