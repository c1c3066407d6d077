"""
Question Authoring Repository.

Writes and reads question pages. One question page spans four rows:

    abstract_pages (content_type='question')
      -> question_pages (link)  -> abstract_questions (question_type)
                                    -> multichoice_questions (detail)

Every method runs in a single unit of work; pass ``session`` to join a unit
opened by the caller instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.enums import ContentType, QuestionType
from src.core.errors import (
    InvalidInputError,
    LearningPlatformError,
    NotFoundError,
    ScanFailureError,
)
from src.core.validation import coerce_payload
from src.db.database import SessionFactory, unit_of_work
from src.db.models import (
    AbstractPage,
    AbstractQuestion,
    MultichoiceQuestion,
    QuestionPageLink,
)
from src.db.utils import raise_translated
from src.pages.envelope import insert_envelope, touch_envelope
from src.pages.models import resolve_content_type
from src.questions.models import (
    OPTION_FIELDS,
    CreateQuestionPage,
    MultichoiceRow,
    QuestionPage,
    QuestionPageRef,
    UpdateQuestionPage,
    missing_answer_option,
)

_QUESTION = ContentType.QUESTION.value
_MULTICHOICE = QuestionType.MULTICHOICE.value


def _question_payload(op: str, model: type, payload: Any) -> Any:
    """Validate a question payload; a mapping may carry content_type='question'."""
    if isinstance(payload, Mapping) and "content_type" in payload:
        data = dict(payload)
        content_type = resolve_content_type(op, data.pop("content_type"))
        if content_type is not ContentType.QUESTION:
            raise InvalidInputError(op, f"not a question payload: {content_type.value!r}")
        payload = data
    return coerce_payload(op, model, payload)


class QuestionAuthoringRepository:
    """CRUD for multiple-choice question pages."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def create(
        self,
        payload: CreateQuestionPage | Mapping[str, Any],
        session: Session | None = None,
    ) -> int:
        """
        Insert envelope, abstract question, link and detail; return the page id.

        Args:
            payload: Validated payload or raw mapping
            session: Caller's unit to join

        Returns:
            Identity of the new page envelope
        """
        op = "questions.create"
        payload = _question_payload(op, CreateQuestionPage, payload)
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                page_id = insert_envelope(s, payload)
                question = AbstractQuestion(question_type=payload.question_type.value)
                s.add(question)
                s.flush()
                s.add(QuestionPageLink(abstractpage_id=page_id, question_id=question.id))
                s.add(MultichoiceQuestion(question_id=question.id, **payload.detail_values()))
                s.flush()
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(f"Created question page {page_id} in lesson {payload.lesson_id}")
        return page_id

    def get_by_id(self, page_id: int, session: Session | None = None) -> QuestionPage:
        """Fetch a question page with its options. Raises NotFoundError when absent."""
        op = "questions.get_by_id"
        stmt = (
            select(
                AbstractPage.id,
                AbstractPage.lesson_id,
                AbstractPage.created_by,
                AbstractPage.last_modified_by,
                AbstractPage.created_at,
                AbstractPage.modified,
                AbstractPage.content_type,
                AbstractQuestion.question_type,
                MultichoiceQuestion.question,
                MultichoiceQuestion.option_a,
                MultichoiceQuestion.option_b,
                MultichoiceQuestion.option_c,
                MultichoiceQuestion.option_d,
                MultichoiceQuestion.option_e,
                MultichoiceQuestion.answer,
            )
            .join(QuestionPageLink, QuestionPageLink.abstractpage_id == AbstractPage.id)
            .join(AbstractQuestion, AbstractQuestion.id == QuestionPageLink.question_id)
            .join(MultichoiceQuestion, MultichoiceQuestion.question_id == AbstractQuestion.id)
            .where(
                AbstractPage.id == page_id,
                AbstractPage.content_type == _QUESTION,
                AbstractQuestion.question_type == _MULTICHOICE,
            )
        )
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                row = s.execute(stmt).one_or_none()
                if row is None:
                    raise NotFoundError(op, f"question page {page_id} not found")
                try:
                    return MultichoiceRow(**row._asdict()).to_domain()
                except ValidationError as exc:
                    raise ScanFailureError(op, f"malformed question page row {page_id}") from exc
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

    def update(
        self,
        payload: UpdateQuestionPage | Mapping[str, Any],
        session: Session | None = None,
    ) -> None:
        """
        Apply a partial update to a question page.

        The answer must still point at a non-empty option once the changes are
        merged with what is stored; otherwise nothing is written.
        """
        op = "questions.update"
        payload = _question_payload(op, UpdateQuestionPage, payload)
        changes = payload.detail_changes()
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                if not touch_envelope(s, payload.id, ContentType.QUESTION, payload.last_modified_by):
                    raise NotFoundError(op, f"question page {payload.id} not found")

                detail = s.execute(
                    select(MultichoiceQuestion)
                    .join(
                        QuestionPageLink,
                        QuestionPageLink.question_id == MultichoiceQuestion.question_id,
                    )
                    .where(QuestionPageLink.abstractpage_id == payload.id)
                ).scalar_one_or_none()
                if detail is None:
                    raise NotFoundError(op, f"question detail for page {payload.id} not found")

                merged = {name: changes.get(name, getattr(detail, name)) for name in OPTION_FIELDS}
                missing = missing_answer_option(changes.get("answer", detail.answer), merged)
                if missing:
                    raise InvalidInputError(
                        op, f"{missing} must be provided if it is selected as the answer"
                    )

                for name, value in changes.items():
                    setattr(detail, name, value)
                s.flush()
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(f"Updated question page {payload.id} ({len(changes)} field(s))")

    def delete(self, page_id: int, session: Session | None = None) -> None:
        """
        Remove a question page and the question it owns.

        A page that learners have attempted cannot be deleted (InvalidInputError).
        """
        op = "questions.delete"
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                question_id = s.execute(
                    select(QuestionPageLink.question_id)
                    .join(AbstractPage, AbstractPage.id == QuestionPageLink.abstractpage_id)
                    .where(AbstractPage.id == page_id, AbstractPage.content_type == _QUESTION)
                ).scalar_one_or_none()
                if question_id is None:
                    raise NotFoundError(op, f"question page {page_id} not found")

                # link row goes with the envelope; the detail goes with the question
                s.execute(delete(AbstractPage).where(AbstractPage.id == page_id))
                s.execute(delete(AbstractQuestion).where(AbstractQuestion.id == question_id))
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(f"Deleted question page {page_id}")

    def list_question_pages_for_lesson(
        self, lesson_id: int, session: Session | None = None
    ) -> list[QuestionPageRef]:
        """Every multiple-choice question page of a lesson, by ascending page id."""
        op = "questions.list_question_pages_for_lesson"
        stmt = (
            select(AbstractPage.content_type, AbstractQuestion.question_type, AbstractPage.id)
            .join(QuestionPageLink, QuestionPageLink.abstractpage_id == AbstractPage.id)
            .join(AbstractQuestion, AbstractQuestion.id == QuestionPageLink.question_id)
            .where(
                AbstractPage.lesson_id == lesson_id,
                AbstractPage.content_type == _QUESTION,
                AbstractQuestion.question_type == _MULTICHOICE,
            )
            .order_by(AbstractPage.id)
        )
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                rows = s.execute(stmt).all()
                try:
                    refs = [
                        QuestionPageRef(content_type=ct, question_type=qt, page_id=pid)
                        for ct, qt, pid in rows
                    ]
                except ValidationError as exc:
                    raise ScanFailureError(op, f"malformed question page row in lesson {lesson_id}") from exc
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(f"Lesson {lesson_id} has {len(refs)} question page(s)")
        return refs
