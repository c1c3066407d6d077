"""
Attempt Repository.

Persists lesson attempts and, under each, the chains that pair the learner
with one original question page:

    lesson_attempts
      -> page_attempts (content_type)
        -> question_attempts (question_type)
          -> question_page_attempts (page_id of the original question page)

A chain is written as one unit. Pass ``session`` to make it part of a
larger unit (the attempt engine writes the whole lesson that way).
"""

from __future__ import annotations

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.attempts.models import AttemptChain, AttemptDescriptor, LessonAttemptRecord
from src.core.enums import ContentType, QuestionType
from src.core.errors import (
    InvalidInputError,
    LearningPlatformError,
    NotFoundError,
    ScanFailureError,
)
from src.core.validation import coerce_payload
from src.db.database import SessionFactory, unit_of_work
from src.db.models import LessonAttempt, PageAttempt, QuestionAttempt, QuestionPageAttempt
from src.db.utils import raise_translated
from src.pages.models import resolve_content_type


def _question_type(op: str, value: QuestionType | str) -> QuestionType:
    try:
        return QuestionType(value)
    except ValueError as exc:
        raise InvalidInputError(op, f"unsupported question type {value!r}") from exc


def _positive_id(op: str, name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(op, f"{name} must be a positive integer")
    return value


class AttemptRepository:
    """Writes and reads lesson attempts and their chains."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def create_lesson_attempt(
        self,
        lesson_id: int,
        plan_id: int,
        channel_id: int,
        user_id: str,
        session: Session | None = None,
    ) -> int:
        """Record that ``user_id`` started a lesson; returns the attempt id."""
        op = "attempts.create_lesson_attempt"
        descriptor = coerce_payload(
            op,
            AttemptDescriptor,
            {"lesson_id": lesson_id, "plan_id": plan_id, "channel_id": channel_id, "user_id": user_id},
        )
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                attempt = LessonAttempt(**descriptor.model_dump())
                s.add(attempt)
                s.flush()
                attempt_id = attempt.id
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(
            f"Created lesson attempt {attempt_id} (lesson={lesson_id}, user={descriptor.user_id})"
        )
        return attempt_id

    def create_attempt_chain(
        self,
        lesson_attempt_id: int,
        content_type: ContentType | str,
        question_type: QuestionType | str,
        original_page_id: int,
        session: Session | None = None,
    ) -> AttemptChain:
        """
        Insert page attempt, question attempt and question-page attempt together.

        Either all three rows exist afterwards or none do.
        """
        op = "attempts.create_attempt_chain"
        _positive_id(op, "lesson_attempt_id", lesson_attempt_id)
        _positive_id(op, "original_page_id", original_page_id)
        content_type = resolve_content_type(op, content_type)
        question_type = _question_type(op, question_type)
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                page_attempt = PageAttempt(
                    lesson_attempt_id=lesson_attempt_id, content_type=content_type.value
                )
                s.add(page_attempt)
                s.flush()

                question_attempt = QuestionAttempt(
                    page_attempt_id=page_attempt.id, question_type=question_type.value
                )
                s.add(question_attempt)
                s.flush()

                question_page_attempt = QuestionPageAttempt(
                    question_attempt_id=question_attempt.id, page_id=original_page_id
                )
                s.add(question_page_attempt)
                s.flush()

                chain = AttemptChain(
                    page_attempt_id=page_attempt.id,
                    question_attempt_id=question_attempt.id,
                    question_page_attempt_id=question_page_attempt.id,
                    content_type=content_type,
                    question_type=question_type,
                    page_id=original_page_id,
                )
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(
            f"Created attempt chain {chain.page_attempt_id} "
            f"for page {original_page_id} under attempt {lesson_attempt_id}"
        )
        return chain

    def get_lesson_attempt(
        self, lesson_attempt_id: int, session: Session | None = None
    ) -> LessonAttemptRecord:
        """Fetch a lesson attempt. Raises NotFoundError when absent."""
        op = "attempts.get_lesson_attempt"
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                attempt = s.get(LessonAttempt, lesson_attempt_id)
                if attempt is None:
                    raise NotFoundError(op, f"lesson attempt {lesson_attempt_id} not found")
                try:
                    return LessonAttemptRecord.model_validate(attempt)
                except ValidationError as exc:
                    raise ScanFailureError(
                        op, f"malformed lesson attempt row {lesson_attempt_id}"
                    ) from exc
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

    def list_attempt_chains(
        self, lesson_attempt_id: int, session: Session | None = None
    ) -> list[AttemptChain]:
        """Chains of a lesson attempt in creation order."""
        op = "attempts.list_attempt_chains"
        stmt = (
            select(
                PageAttempt.id.label("page_attempt_id"),
                QuestionAttempt.id.label("question_attempt_id"),
                QuestionPageAttempt.id.label("question_page_attempt_id"),
                PageAttempt.content_type,
                QuestionAttempt.question_type,
                QuestionPageAttempt.page_id,
            )
            .join(QuestionAttempt, QuestionAttempt.page_attempt_id == PageAttempt.id)
            .join(QuestionPageAttempt, QuestionPageAttempt.question_attempt_id == QuestionAttempt.id)
            .where(PageAttempt.lesson_attempt_id == lesson_attempt_id)
            .order_by(PageAttempt.id)
        )
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                rows = s.execute(stmt).all()
                try:
                    return [AttemptChain(**row._asdict()) for row in rows]
                except ValidationError as exc:
                    raise ScanFailureError(
                        op, f"malformed attempt chain under attempt {lesson_attempt_id}"
                    ) from exc
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)
