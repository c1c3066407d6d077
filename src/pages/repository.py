"""
Page Repository.

One entry point for every page kind. Image, video and document pages are
an envelope row plus one variant row; question pages are handed to the
QuestionAuthoringRepository so callers never branch on kind themselves.

Writes follow: begin unit -> envelope -> variant -> commit, rolling back
on any failure, so an envelope never exists without its variant.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.enums import ContentType
from src.core.errors import LearningPlatformError, NotFoundError, ScanFailureError
from src.core.pagination import Pagination
from src.db.database import SessionFactory, unit_of_work
from src.db.models import AbstractPage, Lesson
from src.db.utils import raise_translated
from src.pages.envelope import insert_envelope, touch_envelope
from src.pages.models import (
    CreatePage,
    PageEnvelope,
    UpdatePage,
    VariantPage,
    parse_create_page,
    parse_update_page,
    resolve_content_type,
)
from src.pages.variants import ENVELOPE_COLUMNS, variant_for
from src.questions.repository import QuestionAuthoringRepository


class PageRepository:
    """Create, read, list, update and delete lesson pages of any kind."""

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        questions: QuestionAuthoringRepository | None = None,
    ):
        self._session_factory = session_factory
        self._questions = questions or QuestionAuthoringRepository(session_factory)

    def create(
        self, payload: CreatePage | Mapping[str, Any], session: Session | None = None
    ) -> int:
        """
        Create a page and return its identity.

        Args:
            payload: Create payload, or a mapping with a ``content_type`` key
            session: Caller's unit to join

        Raises:
            InvalidInputError: Bad payload or constraint violation (e.g. unknown lesson)
            UnsupportedContentTypeError: Unknown ``content_type``
        """
        op = "pages.create"
        if not isinstance(payload, CreatePage):
            payload = parse_create_page(payload)
        if payload.content_type is ContentType.QUESTION:
            return self._questions.create(payload, session=session)

        variant = variant_for(op, payload.content_type)
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                page_id = insert_envelope(s, payload)
                s.add(variant.new_row(page_id, payload))
                s.flush()
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(
            f"Created {payload.content_type.value} page {page_id} in lesson {payload.lesson_id}"
        )
        return page_id

    def get_by_id(
        self,
        page_id: int,
        content_type: ContentType | str,
        session: Session | None = None,
    ) -> VariantPage:
        """
        Fetch one page joined with the variant named by ``content_type``.

        A page stored under a different kind is reported as not found.
        """
        op = "pages.get_by_id"
        content_type = resolve_content_type(op, content_type)
        if content_type is ContentType.QUESTION:
            return self._questions.get_by_id(page_id, session=session)

        variant = variant_for(op, content_type)
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                row = s.execute(variant.select_by_id(page_id)).one_or_none()
                if row is None:
                    raise NotFoundError(op, f"{content_type.value} page {page_id} not found")
                return variant.decode(op, *row)
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

    def list_by_lesson(
        self,
        lesson_id: int,
        limit: int | None = None,
        offset: int | None = None,
        session: Session | None = None,
    ) -> list[PageEnvelope]:
        """
        Page envelopes of a lesson, ordered by id.

        Raises NotFoundError for an unknown lesson; a lesson without pages
        yields an empty list.
        """
        op = "pages.list_by_lesson"
        page = Pagination.resolve(op, limit, offset)
        stmt = (
            select(AbstractPage)
            .where(AbstractPage.lesson_id == lesson_id)
            .order_by(AbstractPage.id)
            .limit(page.limit)
            .offset(page.offset)
        )
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                if s.get(Lesson, lesson_id) is None:
                    raise NotFoundError(op, f"lesson {lesson_id} not found")
                envelopes = []
                for row in s.scalars(stmt):
                    try:
                        envelopes.append(
                            PageEnvelope(**{name: getattr(row, name) for name in ENVELOPE_COLUMNS})
                        )
                    except ValidationError as exc:
                        raise ScanFailureError(op, f"malformed page row {row.id}") from exc
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(
            f"Listed {len(envelopes)} page(s) of lesson {lesson_id} "
            f"(limit={page.limit}, offset={page.offset})"
        )
        return envelopes

    def update(
        self, payload: UpdatePage | Mapping[str, Any], session: Session | None = None
    ) -> None:
        """
        Apply a partial update.

        Fields left as None keep their stored value, so replaying the same
        payload leaves the same state. The envelope must exist under the
        payload's kind, otherwise NotFoundError.
        """
        op = "pages.update"
        if not isinstance(payload, UpdatePage):
            payload = parse_update_page(payload)
        if payload.content_type is ContentType.QUESTION:
            return self._questions.update(payload, session=session)

        variant = variant_for(op, payload.content_type)
        changes = payload.variant_changes()
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                if not touch_envelope(s, payload.id, payload.content_type, payload.last_modified_by):
                    raise NotFoundError(
                        op, f"{payload.content_type.value} page {payload.id} not found"
                    )
                detail = s.get(variant.table, payload.id)
                if detail is None:
                    raise NotFoundError(
                        op, f"{payload.content_type.value} content for page {payload.id} not found"
                    )
                for name, value in changes.items():
                    setattr(detail, name, value)
                s.flush()
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(
            f"Updated {payload.content_type.value} page {payload.id} ({len(changes)} field(s))"
        )

    def delete(self, page_id: int, session: Session | None = None) -> None:
        """Delete a page and its variant. Raises NotFoundError when nothing was deleted."""
        op = "pages.delete"
        try:
            with unit_of_work(self._session_factory, session, op=op) as s:
                stored = s.execute(
                    select(AbstractPage.content_type).where(AbstractPage.id == page_id)
                ).scalar_one_or_none()
                if stored == ContentType.QUESTION.value:
                    self._questions.delete(page_id, session=s)
                else:
                    result = s.execute(delete(AbstractPage).where(AbstractPage.id == page_id))
                    if result.rowcount == 0:
                        raise NotFoundError(op, f"page {page_id} not found")
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        logger.bind(op=op).debug(f"Deleted page {page_id}")
