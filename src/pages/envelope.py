"""Envelope writes shared by the page and question repositories."""

from __future__ import annotations

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from src.core.enums import ContentType
from src.db.models import AbstractPage
from src.pages.models import CreatePage


def insert_envelope(session: Session, payload: CreatePage) -> int:
    """Insert the envelope row and return its generated identity."""
    envelope = AbstractPage(
        lesson_id=payload.lesson_id,
        created_by=payload.created_by,
        last_modified_by=payload.last_modified_by,
        content_type=payload.content_type.value,
    )
    session.add(envelope)
    session.flush()
    return envelope.id


def touch_envelope(
    session: Session, page_id: int, content_type: ContentType, last_modified_by: str
) -> bool:
    """
    Stamp modifier and modification time on an envelope of the given kind.

    Returns False when no envelope with that id *and* content type exists.
    """
    result = session.execute(
        update(AbstractPage)
        .where(AbstractPage.id == page_id, AbstractPage.content_type == content_type.value)
        .values(last_modified_by=last_modified_by, modified=func.now())
        .execution_options(synchronize_session="evaluate")
    )
    return result.rowcount > 0
