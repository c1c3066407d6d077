"""
Attempt tables mirroring lesson -> page -> question -> question page.

A lesson attempt owns its chains: deleting it cascades through page attempts
and question attempts down to the question-page attempts. The question-page
attempt points at the original question page by identity; a question page
with recorded attempts cannot be deleted (RESTRICT).
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK


class LessonAttempt(Base):
    """One learner starting one lesson. Never mutated after creation."""

    __tablename__ = "lesson_attempts"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("plans.id", ondelete="CASCADE"), nullable=False
    )
    channel_id: Mapped[int] = mapped_column(
        ForeignKey("channels.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class PageAttempt(Base):
    """Snapshot of the content type of the page being attempted."""

    __tablename__ = "page_attempts"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    lesson_attempt_id: Mapped[int] = mapped_column(
        ForeignKey("lesson_attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content_type: Mapped[str] = mapped_column(Text, nullable=False)


class QuestionAttempt(Base):
    """Snapshot of the question type under a page attempt."""

    __tablename__ = "question_attempts"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    page_attempt_id: Mapped[int] = mapped_column(
        ForeignKey("page_attempts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    question_type: Mapped[str] = mapped_column(Text, nullable=False)


class QuestionPageAttempt(Base):
    """Answer-submission record: which original question page is being answered."""

    __tablename__ = "question_page_attempts"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    question_attempt_id: Mapped[int] = mapped_column(
        ForeignKey("question_attempts.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    page_id: Mapped[int] = mapped_column(
        ForeignKey("question_pages.abstractpage_id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
