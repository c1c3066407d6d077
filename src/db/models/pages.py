"""
Page tables: one envelope row per page plus one variant row per envelope.

Layout:
- abstract_pages: shared envelope (lesson, authorship, timestamps, content_type)
- image_pages / video_pages / document_pages: 1:1 extensions keyed by envelope id
- question_pages: 1:1 extension linking the envelope to an abstract question
- abstract_questions -> multichoice_questions: two-level question detail

Variant rows disappear with their envelope (ON DELETE CASCADE). The abstract
question is referenced *by* question_pages, so the repository removes it
explicitly inside the same unit as the envelope.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntPK


class AbstractPage(Base):
    """Envelope shared by every page regardless of content kind."""

    __tablename__ = "abstract_pages"
    __table_args__ = (
        CheckConstraint(
            "content_type IN ('image', 'video', 'document', 'question')",
            name="ck_abstract_pages_content_type",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by: Mapped[str] = mapped_column(Text, nullable=False)
    last_modified_by: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    content_type: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<AbstractPage(id={self.id}, type={self.content_type}, lesson={self.lesson_id})>"


class ImagePageContent(Base):
    """Image variant."""

    __tablename__ = "image_pages"

    abstractpage_id: Mapped[int] = mapped_column(
        ForeignKey("abstract_pages.id", ondelete="CASCADE"), primary_key=True
    )
    image_file_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_name: Mapped[str] = mapped_column(Text, nullable=False)


class VideoPageContent(Base):
    """Video variant."""

    __tablename__ = "video_pages"

    abstractpage_id: Mapped[int] = mapped_column(
        ForeignKey("abstract_pages.id", ondelete="CASCADE"), primary_key=True
    )
    video_file_url: Mapped[str] = mapped_column(Text, nullable=False)
    video_name: Mapped[str] = mapped_column(Text, nullable=False)


class DocumentPageContent(Base):
    """Document (PDF) variant."""

    __tablename__ = "document_pages"

    abstractpage_id: Mapped[int] = mapped_column(
        ForeignKey("abstract_pages.id", ondelete="CASCADE"), primary_key=True
    )
    document_file_url: Mapped[str] = mapped_column(Text, nullable=False)
    document_name: Mapped[str] = mapped_column(Text, nullable=False)


class AbstractQuestion(Base):
    """Question envelope; question_type names the detail table."""

    __tablename__ = "abstract_questions"
    __table_args__ = (
        CheckConstraint(
            "question_type IN ('multichoice')",
            name="ck_abstract_questions_question_type",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    question_type: Mapped[str] = mapped_column(Text, nullable=False)


class QuestionPageLink(Base):
    """Question variant: ties a page envelope to its abstract question."""

    __tablename__ = "question_pages"

    abstractpage_id: Mapped[int] = mapped_column(
        ForeignKey("abstract_pages.id", ondelete="CASCADE"), primary_key=True
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("abstract_questions.id", ondelete="CASCADE"), nullable=False, unique=True
    )


class MultichoiceQuestion(Base):
    """Multiple-choice detail. Options C-E are optional and stored as NULL."""

    __tablename__ = "multichoice_questions"
    __table_args__ = (
        CheckConstraint("answer IN ('A', 'B', 'C', 'D', 'E')", name="ck_multichoice_answer"),
    )

    question_id: Mapped[int] = mapped_column(
        ForeignKey("abstract_questions.id", ondelete="CASCADE"), primary_key=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    option_a: Mapped[str] = mapped_column(Text, nullable=False)
    option_b: Mapped[str] = mapped_column(Text, nullable=False)
    option_c: Mapped[str | None] = mapped_column(Text)
    option_d: Mapped[str | None] = mapped_column(Text)
    option_e: Mapped[str | None] = mapped_column(Text)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
