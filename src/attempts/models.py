"""Attempt payloads and read models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.core.enums import ContentType, QuestionType


class AttemptDescriptor(BaseModel):
    """Who starts which lesson. All four references are required."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    lesson_id: int = Field(gt=0)
    plan_id: int = Field(gt=0)
    channel_id: int = Field(gt=0)
    user_id: str = Field(min_length=1)


class LessonAttemptRecord(AttemptDescriptor):
    """Stored lesson attempt."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    created_at: datetime


class AttemptChain(BaseModel):
    """
    One page attempt -> question attempt -> question-page attempt chain.

    ``page_id`` is the original question page the learner will answer.
    """

    model_config = ConfigDict(frozen=True)

    page_attempt_id: int
    question_attempt_id: int
    question_page_attempt_id: int
    content_type: ContentType
    question_type: QuestionType
    page_id: int


class AttemptSummary(BaseModel):
    """What start_attempt committed."""

    model_config = ConfigDict(frozen=True)

    lesson_attempt_id: int
    chains: list[AttemptChain] = Field(default_factory=list)

    @property
    def chain_count(self) -> int:
        return len(self.chains)

    @property
    def page_ids(self) -> list[int]:
        return [chain.page_id for chain in self.chains]
