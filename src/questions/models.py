"""
Question page models.

A question page is stored across three tables (envelope, abstract question,
multiple-choice detail). Options A and B are required; C, D and E are
optional. The designated answer must point at an option that has text.

Optional options are NULL in the database. They are read into
MultichoiceRow first and only turned into "" when building QuestionPage, so
None never reaches the domain model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.enums import AnswerOption, ContentType, QuestionType
from src.pages.models import CreatePage, UpdatePage, VariantPage

OPTION_FIELDS = ("option_a", "option_b", "option_c", "option_d", "option_e")
OPTIONAL_OPTION_FIELDS = ("option_c", "option_d", "option_e")
DETAIL_FIELDS = ("question", *OPTION_FIELDS, "answer")


def missing_answer_option(answer: AnswerOption | str, options: dict[str, str | None]) -> str | None:
    """Name of the option the answer points at when that option is empty, else None."""
    field_name = AnswerOption(answer).field_name
    return None if options.get(field_name) else field_name


class QuestionPage(VariantPage):
    """Envelope + question type + multiple-choice detail."""

    kind = ContentType.QUESTION

    question_type: QuestionType
    question: str
    option_a: str
    option_b: str
    option_c: str = ""
    option_d: str = ""
    option_e: str = ""
    answer: AnswerOption

    @property
    def options(self) -> dict[AnswerOption, str]:
        """Non-empty options keyed by designator."""
        return {
            option: getattr(self, option.field_name)
            for option in AnswerOption
            if getattr(self, option.field_name)
        }


class CreateQuestionPage(CreatePage):
    kind = ContentType.QUESTION

    question_type: QuestionType = QuestionType.MULTICHOICE
    question: str = Field(min_length=1)
    option_a: str = Field(min_length=1)
    option_b: str = Field(min_length=1)
    option_c: str = ""
    option_d: str = ""
    option_e: str = ""
    answer: AnswerOption

    @model_validator(mode="after")
    def _answer_has_option(self) -> CreateQuestionPage:
        missing = missing_answer_option(self.answer, {f: getattr(self, f) for f in OPTION_FIELDS})
        if missing:
            raise ValueError(f"{missing} must be provided if it is selected as the answer")
        return self

    def detail_values(self) -> dict[str, Any]:
        """Column values for the multiple-choice row; empty optional options become NULL."""
        values: dict[str, Any] = {name: getattr(self, name) for name in DETAIL_FIELDS}
        for name in OPTIONAL_OPTION_FIELDS:
            values[name] = values[name] or None
        values["answer"] = self.answer.value
        return values


class UpdateQuestionPage(UpdatePage):
    """
    Partial update of a question page.

    None leaves a field as stored. For options C-E an empty string clears
    the option; options A and B cannot be cleared.
    """

    kind = ContentType.QUESTION

    question: str | None = Field(default=None, min_length=1)
    option_a: str | None = Field(default=None, min_length=1)
    option_b: str | None = Field(default=None, min_length=1)
    option_c: str | None = None
    option_d: str | None = None
    option_e: str | None = None
    answer: AnswerOption | None = None

    def detail_changes(self) -> dict[str, Any]:
        """Column values to overwrite; cleared optional options become NULL."""
        changes: dict[str, Any] = {}
        for name in DETAIL_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if name in OPTIONAL_OPTION_FIELDS and value == "":
                value = None
            if isinstance(value, AnswerOption):
                value = value.value
            changes[name] = value
        return changes


class QuestionPageRef(BaseModel):
    """One question page found in a lesson, as the attempt engine consumes it."""

    model_config = ConfigDict(frozen=True)

    content_type: ContentType
    question_type: QuestionType
    page_id: int


@dataclass
class MultichoiceRow:
    """Joined question row exactly as stored (optional options may be None)."""

    id: int
    lesson_id: int
    created_by: str
    last_modified_by: str
    created_at: Any
    modified: Any
    content_type: str
    question_type: str
    question: str
    option_a: str
    option_b: str
    option_c: str | None
    option_d: str | None
    option_e: str | None
    answer: str

    def to_domain(self) -> QuestionPage:
        return QuestionPage(
            id=self.id,
            lesson_id=self.lesson_id,
            created_by=self.created_by,
            last_modified_by=self.last_modified_by,
            created_at=self.created_at,
            modified=self.modified,
            content_type=self.content_type,
            question_type=self.question_type,
            question=self.question,
            option_a=self.option_a,
            option_b=self.option_b,
            option_c=self.option_c or "",
            option_d=self.option_d or "",
            option_e=self.option_e or "",
            answer=self.answer,
        )
