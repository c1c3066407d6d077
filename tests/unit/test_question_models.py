"""
Unit tests for multiple-choice question payloads.

Tests the answer/option consistency rule and how optional options move
between the stored form (NULL) and the domain form ("").
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from src.core.enums import AnswerOption
from src.questions.models import (
    CreateQuestionPage,
    MultichoiceRow,
    UpdateQuestionPage,
    missing_answer_option,
)

BASE = {
    "lesson_id": 1,
    "created_by": "author-1",
    "last_modified_by": "author-1",
    "question": "Which protocol resolves IPv4 addresses to MAC addresses?",
    "option_a": "ARP",
    "option_b": "DNS",
}


class TestCreateQuestionPage:
    """Tests for CreateQuestionPage validation."""

    @pytest.mark.parametrize("answer", ["A", "B"])
    def test_two_options_valid_answers(self, answer):
        payload = CreateQuestionPage(**BASE, answer=answer)

        assert payload.answer is AnswerOption(answer)
        assert payload.option_c == ""

    @pytest.mark.parametrize("answer", ["C", "D", "E"])
    def test_answer_pointing_at_empty_option(self, answer):
        with pytest.raises(ValidationError, match="must be provided if it is selected"):
            CreateQuestionPage(**BASE, answer=answer)

    def test_answer_pointing_at_filled_optional_option(self):
        payload = CreateQuestionPage(**BASE, option_d="ICMP", answer="D")

        assert payload.answer is AnswerOption.D
        assert payload.detail_values()["option_d"] == "ICMP"

    @pytest.mark.parametrize("field", ["question", "option_a", "option_b"])
    def test_required_text_fields(self, field):
        data = {**BASE, "answer": "A", field: ""}

        with pytest.raises(ValidationError):
            CreateQuestionPage(**data)

    def test_invalid_answer_letter(self):
        with pytest.raises(ValidationError):
            CreateQuestionPage(**BASE, answer="F")

    def test_detail_values_store_empty_options_as_null(self):
        values = CreateQuestionPage(**BASE, option_c="RARP", answer="A").detail_values()

        assert values == {
            "question": BASE["question"],
            "option_a": "ARP",
            "option_b": "DNS",
            "option_c": "RARP",
            "option_d": None,
            "option_e": None,
            "answer": "A",
        }


class TestUpdateQuestionPage:
    """Tests for partial question updates."""

    def test_only_set_fields_change(self):
        payload = UpdateQuestionPage(id=3, last_modified_by="editor", question="New prompt?")

        assert payload.detail_changes() == {"question": "New prompt?"}

    def test_empty_optional_option_clears_it(self):
        payload = UpdateQuestionPage(id=3, last_modified_by="editor", option_e="")

        assert payload.detail_changes() == {"option_e": None}

    def test_required_options_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            UpdateQuestionPage(id=3, last_modified_by="editor", option_b="")


class TestAnswerConsistency:
    """Tests for missing_answer_option."""

    def test_present_option(self):
        assert missing_answer_option("C", {"option_c": "x"}) is None

    @pytest.mark.parametrize("stored", [None, ""])
    def test_missing_option(self, stored):
        assert missing_answer_option(AnswerOption.E, {"option_e": stored}) == "option_e"


class TestMultichoiceRow:
    """Tests for converting a stored row into the domain model."""

    def test_null_options_become_empty_strings(self):
        now = datetime(2026, 2, 1, 12, 0)
        row = MultichoiceRow(
            id=10,
            lesson_id=1,
            created_by="author-1",
            last_modified_by="author-1",
            created_at=now,
            modified=now,
            content_type="question",
            question_type="multichoice",
            question="Q?",
            option_a="a",
            option_b="b",
            option_c=None,
            option_d="d",
            option_e=None,
            answer="D",
        )

        page = row.to_domain()

        assert (page.option_c, page.option_d, page.option_e) == ("", "d", "")
        assert page.options == {
            AnswerOption.A: "a",
            AnswerOption.B: "b",
            AnswerOption.D: "d",
        }
