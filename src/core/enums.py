"""Stored discriminator values."""

from __future__ import annotations

from enum import Enum


class ContentType(str, Enum):
    """Which variant an envelope row extends."""

    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    QUESTION = "question"


class QuestionType(str, Enum):
    """Which detail table an abstract question owns."""

    MULTICHOICE = "multichoice"


class AnswerOption(str, Enum):
    """Designated correct option of a multiple-choice question."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @property
    def field_name(self) -> str:
        """Column holding this option's text (``option_a`` .. ``option_e``)."""
        return f"option_{self.value.lower()}"
