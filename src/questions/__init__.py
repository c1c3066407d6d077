"""Multiple-choice question pages."""

from src.questions.models import (
    CreateQuestionPage,
    QuestionPage,
    QuestionPageRef,
    UpdateQuestionPage,
)
from src.questions.repository import QuestionAuthoringRepository

__all__ = [
    "CreateQuestionPage",
    "QuestionAuthoringRepository",
    "QuestionPage",
    "QuestionPageRef",
    "UpdateQuestionPage",
]
