# SQLAlchemy models
from .attempts import (
    LessonAttempt,
    PageAttempt,
    QuestionAttempt,
    QuestionPageAttempt,
)
from .base import Base
from .hierarchy import (
    Channel,
    Lesson,
    Plan,
)
from .pages import (
    AbstractPage,
    AbstractQuestion,
    DocumentPageContent,
    ImagePageContent,
    MultichoiceQuestion,
    QuestionPageLink,
    VideoPageContent,
)

__all__ = [
    # Base
    "Base",
    # Hierarchy
    "Channel",
    "Plan",
    "Lesson",
    # Pages
    "AbstractPage",
    "ImagePageContent",
    "VideoPageContent",
    "DocumentPageContent",
    "QuestionPageLink",
    "AbstractQuestion",
    "MultichoiceQuestion",
    # Attempts
    "LessonAttempt",
    "PageAttempt",
    "QuestionAttempt",
    "QuestionPageAttempt",
]
