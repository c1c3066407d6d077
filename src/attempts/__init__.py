"""
Lesson attempts.

- AttemptRepository: lesson attempts and attempt chains
- AttemptEngine: starts an attempt and fans out one chain per question page
"""

from src.attempts.engine import AttemptEngine
from src.attempts.models import (
    AttemptChain,
    AttemptDescriptor,
    AttemptSummary,
    LessonAttemptRecord,
)
from src.attempts.repository import AttemptRepository

__all__ = [
    "AttemptChain",
    "AttemptDescriptor",
    "AttemptEngine",
    "AttemptRepository",
    "AttemptSummary",
    "LessonAttemptRecord",
]
