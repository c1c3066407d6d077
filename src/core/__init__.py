"""
Core Module - Shared discriminators, pagination and the error taxonomy.

Everything under src/pages/, src/questions/ and src/attempts/ imports these
rather than redefining them.
"""

from src.core.enums import AnswerOption, ContentType, QuestionType
from src.core.errors import (
    AttemptCancelledError,
    InvalidInputError,
    LearningPlatformError,
    NotFoundError,
    PageDiscoveryFailedError,
    ScanFailureError,
    StorageError,
    TransactionFailureError,
    UnsupportedContentTypeError,
)
from src.core.pagination import Pagination

__all__ = [
    # Discriminators
    "AnswerOption",
    "ContentType",
    "QuestionType",
    # Pagination
    "Pagination",
    # Errors
    "LearningPlatformError",
    "InvalidInputError",
    "NotFoundError",
    "UnsupportedContentTypeError",
    "TransactionFailureError",
    "ScanFailureError",
    "StorageError",
    "PageDiscoveryFailedError",
    "AttemptCancelledError",
]
