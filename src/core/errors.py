"""
Error taxonomy shared by the repositories and the attempt engine.

Every error carries the operation that raised it (``op``) and a stable
``code`` the transport layer maps to a status. Storage-engine detail never
goes into the message; it stays on the chained ``__cause__`` for logs.
"""

from __future__ import annotations


class LearningPlatformError(Exception):
    """Base class for all errors raised by the core."""

    code = "internal"
    internal = True

    def __init__(self, op: str, message: str):
        super().__init__(f"{op}: {message}")
        self.op = op
        self.message = message


class InvalidInputError(LearningPlatformError):
    """Missing or malformed field, failed validation, or constraint violation."""

    code = "invalid_input"
    internal = False


class NotFoundError(LearningPlatformError):
    """Envelope, variant, lesson or attempt does not exist."""

    code = "not_found"
    internal = False


class UnsupportedContentTypeError(LearningPlatformError):
    """Content-type discriminator outside the known set."""

    code = "unsupported_content_type"
    internal = False


class TransactionFailureError(LearningPlatformError):
    """A unit of work could not begin, commit or roll back."""

    code = "transaction_failure"


class ScanFailureError(LearningPlatformError):
    """A result row could not be decoded into the expected shape."""

    code = "scan_failure"


class StorageError(LearningPlatformError):
    """Any other storage fault."""

    code = "storage_error"


class PageDiscoveryFailedError(LearningPlatformError):
    """The question pages of a lesson could not be listed."""

    code = "page_discovery_failed"


class AttemptCancelledError(LearningPlatformError):
    """The caller cancelled attempt creation before it committed."""

    code = "cancelled"
    internal = False
