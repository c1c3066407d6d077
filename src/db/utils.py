"""
Database Utility Functions.
Maps SQLAlchemy failures onto the core error taxonomy.
"""
from __future__ import annotations

from typing import NoReturn

from loguru import logger
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

from src.core.errors import (
    InvalidInputError,
    LearningPlatformError,
    StorageError,
    TransactionFailureError,
)

# PostgreSQL SQLSTATE classes surfaced through psycopg2 as exc.orig.pgcode
_PG_CONSTRAINT_CLASS = "23"


def translate_error(op: str, exc: BaseException) -> LearningPlatformError:
    """
    Convert a storage exception into the error a caller should see.

    Already-translated errors pass through unchanged so nested repository
    calls keep the innermost, most specific classification.
    """
    if isinstance(exc, LearningPlatformError):
        return exc
    if isinstance(exc, IntegrityError) or _pgcode(exc).startswith(_PG_CONSTRAINT_CLASS):
        return InvalidInputError(op, "constraint violation")
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)):
        return TransactionFailureError(op, "database unavailable")
    if isinstance(exc, SQLAlchemyError):
        return StorageError(op, "query failed")
    return StorageError(op, "unexpected failure")


def _pgcode(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or ""


def raise_translated(op: str, exc: BaseException) -> NoReturn:
    """
    Log and raise the translated form of ``exc``.

    Caller errors are logged at WARNING, infrastructure faults at ERROR with
    the original exception. Must be called from inside an ``except`` block.
    """
    error = translate_error(op, exc)
    log = logger.bind(op=op, code=error.code)
    if error.internal:
        log.error(f"{error.message} ({exc!r})")
    else:
        log.warning(error.message)
    if error is exc:
        raise error
    raise error from exc
