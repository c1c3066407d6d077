"""
Unit tests for storage error translation and the unit-of-work scope.

Uses MagicMock sessions, so no database is touched.
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)

from src.core.errors import (
    InvalidInputError,
    NotFoundError,
    StorageError,
    TransactionFailureError,
)
from src.db.database import session_scope, unit_of_work
from src.db.utils import raise_translated, translate_error


class _PgUniqueViolation(Exception):
    pgcode = "23505"


def _integrity_error():
    return IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed"))


def _operational_error():
    return OperationalError("SELECT 1", {}, Exception("server closed the connection"))


class TestTranslateError:
    """Tests for translate_error."""

    def test_integrity_error_is_invalid_input(self):
        error = translate_error("pages.create", _integrity_error())

        assert isinstance(error, InvalidInputError)
        assert error.op == "pages.create"
        assert "UNIQUE" not in str(error)

    def test_constraint_sqlstate_is_invalid_input(self):
        exc = DBAPIError("INSERT ...", {}, _PgUniqueViolation())

        assert isinstance(translate_error("op", exc), InvalidInputError)

    def test_connection_failure_is_transaction_failure(self):
        assert isinstance(translate_error("op", _operational_error()), TransactionFailureError)

    def test_other_sqlalchemy_error_is_storage_error(self):
        error = translate_error("op", SQLAlchemyError("boom"))

        assert isinstance(error, StorageError)
        assert error.internal

    def test_core_errors_pass_through(self):
        original = NotFoundError("questions.get_by_id", "question page 3 not found")

        assert translate_error("pages.get_by_id", original) is original


class TestRaiseTranslated:
    """Tests for raise_translated."""

    def test_chains_original_exception(self):
        original = _integrity_error()

        with pytest.raises(InvalidInputError) as exc_info:
            try:
                raise original
            except IntegrityError as exc:
                raise_translated("attempts.create_lesson_attempt", exc)

        assert exc_info.value.__cause__ is original

    def test_reraises_core_error_unchanged(self):
        original = NotFoundError("op", "missing")

        with pytest.raises(NotFoundError) as exc_info:
            try:
                raise original
            except NotFoundError as exc:
                raise_translated("outer.op", exc)

        assert exc_info.value is original


class TestSessionScope:
    """Tests for session_scope commit/rollback behaviour."""

    @pytest.fixture
    def session(self):
        return MagicMock()

    @pytest.fixture
    def factory(self, session):
        return MagicMock(return_value=session)

    def test_commits_on_success(self, factory, session):
        with session_scope(factory) as scoped:
            assert scoped is session

        session.commit.assert_called_once()
        session.rollback.assert_not_called()
        session.close.assert_called_once()

    def test_rolls_back_on_error(self, factory, session):
        with pytest.raises(ValueError):
            with session_scope(factory):
                raise ValueError("boom")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()

    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt, SystemExit])
    def test_rolls_back_and_closes_on_interrupt(self, factory, session, interrupt):
        with pytest.raises(interrupt):
            with session_scope(factory):
                raise interrupt()

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()

    def test_closes_when_rollback_fails(self, factory, session):
        session.rollback.side_effect = _operational_error()

        with pytest.raises(TransactionFailureError, match="could not roll back"):
            with session_scope(factory):
                raise ValueError("boom")

        session.close.assert_called_once()

    def test_begin_failure(self, factory, session):
        session.begin.side_effect = _operational_error()

        with pytest.raises(TransactionFailureError):
            with session_scope(factory, op="test.begin"):
                pytest.fail("body must not run")

        session.close.assert_called_once()

    def test_commit_failure(self, factory, session):
        session.commit.side_effect = _operational_error()

        with pytest.raises(TransactionFailureError, match="could not commit"):
            with session_scope(factory):
                pass

        session.rollback.assert_called_once()

    def test_commit_constraint_violation_left_to_caller(self, factory, session):
        session.commit.side_effect = _integrity_error()

        with pytest.raises(IntegrityError):
            with session_scope(factory):
                pass

        session.rollback.assert_called_once()


class TestUnitOfWork:
    """Tests for unit_of_work joining a caller's session."""

    def test_joins_given_session(self):
        factory = MagicMock()
        outer = MagicMock()

        with unit_of_work(factory, outer) as scoped:
            assert scoped is outer

        factory.assert_not_called()
        outer.commit.assert_not_called()

    def test_opens_own_scope(self):
        session = MagicMock()
        factory = MagicMock(return_value=session)

        with unit_of_work(factory) as scoped:
            assert scoped is session

        session.commit.assert_called_once()
