"""
Unit tests for AttemptEngine orchestration.

Repositories and the session are mocks: these tests check call order,
session sharing and commit/rollback decisions, not SQL.
"""

import threading
from unittest.mock import MagicMock, call

import pytest
from sqlalchemy.exc import OperationalError

from src.attempts.engine import AttemptEngine
from src.attempts.models import AttemptChain, AttemptDescriptor
from src.attempts.repository import AttemptRepository
from src.core.enums import ContentType, QuestionType
from src.core.errors import (
    AttemptCancelledError,
    InvalidInputError,
    PageDiscoveryFailedError,
    StorageError,
    TransactionFailureError,
)
from src.questions.models import QuestionPageRef
from src.questions.repository import QuestionAuthoringRepository

DESCRIPTOR = {"lesson_id": 3, "plan_id": 2, "channel_id": 1, "user_id": "learner-7"}


def _ref(page_id):
    return QuestionPageRef(
        content_type=ContentType.QUESTION,
        question_type=QuestionType.MULTICHOICE,
        page_id=page_id,
    )


def _chain(n, page_id):
    return AttemptChain(
        page_attempt_id=n,
        question_attempt_id=n,
        question_page_attempt_id=n,
        content_type=ContentType.QUESTION,
        question_type=QuestionType.MULTICHOICE,
        page_id=page_id,
    )


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def session_factory(session):
    return MagicMock(return_value=session)


@pytest.fixture
def attempts():
    repo = MagicMock(spec=AttemptRepository)
    repo.create_lesson_attempt.return_value = 50
    repo.create_attempt_chain.side_effect = lambda attempt_id, ct, qt, page_id, session: _chain(
        page_id * 10, page_id
    )
    return repo


@pytest.fixture
def questions():
    repo = MagicMock(spec=QuestionAuthoringRepository)
    repo.list_question_pages_for_lesson.return_value = [_ref(11), _ref(12)]
    return repo


@pytest.fixture
def engine(session_factory, attempts, questions):
    return AttemptEngine(session_factory, attempts=attempts, questions=questions)


class TestStartAttempt:
    """Tests for the happy path."""

    def test_one_chain_per_question_page(self, engine, attempts, session):
        summary = engine.start_attempt(DESCRIPTOR)

        assert summary.lesson_attempt_id == 50
        assert summary.chain_count == 2
        assert summary.page_ids == [11, 12]
        assert attempts.create_attempt_chain.call_args_list == [
            call(50, ContentType.QUESTION, QuestionType.MULTICHOICE, 11, session=session),
            call(50, ContentType.QUESTION, QuestionType.MULTICHOICE, 12, session=session),
        ]
        session.commit.assert_called_once()

    def test_every_step_shares_one_session(self, engine, attempts, questions, session):
        engine.start_attempt(AttemptDescriptor(**DESCRIPTOR))

        attempts.create_lesson_attempt.assert_called_once_with(3, 2, 1, "learner-7", session=session)
        questions.list_question_pages_for_lesson.assert_called_once_with(3, session=session)

    def test_lesson_without_questions(self, engine, questions, attempts, session):
        questions.list_question_pages_for_lesson.return_value = []

        summary = engine.start_attempt(DESCRIPTOR)

        assert summary.chains == []
        attempts.create_attempt_chain.assert_not_called()
        session.commit.assert_called_once()


class TestStartAttemptFailures:
    """Tests for validation, discovery failure, chain failure and cancellation."""

    @pytest.mark.parametrize("field,value", [
        ("lesson_id", 0),
        ("plan_id", -1),
        ("channel_id", None),
        ("user_id", ""),
    ])
    def test_invalid_descriptor_touches_nothing(self, engine, session_factory, field, value):
        with pytest.raises(InvalidInputError):
            engine.start_attempt({**DESCRIPTOR, field: value})

        session_factory.assert_not_called()

    def test_discovery_failure_rolls_back(self, engine, questions, attempts, session):
        questions.list_question_pages_for_lesson.side_effect = StorageError("q", "query failed")

        with pytest.raises(PageDiscoveryFailedError) as exc_info:
            engine.start_attempt(DESCRIPTOR)

        assert isinstance(exc_info.value.__cause__, StorageError)
        attempts.create_attempt_chain.assert_not_called()
        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_chain_failure_rolls_back_everything(self, engine, attempts, session):
        attempts.create_attempt_chain.side_effect = [
            _chain(1, 11),
            OperationalError("INSERT", {}, Exception("connection reset")),
        ]

        with pytest.raises(TransactionFailureError):
            engine.start_attempt(DESCRIPTOR)

        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_cancelled_before_start(self, engine, session_factory):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(AttemptCancelledError):
            engine.start_attempt(DESCRIPTOR, cancel=cancel)

        session_factory.assert_not_called()

    def test_cancelled_between_chains(self, engine, attempts, session):
        cancel = MagicMock(spec=threading.Event)
        cancel.is_set.side_effect = [False, False, True]

        with pytest.raises(AttemptCancelledError):
            engine.start_attempt(DESCRIPTOR, cancel=cancel)

        assert attempts.create_attempt_chain.call_count == 1
        session.rollback.assert_called_once()
        session.commit.assert_not_called()
