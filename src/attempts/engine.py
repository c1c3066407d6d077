"""
Attempt Engine - starts a lesson attempt for a learner.

Starting an attempt is two steps:
1. Start: validate the descriptor and insert the lesson attempt
2. Populate: discover the lesson's question pages and insert one chain per page

Both steps run inside a single unit of work. If discovery or any chain
insert fails, or the caller cancels, the lesson attempt and every chain
written so far are rolled back together. No step is retried here.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.attempts.models import AttemptDescriptor, AttemptSummary
from src.attempts.repository import AttemptRepository
from src.core.errors import (
    AttemptCancelledError,
    LearningPlatformError,
    PageDiscoveryFailedError,
)
from src.core.validation import coerce_payload
from src.db.database import SessionFactory, session_scope
from src.db.utils import raise_translated
from src.questions.repository import QuestionAuthoringRepository


def _check_cancelled(op: str, cancel: threading.Event | None, stage: str) -> None:
    if cancel is not None and cancel.is_set():
        raise AttemptCancelledError(op, f"attempt creation cancelled {stage}")


class AttemptEngine:
    """Creates a lesson attempt and its attempt chains as one unit."""

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        attempts: AttemptRepository | None = None,
        questions: QuestionAuthoringRepository | None = None,
    ):
        self._session_factory = session_factory
        self._attempts = attempts or AttemptRepository(session_factory)
        self._questions = questions or QuestionAuthoringRepository(session_factory)

    def start_attempt(
        self,
        descriptor: AttemptDescriptor | Mapping[str, Any],
        cancel: threading.Event | None = None,
    ) -> AttemptSummary:
        """
        Start a lesson attempt and create one chain per question page.

        Args:
            descriptor: Lesson, plan, channel and user of the attempt
            cancel: Optional signal, checked before the unit and between chains

        Returns:
            AttemptSummary with the attempt id and the chains created

        Raises:
            InvalidInputError: Bad descriptor or unknown lesson/plan/channel
            PageDiscoveryFailedError: Question pages could not be listed
            AttemptCancelledError: ``cancel`` was set before commit
        """
        op = "attempts.start_attempt"
        descriptor = coerce_payload(op, AttemptDescriptor, descriptor)
        log = logger.bind(op=op, lesson_id=descriptor.lesson_id, user_id=descriptor.user_id)

        try:
            _check_cancelled(op, cancel, "before start")
            with session_scope(self._session_factory, op=op) as session:
                attempt_id = self._attempts.create_lesson_attempt(
                    descriptor.lesson_id,
                    descriptor.plan_id,
                    descriptor.channel_id,
                    descriptor.user_id,
                    session=session,
                )

                try:
                    pages = self._questions.list_question_pages_for_lesson(
                        descriptor.lesson_id, session=session
                    )
                except LearningPlatformError as exc:
                    raise PageDiscoveryFailedError(
                        op, f"could not list question pages of lesson {descriptor.lesson_id}"
                    ) from exc

                chains = []
                for page in pages:
                    _check_cancelled(op, cancel, f"after {len(chains)} of {len(pages)} chain(s)")
                    chains.append(
                        self._attempts.create_attempt_chain(
                            attempt_id,
                            page.content_type,
                            page.question_type,
                            page.page_id,
                            session=session,
                        )
                    )
                _check_cancelled(op, cancel, "before commit")
        except (LearningPlatformError, SQLAlchemyError) as exc:
            raise_translated(op, exc)

        summary = AttemptSummary(lesson_attempt_id=attempt_id, chains=chains)
        log.info(f"Started lesson attempt {attempt_id} with {summary.chain_count} chain(s)")
        return summary
