"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Repository and engine tests run against in-memory SQLite (foreign keys on),
one fresh database per test.
"""
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.attempts import AttemptEngine, AttemptRepository  # noqa: E402
from src.db.database import build_engine, build_session_factory, init_db, session_scope  # noqa: E402
from src.db.models import Channel, Lesson, Plan  # noqa: E402
from src.pages.repository import PageRepository  # noqa: E402
from src.questions.repository import QuestionAuthoringRepository  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables created."""
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def hierarchy(session_factory):
    """One channel -> plan -> lesson, plus an empty second lesson."""
    with session_scope(session_factory) as session:
        channel = Channel(name="Networking", created_by="author-1")
        session.add(channel)
        session.flush()
        plan = Plan(channel_id=channel.id, name="CCNA basics", created_by="author-1")
        session.add(plan)
        session.flush()
        lesson = Lesson(plan_id=plan.id, name="OSI model", created_by="author-1")
        empty_lesson = Lesson(plan_id=plan.id, name="Empty lesson", created_by="author-1")
        session.add_all([lesson, empty_lesson])
        session.flush()
        ids = SimpleNamespace(
            channel_id=channel.id,
            plan_id=plan.id,
            lesson_id=lesson.id,
            empty_lesson_id=empty_lesson.id,
        )
    return ids


@pytest.fixture
def count_rows(session_factory):
    """Return a callable counting the rows of an ORM model's table."""

    def _count(model) -> int:
        with session_scope(session_factory) as session:
            return session.scalar(select(func.count()).select_from(model))

    return _count


# ============================================================================
# Repositories
# ============================================================================


@pytest.fixture
def question_repo(session_factory):
    return QuestionAuthoringRepository(session_factory)


@pytest.fixture
def page_repo(session_factory, question_repo):
    return PageRepository(session_factory, questions=question_repo)


@pytest.fixture
def attempt_repo(session_factory):
    return AttemptRepository(session_factory)


@pytest.fixture
def attempt_engine(session_factory, attempt_repo, question_repo):
    return AttemptEngine(session_factory, attempts=attempt_repo, questions=question_repo)


# ============================================================================
# Sample payloads
# ============================================================================


@pytest.fixture
def image_payload(hierarchy):
    """Raw create request for an image page."""
    return {
        "content_type": "image",
        "lesson_id": hierarchy.lesson_id,
        "created_by": "author-1",
        "last_modified_by": "author-1",
        "image_file_url": "https://cdn.example.com/osi.png",
        "image_name": "OSI layers",
    }


@pytest.fixture
def two_option_question(hierarchy):
    """Question with only options A and B, answer A."""
    return {
        "content_type": "question",
        "lesson_id": hierarchy.lesson_id,
        "created_by": "author-1",
        "last_modified_by": "author-1",
        "question": "Is TCP connection-oriented?",
        "option_a": "Yes",
        "option_b": "No",
        "answer": "A",
    }


@pytest.fixture
def five_option_question(hierarchy):
    """Question with options A-E, answer C."""
    return {
        "content_type": "question",
        "lesson_id": hierarchy.lesson_id,
        "created_by": "author-1",
        "last_modified_by": "author-1",
        "question": "Which layer does IP operate at?",
        "option_a": "Physical",
        "option_b": "Data link",
        "option_c": "Network",
        "option_d": "Transport",
        "option_e": "Session",
        "answer": "C",
    }
