from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from loguru import logger
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings
from src.core.errors import TransactionFailureError
from src.db.models.base import Base

SessionFactory = sessionmaker[Session]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores FOREIGN KEY clauses (and ON DELETE CASCADE) unless asked."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def build_engine(url: str | None = None) -> Engine:
    """
    Create an engine for the given URL (defaults to settings.database_url).

    PostgreSQL gets a bounded QueuePool sized from settings. SQLite gets
    foreign-key enforcement; in-memory SQLite shares one connection so every
    session sees the same database.
    """
    settings = get_settings()
    url = url or settings.database_url

    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.db_echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
    )


def build_session_factory(engine: Engine) -> SessionFactory:
    """Session factory bound to an engine."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Get the process-wide database engine."""
    return build_engine()


@lru_cache(maxsize=1)
def get_session_factory() -> SessionFactory:
    """Get the process-wide session factory."""
    return build_session_factory(get_engine())


def init_db(engine: Engine | None = None) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database tables initialized")


@contextmanager
def session_scope(
    session_factory: SessionFactory | None = None,
    op: str = "db.session_scope",
) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Commits when the block exits normally and rolls back on any exception,
    so a unit is either fully persisted or not at all. Failures to begin or
    commit surface as TransactionFailureError.
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        session.begin()
    except SQLAlchemyError as exc:
        session.close()
        raise TransactionFailureError(op, "could not begin transaction") from exc

    try:
        try:
            yield session
        except BaseException:  # Intentionally broad - interrupts must roll back too
            _rollback(session, op)
            raise

        try:
            session.commit()
        except IntegrityError:
            # Deferred constraints fire at commit; callers classify these.
            _rollback(session, op)
            raise
        except SQLAlchemyError as exc:
            _rollback(session, op)
            raise TransactionFailureError(op, "could not commit transaction") from exc
    finally:
        session.close()


def _rollback(session: Session, op: str) -> None:
    try:
        session.rollback()
    except SQLAlchemyError as exc:
        logger.bind(op=op).error(f"rollback failed: {exc}")
        raise TransactionFailureError(op, "could not roll back transaction") from exc


@contextmanager
def unit_of_work(
    session_factory: SessionFactory | None = None,
    session: Session | None = None,
    op: str = "db.unit_of_work",
) -> Generator[Session, None, None]:
    """
    Join the caller's unit when a session is given, otherwise open a new one.

    A joined unit is committed or rolled back by whoever opened it, which is
    how several repository calls become one all-or-nothing write.
    """
    if session is not None:
        yield session
        return
    with session_scope(session_factory, op=op) as scoped:
        yield scoped
