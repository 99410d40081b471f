"""Database connection and session management using SQLModel."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import SQLModel, create_engine, Session

from .config import DATA_DIR
from .errors import StorageError
from .logging_config import get_logger

logger = get_logger(__name__)

DB_PATH = DATA_DIR / "catalog.db"
SQLITE_URL = f"sqlite:///{DB_PATH}"

# Seconds a statement may wait on a locked database before failing
QUERY_TIMEOUT_SECONDS = 3


def make_engine(url: str = SQLITE_URL) -> Engine:
    # check_same_thread=False is needed for SQLite when sessions cross threads (FastAPI)
    return create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": QUERY_TIMEOUT_SECONDS},
    )


engine = make_engine()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


def get_session() -> Generator[Session, None, None]:
    """Dependency for FastAPI or context manager for scripts.

    expire_on_commit=False keeps returned rows readable after the store commits.
    """
    with Session(engine, expire_on_commit=False) as session:
        yield session


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for CLI commands and scripts."""
    with Session(engine, expire_on_commit=False) as session:
        yield session


def init_db() -> None:
    """Create database tables."""
    # Import models to ensure they are registered with SQLModel.metadata
    from . import models  # noqa: F401

    # Enable WAL mode for better concurrency
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA journal_mode=WAL;")

    SQLModel.metadata.create_all(engine)


def reset_database() -> None:
    """Delete the database file and recreate it."""
    engine.dispose()
    if DB_PATH.exists():
        DB_PATH.unlink()
    init_db()


def get_engine():
    """Return the global engine instance."""
    return engine


@contextmanager
def storage_errors(session: Session, operation: str) -> Iterator[None]:
    """Roll back on any failure and re-raise SQLAlchemy errors as StorageError.

    Callers translate expected constraint violations (duplicate email) inside
    the block; those domain errors pass through after the rollback.
    """
    try:
        yield
    except OperationalError as exc:
        session.rollback()
        logger.error(f"{operation}: database unavailable or timed out: {exc}")
        raise StorageError(f"{operation} failed: database unavailable or timed out", operation) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"{operation}: {exc}")
        raise StorageError(f"{operation} failed", operation) from exc
    except Exception:
        session.rollback()
        raise
