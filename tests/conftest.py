"""Shared fixtures: a throwaway SQLite database per test."""

import pytest
from sqlmodel import Session, create_engine

from catalog.database import init_db


@pytest.fixture
def test_db(tmp_path, monkeypatch):
    """Create a test database."""
    db_file = tmp_path / "test.db"
    monkeypatch.setattr("catalog.database.DB_PATH", db_file, raising=True)

    engine = create_engine(f"sqlite:///{db_file}", connect_args={"check_same_thread": False})
    monkeypatch.setattr("catalog.database.engine", engine, raising=True)

    init_db()
    return engine


@pytest.fixture
def session(test_db):
    with Session(test_db, expire_on_commit=False) as session:
        yield session
