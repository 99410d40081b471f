"""Optimistic concurrency: compare-and-increment writes against a version column."""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from sqlalchemy import update
from sqlmodel import Session, SQLModel


def compare_and_increment(
    session: Session,
    model: Type[SQLModel],
    record_id: int,
    expected_version: int,
    values: Dict[str, Any],
) -> Optional[int]:
    """Write values only if the row still carries expected_version.

    A single conditional UPDATE, so two writers holding the same version can
    never both succeed. Returns the new version, or None when no row matched
    (the row is gone or another writer already advanced it). Does not commit.
    """
    statement = (
        update(model)
        .where(model.id == record_id, model.version == expected_version)
        .values(**values, version=model.version + 1)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(statement)
    if result.rowcount != 1:
        return None
    return expected_version + 1
