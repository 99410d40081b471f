"""Alembic environment for the book catalog schema (books, users, tokens)."""

from __future__ import annotations

from alembic import context
from sqlmodel import SQLModel

from catalog import database
from catalog import models as _models  # noqa: F401  registers tables on SQLModel.metadata

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Emit the migration SQL (`alembic upgrade head --sql`) without connecting."""
    context.configure(
        url=str(database.get_engine().url),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with database.get_engine().connect() as conn:
        context.configure(
            connection=conn,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite cannot ALTER most constraints in place
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
