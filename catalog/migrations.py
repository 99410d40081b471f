"""Alembic migration helpers for the book catalog.

The CLI (`migrate`, `serve`) goes through these functions; nothing else
imports alembic.
"""

from __future__ import annotations

import shutil
from typing import Optional, Tuple

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from . import database
from .config import PROJECT_ROOT
from .logging_config import get_logger

logger = get_logger(__name__)


def _alembic_cfg() -> AlembicConfig:
    """AlembicConfig for alembic.ini with an absolute script_location."""
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    return cfg


def _backup_db() -> None:
    """Copy catalog.db to catalog.db.bak, replacing any older backup."""
    if database.DB_PATH.exists():
        backup = database.DB_PATH.with_suffix(".db.bak")
        shutil.copy2(database.DB_PATH, backup)
        logger.info(f"Database backed up to {backup}")


def _current_revision() -> Optional[str]:
    with database.get_engine().connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def _is_versioned() -> bool:
    return inspect(database.get_engine()).has_table("alembic_version")


def head_revision() -> str:
    return ScriptDirectory.from_config(_alembic_cfg()).get_current_head() or "unknown"


def run_migrations(backup: bool = True) -> None:
    """Upgrade the database to head, optionally backing it up first."""
    if backup:
        _backup_db()
    alembic_command.upgrade(_alembic_cfg(), "head")


def stamp_if_needed() -> None:
    """Mark a database built by create_all() as being at head.

    Such a database has tables but no alembic_version row; stamping it keeps
    the next upgrade from trying to create the tables again.
    """
    if not database.DB_PATH.exists() or _is_versioned():
        return
    logger.info("Stamping unversioned database at head")
    alembic_command.stamp(_alembic_cfg(), "head")


def get_status() -> Tuple[Optional[str], str]:
    """Return (current_revision, head_revision); current is None when never stamped."""
    if not _is_versioned():
        return None, head_revision()
    return _current_revision(), head_revision()
