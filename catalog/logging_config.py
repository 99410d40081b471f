"""Logging setup: Rich on the console, a rotating plain-text file on disk.

Modules only call get_logger(__name__); handlers are installed once, by the
CLI, through setup_logging().
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOG_FILE_NAME = "catalog.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5
FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Request lines come from RequestLoggingMiddleware instead of uvicorn.access
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")

_configured = False


def _file_handler(log_dir: Path) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    return handler


def _console_handler(level: int) -> RichHandler:
    theme = Theme({
        "logging.level.info": "bold cyan",
        "logging.level.warning": "bold yellow",
    })
    handler = RichHandler(
        console=Console(stderr=True, theme=theme),
        rich_tracebacks=True,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Install the console and file handlers on the root logger. Safe to call twice.

    log_dir defaults to DATA_DIR, next to config.ini and catalog.db.
    """
    global _configured
    if _configured:
        return

    if log_dir is None:
        from .config import DATA_DIR
        log_dir = DATA_DIR

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(_file_handler(log_dir))
    root.addHandler(_console_handler(level))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # alembic.ini logging sections would install their own handlers
    alembic_logger = logging.getLogger("alembic")
    alembic_logger.handlers.clear()
    alembic_logger.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
