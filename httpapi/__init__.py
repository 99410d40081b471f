"""JSON HTTP API over the catalog stores."""

from .app import app, run_server

__all__ = ["app", "run_server"]
