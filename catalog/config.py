"""Config management for the book catalog.

Reads `config.ini` from DATA_DIR (the project root unless overridden).
When running as PyInstaller onefile, PROJECT_ROOT is the directory containing the executable.
"""

from __future__ import annotations

import configparser
import dataclasses
import os
import pathlib
import sys
from typing import Optional

from .logging_config import get_logger

logger = get_logger(__name__)

ENVIRONMENTS = ("development", "staging", "production")


def _get_project_root() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        return pathlib.Path(sys.executable).resolve().parent
    return pathlib.Path(__file__).resolve().parents[1]


PROJECT_ROOT = _get_project_root()

# DATA_DIR holds all persistent state (config.ini, catalog.db, catalog.log).
# Set via env var for Docker; defaults to PROJECT_ROOT for standalone use.
DATA_DIR = pathlib.Path(os.environ.get("DATA_DIR", str(PROJECT_ROOT)))
DEFAULT_CONFIG_PATH = DATA_DIR / "config.ini"


@dataclasses.dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 4000
    env: str = "development"


@dataclasses.dataclass
class AuthConfig:
    """Authentication token lifetime and password hashing work factor."""

    token_ttl_hours: int = 24
    bcrypt_cost: int = 12

    @property
    def token_ttl_seconds(self) -> int:
        return self.token_ttl_hours * 3600


@dataclasses.dataclass
class CatalogConfig:
    server: ServerConfig = dataclasses.field(default_factory=ServerConfig)
    auth: AuthConfig = dataclasses.field(default_factory=AuthConfig)

    @property
    def server_host(self) -> str:
        return self.server.host

    @property
    def server_port(self) -> int:
        return self.server.port

    @property
    def database_path(self) -> pathlib.Path:
        return DATA_DIR / "catalog.db"


def load_config(config_path: Optional[pathlib.Path] = None) -> CatalogConfig:
    """Load configuration from config.ini.

    Defaults to `config.ini` in DATA_DIR.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    parser = configparser.ConfigParser()
    parser.read(path)

    env = parser.get("server", "env", fallback="development").strip().lower()
    if env not in ENVIRONMENTS:
        logger.warning(f"Unknown environment '{env}' in {path}, using development")
        env = "development"

    server = ServerConfig(
        host=parser.get("server", "host", fallback="0.0.0.0"),
        port=parser.getint("server", "port", fallback=4000),
        env=env,
    )

    auth = AuthConfig(
        token_ttl_hours=parser.getint("auth", "token_ttl_hours", fallback=24),
        bcrypt_cost=parser.getint("auth", "bcrypt_cost", fallback=12),
    )

    return CatalogConfig(server=server, auth=auth)


_cached_config: Optional[CatalogConfig] = None


def get_config() -> CatalogConfig:
    """Return the cached config singleton. Loads from disk on first call."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def get_config_or_default() -> CatalogConfig:
    """Like get_config(), but fall back to built-in defaults when config.ini is missing."""
    try:
        return get_config()
    except FileNotFoundError:
        return CatalogConfig()


def reset_config_cache() -> None:
    """Clear the cached config (useful for tests)."""
    global _cached_config
    _cached_config = None
