"""Book catalog CLI entry point."""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Optional

import typer

from catalog import __version__
from catalog.accounts import UserStore
from catalog.books import BookStore
from catalog.config import DEFAULT_CONFIG_PATH, ENVIRONMENTS, CatalogConfig, load_config
from catalog.credentials import hash_password
from catalog.database import init_db, reset_database, session_scope
from catalog.errors import CatalogError, NotFoundError, ValidationError
from catalog.logging_config import setup_logging
from catalog.migrations import get_status, run_migrations, stamp_if_needed
from catalog.models import User
from catalog.tokens import TokenStore
from catalog.validator import validate_user
from httpapi import run_server


app = typer.Typer(add_completion=False, help="Book catalog API CLI")
logger = logging.getLogger("catalog")


def _ensure_config() -> CatalogConfig:
    try:
        return load_config()
    except FileNotFoundError:
        typer.echo("[ERROR] config.ini not found. Run: bookcatalog init")
        raise typer.Exit(code=1)


def _write_config(config_path: Path, env: str, port: int) -> None:
    parser = configparser.ConfigParser()

    parser["server"] = {
        "host": "0.0.0.0",
        "port": str(port),
        "env": env,
    }
    parser["auth"] = {
        "token_ttl_hours": "24",
        "bcrypt_cost": "12",
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as handle:
        parser.write(handle)


def _migrate_to_head() -> None:
    stamp_if_needed()
    current, head = get_status()
    if current != head:
        logger.info(f"Migrating database {current} -> {head} ...")
        run_migrations(backup=True)
        logger.info("Migration complete.")
    else:
        logger.info(f"Database at {head} (up to date).")


@app.command()
def init(
    env: str = typer.Option("development", "--env", help="development, staging or production"),
    port: int = typer.Option(4000, "--port", help="API server port"),
) -> None:
    """Initialize config.ini with default settings."""
    if env not in ENVIRONMENTS:
        typer.echo(f"[ERROR] --env must be one of: {', '.join(ENVIRONMENTS)}")
        raise typer.Exit(code=1)
    config_path = DEFAULT_CONFIG_PATH
    _write_config(config_path, env, port)
    typer.echo(f"[OK] Config created at {config_path}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Server host"),
    port: Optional[int] = typer.Option(None, "--port", help="Server port"),
) -> None:
    """Start the JSON API server."""
    setup_logging()

    config = _ensure_config()
    logger.info(f"Book catalog {__version__} ({config.server.env})")
    init_db()
    _migrate_to_head()

    try:
        run_server(config, host=host, port=port)
    except KeyboardInterrupt:
        pass


@app.command()
def migrate(
    check: bool = typer.Option(False, "--check", help="Print status and exit (1 if not at head)"),
) -> None:
    """Run pending database migrations (or check status with --check)."""
    setup_logging()
    _ensure_config()
    init_db()

    if check:
        stamp_if_needed()
        current, head = get_status()
        at_head = current == head
        typer.echo(f"[{'OK' if at_head else 'WARN'}] Database revision {current or 'none'}, head {head}")
        raise typer.Exit(code=0 if at_head else 1)

    _migrate_to_head()


@app.command()
def reset(
    confirm: bool = typer.Option(False, "--confirm", help="Confirm destructive reset"),
) -> None:
    """Delete the database and recreate empty tables."""
    if not confirm:
        typer.echo("[ERROR] This will delete every book, user and token. Use --confirm.")
        raise typer.Exit(code=1)

    _ensure_config()
    reset_database()
    stamp_if_needed()
    typer.echo("[INFO] Database reset.")


@app.command()
def stats() -> None:
    """Show catalog statistics."""
    _ensure_config()
    init_db()

    with session_scope() as session:
        books = BookStore(session).count()
        users = UserStore(session).count()
        live_tokens = TokenStore(session).count_live()

    typer.echo("Catalog Statistics:")
    typer.echo(f"  Books: {books}")
    typer.echo(f"  Users: {users}")
    typer.echo(f"  Live tokens: {live_tokens}")


@app.command("create-user")
def create_user(
    name: str = typer.Option(..., "--name", help="Display name"),
    email: str = typer.Option(..., "--email", help="Login email address"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
    activate: bool = typer.Option(False, "--activate", help="Activate the account immediately"),
) -> None:
    """Register a user account from the command line."""
    config = _ensure_config()
    init_db()

    try:
        validate_user(name, email, password)
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password, cost=config.auth.bcrypt_cost),
            activated=activate,
        )
        with session_scope() as session:
            user = UserStore(session).insert(user)
    except ValidationError as exc:
        for field, message in exc.errors.items():
            typer.echo(f"[ERROR] {field}: {message}")
        raise typer.Exit(code=1)

    state = "activated" if user.activated else "not activated"
    typer.echo(f"[OK] Created user {user.id} <{user.email}> ({state})")


@app.command()
def activate(
    email: str = typer.Argument(..., help="Email address of the account"),
) -> None:
    """Activate a user account."""
    _ensure_config()
    init_db()

    try:
        with session_scope() as session:
            store = UserStore(session)
            user = store.get_by_email(email)
            if user.activated:
                typer.echo(f"[INFO] {email} is already activated")
                return
            user.activated = True
            store.update(user)
    except NotFoundError:
        typer.echo(f"[ERROR] No user with email {email}")
        raise typer.Exit(code=1)
    except CatalogError as exc:
        typer.echo(f"[ERROR] {exc.message}")
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Activated {email}")


if __name__ == "__main__":
    app()
