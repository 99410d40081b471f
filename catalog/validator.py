"""Input validation rules for books, users and tokens.

Rules are collected into a Validator and raised together as one ValidationError,
so a client sees every problem with its input at once.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Type

from .errors import ValidationError, WeakInputError

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

MAX_TEXT_BYTES = 500
ISBN_LENGTH = 13
MAX_GENRES = 5
MAX_PAGES = 2**31 - 1
MIN_PASSWORD_BYTES = 8
MAX_PASSWORD_BYTES = 72  # bcrypt ignores anything past 72 bytes
TOKEN_PLAINTEXT_LENGTH = 26


class Validator:
    """Collects field errors; the first message recorded for a field wins."""

    def __init__(self) -> None:
        self.errors: Dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self, error_cls: Type[ValidationError] = ValidationError) -> None:
        if self.errors:
            raise error_cls(self.errors)


def permitted_value(value, *permitted) -> bool:
    return value in permitted


def unique(values: Iterable[str]) -> bool:
    values = list(values)
    return len(set(values)) == len(values)


def byte_length(value: Optional[str]) -> int:
    return len(value.encode("utf-8")) if value else 0


def _check_text(v: Validator, value: Optional[str], key: str) -> None:
    v.check(bool(value), key, "must be provided")
    v.check(byte_length(value) <= MAX_TEXT_BYTES, key, f"must not be more than {MAX_TEXT_BYTES} bytes long")


def validate_book(book) -> None:
    """Raise ValidationError unless every book field is present and in range."""
    v = Validator()

    v.check(bool(book.isbn), "isbn", "must be provided")
    v.check(len(book.isbn or "") == ISBN_LENGTH, "isbn", f"must be {ISBN_LENGTH} digit")

    _check_text(v, book.title, "title")
    _check_text(v, book.author, "author")

    v.check(book.genres is not None, "genres", "must be provided")
    genres = book.genres or []
    v.check(len(genres) >= 1, "genres", "must contain at least 1 genre")
    v.check(len(genres) <= MAX_GENRES, "genres", f"must not contain more than {MAX_GENRES} genres")
    v.check(unique(genres), "genres", "must not contain duplicate values")
    v.check(all(g and g.strip() for g in genres), "genres", "must not contain empty values")

    v.check(book.pages is not None and book.pages != 0, "pages", "must be provided")
    v.check(book.pages is None or book.pages > 0, "pages", "must be a positive integer")
    v.check(book.pages is None or book.pages <= MAX_PAGES, "pages", f"must not be more than {MAX_PAGES}")

    _check_text(v, book.language, "language")
    _check_text(v, book.publisher, "publisher")

    v.check(book.year is not None and book.year != 0, "year", "must be provided")
    v.check(book.year is None or book.year > 0, "year", "must be greater than 0")
    v.check(
        book.year is None or book.year <= datetime.now(timezone.utc).year,
        "year",
        "must not be in the future",
    )

    v.raise_if_invalid()


def check_email(v: Validator, email: Optional[str]) -> None:
    v.check(bool(email), "email", "must be provided")
    v.check(bool(EMAIL_RX.match(email or "")), "email", "must be a valid email address")


def check_password_plaintext(v: Validator, password: Optional[str], key: str = "password") -> None:
    v.check(bool(password), key, "must be provided")
    v.check(byte_length(password) >= MIN_PASSWORD_BYTES, key, f"must be at least {MIN_PASSWORD_BYTES} bytes long")
    v.check(byte_length(password) <= MAX_PASSWORD_BYTES, key, f"must not be more than {MAX_PASSWORD_BYTES} bytes long")


def validate_email(email: Optional[str]) -> None:
    v = Validator()
    check_email(v, email)
    v.raise_if_invalid()


def validate_password_plaintext(password: Optional[str], key: str = "password") -> None:
    """Raise WeakInputError when the password is missing or outside 8-72 bytes."""
    v = Validator()
    check_password_plaintext(v, password, key)
    v.raise_if_invalid(WeakInputError)


def validate_user(name: Optional[str], email: Optional[str], password: Optional[str]) -> None:
    """Validate a registration: name, email and plaintext password together."""
    v = Validator()
    v.check(bool(name), "name", "must be provided")
    v.check(byte_length(name) <= MAX_TEXT_BYTES, "name", f"must not be more than {MAX_TEXT_BYTES} bytes long")
    check_email(v, email)
    check_password_plaintext(v, password)
    if set(v.errors) == {"password"}:
        v.raise_if_invalid(WeakInputError)
    v.raise_if_invalid()


def validate_token_plaintext(token: Optional[str]) -> None:
    v = Validator()
    v.check(bool(token), "token", "must be provided")
    v.check(len(token or "") == TOKEN_PLAINTEXT_LENGTH, "token", f"must be {TOKEN_PLAINTEXT_LENGTH} bytes long")
    v.raise_if_invalid()
