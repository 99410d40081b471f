from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from catalog.errors import ValidationError, WeakInputError
from catalog.validator import (
    validate_book,
    validate_email,
    validate_password_plaintext,
    validate_token_plaintext,
    validate_user,
)


def _book(**overrides):
    values = dict(
        isbn="9780141439518",
        title="Pride and Prejudice",
        author="Jane Austen",
        genres=["Classic"],
        pages=432,
        language="English",
        publisher="Penguin",
        year=1813,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def _errors(book) -> dict:
    with pytest.raises(ValidationError) as exc_info:
        validate_book(book)
    return exc_info.value.errors


def test_valid_book_passes():
    validate_book(_book())


def test_missing_fields_are_all_reported():
    errors = _errors(_book(isbn=None, title="", genres=None, pages=None, year=None))
    assert set(errors) == {"isbn", "title", "genres", "pages", "year"}
    assert errors["title"] == "must be provided"


def test_isbn_must_be_13_characters():
    assert "isbn" in _errors(_book(isbn="12345"))


def test_text_limit_is_counted_in_bytes():
    # "é" is two bytes in UTF-8
    validate_book(_book(title="é" * 250))
    assert "title" in _errors(_book(title="é" * 251))


@pytest.mark.parametrize(
    "genres",
    [[], ["a", "b", "c", "d", "e", "f"], ["Classic", "Classic"], ["Classic", " "]],
)
def test_genre_rules(genres):
    assert "genres" in _errors(_book(genres=genres))


def test_pages_must_be_positive():
    assert "pages" in _errors(_book(pages=-3))


def test_year_must_not_be_in_the_future():
    next_year = datetime.now(timezone.utc).year + 1
    assert _errors(_book(year=next_year))["year"] == "must not be in the future"


def test_email_format():
    validate_email("alice@example.com")
    with pytest.raises(ValidationError):
        validate_email("not-an-email")


@pytest.mark.parametrize("password", [None, "short", "x" * 73])
def test_weak_passwords(password):
    with pytest.raises(WeakInputError):
        validate_password_plaintext(password)


def test_password_limit_is_counted_in_bytes():
    validate_password_plaintext("x" * 72)
    with pytest.raises(WeakInputError):
        validate_password_plaintext("é" * 37)


def test_validate_user_password_only_problem_is_weak_input():
    with pytest.raises(WeakInputError) as exc_info:
        validate_user("Alice", "alice@example.com", "short")
    assert set(exc_info.value.errors) == {"password"}


def test_validate_user_mixed_problems_are_plain_validation_errors():
    with pytest.raises(ValidationError) as exc_info:
        validate_user("", "bad", "short")
    assert not isinstance(exc_info.value, WeakInputError)
    assert set(exc_info.value.errors) == {"name", "email", "password"}


@pytest.mark.parametrize("token", [None, "", "ABC", "A" * 27])
def test_token_plaintext_must_be_26_characters(token):
    with pytest.raises(ValidationError):
        validate_token_plaintext(token)
    validate_token_plaintext("A" * 26)


def test_pages_has_an_upper_bound():
    validate_book(_book(pages=2**31 - 1))
    assert "pages" in _errors(_book(pages=10**20))
