"""Request bodies accepted by the JSON API.

Shape only; business rules live in catalog.validator so that a PATCH can be
checked after it is merged onto the stored book.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class _Body(BaseModel):
    model_config = {"extra": "forbid"}


class BookCreate(_Body):
    isbn: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    genres: Optional[List[str]] = None
    pages: Optional[int] = None
    language: Optional[str] = None
    publisher: Optional[str] = None
    year: Optional[int] = None


class BookPatch(BookCreate):
    """Every field optional; absent means unchanged, genres replaces the whole list."""


class UserRegistration(_Body):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class PasswordChange(_Body):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class Credentials(_Body):
    email: Optional[str] = None
    password: Optional[str] = None
