"""SQLModel database models for the book catalog."""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookBase(SQLModel):
    isbn: str = Field(index=True)
    title: str
    author: str
    genres: List[str] = Field(default_factory=list, sa_type=JSON)
    pages: int
    language: str
    publisher: str
    year: int


class Book(BookBase, table=True):
    __tablename__ = "books"
    # AUTOINCREMENT: ids are never reused after a delete
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=1)


class BookRead(BookBase):
    """External representation of a book (created_at stays internal)."""

    id: int
    version: int


class UserBase(SQLModel):
    name: str
    email: str = Field(unique=True, index=True)
    activated: bool = False


class User(UserBase, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    password_hash: bytes
    version: int = Field(default=1)


class UserRead(UserBase):
    """External representation of a user; password_hash is never exposed."""

    id: int
    created_at: datetime
    version: int


class Token(SQLModel, table=True):
    """Authentication token row. Only the SHA-256 hash of the plaintext is stored."""

    __tablename__ = "tokens"

    hash: bytes = Field(primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    expiry: datetime = Field(index=True)
