"""Versioned book store.

Updates use compare-and-increment on the version column: an update only lands
if the caller still holds the current version, otherwise EditConflictError.
The store never retries; re-reading and retrying is the caller's decision.
"""

from __future__ import annotations

import dataclasses
import re
from typing import List, Sequence, Tuple

from sqlalchemy import delete, text
from sqlmodel import Session, col, func, select

from .database import storage_errors
from .errors import EditConflictError, NotFoundError
from .logging_config import get_logger
from .models import Book
from .pagination import Filters, Metadata, calculate_metadata
from .versioning import compare_and_increment

logger = get_logger(__name__)

BOOK_SORT_SAFELIST = ("id", "title", "author", "year", "-id", "-title", "-author", "-year")

# Fields a client may change; id, created_at and version are server-owned
EDITABLE_FIELDS = ("isbn", "title", "author", "genres", "pages", "language", "publisher", "year")

# Largest value an SQLite INTEGER primary key can hold
MAX_BOOK_ID = 2**63 - 1

_WORD_RX = re.compile(r"\w+", re.UNICODE)


@dataclasses.dataclass(frozen=True)
class BookCriteria:
    """Optional list filters. An empty field matches everything."""

    isbn: str = ""
    title: str = ""
    author: str = ""
    genres: Tuple[str, ...] = ()


def _editable_values(book: Book) -> dict:
    values = {name: getattr(book, name) for name in EDITABLE_FIELDS}
    values["genres"] = list(book.genres or [])
    return values


def _words(query: str) -> List[str]:
    return _WORD_RX.findall(query.lower())


def _text_match(column, query: str) -> list:
    """Every word of query must occur in column, case-insensitively."""
    return [func.lower(column).contains(word, autoescape=True) for word in _words(query)]


def _genre_containment(genres: Sequence[str]) -> list:
    """Stored genres must include every requested genre."""
    clauses = []
    for index, genre in enumerate(genres):
        param = f"genre_{index}"
        clauses.append(
            text(
                f"EXISTS (SELECT 1 FROM json_each(books.genres) WHERE json_each.value = :{param})"
            ).bindparams(**{param: genre})
        )
    return clauses


class BookStore:
    def __init__(self, session: Session):
        self.session = session

    def _detach(self, book: Book) -> Book:
        self.session.expunge(book)
        return book

    def insert(self, book: Book) -> Book:
        """Persist a new book; the store assigns id, created_at and version=1."""
        row = Book(**_editable_values(book))
        with storage_errors(self.session, "insert book"):
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        logger.info(f"Inserted book {row.id} ({row.isbn})")
        return self._detach(row)

    def get(self, book_id: int) -> Book:
        if not 1 <= book_id <= MAX_BOOK_ID:
            raise NotFoundError()
        with storage_errors(self.session, "get book"):
            book = self.session.get(Book, book_id)
        if book is None:
            raise NotFoundError()
        return self._detach(book)

    def update(self, book: Book) -> int:
        """Write book if its version is still current; adopt and return the new version.

        A missing row and a stale version both yield EditConflictError: the
        conditional UPDATE cannot tell them apart and no extra read is made.
        """
        with storage_errors(self.session, "update book"):
            new_version = compare_and_increment(
                self.session, Book, book.id, book.version, _editable_values(book)
            )
            if new_version is None:
                self.session.rollback()
                logger.info(f"Edit conflict on book {book.id} at version {book.version}")
                raise EditConflictError()
            self.session.commit()
        book.version = new_version
        return new_version

    def delete(self, book_id: int) -> None:
        if not 1 <= book_id <= MAX_BOOK_ID:
            raise NotFoundError()
        statement = (
            delete(Book)
            .where(col(Book.id) == book_id)
            .execution_options(synchronize_session=False)
        )
        with storage_errors(self.session, "delete book"):
            result = self.session.execute(statement)
            if result.rowcount == 0:
                self.session.rollback()
                raise NotFoundError()
            self.session.commit()
        logger.info(f"Deleted book {book_id}")

    def list_page(self, criteria: BookCriteria, filters: Filters) -> Tuple[List[Book], Metadata]:
        """One page of books plus metadata.

        The total comes from a window count in the same statement, so it always
        describes the same snapshot as the page rows.
        """
        column = Book.__table__.c[filters.sort_column()]
        order = column.desc() if filters.sort_direction() == "DESC" else column.asc()

        conditions = []
        if criteria.isbn:
            conditions.append(col(Book.isbn) == criteria.isbn)
        if criteria.title:
            conditions.extend(_text_match(Book.title, criteria.title))
        if criteria.author:
            conditions.extend(_text_match(Book.author, criteria.author))
        if criteria.genres:
            conditions.extend(_genre_containment(criteria.genres))

        statement = (
            select(func.count().over().label("total_records"), Book)
            .where(*conditions)
            .order_by(order, col(Book.id).asc())
            .limit(filters.limit())
            .offset(filters.offset())
        )

        with storage_errors(self.session, "list books"):
            rows = self.session.exec(statement).all()

        total_records = rows[0][0] if rows else 0
        books = [self._detach(book) for _, book in rows]
        return books, calculate_metadata(total_records, filters.cursor, filters.cursor_size)

    def count(self) -> int:
        with storage_errors(self.session, "count books"):
            return self.session.exec(select(func.count()).select_from(Book)).one()
