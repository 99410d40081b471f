"""Book routes. Every route requires an activated user."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
from sqlmodel import Session

from catalog.books import BOOK_SORT_SAFELIST, MAX_BOOK_ID, BookCriteria, BookStore
from catalog.database import get_session
from catalog.errors import EditConflictError, NotFoundError
from catalog.logging_config import get_logger
from catalog.models import Book, BookRead
from catalog.pagination import DEFAULT_CURSOR_SIZE, Filters, validate_filters
from catalog.validator import validate_book

from ..dependencies import require_activated_user
from ..schemas import BookCreate, BookPatch

logger = get_logger(__name__)

router = APIRouter(tags=["books"], dependencies=[Depends(require_activated_user)])


def _book_json(book: Book) -> dict:
    return BookRead.model_validate(book).model_dump(mode="json")


def _parse_id(raw: str) -> int:
    """Path ids that are not positive integers are reported as missing records."""
    try:
        book_id = int(raw)
    except ValueError:
        raise NotFoundError()
    if not 1 <= book_id <= MAX_BOOK_ID:
        raise NotFoundError()
    return book_id


def _split_csv(value: str) -> tuple:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@router.get("")
def list_books(
    isbn: str = Query(""),
    title: str = Query(""),
    author: str = Query(""),
    genres: str = Query(""),
    cursor: int = Query(1),
    cursor_size: int = Query(DEFAULT_CURSOR_SIZE),
    sort: str = Query("id"),
    session: Session = Depends(get_session),
) -> dict:
    filters = Filters(cursor=cursor, cursor_size=cursor_size, sort=sort, sort_safelist=BOOK_SORT_SAFELIST)
    validate_filters(filters)

    criteria = BookCriteria(isbn=isbn, title=title, author=author, genres=_split_csv(genres))
    books, metadata = BookStore(session).list_page(criteria, filters)
    return {"books": [_book_json(b) for b in books], "metadata": metadata.as_dict()}


@router.post("", status_code=201)
def create_book(body: BookCreate, session: Session = Depends(get_session)) -> JSONResponse:
    validate_book(body)
    book = BookStore(session).insert(Book(**body.model_dump()))
    return JSONResponse(
        status_code=201,
        content={"book": _book_json(book)},
        headers={"Location": f"/v1/books/{book.id}"},
    )


@router.get("/{book_id}")
def show_book(book_id: str, session: Session = Depends(get_session)) -> dict:
    book = BookStore(session).get(_parse_id(book_id))
    return {"book": _book_json(book)}


@router.patch("/{book_id}")
def update_book(
    book_id: str,
    body: BookPatch,
    x_expected_version: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> dict:
    store = BookStore(session)
    book = store.get(_parse_id(book_id))

    if x_expected_version is not None and x_expected_version.strip() != str(book.version):
        logger.info(f"Book {book.id} is at version {book.version}, client expected {x_expected_version}")
        raise EditConflictError()

    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(book, field, value)

    validate_book(book)
    store.update(book)
    return {"book": _book_json(book)}


@router.delete("/{book_id}")
def delete_book(book_id: str, session: Session = Depends(get_session)) -> dict:
    BookStore(session).delete(_parse_id(book_id))
    return {"message": "book successfully deleted"}
