import pytest

from catalog.books import BOOK_SORT_SAFELIST, BookCriteria, BookStore
from catalog.errors import EditConflictError, InvalidSortError, NotFoundError
from catalog.models import Book
from catalog.pagination import Filters


def _book(**overrides) -> Book:
    values = dict(
        isbn="9780141439518",
        title="Pride and Prejudice",
        author="Jane Austen",
        genres=["Classic", "Romance"],
        pages=432,
        language="English",
        publisher="Penguin",
        year=1813,
    )
    values.update(overrides)
    return Book(**values)


def _filters(**kwargs) -> Filters:
    kwargs.setdefault("sort_safelist", BOOK_SORT_SAFELIST)
    return Filters(**kwargs)


@pytest.fixture
def store(session):
    return BookStore(session)


@pytest.fixture
def shelf(store):
    """Three books with distinct titles, authors, genres and years."""
    return [
        store.insert(_book()),
        store.insert(
            _book(
                isbn="9780451524935",
                title="Nineteen Eighty-Four",
                author="George Orwell",
                genres=["Dystopian", "Classic"],
                pages=328,
                year=1949,
            )
        ),
        store.insert(
            _book(
                isbn="9780060850524",
                title="Brave New World",
                author="Aldous Huxley",
                genres=["Dystopian"],
                pages=288,
                year=1932,
            )
        ),
    ]


def test_insert_assigns_id_and_version(store):
    draft = _book()
    book = store.insert(draft)
    assert book.id is not None
    assert book.version == 1
    assert draft.id is None


def test_get_returns_inserted_fields(store):
    book = store.insert(_book())
    fetched = store.get(book.id)
    assert fetched.title == "Pride and Prejudice"
    assert fetched.genres == ["Classic", "Romance"]
    assert fetched.version == 1


@pytest.mark.parametrize("book_id", [0, -1, 9999, 2**63])
def test_get_missing_raises_not_found(store, book_id):
    with pytest.raises(NotFoundError):
        store.get(book_id)


def test_update_increments_version_and_persists(store):
    book = store.insert(_book())
    book.pages = 480
    book.genres = ["Classic"]

    assert store.update(book) == 2
    assert book.version == 2

    fetched = store.get(book.id)
    assert fetched.pages == 480
    assert fetched.genres == ["Classic"]
    assert fetched.version == 2


def test_concurrent_updates_from_same_version_only_one_lands(store):
    book = store.insert(_book())
    first = store.get(book.id)
    second = store.get(book.id)

    first.title = "First writer"
    store.update(first)

    second.title = "Second writer"
    with pytest.raises(EditConflictError):
        store.update(second)

    fetched = store.get(book.id)
    assert fetched.title == "First writer"
    assert fetched.version == 2


def test_update_of_deleted_book_reports_edit_conflict(store):
    # The conditional update cannot tell a missing row from a stale version
    book = store.insert(_book())
    store.delete(book.id)
    with pytest.raises(EditConflictError):
        store.update(book)


def test_delete_then_get_is_not_found(store):
    book = store.insert(_book())
    store.delete(book.id)
    with pytest.raises(NotFoundError):
        store.get(book.id)
    with pytest.raises(NotFoundError):
        store.delete(book.id)


def test_ids_are_not_reused_after_delete(store):
    first = store.insert(_book())
    store.delete(first.id)
    second = store.insert(_book())
    assert second.id > first.id


def test_list_without_criteria_returns_everything_by_id(store, shelf):
    books, metadata = store.list_page(BookCriteria(), _filters())
    assert [b.id for b in books] == [b.id for b in shelf]
    assert metadata.total_records == 3
    assert metadata.last_cursor == 1


def test_list_title_search_is_case_insensitive_word_match(store, shelf):
    books, _ = store.list_page(BookCriteria(title="new BRAVE"), _filters())
    assert [b.title for b in books] == ["Brave New World"]


def test_list_author_search(store, shelf):
    books, _ = store.list_page(BookCriteria(author="orwell"), _filters())
    assert [b.author for b in books] == ["George Orwell"]


def test_list_isbn_is_exact_match(store, shelf):
    books, _ = store.list_page(BookCriteria(isbn="9780060850524"), _filters())
    assert len(books) == 1
    books, _ = store.list_page(BookCriteria(isbn="978006085052"), _filters())
    assert books == []


def test_list_genres_must_all_be_present(store, shelf):
    books, _ = store.list_page(BookCriteria(genres=("Dystopian",)), _filters())
    assert {b.title for b in books} == {"Nineteen Eighty-Four", "Brave New World"}

    books, _ = store.list_page(BookCriteria(genres=("Dystopian", "Classic")), _filters())
    assert [b.title for b in books] == ["Nineteen Eighty-Four"]


def test_list_sort_descending_year(store, shelf):
    books, _ = store.list_page(BookCriteria(), _filters(sort="-year"))
    assert [b.year for b in books] == [1949, 1932, 1813]


def test_list_ties_break_on_ascending_id(store):
    a = store.insert(_book(title="Same"))
    b = store.insert(_book(title="Same"))
    books, _ = store.list_page(BookCriteria(), _filters(sort="-title"))
    assert [x.id for x in books] == [a.id, b.id]


def test_list_paging_metadata(store, shelf):
    books, metadata = store.list_page(BookCriteria(), _filters(cursor=2, cursor_size=2))
    assert [b.id for b in books] == [shelf[2].id]
    assert metadata.as_dict() == {
        "current_cursor": 2,
        "cursor_size": 2,
        "first_cursor": 1,
        "last_cursor": 2,
        "total_records": 3,
    }


def test_list_with_no_match_has_empty_metadata(store, shelf):
    books, metadata = store.list_page(BookCriteria(title="nonexistent"), _filters())
    assert books == []
    assert metadata.is_empty


def test_list_rejects_unsafe_sort(store, shelf):
    with pytest.raises(InvalidSortError):
        store.list_page(BookCriteria(), _filters(sort="pages"))


def test_count(store, shelf):
    assert store.count() == 3


def test_delete_id_beyond_integer_range_is_not_found(store):
    with pytest.raises(NotFoundError):
        store.delete(2**63)
