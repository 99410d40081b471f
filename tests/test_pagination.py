import pytest

from catalog.errors import InvalidSortError, ValidationError
from catalog.pagination import Filters, Metadata, calculate_metadata, validate_filters

SAFELIST = ("id", "title", "-id", "-title")


def test_limit_and_offset_follow_cursor():
    filters = Filters(cursor=3, cursor_size=20, sort="id", sort_safelist=SAFELIST)
    assert filters.limit() == 20
    assert filters.offset() == 40


def test_first_cursor_has_zero_offset():
    assert Filters(cursor=1, cursor_size=5).offset() == 0


def test_sort_column_and_direction():
    asc = Filters(sort="title", sort_safelist=SAFELIST)
    desc = Filters(sort="-title", sort_safelist=SAFELIST)
    assert asc.sort_column() == "title"
    assert asc.sort_direction() == "ASC"
    assert desc.sort_column() == "title"
    assert desc.sort_direction() == "DESC"


def test_sort_column_rejects_values_outside_safelist():
    filters = Filters(sort="title; DROP TABLE books", sort_safelist=SAFELIST)
    with pytest.raises(InvalidSortError) as exc_info:
        filters.sort_column()
    assert exc_info.value.sort == "title; DROP TABLE books"


def test_validate_filters_accepts_defaults():
    validate_filters(Filters(sort_safelist=SAFELIST))


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"cursor": 0}, "cursor"),
        ({"cursor": 10_000_001}, "cursor"),
        ({"cursor_size": 0}, "cursor_size"),
        ({"cursor_size": 101}, "cursor_size"),
    ],
)
def test_validate_filters_reports_out_of_range_fields(kwargs, field):
    with pytest.raises(ValidationError) as exc_info:
        validate_filters(Filters(sort_safelist=SAFELIST, **kwargs))
    assert field in exc_info.value.errors
    assert not isinstance(exc_info.value, InvalidSortError)


def test_validate_filters_flags_unknown_sort_as_invalid_sort():
    with pytest.raises(InvalidSortError) as exc_info:
        validate_filters(Filters(cursor=0, sort="pages", sort_safelist=SAFELIST))
    assert exc_info.value.errors["sort"] == "invalid sort value"
    assert "cursor" in exc_info.value.errors


def test_metadata_for_partial_last_page():
    metadata = calculate_metadata(45, 2, 20)
    assert metadata == Metadata(
        current_cursor=2,
        cursor_size=20,
        first_cursor=1,
        last_cursor=3,
        total_records=45,
    )


def test_metadata_for_exact_multiple():
    assert calculate_metadata(40, 1, 20).last_cursor == 2


def test_metadata_is_empty_when_no_records():
    metadata = calculate_metadata(0, 4, 20)
    assert metadata.is_empty
    assert metadata.as_dict() == {}
