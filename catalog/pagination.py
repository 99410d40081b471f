"""Cursor-based pagination: filter validation, limit/offset, and result metadata.

Pure computation; callers issue the query themselves.
"""

from __future__ import annotations

import dataclasses
import math
from typing import Optional, Tuple

from .errors import InvalidSortError
from .validator import Validator, permitted_value

MAX_CURSOR = 10_000_000
MAX_CURSOR_SIZE = 100
DEFAULT_CURSOR_SIZE = 20


@dataclasses.dataclass(frozen=True)
class Filters:
    cursor: int = 1
    cursor_size: int = DEFAULT_CURSOR_SIZE
    sort: str = "id"
    sort_safelist: Tuple[str, ...] = ("id", "-id")

    def sort_column(self) -> str:
        """Column name for ORDER BY. Only safelisted values ever get through."""
        if self.sort not in self.sort_safelist:
            raise InvalidSortError(self.sort)
        return self.sort.removeprefix("-")

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.cursor_size

    def offset(self) -> int:
        return (self.cursor - 1) * self.cursor_size


def validate_filters(filters: Filters) -> None:
    """Raise InvalidSortError or ValidationError for out-of-range cursor filters."""
    v = Validator()
    v.check(filters.cursor > 0, "cursor", "must be greater than zero")
    v.check(filters.cursor <= MAX_CURSOR, "cursor", "must be a maximum of 10 million")
    v.check(filters.cursor_size > 0, "cursor_size", "must be greater than zero")
    v.check(filters.cursor_size <= MAX_CURSOR_SIZE, "cursor_size", f"must be a maximum of {MAX_CURSOR_SIZE}")
    v.check(permitted_value(filters.sort, *filters.sort_safelist), "sort", "invalid sort value")

    if "sort" in v.errors:
        raise InvalidSortError(filters.sort, v.errors)
    v.raise_if_invalid()


@dataclasses.dataclass(frozen=True)
class Metadata:
    current_cursor: Optional[int] = None
    cursor_size: Optional[int] = None
    first_cursor: Optional[int] = None
    last_cursor: Optional[int] = None
    total_records: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.total_records is None

    def as_dict(self) -> dict:
        return {k: v for k, v in dataclasses.asdict(self).items() if v is not None}


def calculate_metadata(total_records: int, cursor: int, cursor_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_cursor=cursor,
        cursor_size=cursor_size,
        first_cursor=1,
        last_cursor=math.ceil(total_records / cursor_size),
        total_records=total_records,
    )
