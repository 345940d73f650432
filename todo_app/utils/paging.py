from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def paginate(
    items: Sequence[T], page_number: int | None, row_count: int | None
) -> list[T]:
    """
    Slice ``items`` to one page.

    Paging only applies when both values are given; non-positive values are
    treated as 1.
    """
    if page_number is None or row_count is None:
        return list(items)

    page = page_number if page_number > 0 else 1
    rows = row_count if row_count > 0 else 1
    start = (page - 1) * rows
    return list(items[start : start + rows])
