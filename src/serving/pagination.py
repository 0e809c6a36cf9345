"""Page arithmetic for list endpoints (1-indexed pages)."""

from __future__ import annotations

from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def page_bounds(page: int, limit: int) -> Tuple[int, int]:
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")
    start = (page - 1) * limit
    return start, start + limit


def paginate(items: Sequence[T], page: int, limit: int) -> List[T]:
    start, end = page_bounds(page, limit)
    return list(items[start:end])


def has_more(total_available: int, page: int, limit: int) -> bool:
    return total_available > page * limit
