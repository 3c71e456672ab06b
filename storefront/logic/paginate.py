"""Fixed-size pagination of ordered views."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class PageControl:
    number: int
    active: bool


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    total_pages: int
    total_items: int
    page_size: int = 1

    def controls(self) -> list[PageControl]:
        if self.total_pages <= 1:
            return []
        return [PageControl(number, number == self.page) for number in range(1, self.total_pages + 1)]


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size)


def paginate(records: Sequence[T], page: int, page_size: int) -> Page[T]:
    if page_size < 1:
        raise ValueError("page_size must be positive")
    count = len(records)
    if page < 1:
        items: list[T] = []
    else:
        start = (page - 1) * page_size
        items = list(records[start : start + page_size])
    return Page(
        items=items,
        page=page,
        total_pages=total_pages(count, page_size),
        total_items=count,
        page_size=page_size,
    )
