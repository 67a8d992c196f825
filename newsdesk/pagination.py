"""
Page/sort value objects shared by the repositories, the mapper and the
service.

Page numbers are 1-based.  ``PageRequest`` rejects out-of-range values with
``ValueError``; callers do not need to validate them beforehand.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_token(cls, token: str | None) -> "SortDirection":
        """``asc`` in any case is ASC; anything else, including nothing, is DESC."""
        if token is not None and token.strip().lower() == "asc":
            return cls.ASC
        return cls.DESC


@dataclass(frozen=True)
class Sort:
    field: str
    direction: SortDirection = SortDirection.DESC


def parse_sort(sort: str) -> Sort:
    """Split a ``"field:direction"`` expression, e.g. ``"title:ASC"``."""
    name, _, direction = sort.partition(":")
    return Sort(field=name.strip(), direction=SortDirection.from_token(direction or None))


@dataclass(frozen=True)
class PageRequest:
    page_number: int
    page_size: int
    sort: Sort | None = None

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1, got {self.page_number}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


@dataclass
class Page(Generic[T]):
    items: list[T]
    page_number: int
    page_size: int
    total: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total / self.page_size) if self.total > 0 else 0

    def map(self, func: Callable[[T], U]) -> "Page[U]":
        return Page(
            items=[func(item) for item in self.items],
            page_number=self.page_number,
            page_size=self.page_size,
            total=self.total,
        )
