"""Sort and pagination value types shared by queries and executions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Iterator, Optional, Sequence, TypeVar

from .conditions import OrderBy

T = TypeVar("T")


@dataclass(frozen=True)
class Sort:
    """Ordered collection of `OrderBy` expressions passed at call time."""

    orders: tuple[OrderBy, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "orders", tuple(self.orders))
        for order in self.orders:
            if not isinstance(order, OrderBy):
                raise TypeError("Sort orders must be OrderBy instances.")

    @classmethod
    def by(cls, *fields: str, desc: bool = False) -> Sort:
        """Build a sort over `fields`, all in the same direction."""

        if not fields:
            raise ValueError("Sort.by() requires at least one field.")
        return cls(tuple(OrderBy(name, desc=desc) for name in fields))

    @classmethod
    def of(cls, orders: Sequence[OrderBy]) -> Sort:
        return cls(tuple(orders))

    def and_(self, other: Sort) -> Sort:
        """Return a new sort with `other`'s orders appended."""

        return Sort(self.orders + other.orders)

    def __iter__(self) -> Iterator[OrderBy]:
        return iter(self.orders)

    def __len__(self) -> int:
        return len(self.orders)

    def __bool__(self) -> bool:
        return bool(self.orders)


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page index, positive page size and optional sort."""

    page: int
    size: int
    sort: Optional[Sort] = None

    def __post_init__(self) -> None:
        if isinstance(self.page, bool) or not isinstance(self.page, int):
            raise TypeError("page must be an int")
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise TypeError("size must be an int")
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.size <= 0:
            raise ValueError("size must be > 0")

    @classmethod
    def of(cls, page: int, size: int, sort: Optional[Sort] = None) -> PageRequest:
        return cls(page=page, size=size, sort=sort)

    @property
    def offset(self) -> int:
        """Number of documents skipped before this page."""

        return self.page * self.size

    def next(self) -> PageRequest:
        return PageRequest(self.page + 1, self.size, self.sort)

    def previous_or_first(self) -> PageRequest:
        if self.page == 0:
            return self
        return PageRequest(self.page - 1, self.size, self.sort)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One bounded window of results paired with the total matching count.

    Attributes:
        items: Entities of the requested page, in store order.
        request: The `PageRequest` that produced this page.
        total: Number of matching documents across all pages.
    """

    items: tuple[T, ...]
    request: PageRequest
    total: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        if len(self.items) > self.request.size:
            raise ValueError(
                f"Page holds {len(self.items)} items but page size is {self.request.size}."
            )
        if self.total < len(self.items):
            raise ValueError(
                f"Page total {self.total} is lower than its item count {len(self.items)}."
            )

    @property
    def number(self) -> int:
        return self.request.page

    @property
    def size(self) -> int:
        return self.request.size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.size)

    @property
    def has_previous(self) -> bool:
        return self.request.page > 0

    @property
    def has_next(self) -> bool:
        return self.request.page + 1 < self.total_pages

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
