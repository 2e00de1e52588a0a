"""Predicate tree model produced from derived query method names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .conditions import OrderBy


class PartType(str, Enum):
    """Supported predicate keywords and the number of values each binds."""

    SIMPLE_PROPERTY = "simple_property"
    NEGATING_SIMPLE_PROPERTY = "not"
    GREATER_THAN = "greater_than"
    GREATER_THAN_EQUAL = "greater_than_equal"
    LESS_THAN = "less_than"
    LESS_THAN_EQUAL = "less_than_equal"
    BETWEEN = "between"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    LIKE = "like"
    NOT_LIKE = "not_like"
    STARTING_WITH = "starting_with"
    ENDING_WITH = "ending_with"
    CONTAINING = "containing"
    IN = "in"
    NOT_IN = "not_in"
    TRUE = "is_true"
    FALSE = "is_false"
    REGEX = "regex"
    EXISTS = "exists"
    NEAR = "near"
    WITHIN = "within"

    @property
    def number_of_arguments(self) -> int:
        return _ARGUMENT_COUNTS.get(self, 1)

    @property
    def keyword(self) -> str:
        return "" if self is PartType.SIMPLE_PROPERTY else self.value


_ARGUMENT_COUNTS = {
    PartType.BETWEEN: 2,
    PartType.IS_NULL: 0,
    PartType.IS_NOT_NULL: 0,
    PartType.TRUE: 0,
    PartType.FALSE: 0,
}


@dataclass(frozen=True)
class Part:
    """One predicate clause: a property path and a keyword."""

    property: str
    type: PartType = PartType.SIMPLE_PROPERTY

    @property
    def number_of_arguments(self) -> int:
        return self.type.number_of_arguments


@dataclass(frozen=True)
class OrPart:
    """Parts combined with AND; sibling `OrPart`s are combined with OR."""

    parts: tuple[Part, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "parts", tuple(self.parts))
        if not self.parts:
            raise ValueError("OrPart must contain at least one part.")

    def __iter__(self) -> Iterator[Part]:
        return iter(self.parts)


@dataclass(frozen=True)
class PredicateTree:
    """Ordered predicate clauses and static ordering of one query method."""

    or_parts: tuple[OrPart, ...] = ()
    order_by: tuple[OrderBy, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "or_parts", tuple(self.or_parts))
        object.__setattr__(self, "order_by", tuple(self.order_by))

    @property
    def parts(self) -> tuple[Part, ...]:
        """All parts in declaration order, across branches."""

        return tuple(part for branch in self.or_parts for part in branch)

    @property
    def number_of_arguments(self) -> int:
        return sum(part.number_of_arguments for part in self.parts)

    def __iter__(self) -> Iterator[OrPart]:
        return iter(self.or_parts)
