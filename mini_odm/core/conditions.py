"""Document criteria primitives for derived query filtering and sorting."""

from __future__ import annotations

from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass
from typing import Any, Optional, Sequence

COMPARISON_OPERATORS = frozenset(
    {"$eq", "$ne", "$gt", "$gte", "$lt", "$lte", "$in", "$nin", "$regex", "$exists"}
)


@dataclass(frozen=True)
class Condition:
    """Represents one document field condition.

    Attributes:
        field: Field path, dotted for embedded documents (`address.city`).
        op: Document query operator (for example `$eq`, `$in`, `$regex`).
        value: Scalar operand for single-value operators.
        values: Sequence operand for `$in` / `$nin`.
    """

    field: str
    op: str
    value: Any = None
    values: Optional[Sequence[Any]] = None

    def __post_init__(self) -> None:
        if self.op not in COMPARISON_OPERATORS:
            raise ValueError(f"Unsupported document operator {self.op!r}.")
        if self.values is not None:
            object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class ConditionGroup:
    """Represents a grouped logical expression (`$and`/`$or`)."""

    operator: str
    items: tuple["WhereExpression", ...]


@dataclass(frozen=True)
class NotCondition:
    """Represents a negated expression."""

    item: "WhereExpression"


WhereExpression = Condition | ConditionGroup | NotCondition


class C:
    """Fluent condition factory methods."""

    @staticmethod
    def eq(field: str, val: Any) -> Condition:
        """Build `field == value` condition."""

        return Condition(field=field, op="$eq", value=val)

    @staticmethod
    def ne(field: str, val: Any) -> Condition:
        """Build `field != value` condition."""

        return Condition(field=field, op="$ne", value=val)

    @staticmethod
    def lt(field: str, val: Any) -> Condition:
        """Build `field < value` condition."""

        return Condition(field=field, op="$lt", value=val)

    @staticmethod
    def le(field: str, val: Any) -> Condition:
        """Build `field <= value` condition."""

        return Condition(field=field, op="$lte", value=val)

    @staticmethod
    def gt(field: str, val: Any) -> Condition:
        """Build `field > value` condition."""

        return Condition(field=field, op="$gt", value=val)

    @staticmethod
    def ge(field: str, val: Any) -> Condition:
        """Build `field >= value` condition."""

        return Condition(field=field, op="$gte", value=val)

    @staticmethod
    def regex(field: str, pattern: str) -> Condition:
        """Build a regular expression match condition."""

        return Condition(field=field, op="$regex", value=pattern)

    @staticmethod
    def is_null(field: str) -> Condition:
        """Build `field is None` condition (also matches missing fields)."""

        return Condition(field=field, op="$eq", value=None)

    @staticmethod
    def is_not_null(field: str) -> Condition:
        """Build `field is not None` condition."""

        return Condition(field=field, op="$ne", value=None)

    @staticmethod
    def exists(field: str, flag: bool = True) -> Condition:
        """Build a field presence condition."""

        return Condition(field=field, op="$exists", value=bool(flag))

    @staticmethod
    def in_(field: str, values: Sequence[Any]) -> Condition:
        """Build `field in (...)` condition."""

        return Condition(field=field, op="$in", values=list(values))

    @staticmethod
    def nin(field: str, values: Sequence[Any]) -> Condition:
        """Build `field not in (...)` condition."""

        return Condition(field=field, op="$nin", values=list(values))

    @staticmethod
    def and_(*items: WhereExpression | Sequence[WhereExpression]) -> ConditionGroup:
        """Build a grouped `$and` expression."""

        normalized = C._normalize_group_items(items)
        return ConditionGroup(operator="$and", items=normalized)

    @staticmethod
    def or_(*items: WhereExpression | Sequence[WhereExpression]) -> ConditionGroup:
        """Build a grouped `$or` expression."""

        normalized = C._normalize_group_items(items)
        return ConditionGroup(operator="$or", items=normalized)

    @staticmethod
    def not_(item: WhereExpression) -> NotCondition:
        """Build a negated expression."""

        C._ensure_expr(item)
        return NotCondition(item=item)

    @staticmethod
    def _normalize_group_items(
        items: Sequence[WhereExpression | Sequence[WhereExpression]],
    ) -> tuple[WhereExpression, ...]:
        normalized_input: Sequence[WhereExpression | Sequence[WhereExpression]]
        if (
            len(items) == 1
            and isinstance(items[0], SequenceABC)
            and not isinstance(
                items[0], (str, bytes, Condition, ConditionGroup, NotCondition)
            )
        ):
            normalized_input = items[0]
        else:
            normalized_input = items

        normalized: list[WhereExpression] = []
        for item in normalized_input:
            C._ensure_expr(item)
            normalized.append(item)

        if not normalized:
            raise ValueError("Grouped condition must contain at least one expression.")
        return tuple(normalized)

    @staticmethod
    def _ensure_expr(item: Any) -> None:
        if not isinstance(item, (Condition, ConditionGroup, NotCondition)):
            raise TypeError(
                "Expression must be Condition, ConditionGroup, or NotCondition."
            )


@dataclass(frozen=True)
class OrderBy:
    """Represents one ordering expression."""

    field: str
    desc: bool = False
