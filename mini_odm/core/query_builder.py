"""Filter and sort document builders for store-native query rendering.

This module renders criteria into the Mongo-style filter documents that
document stores understand. It keeps `Query` a plain value while making
rendering reusable by adapters and by logging.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .conditions import Condition, ConditionGroup, NotCondition, OrderBy, WhereExpression
from .types import FilterDocument, SortDocument


def compile_filter(criteria: Optional[Sequence[WhereExpression]]) -> FilterDocument:
    """Render AND-ed criteria into one filter document.

    Top-level conditions on distinct fields are merged into one mapping;
    anything that would collide is wrapped in `$and`.

    Args:
        criteria: Expressions combined with AND, or `None`.

    Returns:
        Filter document. Empty mapping when there are no criteria.
    """

    if not criteria:
        return {}

    rendered = [_compile_expression(item) for item in criteria]
    if len(rendered) == 1:
        return rendered[0]

    merged: FilterDocument = {}
    for fragment in rendered:
        if any(key.startswith("$") or key in merged for key in fragment):
            return {"$and": rendered}
        merged.update(fragment)
    return merged


def compile_sort(order_by: Optional[Sequence[OrderBy]]) -> SortDocument:
    """Render ordering expressions as `(field, 1 | -1)` pairs."""

    if not order_by:
        return []
    return [(item.field, -1 if item.desc else 1) for item in order_by]


def _compile_expression(item: WhereExpression) -> FilterDocument:
    if isinstance(item, Condition):
        return {item.field: _compile_operand(item)}

    if isinstance(item, ConditionGroup):
        return {item.operator: [_compile_expression(child) for child in item.items]}

    if isinstance(item, NotCondition):
        inner = item.item
        if isinstance(inner, Condition):
            return {inner.field: {"$not": _compile_operand(inner)}}
        return {"$nor": [_compile_expression(inner)]}

    raise TypeError(f"Unsupported expression type: {type(item).__name__}")


def _compile_operand(condition: Condition) -> dict[str, Any]:
    if condition.op in ("$in", "$nin"):
        values: List[Any] = list(condition.values or ())
        return {condition.op: values}
    return {condition.op: condition.value}
