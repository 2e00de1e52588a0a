"""SQL fragment builders for JSON document filtering, sorting, and paging.

Documents live in one JSON text column; every field access goes through
the dialect's JSON functions with the path bound as a parameter. Each
compiled condition evaluates to 0 or 1, never NULL, so negation behaves like
the in-memory store (a missing field is "not equal" to any value).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...core.conditions import Condition, ConditionGroup, NotCondition, OrderBy, WhereExpression
from ..db_api.dialects import Dialect

NamedParams = Dict[str, Any]


@dataclass(frozen=True)
class CompiledFragment:
    """Represents a compiled SQL fragment with its bound parameters."""

    sql: str
    params: NamedParams


class _ParamNameGenerator:
    """Generates safe, unique parameter names for named SQL styles."""

    def __init__(self) -> None:
        self._counter = 0

    def next(self, base: str) -> str:
        """Return a deterministic parameter name based on a field hint."""

        self._counter += 1
        safe = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in base)
        return f"{safe}_{self._counter}"


def json_path(field: str) -> str:
    """Return the JSON path addressing a dotted document field."""

    keys = "".join(f".{json.dumps(part)}" for part in field.split("."))
    return f"${keys}"


def compile_where(
    criteria: Optional[Sequence[WhereExpression]],
    dialect: Dialect,
    *,
    column: str,
) -> CompiledFragment:
    """Compile AND-ed criteria into a SQL `WHERE` fragment.

    Args:
        criteria: Expressions combined with AND, or `None`.
        dialect: SQL dialect used for quoting and JSON functions.
        column: JSON document column name.

    Returns:
        A compiled SQL fragment and parameters. Empty fragment if no criteria.
    """

    if not criteria:
        return CompiledFragment("", {})

    generator = _ParamNameGenerator()
    params: NamedParams = {}
    clauses = [
        _compile_expression(item, dialect, column, generator, params) for item in criteria
    ]
    return CompiledFragment(f" WHERE {' AND '.join(clauses)}", params)


def compile_order_by(
    order_by: Optional[Sequence[OrderBy]],
    dialect: Dialect,
    *,
    column: str,
    tiebreaker: str,
) -> CompiledFragment:
    """Compile `ORDER BY` with a trailing insertion-order tiebreaker."""

    params: NamedParams = {}
    ordered: List[str] = []
    for index, item in enumerate(order_by or ()):
        key = f"__sort_{index}"
        params[key] = json_path(item.field)
        value_sql = dialect.json_value(column, dialect.placeholder(key))
        ordered.append(f"{value_sql} {'DESC' if item.desc else 'ASC'}")
    ordered.append(f"{dialect.q(tiebreaker)} ASC")
    return CompiledFragment(f" ORDER BY {', '.join(ordered)}", params)


def append_limit_offset(
    sql: str,
    params: NamedParams,
    *,
    limit: Optional[int],
    offset: Optional[int],
) -> Tuple[str, NamedParams]:
    """Append pagination clauses and merge parameters.

    SQLite only accepts `OFFSET` after `LIMIT`; `LIMIT -1` means unbounded.
    """

    named_params: NamedParams = dict(params)
    if limit is None and offset is None:
        return sql, named_params
    named_params["__limit"] = -1 if limit is None else limit
    sql += " LIMIT :__limit"
    if offset is not None:
        named_params["__offset"] = offset
        sql += " OFFSET :__offset"
    return sql, named_params


def _compile_expression(
    item: WhereExpression,
    dialect: Dialect,
    column: str,
    generator: _ParamNameGenerator,
    params: NamedParams,
) -> str:
    if isinstance(item, Condition):
        return _compile_condition(item, dialect, column, generator, params)

    if isinstance(item, ConditionGroup):
        joiner = " AND " if item.operator == "$and" else " OR "
        parts = [
            _compile_expression(child, dialect, column, generator, params)
            for child in item.items
        ]
        return f"({joiner.join(parts)})"

    if isinstance(item, NotCondition):
        inner = _compile_expression(item.item, dialect, column, generator, params)
        return f"(NOT {inner})"

    raise TypeError(f"Unsupported expression type: {type(item).__name__}")


def _compile_condition(
    condition: Condition,
    dialect: Dialect,
    column: str,
    generator: _ParamNameGenerator,
    params: NamedParams,
) -> str:
    path_key = generator.next(f"{condition.field}_path")
    params[path_key] = json_path(condition.field)
    path_sql = dialect.placeholder(path_key)
    value_sql = dialect.json_value(column, path_sql)

    if condition.op == "$exists":
        presence = "IS NOT NULL" if condition.value else "IS NULL"
        return f"({dialect.json_type(column, path_sql)} {presence})"

    if condition.op in ("$eq", "$ne"):
        equals = _equals_sql(
            condition.field, condition.value, dialect, column, path_sql, generator, params
        )
        return equals if condition.op == "$eq" else f"(NOT {equals})"

    if condition.op in ("$in", "$nin"):
        options = [
            _equals_sql(condition.field, value, dialect, column, path_sql, generator, params)
            for value in condition.values or ()
        ]
        matched = f"({' OR '.join(options)})" if options else "0"
        return matched if condition.op == "$in" else f"(NOT {matched})"

    key = generator.next(condition.field)
    params[key] = _bind(condition.value)
    placeholder = dialect.placeholder(key)

    type_sql = dialect.json_type(column, path_sql)

    if condition.op == "$regex":
        # strings match directly, arrays when any string element matches
        return (
            f"(CASE {type_sql} WHEN 'text' THEN {value_sql} REGEXP {placeholder} "
            f"WHEN 'array' THEN EXISTS (SELECT 1 FROM json_each({dialect.q(column)}, "
            f"{path_sql}) WHERE json_each.type = 'text' "
            f"AND json_each.value REGEXP {placeholder}) ELSE 0 END)"
        )

    operators = {"$gt": ">", "$gte": ">=", "$lt": "<", "$lte": "<="}
    return (
        f"(CASE WHEN {type_sql} IN ('array', 'object') THEN 0 "
        f"ELSE COALESCE({value_sql} {operators[condition.op]} {placeholder}, 0) END)"
    )


def _equals_sql(
    field: str,
    value: Any,
    dialect: Dialect,
    column: str,
    path_sql: str,
    generator: _ParamNameGenerator,
    params: NamedParams,
) -> str:
    value_sql = dialect.json_value(column, path_sql)
    if value is None:
        return f"({value_sql} IS NULL)"

    key = generator.next(field)
    params[key] = _bind(value)
    placeholder = dialect.placeholder(key)
    type_sql = dialect.json_type(column, path_sql)
    if isinstance(value, (dict, list)):
        return f"COALESCE({value_sql} = json({placeholder}), 0)"
    # arrays match when any element equals the value
    return (
        f"COALESCE({value_sql} = {placeholder} OR ({type_sql} = 'array' AND EXISTS "
        f"(SELECT 1 FROM json_each({dialect.q(column)}, {path_sql}) "
        f"WHERE json_each.value = {placeholder})), 0)"
    )


def _bind(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return value
