"""Translate predicate trees plus bound arguments into `Query` values.

`QueryCreator` is a pure function of its inputs: calling `create_query`
twice returns two equal, independent `Query` objects. Paged executions rely
on this to derive a clean count query next to the windowed fetch query.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from typing import Any, Iterator, List, Optional, Sequence

from .codecs import serialize_path_value
from .conditions import C, OrderBy, WhereExpression
from .errors import InvalidArgumentCount, UnsupportedPredicate
from .predicate_tree import OrPart, Part, PartType, PredicateTree
from .query import Query
from .query_method import ParameterAccessor


class QueryCreator:
    """Builds store-native queries for one predicate tree and one call."""

    def __init__(
        self,
        tree: PredicateTree,
        accessor: ParameterAccessor,
        *,
        domain_type: Any = None,
        method_name: Optional[str] = None,
    ) -> None:
        self.tree = tree
        self.accessor = accessor
        self.domain_type = domain_type
        self.method_name = method_name

    def create_query(self) -> Query:
        """Return a fresh query for the tree and the accessor's values.

        Raises:
            InvalidArgumentCount: If fewer values are bound than required.
            UnsupportedPredicate: If a part has no document query rendering.
        """

        values = self.accessor.bindable_values
        required = self.tree.number_of_arguments
        if len(values) < required:
            raise InvalidArgumentCount(required, len(values), method_name=self.method_name)

        iterator = iter(values)
        branches = [self._create_branch(branch, iterator) for branch in self.tree]

        criteria: tuple[WhereExpression, ...]
        if not branches:
            criteria = ()
        elif len(branches) == 1:
            criteria = tuple(branches[0])
        else:
            criteria = (C.or_([_collapse(branch) for branch in branches]),)

        sort: List[OrderBy] = list(self.tree.order_by)
        if self.accessor.sort:
            sort.extend(self.accessor.sort)
        return Query(criteria=criteria, sort=tuple(sort))

    def _create_branch(
        self, branch: OrPart, values: Iterator[Any]
    ) -> List[WhereExpression]:
        expressions: List[WhereExpression] = []
        for part in branch:
            expressions.extend(self._create_criteria(part, values))
        return expressions

    def _create_criteria(self, part: Part, values: Iterator[Any]) -> List[WhereExpression]:
        path = part.property
        kind = part.type

        if kind is PartType.SIMPLE_PROPERTY:
            return [C.eq(path, self._convert(path, next(values)))]
        if kind is PartType.NEGATING_SIMPLE_PROPERTY:
            return [C.ne(path, self._convert(path, next(values)))]
        if kind is PartType.GREATER_THAN:
            return [C.gt(path, self._convert(path, next(values)))]
        if kind is PartType.GREATER_THAN_EQUAL:
            return [C.ge(path, self._convert(path, next(values)))]
        if kind is PartType.LESS_THAN:
            return [C.lt(path, self._convert(path, next(values)))]
        if kind is PartType.LESS_THAN_EQUAL:
            return [C.le(path, self._convert(path, next(values)))]
        if kind is PartType.BETWEEN:
            lower = self._convert(path, next(values))
            upper = self._convert(path, next(values))
            return [C.gt(path, lower), C.lt(path, upper)]
        if kind is PartType.IS_NULL:
            return [C.is_null(path)]
        if kind is PartType.IS_NOT_NULL:
            return [C.is_not_null(path)]
        if kind is PartType.TRUE:
            return [C.eq(path, True)]
        if kind is PartType.FALSE:
            return [C.eq(path, False)]
        if kind is PartType.LIKE:
            return [C.regex(path, like_to_regex(_text(next(values), part)))]
        if kind is PartType.NOT_LIKE:
            return [C.not_(C.regex(path, like_to_regex(_text(next(values), part))))]
        if kind is PartType.STARTING_WITH:
            return [C.regex(path, f"^{re.escape(_text(next(values), part))}")]
        if kind is PartType.ENDING_WITH:
            return [C.regex(path, f"{re.escape(_text(next(values), part))}$")]
        if kind is PartType.CONTAINING:
            return [C.regex(path, re.escape(_text(next(values), part)))]
        if kind is PartType.REGEX:
            return [C.regex(path, _text(next(values), part))]
        if kind is PartType.IN:
            return [C.in_(path, self._convert_many(path, next(values), part))]
        if kind is PartType.NOT_IN:
            return [C.nin(path, self._convert_many(path, next(values), part))]
        if kind is PartType.EXISTS:
            return [C.exists(path, bool(next(values)))]

        raise UnsupportedPredicate(
            f"Predicate {kind.name} on {path!r} cannot be expressed as a document query."
        )

    def _convert(self, path: str, value: Any) -> Any:
        return serialize_path_value(self.domain_type, path, value)

    def _convert_many(self, path: str, value: Any, part: Part) -> List[Any]:
        if isinstance(value, (str, bytes)) or not isinstance(value, Collection):
            raise TypeError(
                f"{part.type.name} on {path!r} expects a collection argument, "
                f"got {type(value).__name__}."
            )
        return [self._convert(path, item) for item in value]


def build_query(
    tree: PredicateTree,
    accessor: ParameterAccessor,
    *,
    domain_type: Any = None,
    method_name: Optional[str] = None,
) -> Query:
    """Build one `Query` from a predicate tree and a call's arguments."""

    return QueryCreator(
        tree, accessor, domain_type=domain_type, method_name=method_name
    ).create_query()


def like_to_regex(pattern: str) -> str:
    """Translate a `LIKE` pattern (`%`, `_` wildcards) into an anchored regex."""

    translated: List[str] = []
    for char in pattern:
        if char == "%":
            translated.append(".*")
        elif char == "_":
            translated.append(".")
        else:
            translated.append(re.escape(char))
    return f"^{''.join(translated)}$"


def _text(value: Any, part: Part) -> str:
    if not isinstance(value, str):
        raise TypeError(
            f"{part.type.name} on {part.property!r} expects a string argument, "
            f"got {type(value).__name__}."
        )
    return value


def _collapse(branch: Sequence[WhereExpression]) -> WhereExpression:
    if len(branch) == 1:
        return branch[0]
    return C.and_(list(branch))

