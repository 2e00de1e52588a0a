"""Default method-name parser producing `PredicateTree` values.

Grammar (snake_case)::

    <verb>[_all][_by_<branch>[_or_<branch>...]][_order_by_<order>[_and_<order>...]]
    verb   = find | get | read | query
    branch = <part>[_and_<part>...]
    part   = <property>[_<keyword>]
    order  = <property>[_asc | _desc]

Nested properties are written with a double underscore
(`address__city`) and become dotted paths (`address.city`).
"""

from __future__ import annotations

import re
from dataclasses import is_dataclass
from typing import Any, List, Optional

from .codecs import is_known_path
from .conditions import OrderBy
from .errors import UnparseableMethodName
from .predicate_tree import OrPart, Part, PartType, PredicateTree

_METHOD_PATTERN = re.compile(
    r"^(?P<verb>find|get|read|query)(?P<all>_all)?"
    r"(?:_by_(?P<predicate>.+?))?"
    r"(?:_order_by_(?P<order>.+))?$"
)

_KEYWORDS = sorted(
    (part_type for part_type in PartType if part_type is not PartType.SIMPLE_PROPERTY),
    key=lambda part_type: len(part_type.keyword),
    reverse=True,
)


def parse_method_name(method_name: str, domain_type: Any = None) -> PredicateTree:
    """Parse a derived query method name into a predicate tree.

    Args:
        method_name: Method name such as `find_by_email_and_age_greater_than`.
        domain_type: Entity type queried. When it is a dataclass, every
            property must resolve to one of its fields.

    Returns:
        Immutable predicate tree.

    Raises:
        UnparseableMethodName: If the name does not follow the grammar or
            references unknown properties.
    """

    match = _METHOD_PATTERN.match(method_name)
    if match is None:
        raise UnparseableMethodName(
            f"Method name {method_name!r} does not follow the derived query grammar."
        )

    predicate = match.group("predicate")
    order = match.group("order")
    if predicate is None and match.group("all") is None:
        raise UnparseableMethodName(
            f"Method name {method_name!r} needs a '_by_' predicate or the '_all' form."
        )

    or_parts: List[OrPart] = []
    if predicate is not None:
        for branch in _split(predicate, "_or_", method_name):
            parts = tuple(
                _parse_part(segment, domain_type, method_name)
                for segment in _split(branch, "_and_", method_name)
            )
            or_parts.append(OrPart(parts))

    order_by: List[OrderBy] = []
    if order is not None:
        for segment in _split(order, "_and_", method_name):
            order_by.append(_parse_order(segment, domain_type, method_name))

    return PredicateTree(or_parts=tuple(or_parts), order_by=tuple(order_by))


def _split(text: str, separator: str, method_name: str) -> List[str]:
    segments = text.split(separator)
    if any(not segment for segment in segments):
        raise UnparseableMethodName(
            f"Method name {method_name!r} has an empty clause around {separator!r}."
        )
    return segments


def _parse_part(segment: str, domain_type: Any, method_name: str) -> Part:
    candidates: List[tuple[str, PartType]] = []
    for part_type in _KEYWORDS:
        suffix = f"_{part_type.keyword}"
        if segment.endswith(suffix) and len(segment) > len(suffix):
            candidates.append((segment[: -len(suffix)], part_type))
    candidates.append((segment, PartType.SIMPLE_PROPERTY))

    for raw_property, part_type in candidates:
        path = _property_path(raw_property)
        if path is not None and _is_valid_path(domain_type, path):
            return Part(property=path, type=part_type)

    raise UnparseableMethodName(
        f"Method name {method_name!r} references unknown property in {segment!r}"
        f"{_domain_hint(domain_type)}."
    )


def _parse_order(segment: str, domain_type: Any, method_name: str) -> OrderBy:
    raw_property, desc = segment, False
    if segment.endswith("_desc"):
        raw_property, desc = segment[: -len("_desc")], True
    elif segment.endswith("_asc"):
        raw_property = segment[: -len("_asc")]

    path = _property_path(raw_property)
    if path is None or not _is_valid_path(domain_type, path):
        raise UnparseableMethodName(
            f"Method name {method_name!r} orders by unknown property {segment!r}"
            f"{_domain_hint(domain_type)}."
        )
    return OrderBy(path, desc=desc)


def _property_path(raw_property: str) -> Optional[str]:
    names = raw_property.split("__")
    if not all(names) or any(name.startswith("_") or name.endswith("_") for name in names):
        return None
    return ".".join(names)


def _is_valid_path(domain_type: Any, path: str) -> bool:
    if isinstance(domain_type, type) and is_dataclass(domain_type):
        return is_known_path(domain_type, path)
    return True


def _domain_hint(domain_type: Any) -> str:
    if isinstance(domain_type, type):
        return f" of {domain_type.__name__}"
    return ""
