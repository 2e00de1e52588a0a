"""Query method description and per-call parameter access."""

from __future__ import annotations

import collections.abc
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence, get_args, get_origin, get_type_hints

from .codecs import unwrap_optional
from .paging import Page, PageRequest, Sort


class ReturnShape(str, Enum):
    """Result shape declared by a query method."""

    SINGLE = "single"
    COLLECTION = "collection"
    PAGE = "page"


class ParameterKind(str, Enum):
    """Role a method parameter plays in query derivation."""

    BINDABLE = "bindable"
    PAGE_REQUEST = "page_request"
    SORT = "sort"


@dataclass(frozen=True)
class Parameter:
    """One declared query method parameter."""

    name: str
    kind: ParameterKind = ParameterKind.BINDABLE

    @property
    def is_bindable(self) -> bool:
        return self.kind is ParameterKind.BINDABLE


_COLLECTION_TYPES = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.Iterable,
    collections.abc.Iterator,
    collections.abc.Collection,
}


@dataclass(frozen=True)
class QueryMethod:
    """Name, domain type, return shape and parameters of a query method.

    Attributes:
        name: Method name the predicate tree is derived from.
        domain_type: Entity type read by the query.
        return_shape: Exactly one of single, collection or page.
        parameters: Declared parameters in positional order.
    """

    name: str
    domain_type: Any
    return_shape: ReturnShape = ReturnShape.COLLECTION
    parameters: tuple[Parameter, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Query method name must be a non-empty string.")
        object.__setattr__(self, "return_shape", ReturnShape(self.return_shape))
        object.__setattr__(self, "parameters", tuple(self.parameters))
        for kind in (ParameterKind.PAGE_REQUEST, ParameterKind.SORT):
            if sum(1 for param in self.parameters if param.kind is kind) > 1:
                raise ValueError(
                    f"Query method {self.name!r} declares more than one {kind.value} parameter."
                )

    @classmethod
    def from_callable(cls, func: Callable[..., Any], domain_type: Any = None) -> QueryMethod:
        """Describe a Python function from its name and annotations.

        `Page[T]` returns classify as page queries, list/tuple/set and the
        `Sequence`/`Iterable`/`Iterator` families as collection queries,
        everything else as single-entity queries. Parameters annotated with
        `PageRequest` or `Sort` are not bound to predicates.

        Raises:
            TypeError: If the function takes `*args`/`**kwargs` or the
                domain type cannot be inferred and is not given.
        """

        signature = inspect.signature(func)
        try:
            hints = get_type_hints(func)
        except (NameError, TypeError):
            hints = {}

        parameters: list[Parameter] = []
        for index, param in enumerate(signature.parameters.values()):
            if index == 0 and param.name in ("self", "cls"):
                continue
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                raise TypeError(
                    f"Query method {func.__name__!r} cannot declare *args or **kwargs."
                )
            annotation = hints.get(param.name, param.annotation)
            parameters.append(Parameter(param.name, _parameter_kind(annotation)))

        return_annotation = hints.get("return", signature.return_annotation)
        shape, inferred = _classify_return(return_annotation)
        resolved_domain = domain_type if domain_type is not None else inferred
        if resolved_domain is None:
            raise TypeError(
                f"Cannot infer domain type of query method {func.__name__!r}; "
                "pass domain_type explicitly."
            )

        return cls(
            name=func.__name__,
            domain_type=resolved_domain,
            return_shape=shape,
            parameters=tuple(parameters),
        )

    @property
    def is_single_query(self) -> bool:
        return self.return_shape is ReturnShape.SINGLE

    @property
    def is_collection_query(self) -> bool:
        return self.return_shape is ReturnShape.COLLECTION

    @property
    def is_page_query(self) -> bool:
        return self.return_shape is ReturnShape.PAGE


class ParameterAccessor:
    """Typed access to the raw positional arguments of one invocation.

    Declared parameters decide each argument's role. Arguments past the
    declared parameters are classified by their runtime type.
    """

    def __init__(self, parameters: Sequence[Parameter], values: Sequence[Any]):
        self.parameters = tuple(parameters)
        self.values = tuple(values)
        bindable: list[Any] = []
        page_request: Optional[PageRequest] = None
        sort: Optional[Sort] = None

        for index, value in enumerate(self.values):
            if index < len(self.parameters):
                kind = self.parameters[index].kind
            else:
                kind = _runtime_kind(value)

            if kind is ParameterKind.PAGE_REQUEST:
                if value is None:
                    continue
                if not isinstance(value, PageRequest):
                    raise TypeError(
                        f"Expected PageRequest at position {index}, got {type(value).__name__}."
                    )
                if page_request is not None:
                    raise ValueError("Only one PageRequest argument is allowed.")
                page_request = value
            elif kind is ParameterKind.SORT:
                if value is None:
                    continue
                if not isinstance(value, Sort):
                    raise TypeError(
                        f"Expected Sort at position {index}, got {type(value).__name__}."
                    )
                if sort is not None:
                    raise ValueError("Only one Sort argument is allowed.")
                sort = value
            else:
                bindable.append(value)

        self._bindable = tuple(bindable)
        self._page_request = page_request
        self._sort = sort

    @property
    def bindable_values(self) -> tuple[Any, ...]:
        return self._bindable

    @property
    def page_request(self) -> Optional[PageRequest]:
        return self._page_request

    @property
    def sort(self) -> Optional[Sort]:
        return self._sort

    def __len__(self) -> int:
        return len(self._bindable)

    def __iter__(self):
        return iter(self._bindable)


def _parameter_kind(annotation: Any) -> ParameterKind:
    base = unwrap_optional(annotation)
    if base is PageRequest:
        return ParameterKind.PAGE_REQUEST
    if base is Sort:
        return ParameterKind.SORT
    return ParameterKind.BINDABLE


def _runtime_kind(value: Any) -> ParameterKind:
    if isinstance(value, PageRequest):
        return ParameterKind.PAGE_REQUEST
    if isinstance(value, Sort):
        return ParameterKind.SORT
    return ParameterKind.BINDABLE


def _classify_return(annotation: Any) -> tuple[ReturnShape, Any]:
    if annotation is inspect.Signature.empty:
        return ReturnShape.SINGLE, None

    base = unwrap_optional(annotation)
    origin = get_origin(base)
    args = get_args(base)
    if base is Page or origin is Page:
        return ReturnShape.PAGE, _item_type(args)
    if base in _COLLECTION_TYPES or origin in _COLLECTION_TYPES:
        return ReturnShape.COLLECTION, _item_type(args)

    if base is type(None) or not isinstance(base, type):
        return ReturnShape.SINGLE, None
    return ReturnShape.SINGLE, base


def _item_type(args: tuple[Any, ...]) -> Any:
    if not args:
        return None
    item = args[0]
    return item if isinstance(item, type) else None
