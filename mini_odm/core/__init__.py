"""Public core API for derived query building, dispatch, and execution."""

from .conditions import C, Condition, ConditionGroup, NotCondition, OrderBy, WhereExpression
from .contracts import CollectionResolver, DocumentStorePort, MethodNameParser
from .dispatcher import DocumentQuery, QueryDispatcher
from .errors import (
    InvalidArgumentCount,
    MissingPageRequest,
    QueryError,
    StoreError,
    StoreTimeout,
    StoreUnavailable,
    UnparseableMethodName,
    UnsupportedPredicate,
)
from .execution import (
    CollectionExecution,
    Execution,
    PagedExecution,
    SingleEntityExecution,
)
from .models import (
    DataclassModel,
    collection_name,
    document_to_model,
    model_fields,
    to_document,
)
from .paging import Page, PageRequest, Sort
from .parser import parse_method_name
from .predicate_tree import OrPart, Part, PartType, PredicateTree
from .query import Query
from .query_creator import QueryCreator, build_query
from .query_method import Parameter, ParameterAccessor, ParameterKind, QueryMethod, ReturnShape

__all__ = [
    "C",
    "Condition",
    "ConditionGroup",
    "NotCondition",
    "OrderBy",
    "WhereExpression",
    "CollectionResolver",
    "DocumentStorePort",
    "MethodNameParser",
    "DocumentQuery",
    "QueryDispatcher",
    "QueryError",
    "InvalidArgumentCount",
    "UnsupportedPredicate",
    "UnparseableMethodName",
    "MissingPageRequest",
    "StoreError",
    "StoreUnavailable",
    "StoreTimeout",
    "Execution",
    "CollectionExecution",
    "SingleEntityExecution",
    "PagedExecution",
    "DataclassModel",
    "collection_name",
    "document_to_model",
    "model_fields",
    "to_document",
    "Page",
    "PageRequest",
    "Sort",
    "parse_method_name",
    "OrPart",
    "Part",
    "PartType",
    "PredicateTree",
    "Query",
    "QueryCreator",
    "build_query",
    "Parameter",
    "ParameterAccessor",
    "ParameterKind",
    "QueryMethod",
    "ReturnShape",
]
