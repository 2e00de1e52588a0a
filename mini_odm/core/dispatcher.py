"""Query dispatcher: method + arguments in, shaped result out."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence, cast

from .contracts import CollectionResolver, DocumentStorePort, MethodNameParser
from .errors import MissingPageRequest
from .execution import CollectionExecution, Execution, PagedExecution, SingleEntityExecution
from .models import collection_name
from .paging import PageRequest
from .parser import parse_method_name
from .predicate_tree import PredicateTree
from .query_creator import QueryCreator
from .query_method import ParameterAccessor, QueryMethod, ReturnShape

logger = logging.getLogger(__name__)


class QueryDispatcher:
    """Derives, routes and runs queries against one document store.

    The dispatcher holds no per-call state; concurrent `dispatch` calls only
    share the store.
    """

    def __init__(
        self,
        store: DocumentStorePort,
        *,
        parser: MethodNameParser = parse_method_name,
        collection_resolver: CollectionResolver = collection_name,
    ) -> None:
        """Create a dispatcher.

        Args:
            store: Document store adapter used for every read.
            parser: Method-name parser producing predicate trees.
            collection_resolver: Maps a domain type to its collection name.
        """

        self.store = store
        self.parser = parser
        self.collection_resolver = collection_resolver

    def dispatch(self, method: QueryMethod, arguments: Sequence[Any]) -> Any:
        """Run `method` with positional `arguments` and shape the result.

        Returns:
            A list for collection methods, the first entity or `None` for
            single methods, a `Page` for page methods.

        Raises:
            UnparseableMethodName: From the parser.
            MissingPageRequest: Page method called without a `PageRequest`.
            InvalidArgumentCount: Fewer bound values than the tree requires.
            UnsupportedPredicate: A part has no document query rendering.
            StoreUnavailable, StoreTimeout: From the store, unchanged.
        """

        tree = self.parser(method.name, method.domain_type)
        return self.dispatch_tree(method, tree, arguments)

    def dispatch_tree(
        self, method: QueryMethod, tree: PredicateTree, arguments: Sequence[Any]
    ) -> Any:
        """Like `dispatch`, for a predicate tree that was parsed beforehand."""

        accessor = ParameterAccessor(method.parameters, arguments)
        if method.is_page_query and accessor.page_request is None:
            raise MissingPageRequest(
                f"Query method {method.name!r} returns a page but no PageRequest was passed."
            )

        creator = QueryCreator(
            tree,
            accessor,
            domain_type=method.domain_type,
            method_name=method.name,
        )
        query = creator.create_query()
        execution = self._select_execution(method, accessor, creator.create_query)

        logger.debug(
            "Dispatching %s via %s with filter %r",
            method.name,
            type(execution).__name__,
            query.to_filter_document(),
        )
        return execution.execute(query)

    def _select_execution(
        self,
        method: QueryMethod,
        accessor: ParameterAccessor,
        rebuild: Callable[[], Any],
    ) -> Execution:
        collection = self.collection_resolver(method.domain_type)
        if method.return_shape is ReturnShape.COLLECTION:
            return CollectionExecution(self.store, collection, method.domain_type)
        if method.return_shape is ReturnShape.PAGE:
            return PagedExecution(
                self.store,
                collection,
                method.domain_type,
                page_request=cast(PageRequest, accessor.page_request),
                rebuild=rebuild,
            )
        return SingleEntityExecution(self.store, collection, method.domain_type)


class DocumentQuery:
    """One query method bound to a dispatcher.

    The method name is parsed once here, so grammar errors surface when the
    query is declared rather than when it is first called.
    """

    def __init__(
        self,
        method: QueryMethod | Callable[..., Any],
        dispatcher: QueryDispatcher,
        *,
        domain_type: Any = None,
    ) -> None:
        if not isinstance(method, QueryMethod):
            method = QueryMethod.from_callable(method, domain_type=domain_type)
        self.method = method
        self.dispatcher = dispatcher
        self.tree = dispatcher.parser(method.name, method.domain_type)

    def execute(self, *arguments: Any) -> Any:
        return self.dispatcher.dispatch_tree(self.method, self.tree, arguments)

    def __call__(self, *arguments: Any) -> Any:
        return self.execute(*arguments)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.method.name!r}, {self.method.return_shape.value})"

