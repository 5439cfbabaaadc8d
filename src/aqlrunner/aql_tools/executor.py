"""AQL query executor - stateless execution engine."""

import asyncio
import logging
import uuid
from typing import Dict, List, Optional, Any, Union
from datetime import datetime, UTC

import requests
from arango.exceptions import ArangoClientError, ArangoError, ArangoServerError

from .binder import bind_query
from .connection import CancelToken, ConnectionPool, run_cursor
from .cytoscape import to_cytoscape
from .errors import AqlToolError, QueryCancelled, RemoteError
from .models import BoundQuery, QueryDefinition, QueryResult, ExecutionContext
from .normalizer import extract_graph, is_graph, normalize
from .registry import QueryRegistry, RegistryHolder
from .validator import validate_arguments


logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("aql_tools_audit")


class QueryExecutor:
    """
    Stateless query executor.

    Runs lookup -> validate -> bind -> dispatch -> normalize. Any stage
    failure ends the request with exactly one classified error; validation
    and binding failures never reach the database. Nothing is cached and
    nothing is retried.
    """

    def __init__(
        self,
        registry: Union[QueryRegistry, RegistryHolder],
        pool: ConnectionPool,
        graph_export: bool = True,
    ):
        self._registry = registry
        self.pool = pool
        self.graph_export = graph_export

    @property
    def registry(self) -> QueryRegistry:
        """Registry snapshot for one request."""
        if isinstance(self._registry, RegistryHolder):
            return self._registry.registry
        return self._registry

    def list_queries(self) -> List[Dict[str, Any]]:
        return self.registry.list_queries()

    def execute(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
        context: Optional[ExecutionContext] = None,
        cancel: Optional[CancelToken] = None,
    ) -> QueryResult:
        """
        Execute a named query with correlation tracking.

        Args:
            name: Query name as it appears in the catalog
            params: Argument values (untrusted)
            context: Execution context with correlation ID
            cancel: Optional token to abort the request

        Returns:
            QueryResult with rows on success, or one classified error
        """
        # Create context if not provided
        if context is None:
            context = ExecutionContext(
                correlation_id=str(uuid.uuid4()),
                interface='unknown'
            )

        params = params if params is not None else {}
        registry = self.registry
        logger.info(f"{context} Executing query: {name}")

        try:
            query_def = registry.lookup(name)
            validated = validate_arguments(query_def, params)
            bound = bind_query(query_def, validated)

            if cancel is not None and cancel.cancelled:
                raise QueryCancelled("Query cancelled before dispatch")

            start_time = datetime.now(UTC)
            raw = self._dispatch(bound, cancel)
            execution_time = (datetime.now(UTC) - start_time).total_seconds()

            rows = normalize(raw)
            graph = is_graph(raw)

            result = QueryResult(
                success=True,
                rows=rows,
                metadata={
                    'query': query_def.name,
                    'row_count': len(rows),
                    'execution_time_seconds': execution_time,
                    'is_graph': graph,
                },
                correlation_id=context.correlation_id
            )
            if graph and self.graph_export:
                view = extract_graph(rows)
                result.graph = to_cytoscape(view, name=query_def.name)
                result.metadata['stub_vertices'] = len(view.stub_vertex_ids)

            self._audit_log(context, name, params, success=True, row_count=len(rows))
            logger.info(f"{context} Query successful: {len(rows)} rows in {execution_time:.2f}s")
            return result

        except AqlToolError as e:
            level = logging.ERROR if isinstance(e, RemoteError) else logging.WARNING
            logger.log(level, f"{context} {e.error_code}: {e.message}")
            self._audit_log(context, name, params, success=False, error=e.error_code)
            return QueryResult(
                success=False,
                error=e.message,
                error_code=e.error_code,
                error_detail=e.detail,
                correlation_id=context.correlation_id
            )

        except Exception as e:
            error_msg = self._scrub(f"Query execution failed: {e}")
            logger.error(f"{context} {error_msg}", exc_info=True)
            self._audit_log(context, name, params, success=False, error='INTERNAL_ERROR')
            return QueryResult(
                success=False,
                error=error_msg,
                error_code='INTERNAL_ERROR',
                correlation_id=context.correlation_id
            )

    async def execute_async(
        self,
        name: str,
        params: Optional[Dict[str, Any]] = None,
        context: Optional[ExecutionContext] = None,
    ) -> QueryResult:
        """
        Run execute() in a worker thread.

        Cancelling the awaiting task signals the worker, which releases the
        server-side cursor; the CancelledError is re-raised to the caller.
        """
        cancel = CancelToken()
        try:
            return await asyncio.to_thread(self.execute, name, params, context, cancel)
        except asyncio.CancelledError:
            cancel.cancel()
            raise

    def _dispatch(self, bound: BoundQuery, cancel: Optional[CancelToken]) -> List[Any]:
        """Send the bound query to the database and collect raw documents."""
        try:
            with self.pool.acquire() as db:
                return run_cursor(db, bound, self.pool.settings, cancel)
        except AqlToolError:
            raise
        except ArangoServerError as e:
            raise RemoteError(
                self._scrub(f"Database error: {e.error_message or e}"),
                {'http_code': e.http_code, 'error_number': e.error_code},
            ) from None
        except ArangoClientError as e:
            raise RemoteError(self._scrub(f"Database client error: {e}")) from None
        except ArangoError as e:
            raise RemoteError(self._scrub(f"Database operation failed: {e}")) from None
        except requests.Timeout as e:
            raise RemoteError(
                self._scrub(f"Database request timed out: {e}"), {'reason': 'timeout'}
            ) from None
        except requests.RequestException as e:
            raise RemoteError(
                self._scrub(f"Database connection failed: {e}"), {'reason': 'connection'}
            ) from None

    def _scrub(self, message: str) -> str:
        """Remove credentials from a message."""
        password = self.pool.settings.password
        if password:
            message = message.replace(password, '***')
        return message

    def _audit_log(self, context: ExecutionContext, name: str, params: dict,
                   success: bool, row_count: int = 0, error: Optional[str] = None):
        """Log execution for audit trail (argument names only)."""
        audit_logger.info(
            f"{context} query={name!r} params={sorted(str(k) for k in params)} "
            f"success={success} rows={row_count} error={error}"
        )
