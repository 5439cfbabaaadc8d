"""AQL query execution engine with catalog-based definitions."""
from .models import (
    ParameterType,
    QueryParameter,
    QueryDefinition,
    Catalog,
    Row,
    RowKind,
    BoundQuery,
    QueryResult,
    ExecutionContext,
)
from .errors import (
    AqlToolError,
    LoadError,
    QueryNotFound,
    ArgumentValidationError,
    MissingParameter,
    TypeMismatch,
    UnknownParameter,
    BindError,
    UnsupportedPlaceholder,
    RemoteError,
    QueryCancelled,
)
from .registry import QueryRegistry, RegistryHolder, load_registry
from .validator import TypedValue, ValidatedArguments, validate_arguments
from .binder import bind_query
from .normalizer import GraphView, extract_graph, normalize
from .cytoscape import to_cytoscape
from .connection import CancelToken, ConnectionPool, ConnectionSettings
from .executor import QueryExecutor

__all__ = [
    "ParameterType",
    "QueryParameter",
    "QueryDefinition",
    "Catalog",
    "Row",
    "RowKind",
    "BoundQuery",
    "QueryResult",
    "ExecutionContext",
    "AqlToolError",
    "LoadError",
    "QueryNotFound",
    "ArgumentValidationError",
    "MissingParameter",
    "TypeMismatch",
    "UnknownParameter",
    "BindError",
    "UnsupportedPlaceholder",
    "RemoteError",
    "QueryCancelled",
    "QueryRegistry",
    "RegistryHolder",
    "load_registry",
    "TypedValue",
    "ValidatedArguments",
    "validate_arguments",
    "bind_query",
    "GraphView",
    "extract_graph",
    "normalize",
    "to_cytoscape",
    "CancelToken",
    "ConnectionPool",
    "ConnectionSettings",
    "QueryExecutor",
]
