"""
Domain models for AQL query execution.
Provides type-safe catalog configuration and result handling.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator, ConfigDict

from .placeholders import BIND_NAME_RE, scan_placeholders


logger = logging.getLogger(__name__)


class ParameterType(str, Enum):
    """Declared type of a query parameter."""
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class QueryParameter(BaseModel):
    """Parameter definition for a query."""
    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    parameter_type: ParameterType = Field(..., description="number, string, boolean, array or object")
    required: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not BIND_NAME_RE.fullmatch(v):
            raise ValueError(f"Invalid parameter name: {v!r}")
        return v


class QueryDefinition(BaseModel):
    """Named AQL template plus its parameter schema."""
    model_config = ConfigDict(extra='forbid', frozen=True)  # Catch typos in the catalog

    name: str
    description: str = ""
    query: str
    parameters: List[QueryParameter] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Query name cannot be empty")
        return v

    @field_validator('query')
    @classmethod
    def validate_query(cls, v):
        if not v.strip():
            raise ValueError("Query cannot be empty")
        return v

    @model_validator(mode='after')
    def check_placeholders(self):
        declared = [p.name for p in self.parameters]
        duplicates = sorted({n for n in declared if declared.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate parameter names: {', '.join(duplicates)}")

        scan = scan_placeholders(self.query)
        undeclared = [n for n in scan.names if n not in declared]
        if undeclared:
            raise ValueError(
                f"Query '{self.name}' references undeclared placeholders: "
                + ", ".join(f"@{n}" for n in undeclared)
            )

        unused = [n for n in declared if n not in scan.names]
        if unused:
            logger.warning(f"Query '{self.name}' declares unused parameters: {', '.join(unused)}")
        if scan.unsupported:
            logger.warning(
                f"Query '{self.name}' contains unsupported placeholders: {', '.join(scan.unsupported)}"
            )
        return self

    def get_parameter(self, name: str) -> Optional[QueryParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


class Catalog(BaseModel):
    """Catalog document: connection settings and query definitions."""
    model_config = ConfigDict(extra='forbid')

    arangodb_endpoint: str
    username: str
    password: SecretStr
    database: Optional[str] = None
    queries: List[QueryDefinition] = Field(default_factory=list)

    @field_validator('arangodb_endpoint')
    @classmethod
    def validate_endpoint(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"arangodb_endpoint must be an http(s) URL, got {v!r}")
        return v

    @model_validator(mode='after')
    def check_unique_names(self):
        seen = set()
        duplicates = []
        for query in self.queries:
            if query.name in seen:
                duplicates.append(query.name)
            seen.add(query.name)
        if duplicates:
            raise ValueError(f"Duplicate query names: {', '.join(duplicates)}")
        return self


class RowKind(str, Enum):
    RECORD = "record"
    VERTEX = "vertex"
    EDGE = "edge"


@dataclass(frozen=True)
class Row:
    """One normalized result row, tagged with its origin."""
    kind: RowKind
    data: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {'kind': self.kind.value, 'data': self.data}


@dataclass(frozen=True)
class BoundQuery:
    """Template text plus the values that travel through bind variables."""
    query: str
    bind_vars: Dict[str, Any]


@dataclass
class QueryResult:
    """
    Result of query execution.
    Used across all interfaces to maintain consistent error handling.
    """
    success: bool
    rows: Optional[List[Row]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    error_detail: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    correlation_id: Optional[str] = None
    graph: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Ensure metadata includes execution timing."""
        if 'executed_at' not in self.metadata:
            from datetime import datetime, UTC
            self.metadata['executed_at'] = datetime.now(UTC).isoformat()

    @property
    def data(self) -> Optional[List[Dict[str, Any]]]:
        """Row payloads without their kind tags."""
        if self.rows is None:
            return None
        return [row.data for row in self.rows]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for MCP JSON responses)."""
        return {
            'success': self.success,
            'rows': [row.to_dict() for row in self.rows] if self.rows is not None else None,
            'error': self.error,
            'error_code': self.error_code,
            'error_detail': self.error_detail,
            'metadata': self.metadata,
            'correlation_id': self.correlation_id,
            'graph': self.graph,
        }


@dataclass
class ExecutionContext:
    """Context passed through execution layers."""
    correlation_id: str
    interface: str  # 'cli', 'mcp' or 'api'
    user_id: Optional[str] = None

    def __str__(self):
        return f"[{self.correlation_id}] {self.interface}:{self.user_id or 'unknown'}"
