"""
Error taxonomy for AQL query execution.

Every error carries a stable ``error_code`` so interfaces can report
failures without inspecting exception types.
"""
from typing import Any, Dict, Optional


class AqlToolError(Exception):
    """Base class for all classified query errors."""

    error_code = "AQL_TOOL_ERROR"

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class LoadError(AqlToolError):
    """Malformed catalog. Fatal at startup."""

    error_code = "LOAD_ERROR"


class QueryNotFound(AqlToolError):
    error_code = "NOT_FOUND"

    def __init__(self, name: str):
        super().__init__(f"Unknown query: {name}", {"query": name})
        self.name = name


class ArgumentValidationError(AqlToolError):
    """Caller-supplied arguments do not match the declared parameters."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, parameter: str, detail: Optional[Dict[str, Any]] = None):
        detail = dict(detail or {})
        detail["parameter"] = parameter
        super().__init__(message, detail)
        self.parameter = parameter


class MissingParameter(ArgumentValidationError):
    error_code = "MISSING_PARAMETER"

    def __init__(self, parameter: str):
        super().__init__(f"Missing required parameter: {parameter}", parameter)


class TypeMismatch(ArgumentValidationError):
    error_code = "TYPE_MISMATCH"

    def __init__(self, parameter: str, expected: str, actual: str):
        super().__init__(
            f"Parameter '{parameter}' expects {expected}, got {actual}",
            parameter,
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class UnknownParameter(ArgumentValidationError):
    error_code = "UNKNOWN_PARAMETER"

    def __init__(self, parameter: str):
        super().__init__(f"Unknown parameter: {parameter}", parameter)


class BindError(AqlToolError):
    error_code = "BIND_ERROR"


class UnsupportedPlaceholder(BindError):
    error_code = "UNSUPPORTED_PLACEHOLDER"

    def __init__(self, placeholder: str, reason: str = "not a valid bind parameter"):
        super().__init__(
            f"Unsupported placeholder '{placeholder}': {reason}",
            {"placeholder": placeholder},
        )
        self.placeholder = placeholder


class RemoteError(AqlToolError):
    """Connection, authentication, server-side or timeout failure."""

    error_code = "REMOTE_ERROR"


class QueryCancelled(RemoteError):
    error_code = "CANCELLED"
