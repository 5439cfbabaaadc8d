"""Check caller arguments against a query's declared parameter schema."""

import copy
import math
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Optional

from .errors import MissingParameter, TypeMismatch, UnknownParameter
from .models import ParameterType, QueryDefinition


@dataclass(frozen=True)
class TypedValue:
    """A validated argument tagged with its declared type."""
    parameter_type: ParameterType
    value: Any


class ValidatedArguments(Mapping):
    """Read-only mapping of parameter name to TypedValue."""

    def __init__(self, values: Dict[str, TypedValue]):
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, name: str) -> TypedValue:
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"ValidatedArguments({dict(self._values)!r})"

    def plain(self) -> Dict[str, Any]:
        """Untagged copy of the values."""
        return {name: copy.deepcopy(tv.value) for name, tv in self._values.items()}


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        if all(isinstance(k, str) for k in value):
            return "object"
        return "object with non-string keys"
    return type(value).__name__


def _coerce_number(value: Any) -> Optional[Any]:
    # bool is an int subclass, exclude it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _coerce_string(value: Any) -> Optional[Any]:
    return value if isinstance(value, str) else None


def _coerce_boolean(value: Any) -> Optional[Any]:
    return value if isinstance(value, bool) else None


def _coerce_array(value: Any) -> Optional[Any]:
    if isinstance(value, (list, tuple)):
        return copy.deepcopy(list(value))
    return None


def _coerce_object(value: Any) -> Optional[Any]:
    if isinstance(value, Mapping) and all(isinstance(k, str) for k in value):
        return copy.deepcopy(dict(value))
    return None


# One entry per ParameterType
_COERCERS: Dict[ParameterType, Callable[[Any], Optional[Any]]] = {
    ParameterType.NUMBER: _coerce_number,
    ParameterType.STRING: _coerce_string,
    ParameterType.BOOLEAN: _coerce_boolean,
    ParameterType.ARRAY: _coerce_array,
    ParameterType.OBJECT: _coerce_object,
}


def validate_arguments(query_def: QueryDefinition, arguments: Optional[Mapping]) -> ValidatedArguments:
    """
    Validate arguments against the declared parameters.

    Declared parameters are checked in order, then undeclared arguments
    are rejected. The first failure is raised.

    Args:
        query_def: Loaded query definition
        arguments: Caller-supplied values (untrusted)

    Returns:
        ValidatedArguments holding type-tagged copies of the values

    Raises:
        MissingParameter, TypeMismatch, UnknownParameter
    """
    arguments = arguments or {}
    validated: Dict[str, TypedValue] = {}

    for param in query_def.parameters:
        if param.name not in arguments:
            if param.required:
                raise MissingParameter(param.name)
            continue

        raw = arguments[param.name]
        coerced = _COERCERS[param.parameter_type](raw)
        if coerced is None:
            raise TypeMismatch(param.name, param.parameter_type.value, _type_name(raw))

        # Scalars are immutable; structured values were deep-copied by their coercer
        validated[param.name] = TypedValue(param.parameter_type, coerced)

    declared = {p.name for p in query_def.parameters}
    for name in arguments:
        if name not in declared:
            raise UnknownParameter(str(name))

    return ValidatedArguments(validated)
