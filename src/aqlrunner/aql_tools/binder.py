"""Pair a query template with driver bind variables."""

import logging
from typing import Any, Dict

from .errors import UnknownParameter, UnsupportedPlaceholder
from .models import BoundQuery, ParameterType, QueryDefinition
from .placeholders import scan_placeholders
from .validator import ValidatedArguments


logger = logging.getLogger(__name__)


def bind_query(query_def: QueryDefinition, arguments: ValidatedArguments) -> BoundQuery:
    """
    Build the bind-variable mapping for a validated request.

    The template is passed through unchanged; argument values only ever
    reach the driver through ``bind_vars``. Optional parameters that were
    not supplied are bound as null.

    Raises:
        UnsupportedPlaceholder: template uses a placeholder the driver cannot bind
    """
    scan = scan_placeholders(query_def.query)
    if scan.unsupported:
        raise UnsupportedPlaceholder(scan.unsupported[0])

    bind_vars: Dict[str, Any] = {}
    for placeholder in scan.placeholders:
        if placeholder.bind_key in bind_vars:
            continue

        param = query_def.get_parameter(placeholder.name)
        if param is None:
            # Registry rejects these at load time; only reachable with hand-built definitions
            raise UnknownParameter(placeholder.name)

        if placeholder.collection and param.parameter_type != ParameterType.STRING:
            raise UnsupportedPlaceholder(
                placeholder.token,
                f"collection placeholder requires a string parameter, "
                f"'{param.name}' is {param.parameter_type.value}",
            )

        typed = arguments.get(placeholder.name)
        bind_vars[placeholder.bind_key] = typed.value if typed is not None else None

    logger.debug(f"Bound '{query_def.name}' with variables: {', '.join(bind_vars) or '(none)'}")
    return BoundQuery(query=query_def.query, bind_vars=bind_vars)
