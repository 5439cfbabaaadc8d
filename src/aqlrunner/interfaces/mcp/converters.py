"""
Convert catalog query definitions to MCP tool schemas.
"""
import logging
import re
from typing import Dict, List, Any
from aqlrunner.aql_tools import ParameterType, QueryDefinition


logger = logging.getLogger(__name__)

# Catalog parameter types map 1:1 onto JSON Schema types
JSON_SCHEMA_TYPES = {
    ParameterType.NUMBER: 'number',
    ParameterType.STRING: 'string',
    ParameterType.BOOLEAN: 'boolean',
    ParameterType.ARRAY: 'array',
    ParameterType.OBJECT: 'object',
}


def tool_name_for(query_name: str) -> str:
    """'Get user graph' -> 'get_user_graph'"""
    name = re.sub(r'[^a-z0-9]+', '_', query_name.lower()).strip('_')
    return name or 'query'


class QueryToMCPConverter:
    """Converts QueryDefinition to MCP tool schema."""

    def convert(self, query_def: QueryDefinition, tool_name: str = None) -> Dict[str, Any]:
        """
        Convert a single query to MCP tool schema.

        Args:
            query_def: Validated query definition
            tool_name: Override for the derived tool name

        Returns:
            MCP tool schema dict
        """
        properties = {}
        required = []

        for param in query_def.parameters:
            properties[param.name] = {
                'type': JSON_SCHEMA_TYPES[param.parameter_type],
                'description': f"{param.name} ({param.parameter_type.value})",
            }
            if param.required:
                required.append(param.name)

        return {
            'name': tool_name or tool_name_for(query_def.name),
            'description': query_def.description or query_def.name,
            'inputSchema': {
                'type': 'object',
                'properties': properties,
                'required': required,
                'additionalProperties': False,
            },
            'metadata': {
                'query_name': query_def.name,
            }
        }

    def convert_all(self, queries: Dict[str, QueryDefinition]) -> List[Dict[str, Any]]:
        """Convert all queries to MCP tools, de-duplicating derived names."""
        tools = []
        used = set()
        for query_def in queries.values():
            base = tool_name_for(query_def.name)
            name = base
            suffix = 2
            while name in used:
                name = f"{base}_{suffix}"
                suffix += 1
            used.add(name)
            tools.append(self.convert(query_def, tool_name=name))
        logger.debug(f"Converted {len(tools)} queries to MCP tools")
        return tools
