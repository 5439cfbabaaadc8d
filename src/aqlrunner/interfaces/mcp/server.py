"""
MCP server exposing catalog AQL queries as tools.
Uses stdio transport for local clients.
"""
import sys
import json
import logging
import os
import uuid
from typing import Dict, Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp import types

from aqlrunner.config import load_config
from aqlrunner.aql_tools import (
    ConnectionPool,
    ExecutionContext,
    QueryExecutor,
    RegistryHolder,
)
from .converters import QueryToMCPConverter


logger = logging.getLogger(__name__)


class AQLQueryMCPServer:
    """MCP server for AQL query tools."""

    def __init__(self, executor: QueryExecutor):
        self.server = Server("aql-query-server")
        self.executor = executor
        self.converter = QueryToMCPConverter()

        # Convert all queries to MCP tools
        self.tools = self._build_tools()

        # Register handlers
        self._register_handlers()

        logger.info(f"MCP Server initialized with {len(self.tools)} tools")

    def _build_tools(self) -> Dict[str, Dict[str, Any]]:
        """Build MCP tools from query definitions."""
        tools_list = self.converter.convert_all(self.executor.registry.queries)
        # Index by name for fast lookup
        return {tool['name']: tool for tool in tools_list}

    def list_tools(self) -> list[types.Tool]:
        return [
            types.Tool(
                name=tool['name'],
                description=tool['description'],
                inputSchema=tool['inputSchema']
            )
            for tool in self.tools.values()
        ]

    async def call_tool(self, name: str, arguments: dict) -> list[types.TextContent]:
        """Execute a tool (AQL query) and return the result as JSON text."""
        tool_def = self.tools.get(name)
        if not tool_def:
            error_msg = f"Unknown tool: {name}"
            logger.error(error_msg)
            return [types.TextContent(
                type="text",
                text=json.dumps({'error': error_msg, 'error_code': 'NOT_FOUND', 'success': False})
            )]

        context = ExecutionContext(
            correlation_id=str(uuid.uuid4()),
            interface='mcp',
            user_id='mcp_client'
        )

        result = await self.executor.execute_async(
            tool_def['metadata']['query_name'], arguments or {}, context
        )

        return [types.TextContent(
            type="text",
            text=json.dumps(result.to_dict(), indent=2, default=str)
        )]

    def _register_handlers(self):
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            """Return list of available tools."""
            return self.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
            return await self.call_tool(name, arguments)

    async def run(self):
        """Serve MCP over stdio until the client disconnects."""
        logger.info("Starting MCP server on stdio...")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


def build_executor() -> QueryExecutor:
    """Load config and catalog, and wire the executor."""
    config = load_config()
    holder = RegistryHolder.from_path(config.catalog_path)
    pool = ConnectionPool(config.connection_settings(holder.registry.catalog))
    return QueryExecutor(holder, pool)


async def main():
    """Entry point for MCP server."""
    os.makedirs('logs', exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler('logs/mcp_server.log'),
            logging.StreamHandler(sys.stderr)  # MCP uses stdout for protocol
        ]
    )

    executor = build_executor()
    server = AQLQueryMCPServer(executor)
    try:
        await server.run()
    finally:
        executor.pool.close()


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())
