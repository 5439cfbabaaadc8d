"""MCP interface for catalog queries."""
