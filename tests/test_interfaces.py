"""Tests for the MCP interface, health checks and CLI entry point."""

import asyncio
import json

import pytest

from aqlrunner.interfaces.mcp.converters import QueryToMCPConverter, tool_name_for
from aqlrunner.interfaces.mcp.server import AQLQueryMCPServer
from aqlrunner.main import main
from aqlrunner.services.health import check_database, check_registry
from aqlrunner.aql_tools import load_registry

from conftest import SAMPLE_CATALOG


class TestConverter:
    """Tests for QueryToMCPConverter."""

    def test_tool_name(self):
        assert tool_name_for("Get user graph") == "get_user_graph"
        assert tool_name_for("Search Products!") == "search_products"
        assert tool_name_for("***") == "query"

    def test_convert_schema(self, registry):
        tool = QueryToMCPConverter().convert(registry.lookup("Search Products"))
        schema = tool["inputSchema"]
        assert tool["name"] == "search_products"
        assert schema["properties"]["category"]["type"] == "string"
        assert schema["properties"]["minPrice"]["type"] == "number"
        assert schema["required"] == ["category", "minPrice"]
        assert schema["additionalProperties"] is False
        assert tool["metadata"]["query_name"] == "Search Products"

    def test_convert_all_deduplicates(self, catalog):
        catalog["queries"].append(dict(catalog["queries"][0], name="get users"))
        tools = QueryToMCPConverter().convert_all(load_registry(catalog).queries)
        names = [t["name"] for t in tools]
        assert names == ["get_users", "search_products", "get_user_graph", "get_users_2"]


class TestMCPServer:
    """Tests for AQLQueryMCPServer tool handling."""

    def test_list_tools(self, executor):
        server = AQLQueryMCPServer(executor)
        assert [t.name for t in server.list_tools()] == [
            "get_users", "search_products", "get_user_graph"
        ]

    def test_call_tool(self, executor):
        server = AQLQueryMCPServer(executor)
        content = asyncio.run(server.call_tool("get_users", {"minAge": 21}))
        payload = json.loads(content[0].text)
        assert payload["success"] is True
        assert len(payload["rows"]) == 2
        assert payload["rows"][0]["kind"] == "record"

    def test_call_tool_validation_error(self, executor):
        server = AQLQueryMCPServer(executor)
        content = asyncio.run(server.call_tool("search_products", {"category": "books"}))
        payload = json.loads(content[0].text)
        assert payload["success"] is False
        assert payload["error_code"] == "MISSING_PARAMETER"

    def test_unknown_tool(self, executor):
        server = AQLQueryMCPServer(executor)
        content = asyncio.run(server.call_tool("nope", {}))
        assert json.loads(content[0].text)["error_code"] == "NOT_FOUND"


class TestHealth:
    """Tests for health checks."""

    def test_database_healthy(self, pool, fake_db):
        fake_db.version.return_value = "3.11.5"
        report = check_database(pool)
        assert report["healthy"] is True
        assert report["details"]["server_version"] == "3.11.5"

    def test_database_unhealthy_scrubs_password(self, pool, fake_db):
        fake_db.version.side_effect = RuntimeError("auth failed for root:s3cret-pw")
        report = check_database(pool)
        assert report["healthy"] is False
        assert "s3cret-pw" not in report["error"]

    def test_registry(self, registry):
        assert check_registry(registry)["details"]["queries_loaded"] == 3


class TestCLI:
    """Tests for the command-line entry point."""

    @pytest.fixture
    def catalog_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for var in ("ARANGO_DATABASE", "ARANGO_POOL_SIZE", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(SAMPLE_CATALOG))
        # main() writes --catalog into the environment; monkeypatch restores it
        monkeypatch.setenv("AQL_CATALOG_PATH", str(path))
        return path

    def test_list(self, catalog_file, capsys):
        assert main(["--list", "--catalog", str(catalog_file)]) == 0
        listed = json.loads(capsys.readouterr().out)
        assert [q["name"] for q in listed] == ["Get Users", "Search Products", "Get user graph"]

    def test_query_validation_failure(self, catalog_file, capsys):
        code = main(["--query", "Get Users", "--args", '{"minAge": "21"}', "--catalog", str(catalog_file)])
        assert code == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload["error_code"] == "TYPE_MISMATCH"

    def test_bad_args_json(self, catalog_file):
        assert main(["--query", "Get Users", "--args", "{nope", "--catalog", str(catalog_file)]) == 2

    def test_bad_catalog(self, tmp_path, catalog_file):
        bad = tmp_path / "bad.json"
        data = dict(SAMPLE_CATALOG, queries=SAMPLE_CATALOG["queries"] * 2)
        bad.write_text(json.dumps(data))
        assert main(["--list", "--catalog", str(bad)]) == 2
