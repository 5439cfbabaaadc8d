"""Tests for result normalization and graph export."""

from aqlrunner.aql_tools import RowKind, extract_graph, normalize, to_cytoscape
from aqlrunner.aql_tools.normalizer import is_edge, is_graph, is_vertex

from conftest import FRIENDSHIPS, USERS


class TestNormalize:
    """Tests for normalize."""

    def test_flat_records(self):
        rows = normalize([{"name": "a", "age": 30}, {"name": "b", "age": 40}])
        assert [row.kind for row in rows] == [RowKind.RECORD, RowKind.RECORD]
        assert rows[1].data == {"name": "b", "age": 40}

    def test_vertices_alone_are_records(self):
        # No edges: a plain document query, not a graph stream
        rows = normalize(USERS)
        assert all(row.kind == RowKind.RECORD for row in rows)

    def test_graph_stream_tagged(self):
        rows = normalize(USERS + FRIENDSHIPS)
        kinds = [row.kind for row in rows]
        assert kinds == [RowKind.VERTEX] * 3 + [RowKind.EDGE] * 2

    def test_edge_has_id_but_is_edge(self):
        assert is_edge(FRIENDSHIPS[0])
        assert not is_vertex(FRIENDSHIPS[0])

    def test_mixed_with_plain_record_is_not_graph(self):
        rows = normalize(USERS + FRIENDSHIPS + [{"total": 5}])
        assert all(row.kind == RowKind.RECORD for row in rows)

    def test_malformed_handle_is_not_graph(self):
        assert not is_graph([{"_from": "users/1", "_to": "no_slash"}])
        assert not is_graph([{"_id": "a/b/c"}, {"_from": "a/b", "_to": "a/c"}])

    def test_scalars_wrapped(self):
        rows = normalize([3, None, ["x"]])
        assert [row.data for row in rows] == [{"value": 3}, {"value": None}, {"value": ["x"]}]
        assert all(row.kind == RowKind.RECORD for row in rows)

    def test_empty(self):
        assert normalize([]) == []
        assert not is_graph([])

    def test_rows_are_copies(self):
        doc = {"name": "a"}
        rows = normalize([doc])
        doc["name"] = "b"
        assert rows[0].data == {"name": "a"}


class TestGraphExport:
    """Tests for extract_graph and to_cytoscape."""

    def test_stub_vertices_for_missing_endpoints(self):
        view = extract_graph(normalize(USERS + FRIENDSHIPS))
        assert len(view.edges) == 2
        assert view.stub_vertex_ids == ["users/9"]
        assert {"_id": "users/9"} in view.vertices
        assert len(view.vertices) == 4

    def test_cytoscape_document(self):
        doc = to_cytoscape(extract_graph(normalize(USERS + FRIENDSHIPS)), name="Get user graph")
        assert doc["format_version"] == "1.0"
        assert doc["data"]["name"] == "Get user graph"

        nodes = {n["data"]["id"]: n["data"] for n in doc["elements"]["nodes"]}
        assert nodes["users/1"]["name"] == "Alice"
        assert nodes["users/1"]["age"] == 30
        assert nodes["users/9"]["name"] == "users/9"
        assert "_key" not in nodes["users/1"]

        edges = doc["elements"]["edges"]
        assert edges[0]["data"] == {"id": "10", "source": "users/1", "target": "users/3", "since": 2020}

    def test_edge_id_fallback(self):
        rows = normalize([{"_from": "a/1", "_to": "a/2"}])
        doc = to_cytoscape(extract_graph(rows))
        assert doc["elements"]["edges"][0]["data"]["id"] == "a/1->a/2"

    def test_structural_keys_not_overwritten(self):
        rows = normalize([
            {"_id": "users/1", "id": 501},
            {"_id": "users/2", "id": 502},
            {"_key": "k1", "_from": "users/1", "_to": "users/2", "id": "x", "source": "import"},
        ])
        doc = to_cytoscape(extract_graph(rows))

        node_ids = {n["data"]["id"] for n in doc["elements"]["nodes"]}
        edge = doc["elements"]["edges"][0]["data"]
        assert node_ids == {"users/1", "users/2"}
        assert edge["id"] == "k1"
        assert edge["source"] == "users/1"
        assert edge["target"] == "users/2"
        assert {edge["source"], edge["target"]} <= node_ids
