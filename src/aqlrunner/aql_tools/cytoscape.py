"""Convert graph query results to Cytoscape.js JSON."""

from typing import Any, Dict, List, Set

from .normalizer import GraphView


GENERATED_BY = "aql_runner"


def _attributes(docs: List[Dict[str, Any]]) -> Set[str]:
    # Skip ArangoDB system attributes (_id, _key, _rev, _from, _to)
    attrs = set()
    for doc in docs:
        attrs.update(k for k in doc if not k.startswith("_"))
    return attrs


def to_cytoscape(graph: GraphView, name: str = "ArangoDB Graph") -> Dict[str, Any]:
    """
    Build a Cytoscape.js network document.

    Nodes use ``_id`` as both id and default name. Edges use ``_key`` as id,
    falling back to ``_id``, then to ``source->target``.
    """
    vertex_attrs = _attributes(graph.vertices)
    edge_attrs = _attributes(graph.edges)

    nodes = []
    for vertex in graph.vertices:
        data = {"name": vertex["_id"]}
        for attr in vertex_attrs:
            if attr in vertex:
                data[attr] = vertex[attr]
        # Structural keys win over document attributes of the same name
        data["id"] = vertex["_id"]
        nodes.append({"data": data})

    edges = []
    for edge in graph.edges:
        edge_id = edge.get("_key") or edge.get("_id") or f"{edge['_from']}->{edge['_to']}"
        data = {attr: edge[attr] for attr in edge_attrs if attr in edge}
        data.update(id=edge_id, source=edge["_from"], target=edge["_to"])
        edges.append({"data": data})

    return {
        "format_version": "1.0",
        "generated_by": GENERATED_BY,
        "target_cytoscapejs_version": "~3.0",
        "data": {"shared_name": name, "name": name},
        "elements": {"nodes": nodes, "edges": edges},
    }
