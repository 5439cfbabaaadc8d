"""
Normalize raw cursor output into tagged rows.

Structural rule for graph streams:

- an *edge* is a mapping whose ``_from`` and ``_to`` are both document
  handles (strings with exactly one '/', e.g. ``users/42``);
- a *vertex* is any other mapping whose ``_id`` is a document handle.

A result is a graph stream when it holds at least one edge and every
element is a vertex or an edge. Graph stream rows are tagged ``vertex`` or
``edge``; everything else is tagged ``record``. Non-mapping elements
(``RETURN COUNT(...)``, ``RETURN [a, b]``) become ``{"value": element}``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from .models import Row, RowKind


def _is_handle(value: Any) -> bool:
    return isinstance(value, str) and value.count("/") == 1 and not value.startswith("/") \
        and not value.endswith("/")


def is_edge(doc: Any) -> bool:
    return isinstance(doc, Mapping) and _is_handle(doc.get("_from")) and _is_handle(doc.get("_to"))


def is_vertex(doc: Any) -> bool:
    return isinstance(doc, Mapping) and not is_edge(doc) and _is_handle(doc.get("_id"))


def is_graph(raw: List[Any]) -> bool:
    """True when the result is a vertex/edge stream with at least one edge."""
    has_edge = False
    for doc in raw:
        if is_edge(doc):
            has_edge = True
        elif not is_vertex(doc):
            return False
    return has_edge


def normalize(raw: Iterable[Any]) -> List[Row]:
    """Convert driver documents into Row objects."""
    docs = list(raw)

    if is_graph(docs):
        return [
            Row(RowKind.EDGE if is_edge(doc) else RowKind.VERTEX, dict(doc))
            for doc in docs
        ]

    rows = []
    for doc in docs:
        if isinstance(doc, Mapping):
            rows.append(Row(RowKind.RECORD, dict(doc)))
        else:
            rows.append(Row(RowKind.RECORD, {"value": doc}))
    return rows


@dataclass
class GraphView:
    """Vertices and edges of a graph stream, with endpoint stubs filled in."""
    vertices: List[Dict[str, Any]] = field(default_factory=list)
    edges: List[Dict[str, Any]] = field(default_factory=list)
    stub_vertex_ids: List[str] = field(default_factory=list)


def extract_graph(rows: List[Row]) -> GraphView:
    """
    Split tagged rows into vertices and edges.

    Edge endpoints missing from the result are added as ``{"_id": handle}``
    so that every edge references a known vertex.
    """
    view = GraphView()
    seen_ids = set()
    needed_ids: List[str] = []

    for row in rows:
        if row.kind == RowKind.VERTEX:
            view.vertices.append(row.data)
            seen_ids.add(row.data["_id"])
        elif row.kind == RowKind.EDGE:
            view.edges.append(row.data)
            for handle in (row.data["_from"], row.data["_to"]):
                if handle not in needed_ids:
                    needed_ids.append(handle)

    for handle in needed_ids:
        if handle not in seen_ids:
            view.vertices.append({"_id": handle})
            view.stub_vertex_ids.append(handle)

    return view
