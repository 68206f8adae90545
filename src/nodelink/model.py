"""
Graph model and incremental diff.

The caller owns vertices and edges and may replace them at any time. The
engine keeps per-vertex physics state (position, velocity, pin) in a
separate PositionStore keyed by vertex id, so replacing the data with a fresh
snapshot of the same topology leaves every surviving vertex where it was.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional, Sequence

from .types import (
    Edge,
    EdgeLike,
    Point,
    Style,
    Vertex,
    VertexLike,
    VertexState,
)
from .validation import find_dangling_edges

_VERTEX_FIELDS = ("id", "label", "selected", "expanded", "style")
_STATE_SEEDS = ("x", "y", "vx", "vy", "fx", "fy")


def to_vertex(data: VertexLike) -> Vertex:
    """Normalise a Vertex, dict, or generic object into a Vertex."""
    if isinstance(data, Vertex):
        return data
    if isinstance(data, dict):
        values = dict(data)
    else:
        values = {
            attr: getattr(data, attr)
            for attr in dir(data)
            if not attr.startswith("_") and not callable(getattr(data, attr))
        }
    if "id" not in values or values["id"] is None:
        raise ValueError(f"Vertex requires an id, got {data!r}")
    extras = {k: v for k, v in values.items() if k not in _VERTEX_FIELDS}
    return Vertex(
        id=str(values["id"]),
        label=values.get("label"),
        selected=bool(values.get("selected", False)),
        expanded=bool(values.get("expanded", False)),
        style=Style.coerce(values.get("style")),
        attrs=extras,
    )


def _endpoint_id(value: Any) -> str:
    """Edges may reference vertices by id or by vertex object."""
    if isinstance(value, dict):
        return str(value["id"])
    if hasattr(value, "id"):
        return str(value.id)
    return str(value)


def to_edge(data: EdgeLike) -> Edge:
    """Normalise an Edge, dict, or generic object into an Edge."""
    if isinstance(data, Edge):
        return data
    if isinstance(data, dict):
        get = data.get
    else:

        def get(key: str, default: Any = None) -> Any:
            return getattr(data, key, default)

    source, target = get("source"), get("target")
    if source is None:
        raise ValueError("Edge source cannot be None")
    if target is None:
        raise ValueError("Edge target cannot be None")
    offset = get("offset")
    if isinstance(offset, dict):
        offset = (float(offset.get("x", 0.0)), float(offset.get("y", 0.0)))
    return Edge(
        source=_endpoint_id(source),
        target=_endpoint_id(target),
        directed=bool(get("directed", False)),
        label=get("label"),
        style=Style.coerce(get("style")),
        offset=offset,
    )


def _state_seed(data: VertexLike) -> VertexState:
    """Initial state for a vertex id the engine has not seen yet."""
    state = VertexState()
    for attr in _STATE_SEEDS:
        if isinstance(data, dict):
            value = data.get(attr)
        elif isinstance(data, Vertex):
            value = data.attrs.get(attr)
        else:
            value = getattr(data, attr, None)
        if value is not None:
            setattr(state, attr, float(value))
    return state


class PositionStore:
    """
    Mutable per-vertex state keyed by vertex id.

    This is the only place the engine writes positions; the force
    simulation reads and writes through it.
    """

    def __init__(self) -> None:
        self._states: dict[str, VertexState] = {}

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def get(self, vertex_id: str) -> Optional[VertexState]:
        return self._states.get(vertex_id)

    def __getitem__(self, vertex_id: str) -> VertexState:
        return self._states[vertex_id]

    def ensure(self, vertex_id: str, seed: Optional[VertexState] = None) -> VertexState:
        """Return the state for an id, creating it from `seed` when new."""
        state = self._states.get(vertex_id)
        if state is None:
            state = seed if seed is not None else VertexState()
            self._states[vertex_id] = state
        return state

    def retain(self, vertex_ids: Iterable[str]) -> None:
        """Forget state for every id not in `vertex_ids`."""
        keep = set(vertex_ids)
        for vertex_id in [v for v in self._states if v not in keep]:
            del self._states[vertex_id]

    def set_position(self, vertex_id: str, x: float, y: float) -> None:
        state = self.ensure(vertex_id)
        state.x = float(x)
        state.y = float(y)

    def position(self, vertex_id: str) -> Optional[Point]:
        """(x, y) for a placed vertex, None otherwise."""
        state = self._states.get(vertex_id)
        if state is None or state.x is None or state.y is None:
            return None
        return (state.x, state.y)

    def snapshot(self) -> dict[str, Point]:
        """Copy of every defined position."""
        return {
            vertex_id: (state.x, state.y)
            for vertex_id, state in self._states.items()
            if state.x is not None and state.y is not None
        }


class Graph:
    """
    Immutable view of the current vertex and edge lists.

    Invariant: every edge endpoint is the id of a vertex in the graph.
    """

    def __init__(self, vertices: Sequence[Vertex] = (), edges: Sequence[Edge] = ()) -> None:
        self._vertices: tuple[Vertex, ...] = tuple(vertices)
        self._edges: tuple[Edge, ...] = tuple(edges)
        self._index: dict[str, Vertex] = {v.id: v for v in self._vertices}

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return self._vertices

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    def vertex(self, vertex_id: str) -> Optional[Vertex]:
        return self._index.get(vertex_id)

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self._index

    def __len__(self) -> int:
        return len(self._vertices)

    def __repr__(self) -> str:
        return f"Graph(vertices={len(self._vertices)}, edges={len(self._edges)})"


class GraphModel:
    """
    Holds the current graph and carries vertex state across replacements.

    Example:
        model = GraphModel()
        model.replace({"vertices": [{"id": "a"}], "edges": []})
        model.store.set_position("a", 10, 20)
        model.replace({"vertices": [{"id": "a", "label": "A"}], "edges": []})
        model.store.position("a")  # (10.0, 20.0)
    """

    def __init__(self, store: Optional[PositionStore] = None) -> None:
        self._graph = Graph()
        self._store = store if store is not None else PositionStore()

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def store(self) -> PositionStore:
        return self._store

    def replace(
        self,
        data: Any = None,
        *,
        vertices: Optional[Sequence[VertexLike]] = None,
        edges: Optional[Sequence[EdgeLike]] = None,
    ) -> Graph:
        """
        Replace the current graph.

        Accepts a Graph, a mapping with "vertices"/"edges", or the two
        sequences as keywords. Vertices whose id survives keep their
        position, velocity and pin; the new label/style/flags win. Edges
        that reference a missing vertex are dropped silently. Duplicate
        vertex ids keep their first occurrence.

        Returns:
            The new Graph
        """
        raw_vertices, raw_edges = self._unpack(data, vertices, edges)

        new_vertices: list[Vertex] = []
        seeds: dict[str, VertexLike] = {}
        for item in raw_vertices:
            vertex = to_vertex(item)
            if vertex.id in seeds:
                continue
            seeds[vertex.id] = item
            new_vertices.append(vertex)

        candidate_edges = [to_edge(item) for item in raw_edges]
        dangling = {i for i, _ in find_dangling_edges(candidate_edges, set(seeds))}
        new_edges = [e for i, e in enumerate(candidate_edges) if i not in dangling]

        self._store.retain(seeds)
        for vertex in new_vertices:
            if vertex.id not in self._store:
                self._store.ensure(vertex.id, _state_seed(seeds[vertex.id]))

        self._graph = Graph(new_vertices, new_edges)
        return self._graph

    @staticmethod
    def _unpack(
        data: Any,
        vertices: Optional[Sequence[VertexLike]],
        edges: Optional[Sequence[EdgeLike]],
    ) -> tuple[Sequence[VertexLike], Sequence[EdgeLike]]:
        if isinstance(data, Graph):
            return data.vertices, data.edges
        if isinstance(data, dict):
            vertices = data.get("vertices", vertices)
            edges = data.get("edges", edges)
        elif data is not None:
            vertices = getattr(data, "vertices", vertices)
            edges = getattr(data, "edges", edges)
        return vertices or (), edges or ()


__all__ = [
    "Graph",
    "GraphModel",
    "PositionStore",
    "to_vertex",
    "to_edge",
]
