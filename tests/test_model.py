"""
Tests for the graph model and its incremental diff.
"""

from types import SimpleNamespace

import pytest

from nodelink.model import Graph, GraphModel, PositionStore, to_edge, to_vertex
from nodelink.types import Edge, Style, Vertex, VertexState

# =============================================================================
# Test Fixtures
# =============================================================================


def create_path_data(label_a=None):
    """Create a three-vertex path a -> b -> c."""
    return {
        "vertices": [
            {"id": "a", "label": label_a},
            {"id": "b"},
            {"id": "c"},
        ],
        "edges": [
            {"source": "a", "target": "b", "directed": True},
            {"source": "b", "target": "c"},
        ],
    }


# =============================================================================
# Normalisation Tests
# =============================================================================


class TestToVertex:
    """Tests for vertex normalisation."""

    def test_dict(self):
        """Dict keys map onto vertex fields."""
        vertex = to_vertex({"id": "a", "label": "A", "selected": True})
        assert vertex.id == "a"
        assert vertex.label == "A"
        assert vertex.selected is True
        assert vertex.expanded is False

    def test_numeric_id_becomes_string(self):
        """Ids are compared as strings."""
        assert to_vertex({"id": 7}).id == "7"

    def test_extra_keys_kept_in_attrs(self):
        """Unknown keys are preserved for the caller."""
        vertex = to_vertex({"id": "a", "group": 3})
        assert vertex.attrs == {"group": 3}

    def test_object(self):
        """Generic objects are read by attribute."""
        vertex = to_vertex(SimpleNamespace(id="a", label="A"))
        assert vertex.id == "a"
        assert vertex.label == "A"

    def test_camel_case_style(self):
        """Style dicts accept camel case keys."""
        vertex = to_vertex({"id": "a", "style": {"fillColor": "#fff", "fillRadius": 30}})
        assert vertex.color == "#fff"
        assert vertex.radius == 30.0

    def test_missing_id_raises(self):
        """A vertex needs an id."""
        with pytest.raises(ValueError, match="requires an id"):
            to_vertex({"label": "orphan"})

    def test_vertex_passthrough(self):
        """Vertex instances are returned unchanged."""
        vertex = Vertex("a")
        assert to_vertex(vertex) is vertex


class TestToEdge:
    """Tests for edge normalisation."""

    def test_dict(self):
        """Dict keys map onto edge fields."""
        edge = to_edge({"source": "a", "target": "b", "directed": True})
        assert edge == Edge("a", "b", directed=True)

    def test_endpoints_by_object(self):
        """Endpoints may be vertex objects or dicts with an id."""
        edge = to_edge({"source": {"id": "a"}, "target": Vertex("b")})
        assert (edge.source, edge.target) == ("a", "b")

    def test_numeric_endpoints(self):
        """Numeric endpoints match numeric vertex ids."""
        edge = to_edge({"source": 1, "target": 2})
        assert (edge.source, edge.target) == ("1", "2")

    def test_offset_dict(self):
        """Offsets given as {x, y} become tuples."""
        edge = to_edge({"source": "a", "target": "b", "offset": {"x": 1, "y": 2}})
        assert edge.offset == (1.0, 2.0)

    def test_none_source_raises(self):
        """Source cannot be None."""
        with pytest.raises(ValueError, match="source"):
            to_edge({"source": None, "target": "b"})

    def test_none_target_raises(self):
        """Target cannot be None."""
        with pytest.raises(ValueError, match="target"):
            to_edge({"source": "a", "target": None})


# =============================================================================
# PositionStore Tests
# =============================================================================


class TestPositionStore:
    """Tests for per-vertex state storage."""

    def test_ensure_creates_once(self):
        """ensure() returns the same state object on later calls."""
        store = PositionStore()
        first = store.ensure("a")
        second = store.ensure("a", VertexState(x=1.0, y=1.0))
        assert first is second
        assert first.x is None

    def test_position_of_unplaced_vertex(self):
        """Unplaced vertices have no position."""
        store = PositionStore()
        store.ensure("a")
        assert store.position("a") is None
        assert store.position("missing") is None

    def test_set_position(self):
        """set_position() stores floats."""
        store = PositionStore()
        store.set_position("a", 3, 4)
        assert store.position("a") == (3.0, 4.0)

    def test_retain(self):
        """retain() forgets every other id."""
        store = PositionStore()
        for vertex_id in "abc":
            store.set_position(vertex_id, 0, 0)
        store.retain(["a", "c"])
        assert set(store) == {"a", "c"}

    def test_snapshot_skips_unplaced(self):
        """snapshot() only lists placed vertices."""
        store = PositionStore()
        store.set_position("a", 1, 2)
        store.ensure("b")
        assert store.snapshot() == {"a": (1.0, 2.0)}


# =============================================================================
# GraphModel Tests
# =============================================================================


class TestGraphModel:
    """Tests for graph replacement and state carry-over."""

    def test_replace_builds_graph(self):
        """Vertices and edges are normalised in order."""
        model = GraphModel()
        graph = model.replace(create_path_data())
        assert [v.id for v in graph.vertices] == ["a", "b", "c"]
        assert [(e.source, e.target) for e in graph.edges] == [("a", "b"), ("b", "c")]
        assert len(model.store) == 3

    def test_label_change_keeps_state(self):
        """Replacing with a relabelled vertex leaves its state bit-identical."""
        model = GraphModel()
        model.replace(create_path_data())
        state = model.store["a"]
        state.x, state.y, state.vx, state.vy = 12.345678901, -0.1, 0.25, -0.75

        graph = model.replace(create_path_data(label_a="Alpha"))

        assert graph.vertex("a").label == "Alpha"
        assert model.store["a"] is state
        assert (state.x, state.y, state.vx, state.vy) == (12.345678901, -0.1, 0.25, -0.75)

    def test_new_vertex_seeded_from_input(self):
        """Position fields on new vertices seed their state."""
        model = GraphModel()
        model.replace({"vertices": [{"id": "a", "x": 5, "y": 6, "fx": 5}]})
        state = model.store["a"]
        assert (state.x, state.y, state.fx, state.fy) == (5.0, 6.0, 5.0, None)

    def test_existing_vertex_ignores_seed(self):
        """Input positions do not overwrite the state of a surviving vertex."""
        model = GraphModel()
        model.replace({"vertices": [{"id": "a"}]})
        model.store.set_position("a", 1, 2)
        model.replace({"vertices": [{"id": "a", "x": 100, "y": 100}]})
        assert model.store.position("a") == (1.0, 2.0)

    def test_removed_vertex_forgotten(self):
        """State of vertices no longer present is dropped."""
        model = GraphModel()
        model.replace(create_path_data())
        model.replace({"vertices": [{"id": "a"}], "edges": []})
        assert "b" not in model.store
        assert "c" not in model.store

    def test_dangling_edge_dropped(self):
        """Edges to unknown vertices are removed silently."""
        model = GraphModel()
        graph = model.replace(
            {
                "vertices": [{"id": "a"}, {"id": "b"}],
                "edges": [
                    {"source": "a", "target": "b"},
                    {"source": "a", "target": "ghost"},
                    {"source": "ghost", "target": "b"},
                ],
            }
        )
        assert [(e.source, e.target) for e in graph.edges] == [("a", "b")]

    def test_duplicate_ids_keep_first(self):
        """The first occurrence of a duplicate id wins."""
        model = GraphModel()
        graph = model.replace(
            {"vertices": [{"id": "a", "label": "first"}, {"id": "a", "label": "second"}]}
        )
        assert len(graph) == 1
        assert graph.vertex("a").label == "first"

    def test_replace_with_keywords(self):
        """Vertices and edges can be passed separately."""
        model = GraphModel()
        graph = model.replace(
            vertices=[{"id": "a"}, {"id": "b"}],
            edges=[{"source": "a", "target": "b"}],
        )
        assert len(graph.edges) == 1

    def test_replace_with_graph(self):
        """A Graph instance is accepted as-is."""
        model = GraphModel()
        source = Graph([Vertex("a"), Vertex("b")], [Edge("a", "b")])
        graph = model.replace(source)
        assert graph.vertices == source.vertices
        assert graph.edges == source.edges

    def test_replace_with_object(self):
        """Objects with vertices/edges attributes are accepted."""
        model = GraphModel()
        data = SimpleNamespace(vertices=[{"id": "a"}], edges=[])
        assert len(model.replace(data)) == 1

    def test_empty(self):
        """Replacing with nothing gives an empty graph."""
        model = GraphModel()
        model.replace(create_path_data())
        graph = model.replace(None)
        assert len(graph) == 0
        assert len(model.store) == 0

    def test_style_survives(self):
        """Edge styles are carried into the graph."""
        model = GraphModel()
        graph = model.replace(
            {
                "vertices": [{"id": "a"}, {"id": "b"}],
                "edges": [{"source": "a", "target": "b", "style": {"stroke_color": "red"}}],
            }
        )
        assert graph.edges[0].style == Style(stroke_color="red")
