"""
Tests for the tidy tree placement and forest layout.
"""

import math

import pytest

from nodelink.hierarchical import (
    PositionedForest,
    ReingoldTilford,
    TreeLayout,
    build_forest,
    layout_forest,
    project_point,
    tree_metrics,
)
from nodelink.model import GraphModel
from nodelink.types import DEFAULT_RADIUS, Directionality, EventType, Style
from nodelink.validation import InvalidDirectionalityError

# =============================================================================
# Test Fixtures
# =============================================================================


def create_graph(vertices, edges):
    """Build a Graph from vertex dicts and edge dicts."""
    return GraphModel().replace({"vertices": vertices, "edges": edges})


def create_fork():
    """A with two children labelled B and C."""
    return create_graph(
        [{"id": "A", "label": "A"}, {"id": "B", "label": "B"}, {"id": "C", "label": "C"}],
        [{"source": "A", "target": "B"}, {"source": "A", "target": "C"}],
    )


def create_binary_tree():
    """Create a binary tree with 7 nodes."""
    #        0
    #       / \
    #      1   2
    #     / \ / \
    #    3  4 5  6
    return create_graph(
        [{"id": str(i), "label": str(i)} for i in range(7)],
        [
            {"source": "0", "target": "1"},
            {"source": "0", "target": "2"},
            {"source": "1", "target": "3"},
            {"source": "1", "target": "4"},
            {"source": "2", "target": "5"},
            {"source": "2", "target": "6"},
        ],
    )


def create_two_trees():
    """Two trees: r1 -> (a, b) and r2 -> c."""
    return create_graph(
        [{"id": v} for v in ("r1", "a", "b", "r2", "c")],
        [
            {"source": "r1", "target": "a"},
            {"source": "r1", "target": "b"},
            {"source": "r2", "target": "c"},
        ],
    )


def run_layout(graph, directionality, size=(800, 600)):
    return layout_forest(build_forest(graph), directionality, size, edges=graph.edges)


# =============================================================================
# Reingold-Tilford Tests
# =============================================================================


class TestReingoldTilford:
    """Tests for the tidy tree solver."""

    def test_single_node_centred(self):
        """A lone root sits in the middle of the breadth extent."""
        (root,) = build_forest(create_graph([{"id": "a"}], []))
        (wn,) = ReingoldTilford(size=(100, 50)).layout(root)
        assert wn.x == pytest.approx(50)
        assert wn.y == 0

    def test_fork(self):
        """Two leaves at a quarter and three quarters, parent between them."""
        (root,) = build_forest(create_fork())
        placed = {wn.node.id: wn for wn in ReingoldTilford(size=(100, 50)).layout(root)}
        assert placed["B"].x == pytest.approx(25)
        assert placed["C"].x == pytest.approx(75)
        assert placed["A"].x == pytest.approx(50)
        assert placed["B"].y == pytest.approx(50)

    def test_parents_centred_over_children(self):
        """Every parent sits at the midpoint of its outer children."""
        (root,) = build_forest(create_binary_tree())
        placed = ReingoldTilford(size=(400, 300)).layout(root)
        for wn in placed:
            if wn.children:
                midpoint = (wn.children[0].x + wn.children[-1].x) / 2
                assert wn.x == pytest.approx(midpoint)

    def test_no_overlap_within_level(self):
        """Nodes on one level keep their left-to-right order without touching."""
        (root,) = build_forest(create_binary_tree())
        placed = ReingoldTilford(size=(400, 300)).layout(root)
        leaves = [wn for wn in placed if wn.depth == 2]
        xs = [wn.x for wn in leaves]
        assert xs == sorted(xs)
        assert all(b - a > 1e-6 for a, b in zip(xs, xs[1:]))

    def test_depth_fills_extent(self):
        """The deepest level lands on the depth extent."""
        (root,) = build_forest(create_binary_tree())
        placed = ReingoldTilford(size=(400, 300)).layout(root)
        assert max(wn.y for wn in placed) == pytest.approx(300)

    def test_pre_order_output(self):
        """Parents are returned before their children."""
        (root,) = build_forest(create_binary_tree())
        order = [wn.node.id for wn in ReingoldTilford().layout(root)]
        assert order == ["0", "1", "3", "4", "2", "5", "6"]

    def test_deep_chain(self):
        """Long chains do not hit the recursion limit."""
        n = 3000
        graph = create_graph(
            [{"id": str(i)} for i in range(n)],
            [{"source": str(i), "target": str(i + 1)} for i in range(n - 1)],
        )
        (root,) = build_forest(graph)
        placed = ReingoldTilford(size=(10, 10)).layout(root)
        assert len(placed) == n


# =============================================================================
# Projection and Sizing Tests
# =============================================================================


class TestProjection:
    """Tests for layout-space to Cartesian projection."""

    def test_vertical(self):
        assert project_point(Directionality.VERTICAL, 3, 4) == (3, 4)

    def test_horizontal_swaps_axes(self):
        assert project_point(Directionality.HORIZONTAL, 3, 4) == (4, 3)

    def test_radial_zero_angle_points_up(self):
        """Angle zero is at twelve o'clock."""
        x, y = project_point(Directionality.RADIAL, 0.0, 10.0)
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(-10.0)

    def test_offset_applied_last(self):
        x, y = project_point(Directionality.RADIAL, math.pi / 2, 10.0, (5.0, 7.0))
        assert x == pytest.approx(15.0)
        assert y == pytest.approx(7.0, abs=1e-9)


class TestTreeMetrics:
    """Tests for per-tree sizing."""

    def test_linear_metrics(self):
        (root,) = build_forest(create_fork())
        metrics = tree_metrics(root, Directionality.VERTICAL)
        radius = math.pi * DEFAULT_RADIUS**2 * math.sqrt(2)
        assert metrics.leaf_count == 2
        assert metrics.multiple == 2
        assert metrics.radius == pytest.approx(radius)
        assert metrics.width == pytest.approx(2 * radius / math.sqrt(DEFAULT_RADIUS))
        assert metrics.height == pytest.approx(2 * radius / DEFAULT_RADIUS)
        assert metrics.max_size == pytest.approx(max(metrics.width, metrics.height))

    def test_radial_metrics_count_all_nodes(self):
        (root,) = build_forest(create_fork())
        metrics = tree_metrics(root, Directionality.RADIAL)
        assert metrics.multiple == pytest.approx(2 + 3 * math.pi)
        assert metrics.max_size == pytest.approx(2 * metrics.radius)

    def test_bigger_trees_get_more_room(self):
        small = build_forest(create_fork())[0]
        large = build_forest(create_binary_tree())[0]
        assert tree_metrics(large, Directionality.VERTICAL).width > tree_metrics(
            small, Directionality.VERTICAL
        ).width


# =============================================================================
# TreeLayout Tests
# =============================================================================


class TestTreeLayout:
    """Tests for forest layout in the three tree modes."""

    def test_horizontal_fork(self):
        """Children share a depth column and are spaced evenly around the root."""
        forest = run_layout(create_fork(), "horizontal")
        a, b, c = (forest.node(v).position for v in "ABC")

        assert a[0] == pytest.approx(0.0)
        assert b[0] == pytest.approx(c[0])
        assert b[0] > a[0]
        assert a[1] - b[1] == pytest.approx(c[1] - a[1])
        assert a[1] == pytest.approx((b[1] + c[1]) / 2)

    def test_vertical_fork(self):
        """Vertical layouts grow downward with siblings side by side."""
        forest = run_layout(create_fork(), "vertical")
        a, b, c = (forest.node(v).position for v in "ABC")
        assert b[1] == pytest.approx(c[1])
        assert b[1] > a[1]
        assert b[0] < a[0] < c[0]

    def test_radial_fork(self):
        """Radial children sit on a circle around the root."""
        forest = run_layout(create_fork(), "radial")
        radius = forest.metrics[0].radius
        ax, ay = forest.node("A").position
        assert (ax, ay) == pytest.approx((0.0, 0.0), abs=1e-9)
        for vertex_id in "BC":
            x, y = forest.node(vertex_id).position
            assert math.hypot(x, y) == pytest.approx(radius)

    def test_idempotent(self):
        """Laying out the same forest twice gives identical coordinates."""
        graph = create_binary_tree()
        for mode in ("horizontal", "vertical", "radial"):
            assert run_layout(graph, mode).positions() == run_layout(graph, mode).positions()

    def test_every_vertex_placed_once(self):
        forest = run_layout(create_two_trees(), "vertical")
        ids = [pn.id for pn in forest.nodes]
        assert sorted(ids) == sorted(["r1", "a", "b", "r2", "c"])
        assert len(forest) == 5

    def test_linear_stacking_separates_trees(self):
        """The second tree starts one width plus padding after the first."""
        layout = TreeLayout(size=(800, 600), directionality="vertical")
        graph = create_two_trees()
        forest = layout.layout(build_forest(graph), graph.edges)

        first, second = forest.roots
        assert first.offset == (0.0, 0.0)
        assert second.offset[0] == pytest.approx(forest.metrics[0].width + layout.padding)
        assert second.offset[1] == 0.0

        first_xs = [pn.x for pn in forest.nodes if pn.id in ("r1", "a", "b")]
        second_xs = [pn.x for pn in forest.nodes if pn.id in ("r2", "c")]
        assert max(first_xs) < min(second_xs)

    def test_horizontal_stacking_along_y(self):
        forest = run_layout(create_two_trees(), "horizontal")
        first, second = forest.roots
        assert second.offset[0] == 0.0
        assert second.offset[1] > first.offset[1]

    def test_radial_stacking(self):
        """Each radial tree is pushed out past the trees before it."""
        layout = TreeLayout(size=(800, 600), directionality="radial")
        graph = create_two_trees()
        forest = layout.layout(build_forest(graph), graph.edges)

        m0, m1 = forest.metrics
        first, second = forest.roots
        assert first.offset == (0.0, 0.0)
        expected = m0.max_size / 2 + layout.padding + m1.radius
        assert second.offset == pytest.approx((0.0, expected))

    def test_padding_from_viewport(self):
        layout = TreeLayout(size=(800, 600))
        assert layout.padding == pytest.approx(150.0)

    def test_edges_follow_tree(self):
        """One layout edge per parent/child pair, carrying the tree offset."""
        forest = run_layout(create_two_trees(), "vertical")
        pairs = {(e.source, e.target) for e in forest.edges}
        assert pairs == {("r1", "a"), ("r1", "b"), ("r2", "c")}
        r2_edge = next(e for e in forest.edges if e.source == "r2")
        assert r2_edge.offset == forest.roots[1].offset

    def test_directed_recovered_from_either_orientation(self):
        """A reversed directed edge marks the tree edge as directed."""
        graph = create_graph(
            [{"id": v} for v in ("r", "a", "b")],
            [
                {"source": "r", "target": "a"},
                {"source": "a", "target": "b"},
                {"source": "b", "target": "a", "directed": True},
            ],
        )
        forest = run_layout(graph, "vertical")
        directed = {(e.source, e.target): e.directed for e in forest.edges}
        assert directed == {("r", "a"): False, ("a", "b"): True}

    def test_edge_style_recovered(self):
        graph = create_graph(
            [{"id": "r"}, {"id": "a"}],
            [{"source": "r", "target": "a", "style": {"stroke_color": "blue"}}],
        )
        (edge,) = run_layout(graph, "radial").edges
        assert edge.style == Style(stroke_color="blue")

    def test_empty_forest(self):
        forest = TreeLayout(size=(800, 600)).layout([])
        assert isinstance(forest, PositionedForest)
        assert forest.nodes == []
        assert forest.bounds() is None

    def test_free_form_rejected(self):
        with pytest.raises(InvalidDirectionalityError):
            TreeLayout(directionality="free-form")

    def test_unknown_mode_rejected(self):
        layout = TreeLayout()
        with pytest.raises(InvalidDirectionalityError):
            layout.directionality = "diagonal"

    def test_events(self):
        """run() brackets the computation with start and end events."""
        events = []
        layout = TreeLayout(size=(800, 600), on_end=lambda e: events.append(e["type"]))
        layout.on("start", lambda e: events.append(e["type"]))
        layout.layout(build_forest(create_fork()))
        assert events == [EventType.start, EventType.end]
