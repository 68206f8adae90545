"""
Tests for forest construction.
"""

import warnings

import pytest

from nodelink.hierarchical import TreeStructureWarning, build_forest
from nodelink.model import GraphModel

# =============================================================================
# Test Fixtures
# =============================================================================


def create_graph(vertices, edges):
    """Build a Graph from (id, label) pairs and (source, target) pairs."""
    return GraphModel().replace(
        {
            "vertices": [{"id": vid, "label": label} for vid, label in vertices],
            "edges": [{"source": s, "target": t} for s, t in edges],
        }
    )


def create_two_trees():
    """Two disjoint trees: r1 -> (a, b) and r2 -> c."""
    return create_graph(
        [("r1", None), ("a", None), ("b", None), ("r2", None), ("c", None)],
        [("r1", "a"), ("r1", "b"), ("r2", "c")],
    )


def ids(nodes):
    return [node.id for node in nodes]


# =============================================================================
# Forest Tests
# =============================================================================


class TestBuildForest:
    """Tests for build_forest."""

    def test_one_tree_per_root(self):
        """Each vertex without an incoming edge roots its own tree."""
        forest = build_forest(create_two_trees())
        assert ids(forest) == ["r1", "r2"]

    def test_trees_are_disjoint(self):
        """No vertex appears in two trees."""
        forest = build_forest(create_two_trees())
        members = [set(ids(root.descendants())) for root in forest]
        assert members[0] == {"r1", "a", "b"}
        assert members[1] == {"r2", "c"}
        assert not members[0] & members[1]

    def test_depths(self):
        """Depth counts edges from the root."""
        graph = create_graph([("r", None), ("a", None), ("b", None)], [("r", "a"), ("a", "b")])
        (root,) = build_forest(graph)
        assert [node.depth for node in root.descendants()] == [0, 1, 2]

    def test_isolated_vertex_is_a_tree(self):
        """A vertex without edges is a single-node tree."""
        forest = build_forest(create_graph([("solo", None)], []))
        assert len(forest) == 1
        assert forest[0].children == []

    def test_children_sorted_by_label(self):
        """Children are ordered by label."""
        graph = create_graph(
            [("r", None), ("x", "beta"), ("y", "alpha"), ("z", "gamma")],
            [("r", "x"), ("r", "y"), ("r", "z")],
        )
        (root,) = build_forest(graph)
        assert [child.vertex.label for child in root.children] == ["alpha", "beta", "gamma"]

    def test_unlabelled_children_after_labelled(self):
        """Children without a label sort after labelled ones, then by id."""
        graph = create_graph(
            [("r", None), ("n2", None), ("n1", None), ("l", "label")],
            [("r", "n2"), ("r", "n1"), ("r", "l")],
        )
        (root,) = build_forest(graph)
        assert ids(root.children) == ["l", "n1", "n2"]

    def test_multi_parent_placed_once(self):
        """A vertex with two parents appears under the first root only."""
        graph = create_graph(
            [("r1", None), ("r2", None), ("shared", None)],
            [("r1", "shared"), ("r2", "shared")],
        )
        forest = build_forest(graph)
        assert ids(forest[0].children) == ["shared"]
        assert forest[1].children == []

    def test_cycle_below_root_is_cut(self):
        """A back edge does not re-enter a placed vertex."""
        graph = create_graph(
            [("r", None), ("a", None), ("b", None)],
            [("r", "a"), ("a", "b"), ("b", "a")],
        )
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            (root,) = build_forest(graph)
        assert ids(root.descendants()) == ["r", "a", "b"]

    def test_no_roots_gives_empty_forest(self):
        """A pure cycle has no root; nothing is placed and a warning is issued."""
        graph = create_graph([("a", None), ("b", None)], [("a", "b"), ("b", "a")])
        with pytest.warns(TreeStructureWarning, match="2 vertex"):
            forest = build_forest(graph)
        assert forest == []

    def test_unreachable_cycle_warns(self):
        """A cycle detached from every root is reported."""
        graph = create_graph(
            [("r", None), ("a", None), ("b", None)],
            [("a", "b"), ("b", "a")],
        )
        with pytest.warns(TreeStructureWarning):
            forest = build_forest(graph)
        assert ids(forest) == ["r"]

    def test_empty_graph(self):
        """An empty graph gives an empty forest."""
        assert build_forest(create_graph([], [])) == []


class TestTreeNode:
    """Tests for TreeNode traversal helpers."""

    def test_post_order(self):
        """Children come before their parent."""
        graph = create_graph(
            [("r", None), ("a", "a"), ("b", "b"), ("c", "c")],
            [("r", "a"), ("r", "b"), ("a", "c")],
        )
        (root,) = build_forest(graph)
        assert ids(root.post_order()) == ["c", "a", "b", "r"]

    def test_leaves(self):
        """Leaves are the childless nodes."""
        graph = create_graph(
            [("r", None), ("a", "a"), ("b", "b"), ("c", "c")],
            [("r", "a"), ("r", "b"), ("a", "c")],
        )
        (root,) = build_forest(graph)
        assert sorted(ids(root.leaves())) == ["b", "c"]
