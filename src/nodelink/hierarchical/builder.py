"""
Forest construction from a vertex/edge graph.

Roots are the vertices without incoming edges. Every other vertex is placed
at most once, under the first parent the breadth-first traversal reaches it
from; a vertex with several parents is not duplicated and cycles are cut at
the first revisit.
"""

from __future__ import annotations

import warnings
from collections import deque
from typing import Iterator, Optional

from ..model import Graph
from ..types import Vertex


class TreeStructureWarning(UserWarning):
    """Warning issued when graph structure doesn't match tree assumptions."""

    pass


class TreeNode:
    """A vertex placed in the forest."""

    def __init__(self, vertex: Vertex, parent: Optional[TreeNode] = None) -> None:
        self.vertex = vertex
        self.parent = parent
        self.children: list[TreeNode] = []
        self.depth: int = parent.depth + 1 if parent is not None else 0

    @property
    def id(self) -> str:
        return self.vertex.id

    def descendants(self) -> Iterator[TreeNode]:
        """This node and everything below it, breadth first."""
        queue = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    def leaves(self) -> list[TreeNode]:
        return [node for node in self.descendants() if not node.children]

    def post_order(self) -> list[TreeNode]:
        """Children before parents, siblings left to right."""
        order: list[TreeNode] = []
        stack = [self]
        while stack:
            node = stack.pop()
            order.append(node)
            stack.extend(node.children)
        order.reverse()
        return order

    def __repr__(self) -> str:
        return f"TreeNode({self.id!r}, depth={self.depth}, children={len(self.children)})"


def _sort_key(node: TreeNode) -> tuple[bool, str, str]:
    label = node.vertex.label
    return (label is None, label or "", node.id)


def build_forest(graph: Graph) -> list[TreeNode]:
    """
    Build one tree per root of the graph.

    Args:
        graph: Source graph; edges are read as parent -> child

    Returns:
        Root TreeNodes in graph order. Empty when no vertex lacks an
        incoming edge.
    """
    children: dict[str, list[str]] = {}
    has_parent: set[str] = set()
    for edge in graph.edges:
        children.setdefault(edge.source, []).append(edge.target)
        has_parent.add(edge.target)

    roots = [v for v in graph.vertices if v.id not in has_parent]
    visited: set[str] = {v.id for v in roots}
    forest: list[TreeNode] = []

    for vertex in roots:
        root = TreeNode(vertex)
        queue = deque([root])
        while queue:
            node = queue.popleft()
            for child_id in children.get(node.id, []):
                if child_id in visited:
                    continue
                child_vertex = graph.vertex(child_id)
                if child_vertex is None:
                    continue
                visited.add(child_id)
                child = TreeNode(child_vertex, parent=node)
                node.children.append(child)
                queue.append(child)
        for node in root.descendants():
            node.children.sort(key=_sort_key)
        forest.append(root)

    unplaced = len(graph.vertices) - len(visited)
    if unplaced > 0:
        warnings.warn(
            f"{unplaced} vertex(es) are not reachable from any root and are left out "
            "of the tree layout. This suggests the graph contains cycles.",
            TreeStructureWarning,
            stacklevel=2,
        )

    return forest


__all__ = ["TreeNode", "TreeStructureWarning", "build_forest"]
