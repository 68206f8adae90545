"""
Tree layout solver.

Sizes each tree of a forest from its breadth and depth, places it with the
tidy-tree algorithm, stacks the trees so they never overlap, and synthesizes
parent -> child layout edges that recover styling from the source graph.

Radial layouts are computed in (angle, radius) space; `project_point` is the
single place where layout-space coordinates become Cartesian.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ..base import StaticLayout
from ..types import (
    DEFAULT_RADIUS,
    Directionality,
    DirectionalityLike,
    Edge,
    EventCallback,
    Point,
    SizeType,
    Style,
    Vertex,
)
from ..validation import InvalidDirectionalityError, validate_directionality
from .builder import TreeNode
from .reingold_tilford import ReingoldTilford, radial_separation, sibling_separation

DEFAULT_PADDING_RATIO = 0.25
"""Gap between stacked trees, as a fraction of the smaller viewport side."""


def project_point(
    directionality: Directionality,
    axis1: float,
    axis2: float,
    offset: Point = (0.0, 0.0),
) -> Point:
    """
    Map layout-space coordinates to Cartesian ones.

    Args:
        directionality: Tree mode
        axis1: Breadth coordinate (angle in radians for radial)
        axis2: Depth coordinate (radius for radial)
        offset: Cartesian translation applied last

    Returns:
        (x, y)
    """
    if directionality is Directionality.RADIAL:
        angle = axis1 - math.pi / 2
        x, y = axis2 * math.cos(angle), axis2 * math.sin(angle)
    elif directionality is Directionality.HORIZONTAL:
        x, y = axis2, axis1
    else:
        x, y = axis1, axis2
    return (x + offset[0], y + offset[1])


@dataclass(frozen=True)
class TreeMetrics:
    """Size of one tree in layout space."""

    descendant_count: int
    leaf_count: int
    multiple: float
    radius: float
    width: float
    height: float
    max_size: float


def tree_metrics(
    root: TreeNode,
    directionality: Directionality,
    base_radius: float = DEFAULT_RADIUS,
) -> TreeMetrics:
    """
    Compute the extent a tree needs.

    The size metric grows with the number of leaves (and, for radial trees,
    with the total node count), and the extent grows with its square root.
    """
    nodes = list(root.descendants())
    descendants = len(nodes)
    leaves = sum(1 for node in nodes if not node.children)
    radial = directionality is Directionality.RADIAL

    multiple = leaves + (descendants * math.pi if radial else 0.0)
    radius = math.pi * base_radius**2 * math.sqrt(multiple)
    width = radius * 2 / math.sqrt(base_radius)
    height = radius * 2 / base_radius
    max_size = radius * 2 if radial else max(width, height)

    return TreeMetrics(
        descendant_count=descendants,
        leaf_count=leaves,
        multiple=multiple,
        radius=radius,
        width=width,
        height=height,
        max_size=max_size,
    )


@dataclass
class PositionedTreeNode:
    """
    A tree node with its layout-space coordinate.

    Attributes:
        node: The placed TreeNode
        axis1: Breadth coordinate (angle for radial)
        axis2: Depth coordinate (radius for radial)
        offset: Per-tree Cartesian translation
        directionality: Mode the coordinate belongs to
    """

    node: TreeNode
    axis1: float
    axis2: float
    offset: Point
    directionality: Directionality

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def vertex(self) -> Vertex:
        return self.node.vertex

    @property
    def depth(self) -> int:
        return self.node.depth

    @property
    def parent_id(self) -> Optional[str]:
        return self.node.parent.id if self.node.parent is not None else None

    @property
    def position(self) -> Point:
        return project_point(self.directionality, self.axis1, self.axis2, self.offset)

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]


@dataclass(frozen=True)
class LayoutEdge:
    """Parent -> child edge synthesized from the forest."""

    source: str
    target: str
    directed: bool = False
    style: Optional[Style] = None
    offset: Point = (0.0, 0.0)

    @property
    def key(self) -> str:
        return f"{self.source}-{self.target}"


@dataclass
class PositionedForest:
    """Result of a tree layout pass."""

    directionality: Directionality
    nodes: list[PositionedTreeNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    roots: list[PositionedTreeNode] = field(default_factory=list)
    metrics: list[TreeMetrics] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, vertex_id: str) -> Optional[PositionedTreeNode]:
        for pn in self.nodes:
            if pn.id == vertex_id:
                return pn
        return None

    def positions(self) -> dict[str, Point]:
        """Cartesian position of every placed vertex."""
        return {pn.id: pn.position for pn in self.nodes}

    def bounds(self) -> Optional[tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) over all placed vertices."""
        if not self.nodes:
            return None
        points = [pn.position for pn in self.nodes]
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return (min(xs), min(ys), max(xs), max(ys))


class TreeLayout(StaticLayout):
    """
    Horizontal, vertical and radial tidy-tree layout of a forest.

    Each tree is sized by tree_metrics(), placed with Reingold-Tilford and
    stacked after the previous one. Linear trees advance along the breadth
    axis; radial trees are pushed further out along y.

    Example:
        forest = build_forest(graph)
        layout = TreeLayout(size=(800, 600), directionality="radial")
        positioned = layout.layout(forest, edges=graph.edges)
        for pn in positioned.nodes:
            print(pn.id, pn.x, pn.y)
    """

    def __init__(
        self,
        *,
        size: SizeType = (1.0, 1.0),
        directionality: DirectionalityLike = Directionality.VERTICAL,
        base_radius: float = DEFAULT_RADIUS,
        padding_ratio: float = DEFAULT_PADDING_RATIO,
        on_start: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize tree layout.

        Args:
            size: Viewport size as (width, height); sets the stacking padding
            directionality: "horizontal", "vertical" or "radial"
            base_radius: Nominal per-node radius driving tree extents
            padding_ratio: Stacking gap as a fraction of the smaller viewport side
            on_start: Callback for start event
            on_end: Callback for end event
        """
        super().__init__(size=size, on_start=on_start, on_end=on_end)
        self._directionality = Directionality.VERTICAL
        self.directionality = directionality  # type: ignore[assignment]
        self._base_radius: float = float(base_radius)
        self._padding_ratio: float = float(padding_ratio)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def directionality(self) -> Directionality:
        """Get tree mode."""
        return self._directionality

    @directionality.setter
    def directionality(self, value: DirectionalityLike) -> None:
        """Set tree mode; free-form is not a tree mode."""
        mode = validate_directionality(value)
        if not mode.is_tree:
            raise InvalidDirectionalityError("TreeLayout requires a tree directionality")
        self._directionality = mode

    @property
    def base_radius(self) -> float:
        return self._base_radius

    @base_radius.setter
    def base_radius(self, value: float) -> None:
        self._base_radius = float(value)

    @property
    def padding(self) -> float:
        """Gap between stacked trees."""
        return self._padding_ratio * min(self.size)

    # -------------------------------------------------------------------------
    # Layout Computation
    # -------------------------------------------------------------------------

    def layout(self, forest: Sequence[TreeNode], edges: Sequence[Edge] = ()) -> PositionedForest:
        """
        Position every tree of `forest`.

        Args:
            forest: Roots from build_forest()
            edges: Source graph edges, used to recover directed flags and styles

        Returns:
            PositionedForest
        """
        result: PositionedForest = self.run(forest=forest, edges=edges)
        return result

    def _compute(self, **kwargs: Any) -> PositionedForest:
        forest: Sequence[TreeNode] = kwargs.get("forest", ())
        edges: Sequence[Edge] = kwargs.get("edges", ())
        mode = self._directionality
        radial = mode is Directionality.RADIAL
        padding = self.padding

        result = PositionedForest(directionality=mode)
        cumulative = 0.0
        prev_max_size = 0.0

        for index, root in enumerate(forest):
            metrics = tree_metrics(root, mode, self._base_radius)

            if radial:
                offset_y = prev_max_size / 2 + index * padding
                offset = (0.0, offset_y + (metrics.radius if offset_y > 0 else 0.0))
                walker = ReingoldTilford(
                    size=(2 * math.pi, metrics.radius), separation=radial_separation
                )
            else:
                if mode is Directionality.HORIZONTAL:
                    offset = (0.0, cumulative)
                else:
                    offset = (cumulative, 0.0)
                walker = ReingoldTilford(
                    size=(metrics.width, metrics.height), separation=sibling_separation
                )
                cumulative += metrics.width + padding

            placed = [
                PositionedTreeNode(wn.node, wn.x, wn.y, offset, mode) for wn in walker.layout(root)
            ]
            prev_max_size += metrics.max_size

            result.nodes.extend(placed)
            result.roots.append(placed[0])
            result.metrics.append(metrics)
            result.edges.extend(_layout_edges(placed, edges, offset))

        return result


def _layout_edges(
    placed: Sequence[PositionedTreeNode],
    edges: Sequence[Edge],
    offset: Point,
) -> list[LayoutEdge]:
    """Synthesize parent -> child edges, recovering directed flags and styles."""
    by_pair: dict[tuple[str, str], list[Edge]] = {}
    for edge in edges:
        by_pair.setdefault((edge.source, edge.target), []).append(edge)

    layout_edges: list[LayoutEdge] = []
    for pn in placed:
        parent_id = pn.parent_id
        if parent_id is None:
            continue
        matches = by_pair.get((parent_id, pn.id), []) + by_pair.get((pn.id, parent_id), [])
        directed = any(edge.directed for edge in matches)
        style = next((edge.style for edge in matches if edge.style is not None), None)
        layout_edges.append(LayoutEdge(parent_id, pn.id, directed, style, offset))
    return layout_edges


def layout_forest(
    forest: Sequence[TreeNode],
    directionality: DirectionalityLike,
    size: SizeType,
    *,
    edges: Sequence[Edge] = (),
    base_radius: float = DEFAULT_RADIUS,
) -> PositionedForest:
    """Lay out a forest in one call."""
    return TreeLayout(size=size, directionality=directionality, base_radius=base_radius).layout(
        forest, edges
    )


__all__ = [
    "DEFAULT_PADDING_RATIO",
    "LayoutEdge",
    "PositionedForest",
    "PositionedTreeNode",
    "TreeLayout",
    "TreeMetrics",
    "layout_forest",
    "project_point",
    "tree_metrics",
]
