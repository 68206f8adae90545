"""
Tree-shaped layouts.

This module turns a vertex/edge graph into a forest and positions it:
- build_forest: Roots and parent/child structure from the edge list
- ReingoldTilford: Tidy tree placement into a fixed extent
- TreeLayout: Horizontal, vertical and radial forests with stacking
"""

from .builder import TreeNode, TreeStructureWarning, build_forest
from .reingold_tilford import ReingoldTilford, WalkerNode
from .tree_layout import (
    LayoutEdge,
    PositionedForest,
    PositionedTreeNode,
    TreeLayout,
    TreeMetrics,
    layout_forest,
    project_point,
    tree_metrics,
)

__all__ = [
    "TreeNode",
    "TreeStructureWarning",
    "build_forest",
    "ReingoldTilford",
    "WalkerNode",
    "LayoutEdge",
    "PositionedForest",
    "PositionedTreeNode",
    "TreeLayout",
    "TreeMetrics",
    "layout_forest",
    "project_point",
    "tree_metrics",
]
