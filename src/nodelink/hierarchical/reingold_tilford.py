"""
Reingold-Tilford tidy tree placement.

Based on the paper:
"Tidier Drawings of Trees" by Reingold and Tilford (1981)

Extended with improvements from:
"A Node-Positioning Algorithm for General Trees" by Walker (1990)
"Improving Walker's Algorithm to Run in Linear Time" by Buchheim et al. (2002)

Both walks are iterative so deep trees do not hit the recursion limit.
"""

from __future__ import annotations

from typing import Callable, Optional

from .builder import TreeNode

Separation = Callable[["WalkerNode", "WalkerNode"], float]


class WalkerNode:
    """Internal tree node representation for layout computation."""

    def __init__(self, node: TreeNode, parent: Optional[WalkerNode], number: int) -> None:
        self.node = node
        self.parent = parent
        self.children: list[WalkerNode] = []
        self.depth: int = node.depth
        self.number: int = number  # Position among siblings

        # Layout coordinates: x along the breadth axis, y along the depth axis
        self.x: float = 0.0
        self.y: float = 0.0

        # Reingold-Tilford fields
        self.prelim: float = 0.0
        self.mod: float = 0.0  # Modifier for subtree shift
        self.thread: Optional[WalkerNode] = None
        self.ancestor: WalkerNode = self
        self.default_ancestor: Optional[WalkerNode] = None
        self.change: float = 0.0
        self.shift: float = 0.0


def sibling_separation(a: WalkerNode, b: WalkerNode) -> float:
    """One unit between siblings, two between cousins."""
    return 1.0 if a.parent is b.parent else 2.0


def radial_separation(a: WalkerNode, b: WalkerNode) -> float:
    """Sibling separation shrinking with depth, so outer rings stay dense."""
    return sibling_separation(a, b) / max(a.depth, 1)


class ReingoldTilford:
    """
    Tidy tree placement into a fixed (breadth, depth) extent.

    Parents are centred over their children, subtrees are pushed apart
    until their contours are `separation` apart, and the result is scaled
    so that the outermost nodes sit half a separation unit inside the
    breadth extent and the deepest level lands on the depth extent.

    Example:
        walker = ReingoldTilford(size=(400.0, 200.0))
        for wn in walker.layout(root):
            print(wn.node.id, wn.x, wn.y)
    """

    def __init__(
        self,
        *,
        size: tuple[float, float] = (1.0, 1.0),
        separation: Separation = sibling_separation,
    ) -> None:
        self._size = (float(size[0]), float(size[1]))
        self._separation = separation

    @property
    def size(self) -> tuple[float, float]:
        return self._size

    @property
    def separation(self) -> Separation:
        return self._separation

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def layout(self, root: TreeNode) -> list[WalkerNode]:
        """
        Place every node of the tree rooted at `root`.

        Returns:
            WalkerNodes in pre-order (parents before children)
        """
        wroot, pre_order = self._wrap(root)

        for v in self._post_order(wroot):
            self._first_walk(v)
        for v in pre_order:
            self._second_walk(v)

        self._fit(wroot, pre_order)
        return pre_order

    # -------------------------------------------------------------------------
    # Tree Construction
    # -------------------------------------------------------------------------

    def _wrap(self, root: TreeNode) -> tuple[WalkerNode, list[WalkerNode]]:
        """Mirror the tree with WalkerNodes; returns the root and a pre-order list."""
        wroot = WalkerNode(root, None, 0)
        pre_order: list[WalkerNode] = []
        stack = [wroot]
        while stack:
            wn = stack.pop()
            pre_order.append(wn)
            wn.children = [WalkerNode(c, wn, i) for i, c in enumerate(wn.node.children)]
            stack.extend(reversed(wn.children))
        return wroot, pre_order

    @staticmethod
    def _post_order(wroot: WalkerNode) -> list[WalkerNode]:
        """Children before parents, left subtrees before right ones."""
        order: list[WalkerNode] = []
        stack = [wroot]
        while stack:
            wn = stack.pop()
            order.append(wn)
            stack.extend(wn.children)
        order.reverse()
        return order

    # -------------------------------------------------------------------------
    # Reingold-Tilford Algorithm
    # -------------------------------------------------------------------------

    def _left_sibling(self, v: WalkerNode) -> Optional[WalkerNode]:
        if v.parent is not None and v.number > 0:
            return v.parent.children[v.number - 1]
        return None

    def _first_walk(self, v: WalkerNode) -> None:
        """
        First walk: compute preliminary breadth coordinates (bottom-up).

        Called in post-order, so all children have been walked already.
        """
        w = self._left_sibling(v)

        if v.children:
            self._execute_shifts(v)
            midpoint = (v.children[0].prelim + v.children[-1].prelim) / 2
            if w is not None:
                v.prelim = w.prelim + self._separation(v, w)
                v.mod = v.prelim - midpoint
            else:
                v.prelim = midpoint
        elif w is not None:
            v.prelim = w.prelim + self._separation(v, w)

        if v.parent is not None:
            default = v.parent.default_ancestor or v.parent.children[0]
            v.parent.default_ancestor = self._apportion(v, w, default)

    def _apportion(
        self, v: WalkerNode, w: Optional[WalkerNode], default_ancestor: WalkerNode
    ) -> WalkerNode:
        """
        Apportion: separate subtrees and thread for contour tracing.
        """
        if w is None or v.parent is None:
            return default_ancestor

        v_inner_right: Optional[WalkerNode] = v
        v_outer_right: WalkerNode = v
        v_inner_left: Optional[WalkerNode] = w
        v_outer_left: WalkerNode = v.parent.children[0]

        s_inner_right = v.mod
        s_outer_right = v.mod
        s_inner_left = w.mod
        s_outer_left = v_outer_left.mod

        v_inner_left = self._next_right(w)
        v_inner_right = self._next_left(v)
        while v_inner_left is not None and v_inner_right is not None:
            v_outer_left = self._next_left(v_outer_left) or v_outer_left
            v_outer_right = self._next_right(v_outer_right) or v_outer_right
            v_outer_right.ancestor = v

            shift = (
                (v_inner_left.prelim + s_inner_left)
                - (v_inner_right.prelim + s_inner_right)
                + self._separation(v_inner_left, v_inner_right)
            )

            if shift > 0:
                ancestor = self._ancestor(v_inner_left, v, default_ancestor)
                self._move_subtree(ancestor, v, shift)
                s_inner_right += shift
                s_outer_right += shift

            s_inner_left += v_inner_left.mod
            s_inner_right += v_inner_right.mod
            s_outer_left += v_outer_left.mod
            s_outer_right += v_outer_right.mod

            v_inner_left = self._next_right(v_inner_left)
            v_inner_right = self._next_left(v_inner_right)

        if v_inner_left is not None and self._next_right(v_outer_right) is None:
            v_outer_right.thread = v_inner_left
            v_outer_right.mod += s_inner_left - s_outer_right

        if v_inner_right is not None and self._next_left(v_outer_left) is None:
            v_outer_left.thread = v_inner_right
            v_outer_left.mod += s_inner_right - s_outer_left
            default_ancestor = v

        return default_ancestor

    def _next_left(self, v: WalkerNode) -> Optional[WalkerNode]:
        """Get next node on left contour."""
        if v.children:
            return v.children[0]
        return v.thread

    def _next_right(self, v: WalkerNode) -> Optional[WalkerNode]:
        """Get next node on right contour."""
        if v.children:
            return v.children[-1]
        return v.thread

    def _ancestor(
        self, v_inner_left: WalkerNode, v: WalkerNode, default: WalkerNode
    ) -> WalkerNode:
        """Find ancestor of v_inner_left that is a sibling of v."""
        if v_inner_left.ancestor.parent is v.parent:
            return v_inner_left.ancestor
        return default

    def _move_subtree(self, wl: WalkerNode, wr: WalkerNode, shift: float) -> None:
        """Move subtree rooted at wr by shift amount."""
        subtrees = wr.number - wl.number
        if subtrees > 0:
            wr.change -= shift / subtrees
            wr.shift += shift
            wl.change += shift / subtrees
            wr.prelim += shift
            wr.mod += shift

    def _execute_shifts(self, v: WalkerNode) -> None:
        """Execute accumulated shifts for children of v."""
        shift = 0.0
        change = 0.0
        for child in reversed(v.children):
            child.prelim += shift
            child.mod += shift
            change += child.change
            shift += child.shift + change

    def _second_walk(self, v: WalkerNode) -> None:
        """
        Second walk: compute final breadth coordinates (top-down).

        The root is anchored at 0; children accumulate their ancestors' mods.
        """
        base = v.parent.mod if v.parent is not None else -v.prelim
        v.x = v.prelim + base
        v.mod += base

    # -------------------------------------------------------------------------
    # Sizing
    # -------------------------------------------------------------------------

    def _fit(self, wroot: WalkerNode, nodes: list[WalkerNode]) -> None:
        """Scale raw coordinates into the configured extent."""
        left = right = bottom = wroot
        for wn in nodes:
            if wn.x < left.x:
                left = wn
            if wn.x > right.x:
                right = wn
            if wn.depth > bottom.depth:
                bottom = wn

        s = 1.0 if left is right else self._separation(left, right) / 2
        tx = s - left.x
        kx = self._size[0] / (right.x + s + tx)
        ky = self._size[1] / (bottom.depth or 1)

        for wn in nodes:
            wn.x = (wn.x + tx) * kx
            wn.y = wn.depth * ky


__all__ = [
    "ReingoldTilford",
    "WalkerNode",
    "sibling_separation",
    "radial_separation",
]
