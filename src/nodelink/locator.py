"""
Viewport locators for off-screen vertices.

In free-form mode a vertex can drift or be panned out of view. For each such
vertex a locator is produced: a point on the viewport border in the
direction of the vertex, rotated toward it and scaled by its radius.

Screen coordinates are relative to the viewport centre, so the visible area
is [-w/2, w/2) x [-h/2, h/2).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from .types import DEFAULT_RADIUS, Point, SizeType, Vertex
from .validation import validate_viewport_size


@dataclass(frozen=True)
class Transform:
    """
    Pan/zoom transform: screen = (x + k * px, y + k * py).

    Attributes:
        x: Horizontal translation
        y: Vertical translation
        k: Scale factor
    """

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    @classmethod
    def identity(cls) -> Transform:
        return cls()

    def apply(self, point: Point) -> Point:
        return (self.x + self.k * point[0], self.y + self.k * point[1])

    def invert(self, point: Point) -> Point:
        return ((point[0] - self.x) / self.k, (point[1] - self.y) / self.k)


@dataclass(frozen=True)
class Locator:
    """Indicator for one off-screen vertex."""

    vertex: Vertex
    x: float
    y: float
    rotation: float
    scale: float
    color: str

    @property
    def id(self) -> str:
        return self.vertex.id


def _visible(sx: float, sy: float, r: float, half_w: float, half_h: float) -> bool:
    return sx + r >= -half_w and sx - r < half_w and sy + r >= -half_h and sy - r < half_h


def locate(
    vertices: Iterable[Vertex],
    positions: Mapping[str, Point],
    transform: Optional[Transform],
    size: SizeType,
    *,
    base_radius: float = DEFAULT_RADIUS,
    margin: float = 0.0,
) -> list[Locator]:
    """
    Compute locators for vertices outside the viewport.

    Args:
        vertices: Vertices to check, in output order
        positions: Layout-space position per vertex id; missing ids are skipped
        transform: Current pan/zoom; None means identity
        size: Viewport (width, height)
        base_radius: Nominal radius; locator scale is radius / base_radius
        margin: Pull the clamped point this far back inside the crossed edge

    Returns:
        One Locator per off-screen vertex
    """
    width, height = validate_viewport_size(size)
    half_w, half_h = width / 2, height / 2
    transform = transform or Transform.identity()

    locators: list[Locator] = []
    for vertex in vertices:
        point = positions.get(vertex.id)
        if point is None:
            continue
        sx, sy = transform.apply(point)
        radius = vertex.radius
        if _visible(sx, sy, radius, half_w, half_h):
            continue

        # Scale the point back along the ray from the centre onto the first edge crossed
        if abs(sx) * height <= abs(sy) * width:
            t = half_h / abs(sy)
            bx, by = sx * t, sy * t
            by -= math.copysign(margin, by)
        else:
            t = half_w / abs(sx)
            bx, by = sx * t, sy * t
            bx -= math.copysign(margin, bx)

        locators.append(
            Locator(
                vertex=vertex,
                x=bx,
                y=by,
                rotation=math.atan2(sy, sx),
                scale=radius / base_radius,
                color=vertex.color,
            )
        )
    return locators


@dataclass
class LocatorJoin:
    """
    Keyed diff of successive locator sets.

    Renderers update indicators by vertex id instead of redrawing all of
    them: `entered` need creating, `updated` need moving, `exited` need
    removing.
    """

    current: dict[str, Locator] = field(default_factory=dict)
    entered: set[str] = field(default_factory=set)
    updated: set[str] = field(default_factory=set)
    exited: set[str] = field(default_factory=set)

    def update(self, locators: Iterable[Locator]) -> LocatorJoin:
        incoming = {loc.id: loc for loc in locators}
        self.entered = set(incoming) - set(self.current)
        self.updated = set(incoming) & set(self.current)
        self.exited = set(self.current) - set(incoming)
        self.current = incoming
        return self


__all__ = ["Transform", "Locator", "LocatorJoin", "locate"]
