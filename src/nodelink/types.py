"""
Common types for the node-link layout engine.

This module provides the fundamental types shared by every component:
- Style: Optional visual hints carried by vertices and edges
- Vertex: Immutable identity + style record for a graph vertex
- Edge: Connection between two vertex ids
- VertexState: Mutable position/velocity/pin state owned by the engine
- DragState: Per-vertex drag interaction state
- Directionality: Active layout mode
- EventType / Event: Layout lifecycle events
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Callable, Optional, Sequence, TypedDict, Union

DEFAULT_RADIUS = 15.0
"""Nominal per-vertex render radius, also the base radius for tree sizing."""

DEFAULT_FILL_COLOR = "#a1d7a1"
"""Fill color used when a vertex carries no style."""


class EventType(IntEnum):
    """
    Layout lifecycle events.

    - start: Layout iterations have begun
    - tick: Fired once per iteration (for animation)
    - end: Layout has converged or stopped
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    alpha: float
    directionality: Optional[str]


class Directionality(str, Enum):
    """
    Active layout mode.

    - FREE_FORM: positions come from the force simulation
    - HORIZONTAL: tidy tree, depth runs along x
    - VERTICAL: tidy tree, depth runs along y
    - RADIAL: tidy tree in polar coordinates
    """

    FREE_FORM = "free-form"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    RADIAL = "radial"

    @classmethod
    def _missing_(cls, value: object) -> Optional[Directionality]:
        if isinstance(value, str):
            name = value.strip().lower()
            if name in ("none", "free", "freeform", "free_form"):
                return cls.FREE_FORM
            for member in cls:
                if member.value == name:
                    return member
        return None

    @property
    def is_tree(self) -> bool:
        """True for the three tree-shaped modes."""
        return self is not Directionality.FREE_FORM


class DragState(Enum):
    """
    Per-vertex drag interaction.

    - free: the simulation moves the vertex
    - pinned: the vertex follows the pointer
    - releasing: the pin was just cleared; becomes free on the next tick
    """

    free = "free"
    pinned = "pinned"
    releasing = "releasing"


@dataclass(frozen=True)
class Style:
    """Visual hints attached to a vertex or edge."""

    fill_color: Optional[str] = None
    fill_radius: Optional[float] = None
    stroke_color: Optional[str] = None
    stroke_width: Optional[float] = None

    @classmethod
    def coerce(cls, value: Any) -> Optional[Style]:
        """Build a Style from a Style, a dict (snake or camel case keys), or None."""
        if value is None or isinstance(value, Style):
            return value
        if isinstance(value, dict):
            return cls(
                fill_color=value.get("fill_color", value.get("fillColor")),
                fill_radius=value.get("fill_radius", value.get("fillRadius")),
                stroke_color=value.get("stroke_color", value.get("strokeColor")),
                stroke_width=value.get("stroke_width", value.get("strokeWidth")),
            )
        return cls(
            fill_color=getattr(value, "fill_color", None),
            fill_radius=getattr(value, "fill_radius", None),
            stroke_color=getattr(value, "stroke_color", None),
            stroke_width=getattr(value, "stroke_width", None),
        )


@dataclass(frozen=True)
class Vertex:
    """
    Graph vertex.

    Attributes:
        id: Unique identifier
        label: Display label (also the sort key for tree children)
        selected: Whether the vertex is selected
        expanded: Whether the vertex is expanded
        style: Optional visual hints
        attrs: Any extra caller-supplied properties
    """

    id: str
    label: Optional[str] = None
    selected: bool = False
    expanded: bool = False
    style: Optional[Style] = None
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def radius(self) -> float:
        """Render radius, falling back to the nominal radius."""
        if self.style is not None and self.style.fill_radius is not None:
            return float(self.style.fill_radius)
        return DEFAULT_RADIUS

    @property
    def color(self) -> str:
        """Fill color, falling back to the default fill."""
        if self.style is not None and self.style.fill_color is not None:
            return self.style.fill_color
        return DEFAULT_FILL_COLOR

    def __repr__(self) -> str:
        return f"Vertex(id={self.id!r}, label={self.label!r})"


@dataclass(frozen=True)
class Edge:
    """
    Edge connecting two vertices by id.

    Attributes:
        source: Source vertex id
        target: Target vertex id
        directed: Whether the edge is drawn with an arrow
        label: Optional label
        style: Optional visual hints
        offset: Optional (x, y) translation, used when stacking radial trees
    """

    source: str
    target: str
    directed: bool = False
    label: Optional[str] = None
    style: Optional[Style] = None
    offset: Optional[tuple[float, float]] = None

    @property
    def key(self) -> str:
        """Stable join key for renderers."""
        return f"{self.source}-{self.target}"

    def __repr__(self) -> str:
        arrow = "->" if self.directed else "--"
        return f"Edge({self.source} {arrow} {self.target})"


@dataclass
class VertexState:
    """
    Mutable simulation state for one vertex.

    Positions are None until a layout places the vertex. A pin (fx, fy)
    overrides the simulated position while set.
    """

    x: Optional[float] = None
    y: Optional[float] = None
    vx: Optional[float] = None
    vy: Optional[float] = None
    fx: Optional[float] = None
    fy: Optional[float] = None
    drag: DragState = DragState.free

    @property
    def placed(self) -> bool:
        """True once both coordinates are defined."""
        return self.x is not None and self.y is not None

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


# Type aliases for the Pythonic API
VertexLike = Union[Vertex, dict[str, Any], Any]
"""Input type for vertices: Vertex objects, dicts, or objects with vertex attributes."""

EdgeLike = Union[Edge, dict[str, Any], Any]
"""Input type for edges: Edge objects, dicts, or objects with source/target."""

DirectionalityLike = Union[Directionality, str]
"""Layout mode as enum member or name ("none", "horizontal", ...)."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Viewport size: (width, height) tuple, list, or sequence."""

EventCallback = Callable[[Optional[Event]], None]

Point = tuple[float, float]


__all__ = [
    "DEFAULT_RADIUS",
    "DEFAULT_FILL_COLOR",
    "EventType",
    "Event",
    "EventCallback",
    "Directionality",
    "DragState",
    "Style",
    "Vertex",
    "Edge",
    "VertexState",
    "VertexLike",
    "EdgeLike",
    "DirectionalityLike",
    "SizeType",
    "Point",
]
