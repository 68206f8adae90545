"""
Graph layout engine.

GraphLayout ties the components together and decides, per redraw, where
positions come from:

- free-form: the force simulation, stepped by an external timer
- horizontal / vertical / radial: the hierarchy builder and tree layout

Switching into a tree mode stops the simulation and lays the forest out in
one pass. Switching back resumes the simulation from the positions the
vertices had before, so nothing jumps to the origin.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from typing_extensions import Self

from .easing import EaseFunction, get_ease
from .force import Force, ForceSimulation
from .hierarchical import PositionedForest, TreeLayout, build_forest
from .locator import Locator, LocatorJoin, Transform, locate
from .model import Graph, GraphModel, PositionStore
from .types import (
    DEFAULT_RADIUS,
    Directionality,
    DirectionalityLike,
    EventCallback,
    EventType,
    Point,
    SizeType,
    Style,
)
from .validation import validate_alpha, validate_directionality, validate_viewport_size

DEFAULT_TRANSITION_DURATION = 500.0
"""Interpolation time for redraws that involve a tree mode."""


@dataclass(frozen=True)
class ResolvedEdge:
    """An edge with both endpoint positions resolved for drawing."""

    source: str
    target: str
    directed: bool
    source_position: Point
    target_position: Point
    style: Optional[Style] = None

    @property
    def key(self) -> str:
        return f"{self.source}-{self.target}"


@dataclass
class Frame:
    """Everything a renderer needs for one redraw."""

    directionality: Directionality
    positions: dict[str, Point] = field(default_factory=dict)
    edges: list[ResolvedEdge] = field(default_factory=list)
    locators: list[Locator] = field(default_factory=list)
    transition_duration: float = 0.0


class GraphLayout:
    """
    Layout engine for an interactive node-link diagram.

    Example:
        engine = GraphLayout(size=(800, 600))
        engine.data = {
            "vertices": [{"id": "a"}, {"id": "b"}],
            "edges": [{"source": "a", "target": "b", "directed": True}],
        }
        engine.simulate()
        while engine.tick():  # one call per animation frame
            frame = engine.frame()

        engine.directionality = "radial"
        frame = engine.frame()  # tidy radial tree, 500 ms transition
    """

    def __init__(
        self,
        data: Any = None,
        *,
        directionality: DirectionalityLike = Directionality.FREE_FORM,
        size: SizeType = (800.0, 600.0),
        transform: Optional[Transform] = None,
        base_radius: float = DEFAULT_RADIUS,
        transition_duration: Optional[float] = None,
        ease: Union[str, EaseFunction] = "linear",
        random_seed: Optional[int] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            data: Initial graph (mapping with "vertices"/"edges", or a Graph)
            directionality: Initial layout mode
            size: Viewport size as (width, height)
            transform: Initial pan/zoom transform
            base_radius: Nominal vertex radius for tree sizing and locator scale
            transition_duration: Override for the interpolation time of every redraw
            ease: Easing curve name or callable for transitions
            random_seed: Seed for the simulation's jiggle
            on_tick: Called after every simulation tick
            on_end: Called when the simulation converges or a tree layout completes
        """
        self._size = validate_viewport_size(size)
        self._transform = transform or Transform.identity()
        self._base_radius = float(base_radius)
        self._transition_override = transition_duration
        self._ease = get_ease(ease)

        self._model = GraphModel()
        self._simulation = ForceSimulation(
            store=self._model.store,
            size=self._size,
            random_seed=random_seed,
            on_tick=on_tick,
            on_end=on_end,
        )
        self._tree_layout = TreeLayout(
            size=self._size, base_radius=self._base_radius, on_end=on_end
        )
        self._forest: Optional[PositionedForest] = None
        self._locator_join = LocatorJoin()

        self._directionality = validate_directionality(directionality)
        self._previous = self._directionality

        if data is not None:
            self.replace(data)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        """The current graph."""
        return self._model.graph

    @property
    def data(self) -> Graph:
        return self._model.graph

    @data.setter
    def data(self, value: Any) -> None:
        self.replace(value)

    @property
    def store(self) -> PositionStore:
        """Per-vertex physics state."""
        return self._model.store

    @property
    def simulation(self) -> ForceSimulation:
        return self._simulation

    @property
    def forest(self) -> Optional[PositionedForest]:
        """The positioned forest while a tree mode is active, else None."""
        return self._forest

    @property
    def directionality(self) -> Directionality:
        return self._directionality

    @directionality.setter
    def directionality(self, value: DirectionalityLike) -> None:
        self.set_directionality(value)

    @property
    def size(self) -> tuple[float, float]:
        """Viewport size as (width, height)."""
        return self._size

    @size.setter
    def size(self, value: SizeType) -> None:
        self._size = validate_viewport_size(value)
        self._simulation.size = self._size
        self._tree_layout.size = self._size
        if self._directionality.is_tree:
            self._layout_forest()

    @property
    def transform(self) -> Transform:
        """Current pan/zoom transform."""
        return self._transform

    @transform.setter
    def transform(self, value: Optional[Transform]) -> None:
        self._transform = value or Transform.identity()

    @property
    def base_radius(self) -> float:
        return self._base_radius

    @property
    def ease(self) -> EaseFunction:
        return self._ease

    @ease.setter
    def ease(self, value: Union[str, EaseFunction]) -> None:
        self._ease = get_ease(value)

    @property
    def transition_duration(self) -> float:
        """
        Interpolation time for the next redraw.

        Zero while staying in free-form mode, where the simulation itself
        provides continuous motion. A mode change is interpolated only on the
        first frame() after it.
        """
        if self._transition_override is not None:
            return float(self._transition_override)
        free_form = Directionality.FREE_FORM
        if self._previous is free_form and self._directionality is free_form:
            return 0.0
        return DEFAULT_TRANSITION_DURATION

    @transition_duration.setter
    def transition_duration(self, value: Optional[float]) -> None:
        self._transition_override = value

    # -------------------------------------------------------------------------
    # Forces
    # -------------------------------------------------------------------------

    @property
    def force_node(self) -> Optional[Force]:
        """Many-body force."""
        return self._simulation.force("charge")

    @force_node.setter
    def force_node(self, value: Optional[Force]) -> None:
        self._simulation.set_force("charge", value)

    @property
    def force_link(self) -> Optional[Force]:
        return self._simulation.force("link")

    @force_link.setter
    def force_link(self, value: Optional[Force]) -> None:
        self._simulation.set_force("link", value)

    @property
    def force_x(self) -> Optional[Force]:
        return self._simulation.force("x")

    @force_x.setter
    def force_x(self, value: Optional[Force]) -> None:
        self._simulation.set_force("x", value)

    @property
    def force_y(self) -> Optional[Force]:
        return self._simulation.force("y")

    @force_y.setter
    def force_y(self, value: Optional[Force]) -> None:
        self._simulation.set_force("y", value)

    # -------------------------------------------------------------------------
    # Data and Mode
    # -------------------------------------------------------------------------

    def replace(self, data: Any) -> Graph:
        """
        Replace the graph, keeping the state of vertices whose id survives.

        Returns:
            The new Graph
        """
        graph = self._model.replace(data)
        self._previous = self._directionality
        self._setup()
        return graph

    def set_directionality(self, value: DirectionalityLike) -> Self:
        """
        Switch layout mode.

        Raises:
            InvalidDirectionalityError: If the mode name is unknown
        """
        mode = validate_directionality(value)
        self._previous = self._directionality
        self._directionality = mode
        self._setup()
        if not mode.is_tree and self._previous.is_tree:
            self.simulate()
        return self

    def _setup(self) -> None:
        graph = self._model.graph
        if self._directionality.is_tree:
            self._simulation.release_drags()
            self._simulation.stop()
            self._layout_forest()
        else:
            self._forest = None
            self._simulation.set_data(graph.vertices, graph.edges)

    def _layout_forest(self) -> None:
        graph = self._model.graph
        self._tree_layout.directionality = self._directionality
        forest = build_forest(graph)
        self._forest = self._tree_layout.layout(forest, graph.edges)

    def simulate(self, alpha: float = 1.0) -> Self:
        """
        Reheat and restart the simulation after a topology change.

        In a tree mode the simulation is stopped instead.
        """
        self._simulation.alpha = validate_alpha(alpha)
        if self._directionality.is_tree:
            self._simulation.stop()
        else:
            self._simulation.restart()
        return self

    def tick(self) -> bool:
        """
        Timer callback: advance the simulation one step in free-form mode.

        Returns:
            True if a tick was performed.
        """
        if self._directionality.is_tree:
            return False
        return self._simulation.step()

    def on(self, event: EventType | str, callback: Optional[EventCallback]) -> Self:
        """Subscribe to simulation events; "end" also fires after tree layouts."""
        self._simulation.on(event, callback)
        if isinstance(event, str):
            event = EventType[event]
        if event is not EventType.tick:
            self._tree_layout.on(event, callback)
        return self

    # -------------------------------------------------------------------------
    # Drag Interaction
    # -------------------------------------------------------------------------

    def drag_start(
        self, vertex_id: str, x: Optional[float] = None, y: Optional[float] = None
    ) -> bool:
        """Pin a vertex under the pointer; ignored in tree modes."""
        if self._directionality.is_tree:
            return False
        return self._simulation.drag_start(vertex_id, x, y)

    def drag_move(self, vertex_id: str, x: float, y: float) -> bool:
        if self._directionality.is_tree:
            return False
        return self._simulation.drag_move(vertex_id, x, y)

    def drag_end(self, vertex_id: str) -> bool:
        if self._directionality.is_tree:
            return False
        return self._simulation.drag_end(vertex_id)

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def positions(self) -> dict[str, Point]:
        """Vertex id -> (x, y) for the active mode."""
        if self._forest is not None:
            return self._forest.positions()
        return self._simulation.positions()

    def edges(self) -> list[ResolvedEdge]:
        """Edges of the active mode with endpoint positions resolved."""
        positions = self.positions()
        resolved: list[ResolvedEdge] = []
        edges: list[Any] = list(self.graph.edges)
        if self._forest is not None:
            edges = list(self._forest.edges)
        for edge in edges:
            source = positions.get(edge.source)
            target = positions.get(edge.target)
            if source is None or target is None:
                continue
            resolved.append(
                ResolvedEdge(edge.source, edge.target, edge.directed, source, target, edge.style)
            )
        return resolved

    def locators(self) -> list[Locator]:
        """Indicators for off-screen vertices; empty in tree modes."""
        if self._directionality.is_tree:
            return []
        return locate(
            self.graph.vertices,
            self._simulation.positions(),
            self._transform,
            self._size,
            base_radius=self._base_radius,
        )

    def frame(self) -> Frame:
        """Snapshot for one redraw; advances the locator join and ends a mode transition."""
        locators = self.locators()
        self._locator_join.update(locators)
        frame = Frame(
            directionality=self._directionality,
            positions=self.positions(),
            edges=self.edges(),
            locators=locators,
            transition_duration=self.transition_duration,
        )
        self._previous = self._directionality
        return frame

    @property
    def locator_join(self) -> LocatorJoin:
        """Enter/update/exit ids from the last frame()."""
        return self._locator_join

    def zoom_to_fit(self, padding: float = 0.25) -> Optional[Transform]:
        """
        Pan/zoom so every free-form vertex fits the viewport.

        The transform is applied and returned; None in tree modes or when no
        vertex has a position.
        """
        if self._directionality.is_tree:
            return None
        positions = self._simulation.positions()
        if not positions:
            return None

        xs = [p[0] for p in positions.values()]
        ys = [p[1] for p in positions.values()]
        x_min, x_max = min(xs), max(xs)
        y_min, y_max = min(ys), max(ys)
        width, height = self._size

        extent = (1 + padding) * max((x_max - x_min) / width, (y_max - y_min) / height)
        k = 1.0 / extent if extent > 0 else 1.0
        cx, cy = (x_min + x_max) / 2, (y_min + y_max) / 2
        self._transform = Transform(x=-k * cx, y=-k * cy, k=k)
        return self._transform


__all__ = [
    "DEFAULT_TRANSITION_DURATION",
    "Frame",
    "GraphLayout",
    "ResolvedEdge",
]
