"""
Tick-driven force simulation.

The simulation relaxes the free-form layout with velocity Verlet
integration: every tick alpha moves toward alpha_target, each force adds to
the velocities, velocities decay, and positions advance. Pinned vertices
follow their pin instead.

Ticks are scheduled by an external driver (an animation timer) through
step(); tick() is not reentrant.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from ..base import IterativeLayout
from ..model import PositionStore
from ..types import DragState, Edge, EventCallback, EventType, Point, SizeType, Vertex
from .forces import Force, LinkForce, ManyBodyForce, Particles, PositionXForce, PositionYForce

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

DRAG_ALPHA_TARGET = 0.3
"""Energy the simulation is held at while any vertex is being dragged."""


def default_forces() -> dict[str, Force]:
    """Repulsion, links and centering with the engine's default strengths."""
    return {
        "link": LinkForce(strength=0.2),
        "charge": ManyBodyForce(strength=-500.0),
        "x": PositionXForce(0.0, strength=0.05),
        "y": PositionYForce(0.0, strength=0.05),
    }


class ForceSimulation(IterativeLayout):
    """
    Force-directed relaxation over a PositionStore.

    Example:
        store = PositionStore()
        sim = ForceSimulation(store=store, vertices=vertices, edges=edges)
        sim.restart()
        while sim.running:
            sim.step()  # normally called once per animation frame
        print(store.snapshot())
    """

    def __init__(
        self,
        *,
        store: Optional[PositionStore] = None,
        vertices: Sequence[Vertex] = (),
        edges: Sequence[Edge] = (),
        forces: Optional[dict[str, Force]] = None,
        size: SizeType = (1.0, 1.0),
        random_seed: Optional[int] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: Optional[float] = None,
        alpha_target: float = 0.0,
        iterations: int = 300,
        velocity_decay: float = 0.4,
    ) -> None:
        """
        Initialize force simulation.

        Args:
            store: Position store shared with the rest of the engine
            vertices: Vertices to simulate
            edges: Edges for the link force
            forces: Named forces; defaults to default_forces()
            size: Viewport size as (width, height)
            random_seed: Seed for the jiggle applied to coincident vertices
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            alpha: Initial alpha (0 to 1)
            alpha_min: Alpha below which step() stops the simulation
            alpha_decay: Per-tick decay; defaults to reaching alpha_min in `iterations` ticks
            alpha_target: Value alpha decays toward
            iterations: Tick budget for kick()
            velocity_decay: Fraction of velocity lost per tick (friction)
        """
        super().__init__(
            size=size,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
            alpha=alpha,
            alpha_min=alpha_min,
            alpha_decay=alpha_decay,
            alpha_target=alpha_target,
            iterations=iterations,
        )
        self._store = store if store is not None else PositionStore()
        self._velocity_decay: float = max(0.0, min(1.0, float(velocity_decay)))
        self._rng = np.random.default_rng(random_seed)
        self._forces: dict[str, Force] = dict(forces) if forces is not None else default_forces()
        self._vertices: list[Vertex] = []
        self._edges: list[Edge] = []
        self._dragging: set[str] = set()
        self._ticking: bool = False

        self.set_data(vertices, edges)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def store(self) -> PositionStore:
        return self._store

    @property
    def vertices(self) -> list[Vertex]:
        return self._vertices

    @property
    def edges(self) -> list[Edge]:
        return self._edges

    @property
    def velocity_decay(self) -> float:
        """Get velocity decay (friction)."""
        return self._velocity_decay

    @velocity_decay.setter
    def velocity_decay(self, value: float) -> None:
        """Set velocity decay, clamped to [0, 1]."""
        self._velocity_decay = max(0.0, min(1.0, float(value)))

    @property
    def forces(self) -> dict[str, Force]:
        """Copy of the named forces."""
        return dict(self._forces)

    @property
    def dragging(self) -> frozenset[str]:
        """Ids of vertices currently pinned by a drag."""
        return frozenset(self._dragging)

    # -------------------------------------------------------------------------
    # Data
    # -------------------------------------------------------------------------

    def set_data(self, vertices: Sequence[Vertex], edges: Sequence[Edge] = ()) -> Self:
        """
        Replace the simulated vertices and edges.

        Existing store state is kept; vertices without a position are seeded
        on a phyllotaxis spiral around the origin.
        """
        self._vertices = list(vertices)
        self._edges = list(edges)
        had_drag = bool(self._dragging)
        self._dragging &= {v.id for v in self._vertices}
        if had_drag and not self._dragging:
            self.alpha_target = 0.0
        self._initialize_vertices()
        for force in self._forces.values():
            force.initialize(self._vertices, self._edges, self._rng)
        return self

    def _initialize_vertices(self) -> None:
        for i, vertex in enumerate(self._vertices):
            state = self._store.ensure(vertex.id)
            if state.fx is not None:
                state.x = state.fx
            if state.fy is not None:
                state.y = state.fy
            if state.x is None or state.y is None:
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                state.x = radius * math.cos(angle)
                state.y = radius * math.sin(angle)
            if state.vx is None or state.vy is None:
                state.vx = 0.0
                state.vy = 0.0

    # -------------------------------------------------------------------------
    # Forces
    # -------------------------------------------------------------------------

    def force(self, name: str) -> Optional[Force]:
        """Get a named force."""
        return self._forces.get(name)

    def set_force(self, name: str, force: Optional[Force]) -> Self:
        """Install (or with None, remove) a named force."""
        if force is None:
            self._forces.pop(name, None)
        else:
            force.initialize(self._vertices, self._edges, self._rng)
            self._forces[name] = force
        return self

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def tick(self) -> bool:
        """
        Advance the simulation by one step and notify tick listeners.

        Returns:
            True once alpha has fallen below alpha_min.

        Raises:
            RuntimeError: If called from inside another tick.
        """
        if self._ticking:
            raise RuntimeError("ForceSimulation.tick() is not reentrant")
        self._ticking = True
        try:
            self._alpha += (self._alpha_target - self._alpha) * self._alpha_decay
            particles = self._gather()
            for force in self._forces.values():
                force.apply(particles, self._alpha)
            self._integrate(particles)
            self.trigger({"type": EventType.tick, "alpha": self._alpha})
        finally:
            self._ticking = False

        return self._alpha < self._alpha_min

    def step(self) -> bool:
        """
        Timer callback: tick if running, stop and fire end on convergence.

        Returns:
            True if a tick was performed.
        """
        if not self._running:
            return False
        if self.tick():
            self._running = False
            self.trigger({"type": EventType.end, "alpha": self._alpha})
        return True

    def _gather(self) -> Particles:
        states = [self._store[v.id] for v in self._vertices]
        return Particles(
            ids=[v.id for v in self._vertices],
            x=np.array([s.x for s in states], dtype=np.float64),
            y=np.array([s.y for s in states], dtype=np.float64),
            vx=np.array([s.vx for s in states], dtype=np.float64),
            vy=np.array([s.vy for s in states], dtype=np.float64),
        )

    def _integrate(self, particles: Particles) -> None:
        """Write velocities and positions back to the store."""
        keep = 1 - self._velocity_decay
        for i, vertex_id in enumerate(particles.ids):
            state = self._store[vertex_id]
            if state.drag is DragState.releasing:
                state.drag = DragState.free

            if state.fx is None:
                state.vx = float(particles.vx[i]) * keep
                state.x = float(particles.x[i]) + state.vx
            else:
                state.x = state.fx
                state.vx = 0.0

            if state.fy is None:
                state.vy = float(particles.vy[i]) * keep
                state.y = float(particles.y[i]) + state.vy
            else:
                state.y = state.fy
                state.vy = 0.0

    # -------------------------------------------------------------------------
    # Drag Interaction
    # -------------------------------------------------------------------------

    def drag_start(
        self, vertex_id: str, x: Optional[float] = None, y: Optional[float] = None
    ) -> bool:
        """
        Pin a vertex at (x, y), or where it currently is, and warm the simulation.

        Returns:
            False if the vertex is not simulated.
        """
        state = self._store.get(vertex_id)
        if state is None or vertex_id not in {v.id for v in self._vertices}:
            return False
        state.fx = float(x) if x is not None else state.x
        state.fy = float(y) if y is not None else state.y
        state.drag = DragState.pinned
        self._dragging.add(vertex_id)
        self.alpha_target = DRAG_ALPHA_TARGET
        self.restart()
        return True

    def drag_move(self, vertex_id: str, x: float, y: float) -> bool:
        """Move the pin of a dragged vertex."""
        state = self._store.get(vertex_id)
        if state is None or state.drag is not DragState.pinned:
            return False
        state.fx = float(x)
        state.fy = float(y)
        return True

    def drag_end(self, vertex_id: str) -> bool:
        """Release a dragged vertex back into the simulation."""
        state = self._store.get(vertex_id)
        if state is None or state.drag is not DragState.pinned:
            return False
        state.fx = None
        state.fy = None
        state.drag = DragState.releasing
        self._dragging.discard(vertex_id)
        if not self._dragging:
            self.alpha_target = 0.0
        return True

    def release_drags(self) -> Self:
        """End every active drag."""
        for vertex_id in list(self._dragging):
            self.drag_end(vertex_id)
        self._dragging.clear()
        self.alpha_target = 0.0
        return self

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def positions(self) -> dict[str, Point]:
        """Current position of every simulated vertex."""
        result: dict[str, Point] = {}
        for vertex in self._vertices:
            point = self._store.position(vertex.id)
            if point is not None:
                result[vertex.id] = point
        return result


__all__ = [
    "DRAG_ALPHA_TARGET",
    "ForceSimulation",
    "default_forces",
]
