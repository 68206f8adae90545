"""
Force terms for the force simulation.

Each force adds to particle velocities in place, scaled by the current
alpha. Forces are independent and can be swapped on a running simulation:

- ManyBodyForce: pairwise repulsion (or attraction), inversely with distance
- LinkForce: springs along edges, keyed by vertex id
- PositionXForce / PositionYForce: pull toward a fixed x or y
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

import numpy as np

from ..types import Edge, Vertex

VertexAccessor = Union[float, Callable[[Vertex], float]]
EdgeAccessor = Union[float, Callable[[Edge], float]]


def jiggle(rng: np.random.Generator, size: Optional[int] = None) -> np.ndarray | float:
    """Tiny random displacement used to separate coincident particles."""
    if size is None:
        return (float(rng.random()) - 0.5) * 1e-6
    return (rng.random(size) - 0.5) * 1e-6


@dataclass
class Particles:
    """
    Column view of the simulated vertices for one tick.

    Row i of every array belongs to ids[i].
    """

    ids: list[str]
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray

    def __len__(self) -> int:
        return len(self.ids)


class Force(ABC):
    """Base class for force terms."""

    def __init__(self) -> None:
        self._rng: np.random.Generator = np.random.default_rng()
        self._vertices: Sequence[Vertex] = ()
        self._edges: Sequence[Edge] = ()

    def initialize(
        self,
        vertices: Sequence[Vertex],
        edges: Sequence[Edge],
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Bind the force to the simulated vertices and edges.

        Called whenever the data or the force itself is replaced.
        """
        self._vertices = vertices
        self._edges = edges
        if rng is not None:
            self._rng = rng

    def _reinitialize(self) -> None:
        """Recompute cached per-vertex/per-edge values after a parameter change."""
        self.initialize(self._vertices, self._edges)

    @abstractmethod
    def apply(self, particles: Particles, alpha: float) -> None:
        """Add this force's contribution to particle velocities."""
        pass


def _per_vertex(value: VertexAccessor, vertices: Sequence[Vertex]) -> np.ndarray:
    if callable(value):
        return np.array([float(value(v)) for v in vertices], dtype=np.float64)
    return np.full(len(vertices), float(value), dtype=np.float64)


class ManyBodyForce(Force):
    """
    Pairwise force between all vertices.

    Negative strength repels. Each pair contributes
    `delta * strength * alpha / distance^2` to velocity, i.e. a magnitude
    inversely proportional to distance. Exact O(n^2), vectorized with numpy.

    Args:
        strength: Constant or per-vertex accessor. Default -500.
        distance_min: Distances below this are softened. Default 1.
        distance_max: Pairs at or beyond this distance are ignored.
    """

    def __init__(
        self,
        strength: VertexAccessor = -500.0,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> None:
        super().__init__()
        self._strength = strength
        self._distance_min2 = float(distance_min) ** 2
        self._distance_max2 = float(distance_max) ** 2
        self._strengths = np.zeros(0, dtype=np.float64)

    @property
    def strength(self) -> VertexAccessor:
        return self._strength

    @strength.setter
    def strength(self, value: VertexAccessor) -> None:
        self._strength = value
        self._reinitialize()

    def initialize(
        self,
        vertices: Sequence[Vertex],
        edges: Sequence[Edge],
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        super().initialize(vertices, edges, rng)
        self._strengths = _per_vertex(self._strength, vertices)

    def apply(self, particles: Particles, alpha: float) -> None:
        n = len(particles)
        strengths = self._strengths
        if n < 2 or len(strengths) != n:
            return

        # Row i holds the offsets from particle i to every other particle
        dx = particles.x[np.newaxis, :] - particles.x[:, np.newaxis]
        dy = particles.y[np.newaxis, :] - particles.y[:, np.newaxis]
        off_diagonal = ~np.eye(n, dtype=bool)

        zero_x = (dx == 0) & off_diagonal
        if zero_x.any():
            dx[zero_x] = jiggle(self._rng, int(zero_x.sum()))
        zero_y = (dy == 0) & off_diagonal
        if zero_y.any():
            dy[zero_y] = jiggle(self._rng, int(zero_y.sum()))

        l2 = dx * dx + dy * dy
        np.fill_diagonal(l2, 1.0)
        active = off_diagonal & (l2 < self._distance_max2)
        l2 = np.where(l2 < self._distance_min2, np.sqrt(self._distance_min2 * l2), l2)

        w = np.where(active, strengths[np.newaxis, :] * alpha / l2, 0.0)
        particles.vx += (dx * w).sum(axis=1)
        particles.vy += (dy * w).sum(axis=1)


class LinkForce(Force):
    """
    Spring force along edges.

    Endpoints are resolved by vertex id; edges whose ids are not simulated
    are ignored. The correction is split between the endpoints by degree,
    so hubs move less than leaves.

    Args:
        strength: Constant or per-edge accessor. None uses
            1 / min(degree(source), degree(target)). Default 0.2.
        distance: Rest length, constant or per-edge accessor. Default 30.
        iterations: Relaxation passes per tick. Default 1.
    """

    def __init__(
        self,
        strength: Optional[EdgeAccessor] = 0.2,
        distance: EdgeAccessor = 30.0,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self._strength = strength
        self._distance = distance
        self._iterations = max(1, int(iterations))
        self._links: list[tuple[int, int, float, float, float]] = []

    @property
    def strength(self) -> Optional[EdgeAccessor]:
        return self._strength

    @strength.setter
    def strength(self, value: Optional[EdgeAccessor]) -> None:
        self._strength = value
        self._reinitialize()

    @property
    def distance(self) -> EdgeAccessor:
        return self._distance

    @distance.setter
    def distance(self, value: EdgeAccessor) -> None:
        self._distance = value
        self._reinitialize()

    @property
    def links(self) -> list[tuple[int, int, float, float, float]]:
        """Resolved (source, target, strength, distance, bias) rows."""
        return self._links

    def initialize(
        self,
        vertices: Sequence[Vertex],
        edges: Sequence[Edge],
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        super().initialize(vertices, edges, rng)
        index = {v.id: i for i, v in enumerate(vertices)}
        resolved = [
            (edge, index[edge.source], index[edge.target])
            for edge in edges
            if edge.source in index and edge.target in index and edge.source != edge.target
        ]

        count = [0] * len(vertices)
        for _, s, t in resolved:
            count[s] += 1
            count[t] += 1

        self._links = []
        for edge, s, t in resolved:
            if self._strength is None:
                strength = 1.0 / min(count[s], count[t])
            elif callable(self._strength):
                strength = float(self._strength(edge))
            else:
                strength = float(self._strength)
            if callable(self._distance):
                distance = float(self._distance(edge))
            else:
                distance = float(self._distance)
            bias = count[s] / (count[s] + count[t])
            self._links.append((s, t, strength, distance, bias))

    def apply(self, particles: Particles, alpha: float) -> None:
        x, y, vx, vy = particles.x, particles.y, particles.vx, particles.vy
        for _ in range(self._iterations):
            for s, t, strength, distance, bias in self._links:
                dx = x[t] + vx[t] - x[s] - vx[s]
                dy = y[t] + vy[t] - y[s] - vy[s]
                if dx == 0:
                    dx = jiggle(self._rng)
                if dy == 0:
                    dy = jiggle(self._rng)
                length = math.sqrt(dx * dx + dy * dy)
                length = (length - distance) / length * alpha * strength
                dx *= length
                dy *= length
                vx[t] -= dx * bias
                vy[t] -= dy * bias
                vx[s] += dx * (1 - bias)
                vy[s] += dy * (1 - bias)


class _PositionForce(Force):
    """Pull every vertex toward a target coordinate on one axis."""

    def __init__(self, target: VertexAccessor = 0.0, strength: VertexAccessor = 0.05) -> None:
        super().__init__()
        self._target = target
        self._strength = strength
        self._targets = np.zeros(0, dtype=np.float64)
        self._strengths = np.zeros(0, dtype=np.float64)

    @property
    def strength(self) -> VertexAccessor:
        return self._strength

    @strength.setter
    def strength(self, value: VertexAccessor) -> None:
        self._strength = value
        self._reinitialize()

    def initialize(
        self,
        vertices: Sequence[Vertex],
        edges: Sequence[Edge],
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        super().initialize(vertices, edges, rng)
        self._targets = _per_vertex(self._target, vertices)
        self._strengths = _per_vertex(self._strength, vertices)

    def _pull(self, positions: np.ndarray, alpha: float) -> np.ndarray:
        if len(self._targets) != len(positions):
            return np.zeros_like(positions)
        return (self._targets - positions) * self._strengths * alpha


class PositionXForce(_PositionForce):
    """Pull toward x (default 0) with the given strength (default 0.05)."""

    def __init__(self, x: VertexAccessor = 0.0, strength: VertexAccessor = 0.05) -> None:
        super().__init__(x, strength)

    @property
    def x(self) -> VertexAccessor:
        return self._target

    def apply(self, particles: Particles, alpha: float) -> None:
        particles.vx += self._pull(particles.x, alpha)


class PositionYForce(_PositionForce):
    """Pull toward y (default 0) with the given strength (default 0.05)."""

    def __init__(self, y: VertexAccessor = 0.0, strength: VertexAccessor = 0.05) -> None:
        super().__init__(y, strength)

    @property
    def y(self) -> VertexAccessor:
        return self._target

    def apply(self, particles: Particles, alpha: float) -> None:
        particles.vy += self._pull(particles.y, alpha)


__all__ = [
    "Force",
    "Particles",
    "ManyBodyForce",
    "LinkForce",
    "PositionXForce",
    "PositionYForce",
    "jiggle",
]
