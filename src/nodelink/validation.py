"""
Input validation utilities for the layout engine.

Data problems (dangling edges, cycles, empty graphs) are never errors; they
are contained where they occur. The validators here guard API misuse only:
a non-positive viewport or an unknown layout mode.
"""

from __future__ import annotations

from typing import Any, Sequence

from .types import Directionality


class ValidationError(ValueError):
    """Base exception for layout validation errors."""

    pass


class InvalidViewportSizeError(ValidationError):
    """Raised when viewport dimensions are invalid."""

    pass


class InvalidDirectionalityError(ValidationError):
    """Raised when a layout mode name is not recognised."""

    pass


def validate_viewport_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate viewport size dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidViewportSizeError: If dimensions are invalid
    """
    if len(size) < 2:
        raise InvalidViewportSizeError(
            f"Viewport size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if width <= 0:
        raise InvalidViewportSizeError(f"Viewport width must be positive, got {width}")
    if height <= 0:
        raise InvalidViewportSizeError(f"Viewport height must be positive, got {height}")

    return width, height


def validate_directionality(value: Any) -> Directionality:
    """
    Resolve a layout mode from an enum member or a name.

    Raises:
        InvalidDirectionalityError: If the name is unknown
    """
    try:
        return Directionality(value)
    except ValueError:
        valid = ", ".join(m.value for m in Directionality)
        raise InvalidDirectionalityError(
            f"directionality must be one of {valid} (or 'none'), got {value!r}"
        ) from None


def validate_alpha(alpha: float) -> float:
    """
    Validate alpha is in valid range.

    Raises:
        ValidationError: If alpha not in [0, 1]
    """
    if alpha < 0 or alpha > 1:
        raise ValidationError(f"alpha must be in [0, 1], got {alpha}")
    return alpha


def find_dangling_edges(edges: Sequence[Any], vertex_ids: set[str]) -> list[tuple[int, str]]:
    """
    Report edges whose endpoints are not among the given vertex ids.

    Args:
        edges: Sequence of Edge objects
        vertex_ids: Known vertex ids

    Returns:
        List of (edge_index, issue_description) tuples
    """
    issues: list[tuple[int, str]] = []
    for i, edge in enumerate(edges):
        if edge.source not in vertex_ids:
            issues.append((i, f"Edge {i}: unknown source {edge.source!r}"))
        if edge.target not in vertex_ids:
            issues.append((i, f"Edge {i}: unknown target {edge.target!r}"))
    return issues


__all__ = [
    "ValidationError",
    "InvalidViewportSizeError",
    "InvalidDirectionalityError",
    "validate_viewport_size",
    "validate_directionality",
    "validate_alpha",
    "find_dangling_edges",
]
