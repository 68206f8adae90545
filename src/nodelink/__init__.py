"""
nodelink: Layout engine for interactive node-link diagrams.

This package positions the vertices of a graph for an interactive viewer
that switches between a free-form force layout and tidy tree layouts.

Components:
- model: Graph snapshot and per-vertex state carried across replacements
- hierarchical: Forest extraction and Reingold-Tilford tree placement
- force: Tick-driven force simulation with drag pins
- locator: Border indicators for off-screen vertices
- engine: GraphLayout, which switches between the modes
"""

__version__ = "0.1.0"

# Base classes for building layouts
from .base import (
    BaseLayout,
    IterativeLayout,
    StaticLayout,
)

# Transition curves
from .easing import EASINGS, get_ease, interpolate_positions

# Engine
from .engine import DEFAULT_TRANSITION_DURATION, Frame, GraphLayout, ResolvedEdge

# Force simulation
from .force import (
    ForceSimulation,
    LinkForce,
    ManyBodyForce,
    PositionXForce,
    PositionYForce,
)

# Tree layouts
from .hierarchical import (
    PositionedForest,
    ReingoldTilford,
    TreeLayout,
    TreeNode,
    TreeStructureWarning,
    build_forest,
)

# Viewport locators
from .locator import Locator, LocatorJoin, Transform, locate

# Graph model
from .model import Graph, GraphModel, PositionStore
from .types import (
    DEFAULT_RADIUS,
    Directionality,
    DragState,
    Edge,
    Event,
    EventType,
    Style,
    Vertex,
    VertexState,
)
from .validation import (
    InvalidDirectionalityError,
    InvalidViewportSizeError,
    ValidationError,
)

__all__ = [
    "__version__",
    # Base classes
    "BaseLayout",
    "IterativeLayout",
    "StaticLayout",
    # Types
    "DEFAULT_RADIUS",
    "Directionality",
    "DragState",
    "Edge",
    "Event",
    "EventType",
    "Style",
    "Vertex",
    "VertexState",
    # Model
    "Graph",
    "GraphModel",
    "PositionStore",
    # Tree layouts
    "PositionedForest",
    "ReingoldTilford",
    "TreeLayout",
    "TreeNode",
    "TreeStructureWarning",
    "build_forest",
    # Force simulation
    "ForceSimulation",
    "LinkForce",
    "ManyBodyForce",
    "PositionXForce",
    "PositionYForce",
    # Locators
    "Locator",
    "LocatorJoin",
    "Transform",
    "locate",
    # Easing
    "EASINGS",
    "get_ease",
    "interpolate_positions",
    # Engine
    "DEFAULT_TRANSITION_DURATION",
    "Frame",
    "GraphLayout",
    "ResolvedEdge",
    # Validation
    "InvalidDirectionalityError",
    "InvalidViewportSizeError",
    "ValidationError",
]
