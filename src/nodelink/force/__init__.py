"""
Force-directed layout.

This module provides the free-form relaxation used by the engine:
- ForceSimulation: Tick-driven velocity Verlet simulation with drag pins
- ManyBodyForce, LinkForce, PositionXForce, PositionYForce: Force terms
"""

from .forces import Force, LinkForce, ManyBodyForce, Particles, PositionXForce, PositionYForce
from .simulation import DRAG_ALPHA_TARGET, ForceSimulation, default_forces

__all__ = [
    "ForceSimulation",
    "default_forces",
    "DRAG_ALPHA_TARGET",
    "Force",
    "Particles",
    "ManyBodyForce",
    "LinkForce",
    "PositionXForce",
    "PositionYForce",
]
