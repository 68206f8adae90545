"""
Easing curves and position interpolation for mode transitions.

The renderer plays transitions; the engine only supplies the curve and the
interpolated positions at a normalised time t in [0, 1].
"""

from __future__ import annotations

import math
from typing import Callable, Mapping, Union

from .types import Point

EaseFunction = Callable[[float], float]

_TAU = 2 * math.pi
_ELASTIC_AMPLITUDE = 1.0
_ELASTIC_PERIOD = 0.3

_B1 = 4 / 11
_B2 = 6 / 11
_B3 = 8 / 11
_B4 = 3 / 4
_B5 = 9 / 11
_B6 = 10 / 11
_B7 = 15 / 16
_B8 = 21 / 22
_B9 = 63 / 64
_B0 = 1 / _B1 / _B1


def linear(t: float) -> float:
    return t


def quad_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t / 2
    t -= 1
    return (t * (2 - t) + 1) / 2


def _tpmt(x: float) -> float:
    # 2^(-10x) rescaled so that tpmt(0) == 1 and tpmt(1) == 0
    return (2 ** (-10 * x) - 0.0009765625) * 1.0009775171065494


def elastic_in(t: float) -> float:
    a = max(1.0, _ELASTIC_AMPLITUDE)
    p = _ELASTIC_PERIOD / _TAU
    s = math.asin(1 / a) * p
    t -= 1
    return a * _tpmt(-t) * math.sin((s - t) / p)


def bounce_out(t: float) -> float:
    if t < _B1:
        return _B0 * t * t
    if t < _B3:
        t -= _B2
        return _B0 * t * t + _B4
    if t < _B6:
        t -= _B5
        return _B0 * t * t + _B7
    t -= _B8
    return _B0 * t * t + _B9


def bounce_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return (1 - bounce_out(1 - t)) / 2
    return (bounce_out(t - 1) + 1) / 2


EASINGS: dict[str, EaseFunction] = {
    "linear": linear,
    "quad_in_out": quad_in_out,
    "elastic_in": elastic_in,
    "bounce_in_out": bounce_in_out,
}

_ALIASES = {
    "easeLinear": "linear",
    "easeQuadInOut": "quad_in_out",
    "easeElasticIn": "elastic_in",
    "easeBounceInOut": "bounce_in_out",
}


def get_ease(ease: Union[str, EaseFunction]) -> EaseFunction:
    """
    Resolve an easing curve by name (snake case or camel case) or pass a callable through.

    Raises:
        ValueError: If the name is unknown
    """
    if callable(ease):
        return ease
    name = _ALIASES.get(ease, ease)
    if name not in EASINGS:
        raise ValueError(f"ease must be one of {sorted(EASINGS)}, got {ease!r}")
    return EASINGS[name]


def interpolate_positions(
    start: Mapping[str, Point],
    end: Mapping[str, Point],
    t: float,
    ease: Union[str, EaseFunction] = linear,
) -> dict[str, Point]:
    """
    Positions at time t of a transition from `start` to `end`.

    Ids only in `end` sit at their target; ids only in `start` are dropped.
    """
    e = get_ease(ease)(max(0.0, min(1.0, t)))
    result: dict[str, Point] = {}
    for vertex_id, (x1, y1) in end.items():
        origin = start.get(vertex_id)
        if origin is None:
            result[vertex_id] = (x1, y1)
        else:
            x0, y0 = origin
            result[vertex_id] = (x0 + (x1 - x0) * e, y0 + (y1 - y0) * e)
    return result


__all__ = [
    "EASINGS",
    "EaseFunction",
    "bounce_in_out",
    "elastic_in",
    "get_ease",
    "interpolate_positions",
    "linear",
    "quad_in_out",
]
