"""Mathematical helpers for survey bearings, arcs and distances."""
from __future__ import annotations

import math
from typing import Tuple


def survey_bearing(from_e: float, from_n: float, to_e: float, to_n: float) -> float:
    """Bearing from one point to another, clockwise from north.

    Uses the survey convention atan2(dE, dN), so the result lies in (-pi, pi].
    """
    return math.atan2(to_e - from_e, to_n - from_n)


def normalize_signed_angle(angle: float) -> float:
    """Normalize angle to (-pi, pi]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle <= -math.pi:
        angle += 2 * math.pi
    return angle


def angular_span(from_angle: float, to_angle: float, clockwise: bool) -> float:
    """Non-negative rotation from one bearing to another in the given sense.

    Bearings increase clockwise, so a clockwise span follows increasing
    bearing and a counter-clockwise span follows decreasing bearing.
    """
    span = normalize_signed_angle(to_angle - from_angle)
    if clockwise:
        if span < 0:
            span += 2 * math.pi
        return span
    if span > 0:
        span -= 2 * math.pi
    return -span


def point_on_circle(
    center_e: float, center_n: float, radius: float, bearing: float
) -> Tuple[float, float]:
    """Point at a bearing (CW from north) and radius from a center."""
    return (
        center_e + radius * math.sin(bearing),
        center_n + radius * math.cos(bearing),
    )


def distance_2d(x1: float, y1: float, x2: float, y2: float) -> float:
    """2D Euclidean distance."""
    return math.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range [min_val, max_val]."""
    return max(min_val, min(max_val, value))
