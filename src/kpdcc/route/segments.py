"""Route segment data structures.

A route is a chain of straight and circular-arc segments. Segment KP values
are in kilometers; coordinates are in the route's linear unit. ``status`` and
``type_code`` are carried from RLX segment lines for reporting only.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from kpdcc.config import DEGENERATE_LENGTH, RLX_TYPE_ARC, RLX_TYPE_STRAIGHT
from kpdcc.utils.math_helpers import (
    angular_span, point_on_circle, survey_bearing,
)


@dataclass(frozen=True)
class StraightSegment:
    """Straight line segment between two coordinates."""
    start_easting: float
    start_northing: float
    end_easting: float
    end_northing: float
    start_kp: float
    length: float                 # Along-route length in KP units (km)
    status: int = 0
    type_code: int = RLX_TYPE_STRAIGHT

    @property
    def end_kp(self) -> float:
        return self.start_kp + self.length

    def contains_kp(self, kp: float) -> bool:
        return self.start_kp <= kp <= self.end_kp

    def fraction_at_kp(self, kp: float) -> float:
        if self.length < DEGENERATE_LENGTH:
            return 0.0
        return (kp - self.start_kp) / self.length

    def point_at_kp(self, kp: float) -> Tuple[float, float]:
        """Get (easting, northing) at a KP along this segment."""
        t = self.fraction_at_kp(kp)
        e = self.start_easting + t * (self.end_easting - self.start_easting)
        n = self.start_northing + t * (self.end_northing - self.start_northing)
        return (e, n)


@dataclass(frozen=True)
class ArcSegment:
    """Circular arc segment.

    ``radius`` is stored signed as read from the route source; only its
    magnitude is used for geometry. ``clockwise`` arcs turn right, i.e. the
    bearing from the center increases from start to end.
    """
    start_easting: float
    start_northing: float
    end_easting: float
    end_northing: float
    start_kp: float
    length: float
    radius: float
    clockwise: bool
    center_easting: Optional[float] = None
    center_northing: Optional[float] = None
    status: int = 0
    type_code: int = RLX_TYPE_ARC

    @property
    def end_kp(self) -> float:
        return self.start_kp + self.length

    @property
    def abs_radius(self) -> float:
        return abs(self.radius)

    @property
    def center(self) -> Tuple[float, float]:
        """Arc center, explicit if known, else derived from chord and radius.

        Without an explicit center the arc is taken as the minor arc: the
        center sits right of the chord for clockwise arcs and left of it for
        counter-clockwise arcs.
        """
        if self.center_easting is not None and self.center_northing is not None:
            return (self.center_easting, self.center_northing)

        dx = self.end_easting - self.start_easting
        dy = self.end_northing - self.start_northing
        chord = math.sqrt(dx * dx + dy * dy)
        mid_e = (self.start_easting + self.end_easting) / 2.0
        mid_n = (self.start_northing + self.end_northing) / 2.0
        if chord < DEGENERATE_LENGTH:
            return (mid_e, mid_n)

        half = chord / 2.0
        h = math.sqrt(max(self.abs_radius ** 2 - half * half, 0.0))
        ux, uy = dx / chord, dy / chord
        if self.clockwise:
            nx, ny = uy, -ux      # right-hand normal
        else:
            nx, ny = -uy, ux      # left-hand normal
        return (mid_e + h * nx, mid_n + h * ny)

    @property
    def start_angle(self) -> float:
        ce, cn = self.center
        return survey_bearing(ce, cn, self.start_easting, self.start_northing)

    @property
    def end_angle(self) -> float:
        ce, cn = self.center
        return survey_bearing(ce, cn, self.end_easting, self.end_northing)

    @property
    def span(self) -> float:
        """Central angle swept from start to end (radians, non-negative)."""
        return angular_span(self.start_angle, self.end_angle, self.clockwise)

    def contains_kp(self, kp: float) -> bool:
        return self.start_kp <= kp <= self.end_kp

    def fraction_at_kp(self, kp: float) -> float:
        if self.length < DEGENERATE_LENGTH:
            return 0.0
        return (kp - self.start_kp) / self.length

    def point_at_kp(self, kp: float) -> Tuple[float, float]:
        """Get (easting, northing) at a KP along this arc."""
        ce, cn = self.center
        swept = self.fraction_at_kp(kp) * self.span
        if self.clockwise:
            bearing = self.start_angle + swept
        else:
            bearing = self.start_angle - swept
        return point_on_circle(ce, cn, self.abs_radius, bearing)


RouteSegment = Union[StraightSegment, ArcSegment]
