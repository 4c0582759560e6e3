"""Segment projector: closest-point KP and DCC of a point against one segment.

Straight segments give a perpendicular DCC, positive right of the direction
of travel. Arc segments give a radial DCC measured from the arc itself:
``radius - distance_to_center`` for clockwise arcs and
``distance_to_center - radius`` for counter-clockwise arcs, also when the
point falls outside the arc's angular span.
"""
from __future__ import annotations

import math
from typing import NamedTuple

from kpdcc.config import DEGENERATE_LENGTH
from kpdcc.route.segments import ArcSegment, RouteSegment, StraightSegment
from kpdcc.utils.math_helpers import (
    angular_span, clamp, distance_2d, point_on_circle, survey_bearing,
)


class ProjectionResult(NamedTuple):
    """Candidate position of a point against a single segment."""
    kp: float           # Route KP (km) of the closest point
    dcc: float          # Signed offset
    distance: float     # Unsigned distance to the closest point


def project_straight(easting: float, northing: float, segment: StraightSegment) -> ProjectionResult:
    """Project a point onto a straight segment, clamped to its ends."""
    seg_dx = segment.end_easting - segment.start_easting
    seg_dy = segment.end_northing - segment.start_northing
    seg_length = math.sqrt(seg_dx * seg_dx + seg_dy * seg_dy)

    if seg_length < DEGENERATE_LENGTH:
        # No direction, so the offset is unsigned
        dist_to_start = distance_2d(
            easting, northing, segment.start_easting, segment.start_northing,
        )
        return ProjectionResult(segment.start_kp, dist_to_start, dist_to_start)

    ux = seg_dx / seg_length
    uy = seg_dy / seg_length

    px = easting - segment.start_easting
    py = northing - segment.start_northing
    along = px * ux + py * uy
    clamped_along = clamp(along, 0.0, seg_length)

    fraction = clamped_along / seg_length
    kp = segment.start_kp + fraction * segment.length

    closest_e = segment.start_easting + clamped_along * ux
    closest_n = segment.start_northing + clamped_along * uy
    distance = distance_2d(easting, northing, closest_e, closest_n)

    cross = (easting - closest_e) * uy - (northing - closest_n) * ux
    dcc = distance if cross >= 0 else -distance
    return ProjectionResult(kp, dcc, distance)


def project_arc(easting: float, northing: float, segment: ArcSegment) -> ProjectionResult:
    """Project a point onto a circular arc segment."""
    center_e, center_n = segment.center
    radius = segment.abs_radius
    clockwise = segment.clockwise

    dist_to_center = distance_2d(easting, northing, center_e, center_n)
    point_angle = survey_bearing(center_e, center_n, easting, northing)
    start_angle = survey_bearing(center_e, center_n, segment.start_easting, segment.start_northing)
    end_angle = survey_bearing(center_e, center_n, segment.end_easting, segment.end_northing)

    full_span = abs(angular_span(start_angle, end_angle, clockwise))
    angle_from_start = angular_span(start_angle, point_angle, clockwise)

    if 0.0 <= angle_from_start <= full_span:
        fraction = angle_from_start / full_span if full_span >= DEGENERATE_LENGTH else 0.0
        kp = segment.start_kp + fraction * segment.length
        closest_e, closest_n = point_on_circle(center_e, center_n, radius, point_angle)
    else:
        dist_to_start = distance_2d(
            easting, northing, segment.start_easting, segment.start_northing,
        )
        dist_to_end = distance_2d(
            easting, northing, segment.end_easting, segment.end_northing,
        )
        if dist_to_start < dist_to_end:
            kp = segment.start_kp
            closest_e, closest_n = segment.start_easting, segment.start_northing
        else:
            kp = segment.end_kp
            closest_e, closest_n = segment.end_easting, segment.end_northing

    distance = distance_2d(easting, northing, closest_e, closest_n)

    if clockwise:
        dcc = radius - dist_to_center
    else:
        dcc = dist_to_center - radius
    return ProjectionResult(kp, dcc, distance)


def project(easting: float, northing: float, segment: RouteSegment) -> ProjectionResult:
    """Project a point onto any route segment."""
    if isinstance(segment, ArcSegment):
        return project_arc(easting, northing, segment)
    return project_straight(easting, northing, segment)
