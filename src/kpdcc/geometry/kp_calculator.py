"""KP calculator: KP and DCC of survey points relative to a route.

KP (kilometer point) is the along-route chainage of the closest point on the
route centerline; DCC is the signed offset from that centerline. Each query
point is projected onto every segment and the candidate with the smallest
absolute DCC wins. Arc DCC is a radial deviation while straight DCC is a
perpendicular distance, so at straight/arc joins the chosen segment follows
that comparison rather than the true nearest segment.
"""
from __future__ import annotations

import logging
import math
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from kpdcc import config
from kpdcc.config import LengthUnit
from kpdcc.geometry.projector import project
from kpdcc.model.survey_point import SurveyPoint
from kpdcc.route.route_data import RouteData
from kpdcc.route.segments import ArcSegment
from kpdcc.utils.units import convert_kp

logger = logging.getLogger(__name__)


class CalculationCancelled(Exception):
    """Raised when a batch calculation is cancelled between points."""


class KpCalculator:
    """Computes KP/DCC for points against a fixed route and output unit."""

    def __init__(self, route: RouteData, output_unit: LengthUnit = LengthUnit.KILOMETER):
        if route is None:
            raise ValueError("route is required")
        self.route = route
        self.output_unit = output_unit

    def calculate(self, easting: float, northing: float) -> Tuple[float, float]:
        """Calculate (KP, DCC) for a single point.

        KP is in the output unit. DCC is positive right of the route
        direction on straights; on arcs it is the radial deviation. An
        empty route returns (0.0, inf).
        """
        best_kp = 0.0
        best_dcc = math.inf

        for segment in self.route.segments:
            result = project(easting, northing, segment)
            if abs(result.dcc) < abs(best_dcc):
                best_kp = result.kp
                best_dcc = result.dcc

        return convert_kp(best_kp, self.output_unit), best_dcc

    def calculate_all(
        self,
        points: Sequence[SurveyPoint],
        progress: Optional[Callable[[int], None]] = None,
        cancel=None,
    ) -> List[SurveyPoint]:
        """Calculate KP/DCC for every point, in order.

        Args:
            points: Input points; they are not modified.
            progress: Called with percent complete every PROGRESS_STEP points.
            cancel: Optional object with ``is_set()`` (e.g. threading.Event),
                checked before each point.

        Returns:
            New points carrying ``kp`` and ``dcc``, in input order.

        Raises:
            CalculationCancelled: ``cancel`` was set before all points were done.
        """
        total = len(points)
        logger.debug("Calculating KP/DCC for %d points on %d segments",
                     total, len(self.route.segments))

        results = []
        for i, point in enumerate(points):
            if cancel is not None and cancel.is_set():
                raise CalculationCancelled(f"Cancelled after {i} of {total} points")

            kp, dcc = self.calculate(point.easting, point.northing)
            results.append(point.with_kp_dcc(kp, dcc))

            if progress is not None and i % config.PROGRESS_STEP == 0:
                progress(int(100.0 * i / total))

        logger.debug("KP/DCC calculation complete")
        return results

    def calculate_array(self, eastings, northings) -> Tuple[np.ndarray, np.ndarray]:
        """Calculate KP/DCC for coordinate arrays of any matching shape.

        Each element goes through calculate() in turn; the arrays carry
        shape only and the work is not vectorised.

        Returns:
            (kp, dcc) float arrays with the shape of the inputs.
        """
        e = np.asarray(eastings, dtype=float)
        n = np.asarray(northings, dtype=float)
        if e.shape != n.shape:
            raise ValueError(f"Shape mismatch: eastings {e.shape}, northings {n.shape}")

        kp = np.empty(e.shape, dtype=float)
        dcc = np.empty(e.shape, dtype=float)
        for idx in np.ndindex(e.shape):
            kp[idx], dcc[idx] = self.calculate(float(e[idx]), float(n[idx]))
        return kp, dcc

    def iter_points_at_interval(self, interval: float) -> Iterator[Tuple[float, float, float]]:
        """Yield (KP, easting, northing) samples along the route.

        Args:
            interval: Sample spacing in meters; route KP is in kilometers.

        Samples with no resolvable coordinates are skipped. KP is yielded in
        the output unit.
        """
        if interval <= 0:
            raise ValueError(f"Sampling interval must be positive, got {interval}")

        step = interval / config.METERS_PER_KILOMETER
        start_kp = self.route.start_kp
        end_kp = self.route.end_kp

        i = 0
        kp = start_kp
        while kp <= end_kp:
            coords = self.route.get_coordinates_at_kp(kp)
            if coords is not None:
                yield (convert_kp(kp, self.output_unit), coords[0], coords[1])
            i += 1
            kp = start_kp + i * step

    def generate_points_at_interval(self, interval: float) -> List[Tuple[float, float, float]]:
        """List form of iter_points_at_interval."""
        return list(self.iter_points_at_interval(interval))

    def get_offset_point(self, kp: float, offset: float) -> Optional[Tuple[float, float]]:
        """Point offset perpendicular to the route at a KP.

        Args:
            kp: Route KP in kilometers.
            offset: Offset distance (positive = right of travel).

        Returns:
            (easting, northing), or None if the route has no segment at ``kp``.
        """
        segment = self.route.find_segment_at_kp(kp)
        if segment is None:
            return None

        coords = self.route.get_coordinates_at_kp(kp)
        if coords is None:
            return None
        easting, northing = coords

        if isinstance(segment, ArcSegment):
            center_e, center_n = segment.center
            dx = easting - center_e
            dy = northing - center_n
            length = math.sqrt(dx * dx + dy * dy)
            if length < config.DEGENERATE_LENGTH:
                return coords
            perp_e = dx / length
            perp_n = dy / length
            # Center lies right of travel on clockwise arcs
            if segment.clockwise:
                perp_e, perp_n = -perp_e, -perp_n
        else:
            dx = segment.end_easting - segment.start_easting
            dy = segment.end_northing - segment.start_northing
            length = math.sqrt(dx * dx + dy * dy)
            if length < config.DEGENERATE_LENGTH:
                return coords
            perp_e = dy / length
            perp_n = -dx / length

        return (easting + offset * perp_e, northing + offset * perp_n)
