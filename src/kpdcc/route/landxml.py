"""LandXML route ingestion via lxml.

Reads the CoordGeom of a LandXML Alignment as a route: Line elements become
straight segments and Curve elements arcs. Spirals are not supported and are
skipped. Coordinates are converted to meters and stations to KP in
kilometers.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional, Tuple

from lxml import etree

from kpdcc import config
from kpdcc.route.route_data import RouteData
from kpdcc.route.segments import ArcSegment, StraightSegment
from kpdcc.utils.units import resolve_unit

logger = logging.getLogger(__name__)


def _linear_unit(root: etree._Element) -> Tuple[float, str]:
    """(meters per file unit, unit name) from the Units element."""
    imperial = root.find(".//{*}Units/{*}Imperial")
    if imperial is not None:
        name = imperial.get("linearUnit") or ""
        lu = name.lower()
        if "ussurvey" in lu or "usfoot" in lu:
            return config.US_SURVEY_FOOT_M, name
        if "foot" in lu or "feet" in lu:
            return config.INTL_FOOT_M, name
    metric = root.find(".//{*}Units/{*}Metric")
    if metric is not None and metric.get("linearUnit"):
        return 1.0, metric.get("linearUnit")
    return 1.0, "meter"


class LandXMLRouteParser:
    """Parser for LandXML alignment files."""

    def __init__(self, filepath: str | Path):
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"LandXML file not found: {self.filepath}")
        self.root = etree.parse(str(self.filepath)).getroot()
        self._scale, self._unit_name = _linear_unit(self.root)

    def _to_kp(self, value: float) -> float:
        """Station or length in file units to KP kilometers."""
        return value * self._scale / config.METERS_PER_KILOMETER

    def _point(self, parent: etree._Element, name: str) -> Optional[Tuple[float, float]]:
        """(easting, northing) in meters; LandXML writes northing first."""
        elem = parent.find("{*}" + name)
        if elem is None or not elem.text:
            return None
        northing, easting = (float(v) for v in elem.text.split()[:2])
        return easting * self._scale, northing * self._scale

    def parse_route(self, alignment_name: str = "") -> RouteData:
        """Parse an alignment's CoordGeom into a RouteData.

        Args:
            alignment_name: Alignment to read; the first one when empty.

        Raises:
            ValueError: No Alignment or CoordGeom present.
        """
        alignments = self.root.findall(".//{*}Alignments/{*}Alignment")
        if not alignments:
            raise ValueError("No Alignment element found in LandXML")

        align_elem = alignments[0]
        if alignment_name:
            for a in alignments:
                if a.get("name") == alignment_name:
                    align_elem = a
                    break

        coord_geom = align_elem.find("{*}CoordGeom")
        if coord_geom is None:
            raise ValueError("No CoordGeom found in Alignment")

        route = RouteData(
            name=align_elem.get("name", "Alignment"),
            coordinate_unit=resolve_unit(self._unit_name),
            original_unit=self._unit_name,
            source_file=str(self.filepath),
        )
        current_kp = self._to_kp(float(align_elem.get("staStart", "0")))

        for elem in coord_geom.iterchildren(tag=etree.Element):
            tag = etree.QName(elem).localname
            start = self._point(elem, "Start")
            end = self._point(elem, "End")

            if tag == "Line":
                if start is None or end is None:
                    logger.warning("Skipping Line without Start/End at KP %.6f", current_kp)
                    continue
                length_raw = elem.get("length")
                if length_raw is not None:
                    length = self._to_kp(float(length_raw))
                else:
                    length = math.hypot(end[0] - start[0], end[1] - start[1]) \
                        / config.METERS_PER_KILOMETER

                route.segments.append(StraightSegment(
                    start_easting=start[0],
                    start_northing=start[1],
                    end_easting=end[0],
                    end_northing=end[1],
                    start_kp=current_kp,
                    length=length,
                ))
                current_kp += length

            elif tag == "Curve":
                center = self._point(elem, "Center")
                if start is None or end is None or center is None:
                    logger.warning("Skipping Curve without Start/End/Center at KP %.6f",
                                   current_kp)
                    continue
                radius = float(elem.get("radius", "0")) * self._scale
                length = self._to_kp(float(elem.get("length", "0")))
                is_cw = elem.get("rot", "cw").lower() == "cw"

                route.segments.append(ArcSegment(
                    start_easting=start[0],
                    start_northing=start[1],
                    end_easting=end[0],
                    end_northing=end[1],
                    start_kp=current_kp,
                    length=length,
                    radius=-radius if is_cw else radius,
                    clockwise=is_cw,
                    center_easting=center[0],
                    center_northing=center[1],
                ))
                current_kp += length

            elif tag == "Spiral":
                logger.warning("Spiral at KP %.6f is not supported, skipping", current_kp)
                length_raw = elem.get("length")
                if length_raw is not None:
                    current_kp += self._to_kp(float(length_raw))

        logger.debug("Read %d segments from alignment %s", len(route.segments), route.name)
        return route
