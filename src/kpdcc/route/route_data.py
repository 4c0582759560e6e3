"""Route model: ordered segments and KP lookups."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from kpdcc.config import LengthUnit
from kpdcc.route.segments import RouteSegment, ArcSegment


@dataclass
class RouteData:
    """Complete route made of sequential segments ordered by start KP.

    ``coordinate_unit`` is a LengthUnit when the source spelling is known,
    otherwise the text as found; ``original_unit`` always keeps that text.
    """
    name: str = ""
    segments: List[RouteSegment] = field(default_factory=list)
    coordinate_unit: Union[LengthUnit, str] = ""
    original_unit: str = ""
    runline_type: int = 0
    offset: float = 0.0
    source_file: str = ""

    @property
    def start_kp(self) -> float:
        if not self.segments:
            return 0.0
        return self.segments[0].start_kp

    @property
    def end_kp(self) -> float:
        if not self.segments:
            return 0.0
        return self.segments[-1].end_kp

    @property
    def total_length(self) -> float:
        return self.end_kp - self.start_kp

    @property
    def num_arcs(self) -> int:
        return sum(1 for seg in self.segments if isinstance(seg, ArcSegment))

    def find_segment_at_kp(self, kp: float) -> Optional[RouteSegment]:
        """First segment whose KP range contains ``kp``, or None."""
        for seg in self.segments:
            if seg.contains_kp(kp):
                return seg
        return None

    def get_coordinates_at_kp(self, kp: float) -> Optional[Tuple[float, float]]:
        """Get (easting, northing) on the centerline at a KP, or None off-route."""
        seg = self.find_segment_at_kp(kp)
        if seg is None:
            return None
        return seg.point_at_kp(kp)
