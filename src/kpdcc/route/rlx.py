"""EIVA RLX route file reader.

RLX files are semicolon separated text:

    "Route Name"; runline_type; offset; "Unit"
    start_E; start_N; end_E; end_N; start_KP; end_KP; radius; status; type

Segment type 64 is a straight line and 128 a circular arc. Arc radius is
positive for counter-clockwise arcs and negative for clockwise arcs. KP
values are in kilometers.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, List, Optional

from kpdcc import config
from kpdcc.route.route_data import RouteData
from kpdcc.route.segments import ArcSegment, RouteSegment, StraightSegment
from kpdcc.utils.units import resolve_unit

logger = logging.getLogger(__name__)


def _split(line: str) -> List[str]:
    return [part.strip() for part in line.split(config.RLX_DELIMITER)]


def _to_float(value: str, field_name: str, line_number: int) -> float:
    try:
        return float(value)
    except ValueError:
        raise ValueError(
            f"Invalid {field_name} value {value!r} on line {line_number}"
        ) from None


def _to_int(value: str, field_name: str, line_number: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"Invalid {field_name} value {value!r} on line {line_number}"
        ) from None


def is_valid_rlx(filepath: str | Path) -> bool:
    """Quick check that a file exists and starts with an RLX header line."""
    path = Path(filepath)
    if not path.is_file():
        return False
    try:
        with path.open(encoding="utf-8-sig") as fh:
            first = fh.readline()
    except (OSError, UnicodeDecodeError):
        return False
    if not first.strip():
        return False
    return len(_split(first)) >= config.RLX_HEADER_FIELDS


def read_rlx(fh: IO[str], source_file: str = "unknown.rlx") -> RouteData:
    """Read RLX text from an open file object.

    Raises:
        ValueError: Missing header or segments, or an unreadable number.
    """
    lines = [(i + 1, line) for i, line in enumerate(fh.read().splitlines())
             if line.strip()]
    if len(lines) < 2:
        raise ValueError(
            "RLX file must contain at least a header and one segment"
        )

    route = _parse_header(*lines[0])
    route.source_file = source_file
    for line_number, line in lines[1:]:
        seg = _parse_segment(line, line_number)
        if seg is not None:
            route.segments.append(seg)

    logger.debug("Read %d segments from %s", len(route.segments), source_file)
    return route


def _parse_header(line_number: int, line: str) -> RouteData:
    parts = _split(line)
    if len(parts) < config.RLX_HEADER_FIELDS:
        raise ValueError(
            f"Invalid RLX header format. Expected {config.RLX_HEADER_FIELDS} "
            f"fields, got {len(parts)}"
        )
    unit_text = parts[3].strip('"')
    return RouteData(
        name=parts[0].strip('"'),
        runline_type=_to_int(parts[1], "runline type", line_number),
        offset=_to_float(parts[2], "offset", line_number),
        original_unit=unit_text,
        coordinate_unit=resolve_unit(unit_text),
    )


def _parse_segment(line: str, line_number: int) -> Optional[RouteSegment]:
    parts = _split(line)
    if len(parts) < config.RLX_SEGMENT_FIELDS:
        logger.warning(
            "Skipping malformed segment on line %d, expected %d fields, got %d",
            line_number, config.RLX_SEGMENT_FIELDS, len(parts),
        )
        return None

    se = _to_float(parts[0], "StartEasting", line_number)
    sn = _to_float(parts[1], "StartNorthing", line_number)
    ee = _to_float(parts[2], "EndEasting", line_number)
    en = _to_float(parts[3], "EndNorthing", line_number)
    start_kp = _to_float(parts[4], "StartKP", line_number)
    end_kp = _to_float(parts[5], "EndKP", line_number)
    radius = _to_float(parts[6], "Radius", line_number)
    status = _to_int(parts[7], "Status", line_number)
    type_code = _to_int(parts[8], "SegmentType", line_number)

    length = end_kp - start_kp
    if type_code == config.RLX_TYPE_ARC and radius != 0.0:
        return ArcSegment(
            start_easting=se,
            start_northing=sn,
            end_easting=ee,
            end_northing=en,
            start_kp=start_kp,
            length=length,
            radius=radius,
            clockwise=radius < 0,
            status=status,
            type_code=type_code,
        )

    if type_code not in (config.RLX_TYPE_STRAIGHT, config.RLX_TYPE_ARC):
        logger.warning(
            "Unknown segment type %d on line %d, treating as straight",
            type_code, line_number,
        )
    return StraightSegment(
        start_easting=se,
        start_northing=sn,
        end_easting=ee,
        end_northing=en,
        start_kp=start_kp,
        length=length,
        status=status,
        type_code=type_code,
    )


class RlxParser:
    """Parser for EIVA RLX route files."""

    def __init__(self, filepath: str | Path):
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"RLX file not found: {self.filepath}")

    def parse(self) -> RouteData:
        """Parse the file into a RouteData."""
        with self.filepath.open(encoding="utf-8-sig") as fh:
            return read_rlx(fh, source_file=str(self.filepath))
