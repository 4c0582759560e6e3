"""KP/DCC calculation constants and enumerations.

Route KP values are held in kilometers and coordinates in the route's own
linear unit (normally meters). Output KP units are selected per calculator.
"""
from enum import Enum


class LengthUnit(Enum):
    """Output unit for KP values."""
    KILOMETER = "km"
    METER = "m"
    US_SURVEY_FEET = "ussft"
    NAUTICAL_MILE = "nm"


# ── Unit factors ─────────────────────────────────────────────────────
METERS_PER_KILOMETER = 1000.0
US_SURVEY_FOOT_M = 0.3048006096012192   # 1200/3937 m
KILOMETERS_PER_NAUTICAL_MILE = 1.852
INTL_FOOT_M = 0.3048

# ── Tolerances ───────────────────────────────────────────────────────
DEGENERATE_LENGTH = 1e-10       # Segment/arc span below this is a point

# ── Batch processing ─────────────────────────────────────────────────
PROGRESS_STEP = 100             # Report progress every N points

# ── EIVA RLX route files ─────────────────────────────────────────────
RLX_DELIMITER = ";"
RLX_HEADER_FIELDS = 4           # "Name"; runline_type; offset; "Unit"
RLX_SEGMENT_FIELDS = 9          # sE; sN; eE; eN; sKP; eKP; radius; status; type
RLX_TYPE_STRAIGHT = 64
RLX_TYPE_ARC = 128

# ── Spellings accepted for output units (CLI, route headers) ────────
UNIT_ALIASES = {
    "km": LengthUnit.KILOMETER,
    "kilometer": LengthUnit.KILOMETER,
    "kilometers": LengthUnit.KILOMETER,
    "kilometre": LengthUnit.KILOMETER,
    "kilometres": LengthUnit.KILOMETER,
    "m": LengthUnit.METER,
    "meter": LengthUnit.METER,
    "meters": LengthUnit.METER,
    "metre": LengthUnit.METER,
    "metres": LengthUnit.METER,
    "ussft": LengthUnit.US_SURVEY_FEET,
    "usft": LengthUnit.US_SURVEY_FEET,
    "ussurveyfeet": LengthUnit.US_SURVEY_FEET,
    "ussurveyfoot": LengthUnit.US_SURVEY_FEET,
    "nm": LengthUnit.NAUTICAL_MILE,
    "nmi": LengthUnit.NAUTICAL_MILE,
    "nauticalmile": LengthUnit.NAUTICAL_MILE,
    "nauticalmiles": LengthUnit.NAUTICAL_MILE,
}
