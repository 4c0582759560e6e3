"""KP unit conversion helpers."""
from typing import Union

from kpdcc.config import (
    LengthUnit, METERS_PER_KILOMETER, US_SURVEY_FOOT_M,
    KILOMETERS_PER_NAUTICAL_MILE, UNIT_ALIASES,
)


def convert_kp(kp_km: float, unit: LengthUnit) -> float:
    """Convert a KP in kilometers to the requested output unit.

    Unknown units pass the value through unchanged.
    """
    if unit == LengthUnit.KILOMETER:
        return kp_km
    if unit == LengthUnit.METER:
        return kp_km * METERS_PER_KILOMETER
    if unit == LengthUnit.US_SURVEY_FEET:
        return kp_km * METERS_PER_KILOMETER / US_SURVEY_FOOT_M
    if unit == LengthUnit.NAUTICAL_MILE:
        return kp_km / KILOMETERS_PER_NAUTICAL_MILE
    return kp_km


def kp_to_km(value: float, unit: LengthUnit) -> float:
    """Convert a KP expressed in ``unit`` back to kilometers."""
    if unit == LengthUnit.KILOMETER:
        return value
    if unit == LengthUnit.METER:
        return value / METERS_PER_KILOMETER
    if unit == LengthUnit.US_SURVEY_FEET:
        return value * US_SURVEY_FOOT_M / METERS_PER_KILOMETER
    if unit == LengthUnit.NAUTICAL_MILE:
        return value * KILOMETERS_PER_NAUTICAL_MILE
    return value


def parse_unit(text: str) -> LengthUnit:
    """Map a unit spelling such as "km", "Meters" or "US Survey Feet" to a LengthUnit."""
    key = text.strip().strip('"').lower().replace(" ", "").replace("_", "")
    try:
        return UNIT_ALIASES[key]
    except KeyError:
        raise ValueError(f"Unknown length unit: {text!r}") from None


def resolve_unit(text: str) -> Union[LengthUnit, str]:
    """Like parse_unit, but return the bare text for unknown spellings."""
    try:
        return parse_unit(text)
    except ValueError:
        return text.strip().strip('"')


def unit_label(unit: LengthUnit) -> str:
    """Short label used in CLI output and CSV headers."""
    return unit.value


def kp_to_str(kp_km: float, decimals: int = 3) -> str:
    """Format a KP in kilometers as chainage, e.g. 12.3456 -> "12+345.600"."""
    meters = kp_km * METERS_PER_KILOMETER
    sign = "-" if meters < 0 else ""
    meters = abs(meters)
    km = int(meters // METERS_PER_KILOMETER)
    remainder = meters - km * METERS_PER_KILOMETER
    width = 4 + decimals if decimals > 0 else 3
    return f"{sign}{km}+{remainder:0{width}.{decimals}f}"
