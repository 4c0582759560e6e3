"""Survey point dataclass and CSV reader."""
from __future__ import annotations

import csv
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional

EASTING_COLUMNS = ("easting", "east", "e", "x")
NORTHING_COLUMNS = ("northing", "north", "n", "y")
NAME_COLUMNS = ("name", "id", "label")


@dataclass(frozen=True)
class SurveyPoint:
    """A surveyed position and, once calculated, its KP and DCC."""
    easting: float
    northing: float
    index: int = 0                # Record number in the source
    name: str = ""
    kp: Optional[float] = None    # KP in the calculator's output unit
    dcc: Optional[float] = None   # Signed offset from the route centerline

    @property
    def is_calculated(self) -> bool:
        return self.kp is not None and self.dcc is not None

    def with_kp_dcc(self, kp: float, dcc: float) -> SurveyPoint:
        """Copy of this point carrying calculated KP and DCC."""
        return replace(self, kp=kp, dcc=dcc)


def _pick_column(fieldnames: List[str], candidates) -> Optional[str]:
    lookup = {name.strip().lower(): name for name in fieldnames}
    for candidate in candidates:
        if candidate in lookup:
            return lookup[candidate]
    return None


def read_points_csv(filepath: str | Path) -> List[SurveyPoint]:
    """Read survey points from a CSV file with a header row.

    Easting/northing columns are matched case-insensitively ("x"/"y" are
    accepted). An optional name column is carried through.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: Coordinate columns are missing or a value is not numeric.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Points file not found: {path}")

    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        fieldnames = reader.fieldnames or []
        e_col = _pick_column(fieldnames, EASTING_COLUMNS)
        n_col = _pick_column(fieldnames, NORTHING_COLUMNS)
        if e_col is None or n_col is None:
            raise ValueError(
                f"{path.name}: expected easting/northing columns, got {fieldnames}"
            )
        name_col = _pick_column(fieldnames, NAME_COLUMNS)

        points = []
        for i, row in enumerate(reader):
            try:
                easting = float(row[e_col])
                northing = float(row[n_col])
            except (TypeError, ValueError):
                raise ValueError(
                    f"{path.name}: invalid coordinates on data row {i + 1}"
                ) from None
            points.append(SurveyPoint(
                easting=easting,
                northing=northing,
                index=i,
                name=(row.get(name_col) or "") if name_col else "",
            ))
    return points
