"""Command-line interface for the KP/DCC route calculator."""
from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path

from kpdcc import __version__
from kpdcc.route.route_data import RouteData
from kpdcc.utils.units import kp_to_km, kp_to_str, parse_unit, unit_label

LANDXML_SUFFIXES = (".xml", ".landxml")


def parse_args(args=None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="kpdcc",
        description="KP/DCC calculator - position survey points relative to a route",
    )
    parser.add_argument("route", type=Path,
                        help="Route file (.rlx, or LandXML .xml/.landxml)")
    parser.add_argument("points", type=Path, nargs="?", default=None,
                        help="Survey points CSV with easting/northing columns")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Output CSV path (default: stdout)")
    parser.add_argument("--unit", default="km",
                        help="KP output unit: km, m, ussft or nm (default: km)")
    parser.add_argument("--interval", type=float, default=None,
                        help="Sample the route every INTERVAL meters")
    parser.add_argument("--offset-kp", type=float, default=None,
                        help="KP (in --unit) at which to compute an offset point")
    parser.add_argument("--offset", type=float, default=0.0,
                        help="Offset from centerline in route units (positive=right)")
    parser.add_argument("--alignment-name", default="",
                        help="LandXML alignment to use (default: first)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(args)


def load_route(path: Path, alignment_name: str = "") -> RouteData:
    """Load a route file, choosing the reader by suffix.

    Raises:
        ValueError: Unsupported suffix or unreadable route file.
    """
    suffix = path.suffix.lower()
    if suffix == ".rlx":
        from kpdcc.route.rlx import RlxParser, is_valid_rlx
        if not is_valid_rlx(path):
            raise ValueError(f"Not an RLX route file: {path}")
        return RlxParser(path).parse()
    if suffix in LANDXML_SUFFIXES:
        from kpdcc.route.landxml import LandXMLRouteParser
        return LandXMLRouteParser(path).parse_route(alignment_name)
    raise ValueError(
        f"Unsupported route file type '{path.suffix}' (expected .rlx, .xml or .landxml)"
    )


def main(args=None) -> None:
    """Main entry point."""
    opts = parse_args(args)
    logging.basicConfig(
        level=logging.DEBUG if opts.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate inputs
    for path in (opts.route, opts.points):
        if path is not None and not path.exists():
            print(f"Error: Input file not found: {path}", file=sys.stderr)
            sys.exit(1)

    try:
        unit = parse_unit(opts.unit)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        route = load_route(opts.route, opts.alignment_name)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    # Summary goes to stderr when CSV is written to stdout
    info = sys.stderr if opts.output is None else sys.stdout
    print(f"KP/DCC Calculator v{__version__}", file=info)
    print(f"  Route:    {route.name} ({len(route.segments)} segments, "
          f"{route.num_arcs} arcs)", file=info)
    print(f"  KP range: {kp_to_str(route.start_kp)} - {kp_to_str(route.end_kp)}", file=info)
    print(f"  Coords:   {route.original_unit or 'unknown'}", file=info)
    print(f"  KP unit:  {unit_label(unit)}", file=info)

    from kpdcc.geometry.kp_calculator import KpCalculator

    calculator = KpCalculator(route, unit)
    rows = []

    # ── Survey points ─────────────────────────────────────────────
    if opts.points is not None:
        from kpdcc.model.survey_point import read_points_csv

        points = read_points_csv(opts.points)
        print(f"  Points:   {len(points)}", file=info)
        for point in calculator.calculate_all(points):
            rows.append(["point", point.name or point.index,
                         f"{point.easting:.3f}", f"{point.northing:.3f}",
                         f"{point.kp:.6f}", f"{point.dcc:.3f}"])

    # ── Route sampling ────────────────────────────────────────────
    if opts.interval is not None:
        samples = calculator.generate_points_at_interval(opts.interval)
        print(f"  Samples:  {len(samples)} at {opts.interval:g}m", file=info)
        for i, (kp, easting, northing) in enumerate(samples):
            rows.append(["sample", i, f"{easting:.3f}", f"{northing:.3f}",
                         f"{kp:.6f}", "0.000"])

    # ── Offset point ──────────────────────────────────────────────
    if opts.offset_kp is not None:
        result = calculator.get_offset_point(kp_to_km(opts.offset_kp, unit), opts.offset)
        if result is None:
            print(f"  No route segment at KP {opts.offset_kp:g}", file=info)
        else:
            rows.append(["offset", "", f"{result[0]:.3f}", f"{result[1]:.3f}",
                         f"{opts.offset_kp:.6f}", f"{opts.offset:.3f}"])

    header = ["type", "id", "easting", "northing", f"kp_{unit_label(unit)}", "dcc"]
    if opts.output is None:
        writer = csv.writer(sys.stdout)
        writer.writerow(header)
        writer.writerows(rows)
    else:
        with opts.output.open("w", newline="") as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            writer.writerows(rows)
        print(f"  Written:  {opts.output}", file=info)
