"""Tests for the KP/DCC route calculator."""
import math
import threading
from pathlib import Path

import numpy as np
import pytest

from kpdcc.config import LengthUnit
from kpdcc.geometry.kp_calculator import CalculationCancelled, KpCalculator
from kpdcc.model.survey_point import SurveyPoint
from kpdcc.route.rlx import RlxParser
from kpdcc.route.route_data import RouteData
from kpdcc.route.segments import ArcSegment, StraightSegment

DATA_DIR = Path(__file__).parent.parent / "data"
SAMPLE_RLX = DATA_DIR / "sample_route.rlx"

ARC_CENTER = (1100.0, 2100.0)


@pytest.fixture
def sample_route():
    return RlxParser(SAMPLE_RLX).parse()


@pytest.fixture
def north_route():
    return RouteData(name="North", segments=[
        StraightSegment(0.0, 0.0, 0.0, 1000.0, start_kp=0.0, length=1.0),
    ])


@pytest.fixture
def corner_route():
    # North 1 km, then east 1 km
    return RouteData(name="Corner", segments=[
        StraightSegment(0.0, 0.0, 0.0, 1000.0, start_kp=0.0, length=1.0),
        StraightSegment(0.0, 1000.0, 1000.0, 1000.0, start_kp=1.0, length=1.0),
    ])


class TestCalculate:
    def test_requires_route(self):
        with pytest.raises(ValueError):
            KpCalculator(None)

    def test_empty_route_returns_sentinel(self):
        kp, dcc = KpCalculator(RouteData()).calculate(123.0, 456.0)
        assert kp == 0.0
        assert dcc == math.inf

    def test_right_and_left(self, north_route):
        calc = KpCalculator(north_route)
        assert calc.calculate(50.0, 500.0) == pytest.approx((0.5, 50.0))
        assert calc.calculate(-50.0, 500.0) == pytest.approx((0.5, -50.0))

    def test_clamps_beyond_route_end(self, north_route):
        kp, dcc = KpCalculator(north_route).calculate(0.0, 1500.0)
        assert kp == pytest.approx(1.0)
        assert abs(dcc) == pytest.approx(500.0)

    @pytest.mark.parametrize("unit, expected", [
        (LengthUnit.KILOMETER, 0.5),
        (LengthUnit.METER, 500.0),
        (LengthUnit.US_SURVEY_FEET, 500.0 / 0.3048006096012192),
        (LengthUnit.NAUTICAL_MILE, 0.5 / 1.852),
    ])
    def test_output_unit(self, north_route, unit, expected):
        kp, dcc = KpCalculator(north_route, unit).calculate(50.0, 500.0)
        assert kp == pytest.approx(expected)
        assert dcc == pytest.approx(50.0)

    def test_picks_segment_with_smallest_offset(self, corner_route):
        kp, dcc = KpCalculator(corner_route).calculate(500.0, 990.0)
        assert kp == pytest.approx(1.5)
        assert dcc == pytest.approx(10.0)

    def test_degenerate_only_route(self):
        route = RouteData(segments=[
            StraightSegment(10.0, 10.0, 10.0, 10.0, start_kp=2.0, length=0.0),
        ])
        kp, dcc = KpCalculator(route).calculate(13.0, 14.0)
        assert kp == 2.0
        assert dcc == pytest.approx(5.0)

    def test_selection_uses_abs_dcc_not_distance(self):
        # The point lies on the arc's circle but well outside its span; the
        # radial offset (0) beats the nearer straight's true distance (160).
        arc_len = math.pi / 2 * 100.0 / 1000.0
        route = RouteData(segments=[
            ArcSegment(0.0, 100.0, 100.0, 0.0, start_kp=0.0, length=arc_len,
                       radius=-100.0, clockwise=True),
            StraightSegment(100.0, 0.0, 100.0, -200.0, start_kp=arc_len, length=0.2),
        ])
        kp, dcc = KpCalculator(route).calculate(-60.0, -80.0)
        assert kp == pytest.approx(arc_len)
        assert dcc == pytest.approx(0.0, abs=1e-9)

    def test_sample_route_points(self, sample_route):
        calc = KpCalculator(sample_route)
        assert calc.calculate(1010.0, 2020.0) == pytest.approx((0.02, 10.0))
        assert calc.calculate(990.0, 2050.0) == pytest.approx((0.05, -10.0))
        assert calc.calculate(1200.0, 2190.0) == pytest.approx((0.35708, 10.0))

    def test_arc_interior_on_sample_route(self, sample_route):
        # 45 degrees round the right-hand bend, 5 m inside
        bearing = -math.pi / 4
        e = ARC_CENTER[0] + 95.0 * math.sin(bearing)
        n = ARC_CENTER[1] + 95.0 * math.cos(bearing)
        kp, dcc = KpCalculator(sample_route).calculate(e, n)
        assert kp == pytest.approx(0.1 + 0.15708 / 2)
        assert dcc == pytest.approx(5.0)


class TestCalculateAll:
    def test_returns_calculated_copies(self, north_route):
        points = [SurveyPoint(50.0, 500.0, index=0, name="A"),
                  SurveyPoint(-50.0, 250.0, index=1, name="B")]
        results = KpCalculator(north_route).calculate_all(points)

        assert [p.name for p in results] == ["A", "B"]
        assert results[0].kp == pytest.approx(0.5)
        assert results[0].dcc == pytest.approx(50.0)
        assert results[1].kp == pytest.approx(0.25)
        assert results[1].dcc == pytest.approx(-50.0)
        assert all(p.is_calculated for p in results)
        assert not any(p.is_calculated for p in points)

    def test_empty_list(self, north_route):
        assert KpCalculator(north_route).calculate_all([]) == []

    def test_progress_every_hundred_points(self, north_route):
        points = [SurveyPoint(1.0, float(i)) for i in range(250)]
        reported = []
        KpCalculator(north_route).calculate_all(points, progress=reported.append)
        assert reported == [0, 40, 80]

    def test_cancel_before_start(self, north_route):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(CalculationCancelled):
            KpCalculator(north_route).calculate_all([SurveyPoint(0.0, 0.0)], cancel=cancel)

    def test_cancel_between_points(self, north_route):
        cancel = threading.Event()
        points = [SurveyPoint(1.0, float(i)) for i in range(10)]
        # First progress report happens after point 0
        with pytest.raises(CalculationCancelled):
            KpCalculator(north_route).calculate_all(
                points, progress=lambda pct: cancel.set(), cancel=cancel,
            )

    def test_matches_single_calculation(self, sample_route):
        calc = KpCalculator(sample_route, LengthUnit.METER)
        points = [SurveyPoint(1010.0, 2020.0), SurveyPoint(1200.0, 2190.0)]
        for point in calc.calculate_all(points):
            assert (point.kp, point.dcc) == calc.calculate(point.easting, point.northing)


class TestCalculateArray:
    def test_shapes_and_values(self, north_route):
        kp, dcc = KpCalculator(north_route).calculate_array(
            [[50.0, -50.0], [0.0, 10.0]], [[500.0, 500.0], [100.0, 900.0]],
        )
        assert kp.shape == (2, 2)
        np.testing.assert_allclose(kp, [[0.5, 0.5], [0.1, 0.9]])
        np.testing.assert_allclose(dcc, [[50.0, -50.0], [0.0, 10.0]])

    def test_matches_calculate_on_mixed_route(self, sample_route):
        calc = KpCalculator(sample_route, LengthUnit.METER)
        eastings = np.array([1010.0, 990.0, 1200.0, 1080.0])
        northings = np.array([2020.0, 2050.0, 2190.0, 2160.0])
        kp, dcc = calc.calculate_array(eastings, northings)
        for i in range(len(eastings)):
            assert (kp[i], dcc[i]) == calc.calculate(eastings[i], northings[i])

    def test_shape_mismatch(self, north_route):
        with pytest.raises(ValueError):
            KpCalculator(north_route).calculate_array([1.0, 2.0], [1.0])


class TestGeneratePoints:
    def test_samples_within_route(self, sample_route):
        samples = KpCalculator(sample_route).generate_points_at_interval(50.0)
        kps = [s[0] for s in samples]
        assert len(samples) == 10
        assert kps[0] == pytest.approx(0.0)
        assert all(sample_route.start_kp <= kp <= sample_route.end_kp for kp in kps)
        for a, b in zip(kps, kps[1:]):
            assert b - a == pytest.approx(0.05)

    def test_first_sample_at_route_start(self, sample_route):
        kp, e, n = KpCalculator(sample_route).generate_points_at_interval(10.0)[0]
        assert (e, n) == pytest.approx((1000.0, 2000.0))

    def test_arc_samples_lie_on_arc(self, sample_route):
        samples = KpCalculator(sample_route).generate_points_at_interval(10.0)
        for kp, e, n in samples:
            if 0.1 < kp < 0.25708:
                assert math.hypot(e - ARC_CENTER[0], n - ARC_CENTER[1]) == pytest.approx(100.0)

    def test_samples_project_back_onto_route(self, sample_route):
        calc = KpCalculator(sample_route)
        for kp, e, n in calc.generate_points_at_interval(25.0):
            calc_kp, dcc = calc.calculate(e, n)
            assert calc_kp == pytest.approx(kp, abs=1e-6)
            assert dcc == pytest.approx(0.0, abs=1e-6)

    def test_includes_end_when_on_step(self, north_route):
        samples = KpCalculator(north_route).generate_points_at_interval(250.0)
        assert [s[0] for s in samples] == pytest.approx([0.0, 0.25, 0.5, 0.75, 1.0])
        assert samples[-1][1:] == pytest.approx((0.0, 1000.0))

    def test_output_unit_applies_to_kp(self, north_route):
        samples = KpCalculator(north_route, LengthUnit.METER).generate_points_at_interval(500.0)
        assert [s[0] for s in samples] == pytest.approx([0.0, 500.0, 1000.0])

    def test_skips_unresolved_kp(self):
        # Gap between KP 0.1 and 0.2 has no segment
        route = RouteData(segments=[
            StraightSegment(0.0, 0.0, 0.0, 100.0, start_kp=0.0, length=0.1),
            StraightSegment(0.0, 200.0, 0.0, 320.0, start_kp=0.2, length=0.12),
        ])
        samples = KpCalculator(route).generate_points_at_interval(50.0)
        assert [s[0] for s in samples] == pytest.approx([0.0, 0.05, 0.1, 0.2, 0.25, 0.3])

    def test_lazy_iterator(self, north_route):
        it = KpCalculator(north_route).iter_points_at_interval(100.0)
        assert next(it)[0] == pytest.approx(0.0)
        assert next(it)[0] == pytest.approx(0.1)

    def test_empty_route(self):
        assert KpCalculator(RouteData()).generate_points_at_interval(10.0) == []

    @pytest.mark.parametrize("interval", [0.0, -5.0])
    def test_rejects_non_positive_interval(self, north_route, interval):
        with pytest.raises(ValueError):
            KpCalculator(north_route).generate_points_at_interval(interval)


class TestOffsetPoint:
    @pytest.mark.parametrize("kp", [0.0, 0.05, 0.1, 0.15, 0.2, 0.3, 0.45])
    def test_zero_offset_is_centerline(self, sample_route, kp):
        calc = KpCalculator(sample_route)
        assert calc.get_offset_point(kp, 0.0) == sample_route.get_coordinates_at_kp(kp)

    def test_straight_offset_right(self, sample_route):
        e, n = KpCalculator(sample_route).get_offset_point(0.05, 10.0)
        assert (e, n) == pytest.approx((1010.0, 2050.0))

    def test_straight_offset_left(self, sample_route):
        e, n = KpCalculator(sample_route).get_offset_point(0.05, -10.0)
        assert (e, n) == pytest.approx((990.0, 2050.0))

    def test_east_bound_offset_right_is_south(self, sample_route):
        e, n = KpCalculator(sample_route).get_offset_point(0.35708, 10.0)
        assert (e, n) == pytest.approx((1200.0, 2190.0))

    def test_clockwise_arc_offset_right_is_toward_center(self, sample_route):
        kp = 0.1 + 0.15708 / 2
        e, n = KpCalculator(sample_route).get_offset_point(kp, 10.0)
        assert math.hypot(e - ARC_CENTER[0], n - ARC_CENTER[1]) == pytest.approx(90.0)

    def test_counter_clockwise_arc_offset_right_is_away_from_center(self):
        arc_len = math.pi / 2 * 100.0 / 1000.0
        route = RouteData(segments=[
            ArcSegment(100.0, 0.0, 0.0, 100.0, start_kp=0.0, length=arc_len,
                       radius=100.0, clockwise=False),
        ])
        e, n = KpCalculator(route).get_offset_point(arc_len / 2, 10.0)
        assert math.hypot(e, n) == pytest.approx(110.0)

    def test_offset_round_trips_through_calculate(self, sample_route):
        calc = KpCalculator(sample_route)
        e, n = calc.get_offset_point(0.05, -7.5)
        assert calc.calculate(e, n) == pytest.approx((0.05, -7.5))

    def test_off_route_returns_none(self, sample_route):
        calc = KpCalculator(sample_route)
        assert calc.get_offset_point(5.0, 10.0) is None
        assert calc.get_offset_point(-0.1, 10.0) is None
