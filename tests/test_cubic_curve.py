"""Tests for PiecewiseCubicCurve: geometry of circles and helices."""

import math

import numpy as np
import pytest

from pypiecewise import (
    Curve,
    FrenetPoint2,
    FrenetPoint3,
    InvalidArgumentError,
    PiecewiseCubicCurve,
)

from conftest import circle_points, planar_double_loop_points

HELIX_CURVATURE = 1.0 / 1.04
HELIX_TORSION = 0.2 / 1.04


@pytest.fixture(scope="module")
def closed_circle():
    """Periodic spline through 65 points of a radius-2 circle, first == last."""
    return PiecewiseCubicCurve(circle_points(2.0, 65, endpoint=True), periodic=True)


class TestConstruction:
    def test_is_a_curve(self, cubic_semicircle):
        assert isinstance(cubic_semicircle, Curve)
        assert cubic_semicircle.ndim == 2

    def test_periodic_needs_closed_points(self):
        with pytest.raises(InvalidArgumentError, match="periodic"):
            PiecewiseCubicCurve(circle_points(2.0, 20, stop=math.pi, endpoint=True),
                                periodic=True)

    def test_components_are_periodic(self, closed_circle):
        assert all(component.periodic for component in closed_circle.components)


class TestEval:
    def test_interpolates_anchor_points(self, cubic_semicircle):
        for s, point in zip(cubic_semicircle.arc_lengths, cubic_semicircle.anchor_points):
            np.testing.assert_allclose(cubic_semicircle(s), point, atol=1e-12)

    def test_stays_on_circle_between_anchors(self, cubic_semicircle):
        for s in np.linspace(0.5, cubic_semicircle.max_s() - 0.5, 31):
            assert np.linalg.norm(cubic_semicircle(s)) == pytest.approx(2.0, abs=1e-6)

    def test_tangent_and_normal(self, cubic_semicircle):
        for s in np.linspace(0.5, cubic_semicircle.max_s() - 0.5, 11):
            position = cubic_semicircle(s)
            tangent = cubic_semicircle.tangent(s)
            normal = cubic_semicircle.normal(s)
            assert np.linalg.norm(tangent) == pytest.approx(1.0)
            assert np.dot(tangent, normal) == pytest.approx(0.0, abs=1e-12)
            np.testing.assert_allclose(normal, -position / 2.0, atol=1e-4)

    def test_vertical_offset_rejected(self, cubic_semicircle):
        with pytest.raises(InvalidArgumentError):
            cubic_semicircle(1.0, 0.1, 0.1)


class TestCurvature:
    def test_semicircle_middle(self, cubic_semicircle):
        s = 0.5 * cubic_semicircle.max_s()
        assert cubic_semicircle.curvature(s) == pytest.approx(0.5, abs=1e-3)

    def test_periodic_circle_everywhere(self, closed_circle):
        """Wrap-around continuity keeps the curvature right up to the seam."""
        for s in np.linspace(closed_circle.min_s(), closed_circle.max_s(), 23):
            assert closed_circle.curvature(s) == pytest.approx(0.5, abs=5e-3)

    def test_torsion_rejected_in_2d(self, cubic_semicircle):
        with pytest.raises(TypeError, match="3D"):
            cubic_semicircle.torsion(1.0)

    def test_helix(self, cubic_helix):
        arcs = cubic_helix.arc_lengths
        s = 0.5 * (arcs[100] + arcs[101])
        assert cubic_helix.curvature(s) == pytest.approx(HELIX_CURVATURE, abs=2e-3)
        assert cubic_helix.torsion(s) == pytest.approx(HELIX_TORSION, abs=5e-3)

    def test_planar_curve_in_3d_has_no_torsion(self):
        points = np.column_stack([circle_points(1.0, 30, stop=math.pi), np.zeros(30)])
        curve = PiecewiseCubicCurve(points)
        assert curve.torsion(0.5 * curve.max_s()) == pytest.approx(0.0, abs=1e-12)

    def test_straight_line_torsion_undefined(self):
        curve = PiecewiseCubicCurve([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0],
                                     [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
        assert curve.curvature(1.5) == 0.0
        assert math.isnan(curve.torsion(1.5))


class TestFrame3D:
    def test_orthonormal(self, cubic_helix):
        for s in np.linspace(1.0, cubic_helix.max_s() - 1.0, 9):
            frame = np.array([cubic_helix.tangent(s), cubic_helix.normal(s),
                              cubic_helix.binormal(s)])
            np.testing.assert_allclose(frame @ frame.T, np.eye(3), atol=1e-12)

    def test_orientation(self, cubic_helix):
        s = 0.5 * cubic_helix.max_s()
        position = cubic_helix(s)
        assert np.dot(cubic_helix.normal(s)[:2], position[:2]) < 0.0
        assert cubic_helix.binormal(s)[2] > 0.9


class TestEndFrames:
    """Frames at the natural ends, where the second derivative vanishes."""

    def test_semicircle_normal_points_inwards(self, cubic_semicircle):
        front, back = cubic_semicircle.front(), cubic_semicircle.back()
        start, end = cubic_semicircle.min_s(), cubic_semicircle.max_s()
        for s, anchor in [(start, front), (start - 0.5, front), (end, back), (end + 0.5, back)]:
            np.testing.assert_allclose(cubic_semicircle.normal(s), -anchor / 2.0, atol=2e-2)

    def test_semicircle_normal_continuous_at_end(self, cubic_semicircle):
        end = cubic_semicircle.max_s()
        assert np.dot(cubic_semicircle.normal(end - 1e-3), cubic_semicircle.normal(end)) > 0.99
        start = cubic_semicircle.min_s()
        assert np.dot(cubic_semicircle.normal(start + 1e-3),
                      cubic_semicircle.normal(start)) > 0.99

    @pytest.mark.parametrize("where", ["start", "end", "past_end", "before_start"])
    def test_helix_frame(self, cubic_helix, where):
        s, anchor = {
            "start": (cubic_helix.min_s(), cubic_helix.front()),
            "end": (cubic_helix.max_s(), cubic_helix.back()),
            "past_end": (cubic_helix.max_s() + 0.5, cubic_helix.back()),
            "before_start": (cubic_helix.min_s() - 0.5, cubic_helix.front()),
        }[where]
        frame = np.array([cubic_helix.tangent(s), cubic_helix.normal(s),
                          cubic_helix.binormal(s)])
        assert np.all(np.isfinite(frame))
        np.testing.assert_allclose(frame @ frame.T, np.eye(3), atol=1e-12)
        radial = -np.array([anchor[0], anchor[1], 0.0])
        assert np.dot(frame[1], radial) > 0.98
        assert frame[2][2] > 0.9

    def test_offset_at_first_anchor(self, cubic_helix):
        point = cubic_helix(cubic_helix.min_s(), 0.1, 0.1)
        assert np.all(np.isfinite(point))
        assert np.linalg.norm(point - cubic_helix.front()) == pytest.approx(0.1 * math.sqrt(2.0))

    def test_inverse_of_end_anchors(self, cubic_helix):
        first = cubic_helix.inverse(cubic_helix.front())
        last = cubic_helix.inverse(cubic_helix.back())
        assert first == pytest.approx((cubic_helix.min_s(), 0.0, 0.0), abs=1e-9)
        assert last == pytest.approx((cubic_helix.max_s(), 0.0, 0.0), abs=1e-9)

    def test_straight_3d_frame_undefined(self):
        curve = PiecewiseCubicCurve([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0],
                                     [2.0, 0.0, 0.0], [3.0, 0.0, 0.0]])
        assert np.all(np.isnan(curve.normal(0.0)))


class TestInverse:
    def test_semicircle_midpoints(self, cubic_semicircle):
        dtheta = math.pi / 100
        for k in range(100):
            theta = (k + 0.5) * dtheta
            sl = cubic_semicircle.inverse([2.0 * math.cos(theta), 2.0 * math.sin(theta)])
            assert isinstance(sl, FrenetPoint2)
            assert sl.s == pytest.approx(2.0 * theta, rel=1e-3)
            assert abs(sl.l) < 1e-3

    @pytest.mark.parametrize("offset", [0.1, -0.1])
    def test_offset_round_trip(self, cubic_semicircle, offset):
        for s in np.linspace(0.3, cubic_semicircle.max_s() - 0.3, 15):
            sl = cubic_semicircle.inverse(cubic_semicircle(s, offset))
            assert sl.s == pytest.approx(s, abs=1e-8)
            assert sl.l == pytest.approx(offset, abs=1e-8)

    def test_helix_round_trip(self, cubic_helix):
        for s in np.linspace(1.0, cubic_helix.max_s() - 1.0, 9):
            slv = cubic_helix.inverse(cubic_helix(s, 0.03, 0.02))
            assert isinstance(slv, FrenetPoint3)
            assert slv.s == pytest.approx(s, abs=1e-8)
            assert slv.l == pytest.approx(0.03, abs=1e-8)
            assert slv.v == pytest.approx(0.02, abs=1e-8)

    def test_ranged_inverse_on_double_loop(self):
        curve = PiecewiseCubicCurve(circle_points(2.0, 144, stop=4.0 * math.pi))
        lap = curve.arc_lengths[72]
        point = [2.0 * math.cos(2.0), 2.0 * math.sin(2.0)]
        first = curve.inverse(point, curve.min_s(), lap)
        second = curve.inverse(point, lap, curve.max_s())
        assert first.s == pytest.approx(4.0, abs=1e-2)
        assert second.s == pytest.approx(lap + 4.0, abs=1e-2)

    def test_ranged_inverse_clamps(self, cubic_semicircle):
        rng = np.random.default_rng(41)
        for _ in range(30):
            start_s, end_s = rng.uniform(cubic_semicircle.min_s(), cubic_semicircle.max_s(), 2)
            point = rng.uniform(-3.0, 3.0, 2)
            sl = cubic_semicircle.inverse(point, start_s, end_s)
            assert min(start_s, end_s) <= sl.s <= max(start_s, end_s)

    def test_range_collapsed_to_one_arc_length(self, cubic_semicircle):
        s = 0.5 * cubic_semicircle.max_s() + 0.123
        for point in ([0.3, 1.5], [-3.0, -1.0], [2.0, 0.0]):
            sl = cubic_semicircle.inverse(point, s, s)
            assert sl.s == s
            assert math.isfinite(sl.l)

    def test_ranges_outside_the_curve(self, cubic_semicircle):
        end = cubic_semicircle.max_s()
        past = cubic_semicircle.inverse(cubic_semicircle.back(), end + 1.0, end + 2.0)
        before = cubic_semicircle.inverse(cubic_semicircle.front(), -1.0, -2.0)
        assert past.s == end + 1.0
        assert before.s == -1.0
        assert past.l == pytest.approx(0.0, abs=1e-9)
        assert before.l == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("offsets", [(1.0, 2.0), (-2.0, -1.0), (0.0, 0.0)])
    def test_ranges_outside_on_helix(self, cubic_helix, offsets):
        rng = np.random.default_rng(34)
        start_s = (cubic_helix.max_s() if offsets[0] > 0 else 0.0) + offsets[0]
        end_s = (cubic_helix.max_s() if offsets[1] > 0 else 0.0) + offsets[1]
        for _ in range(10):
            slv = cubic_helix.inverse(rng.uniform(-1.5, 1.5, 3) + [0.0, 0.0, 1.2],
                                      start_s, end_s)
            assert isinstance(slv, FrenetPoint3)
            assert start_s <= slv.s <= end_s
            assert np.all(np.isfinite(slv))

    def test_3d_double_loop(self):
        curve = PiecewiseCubicCurve(planar_double_loop_points())
        arcs, points = curve.arc_lengths, curve.anchor_points
        lap = arcs[72]
        lifted = points[83] + [0.0, 0.0, 0.05]
        first = curve.inverse(lifted, curve.min_s(), lap)
        second = curve.inverse(lifted, lap, curve.max_s())
        assert isinstance(second, FrenetPoint3)
        assert first.s == pytest.approx(arcs[11], abs=1e-9)
        assert second.s == pytest.approx(arcs[83], abs=1e-9)
        for slv in (first, second):
            assert slv.l == pytest.approx(0.0, abs=1e-9)
            assert slv.v == pytest.approx(0.05, abs=1e-12)
