"""Smooth 2D/3D curves: one cubic spline per coordinate over arc length."""

from __future__ import annotations

import numpy as np

from pypiecewise._search import nearest_upper_element
from pypiecewise.cubic import PiecewiseCubicFunction
from pypiecewise.curve import Curve, _bend_area, _chord_bend, _frame, _normalized

_MAX_NEWTON_ITERATIONS = 8
_NEWTON_STEP_TOL = 1e-12
_STRAIGHT_TOL = 1e-12


class PiecewiseCubicCurve(Curve):
    """Cubic spline curve through the anchor points.

    Each coordinate is a :class:`~pypiecewise.cubic.PiecewiseCubicFunction`
    of the chord-length arc parameter, so the frame, curvature and torsion
    come from exact derivative vectors instead of finite differences.

    Parameters
    ----------
    anchor_points : array_like of shape (n, 2) or (n, 3)
        Ordered points on the curve, ``n >= 2``.
    s0 : float, optional
        Arc length of the first anchor point (default 0).
    periodic : bool, optional
        Build a closed curve with wrap-around continuity.  The first and
        last anchor points must coincide.

    Examples
    --------
    >>> import numpy as np
    >>> theta = np.linspace(0.0, np.pi, 41)
    >>> curve = PiecewiseCubicCurve(np.column_stack([np.cos(theta), np.sin(theta)]))
    >>> bool(abs(curve.curvature(curve.max_s() / 2) - 1.0) < 1e-2)
    True
    """

    _function_type = PiecewiseCubicFunction

    def __init__(self, anchor_points, s0: float = 0.0, periodic: bool = False):
        super().__init__(anchor_points, s0, periodic=periodic)

    def _frame_at(self, s: float, lo: int = 0) -> tuple:
        """Frame from the exact derivatives at *s*.

        Where ``c''`` is parallel to ``c'`` (natural ends, the linear
        extrapolation beyond them, inflections) the bend of the chords around
        the bracketing segment decides the normal side instead.
        """
        d1 = self._derivatives(s, 1)
        d2 = self._derivatives(s, 2)
        if _bend_area(d1, d2) <= _STRAIGHT_TOL * float(np.dot(d1, d1)):
            arcs = self._arc_lengths
            seg = min(max(nearest_upper_element(arcs, s) - 1, lo), len(arcs) - 2)
            d2 = _chord_bend(self._anchor_points, arcs, seg, lo)
        return _frame(d1, d2)

    def curvature(self, s: float) -> float:
        """Unsigned curvature ``|c' x c''| / |c'|^3`` at arc length *s*."""
        d1 = self._derivatives(s, 1)
        d2 = self._derivatives(s, 2)
        return _bend_area(d1, d2) / float(np.linalg.norm(d1)) ** 3

    def torsion(self, s: float) -> float:
        """Torsion ``((c' x c'') . c''') / |c' x c''|^2``; NaN where the curve is straight."""
        self._require_3d("torsion")
        cross = np.cross(self._derivatives(s, 1), self._derivatives(s, 2))
        denominator = float(np.dot(cross, cross))
        if denominator == 0.0:
            return float("nan")
        return float(np.dot(cross, self._derivatives(s, 3))) / denominator

    def inverse(self, point, start_s: float | None = None,
                end_s: float | None = None):
        """Project *point* onto the spline.

        Brackets the nearest anchor segment as the polyline does, starts
        from the projection onto that chord, then refines the arc length
        with Newton steps on ``(c(s) - point) . c'(s) = 0``.  Offsets are
        read in the frame at the refined arc length.

        Parameters
        ----------
        point : array_like of shape (ndim,)
            Ambient point.
        start_s, end_s : float, optional
            Restrict the search to this arc-length range (either order).
            The returned arc length is clamped into the range.

        Returns
        -------
        FrenetPoint2 or FrenetPoint3
        """
        point = np.asarray(point, dtype=float)
        seg, lo, bounds = self._locate(point, start_s, end_s)
        points, arcs = self._anchor_points, self._arc_lengths
        chord = _normalized(points[seg + 1] - points[seg])
        s = arcs[seg] + float(np.dot(point - points[seg], chord))

        for _ in range(_MAX_NEWTON_ITERATIONS):
            residual = self.eval(s) - point
            d1 = self._derivatives(s, 1)
            slope = float(np.dot(d1, d1) + np.dot(residual, self._derivatives(s, 2)))
            if slope == 0.0:
                break
            step = float(np.dot(residual, d1)) / slope
            s -= step
            if abs(step) < _NEWTON_STEP_TOL:
                break

        if bounds is not None:
            s = min(max(s, bounds[0]), bounds[1])
        _, normal, binormal = self._frame_at(s, lo)
        return self._frenet_point(s, point - self.eval(s), normal, binormal)
