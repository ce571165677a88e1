"""Parametric 2D/3D curves over arc length.

A curve is one piecewise 1D function per ambient coordinate, all sharing
the arc-length sequence accumulated from the chord lengths between anchor
points.  :class:`Curve` is the common facade so curves of different
realisation (linear, cubic) can be stored and queried together.

Frames follow the usual Frenet construction from a velocity-like vector
``diff`` and an acceleration-like vector ``diff2``:

- 2D: the normal is ``diff`` rotated by +90 degrees, flipped so that it
  points to the side ``diff2`` bends towards.
- 3D: ``normal = diff x (diff2 x diff)`` and ``binormal = diff x diff2``,
  both normalised.

For a polyline ``diff``/``diff2`` are finite-difference estimates from
neighbouring chords, so its normals are estimates, not exact geometry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple

import numpy as np

from pypiecewise import _config
from pypiecewise._errors import InvalidArgumentError
from pypiecewise._persist import _Persistable
from pypiecewise._search import has_duplicates, nearest_upper_element, nearest_upper_point
from pypiecewise.linear import PiecewiseLinearFunction


class FrenetPoint2(NamedTuple):
    """Curve coordinates of a 2D point: arc length and lateral offset."""

    s: float
    l: float  # noqa: E741


class FrenetPoint3(NamedTuple):
    """Curve coordinates of a 3D point: arc length, lateral and vertical offset."""

    s: float
    l: float  # noqa: E741
    v: float


# ----------------------------------------------------------------------
# Vector helpers
# ----------------------------------------------------------------------

def _normalized(vector: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return vector / np.linalg.norm(vector)


def _rotate_half_pi(vector: np.ndarray) -> np.ndarray:
    return np.array([-vector[1], vector[0]])


def _cross_proj(a: np.ndarray, b: np.ndarray) -> float:
    """z component of the cross product of two 2D vectors."""
    return float(a[0] * b[1] - a[1] * b[0])


def _frame(diff: np.ndarray, diff2: np.ndarray) -> tuple:
    """Unit ``(tangent, normal, binormal)``; binormal is None in 2D."""
    tangent = _normalized(diff)
    if len(diff) == 2:
        sign = 1.0 if _cross_proj(diff, diff2) > 0.0 else -1.0
        return tangent, _normalized(_rotate_half_pi(diff)) * sign, None
    normal = _normalized(np.cross(diff, np.cross(diff2, diff)))
    binormal = _normalized(np.cross(diff, diff2))
    return tangent, normal, binormal


def _chord_bend(points: np.ndarray, arcs: np.ndarray, seg: int, lo: int = 0) -> np.ndarray:
    """Finite-difference bend of the chords around segment *seg*.

    The stencil is shifted inwards at the ends so it always spans two
    chords at or after anchor *lo*; fewer than three points give zero.
    """
    size = len(points)
    if size < 3:
        return np.zeros(points.shape[1])
    j = min(max(seg, lo + 1), size - 2)
    return (
        (points[j + 1] - points[j]) / (arcs[j + 1] - arcs[j])
        - (points[j] - points[j - 1]) / (arcs[j] - arcs[j - 1])
    )


def _bend_area(diff: np.ndarray, diff2: np.ndarray) -> float:
    """``|diff x diff2|`` in 2D or 3D."""
    if len(diff) == 2:
        return abs(_cross_proj(diff, diff2))
    return float(np.linalg.norm(np.cross(diff, diff2)))


def _arc_lengths(anchor_points: np.ndarray, s0: float) -> np.ndarray:
    chords = np.linalg.norm(np.diff(anchor_points, axis=0), axis=1)
    return s0 + np.concatenate([[0.0], np.cumsum(chords)])


class Curve(_Persistable, ABC):
    """Common interface of arc-length parametrised 2D/3D curves.

    Subclasses set ``_function_type`` to the 1D function class used for
    each coordinate and implement the frame, curvature and inversion
    queries.

    Parameters
    ----------
    anchor_points : array_like of shape (n, 2) or (n, 3)
        Ordered points on the curve, ``n >= 2``.
    s0 : float, optional
        Arc length of the first anchor point (default 0).
    **function_kwargs
        Forwarded to each coordinate function.
    """

    _function_type = None

    def __init__(self, anchor_points, s0: float = 0.0, **function_kwargs):
        anchor_points = np.array(anchor_points, dtype=float)
        if _config.CHECK_PARAMS:
            if anchor_points.ndim != 2 or anchor_points.shape[1] not in (2, 3):
                raise InvalidArgumentError(
                    f"anchor_points must have shape (n, 2) or (n, 3), "
                    f"got shape {anchor_points.shape}"
                )
            if len(anchor_points) < 2:
                raise InvalidArgumentError(
                    f"Curves need at least 2 anchor points: "
                    f"len(anchor_points) = {len(anchor_points)}"
                )
            if has_duplicates(anchor_points, _config.DUPLICATE_CRITERION):
                raise InvalidArgumentError(
                    "anchor_points can not have consecutive duplicated points"
                )
        anchor_points.flags.writeable = False
        arc_lengths = _arc_lengths(anchor_points, float(s0))
        self._components = tuple(
            self._function_type(arc_lengths, anchor_points[:, k], **function_kwargs)
            for k in range(anchor_points.shape[1])
        )
        self._anchor_points = anchor_points
        self._arc_lengths = self._components[0].ts

    # ------------------------------------------------------------------
    # Position and frame
    # ------------------------------------------------------------------

    def eval(self, s: float, l: float | None = None, v: float | None = None) -> np.ndarray:  # noqa: E741
        """Point at arc length *s*, optionally offset along the local frame.

        Parameters
        ----------
        s : float
            Arc length.
        l : float, optional
            Lateral offset along :meth:`normal`.
        v : float, optional
            Vertical offset along :meth:`binormal` (3D curves only).

        Returns
        -------
        ndarray of shape (ndim,)
        """
        if v is not None and self.ndim == 2 and _config.CHECK_PARAMS:
            raise InvalidArgumentError(
                "A vertical offset v is only defined for 3D curves"
            )
        position = np.array([component.eval(s) for component in self._components])
        if l is None and v is None:
            return position
        _, normal, binormal = self._frame_at(s)
        if l is not None:
            position = position + normal * l
        if v is not None:
            position = position + binormal * v
        return position

    def __call__(self, s: float, l: float | None = None, v: float | None = None) -> np.ndarray:  # noqa: E741
        return self.eval(s, l, v)

    def tangent(self, s: float) -> np.ndarray:
        """Unit tangent at arc length *s*."""
        return _normalized(self._derivatives(s, 1))

    def normal(self, s: float) -> np.ndarray:
        """Unit normal at arc length *s*."""
        return self._frame_at(s)[1]

    def binormal(self, s: float) -> np.ndarray:
        """Unit binormal at arc length *s* (3D curves only)."""
        self._require_3d("binormal")
        return self._frame_at(s)[2]

    @abstractmethod
    def curvature(self, s: float) -> float:
        """Curvature at arc length *s*."""

    @abstractmethod
    def torsion(self, s: float) -> float:
        """Torsion at arc length *s* (3D curves only)."""

    @abstractmethod
    def inverse(self, point, start_s: float | None = None,
                end_s: float | None = None):
        """Curve coordinates ``(s, l[, v])`` of an ambient *point*."""

    @abstractmethod
    def _frame_at(self, s: float) -> tuple:
        """``(tangent, normal, binormal)`` used at arc length *s*."""

    def _derivatives(self, s: float, order: int) -> np.ndarray:
        return np.array([component.derivative(s, order) for component in self._components])

    def _require_3d(self, name: str) -> None:
        if self.ndim != 3:
            raise TypeError(f"{name}() is only defined for 3D curves")

    def _locate(self, point: np.ndarray, start_s: float | None,
                end_s: float | None) -> tuple:
        """Find the anchor segment nearest to *point*.

        Without a range the whole curve is searched.  With a range, the
        bounds are order-normalised, converted to anchor indices, and only
        that slice of anchors is searched, so a branch of a looping curve
        outside the range is never picked.

        Returns
        -------
        (seg, lo, bounds) : (int, int, tuple or None)
            Segment index (anchors ``seg`` and ``seg + 1``), first anchor of
            the searched window, and the normalised ``(start_s, end_s)``
            range (None for a global search).
        """
        size = len(self._anchor_points)
        if start_s is None and end_s is None:
            pos = nearest_upper_point(self._anchor_points, point)
            return min(max(pos - 1, 0), size - 2), 0, None

        start_s = self.min_s() if start_s is None else float(start_s)
        end_s = self.max_s() if end_s is None else float(end_s)
        if start_s > end_s:
            start_s, end_s = end_s, start_s
        lo = min(max(nearest_upper_element(self._arc_lengths, start_s) - 1, 0), size - 2)
        stop = nearest_upper_element(self._arc_lengths, end_s)
        pos = nearest_upper_point(self._anchor_points, point, start=lo, stop=stop)
        hi = max(min(stop - 1, size - 2), lo)
        return min(max(pos - 1, lo), hi), lo, (start_s, end_s)

    def _frenet_point(self, s: float, offset: np.ndarray, normal: np.ndarray,
                      binormal: np.ndarray | None):
        if binormal is None:
            return FrenetPoint2(float(s), float(np.dot(offset, normal)))
        return FrenetPoint3(float(s), float(np.dot(offset, normal)),
                            float(np.dot(offset, binormal)))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def ndim(self) -> int:
        """Ambient dimension (2 or 3)."""
        return self._anchor_points.shape[1]

    def min_s(self) -> float:
        """Arc length of the first anchor point."""
        return float(self._arc_lengths[0])

    def max_s(self) -> float:
        """Arc length of the last anchor point."""
        return float(self._arc_lengths[-1])

    def front(self) -> np.ndarray:
        """First anchor point."""
        return self._anchor_points[0]

    def back(self) -> np.ndarray:
        """Last anchor point."""
        return self._anchor_points[-1]

    @property
    def arc_lengths(self) -> np.ndarray:
        """Arc length of every anchor point (read-only)."""
        return self._arc_lengths

    @property
    def anchor_points(self) -> np.ndarray:
        """Anchor points, shape ``(n, ndim)`` (read-only)."""
        return self._anchor_points

    @property
    def components(self) -> tuple:
        """Per-coordinate 1D functions of arc length."""
        return self._components

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"ndim={self.ndim}, "
            f"anchors={len(self._anchor_points)}, "
            f"s=[{self.min_s()}, {self.max_s()}])"
        )


class PiecewiseLinearCurve(Curve):
    """Polyline through the anchor points, parametrised by arc length.

    Normals and binormals are estimated from the difference of the chord
    directions around the queried segment; the first segment reuses the
    stencil of the second chord and the last segment that of the one
    before it.  A polyline has no defined curvature, so
    :meth:`curvature` and :meth:`torsion` return NaN.

    Examples
    --------
    >>> curve = PiecewiseLinearCurve([[0.0, 0.0], [1.0, 0.0], [2.0, 1.0]])
    >>> curve.max_s() > 2.0
    True
    >>> curve.inverse([0.5, 0.25])
    FrenetPoint2(s=0.5, l=0.25)
    """

    _function_type = PiecewiseLinearFunction

    def __init__(self, anchor_points, s0: float = 0.0):
        super().__init__(anchor_points, s0)

    def _chord_frame(self, seg: int, lo: int = 0) -> tuple:
        """Finite-difference frame of segment *seg*; *lo* is the first usable anchor."""
        points, arcs = self._anchor_points, self._arc_lengths
        diff = points[seg + 1] - points[seg]
        return _frame(diff, _chord_bend(points, arcs, seg, lo))

    def _frame_at(self, s: float) -> tuple:
        pos = nearest_upper_element(self._arc_lengths, s)
        return self._chord_frame(min(max(pos - 1, 0), len(self._arc_lengths) - 2))

    def curvature(self, s: float) -> float:
        return float("nan")

    def torsion(self, s: float) -> float:
        self._require_3d("torsion")
        return float("nan")

    def inverse(self, point, start_s: float | None = None,
                end_s: float | None = None):
        """Project *point* onto the polyline.

        The point is projected onto the frame of the nearest segment, so
        points beyond either end extrapolate along the end chord.

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
        tangent, normal, binormal = self._chord_frame(seg, lo)
        offset = point - self._anchor_points[seg]
        s = self._arc_lengths[seg] + np.dot(offset, tangent)
        if bounds is not None:
            s = min(max(s, bounds[0]), bounds[1])
        return self._frenet_point(s, offset, normal, binormal)
