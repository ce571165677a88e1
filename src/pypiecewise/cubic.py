"""Piecewise cubic (C2 spline) interpolation over a sorted parameter sequence.

The spline is stored as sample values plus the second derivative at each
sample.  Those second derivatives come from one tridiagonal solve at
construction time, after which every query is a closed-form cubic blend of
the two samples bracketing the query.

References
----------
- de Boor (2001), "A Practical Guide to Splines", Springer, Chapter IV.
- Press et al. (2007), "Numerical Recipes", 3rd ed., Section 3.3:
  Cubic Spline Interpolation.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from pypiecewise import _config
from pypiecewise._errors import (
    InvalidArgumentError,
    _as_samples,
    _check_samples,
    _check_scalar_values,
)
from pypiecewise._persist import _Persistable
from pypiecewise._search import lerp, nearest_upper_element, nearest_upper_elements
from pypiecewise._tridiagonal import PeriodicTridiagonalMatrix, TridiagonalMatrix

# extrapolation slope correction weights for (boundary, neighbour) second derivatives
_FACTORS = (-1.0 / 3.0, -1.0 / 6.0)
_INTEGRAL_FACTOR = -1.0 / 24.0
_NEWTON_ITERATIONS = 3


class BoundaryMode(NamedTuple):
    """End condition for a cubic spline.

    Attributes
    ----------
    order : int
        1 to prescribe the first derivative, 2 to prescribe the second.
    derivative : float or array_like
        Prescribed derivative value (vector for vector-valued samples).
    """

    order: int
    derivative: float = 0.0


NATURAL = BoundaryMode(2, 0.0)


def cuberp(y0, y1, ddy0, ddy1, ratio: float, h: float):
    """Cubic spline value at *ratio* in a segment of length *h*."""
    rest = 1.0 - ratio
    return (
        rest * y0 + ratio * y1
        + ((rest ** 3 - rest) * ddy0 + (ratio ** 3 - ratio) * ddy1) * (h * h / 6.0)
    )


def cuberpd(y0, y1, ddy0, ddy1, ratio: float, h: float):
    """Cubic spline first derivative at *ratio* in a segment of length *h*."""
    rest = 1.0 - ratio
    return (
        (y1 - y0) / h
        + ((1.0 - 3.0 * rest * rest) * ddy0 + (3.0 * ratio * ratio - 1.0) * ddy1) * (h / 6.0)
    )


class PiecewiseCubicFunction(_Persistable):
    """Cubic spline through ``(ts[i], ys[i])`` with continuous first and second derivatives.

    Parameters
    ----------
    ts : array_like of shape (n,)
        Strictly increasing parameters, ``n >= 2``.
    ys : array_like of shape (n,) or (n, k)
        Values at ``ts``.
    b0, bf : BoundaryMode, optional
        End conditions at the first and last sample.  Default is natural
        (zero second derivative) at both ends.
    periodic : bool, optional
        Use wrap-around continuity instead of end conditions.  Requires
        ``ys[0] == ys[-1]`` and no explicit ``b0``/``bf``.

    Raises
    ------
    InvalidArgumentError
        On invalid samples or boundary modes (only when precondition
        checking is enabled).

    Examples
    --------
    >>> import numpy as np
    >>> ts = np.linspace(0.0, 1.0, 6)
    >>> f = PiecewiseCubicFunction(ts, ts ** 2, BoundaryMode(2, 2.0), BoundaryMode(2, 2.0))
    >>> round(float(f(0.55)), 10)
    0.3025
    """

    def __init__(self, ts, ys, b0: BoundaryMode | None = None,
                 bf: BoundaryMode | None = None, periodic: bool = False):
        self._ts, self._ys = _as_samples(ts, ys)
        if _config.CHECK_PARAMS:
            _check_samples(self._ts, self._ys)
            if periodic:
                self._check_periodic(b0, bf)
            else:
                for name, mode in (("b0", b0), ("bf", bf)):
                    if mode is not None and mode.order not in (1, 2):
                        raise InvalidArgumentError(
                            f"The derivative order of {name} can only be 1 or 2: "
                            f"{name}.order = {mode.order}"
                        )

        if periodic:
            ddys = self._solve_periodic()
        else:
            ddys = self._solve_clamped(b0 or NATURAL, bf or NATURAL)
        ddys.flags.writeable = False
        self._ddys = ddys
        self._periodic = bool(periodic)

    def _check_periodic(self, b0, bf) -> None:
        if b0 is not None or bf is not None:
            raise InvalidArgumentError(
                "Boundary modes can not be combined with the periodic "
                "boundary condition"
            )
        if np.any(np.abs(self._ys[0] - self._ys[-1]) > _config.DUPLICATE_CRITERION):
            raise InvalidArgumentError(
                f"The periodic boundary condition requires ys[0] == ys[-1], "
                f"got ys[0] = {self._ys[0]}, ys[-1] = {self._ys[-1]}"
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _segments(self, count: int) -> tuple:
        """Segment lengths ``hs`` and chord slopes ``ds`` of the first *count* segments."""
        hs = np.diff(self._ts)[:count]
        dys = np.diff(self._ys, axis=0)[:count]
        if self._ys.ndim == 2:
            return hs, dys / hs[:, np.newaxis]
        return hs, dys / hs

    def _solve_clamped(self, b0: BoundaryMode, bf: BoundaryMode) -> np.ndarray:
        size = len(self._ts)
        hs, ds = self._segments(size - 1)
        a_diag = np.empty(size)
        b = np.empty((size,) + self._ys.shape[1:])
        a_diag[1:size - 1] = (hs[1:] + hs[:-1]) * 2.0
        b[1:size - 1] = (ds[1:] - ds[:-1]) * 6.0
        a_low = hs.copy()
        a_up = hs.copy()

        a_diag[0] = 1.0
        if b0.order == 2:
            a_up[0] = 0.0
            b[0] = b0.derivative
        else:
            a_up[0] = 0.5
            b[0] = (ds[0] - b0.derivative) * 3.0 / hs[0]
        a_diag[size - 1] = 1.0
        if bf.order == 2:
            a_low[size - 2] = 0.0
            b[size - 1] = bf.derivative
        else:
            a_low[size - 2] = 0.5
            b[size - 1] = (bf.derivative - ds[size - 2]) * 3.0 / hs[size - 2]

        return TridiagonalMatrix(a_low, a_diag, a_up).solve(b)

    def _solve_periodic(self) -> np.ndarray:
        size = len(self._ts) - 1
        hs, ds = self._segments(size)
        a_diag = np.empty(size)
        b = np.empty((size,) + self._ys.shape[1:])
        a_diag[1:] = (hs[1:] + hs[:-1]) * 2.0
        b[1:] = (ds[1:] - ds[:-1]) * 6.0
        a_diag[0] = (hs[0] + hs[size - 1]) * 2.0
        b[0] = (ds[0] - ds[size - 1]) * 6.0

        matrix = PeriodicTridiagonalMatrix(
            a_bottom=hs[size - 1],
            a_low=hs[:size - 1].copy(),
            a_diag=a_diag,
            a_up=hs[:size - 1].copy(),
            a_top=hs[size - 1],
        )
        ddys = matrix.solve(b)
        return np.concatenate([ddys, ddys[:1]], axis=0)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def eval(self, t: float):
        """Evaluate the spline at *t*.

        Outside the samples the spline continues as a straight line with
        the boundary first derivative.
        """
        ts, ys, ddys = self._ts, self._ys, self._ddys
        pos = nearest_upper_element(ts, t)
        if pos == 0:
            h = ts[1] - ts[0]
            ratio = (t - ts[0]) / h
            return (
                lerp(ys[0], ys[1], ratio)
                + (ddys[0] * _FACTORS[0] + ddys[1] * _FACTORS[1]) * (t - ts[0]) * h
            )
        if pos == len(ts):
            h = ts[pos - 2] - ts[pos - 1]
            ratio = (t - ts[pos - 1]) / h
            return (
                lerp(ys[pos - 1], ys[pos - 2], ratio)
                + (ddys[pos - 1] * _FACTORS[0] + ddys[pos - 2] * _FACTORS[1])
                * (t - ts[pos - 1]) * h
            )
        h = ts[pos] - ts[pos - 1]
        ratio = (t - ts[pos - 1]) / h
        return cuberp(ys[pos - 1], ys[pos], ddys[pos - 1], ddys[pos], ratio, h)

    def __call__(self, t: float):
        return self.eval(t)

    def eval_batch(self, ts) -> np.ndarray:
        """Evaluate at many parameters at once.

        Parameters
        ----------
        ts : float or array_like of shape (N,)
            Query parameters; a scalar is treated as a single query.

        Returns
        -------
        ndarray of shape (N,) or (N, k)
            Spline values, extrapolated linearly outside the samples.
        """
        queries = np.atleast_1d(np.asarray(ts, dtype=float))
        size = len(self._ts)
        pos = nearest_upper_elements(self._ts, queries)
        seg = np.clip(pos - 1, 0, size - 2)
        t0 = self._ts[seg]
        h = self._ts[seg + 1] - t0
        ratio = np.clip((queries - t0) / h, 0.0, 1.0)

        # left and right extension slopes, evaluated at the boundary samples
        slope_left = cuberpd(self._ys[0], self._ys[1], self._ddys[0], self._ddys[1],
                             0.0, self._ts[1] - self._ts[0])
        slope_right = cuberpd(self._ys[-2], self._ys[-1], self._ddys[-2], self._ddys[-1],
                              1.0, self._ts[-1] - self._ts[-2])
        overshoot_left = np.where(pos == 0, queries - self._ts[0], 0.0)
        overshoot_right = np.where(pos == size, queries - self._ts[-1], 0.0)

        if self._ys.ndim == 2:
            ratio, h = ratio[:, np.newaxis], h[:, np.newaxis]
            overshoot_left = overshoot_left[:, np.newaxis]
            overshoot_right = overshoot_right[:, np.newaxis]
        values = cuberp(self._ys[seg], self._ys[seg + 1],
                        self._ddys[seg], self._ddys[seg + 1], ratio, h)
        return values + overshoot_left * slope_left + overshoot_right * slope_right

    def derivative(self, t: float, order: int = 1):
        """Derivative of the given *order* (1, 2 or 3) at *t*.

        Second and third derivatives vanish outside the samples.

        Raises
        ------
        InvalidArgumentError
            If *order* is not 1, 2 or 3 (only when precondition checking
            is enabled).
        """
        if _config.CHECK_PARAMS and order not in (1, 2, 3):
            raise InvalidArgumentError(
                f"PiecewiseCubicFunction only has 1, 2, 3 order "
                f"derivatives: order = {order}"
            )
        if order == 1:
            return self._derivative1(t)
        if order == 2:
            return self._derivative2(t)
        return self._derivative3(t)

    def _derivative1(self, t: float):
        ts, ys, ddys = self._ts, self._ys, self._ddys
        pos = nearest_upper_element(ts, t)
        if pos == 0:
            h = ts[1] - ts[0]
            return (ys[1] - ys[0]) / h + (ddys[0] * _FACTORS[0] + ddys[1] * _FACTORS[1]) * h
        if pos == len(ts):
            h = ts[pos - 2] - ts[pos - 1]
            return (
                (ys[pos - 2] - ys[pos - 1]) / h
                + (ddys[pos - 1] * _FACTORS[0] + ddys[pos - 2] * _FACTORS[1]) * h
            )
        h = ts[pos] - ts[pos - 1]
        ratio = (t - ts[pos - 1]) / h
        return cuberpd(ys[pos - 1], ys[pos], ddys[pos - 1], ddys[pos], ratio, h)

    def _derivative2(self, t: float):
        ts, ddys = self._ts, self._ddys
        pos = nearest_upper_element(ts, t)
        if pos == 0 or pos == len(ts):
            return np.zeros_like(ddys[0])
        ratio = (t - ts[pos - 1]) / (ts[pos] - ts[pos - 1])
        return lerp(ddys[pos - 1], ddys[pos], ratio)

    def _derivative3(self, t: float):
        ts, ddys = self._ts, self._ddys
        pos = nearest_upper_element(ts, t)
        if pos == 0 or pos == len(ts):
            return np.zeros_like(ddys[0])
        return (ddys[pos] - ddys[pos - 1]) / (ts[pos] - ts[pos - 1])

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def integral(self, lower_bound: float, upper_bound: float):
        """Definite integral from *lower_bound* to *upper_bound*.

        Each piece contributes its exact cubic integral
        ``(f(a) + f(b)) w / 2 - (f''(a) + f''(b)) w^3 / 24``; pieces in the
        linear extrapolation region carry no curvature term.  Swapping the
        bounds flips the sign.
        """
        sign = 1.0
        if lower_bound > upper_bound:
            lower_bound, upper_bound = upper_bound, lower_bound
            sign = -1.0
        ts, ys, ddys = self._ts, self._ys, self._ddys
        size = len(ts)
        istart = int(np.searchsorted(ts, lower_bound, side="left"))
        iend = int(np.searchsorted(ts, upper_bound, side="left"))
        if istart == size or iend == 0 or istart == iend:
            if upper_bound <= ts[0] or lower_bound >= ts[-1]:
                return (
                    (self.eval(lower_bound) + self.eval(upper_bound))
                    * (upper_bound - lower_bound) * 0.5 * sign
                )
            return sign * _piece_integral(
                self.eval(lower_bound), self._derivative2(lower_bound),
                self.eval(upper_bound), self._derivative2(upper_bound),
                upper_bound - lower_bound,
            )

        zero = np.zeros_like(ddys[0])
        # the knot end of a piece lying in an extrapolated region is straight
        ddy_first = zero if lower_bound < ts[0] else ddys[istart]
        ddy_last = zero if upper_bound > ts[-1] else ddys[iend - 1]

        result = _piece_integral(
            self.eval(lower_bound), self._derivative2(lower_bound),
            ys[istart], ddy_first, ts[istart] - lower_bound,
        )
        h = np.diff(ts[istart:iend])
        result = result + np.tensordot(h, ys[istart:iend - 1] + ys[istart + 1:iend], axes=1) * 0.5
        result = result + np.tensordot(
            h ** 3, ddys[istart:iend - 1] + ddys[istart + 1:iend], axes=1
        ) * _INTEGRAL_FACTOR
        result = result + _piece_integral(
            ys[iend - 1], ddy_last,
            self.eval(upper_bound), self._derivative2(upper_bound),
            upper_bound - ts[iend - 1],
        )
        return result * sign

    # ------------------------------------------------------------------
    # Extrema
    # ------------------------------------------------------------------

    def _locate_extremum(self, mode: str) -> tuple:
        """Find the global minimum or maximum near the extreme stored sample.

        Picks the sample holding the extreme stored value, uses the first
        derivative sign next to it to choose the segment on its left or
        right, then runs three Newton steps on the segment ratio.

        Returns
        -------
        (value, location) : (float, float)
        """
        ts, ys, ddys = self._ts, self._ys, self._ddys
        size = len(ts)
        # direction multiplier: descend for the minimum, ascend for the maximum
        sense = 1.0 if mode == "min" else -1.0
        pos = int(np.argmin(ys)) if mode == "min" else int(np.argmax(ys))

        if pos == 0:
            h = ts[1] - ts[0]
            if sense * cuberpd(ys[0], ys[1], ddys[0], ddys[1], 0.0, h) < 0.0:
                pos += 1
            else:
                return float(ys[0]), float(ts[0])
        elif pos == size - 1:
            h = ts[pos] - ts[pos - 1]
            if sense * cuberpd(ys[pos - 1], ys[pos], ddys[pos - 1], ddys[pos], 1.0, h) < 0.0:
                return float(ys[pos]), float(ts[pos])
        else:
            h = ts[pos + 1] - ts[pos]
            if sense * cuberpd(ys[pos], ys[pos + 1], ddys[pos], ddys[pos + 1], 0.0, h) < 0.0:
                pos += 1

        h = ts[pos] - ts[pos - 1]
        ratio = 0.5
        for _ in range(_NEWTON_ITERATIONS):
            slope = cuberpd(ys[pos - 1], ys[pos], ddys[pos - 1], ddys[pos], ratio, h)
            curvature = lerp(ddys[pos - 1], ddys[pos], ratio)
            if curvature == 0.0:
                break
            ratio -= slope / (curvature * h)
        value = cuberp(ys[pos - 1], ys[pos], ddys[pos - 1], ddys[pos], ratio, h)
        return float(value), float(ts[pos - 1] + ratio * h)

    def min_y(self) -> float:
        """Approximate global minimum of the spline (scalar values only)."""
        _check_scalar_values(self._ys, "min_y")
        return self._locate_extremum("min")[0]

    def max_y(self) -> float:
        """Approximate global maximum of the spline (scalar values only)."""
        _check_scalar_values(self._ys, "max_y")
        return self._locate_extremum("max")[0]

    def minimize(self) -> tuple:
        """Return ``(value, location)`` of the approximate global minimum."""
        _check_scalar_values(self._ys, "minimize")
        return self._locate_extremum("min")

    def maximize(self) -> tuple:
        """Return ``(value, location)`` of the approximate global maximum."""
        _check_scalar_values(self._ys, "maximize")
        return self._locate_extremum("max")

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def min_t(self) -> float:
        """Smallest sample parameter."""
        return float(self._ts[0])

    def max_t(self) -> float:
        """Largest sample parameter."""
        return float(self._ts[-1])

    @property
    def ts(self) -> np.ndarray:
        """Sample parameters (read-only)."""
        return self._ts

    @property
    def ys(self) -> np.ndarray:
        """Sample values (read-only)."""
        return self._ys

    @property
    def ddys(self) -> np.ndarray:
        """Second derivatives at the samples (read-only)."""
        return self._ddys

    @property
    def periodic(self) -> bool:
        """Whether the spline was built with the periodic boundary condition."""
        return self._periodic

    def __repr__(self) -> str:
        return (
            f"PiecewiseCubicFunction("
            f"samples={len(self._ts)}, "
            f"domain=[{self._ts[0]}, {self._ts[-1]}], "
            f"value_shape={self._ys.shape[1:]}, "
            f"periodic={self._periodic})"
        )


def _piece_integral(y0, ddy0, y1, ddy1, width: float):
    """Exact integral of a cubic piece from its end values and second derivatives."""
    return (y0 + y1) * width * 0.5 + (ddy0 + ddy1) * width ** 3 * _INTEGRAL_FACTOR
