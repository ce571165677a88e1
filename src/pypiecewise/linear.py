"""Piecewise linear interpolation over a sorted parameter sequence."""

from __future__ import annotations

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


class PiecewiseLinearFunction(_Persistable):
    """Linear interpolant through ``(ts[i], ys[i])`` samples.

    Between samples the function is the chord; before the first and after
    the last sample it extends the boundary chord.  Values may be scalars
    (``ys`` of shape ``(n,)``) or vectors (``ys`` of shape ``(n, k)``).

    Parameters
    ----------
    ts : array_like of shape (n,)
        Strictly increasing parameters, ``n >= 2``.
    ys : array_like of shape (n,) or (n, k)
        Values at ``ts``.

    Raises
    ------
    InvalidArgumentError
        If the samples are too few, mismatched, unsorted, or contain
        duplicate parameters (only when precondition checking is enabled).

    Examples
    --------
    >>> f = PiecewiseLinearFunction([0.0, 1.0, 3.0], [0.0, 2.0, 0.0])
    >>> float(f(0.5))
    1.0
    >>> float(f.integral(0.0, 3.0))
    3.0
    """

    def __init__(self, ts, ys):
        self._ts, self._ys = _as_samples(ts, ys)
        if _config.CHECK_PARAMS:
            _check_samples(self._ts, self._ys)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def eval(self, t: float):
        """Evaluate the function at *t*, extrapolating outside the samples."""
        ts, ys = self._ts, self._ys
        pos = nearest_upper_element(ts, t)
        if pos == 0:
            return lerp(ys[0], ys[1], (t - ts[0]) / (ts[1] - ts[0]))
        if pos == len(ts):
            return lerp(ys[pos - 1], ys[pos - 2],
                        (t - ts[pos - 1]) / (ts[pos - 2] - ts[pos - 1]))
        return lerp(ys[pos - 1], ys[pos], (t - ts[pos - 1]) / (ts[pos] - ts[pos - 1]))

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
            Function values.
        """
        queries = np.atleast_1d(np.asarray(ts, dtype=float))
        seg = np.clip(nearest_upper_elements(self._ts, queries) - 1, 0, len(self._ts) - 2)
        t0 = self._ts[seg]
        ratio = (queries - t0) / (self._ts[seg + 1] - t0)
        if self._ys.ndim == 2:
            ratio = ratio[:, np.newaxis]
        return lerp(self._ys[seg], self._ys[seg + 1], ratio)

    def derivative(self, t: float, order: int = 1):
        """First derivative at *t*: the slope of the bracketing chord.

        Parameters
        ----------
        t : float
            Query parameter.
        order : int, optional
            Derivative order; only 1 is defined.

        Raises
        ------
        InvalidArgumentError
            If ``order != 1`` (only when precondition checking is enabled).
        """
        if _config.CHECK_PARAMS and order != 1:
            raise InvalidArgumentError(
                f"PiecewiseLinearFunction only has a first order "
                f"derivative: order = {order}"
            )
        ts, ys = self._ts, self._ys
        pos = nearest_upper_element(ts, t)
        if pos == 0:
            return (ys[1] - ys[0]) / (ts[1] - ts[0])
        if pos == len(ts):
            return (ys[pos - 1] - ys[pos - 2]) / (ts[pos - 1] - ts[pos - 2])
        return (ys[pos] - ys[pos - 1]) / (ts[pos] - ts[pos - 1])

    def integral(self, lower_bound: float, upper_bound: float):
        """Definite integral from *lower_bound* to *upper_bound*.

        Sums exact trapezoids over the covered segments; bounds outside
        the samples integrate the extrapolated line.  Swapping the bounds
        flips the sign.
        """
        sign = 1.0
        if lower_bound > upper_bound:
            lower_bound, upper_bound = upper_bound, lower_bound
            sign = -1.0
        ts, ys = self._ts, self._ys
        size = len(ts)
        istart = int(np.searchsorted(ts, lower_bound, side="left"))
        iend = int(np.searchsorted(ts, upper_bound, side="left"))
        if istart == size or iend == 0 or istart == iend:
            return (
                (self.eval(lower_bound) + self.eval(upper_bound))
                * (upper_bound - lower_bound) * 0.5 * sign
            )

        result = (self.eval(lower_bound) + ys[istart]) * (ts[istart] - lower_bound) * 0.5
        h = np.diff(ts[istart:iend])
        pair_sums = ys[istart:iend - 1] + ys[istart + 1:iend]
        result = result + np.tensordot(h, pair_sums, axes=1) * 0.5
        result = result + (ys[iend - 1] + self.eval(upper_bound)) * (upper_bound - ts[iend - 1]) * 0.5
        return result * sign

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    def min_t(self) -> float:
        """Smallest sample parameter."""
        return float(self._ts[0])

    def max_t(self) -> float:
        """Largest sample parameter."""
        return float(self._ts[-1])

    def min_y(self) -> float:
        """Smallest sample value (scalar values only)."""
        _check_scalar_values(self._ys, "min_y")
        return float(np.min(self._ys))

    def max_y(self) -> float:
        """Largest sample value (scalar values only)."""
        _check_scalar_values(self._ys, "max_y")
        return float(np.max(self._ys))

    @property
    def ts(self) -> np.ndarray:
        """Sample parameters (read-only)."""
        return self._ts

    @property
    def ys(self) -> np.ndarray:
        """Sample values (read-only)."""
        return self._ys

    def __repr__(self) -> str:
        return (
            f"PiecewiseLinearFunction("
            f"samples={len(self._ts)}, "
            f"domain=[{self._ts[0]}, {self._ts[-1]}], "
            f"value_shape={self._ys.shape[1:]})"
        )
