"""Bracketing search and small numeric helpers shared by functions and curves.

Every evaluation, derivative, integral and inversion locates its segment
through :func:`nearest_upper_element`, so the endpoint policy implemented
here governs extrapolation everywhere in the package.
"""

from __future__ import annotations

import numpy as np

from pypiecewise._config import SEARCH_TOLERANCE as _DEFAULT_TOL


def lerp(start, end, ratio):
    """Linear interpolation ``(1 - ratio) * start + ratio * end``."""
    return (1.0 - ratio) * start + ratio * end


def has_duplicates(values, tol: float = _DEFAULT_TOL) -> bool:
    """True if any two elements of *values* are closer than *tol*.

    Scalar sequences are compared after sorting; point sequences (2-D
    arrays) only compare consecutive points.
    """
    values = np.asarray(values, dtype=float)
    if len(values) < 2:
        return False
    if values.ndim == 1:
        return bool(np.any(np.diff(np.sort(values)) < tol))
    gaps = np.linalg.norm(np.diff(values, axis=0), axis=1)
    return bool(np.any(gaps < tol))


def nearest_upper_element(sequence, query, tol: float = _DEFAULT_TOL) -> int:
    """Locate the segment of *sequence* to use for interpolating at *query*.

    For a sorted scalar sequence the returned index ``i`` satisfies
    ``sequence[i - 1] <= query <= sequence[i]`` for in-range queries.

    - A query within ``tol`` of the first element returns 1.
    - A query within ``tol`` of the last element returns ``len - 1``.
    - Otherwise the first element greater than ``query + tol`` is
      returned: 0 for left extrapolation, ``len`` for right extrapolation.

    If *sequence* is a 2-D array of points, dispatches to
    :func:`nearest_upper_point`.

    Parameters
    ----------
    sequence : array_like of shape (n,) or (n, d)
        Sorted parameters, or ordered points.
    query : float or array_like of shape (d,)
        Value (or point) to locate.
    tol : float, optional
        Snapping tolerance (default 1e-8).

    Returns
    -------
    int
        Upper bracketing index in ``[0, n]``.

    Examples
    --------
    >>> nearest_upper_element([0.0, 1.0, 2.0, 3.0, 4.0], 2.5)
    3
    >>> nearest_upper_element([0.0, 1.0, 2.0, 3.0, 4.0], -1.0)
    0
    """
    sequence = np.asarray(sequence, dtype=float)
    if sequence.ndim == 2:
        return nearest_upper_point(sequence, query, tol)
    size = len(sequence)
    if size < 2:
        return 0 if query < sequence[0] else size
    if abs(query - sequence[0]) < tol:
        return 1
    if abs(query - sequence[-1]) < tol:
        return size - 1
    return int(np.searchsorted(sequence, query + tol, side="right"))


def nearest_upper_elements(sequence, queries, tol: float = _DEFAULT_TOL) -> np.ndarray:
    """Vectorised :func:`nearest_upper_element` for a sorted scalar sequence."""
    sequence = np.asarray(sequence, dtype=float)
    queries = np.asarray(queries, dtype=float)
    size = len(sequence)
    if size < 2:
        return np.where(queries < sequence[0], 0, size)
    pos = np.searchsorted(sequence, queries + tol, side="right")
    pos = np.where(np.abs(queries - sequence[-1]) < tol, size - 1, pos)
    pos = np.where(np.abs(queries - sequence[0]) < tol, 1, pos)
    return pos


def nearest_upper_point(points, query, tol: float = _DEFAULT_TOL,
                        start: int = 0, stop: int | None = None) -> int:
    """Locate the segment of a point sequence that *query* falls in.

    Finds the nearest point of the window ``points[start:stop]`` by
    Euclidean distance, then uses the sign of the dot product between the
    local chord direction and the vector from that point to *query* to
    decide whether *query* lies in the segment before or after it.  This
    follows the tangential direction of a curve rather than coordinate
    order.

    Parameters
    ----------
    points : array_like of shape (n, d)
        Ordered points.
    query : array_like of shape (d,)
        Point to locate.
    tol : float, optional
        Tolerance on the dot-product sign test (default 1e-8).
    start, stop : int, optional
        Window of *points* to search.  Returned indices are absolute.

    Returns
    -------
    int
        Upper bracketing index in ``[start, stop]``.
    """
    points = np.asarray(points, dtype=float)
    query = np.asarray(query, dtype=float)
    if stop is None:
        stop = len(points)
    window = points[start:stop]
    size = len(window)
    if size < 2:
        return start

    pos = int(np.argmin(np.linalg.norm(window - query, axis=1)))
    if pos == 0:
        inner_prod = np.dot(window[1] - window[0], query - window[0])
        return start if inner_prod < -tol else start + 1
    if pos == size - 1:
        inner_prod = np.dot(window[size - 2] - window[size - 1], query - window[size - 1])
        return start + size if inner_prod < -tol else start + size - 1
    inner_prod = np.dot(window[pos + 1] - window[pos], query - window[pos])
    return start + pos if inner_prod < -tol else start + pos + 1
