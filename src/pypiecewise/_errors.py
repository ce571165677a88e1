"""Error type and shared validation for sample series."""

from __future__ import annotations

import numpy as np

from pypiecewise import _config
from pypiecewise._search import has_duplicates


class InvalidArgumentError(ValueError):
    """Raised when a constructor or query precondition is violated."""


def _as_samples(ts, ys) -> tuple:
    """Convert ``ts``, ``ys`` to read-only float arrays.

    Parameters
    ----------
    ts : array_like of shape (n,)
        Parameter sequence.
    ys : array_like of shape (n,) or (n, k)
        Values (scalar or vector) co-indexed with ``ts``.

    Returns
    -------
    (ts, ys) : (ndarray, ndarray)
        Copies of the inputs with ``writeable`` cleared.
    """
    ts = np.array(ts, dtype=float)
    ys = np.array(ys, dtype=float)
    ts.flags.writeable = False
    ys.flags.writeable = False
    return ts, ys


def _check_samples(ts: np.ndarray, ys: np.ndarray) -> None:
    """Validate a sample series.

    Raises
    ------
    InvalidArgumentError
        If there are fewer than 2 samples, ``ts`` and ``ys`` differ in
        length, ``ts`` is not sorted, or ``ts`` holds duplicates.
    """
    if ts.ndim != 1:
        raise InvalidArgumentError(
            f"ts must be one-dimensional, got shape {ts.shape}"
        )
    if ys.ndim not in (1, 2):
        raise InvalidArgumentError(
            f"ys must have shape (n,) or (n, k), got shape {ys.shape}"
        )
    if len(ts) < 2 or len(ys) < 2:
        raise InvalidArgumentError(
            f"ts and ys need at least 2 samples: "
            f"len(ts) = {len(ts)}, len(ys) = {len(ys)}"
        )
    if len(ts) != len(ys):
        raise InvalidArgumentError(
            f"ts and ys must share the same size: "
            f"len(ts) = {len(ts)}, len(ys) = {len(ys)}"
        )
    if np.any(np.diff(ts) < 0.0):
        raise InvalidArgumentError("ts has to be sorted in ascending order")
    if has_duplicates(ts, _config.DUPLICATE_CRITERION):
        raise InvalidArgumentError("ts can not have duplicated elements")


def _check_scalar_values(ys: np.ndarray, name: str) -> None:
    """Raise ``TypeError`` if *name* is queried on vector-valued samples."""
    if ys.ndim != 1:
        raise TypeError(
            f"{name}() is only defined for scalar values; "
            f"this function has values of shape {ys.shape[1:]}"
        )
