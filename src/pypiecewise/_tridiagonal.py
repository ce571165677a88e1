"""O(n) LU solvers for tridiagonal and periodic tridiagonal systems.

Both solvers eliminate without pivoting and assume the system is
diagonally dominant, which holds for the spline systems assembled in
:mod:`pypiecewise.cubic` (interior diagonals are ``2 (h[i-1] + h[i])``
against off-diagonals ``h[i-1]`` and ``h[i]``).  No check is made for
other inputs.

The right-hand side may be of shape ``(m,)`` or ``(m, k)``; each column is
solved with the same factorisation.

References
----------
- Press et al. (2007), "Numerical Recipes", 3rd ed., Section 2.4:
  Tridiagonal and Band-Diagonal Systems of Equations.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pypiecewise._jit import periodic_lu_solve, tridiagonal_lu_solve


def _as_float(diagonal) -> np.ndarray:
    return np.ascontiguousarray(diagonal, dtype=float)


@dataclass(frozen=True)
class TridiagonalMatrix:
    """Tridiagonal matrix stored by its three diagonals.

    Parameters
    ----------
    a_low : ndarray of shape (m - 1,)
        Sub-diagonal; ``a_low[i]`` sits in row ``i + 1``.
    a_diag : ndarray of shape (m,)
        Main diagonal.
    a_up : ndarray of shape (m - 1,)
        Super-diagonal; ``a_up[i]`` sits in row ``i``.
    """

    a_low: np.ndarray
    a_diag: np.ndarray
    a_up: np.ndarray

    def solve(self, b) -> np.ndarray:
        """Solve ``A x = b`` by LU decomposition.

        Parameters
        ----------
        b : array_like of shape (m,) or (m, k)
            Right-hand side.

        Returns
        -------
        ndarray
            Solution with the shape of *b*.
        """
        x = np.array(b, dtype=float)
        tridiagonal_lu_solve(
            _as_float(self.a_low), _as_float(self.a_diag), _as_float(self.a_up),
            x.reshape(len(self.a_diag), -1),
        )
        return x


@dataclass(frozen=True)
class PeriodicTridiagonalMatrix:
    """Tridiagonal matrix with wrap-around corner entries.

    Parameters
    ----------
    a_bottom : float
        Bottom-left corner ``A[m-1, 0]``.
    a_low, a_diag, a_up : ndarray
        Diagonals as in :class:`TridiagonalMatrix`.
    a_top : float
        Top-right corner ``A[0, m-1]``.
    """

    a_bottom: float
    a_low: np.ndarray
    a_diag: np.ndarray
    a_up: np.ndarray
    a_top: float

    def to_dense(self) -> np.ndarray:
        """Return the full ``(m, m)`` matrix (corners added to any overlap)."""
        size = len(self.a_diag)
        dense = np.diag(np.asarray(self.a_diag, dtype=float))
        if size > 1:
            dense += np.diag(self.a_low, -1) + np.diag(self.a_up, 1)
            dense[0, size - 1] += self.a_top
            dense[size - 1, 0] += self.a_bottom
        return dense

    def solve(self, b) -> np.ndarray:
        """Solve ``A x = b`` by bordered LU decomposition.

        The factor ``U`` keeps a dense last column (``u_top``) and ``L`` a
        dense last row (``l_bottom``); everything else is bidiagonal, so
        the solve stays O(m).  Systems smaller than 3, where the corners
        fall on the ordinary off-diagonals, are solved densely.

        Parameters
        ----------
        b : array_like of shape (m,) or (m, k)
            Right-hand side.

        Returns
        -------
        ndarray
            Solution with the shape of *b*.
        """
        size = len(self.a_diag)
        x = np.array(b, dtype=float)
        if size < 3:
            return np.linalg.solve(self.to_dense(), x)
        periodic_lu_solve(
            float(self.a_bottom), _as_float(self.a_low), _as_float(self.a_diag),
            _as_float(self.a_up), float(self.a_top), x.reshape(size, -1),
        )
        return x
