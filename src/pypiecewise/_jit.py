"""Optional Numba JIT compilation of the tridiagonal LU kernels.

The kernels below are plain loops over preallocated arrays.  When Numba is
installed they are compiled with ``njit``; otherwise they run as ordinary
Python.  Install with: pip install pypiecewise[jit]

Both kernels overwrite the right-hand side ``x`` of shape ``(m, k)`` with
the solution.
"""

import numpy as np


def tridiagonal_lu_solve(a_low: np.ndarray, a_diag: np.ndarray, a_up: np.ndarray,
                         x: np.ndarray) -> None:
    """Solve a tridiagonal system in place by LU decomposition without pivoting.

    Parameters
    ----------
    a_low, a_diag, a_up : ndarray
        Sub-, main and super-diagonal.
    x : ndarray of shape (m, k)
        Right-hand sides, replaced by the solutions.
    """
    size = a_diag.shape[0]
    ncols = x.shape[1]
    if size == 1:
        for c in range(ncols):
            x[0, c] = x[0, c] / a_diag[0]
        return

    u0 = np.empty(size)
    l1 = np.empty(size - 1)
    u0[0] = a_diag[0]
    l1[0] = a_low[0] / u0[0]
    for i in range(1, size - 1):
        u0[i] = a_diag[i] - l1[i - 1] * a_up[i - 1]
        l1[i] = a_low[i] / u0[i]
    u0[size - 1] = a_diag[size - 1] - l1[size - 2] * a_up[size - 2]

    for i in range(1, size):
        for c in range(ncols):
            x[i, c] = x[i, c] - l1[i - 1] * x[i - 1, c]

    for c in range(ncols):
        x[size - 1, c] = x[size - 1, c] / u0[size - 1]
    for i in range(size - 2, -1, -1):
        for c in range(ncols):
            x[i, c] = (x[i, c] - a_up[i] * x[i + 1, c]) / u0[i]


def periodic_lu_solve(a_bottom: float, a_low: np.ndarray, a_diag: np.ndarray,
                      a_up: np.ndarray, a_top: float, x: np.ndarray) -> None:
    """Solve a periodic tridiagonal system of size >= 3 in place.

    ``U`` keeps a dense last column (``u_top``) and ``L`` a dense last row
    (``l_bottom``); everything else is bidiagonal.
    """
    size = a_diag.shape[0]
    ncols = x.shape[1]
    u0 = np.empty(size)
    l1 = np.empty(size - 2)
    u_top = np.empty(size - 2)
    l_bottom = np.empty(size - 2)

    u0[0] = a_diag[0]
    l1[0] = a_low[0] / u0[0]
    u_top[0] = a_top
    l_bottom[0] = a_bottom / u0[0]
    for i in range(1, size - 2):
        u0[i] = a_diag[i] - l1[i - 1] * a_up[i - 1]
        l1[i] = a_low[i] / u0[i]
        u_top[i] = -l1[i - 1] * u_top[i - 1]
        l_bottom[i] = -l_bottom[i - 1] * a_up[i - 1] / u0[i]
    u0[size - 2] = a_diag[size - 2] - l1[size - 3] * a_up[size - 3]
    # last super-diagonal and sub-diagonal pick up the corner fill-in
    u_last = a_up[size - 2] - l1[size - 3] * u_top[size - 3]
    l_last = (a_low[size - 2] - l_bottom[size - 3] * a_up[size - 3]) / u0[size - 2]
    corner = 0.0
    for i in range(size - 2):
        corner += l_bottom[i] * u_top[i]
    u0[size - 1] = a_diag[size - 1] - corner - l_last * u_last

    for i in range(1, size - 1):
        for c in range(ncols):
            x[i, c] = x[i, c] - l1[i - 1] * x[i - 1, c]
    for c in range(ncols):
        border = 0.0
        for i in range(size - 2):
            border += l_bottom[i] * x[i, c]
        x[size - 1, c] = x[size - 1, c] - border - l_last * x[size - 2, c]

    for c in range(ncols):
        x[size - 1, c] = x[size - 1, c] / u0[size - 1]
        x[size - 2, c] = (x[size - 2, c] - u_last * x[size - 1, c]) / u0[size - 2]
    for i in range(size - 3, -1, -1):
        for c in range(ncols):
            x[i, c] = (x[i, c] - a_up[i] * x[i + 1, c] - u_top[i] * x[size - 1, c]) / u0[i]


try:
    from numba import njit
except ImportError:
    HAS_NUMBA = False
else:
    tridiagonal_lu_solve = njit(cache=True)(tridiagonal_lu_solve)
    periodic_lu_solve = njit(cache=True)(periodic_lu_solve)
    HAS_NUMBA = True
