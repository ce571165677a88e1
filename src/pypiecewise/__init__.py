"""PyPiecewise: piecewise polynomial interpolation and arc-length curves.

Provides :class:`PiecewiseLinearFunction` and :class:`PiecewiseCubicFunction`
for 1D interpolation (evaluation, derivatives, integrals, extrema) over a
sorted parameter sequence, and :class:`PiecewiseLinearCurve` /
:class:`PiecewiseCubicCurve` for 2D/3D curves parametrised by arc length,
with tangent/normal/binormal frames, curvature and point inversion to
``(s, l[, v])`` curve coordinates.

Example
-------
>>> import numpy as np
>>> from pypiecewise import PiecewiseLinearCurve
>>> theta = np.linspace(0.0, np.pi, 101)
>>> curve = PiecewiseLinearCurve(np.column_stack([2 * np.cos(theta), 2 * np.sin(theta)]))
>>> sl = curve.inverse(curve.eval(1.0))
>>> round(sl.s, 6), round(abs(sl.l), 6)
(1.0, 0.0)
"""

from pypiecewise._errors import InvalidArgumentError
from pypiecewise._search import nearest_upper_element, nearest_upper_point
from pypiecewise._version import __version__
from pypiecewise.cubic import BoundaryMode, PiecewiseCubicFunction
from pypiecewise.cubic_curve import PiecewiseCubicCurve
from pypiecewise.curve import Curve, FrenetPoint2, FrenetPoint3, PiecewiseLinearCurve
from pypiecewise.linear import PiecewiseLinearFunction

__all__ = [
    "BoundaryMode",
    "Curve",
    "FrenetPoint2",
    "FrenetPoint3",
    "InvalidArgumentError",
    "PiecewiseCubicCurve",
    "PiecewiseCubicFunction",
    "PiecewiseLinearCurve",
    "PiecewiseLinearFunction",
    "__version__",
    "nearest_upper_element",
    "nearest_upper_point",
]
