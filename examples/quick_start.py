"""Quick start example: interpolate a 1D function, then build and query a curve."""

import math

import numpy as np

from pypiecewise import BoundaryMode, PiecewiseCubicCurve, PiecewiseCubicFunction

# Cubic spline of sin(t) with the exact end slopes
ts = np.linspace(0.0, math.pi, 12)
spline = PiecewiseCubicFunction(ts, np.sin(ts), BoundaryMode(1, 1.0), BoundaryMode(1, -1.0))

t = 1.0
print(f"Exact:  {math.sin(t):.10f}")
print(f"Approx: {spline(t):.10f}")
print(f"Error:  {abs(spline(t) - math.sin(t)):.2e}")

print(f"\nd/dt exact:  {math.cos(t):.10f}")
print(f"d/dt approx: {spline.derivative(t):.10f}")
print(f"\nIntegral over [0, pi]: {spline.integral(0.0, math.pi):.10f} (exact 2)")
value, location = spline.maximize()
print(f"Maximum: {value:.8f} at t = {location:.8f} (exact 1 at {math.pi / 2:.8f})")

# Arc-length curve through points on a radius-2 semicircle
theta = np.linspace(0.0, math.pi, 41)
curve = PiecewiseCubicCurve(np.column_stack([2.0 * np.cos(theta), 2.0 * np.sin(theta)]))

s = 0.5 * curve.max_s()
print(f"\nCurve length: {curve.max_s():.6f} (exact {2.0 * math.pi:.6f})")
print(f"Curvature at s={s:.4f}: {curve.curvature(s):.6f} (exact 0.5)")

# Curve coordinates of a point 0.3 inside the curve
point = curve.eval(s, 0.3)
sl = curve.inverse(point)
print(f"Point {point} -> s = {sl.s:.8f}, l = {sl.l:.8f}")
