"""
Compare pypiecewise PiecewiseCubicFunction vs scipy.interpolate.CubicSpline.

Tests:
1. Accuracy: max |difference| of values and derivatives for each end condition
2. Build time: construction cost as the number of samples grows
3. Eval time: scalar loop vs eval_batch vs scipy's vectorised call
4. Integrals: definite integrals against CubicSpline.integrate

Both libraries build the same C2 interpolant, so differences should sit at
rounding level inside the sample range.  Outside the range pypiecewise
extrapolates linearly while scipy continues the end cubic, so only
in-range queries are compared.

Requires: scipy (``pip install pypiecewise[bench]``)

Usage:
    python compare_scipy.py

NOTE: This script is for local benchmarking only. It is NOT part of the
test suite and is NOT run in CI.
"""

import math
import time

import numpy as np
from scipy.interpolate import CubicSpline

from pypiecewise import BoundaryMode, PiecewiseCubicFunction

END_CONDITIONS = [
    ("natural", None, None, "natural"),
    ("clamped", BoundaryMode(1, 1.0), BoundaryMode(1, -0.5), ((1, 1.0), (1, -0.5))),
    ("second", BoundaryMode(2, 0.3), BoundaryMode(2, -0.3), ((2, 0.3), (2, -0.3))),
]


# ============================================================================
# Helpers
# ============================================================================

def generate_samples(n, seed=42):
    """Sorted, well separated random parameters with smooth noisy values."""
    rng = np.random.default_rng(seed)
    ts = np.cumsum(rng.uniform(0.5, 1.5, n))
    ys = np.sin(ts / 3.0) + 0.1 * rng.normal(size=n)
    return ts, ys


def timed(fn, repeat=5):
    """Best wall time of ``repeat`` calls, and the last result."""
    best = math.inf
    result = None
    for _ in range(repeat):
        start = time.perf_counter()
        result = fn()
        best = min(best, time.perf_counter() - start)
    return best, result


def banner(title):
    print(f"\n{'=' * 78}")
    print(f"  {title}")
    print(f"{'=' * 78}")


# ============================================================================
# Tests
# ============================================================================

def compare_accuracy():
    banner("TEST 1: Accuracy against scipy CubicSpline (n=50)")
    ts, ys = generate_samples(50)
    queries = np.linspace(ts[0], ts[-1], 997)[1:-1]

    header = f"  {'End condition':<14} {'value':>12} {'d1':>12} {'d2':>12} {'d3':>12}"
    print(header)
    print(f"  {'─' * 64}")
    for name, b0, bf, bc_type in END_CONDITIONS:
        ours = PiecewiseCubicFunction(ts, ys, b0, bf)
        ref = CubicSpline(ts, ys, bc_type=bc_type)
        errs = [np.max(np.abs(ours.eval_batch(queries) - ref(queries)))]
        for order in (1, 2, 3):
            mine = np.array([ours.derivative(q, order) for q in queries])
            errs.append(np.max(np.abs(mine - ref(queries, order))))
        print(f"  {name:<14} " + " ".join(f"{e:>12.2e}" for e in errs))


def compare_build_time():
    banner("TEST 2: Build time")
    print(f"  {'n':>8} {'pypiecewise':>14} {'scipy':>14}")
    print(f"  {'─' * 38}")
    for n in (10, 100, 1_000, 10_000):
        ts, ys = generate_samples(n)
        ours, _ = timed(lambda: PiecewiseCubicFunction(ts, ys))
        ref, _ = timed(lambda: CubicSpline(ts, ys, bc_type="natural"))
        print(f"  {n:>8} {ours * 1e3:>12.3f}ms {ref * 1e3:>12.3f}ms")


def compare_eval_time():
    banner("TEST 3: Eval time (n=1000 samples, 10,000 queries)")
    ts, ys = generate_samples(1_000)
    ours = PiecewiseCubicFunction(ts, ys)
    ref = CubicSpline(ts, ys, bc_type="natural")
    queries = np.random.default_rng(7).uniform(ts[0], ts[-1], 10_000)

    loop, _ = timed(lambda: [ours(q) for q in queries], repeat=1)
    batch, values = timed(lambda: ours.eval_batch(queries))
    scipy_time, expected = timed(lambda: ref(queries))
    print(f"  pypiecewise scalar loop: {loop * 1e3:>10.3f}ms")
    print(f"  pypiecewise eval_batch:  {batch * 1e3:>10.3f}ms")
    print(f"  scipy vectorised:        {scipy_time * 1e3:>10.3f}ms")
    print(f"  max |difference|:        {np.max(np.abs(values - expected)):>10.2e}")


def compare_integrals():
    banner("TEST 4: Definite integrals (n=50)")
    ts, ys = generate_samples(50)
    ours = PiecewiseCubicFunction(ts, ys)
    ref = CubicSpline(ts, ys, bc_type="natural")
    bounds = np.random.default_rng(3).uniform(ts[0], ts[-1], size=(8, 2))

    print(f"  {'a':>10} {'b':>10} {'pypiecewise':>16} {'scipy':>16} {'diff':>10}")
    print(f"  {'─' * 66}")
    for a, b in bounds:
        mine = ours.integral(a, b)
        theirs = ref.integrate(a, b)
        print(f"  {a:>10.4f} {b:>10.4f} {mine:>16.10f} {theirs:>16.10f} "
              f"{abs(mine - theirs):>10.2e}")


if __name__ == "__main__":
    compare_accuracy()
    compare_build_time()
    compare_eval_time()
    compare_integrals()
