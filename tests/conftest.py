"""Shared test fixtures for pypiecewise tests."""

import math

import numpy as np
import pytest

from pypiecewise import (
    PiecewiseCubicCurve,
    PiecewiseCubicFunction,
    PiecewiseLinearCurve,
    PiecewiseLinearFunction,
)


# ---------------------------------------------------------------------------
# Sample generators
# ---------------------------------------------------------------------------

def random_samples(seed, n=12, k=None):
    """Sorted, well separated random parameters with random values."""
    rng = np.random.default_rng(seed)
    ts = np.cumsum(rng.uniform(0.2, 1.0, n)) - 1.0
    shape = (n,) if k is None else (n, k)
    ys = rng.normal(size=shape)
    return ts, ys


def circle_points(radius, num, start=0.0, stop=2.0 * math.pi, endpoint=False):
    """Points on a counter-clockwise circle centred at the origin."""
    theta = np.linspace(start, stop, num, endpoint=endpoint)
    return np.column_stack([radius * np.cos(theta), radius * np.sin(theta)])


def helix_points(num, radius=1.0, pitch=0.2, turns=2.0):
    """Points on a right-handed helix ``(r cos t, r sin t, pitch t)``."""
    t = np.linspace(0.0, 2.0 * math.pi * turns, num)
    return np.column_stack([radius * np.cos(t), radius * np.sin(t), pitch * t])


def planar_double_loop_points(radius=2.0, num=144):
    """A counter-clockwise circle traversed twice, embedded in the z = 0 plane."""
    loop = circle_points(radius, num, stop=4.0 * math.pi)
    return np.column_stack([loop, np.zeros(num)])


# ---------------------------------------------------------------------------
# Function fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def linear_tent():
    """Tent 0 -> 2 -> 0 over ts = [0, 1, 3]."""
    return PiecewiseLinearFunction([0.0, 1.0, 3.0], [0.0, 2.0, 0.0])


@pytest.fixture(scope="module")
def cubic_sin():
    """Natural cubic spline of sin(t) over one period, 30 samples."""
    ts = np.linspace(0.0, 2.0 * math.pi, 30)
    return PiecewiseCubicFunction(ts, np.sin(ts))


# ---------------------------------------------------------------------------
# Curve fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def semicircle_points():
    """101 points on the upper half of a radius-2 circle."""
    return circle_points(2.0, 101, stop=math.pi, endpoint=True)


@pytest.fixture(scope="module")
def linear_semicircle(semicircle_points):
    return PiecewiseLinearCurve(semicircle_points)


@pytest.fixture(scope="module")
def cubic_semicircle(semicircle_points):
    return PiecewiseCubicCurve(semicircle_points)


@pytest.fixture(scope="module")
def linear_circle():
    """Open polyline of 72 points on a radius-2 circle (last point not closing)."""
    return PiecewiseLinearCurve(circle_points(2.0, 72))


@pytest.fixture(scope="module")
def linear_helix():
    return PiecewiseLinearCurve(helix_points(120))


@pytest.fixture(scope="module")
def cubic_helix():
    return PiecewiseCubicCurve(helix_points(200))
