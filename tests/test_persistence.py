"""Tests for save/load of functions and curves."""

import pickle
import warnings

import numpy as np
import pytest

from pypiecewise import (
    BoundaryMode,
    PiecewiseCubicCurve,
    PiecewiseCubicFunction,
    PiecewiseLinearCurve,
    PiecewiseLinearFunction,
)

from conftest import helix_points, random_samples


def build_objects():
    ts, ys = random_samples(seed=51)
    return [
        PiecewiseLinearFunction(ts, ys),
        PiecewiseCubicFunction(ts, ys, BoundaryMode(1, 0.5), BoundaryMode(2, 0.0)),
        PiecewiseLinearCurve(helix_points(40)),
        PiecewiseCubicCurve(helix_points(40)),
    ]


def exposed_arrays(obj):
    """The read-only arrays an object hands out, including its components'."""
    if hasattr(obj, "components"):
        arrays = [obj.anchor_points, obj.arc_lengths]
        for component in obj.components:
            arrays.extend(exposed_arrays(component))
        return arrays
    arrays = [obj.ts, obj.ys]
    if hasattr(obj, "ddys"):
        arrays.append(obj.ddys)
    return arrays


@pytest.mark.parametrize("obj", build_objects(), ids=lambda obj: type(obj).__name__)
class TestSaveLoad:
    def test_round_trip(self, obj, tmp_path):
        path = tmp_path / "obj.pkl"
        obj.save(path)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            loaded = type(obj).load(path)
        assert type(loaded) is type(obj)
        for q in (-0.5, 0.3, 2.0, 4.7, 20.0):
            np.testing.assert_allclose(loaded(q), obj(q), rtol=0, atol=0)

    def test_loaded_arrays_are_read_only(self, obj, tmp_path):
        path = tmp_path / "obj.pkl"
        obj.save(path)
        for loaded in (type(obj).load(path), pickle.loads(pickle.dumps(obj))):
            for array in exposed_arrays(loaded):
                assert not array.flags.writeable
                with pytest.raises(ValueError):
                    array[0] = 1.0

    def test_string_path(self, obj, tmp_path):
        path = str(tmp_path / "obj.pkl")
        obj.save(path)
        assert repr(type(obj).load(path)) == repr(obj)


class TestLoadErrors:
    def test_wrong_class(self, tmp_path):
        path = tmp_path / "linear.pkl"
        PiecewiseLinearFunction([0.0, 1.0], [0.0, 1.0]).save(path)
        with pytest.raises(TypeError, match="Expected a PiecewiseCubicFunction"):
            PiecewiseCubicFunction.load(path)

    def test_version_mismatch_warns(self):
        f = PiecewiseLinearFunction([0.0, 1.0], [0.0, 1.0])
        state = f.__getstate__()
        state["_pypiecewise_version"] = "0.0.0"
        restored = PiecewiseLinearFunction.__new__(PiecewiseLinearFunction)
        with pytest.warns(UserWarning, match="saved with pypiecewise 0.0.0"):
            restored.__setstate__(state)
        assert restored(0.5) == 0.5

    def test_state_is_stamped(self):
        from pypiecewise import __version__

        f = PiecewiseLinearFunction([0.0, 1.0], [0.0, 1.0])
        assert f.__getstate__()["_pypiecewise_version"] == __version__
        assert "_pypiecewise_version" not in pickle.loads(pickle.dumps(f)).__dict__
