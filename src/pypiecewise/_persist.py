"""Pickle-based persistence shared by functions and curves."""

from __future__ import annotations

import os
import pickle
import warnings

import numpy as np


class _Persistable:
    """Mixin adding ``save``/``load`` with a version stamp.

    The pickled state is the instance ``__dict__`` (the owned sample arrays
    and any derived arrays), plus the library version that wrote it.  Arrays
    are restored read-only.
    """

    def __getstate__(self) -> dict:
        """Return picklable state stamped with the library version."""
        from pypiecewise._version import __version__

        state = self.__dict__.copy()
        state["_pypiecewise_version"] = __version__
        return state

    def __setstate__(self, state: dict) -> None:
        """Restore state from a pickled dict."""
        from pypiecewise._version import __version__

        saved_version = state.pop("_pypiecewise_version", None)
        if saved_version is not None and saved_version != __version__:
            warnings.warn(
                f"This object was saved with pypiecewise {saved_version}, "
                f"but you are loading it with {__version__}. "
                f"Evaluation results may differ if internal data layout "
                f"changed.",
                UserWarning,
                stacklevel=2,
            )
        self.__dict__.update(state)
        for value in state.values():
            if isinstance(value, np.ndarray):
                value.flags.writeable = False

    def save(self, path: str | os.PathLike) -> None:
        """Save the object to a file.

        Parameters
        ----------
        path : str or path-like
            Destination file path.
        """
        with open(os.fspath(path), "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | os.PathLike):
        """Load a previously saved object from a file.

        Parameters
        ----------
        path : str or path-like
            Path to the saved file.

        Returns
        -------
        object
            The restored instance, ready to evaluate.

        Raises
        ------
        TypeError
            If the file holds an instance of another class.

        Warns
        -----
        UserWarning
            If the file was saved with a different pypiecewise version.

        .. warning::

            This method uses :mod:`pickle` internally.  Pickle can execute
            arbitrary code during deserialization.  **Only load files you
            trust.**
        """
        with open(os.fspath(path), "rb") as f:
            obj = pickle.load(f)  # noqa: S301
        if not isinstance(obj, cls):
            raise TypeError(
                f"Expected a {cls.__name__} instance, "
                f"got {type(obj).__name__}"
            )
        return obj
