"""Library-wide configuration, read once at import time.

Precondition checking is a trust boundary selected when the library is
loaded, not a per-call argument.  Set the environment variable
``PYPIECEWISE_CHECK_PARAMS=0`` before importing :mod:`pypiecewise` to skip
constructor and argument validation (the caller is then trusted; invalid
input gives undefined results).
"""

from __future__ import annotations

import os
import warnings

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

DUPLICATE_CRITERION = 1e-8
SEARCH_TOLERANCE = 1e-8


def _read_flag(name: str, default: bool) -> bool:
    """Parse a boolean environment flag, warning on unrecognised values."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    warnings.warn(
        f"Ignoring {name}={raw!r}; expected one of "
        f"{sorted(_TRUE_VALUES | _FALSE_VALUES)}. "
        f"Using default {default}.",
        RuntimeWarning,
        stacklevel=2,
    )
    return default


CHECK_PARAMS = _read_flag("PYPIECEWISE_CHECK_PARAMS", True)
