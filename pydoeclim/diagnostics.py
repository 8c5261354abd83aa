"""
Side-effect-free diagnostics for DOECLIM runs.

Nothing here prints; callers (model.py, scripts) decide what to report.
"""

from __future__ import annotations

import numpy as np

from . import constants as const
from .errors import NumericalInstabilityError
from .state import SERIES_NAMES, DoeclimState


def equilibrium_temperature(forcing: float, climate_sensitivity: float) -> float:
    """Equilibrium global warming (K) for a constant forcing (W/m^2)."""
    return float(climate_sensitivity) * float(forcing) / const.Q2CO


def check_finite(state: DoeclimState, upto: int | None = None) -> None:
    """Raise NumericalInstabilityError if any stored value up to step `upto` is not finite."""
    stop = state.last_step if upto is None else int(upto)
    for name in SERIES_NAMES:
        arr = getattr(state, name)[:stop]
        if not np.all(np.isfinite(arr)):
            first = int(np.flatnonzero(~np.isfinite(arr))[0]) + 1
            raise NumericalInstabilityError(f"{name} is not finite at step {first}")


def summarize(state: DoeclimState) -> dict:
    """Final values and extrema of the completed part of a run."""
    n = state.last_step
    out: dict = {"steps": n}
    if n == 0:
        return out
    k = n - 1
    out.update(
        temp_final=float(state.temp[k]),
        temp_max=float(np.max(state.temp[:n])),
        temp_landair_final=float(state.temp_landair[k]),
        temp_sst_final=float(state.temp_sst[k]),
        heat_mixed_final=float(state.heat_mixed[k]),
        heat_interior_final=float(state.heat_interior[k]),
        heat_total_final=float(state.heat_mixed[k] + state.heat_interior[k]),
    )
    return out
