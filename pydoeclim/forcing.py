# pydoeclim/forcing.py

"""
Radiative forcing series for driving DOECLIM.

The model takes one global forcing series (W/m^2) which is applied to both the
land and the ocean box. Index 0 is the reference step and is normally 0.
"""

from __future__ import annotations

import numpy as np

from .errors import ConfigurationError


def step_forcing(n_steps: int, amplitude: float, onset: int = 2) -> np.ndarray:
    """
    Abrupt forcing: 0 before the 1-based step `onset`, `amplitude` from then on.
    step_forcing(5, 1.85) -> [0, 1.85, 1.85, 1.85, 1.85]
    """
    q = np.zeros(int(n_steps), dtype=float)
    q[max(int(onset) - 1, 0):] = float(amplitude)
    return q


def ramp_forcing(n_steps: int, rate: float, cap: float | None = None) -> np.ndarray:
    """Linear increase of `rate` W/m^2 per step from 0, optionally held at `cap`."""
    q = float(rate) * np.arange(int(n_steps), dtype=float)
    if cap is not None:
        q = np.minimum(q, float(cap)) if rate >= 0 else np.maximum(q, float(cap))
    return q


def as_forcing(forcing, n_steps: int) -> np.ndarray:
    """
    Validate a forcing series for an N-step run and return its first N values
    as a float array.
    """
    q = np.asarray(forcing, dtype=float)
    if q.ndim != 1:
        raise ConfigurationError(f"forcing must be 1-D, got shape {q.shape}")
    if q.shape[0] < n_steps:
        raise ConfigurationError(
            f"forcing has {q.shape[0]} values but the run needs n_steps={n_steps}"
        )
    q = q[:n_steps]
    if not np.all(np.isfinite(q)):
        raise ConfigurationError("forcing contains non-finite values")
    return q
