"""
Run configuration for the DOECLIM engine.

A DoeclimConfig carries the only tunable scalars of the model:

    delta_t              time step size (years), > 0
    climate_sensitivity  equilibrium warming for 2xCO2 (K), > 0
    ocean_diffusivity    vertical ocean diffusivity (cm^2/s), >= 0
    n_steps              number of time steps N, >= 2

Environment parameters (read by DoeclimConfig.from_env):
    DOECLIM_DT=1.0
    DOECLIM_T2CO=3.0
    DOECLIM_KAPPA=0.55
    DOECLIM_NSTEPS=100
    DOECLIM_DIAG=0     (print diagnostics)
"""

from __future__ import annotations

import math
import numbers
import os
from dataclasses import dataclass, replace

from .errors import ConfigurationError


@dataclass(frozen=True)
class DoeclimConfig:
    delta_t: float = 1.0              # years
    climate_sensitivity: float = 3.0  # K per CO2 doubling
    ocean_diffusivity: float = 0.55   # cm^2/s
    n_steps: int = 100
    diag: bool = False                # enable diagnostics printing

    @classmethod
    def from_env(cls) -> DoeclimConfig:
        def _f(env, default):
            try:
                return float(os.getenv(env, str(default)))
            except Exception:
                return default

        def _i(env, default):
            try:
                return int(os.getenv(env, str(default)))
            except Exception:
                return default

        return cls(
            delta_t=_f("DOECLIM_DT", 1.0),
            climate_sensitivity=_f("DOECLIM_T2CO", 3.0),
            ocean_diffusivity=_f("DOECLIM_KAPPA", 0.55),
            n_steps=_i("DOECLIM_NSTEPS", 100),
            diag=(_i("DOECLIM_DIAG", 0) == 1),
        )

    def with_params(self, **changes) -> DoeclimConfig:
        """Return a copy with some fields replaced (the original is untouched)."""
        return replace(self, **changes)

    def validate(self) -> DoeclimConfig:
        """Raise ConfigurationError unless every scalar is inside its domain."""
        for name in ("delta_t", "climate_sensitivity", "ocean_diffusivity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a real number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value!r}")
        if self.delta_t <= 0.0:
            raise ConfigurationError(f"delta_t must be > 0, got {self.delta_t!r}")
        if self.climate_sensitivity <= 0.0:
            raise ConfigurationError(
                f"climate_sensitivity must be > 0, got {self.climate_sensitivity!r}"
            )
        if self.ocean_diffusivity < 0.0:
            raise ConfigurationError(
                f"ocean_diffusivity must be >= 0, got {self.ocean_diffusivity!r}"
            )
        n = self.n_steps
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 2:
            raise ConfigurationError(f"n_steps must be an integer >= 2, got {n!r}")
        return self
