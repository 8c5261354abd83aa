from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np

SERIES_NAMES = (
    "temp_landair",
    "temp_sst",
    "temp",
    "heat_mixed",
    "heat_interior",
    "heatflux_mixed",
    "heatflux_interior",
)

SERIES_UNITS = {
    "temp_landair": "K",
    "temp_sst": "K",
    "temp": "K",
    "heat_mixed": "1e22 J",
    "heat_interior": "1e22 J",
    "heatflux_mixed": "W m-2",
    "heatflux_interior": "W m-2",
}


@dataclass
class DoeclimState:
    """
    Caller-owned output series, preallocated to N entries.

    Storage is 0-based: the value of 1-based step n lives at index n-1.
    `last_step` is the last completed step (0 before the first step).
    """

    temp_landair: np.ndarray  # land air temperature anomaly (K)
    temp_sst: np.ndarray  # sea surface temperature anomaly (K)
    temp: np.ndarray  # global mean temperature anomaly (K)
    heat_mixed: np.ndarray  # mixed layer heat anomaly (10^22 J)
    heat_interior: np.ndarray  # interior ocean heat anomaly (10^22 J)
    heatflux_mixed: np.ndarray  # mixed layer heat uptake (W/m^2)
    heatflux_interior: np.ndarray  # interior ocean heat uptake (W/m^2)
    last_step: int = 0

    @property
    def n_steps(self) -> int:
        return int(self.temp.shape[0])

    def as_dict(self, completed_only: bool = False) -> dict[str, np.ndarray]:
        stop = self.last_step if completed_only else self.n_steps
        return {name: getattr(self, name)[:stop] for name in SERIES_NAMES}

    def copy(self) -> DoeclimState:
        kwargs = {f.name: getattr(self, f.name) for f in fields(self)}
        for name in SERIES_NAMES:
            kwargs[name] = kwargs[name].copy()
        return DoeclimState(**kwargs)


def zeros_doeclim_state(n_steps: int, dtype=np.float64) -> DoeclimState:
    """Allocate a zero-filled DoeclimState with n_steps entries per series."""
    arrays = {name: np.zeros(int(n_steps), dtype=dtype) for name in SERIES_NAMES}
    return DoeclimState(**arrays)
