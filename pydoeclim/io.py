# pydoeclim/io.py

"""
NetCDF export/import of DOECLIM output series.

File layout (format v1):
  dimension  time (N)
  variables  time (f8, model years from start), forcing (f8, W m-2),
             temp_landair, temp_sst, temp, heat_mixed, heat_interior,
             heatflux_mixed, heatflux_interior (f8, with `units`)
  global attributes: delta_t, climate_sensitivity, ocean_diffusivity, n_steps
"""

from __future__ import annotations

import os

import numpy as np

from .config import DoeclimConfig
from .state import SERIES_NAMES, SERIES_UNITS, DoeclimState

try:
    from netCDF4 import Dataset  # type: ignore
except Exception:  # pragma: no cover
    Dataset = None  # Will raise at call time with a helpful message


def _require_netcdf4():
    if Dataset is None:
        raise RuntimeError("netCDF4 is required for NetCDF output. Please install 'netCDF4'.")


def save_output_netcdf(path, state: DoeclimState, config: DoeclimConfig, forcing=None,
                       start_year: float = 0.0) -> None:
    """Write the output series of one run (all N entries) to `path`."""
    _require_netcdf4()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    n = state.n_steps
    with Dataset(path, "w") as ds:
        ds.createDimension("time", n)
        vt = ds.createVariable("time", "f8", ("time",))
        vt[:] = float(start_year) + config.delta_t * np.arange(n, dtype=float)
        vt.setncattr("units", "years")

        if forcing is not None:
            vq = ds.createVariable("forcing", "f8", ("time",))
            vq[:] = np.asarray(forcing, dtype=float)[:n]
            vq.setncattr("units", "W m-2")

        for name in SERIES_NAMES:
            var = ds.createVariable(name, "f8", ("time",))
            var[:] = np.asarray(getattr(state, name), dtype=float)
            var.setncattr("units", SERIES_UNITS[name])

        ds.setncattr("title", "DOECLIM output")
        ds.setncattr("creator", "pydoeclim")
        ds.setncattr("format", "v1")
        ds.setncattr("delta_t", float(config.delta_t))
        ds.setncattr("climate_sensitivity", float(config.climate_sensitivity))
        ds.setncattr("ocean_diffusivity", float(config.ocean_diffusivity))
        ds.setncattr("n_steps", int(config.n_steps))
        ds.setncattr("last_step", int(state.last_step))


def load_output_netcdf(path) -> dict:
    """
    Load a file written by save_output_netcdf into a dict of arrays plus an
    "attrs" dict. A missing forcing variable is returned as None.
    """
    _require_netcdf4()
    out = {}
    with Dataset(path, "r") as ds:
        def rvar(name):
            if name not in ds.variables:
                return None
            return np.asarray(ds.variables[name][:], dtype=float)

        out["time"] = rvar("time")
        out["forcing"] = rvar("forcing")
        for name in SERIES_NAMES:
            out[name] = rvar(name)
        out["attrs"] = {k: ds.getncattr(k) for k in ds.ncattrs()}
    return out


def state_from_netcdf(path) -> tuple[DoeclimState, DoeclimConfig]:
    """Rebuild a DoeclimState and its DoeclimConfig from a saved file."""
    data = load_output_netcdf(path)
    attrs = data["attrs"]
    cfg = DoeclimConfig(
        delta_t=float(attrs["delta_t"]),
        climate_sensitivity=float(attrs["climate_sensitivity"]),
        ocean_diffusivity=float(attrs["ocean_diffusivity"]),
        n_steps=int(attrs["n_steps"]),
    )
    state = DoeclimState(
        **{name: data[name].copy() for name in SERIES_NAMES},
        last_step=int(attrs.get("last_step", cfg.n_steps)),
    )
    return state, cfg
