"""
pytest configuration for pydoeclim

Goals:
- keep tests fast and deterministic
- isolate tests from DOECLIM_* variables set in the calling shell
- avoid display requirements for plotting tests
"""

import os
import sys

import numpy as np
import pytest

# Ensure project root on sys.path for 'pydoeclim' and 'scripts' imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _doeclim_env(monkeypatch):
    for name in ("DOECLIM_DT", "DOECLIM_T2CO", "DOECLIM_KAPPA", "DOECLIM_NSTEPS", "DOECLIM_DIAG"):
        monkeypatch.delenv(name, raising=False)
    # Force non-interactive backend for matplotlib (avoid display requirements)
    monkeypatch.setenv("MPLBACKEND", os.getenv("MPLBACKEND", "Agg"))
    yield


@pytest.fixture
def half_co2_config():
    from pydoeclim import DoeclimConfig

    return DoeclimConfig(delta_t=1.0, climate_sensitivity=3.0, ocean_diffusivity=3.5, n_steps=5)


@pytest.fixture
def half_co2_forcing():
    return np.array([0.0, 1.85, 1.85, 1.85, 1.85])
