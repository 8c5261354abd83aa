"""
pydoeclim: DOECLIM (Diffusion Ocean Energy balance CLIMate model).

Two-box (land air / sea surface) energy balance model coupled to a 1-D
diffusion ocean, integrated with an implicit-explicit scheme plus the
Hammer-Hollingsworth correction.

Typical use:

    from pydoeclim import DoeclimConfig, DoeclimModel, step_forcing

    cfg = DoeclimConfig(delta_t=1.0, climate_sensitivity=3.0, ocean_diffusivity=0.55, n_steps=100)
    state = DoeclimModel(cfg).run(step_forcing(cfg.n_steps, 3.7))
    state.temp[-1]
"""

from .config import DoeclimConfig
from .engine import DerivedScalars, EngineState, initialize
from .errors import ConfigurationError, NumericalInstabilityError
from .forcing import as_forcing, ramp_forcing, step_forcing
from .kernel import build_kernel, kernel_value
from .model import DoeclimModel, run_doeclim
from .state import DoeclimState, zeros_doeclim_state
from .stepper import StepResult, step

__all__ = [
    "DoeclimConfig",
    "DerivedScalars",
    "EngineState",
    "initialize",
    "ConfigurationError",
    "NumericalInstabilityError",
    "as_forcing",
    "ramp_forcing",
    "step_forcing",
    "build_kernel",
    "kernel_value",
    "DoeclimModel",
    "run_doeclim",
    "DoeclimState",
    "zeros_doeclim_state",
    "StepResult",
    "step",
]
