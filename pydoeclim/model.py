"""
DoeclimModel: façade that owns one EngineState and drives the step sequence.

The engine itself is two pure operations (engine.initialize, stepper.step);
this class only adds the time loop and the per-run output arrays that an
external scheduler would otherwise provide.
"""

from __future__ import annotations

from typing import Iterator

from .config import DoeclimConfig
from .diagnostics import summarize
from .engine import EngineState, initialize
from .forcing import as_forcing
from .state import DoeclimState, zeros_doeclim_state
from .stepper import StepResult, step


class DoeclimModel:
    def __init__(self, config: DoeclimConfig, *, engine: EngineState | None = None) -> None:
        self.config = config
        self.engine = engine if engine is not None else initialize(config)
        if self.engine.config != config:
            raise ValueError("engine was initialized for a different configuration")

    @classmethod
    def create_default(cls) -> DoeclimModel:
        return cls(DoeclimConfig.from_env())

    def reinitialize(self, config: DoeclimConfig) -> EngineState:
        """Rebuild kernel and matrices from scratch for a new parameter set."""
        self.engine = initialize(config)
        self.config = config
        return self.engine

    def iter_steps(self, forcing, state: DoeclimState | None = None) -> Iterator[tuple[int, StepResult]]:
        """Yield (n, result) for n = 1..N; state is filled in place."""
        q = as_forcing(forcing, self.config.n_steps)
        if state is None:
            state = zeros_doeclim_state(self.config.n_steps)
        for n in range(state.last_step + 1, self.config.n_steps + 1):
            yield n, step(self.engine, n, q, state)

    def run(self, forcing, state: DoeclimState | None = None) -> DoeclimState:
        """Run steps 1..N (or resume after state.last_step) and return the filled state."""
        if state is None:
            state = zeros_doeclim_state(self.config.n_steps)
        for _ in self.iter_steps(forcing, state):
            pass
        if self.config.diag:
            s = summarize(state)
            print(
                f"[Doeclim] run: steps={s['steps']} temp_final={s['temp_final']:+.3f} K "
                f"| heat_mixed={s['heat_mixed_final']:.3f} heat_interior={s['heat_interior_final']:.3f} (1e22 J)"
            )
        return state


def run_doeclim(forcing, *, delta_t: float = 1.0, climate_sensitivity: float = 3.0,
                ocean_diffusivity: float = 0.55, n_steps: int | None = None) -> DoeclimState:
    """One-call helper: initialize for the given parameters and run the whole forcing series."""
    if n_steps is None:
        n_steps = len(forcing)
    cfg = DoeclimConfig(
        delta_t=delta_t,
        climate_sensitivity=climate_sensitivity,
        ocean_diffusivity=ocean_diffusivity,
        n_steps=n_steps,
    )
    return DoeclimModel(cfg).run(forcing)
