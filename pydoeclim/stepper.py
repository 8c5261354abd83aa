"""
stepper.py

Advance the DOECLIM state by one time step.

For step n (1-based, n = 1..N) with forcing Q applied equally to land and ocean:

    DQ1 = dt/(2 cal) (Q[n] + Q[n-1]) + QC1
    DQ2 = dt/(2 cas) (Q[n] + Q[n-1]) + QC2
    QC  = Hammer-Hollingsworth forcing-change terms, scaled by dt^2/12
    DPAST2 = fso sqrt(dt/taudif) * sum_{i<n} TO[i] Ker[N-n+i]     (DPAST1 = 0)
    T(n) = IB (DQ + DPAST + Adoe T(n-1))

Ocean heat uptake over (n-1, n]:

    F_mixed    = cas (TO[n] - TO[n-1])
    F_interior = cas fso / sqrt(taudif dt) * (2 TO[n] - sum_{i<n} TO[i] Ker[N-n+1+i])

and heat contents integrate the fluxes with powtoheat * dt.

Step 1 is the preindustrial reference: every output is exactly 0. Step 2 has
no diffusion memory (DPAST = 0) and starts from the zero step-1 state.
Each call reads series entries < n and forcing[:n], and writes entry n only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from . import constants as const
from .engine import EngineState
from .errors import ConfigurationError, NumericalInstabilityError
from .state import SERIES_NAMES, DoeclimState


@dataclass(frozen=True)
class StepResult:
    temp_landair: float
    temp_sst: float
    temp: float
    heat_mixed: float
    heat_interior: float
    heatflux_mixed: float
    heatflux_interior: float

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in SERIES_NAMES}


_ZERO_STEP = StepResult(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


def _check_preconditions(engine: EngineState, n: int, q: np.ndarray, state: DoeclimState) -> None:
    N = engine.n_steps
    if not 1 <= n <= N:
        raise ConfigurationError(f"step index n={n} outside [1, {N}]")
    if state.n_steps != N:
        raise ConfigurationError(
            f"state holds {state.n_steps} steps but the engine was initialized for {N}"
        )
    if state.last_step != n - 1:
        raise ConfigurationError(
            f"steps must run in order: step {n} requested after step {state.last_step}"
        )
    if q.ndim != 1 or q.shape[0] < n:
        raise ConfigurationError(
            f"forcing must be 1-D with at least {n} values, got shape {q.shape}"
        )


def forcing_terms(engine: EngineState, q_now: float, q_prev: float) -> tuple[float, float]:
    """Trapezoidal forcing integrals plus the H&H forcing-change correction (DQ1, DQ2)."""
    sc = engine.scalars
    dt = engine.delta_t
    cal, cas, bsi = const.CAL, const.CAS, const.BSI

    # Single global forcing series for both boxes
    del_ql = q_now - q_prev
    del_qo = q_now - q_prev

    qc1 = del_ql / cal * (1.0 / sc.taucfl + 1.0 / sc.taukls) - bsi * del_qo / cas / sc.taukls
    qc2 = del_qo / cas * (1.0 / sc.taucfs + bsi / sc.tauksl) - del_ql / cal / sc.tauksl
    qc1 *= dt ** 2 / 12.0
    qc2 *= dt ** 2 / 12.0

    # Full trapezoid over (n-1, n]; the extra 1/2 quoted in EK05 A.27 is not applied.
    dq1 = 0.5 * dt / cal * (q_now + q_prev)
    dq2 = 0.5 * dt / cas * (q_now + q_prev)
    return dq1 + qc1, dq2 + qc2


def ocean_memory(engine: EngineState, n: int, temp_sst: np.ndarray) -> float:
    """DPAST2 for step n: past SST convolved with Ker[N-n+i], i = 1..n-1."""
    if n <= 2:
        return 0.0
    N = engine.n_steps
    past = temp_sst[: n - 1]
    return engine.diffusion_factor * float(np.dot(past, engine.kernel[N - n : N - 1]))


def interior_heatflux(engine: EngineState, n: int, temp_sst: np.ndarray, sst_now: float) -> float:
    """Interior ocean heat uptake; the history uses Ker[N-n+1+i], one lag later than ocean_memory."""
    N = engine.n_steps
    sc = engine.scalars
    conv = float(np.dot(temp_sst[: n - 1], engine.kernel[N - n + 1 : N]))
    return const.CAS * const.FSO / math.sqrt(sc.taudif * engine.delta_t) * (2.0 * sst_now - conv)


def step(engine: EngineState, n: int, forcing, state: DoeclimState) -> StepResult:
    """
    Compute step n (1-based) and store it at index n-1 of every series in state.

    Raises ConfigurationError on out-of-order or out-of-range steps and short
    forcing, NumericalInstabilityError if any output is not finite.
    """
    n = int(n)
    q = np.asarray(forcing, dtype=float)
    _check_preconditions(engine, n, q, state)

    if n == 1:
        result = _ZERO_STEP
    else:
        sc = engine.scalars
        dt = engine.delta_t
        k = n - 1  # storage index of step n

        dq1, dq2 = forcing_terms(engine, float(q[k]), float(q[k - 1]))
        dpast1 = 0.0
        dpast2 = ocean_memory(engine, n, state.temp_sst)

        t_prev = np.array([state.temp_landair[k - 1], state.temp_sst[k - 1]])
        dteaux = engine.adoe @ t_prev
        rhs = np.array([dq1 + dpast1 + dteaux[0], dq2 + dpast2 + dteaux[1]])
        tl, to = engine.ib @ rhs
        tl, to = float(tl), float(to)

        temp = const.FLND * tl + (1.0 - const.FLND) * const.BSI * to

        flux_mixed = const.CAS * (to - state.temp_sst[k - 1])
        flux_interior = interior_heatflux(engine, n, state.temp_sst, to)

        heat_mixed = state.heat_mixed[k - 1] + flux_mixed * (sc.powtoheat * dt)
        heat_interior = state.heat_interior[k - 1] + flux_interior * (const.FSO * sc.powtoheat * dt)

        result = StepResult(
            temp_landair=tl,
            temp_sst=to,
            temp=float(temp),
            heat_mixed=float(heat_mixed),
            heat_interior=float(heat_interior),
            heatflux_mixed=float(flux_mixed),
            heatflux_interior=float(flux_interior),
        )

    values = result.as_dict()
    bad = [name for name, v in values.items() if not math.isfinite(v)]
    if bad:
        raise NumericalInstabilityError(f"non-finite output at step {n}: {', '.join(bad)}")

    for name, v in values.items():
        getattr(state, name)[n - 1] = v
    state.last_step = n
    return result
