import numpy as np
import pytest

from pydoeclim import (
    ConfigurationError,
    DoeclimConfig,
    DoeclimModel,
    initialize,
    run_doeclim,
    step_forcing,
    zeros_doeclim_state,
)
from pydoeclim.diagnostics import check_finite, equilibrium_temperature, summarize
from pydoeclim.errors import NumericalInstabilityError


def test_monotone_warming_below_equilibrium():
    cfg = DoeclimConfig(delta_t=1.0, climate_sensitivity=3.0, ocean_diffusivity=3.5, n_steps=50)
    forcing = step_forcing(cfg.n_steps, 1.85)
    state = DoeclimModel(cfg).run(forcing)
    t_eq = equilibrium_temperature(1.85, cfg.climate_sensitivity)
    assert t_eq == pytest.approx(1.5)
    assert np.all(np.diff(state.temp) >= -1e-12)
    assert np.all(state.temp <= t_eq + 1e-12)
    assert state.temp[-1] > 0.2 * t_eq
    check_finite(state)


def test_lower_diffusivity_warms_faster():
    forcing = step_forcing(60, 3.7)
    slow_ocean = run_doeclim(forcing, climate_sensitivity=3.0, ocean_diffusivity=0.2)
    fast_ocean = run_doeclim(forcing, climate_sensitivity=3.0, ocean_diffusivity=3.0)
    assert slow_ocean.temp[-1] > fast_ocean.temp[-1]
    assert fast_ocean.heat_interior[-1] > slow_ocean.heat_interior[-1]


def test_run_is_repeatable_and_reinitialize_rebuilds():
    cfg = DoeclimConfig(delta_t=1.0, climate_sensitivity=3.0, ocean_diffusivity=1.0, n_steps=30)
    model = DoeclimModel(cfg)
    forcing = np.linspace(0.0, 2.5, 30)
    a = model.run(forcing)
    b = model.run(forcing)
    np.testing.assert_array_equal(a.temp, b.temp)

    old_engine = model.engine
    new_engine = model.reinitialize(cfg.with_params(climate_sensitivity=4.5))
    assert new_engine is not old_engine
    assert model.config.climate_sensitivity == 4.5
    c = model.run(forcing)
    assert c.temp[-1] > a.temp[-1]


def test_engine_must_match_config():
    cfg = DoeclimConfig(n_steps=10)
    eng = initialize(cfg.with_params(climate_sensitivity=2.0))
    with pytest.raises(ValueError):
        DoeclimModel(cfg, engine=eng)


def test_forcing_shorter_than_horizon_rejected():
    cfg = DoeclimConfig(n_steps=10)
    with pytest.raises(ConfigurationError):
        DoeclimModel(cfg).run(np.zeros(9))
    with pytest.raises(ConfigurationError):
        DoeclimModel(cfg).run(np.full(10, np.inf))


def test_longer_forcing_is_truncated():
    cfg = DoeclimConfig(n_steps=10)
    state = DoeclimModel(cfg).run(np.ones(25))
    assert state.n_steps == 10
    assert state.last_step == 10


def test_resume_from_partial_state():
    cfg = DoeclimConfig(delta_t=1.0, climate_sensitivity=3.0, ocean_diffusivity=1.0, n_steps=20)
    model = DoeclimModel(cfg)
    forcing = step_forcing(20, 3.7)
    full = model.run(forcing)

    partial = zeros_doeclim_state(20)
    it = model.iter_steps(forcing, partial)
    for _ in range(8):
        next(it)
    assert partial.last_step == 8
    resumed = model.run(forcing, state=partial)
    np.testing.assert_array_equal(resumed.temp, full.temp)


def test_summary_and_diag_output(capsys):
    cfg = DoeclimConfig(n_steps=15, diag=True)
    state = DoeclimModel(cfg).run(step_forcing(15, 3.7))
    out = capsys.readouterr().out
    assert "[Doeclim] init:" in out
    assert "[Doeclim] run: steps=15" in out
    s = summarize(state)
    assert s["steps"] == 15
    assert s["temp_final"] == pytest.approx(state.temp[-1])
    assert s["heat_total_final"] == pytest.approx(state.heat_mixed[-1] + state.heat_interior[-1])
    assert summarize(zeros_doeclim_state(4)) == {"steps": 0}


def test_check_finite_reports_first_bad_step():
    state = zeros_doeclim_state(5)
    state.last_step = 5
    state.heat_interior[3] = np.nan
    with pytest.raises(NumericalInstabilityError, match="heat_interior is not finite at step 4"):
        check_finite(state)


def test_create_default_reads_env(monkeypatch):
    monkeypatch.setenv("DOECLIM_NSTEPS", "12")
    monkeypatch.setenv("DOECLIM_KAPPA", "2.0")
    model = DoeclimModel.create_default()
    assert model.config.n_steps == 12
    assert model.engine.kernel.shape == (12,)
    assert model.config.ocean_diffusivity == 2.0
