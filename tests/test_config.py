import pytest

from pydoeclim import ConfigurationError, DoeclimConfig, initialize


def test_defaults_validate():
    cfg = DoeclimConfig()
    assert cfg.validate() is cfg
    assert cfg.climate_sensitivity == 3.0
    assert cfg.ocean_diffusivity == 0.55


@pytest.mark.parametrize(
    "changes",
    [
        {"delta_t": 0.0},
        {"delta_t": -1.0},
        {"climate_sensitivity": 0.0},
        {"climate_sensitivity": -2.0},
        {"ocean_diffusivity": -1.0},
        {"n_steps": 1},
        {"n_steps": 10.0},
        {"n_steps": True},
        {"delta_t": float("nan")},
        {"climate_sensitivity": float("inf")},
    ],
)
def test_invalid_scalars_raise(changes):
    cfg = DoeclimConfig(n_steps=10).with_params(**changes)
    with pytest.raises(ConfigurationError):
        cfg.validate()
    with pytest.raises(ConfigurationError):
        initialize(cfg)


def test_negative_diffusivity_rejected_before_any_step():
    cfg = DoeclimConfig(delta_t=1.0, climate_sensitivity=3.0, ocean_diffusivity=-1.0, n_steps=5)
    with pytest.raises(ConfigurationError, match="ocean_diffusivity"):
        initialize(cfg)


def test_with_params_returns_new_frozen_config():
    cfg = DoeclimConfig(n_steps=10)
    cfg2 = cfg.with_params(climate_sensitivity=4.5)
    assert cfg.climate_sensitivity == 3.0
    assert cfg2.climate_sensitivity == 4.5
    assert cfg2.n_steps == 10
    with pytest.raises(Exception):
        cfg.climate_sensitivity = 1.0  # frozen dataclass


def test_from_env(monkeypatch):
    monkeypatch.setenv("DOECLIM_DT", "0.5")
    monkeypatch.setenv("DOECLIM_T2CO", "2.5")
    monkeypatch.setenv("DOECLIM_KAPPA", "1.2")
    monkeypatch.setenv("DOECLIM_NSTEPS", "40")
    monkeypatch.setenv("DOECLIM_DIAG", "1")
    cfg = DoeclimConfig.from_env()
    assert cfg.delta_t == 0.5
    assert cfg.climate_sensitivity == 2.5
    assert cfg.ocean_diffusivity == 1.2
    assert cfg.n_steps == 40
    assert cfg.diag is True


def test_from_env_falls_back_on_garbage(monkeypatch):
    monkeypatch.setenv("DOECLIM_T2CO", "not-a-number")
    monkeypatch.setenv("DOECLIM_NSTEPS", "12.5")
    cfg = DoeclimConfig.from_env()
    assert cfg.climate_sensitivity == 3.0
    assert cfg.n_steps == 100
    assert cfg.diag is False
