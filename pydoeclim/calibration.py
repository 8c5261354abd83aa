"""
calibration.py

Bayesian calibration of DOECLIM against an observed temperature record.

Parameters theta = (climate_sensitivity, ocean_diffusivity, offset, sigma):
    offset  constant shift between model anomaly and the observation baseline (K)
    sigma   standard deviation of iid Gaussian residuals (K)

Every posterior evaluation builds a fresh EngineState: kernel and matrices
depend on the parameters, so nothing is reused across proposals. Parameter
draws that the engine rejects (ConfigurationError / NumericalInstabilityError)
get log-posterior -inf and are never retried.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import emcee
import numpy as np

from .config import DoeclimConfig
from .errors import ConfigurationError, NumericalInstabilityError
from .forcing import as_forcing
from .model import DoeclimModel

PARAM_NAMES = ("climate_sensitivity", "ocean_diffusivity", "offset", "sigma")

DEFAULT_BOUNDS = (
    (0.1, 10.0),   # climate_sensitivity (K)
    (0.1, 4.0),    # ocean_diffusivity (cm^2/s)
    (-0.3, 0.3),   # offset (K)
    (0.01, 0.5),   # sigma (K)
)


def gaussian_loglikelihood(model_temp, obs, sigma: float, offset: float = 0.0) -> float:
    """iid Gaussian log-likelihood of obs given model_temp + offset; NaN observations are skipped."""
    model_temp = np.asarray(model_temp, dtype=float)
    obs = np.asarray(obs, dtype=float)
    if model_temp.shape != obs.shape:
        raise ValueError(f"model/obs shape mismatch: {model_temp.shape} vs {obs.shape}")
    if not sigma > 0.0:
        return -math.inf
    mask = np.isfinite(obs)
    resid = obs[mask] - (model_temp[mask] + offset)
    n = resid.size
    return float(-0.5 * n * math.log(2.0 * math.pi * sigma ** 2) - 0.5 * np.sum(resid ** 2) / sigma ** 2)


class DoeclimCalibration:
    def __init__(self, forcing, obs, *, delta_t: float = 1.0, n_steps: int | None = None,
                 bounds=DEFAULT_BOUNDS):
        if n_steps is None:
            n_steps = len(obs)
        self.n_steps = int(n_steps)
        self.delta_t = float(delta_t)
        self.forcing = as_forcing(forcing, self.n_steps)
        self.obs = np.asarray(obs, dtype=float)[: self.n_steps]
        if self.obs.shape[0] != self.n_steps:
            raise ConfigurationError(
                f"obs has {self.obs.shape[0]} values but n_steps={self.n_steps}"
            )
        self.bounds = np.asarray(bounds, dtype=float)
        self.base_config = DoeclimConfig(delta_t=self.delta_t, n_steps=self.n_steps)

    def simulate(self, climate_sensitivity: float, ocean_diffusivity: float) -> np.ndarray:
        """Global mean temperature for one parameter draw (fresh initialize + full run)."""
        cfg = self.base_config.with_params(
            climate_sensitivity=float(climate_sensitivity),
            ocean_diffusivity=float(ocean_diffusivity),
        )
        return DoeclimModel(cfg).run(self.forcing).temp

    def log_prior(self, theta) -> float:
        theta = np.asarray(theta, dtype=float)
        lo, hi = self.bounds[:, 0], self.bounds[:, 1]
        if np.all((theta >= lo) & (theta <= hi)):
            return float(-np.sum(np.log(hi - lo)))
        return -math.inf

    def log_posterior(self, theta) -> float:
        lp = self.log_prior(theta)
        if not math.isfinite(lp):
            return -math.inf
        t2co, kappa, offset, sigma = (float(x) for x in theta)
        try:
            temp = self.simulate(t2co, kappa)
        except (ConfigurationError, NumericalInstabilityError):
            return -math.inf
        return lp + gaussian_loglikelihood(temp, self.obs, sigma, offset)


@dataclass
class ChainResult:
    chain: np.ndarray  # (n_iter, n_walkers, n_params)
    log_post: np.ndarray  # (n_iter, n_walkers)
    acceptance_rate: float  # mean over walkers

    def flat(self, burnin: int = 0) -> np.ndarray:
        """Samples after burn-in with walkers pooled, shape (n_kept * n_walkers, n_params)."""
        return self.chain[burnin:].reshape(-1, self.chain.shape[-1])

    def summary(self, burnin: int = 0) -> dict[str, tuple[float, float]]:
        """Posterior mean and standard deviation per parameter after burn-in."""
        kept = self.flat(burnin)
        names = PARAM_NAMES if kept.shape[1] == len(PARAM_NAMES) else tuple(
            f"p{i}" for i in range(kept.shape[1]))
        return {name: (float(np.mean(kept[:, i])), float(np.std(kept[:, i])))
                for i, name in enumerate(names)}


def sample_posterior(log_post, theta0, n_iter: int, *, init_spread, n_walkers: int | None = None,
                     seed: int | None = None) -> ChainResult:
    """
    Affine-invariant ensemble sampling (emcee) of log_post.

    log_post: callable theta -> float (may return -inf)
    init_spread: per-parameter width of the Gaussian ball the walkers start in
    n_walkers: defaults to max(2 * n_params, 8); emcee needs at least 2 * n_params
    """
    theta0 = np.asarray(theta0, dtype=float)
    spread = np.asarray(init_spread, dtype=float)
    if spread.shape != theta0.shape:
        raise ValueError(f"init_spread shape {spread.shape} != theta shape {theta0.shape}")
    if n_iter < 1:
        raise ValueError(f"n_iter must be >= 1, got {n_iter}")
    if not math.isfinite(float(log_post(theta0))):
        raise ValueError(f"log posterior is not finite at the start point {theta0.tolist()}")

    ndim = theta0.size
    if n_walkers is None:
        n_walkers = max(2 * ndim, 8)
    if n_walkers < 2 * ndim:
        raise ValueError(f"need at least {2 * ndim} walkers for {ndim} parameters, got {n_walkers}")

    rng = np.random.default_rng(seed)
    start = theta0 + spread * rng.standard_normal((n_walkers, ndim))
    # emcee draws its moves from a legacy RandomState carried on the State
    initial = emcee.State(start, random_state=np.random.RandomState(seed).get_state())

    sampler = emcee.EnsembleSampler(n_walkers, ndim, log_post)
    sampler.run_mcmc(initial, n_iter, progress=False)
    return ChainResult(
        chain=sampler.get_chain(),
        log_post=sampler.get_log_prob(),
        acceptance_rate=float(np.mean(sampler.acceptance_fraction)),
    )
