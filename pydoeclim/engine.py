"""
engine.py

One-time setup of the DOECLIM difference system for a parameter set.

The two-box (land air TL, sea surface TO) temperature anomalies obey

    B * T(n) = Q(n) + DPAST(n) + A * T(n-1)

where B (Baux, inverted once to IB) and A (Adoe) are 2x2 matrices built from
the characteristic time scales below, and DPAST carries the diffusion ocean
memory (see kernel.py / stepper.py).

Time scales (years):
    taucfl  land climate feedback
    taucfs  ocean climate feedback
    taukls  land -> sea heat exchange
    tauksl  sea -> land heat exchange
    taudif  mixed layer / interior diffusion
    taubot  interior (bottom) warming

Everything here is a pure function of DoeclimConfig. Any change of a config
scalar requires a new initialize() call; EngineState is never patched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from . import constants as const
from .config import DoeclimConfig
from .errors import ConfigurationError, NumericalInstabilityError
from .kernel import build_kernel


@dataclass(frozen=True)
class DerivedScalars:
    taucfl: float
    taukls: float
    taucfs: float
    tauksl: float
    taudif: float
    taubot: float
    powtoheat: float  # W/m^2 over the ocean for one year -> 10^22 J

    def as_dict(self) -> dict:
        return {
            "taucfl": self.taucfl,
            "taukls": self.taukls,
            "taucfs": self.taucfs,
            "tauksl": self.tauksl,
            "taudif": self.taudif,
            "taubot": self.taubot,
            "powtoheat": self.powtoheat,
        }


@dataclass(frozen=True)
class EngineState:
    """Kernel, matrices and derived scalars for one parameter set."""

    config: DoeclimConfig
    scalars: DerivedScalars
    kernel: np.ndarray  # ker[k] == Ker[k+1], length N
    cdoe: np.ndarray    # Hammer-Hollingsworth correction (2x2)
    baux: np.ndarray    # implicit matrix B (2x2)
    ib: np.ndarray      # inverse of B (2x2)
    adoe: np.ndarray    # explicit matrix A (2x2)

    @property
    def n_steps(self) -> int:
        return self.config.n_steps

    @property
    def delta_t(self) -> float:
        return self.config.delta_t

    @property
    def diffusion_factor(self) -> float:
        """fso * sqrt(dt / taudif): weight of the ocean memory term in the SST equation."""
        return const.FSO * math.sqrt(self.config.delta_t / self.scalars.taudif)


def _positive_timescale(name: str, value: float) -> float:
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigurationError(
            f"time scale {name} must be positive and finite, got {value!r}"
        )
    return value


def _safe_div(num: float, den: float, what: str) -> float:
    if den == 0.0:
        raise ConfigurationError(f"degenerate parameters: {what} has a zero denominator")
    return num / den


def derive_scalars(config: DoeclimConfig) -> DerivedScalars:
    """Feedback, exchange and diffusion time scales for one configuration."""
    t2co = float(config.climate_sensitivity)
    flnd, bsi, rlam, ak, bk = const.FLND, const.BSI, const.RLAM, const.AK, const.BK

    ocean_area = (1.0 - flnd) * const.EARTH_AREA
    powtoheat = ocean_area * const.SECS_PER_YEAR / const.HEAT_UNIT

    cnum = rlam * flnd + bsi * (1.0 - flnd)
    cden = rlam * flnd - ak * (rlam - bsi)
    if cden == 0.0:
        raise ConfigurationError("degenerate land/sea coefficients: cden == 0")

    # Vertical diffusivity in m^2/yr
    keff = const.KCON * float(config.ocean_diffusivity)

    q_ratio = const.Q2CO / t2co
    # Climate feedback strength over land / ocean
    cfl = flnd * cnum / cden * q_ratio - bk * (rlam - bsi) / cden
    cfs = ((rlam * flnd - ak / (1.0 - flnd) * (rlam - bsi)) * cnum / cden * q_ratio
           + rlam * flnd / (1.0 - flnd) * bk * (rlam - bsi) / cden)
    # Land-sea heat exchange coefficient
    kls = bk * rlam * flnd / cden - ak * flnd * cnum / cden * q_ratio

    taubot = _safe_div(const.ZBOT ** 2, keff, "taubot (ocean_diffusivity)")
    taudif = _safe_div(const.CAS ** 2 / const.CSW ** 2 * math.pi, keff, "taudif (ocean_diffusivity)")
    taucfs = _safe_div(const.CAS, cfs, "taucfs")
    taucfl = _safe_div(const.CAL, cfl, "taucfl")
    tauksl = _safe_div((1.0 - flnd) * const.CAS, kls, "tauksl")
    taukls = _safe_div(flnd * const.CAL, kls, "taukls")

    return DerivedScalars(
        taucfl=_positive_timescale("taucfl", taucfl),
        taukls=_positive_timescale("taukls", taukls),
        taucfs=_positive_timescale("taucfs", taucfs),
        tauksl=_positive_timescale("tauksl", tauksl),
        taudif=_positive_timescale("taudif", taudif),
        taubot=_positive_timescale("taubot", taubot),
        powtoheat=powtoheat,
    )


def hammer_hollingsworth(sc: DerivedScalars, delta_t: float) -> np.ndarray:
    """
    Hammer-Hollingsworth correction Cdoe. Only the trailing land-sea exchange
    product taukls*tauksl of each entry carries the dt^2/12 factor.
    """
    bsi = const.BSI
    hh = delta_t ** 2 / 12.0
    exchange = 1.0 / sc.taukls / sc.tauksl
    c = np.empty((2, 2), dtype=float)
    c[0, 0] = (1.0 / sc.taucfl ** 2 + 1.0 / sc.taukls ** 2 + 2.0 / sc.taucfl / sc.taukls
               + bsi * exchange * hh)
    c[0, 1] = (-bsi / sc.taukls ** 2 - bsi / sc.taucfl / sc.taukls - bsi / sc.taucfs / sc.taukls
               - bsi ** 2 * exchange * hh)
    c[1, 0] = (-bsi / sc.tauksl ** 2 - 1.0 / sc.taucfs / sc.tauksl - 1.0 / sc.taucfl / sc.tauksl
               - exchange * hh)
    c[1, 1] = (1.0 / sc.taucfs ** 2 + bsi ** 2 / sc.tauksl ** 2 + 2.0 * bsi / sc.taucfs / sc.tauksl
               + bsi * exchange * hh)
    return c


def implicit_matrix(sc: DerivedScalars, delta_t: float, cdoe: np.ndarray) -> np.ndarray:
    """Baux, the left-hand side of B*T(n) = Q + A*T(n-1)."""
    bsi = const.BSI
    h = 0.5 * delta_t
    b = np.empty((2, 2), dtype=float)
    b[0, 0] = 1.0 + h / sc.taucfl + h / sc.taukls + cdoe[0, 0]
    b[0, 1] = -h / sc.taukls * bsi + cdoe[0, 1]
    b[1, 0] = -h / sc.tauksl + cdoe[1, 0]
    b[1, 1] = (1.0 + h / sc.taucfs + h / sc.tauksl * bsi
               + 2.0 * const.FSO * math.sqrt(delta_t / sc.taudif) + cdoe[1, 1])
    return b


def explicit_matrix(sc: DerivedScalars, delta_t: float, cdoe: np.ndarray, ker_end: float) -> np.ndarray:
    """Adoe, acting on T(n-1); ker_end is the boundary kernel entry Ker[N]."""
    bsi = const.BSI
    h = 0.5 * delta_t
    a = np.empty((2, 2), dtype=float)
    a[0, 0] = 1.0 - h / sc.taucfl - h / sc.taukls + cdoe[0, 0]
    a[0, 1] = h / sc.taukls * bsi + cdoe[0, 1]
    a[1, 0] = h / sc.tauksl + cdoe[1, 0]
    a[1, 1] = (1.0 - h / sc.taucfs - h / sc.tauksl * bsi
               + ker_end * const.FSO * math.sqrt(delta_t / sc.taudif) + cdoe[1, 1])
    return a


def invert_2x2(m: np.ndarray, rtol: float = 1e-12) -> np.ndarray:
    """Closed-form inverse; a determinant below rtol * |m|^2 counts as singular."""
    det = m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]
    scale = float(np.max(np.abs(m))) ** 2
    if not math.isfinite(det) or abs(det) <= rtol * scale:
        raise NumericalInstabilityError(f"implicit matrix is singular (det={det!r})")
    inv = np.array([[m[1, 1], -m[0, 1]],
                    [-m[1, 0], m[0, 0]]], dtype=float)
    return inv / det


def initialize(config: DoeclimConfig) -> EngineState:
    """Derive time scales, kernel and the implicit/explicit matrices for config."""
    config.validate()
    sc = derive_scalars(config)
    dt = float(config.delta_t)

    ker = build_kernel(config.n_steps, sc.taubot, dt)
    cdoe = hammer_hollingsworth(sc, dt)
    baux = implicit_matrix(sc, dt, cdoe)
    ib = invert_2x2(baux)
    adoe = explicit_matrix(sc, dt, cdoe, float(ker[-1]))

    for name, mat in (("Cdoe", cdoe), ("Adoe", adoe), ("IB", ib)):
        if not np.all(np.isfinite(mat)):
            raise NumericalInstabilityError(f"{name} has non-finite entries: {mat.tolist()}")

    if config.diag:
        print(
            f"[Doeclim] init: N={config.n_steps} dt={dt:g} t2co={config.climate_sensitivity:g} "
            f"kappa={config.ocean_diffusivity:g} | taucfl={sc.taucfl:.3f} taukls={sc.taukls:.3f} "
            f"taucfs={sc.taucfs:.3f} tauksl={sc.tauksl:.3f} taudif={sc.taudif:.3f} taubot={sc.taubot:.1f}"
        )

    return EngineState(config=config, scalars=sc, kernel=ker, cdoe=cdoe, baux=baux, ib=ib, adoe=adoe)
