"""
kernel.py

Discrete response kernel of the 1-D diffusion ocean.

The interior-ocean heat flux at step n is a convolution of the past sea
surface temperatures with a kernel derived from the heat equation on a
column of depth ZBOT with a reflecting bottom. The closed form is an
error-function series truncated after the third image term:

    Ker = KT0 + (KTA1 + KTB1) + (KTA2 + KTB2) + (KTA3 + KTB3)

with r = taubot / delta_t. Kernel entries are addressed by their lag from the
END of the run horizon, m = N - i for the 1-based entry Ker[i]:

    m = 0      boundary entry Ker[N]:
        KT0  = 4 - 2*sqrt(2)
        KTAk = (-1)^(k+1) * (-8 exp(-k^2 r) + 4 sqrt(2) exp(-k^2 r / 2))
        KTBk = (-1)^(k+1) * 4k sqrt(pi r) * (1 + erf(k sqrt(r/2)) - 2 erf(k sqrt(r)))

    m >= 1     interior entries Ker[1..N-1], with a = m+1, b = m+2, c = m:
        KT0  = 4 sqrt(a) - 2 sqrt(b) - 2 sqrt(c)
        KTAk = (-1)^(k+1) * (-8 sqrt(a) e^{-k^2 r/a} + 4 sqrt(b) e^{-k^2 r/b} + 4 sqrt(c) e^{-k^2 r/c})
        KTBk = (-1)^(k+1) * 4k sqrt(pi r) * (erf(k sqrt(r/c)) + erf(k sqrt(r/b)) - 2 erf(k sqrt(r/a)))

The kernel only depends on delta_t and taubot, never on forcing.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
from scipy.special import erf

from .errors import NumericalInstabilityError

_SQRT2 = np.sqrt(2.0)


class KernelTerms(NamedTuple):
    """Zeroth to third order contributions for one or more lags."""

    kt0: np.ndarray
    kta1: np.ndarray
    ktb1: np.ndarray
    kta2: np.ndarray
    ktb2: np.ndarray
    kta3: np.ndarray
    ktb3: np.ndarray

    def total(self) -> np.ndarray:
        return (self.kt0 + self.kta1 + self.ktb1 + self.kta2 + self.ktb2
                + self.kta3 + self.ktb3)


def _boundary_terms(r: float) -> KernelTerms:
    s = np.sqrt(np.pi * r)
    return KernelTerms(
        kt0=np.asarray(4.0 - 2.0 * _SQRT2),
        kta1=np.asarray(-8.0 * np.exp(-r) + 4.0 * _SQRT2 * np.exp(-0.5 * r)),
        ktb1=np.asarray(4.0 * s * (1.0 + erf(np.sqrt(0.5 * r)) - 2.0 * erf(np.sqrt(r)))),
        kta2=np.asarray(8.0 * np.exp(-4.0 * r) - 4.0 * _SQRT2 * np.exp(-2.0 * r)),
        ktb2=np.asarray(-8.0 * s * (1.0 + erf(np.sqrt(2.0 * r)) - 2.0 * erf(2.0 * np.sqrt(r)))),
        kta3=np.asarray(-8.0 * np.exp(-9.0 * r) + 4.0 * _SQRT2 * np.exp(-4.5 * r)),
        ktb3=np.asarray(12.0 * s * (1.0 + erf(np.sqrt(4.5 * r)) - 2.0 * erf(3.0 * np.sqrt(r)))),
    )


def _interior_terms(m: np.ndarray, r: float) -> KernelTerms:
    a = m + 1.0
    b = m + 2.0
    c = m.astype(float)
    sa, sb, sc = np.sqrt(a), np.sqrt(b), np.sqrt(c)
    s = np.sqrt(np.pi * r)

    def _a_term(k2: float) -> np.ndarray:
        return -8.0 * sa * np.exp(-k2 * r / a) + 4.0 * sb * np.exp(-k2 * r / b) + 4.0 * sc * np.exp(-k2 * r / c)

    def _b_term(k: float) -> np.ndarray:
        return (erf(k * np.sqrt(r / c)) + erf(k * np.sqrt(r / b))
                - 2.0 * erf(k * np.sqrt(r / a)))

    return KernelTerms(
        kt0=4.0 * sa - 2.0 * sb - 2.0 * sc,
        kta1=_a_term(1.0),
        ktb1=4.0 * s * _b_term(1.0),
        kta2=-_a_term(4.0),
        ktb2=-8.0 * s * _b_term(2.0),
        kta3=_a_term(9.0),
        ktb3=12.0 * s * _b_term(3.0),
    )


def kernel_terms(lag_from_end, taubot: float, delta_t: float) -> KernelTerms:
    """
    Order terms for the kernel entry at lag_from_end (scalar or integer array).
    lag_from_end == 0 selects the boundary closed form, >= 1 the interior one.
    """
    m = np.asarray(lag_from_end)
    if m.dtype.kind not in "iu":
        raise TypeError(f"lag_from_end must be integer, got dtype {m.dtype}")
    if np.any(m < 0):
        raise ValueError("lag_from_end must be >= 0")
    r = float(taubot) / float(delta_t)
    if m.ndim == 0:
        if int(m) == 0:
            return _boundary_terms(r)
        return _interior_terms(m.reshape(1), r)
    # Mixed array: evaluate both branches and select per lag
    interior = _interior_terms(np.maximum(m, 1), r)
    boundary = _boundary_terms(r)
    at_end = (m == 0)
    return KernelTerms(*(np.where(at_end, bt, it) for bt, it in zip(boundary, interior)))


def kernel_value(lag_from_end, taubot: float, delta_t: float) -> float:
    """Kernel entry Ker[N - lag_from_end] (1-based), i.e. lag_from_end steps before the horizon end."""
    return float(np.sum(kernel_terms(lag_from_end, taubot, delta_t).total()))


def build_kernel(n_steps: int, taubot: float, delta_t: float) -> np.ndarray:
    """
    Full kernel as a 0-based array `ker` of length N with ker[k] == Ker[k+1].
    Entry k sits at lag_from_end = N - 1 - k, so ker[-1] is the boundary value.
    """
    lags = np.arange(n_steps - 1, -1, -1, dtype=np.int64)
    ker = np.empty(n_steps, dtype=float)
    ker[:-1] = _interior_terms(lags[:-1], float(taubot) / float(delta_t)).total()
    ker[-1] = kernel_value(0, taubot, delta_t)
    if not np.all(np.isfinite(ker)):
        bad = int(np.flatnonzero(~np.isfinite(ker))[0])
        raise NumericalInstabilityError(
            f"diffusion kernel is not finite at Ker[{bad + 1}] (taubot={taubot!r}, delta_t={delta_t!r})"
        )
    return ker
