from __future__ import annotations

import os

import numpy as np

try:
    import matplotlib.pyplot as plt  # type: ignore
except Exception:
    plt = None

from .state import DoeclimState


def _require_matplotlib():
    if plt is None:
        raise RuntimeError("matplotlib is required for plotting. Please install 'matplotlib'.")


def plot_doeclim_output(state: DoeclimState, path: str | None = None, time=None,
                        forcing=None, title: str = "DOECLIM"):
    """
    Two or three stacked panels: temperatures (land, SST, global), ocean heat
    content (mixed layer, interior) and, if given, the forcing series.
    Only completed steps are drawn. Saves to `path` when provided and returns
    the figure.
    """
    _require_matplotlib()
    n = state.last_step
    t = np.arange(1, n + 1) if time is None else np.asarray(time)[:n]
    nrows = 3 if forcing is not None else 2
    fig, axes = plt.subplots(nrows, 1, figsize=(8, 2.8 * nrows), sharex=True)

    ax = axes[0]
    ax.plot(t, state.temp_landair[:n], label="land air", color="tab:brown")
    ax.plot(t, state.temp_sst[:n], label="SST", color="tab:blue")
    ax.plot(t, state.temp[:n], label="global", color="k", lw=2)
    ax.set_ylabel("ΔT (K)")
    ax.legend(loc="upper left", fontsize=8)
    ax.set_title(title)

    ax = axes[1]
    ax.plot(t, state.heat_mixed[:n], label="mixed layer", color="tab:cyan")
    ax.plot(t, state.heat_interior[:n], label="interior", color="tab:purple")
    ax.set_ylabel("heat (1e22 J)")
    ax.legend(loc="upper left", fontsize=8)

    if forcing is not None:
        ax = axes[2]
        ax.plot(t, np.asarray(forcing, dtype=float)[:n], color="tab:red")
        ax.set_ylabel("forcing (W/m²)")

    axes[-1].set_xlabel("time")
    fig.tight_layout()
    if path is not None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fig.savefig(path, dpi=120)
    return fig
