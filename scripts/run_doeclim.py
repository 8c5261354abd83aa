#!/usr/bin/env python3
"""
Run DOECLIM for one parameter set.

Usage:
  python -m scripts.run_doeclim                                   # env-driven config, step forcing
  python -m scripts.run_doeclim --t2co 3 --kappa 3.5 --nsteps 200 --scenario ramp --rate 0.04
  python -m scripts.run_doeclim --forcing-file data/forcing.txt --out output/doeclim.nc --plot

Config defaults come from DOECLIM_* environment variables (see pydoeclim/config.py);
command-line options override them.

Outputs:
  - NetCDF with all output series (--out)
  - PNG overview next to it (--plot)
"""

import argparse
import os
import sys

import numpy as np

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydoeclim import DoeclimConfig, DoeclimModel, ramp_forcing, step_forcing
from pydoeclim.diagnostics import equilibrium_temperature, summarize
from pydoeclim.errors import ConfigurationError, NumericalInstabilityError


def build_forcing(args, n_steps: int) -> np.ndarray:
    if args.forcing_file:
        return np.loadtxt(args.forcing_file, dtype=float, ndmin=1)
    if args.scenario == "ramp":
        return ramp_forcing(n_steps, args.rate, cap=args.amplitude)
    return step_forcing(n_steps, args.amplitude)


def main(argv=None):
    env_cfg = DoeclimConfig.from_env()
    parser = argparse.ArgumentParser(description="Run the DOECLIM energy balance / diffusion ocean model.")
    parser.add_argument("--t2co", type=float, default=env_cfg.climate_sensitivity, help="Climate sensitivity (K per 2xCO2)")
    parser.add_argument("--kappa", type=float, default=env_cfg.ocean_diffusivity, help="Ocean vertical diffusivity (cm^2/s)")
    parser.add_argument("--dt", type=float, default=env_cfg.delta_t, help="Time step (years)")
    parser.add_argument("--nsteps", type=int, default=None, help="Number of steps (default: forcing length or DOECLIM_NSTEPS)")
    parser.add_argument("--scenario", choices=("step", "ramp"), default="step")
    parser.add_argument("--amplitude", type=float, default=3.7, help="Step amplitude / ramp cap (W/m^2)")
    parser.add_argument("--rate", type=float, default=0.04, help="Ramp rate (W/m^2 per step)")
    parser.add_argument("--forcing-file", type=str, default=None, help="Text file with one forcing value per line")
    parser.add_argument("--out", type=str, default=None, help="NetCDF output path")
    parser.add_argument("--plot", action="store_true", help="Write a PNG overview (needs --out or writes doeclim.png)")
    parser.add_argument("--diag", action="store_true", default=env_cfg.diag)
    args = parser.parse_args(argv)

    n_steps = args.nsteps
    if n_steps is None:
        n_steps = env_cfg.n_steps
        if args.forcing_file:
            n_steps = int(np.loadtxt(args.forcing_file, dtype=float, ndmin=1).shape[0])
    forcing = build_forcing(args, n_steps)

    cfg = DoeclimConfig(
        delta_t=args.dt,
        climate_sensitivity=args.t2co,
        ocean_diffusivity=args.kappa,
        n_steps=n_steps,
        diag=args.diag,
    )
    try:
        state = DoeclimModel(cfg).run(forcing)
    except (ConfigurationError, NumericalInstabilityError) as e:
        raise SystemExit(f"[Doeclim] run failed: {e}")

    s = summarize(state)
    t_eq = equilibrium_temperature(float(forcing[n_steps - 1]), cfg.climate_sensitivity)
    print(f"[Doeclim] steps={s['steps']} temp_final={s['temp_final']:+.3f} K (equilibrium {t_eq:+.3f} K)")
    print(f"[Doeclim] heat: mixed={s['heat_mixed_final']:.3f} interior={s['heat_interior_final']:.3f} (1e22 J)")

    if args.out:
        from pydoeclim.io import save_output_netcdf
        save_output_netcdf(args.out, state, cfg, forcing)
        print(f"[Doeclim] Wrote: {args.out}")

    if args.plot:
        from pydoeclim.ploter import plot_doeclim_output
        stem = os.path.splitext(args.out)[0] if args.out else "doeclim"
        png = f"{stem}.png"
        time = cfg.delta_t * np.arange(n_steps)
        plot_doeclim_output(state, png, time=time, forcing=forcing[:n_steps],
                            title=f"DOECLIM t2co={cfg.climate_sensitivity:g} K, kappa={cfg.ocean_diffusivity:g} cm²/s")
        print(f"[Doeclim] Wrote: {png}")
    return state


if __name__ == "__main__":
    main()
