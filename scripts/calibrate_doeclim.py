#!/usr/bin/env python3
"""
Calibrate climate sensitivity and ocean diffusivity against a temperature record
with an emcee ensemble sampler.

Usage:
  python -m scripts.calibrate_doeclim --forcing-file data/forcing.txt --obs-file data/temp_obs.txt --iters 5000 --walkers 32

Both files hold one value per line on the same annual time axis (NaN marks a
missing observation). The chain is written as a .npz next to --out.
"""

import argparse
import os
import sys

import numpy as np

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydoeclim.calibration import PARAM_NAMES, DoeclimCalibration, sample_posterior


def main(argv=None):
    parser = argparse.ArgumentParser(description="MCMC calibration of DOECLIM parameters.")
    parser.add_argument("--forcing-file", required=True, type=str)
    parser.add_argument("--obs-file", required=True, type=str)
    parser.add_argument("--dt", type=float, default=1.0)
    parser.add_argument("--iters", type=int, default=2000, help="steps per walker")
    parser.add_argument("--walkers", type=int, default=16)
    parser.add_argument("--burnin", type=int, default=500)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--init", type=float, nargs=4, default=(3.0, 1.0, 0.0, 0.1),
                        metavar=("T2CO", "KAPPA", "OFFSET", "SIGMA"))
    parser.add_argument("--spread", type=float, nargs=4, default=(0.16, 0.025, 0.015, 0.005),
                        metavar=("T2CO", "KAPPA", "OFFSET", "SIGMA"))
    parser.add_argument("--out", type=str, default="output/doeclim_chain.npz")
    args = parser.parse_args(argv)

    forcing = np.loadtxt(args.forcing_file, dtype=float, ndmin=1)
    obs = np.loadtxt(args.obs_file, dtype=float, ndmin=1)
    calib = DoeclimCalibration(forcing, obs, delta_t=args.dt)

    result = sample_posterior(calib.log_posterior, args.init, args.iters, init_spread=args.spread,
                              n_walkers=args.walkers, seed=args.seed)
    print(f"[Calib] iterations={args.iters} walkers={args.walkers} acceptance={result.acceptance_rate:.3f}")
    for name, (mean, sd) in result.summary(burnin=min(args.burnin, args.iters - 1)).items():
        print(f"[Calib] {name:>20s}: {mean:.4f} ± {sd:.4f}")

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    np.savez(args.out, chain=result.chain, log_post=result.log_post,
             names=np.array(PARAM_NAMES), acceptance_rate=result.acceptance_rate)
    print(f"[Calib] Wrote: {args.out}")
    return result


if __name__ == "__main__":
    main()
