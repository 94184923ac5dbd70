#!/usr/bin/env python3
"""
Convergence and timing study of the discrete spectrum on A sech(t).

Usage:
    python scripts/convergence_study.py
    python scripts/convergence_study.py --amplitude 5.2 --d-min 256 --d-max 4096
    python scripts/convergence_study.py --bsloc fast_eigenvalue --d-max 512

Features:
- Bound state error (Hausdorff distance) against the closed form
- Relative error of the residue magnitudes
- Observed order of convergence between consecutive D
- Wall-clock time per call
"""

import argparse
import sys
import time
from pathlib import Path

import numpy as np

# Add project to path for package import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fast_nft import NsevOptions, nsev
from fast_nft.config import DEFAULT_DISCRETIZATION, is_power_of_two
from fast_nft.misc import hausdorff_dist, rel_err
from fast_nft.testcases import sech_bound_states, sech_residue_magnitudes, sech_signal


def run_study(amplitude: float, d_values, bsloc: str, discretization: str):
    """Run nsev for every D and return rows (D, K, err_bs, err_res, seconds)."""
    exact = sech_bound_states(amplitude)
    exact_res = sech_residue_magnitudes(amplitude)
    options = NsevOptions(bound_state_localization=bsloc,
                          discretization=discretization,
                          discspec_type="residues",
                          quiet=True)

    rows = []
    for D in d_values:
        q, T = sech_signal(D, amplitude)
        t_start = time.perf_counter()
        res = nsev(q, T, 1, options=options)
        elapsed = time.perf_counter() - t_start

        err_bs = hausdorff_dist(res.bound_states, exact)
        if res.K == len(exact):
            order = np.argsort(-res.bound_states.imag)
            err_res = rel_err(np.abs(res.residues[order]), exact_res)
        else:
            err_res = float("nan")
        rows.append((D, res.K, err_bs, err_res, elapsed))
    return rows


def print_report(rows, amplitude: float):
    print(f"=== A sech(t), A = {amplitude}, {len(sech_bound_states(amplitude))} bound states ===")
    print(f"{'D':>7} {'K':>3} {'bound states':>14} {'order':>6} {'residues':>12} {'time [s]':>9}")
    prev = None
    for D, K, err_bs, err_res, elapsed in rows:
        order = ""
        if prev is not None and err_bs > 0 and prev[2] > 0:
            order = f"{np.log2(prev[2] / err_bs) / np.log2(D / prev[0]):.2f}"
        print(f"{D:7d} {K:3d} {err_bs:14.3e} {order:>6} {err_res:12.3e} {elapsed:9.3f}")
        prev = (D, K, err_bs)


def main():
    parser = argparse.ArgumentParser(description="Convergence study on the sech pulse")
    parser.add_argument("--amplitude", type=float, default=2.2, help="Pulse amplitude A")
    parser.add_argument("--d-min", type=int, default=256, help="Smallest D (power of two)")
    parser.add_argument("--d-max", type=int, default=4096, help="Largest D (power of two)")
    parser.add_argument("--bsloc", type=str, default="subsample_and_refine",
                        help="Bound state localization")
    parser.add_argument("--discretization", type=str, default=DEFAULT_DISCRETIZATION,
                        help="Fast scattering discretization")

    args = parser.parse_args()

    if not (is_power_of_two(args.d_min) and is_power_of_two(args.d_max)):
        print("ERROR: --d-min and --d-max must be powers of two", file=sys.stderr)
        sys.exit(1)

    d_values = []
    D = args.d_min
    while D <= args.d_max:
        d_values.append(D)
        D *= 2

    rows = run_study(args.amplitude, d_values, args.bsloc, args.discretization)
    print_report(rows, args.amplitude)


if __name__ == "__main__":
    main()
