"""
Scaling analysis of a saved lattice-walk sweep.

Fits <|R|> ~ A * n^nu for the simple and the non-reversing walk columns.
"""
from __future__ import annotations

import argparse
import sys

from walk_sim import analyse_sweep, utils


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fit scaling exponents of a sweep")
    parser.add_argument("path", help="Sweep .npz written by run_sweep.py --out")
    args = parser.parse_args(argv)

    result = utils.load_sweep_result(args.path)
    print(f"# {args.path}: {len(result.steps)} configurations, {result.samples} samples")
    print(f"# Mean number of steps for 2D SAW = {result.mean_self_avoiding}")
    for name, fit in analyse_sweep(result).items():
        print(
            f"{name}\tnu = {fit.exponent:.4f}\tA = {fit.prefactor:.4f}\t"
            f"R^2 = {fit.r_squared:.5f}\t({fit.points} points)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
