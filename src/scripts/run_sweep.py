#!/usr/bin/env python3
"""
Lattice Random Walk Sweep Runner

Estimates, by Monte Carlo sampling, the mean trapping length of the 2D
self-avoiding walk and the mean end-to-end distance of the simple and
non-reversing lattice walks over a sweep of step counts. The report goes to
stdout; progress (with --verbose) goes to stderr.
"""

import argparse
import sys

from walk_sim import SweepConfig, default_sweep, format_report, run_sweep, utils
from walk_sim.sampling import CHUNK_SIZE, SAMPLE_SIZE, SWEEP_POINTS


def build_config(args) -> SweepConfig:
    """Merge an optional parameter file with explicit command-line flags."""
    params = utils.load_params(args.params) if args.params else {}
    if args.samples is not None:
        params["samples"] = args.samples
    if args.configs is not None:
        params["steps"] = default_sweep(args.configs)
    if args.jobs is not None:
        params["jobs"] = args.jobs
    if args.seed is not None:
        params["seed"] = args.seed
    if args.chunk_size is not None:
        params["chunk_size"] = args.chunk_size
    if args.verbose:
        params["verbose"] = True
    return SweepConfig.from_dict(params)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Monte Carlo sweep of 2D lattice random walks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help=f"Trials per configuration (default: {SAMPLE_SIZE})",
    )
    parser.add_argument(
        "--configs",
        type=int,
        default=None,
        help=f"Number of swept step counts, 20*(i+1)-10 (default: {SWEEP_POINTS})",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Number of worker processes (default: all CPUs)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Root seed for reproducible runs (default: OS entropy)",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help=f"Trials per work unit (default: {CHUNK_SIZE})",
    )
    parser.add_argument(
        "--params",
        type=str,
        default=None,
        help="JSON or TOML file with SweepConfig fields; flags override it",
    )
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Also save the aggregated means to this .npz file",
    )
    parser.add_argument("--verbose", action="store_true", help="Print progress to stderr")

    args = parser.parse_args(argv)

    config = build_config(args)
    result = run_sweep(config)
    sys.stdout.write(format_report(result))

    if args.out:
        utils.save_sweep_result(args.out, result)
        utils.log(f"Sweep saved to {args.out}", config.verbose)

    return 0


if __name__ == "__main__":
    sys.exit(main())
