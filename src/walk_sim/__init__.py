"""
Lattice Random Walk Library - Monte Carlo estimators on Z^2

This package provides three walk generators and a parallel sampling driver:
- simple_walk: lattice walk with immediate returns allowed
- non_reversing_walk: lattice walk that never steps straight back
- self_avoiding_walk: walk that stops once it traps itself
- SweepRunner: mean displacement / trapping length over a step-count sweep
"""

from .lattice import (
    WalkLimitExceeded,
    non_reversing_walk,
    self_avoiding_walk,
    simple_walk,
    unit_step,
)
from .sampling import SweepConfig, SweepRunner, default_sweep, run_sweep
from .report import format_report
from .analysis import ScalingFit, analyse_sweep, fit_scaling_exponent
from . import utils

__all__ = [
    # Walks
    "simple_walk",
    "non_reversing_walk",
    "self_avoiding_walk",
    "unit_step",
    "WalkLimitExceeded",
    # Sampling
    "SweepConfig",
    "SweepRunner",
    "default_sweep",
    "run_sweep",
    # Output / analysis
    "format_report",
    "fit_scaling_exponent",
    "analyse_sweep",
    "ScalingFit",
    # Utilities
    "utils",
]
