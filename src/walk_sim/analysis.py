"""
Scaling analysis for sweep results.

Mean end-to-end distance of a lattice walk grows as a power of the number of
steps, <|R|> ~ A * n^nu. Fitting log(<|R|>) = nu * log(n) + log(A) recovers
the exponent; both the simple and the non-reversing walk have nu = 1/2.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
from scipy.stats import linregress

from .utils import SweepResult


@dataclass
class ScalingFit:
    exponent: float
    prefactor: float
    r_squared: float
    points: int


def fit_scaling_exponent(steps: Sequence[int], means: Sequence[float]) -> ScalingFit:
    """
    Log-log least squares fit of mean displacement against step count.

    Rows with a non-positive step count or mean are dropped.

    Raises:
        ValueError: fewer than 3 usable rows, or mismatched lengths
    """
    n = np.asarray(steps, dtype=np.float64)
    m = np.asarray(means, dtype=np.float64)
    if n.shape != m.shape:
        raise ValueError(f"steps and means differ in shape: {n.shape} vs {m.shape}")

    valid = (n > 0) & (m > 0) & np.isfinite(m)
    if np.count_nonzero(valid) < 3:
        raise ValueError("Too few valid points for scaling analysis (need at least 3).")

    slope, intercept, r_value, p_value, std_err = linregress(np.log(n[valid]), np.log(m[valid]))
    return ScalingFit(
        exponent=float(slope),
        prefactor=float(np.exp(intercept)),
        r_squared=float(r_value**2),
        points=int(np.count_nonzero(valid)),
    )


def analyse_sweep(result: SweepResult) -> Dict[str, ScalingFit]:
    return {
        "lattice": fit_scaling_exponent(result.steps, result.mean_simple),
        "no_ret": fit_scaling_exponent(result.steps, result.mean_non_reversing),
    }
