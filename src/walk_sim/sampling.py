"""
Monte Carlo sampling driver for the lattice walks.

Trials are independent, so the sweep is cut into work units (a chunk of
trials for one walk family at one step count). Each unit owns a generator
spawned from a single root ``np.random.SeedSequence`` and returns a plain sum;
sums are combined in unit order and divided by the sample count, so a seeded
sweep gives identical numbers whatever the number of worker processes.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from numba import njit

from . import utils
from .lattice import (
    MAX_STEPS,
    WalkLimitExceeded,
    _self_avoiding_kernel,
    non_reversing_walk,
    simple_walk,
)

SAMPLE_SIZE = 100_000
SWEEP_POINTS = 50
CHUNK_SIZE = 25_000

SELF_AVOIDING = "self_avoiding"
SIMPLE = "simple"
NON_REVERSING = "non_reversing"


def default_sweep(count: int = SWEEP_POINTS) -> List[int]:
    """Step counts 10, 30, 50, ... i.e. ``(i + 1) * 20 - 10`` for i < count."""
    return [(i + 1) * 20 - 10 for i in range(count)]


###############################################################################
# Sum kernels
###############################################################################


@njit(cache=True)
def sum_simple_walk(rng, steps, samples):
    total = 0.0
    for _ in range(samples):
        total += simple_walk(rng, steps)
    return total


@njit(cache=True)
def sum_non_reversing_walk(rng, steps, samples):
    total = 0.0
    for _ in range(samples):
        total += non_reversing_walk(rng, steps)
    return total


@njit(cache=True)
def sum_self_avoiding_walk(rng, samples, max_steps):
    """Total trapping length over ``samples`` walks, or -1.0 if one hit the cap."""
    no_path = np.empty((0, 2), dtype=np.int64)
    total = 0.0
    for _ in range(samples):
        steps = _self_avoiding_kernel(rng, max_steps, no_path)
        if steps < 0:
            return -1.0
        total += steps
    return total


def _check_samples(samples: int) -> None:
    if samples < 1:
        raise ValueError(f"samples must be >= 1, got {samples}")


def mean_simple_walk(rng: np.random.Generator, steps: int, samples: int) -> float:
    _check_samples(samples)
    return sum_simple_walk(rng, steps, samples) / samples


def mean_non_reversing_walk(rng: np.random.Generator, steps: int, samples: int) -> float:
    _check_samples(samples)
    return sum_non_reversing_walk(rng, steps, samples) / samples


def mean_self_avoiding_walk(
    rng: np.random.Generator, samples: int, max_steps: int = MAX_STEPS
) -> float:
    _check_samples(samples)
    total = sum_self_avoiding_walk(rng, samples, max_steps)
    if total < 0:
        raise WalkLimitExceeded(
            f"self-avoiding walk exceeded max_steps={max_steps} without trapping"
        )
    return total / samples


###############################################################################
# Work units
###############################################################################


@dataclass(frozen=True)
class WorkUnit:
    kind: str
    row: int  # index into the configured step counts; -1 for self-avoiding
    steps: int
    samples: int
    seed: np.random.SeedSequence
    max_steps: int = MAX_STEPS


def run_unit(unit: WorkUnit) -> float:
    """
    Sum one chunk of trials with a generator private to this unit.

    Module level so ProcessPoolExecutor can pickle it.
    """
    rng = utils.make_rng(unit.seed)
    if unit.kind == SIMPLE:
        return float(sum_simple_walk(rng, unit.steps, unit.samples))
    if unit.kind == NON_REVERSING:
        return float(sum_non_reversing_walk(rng, unit.steps, unit.samples))
    if unit.kind == SELF_AVOIDING:
        total = sum_self_avoiding_walk(rng, unit.samples, unit.max_steps)
        if total < 0:
            raise WalkLimitExceeded(
                f"self-avoiding walk exceeded max_steps={unit.max_steps} without trapping"
            )
        return float(total)
    raise ValueError(f"Unknown walk kind: {unit.kind}")


###############################################################################
# Sweep
###############################################################################


@dataclass
class SweepConfig:
    """Sample size, step-count sweep and execution settings."""

    samples: int = SAMPLE_SIZE
    steps: Sequence[int] = field(default_factory=default_sweep)
    chunk_size: int = CHUNK_SIZE
    jobs: Optional[int] = None  # None -> os.cpu_count()
    seed: Optional[int] = None
    max_steps: int = MAX_STEPS
    verbose: bool = False

    def __post_init__(self) -> None:
        self.steps = tuple(int(n) for n in self.steps)
        if self.samples < 1:
            raise ValueError(f"samples must be >= 1, got {self.samples}")
        if any(n < 0 for n in self.steps):
            raise ValueError(f"step counts must be >= 0, got {list(self.steps)}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {self.max_steps}")
        if self.jobs is not None and self.jobs < 1:
            raise ValueError(f"jobs must be >= 1, got {self.jobs}")

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "SweepConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(params) - known
        if unknown:
            raise ValueError(f"Unknown sweep parameters: {sorted(unknown)}")
        return cls(**params)


class SweepRunner:
    """
    Runs the full sweep.

    1. Split every (walk family, step count) pair into chunks of trials.
    2. Give each chunk its own spawned seed.
    3. Evaluate chunks inline (jobs == 1) or in a process pool.
    4. Reassemble sums by unit index and sort rows by step count.
    """

    def __init__(self, config: SweepConfig | None = None) -> None:
        self.config = config or SweepConfig()
        self.root_seed = np.random.SeedSequence(self.config.seed)

    def _chunks(self) -> List[int]:
        size = self.config.chunk_size
        full, rest = divmod(self.config.samples, size)
        return [size] * full + ([rest] if rest else [])

    def build_units(self) -> List[WorkUnit]:
        cfg = self.config
        chunks = self._chunks()
        plan: List[Tuple[str, int, int, int]] = []
        for samples in chunks:
            plan.append((SELF_AVOIDING, -1, 0, samples))
        for row, steps in enumerate(cfg.steps):
            for kind in (SIMPLE, NON_REVERSING):
                for samples in chunks:
                    plan.append((kind, row, steps, samples))

        seeds = self.root_seed.spawn(len(plan))
        return [
            WorkUnit(kind, row, steps, samples, seed, cfg.max_steps)
            for (kind, row, steps, samples), seed in zip(plan, seeds)
        ]

    def _workers(self, n_units: int) -> int:
        jobs = self.config.jobs or os.cpu_count() or 1
        return max(1, min(jobs, n_units))

    def _evaluate(self, units: List[WorkUnit]) -> np.ndarray:
        sums = np.zeros(len(units), dtype=np.float64)
        workers = self._workers(len(units))
        verbose = self.config.verbose

        if workers == 1:
            for i, unit in enumerate(units):
                sums[i] = run_unit(unit)
                utils.log(f"  [{i + 1}/{len(units)}] {unit.kind} steps={unit.steps}", verbose)
            return sums

        with ProcessPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(run_unit, unit): i for i, unit in enumerate(units)
            }
            completed = 0
            for future in as_completed(future_to_index):
                i = future_to_index[future]
                sums[i] = future.result()
                completed += 1
                utils.log(
                    f"  [{completed}/{len(units)}] {units[i].kind} steps={units[i].steps}",
                    verbose,
                )
        return sums

    def run(self) -> utils.SweepResult:
        cfg = self.config
        units = self.build_units()
        utils.log(
            f"Running sweep: samples={cfg.samples}, configs={len(cfg.steps)}, "
            f"units={len(units)}, workers={self._workers(len(units))}",
            cfg.verbose,
        )
        start_time = time.time()
        sums = self._evaluate(units)

        saw_total = 0.0
        simple_totals = [0.0] * len(cfg.steps)
        no_ret_totals = [0.0] * len(cfg.steps)
        for unit, total in zip(units, sums):
            if unit.kind == SELF_AVOIDING:
                saw_total += total
            elif unit.kind == SIMPLE:
                simple_totals[unit.row] += total
            else:
                no_ret_totals[unit.row] += total

        steps = np.asarray(cfg.steps, dtype=np.int64)
        order = np.argsort(steps, kind="stable")
        elapsed = time.time() - start_time
        utils.log(f"Sweep completed in {elapsed:.2f}s", cfg.verbose)

        return utils.SweepResult(
            steps=steps[order],
            mean_simple=np.asarray(simple_totals, dtype=np.float64)[order] / cfg.samples,
            mean_non_reversing=np.asarray(no_ret_totals, dtype=np.float64)[order]
            / cfg.samples,
            mean_self_avoiding=saw_total / cfg.samples,
            samples=cfg.samples,
            meta={
                "samples": cfg.samples,
                "chunk_size": cfg.chunk_size,
                "max_steps": cfg.max_steps,
                "seed": self.root_seed.entropy,
                "elapsed_seconds": elapsed,
                "timestamp": utils.now_str(),
            },
        )


def run_sweep(config: SweepConfig | dict | None = None) -> utils.SweepResult:
    """Run a sweep from a SweepConfig, a parameter dict, or the defaults."""
    if isinstance(config, dict):
        config = SweepConfig.from_dict(config)
    return SweepRunner(config).run()


__all__ = [
    "SAMPLE_SIZE",
    "default_sweep",
    "sum_simple_walk",
    "sum_non_reversing_walk",
    "sum_self_avoiding_walk",
    "mean_simple_walk",
    "mean_non_reversing_walk",
    "mean_self_avoiding_walk",
    "WorkUnit",
    "run_unit",
    "SweepConfig",
    "SweepRunner",
    "run_sweep",
]
