"""
Random walks on the square lattice Z^2 (4-connectivity).

Three walk families share one direction encoder:

- ``simple_walk``: memoryless walk, immediate reversals allowed.
- ``non_reversing_walk``: never steps straight back onto the previous cell.
- ``self_avoiding_walk``: never revisits a cell and stops once trapped.

Every generator takes an explicit ``np.random.Generator`` so each worker can
own an independent stream. Kernels are compiled with ``@numba.njit``.
"""

from __future__ import annotations

import numpy as np
from numba import njit, types
from numba.typed import Dict

# Index d -> unit step; opposite(d) == (d + 2) % 4 relies on this order.
DIRECTIONS = np.array(
    [
        [1, 0],
        [0, 1],
        [-1, 0],
        [0, -1],
    ],
    dtype=np.int64,
)

NO_DIRECTION = 4  # no real direction has this as its opposite
MAX_STEPS = 1_000_000

_CELL = types.UniTuple(types.int64, 2)


class WalkLimitExceeded(RuntimeError):
    """A self-avoiding trial ran past its step cap without getting trapped."""


@njit(cache=True)
def unit_step(direction):
    """Map an integer to its unit step ``(dx, dy)`` after reducing it mod 4."""
    d = direction % 4
    return DIRECTIONS[d, 0], DIRECTIONS[d, 1]


@njit(cache=True)
def opposite(direction):
    return (direction + 2) % 4


###############################################################################
# Simple walk (with returns)
###############################################################################


@njit(cache=True)
def simple_walk_endpoint(rng, steps):
    x = 0.0
    y = 0.0
    for _ in range(steps):
        dx, dy = unit_step(rng.integers(0, 4))
        x += dx
        y += dy
    return x, y


@njit(cache=True)
def simple_walk(rng, steps):
    """Euclidean distance from the origin after ``steps`` uniform steps."""
    x, y = simple_walk_endpoint(rng, steps)
    return np.sqrt(x * x + y * y)


###############################################################################
# Non-reversing walk
###############################################################################


@njit(cache=True)
def _draw_non_reversing(rng, previous):
    """Rejection-sample a direction that does not undo ``previous``."""
    while True:
        direction = rng.integers(0, 4)
        if opposite(direction) != previous:
            return direction


@njit(cache=True)
def non_reversing_directions(rng, steps):
    directions = np.empty(steps, dtype=np.int64)
    previous = NO_DIRECTION
    for i in range(steps):
        previous = _draw_non_reversing(rng, previous)
        directions[i] = previous
    return directions


@njit(cache=True)
def non_reversing_walk(rng, steps):
    """Euclidean distance from the origin after ``steps`` non-reversing steps."""
    x = 0.0
    y = 0.0
    previous = NO_DIRECTION
    for _ in range(steps):
        previous = _draw_non_reversing(rng, previous)
        dx, dy = unit_step(previous)
        x += dx
        y += dy
    return np.sqrt(x * x + y * y)


###############################################################################
# Self-avoiding walk
###############################################################################


@njit(cache=True)
def _self_avoiding_kernel(rng, max_steps, path):
    """
    Grow one self-avoiding walk until it traps itself.

    Candidate directions are tested in a fresh random order at every site:
    a uniform index is drawn from the remaining pool and a rejected candidate
    is removed (order preserving) before the next draw. The current cell is
    marked visited only when a move out of it is accepted, so the origin is
    marked just before the first step.

    Returns the number of completed steps, or -1 if a further step would
    exceed ``max_steps``. When ``path`` has rows, visited positions are
    written into it (row 0 is the origin); it must hold ``max_steps + 1`` rows.
    """
    record = path.shape[0] > 0
    visited = Dict.empty(key_type=_CELL, value_type=types.boolean)
    pool = np.empty(4, dtype=np.int64)
    x = 0
    y = 0
    steps = 0
    if record:
        path[0, 0] = 0
        path[0, 1] = 0

    while True:
        for i in range(4):
            pool[i] = i
        remaining = 4
        moved = False

        while remaining > 0:
            idx = rng.integers(0, remaining)
            dx, dy = unit_step(pool[idx])
            if (x + dx, y + dy) in visited:
                for j in range(idx, remaining - 1):
                    pool[j] = pool[j + 1]
                remaining -= 1
                continue

            if steps == max_steps:
                return -1
            visited[(x, y)] = True
            x += dx
            y += dy
            steps += 1
            if record:
                path[steps, 0] = x
                path[steps, 1] = y
            moved = True
            break

        if not moved:
            # trapped: all four neighbours already visited
            return steps


def self_avoiding_walk(rng: np.random.Generator, max_steps: int = MAX_STEPS) -> int:
    """Number of steps a self-avoiding walk survives before self-trapping."""
    steps = _self_avoiding_kernel(rng, max_steps, np.empty((0, 2), dtype=np.int64))
    if steps < 0:
        raise WalkLimitExceeded(
            f"self-avoiding walk exceeded max_steps={max_steps} without trapping"
        )
    return int(steps)


def self_avoiding_path(rng: np.random.Generator, max_steps: int = 10_000) -> np.ndarray:
    """Return the ``(k + 1, 2)`` array of cells visited by one trapped walk."""
    path = np.zeros((max_steps + 1, 2), dtype=np.int64)
    steps = _self_avoiding_kernel(rng, max_steps, path)
    if steps < 0:
        raise WalkLimitExceeded(
            f"self-avoiding walk exceeded max_steps={max_steps} without trapping"
        )
    return path[: steps + 1].copy()


__all__ = [
    "DIRECTIONS",
    "NO_DIRECTION",
    "MAX_STEPS",
    "WalkLimitExceeded",
    "unit_step",
    "opposite",
    "simple_walk",
    "simple_walk_endpoint",
    "non_reversing_walk",
    "non_reversing_directions",
    "self_avoiding_walk",
    "self_avoiding_path",
]
