# src/walk_sim/utils.py
from __future__ import annotations

import json
import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import numpy as np

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None  # type: ignore


@dataclass
class SweepResult:
    """Aggregated means of one Monte Carlo sweep (no per-sample data)."""

    steps: np.ndarray
    mean_simple: np.ndarray
    mean_non_reversing: np.ndarray
    mean_self_avoiding: float
    samples: int
    meta: Dict[str, Any] = field(default_factory=dict)

    def rows(self):
        """Iterate ``(steps, mean_simple, mean_non_reversing)`` in table order."""
        for n, simple, no_ret in zip(self.steps, self.mean_simple, self.mean_non_reversing):
            yield int(n), float(simple), float(no_ret)


def make_rng(seed=None) -> np.random.Generator:
    """Build an independent generator from an int, a SeedSequence or entropy."""
    return np.random.default_rng(seed)


def now_str() -> str:
    return time.strftime("%Y%m%d-%H%M%S")


def log(message: str, verbose: bool = True) -> None:
    """Progress output; kept off stdout so the report stays clean."""
    if verbose:
        print(message, file=sys.stderr, flush=True)


def save_sweep_result(
    path: str | os.PathLike[str], result: SweepResult, *, overwrite: bool = True
) -> None:
    """Serialize a SweepResult to a compressed .npz file."""
    out_dir = Path(path).parent
    out_dir.mkdir(parents=True, exist_ok=True)
    if not overwrite and Path(path).exists():
        raise FileExistsError(f"{path} already exists")
    np.savez_compressed(
        path,
        steps=np.asarray(result.steps, dtype=np.int64),
        mean_simple=np.asarray(result.mean_simple, dtype=np.float64),
        mean_non_reversing=np.asarray(result.mean_non_reversing, dtype=np.float64),
        mean_self_avoiding=np.float64(result.mean_self_avoiding),
        samples=np.int64(result.samples),
        meta=json.dumps(result.meta or {}),
    )


def load_sweep_result(path: str | os.PathLike[str]) -> SweepResult:
    """
    Load a sweep .npz written by ``save_sweep_result``.
    """
    with np.load(path) as data:
        missing = {"steps", "mean_simple", "mean_non_reversing"} - set(data.files)
        if missing:
            raise ValueError(f"{path} is not a sweep file (missing {sorted(missing)})")
        meta = json.loads(str(data["meta"])) if "meta" in data.files else {}
        return SweepResult(
            steps=data["steps"].astype(np.int64),
            mean_simple=data["mean_simple"].astype(np.float64),
            mean_non_reversing=data["mean_non_reversing"].astype(np.float64),
            mean_self_avoiding=float(data["mean_self_avoiding"]),
            samples=int(data["samples"]),
            meta=meta,
        )


def load_params(path: str | os.PathLike[str]) -> Dict[str, Any]:
    """
    Load sweep parameters from JSON or TOML.
    """
    path = str(path)
    with open(path, "rb") as fh:
        data = fh.read()
    suffix = Path(path).suffix.lower()
    if suffix in {".json", ""}:
        return json.loads(data.decode("utf-8"))
    if suffix in {".toml", ".tml"}:
        if tomllib is None:
            raise RuntimeError("tomllib is unavailable; cannot parse TOML files")
        return tomllib.loads(data.decode("utf-8"))
    raise ValueError(f"Unsupported parameter file format: {suffix}")
