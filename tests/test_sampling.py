"""
Tests for the Monte Carlo sampling driver.
"""

import math

import numpy as np
import pytest

from walk_sim.lattice import WalkLimitExceeded
from walk_sim.sampling import (
    NON_REVERSING,
    SELF_AVOIDING,
    SIMPLE,
    SweepConfig,
    SweepRunner,
    WorkUnit,
    default_sweep,
    mean_non_reversing_walk,
    mean_self_avoiding_walk,
    mean_simple_walk,
    run_sweep,
    run_unit,
)


def test_default_sweep():
    steps = default_sweep()
    assert len(steps) == 50
    assert steps[0] == 10 and steps[1] == 30 and steps[-1] == 990


def test_default_config_matches_reference_run():
    config = SweepConfig()
    assert config.samples == 100_000
    assert config.steps == tuple(default_sweep())


@pytest.mark.parametrize(
    "params",
    [
        {"samples": 0},
        {"steps": [10, -1]},
        {"chunk_size": 0},
        {"max_steps": 0},
        {"jobs": 0},
    ],
)
def test_config_validation(params):
    with pytest.raises(ValueError):
        SweepConfig(**params)


def test_config_from_dict_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unknown sweep parameters"):
        SweepConfig.from_dict({"samples": 10, "lattice": "hex"})
    assert SweepConfig.from_dict({"samples": 10, "steps": [4]}).steps == (4,)


def test_zero_steps_single_sample():
    result = run_sweep(SweepConfig(samples=1, steps=[0], jobs=1, seed=0))
    assert result.mean_simple[0] == 0.0
    assert result.mean_non_reversing[0] == 0.0
    assert result.mean_self_avoiding >= 7.0


def test_simple_walk_mean_displacement_scales_as_sqrt_n():
    """<|R|> -> sqrt(pi * n) / 2 for the simple walk on Z^2."""
    rng = np.random.default_rng(10)
    n = 100
    expected = math.sqrt(math.pi * n) / 2.0
    assert mean_simple_walk(rng, n, 100_000) == pytest.approx(expected, rel=0.05)


def test_non_reversing_walk_spreads_faster():
    rng = np.random.default_rng(11)
    simple = mean_simple_walk(rng, 100, 20_000)
    no_ret = mean_non_reversing_walk(rng, 100, 20_000)
    # <R^2> is 2n instead of n, so the mean distance grows by about sqrt(2)
    assert no_ret / simple == pytest.approx(math.sqrt(2.0), rel=0.05)


def test_mean_self_avoiding_walk_order_of_magnitude():
    mean = mean_self_avoiding_walk(np.random.default_rng(12), 5_000)
    assert 55.0 < mean < 90.0


def test_mean_self_avoiding_walk_cap_raises():
    with pytest.raises(WalkLimitExceeded):
        mean_self_avoiding_walk(np.random.default_rng(13), 10, max_steps=5)


def test_means_reject_empty_sample():
    with pytest.raises(ValueError):
        mean_simple_walk(np.random.default_rng(0), 10, 0)


def test_build_units_chunks_and_seeds():
    config = SweepConfig(samples=10, steps=[5, 3], chunk_size=4, jobs=1, seed=1)
    units = SweepRunner(config).build_units()
    # 3 chunks (4, 4, 2) for SAW plus 3 chunks per family per step count
    assert len(units) == 3 + 2 * 2 * 3
    assert [u.samples for u in units[:3]] == [4, 4, 2]
    assert all(u.kind == SELF_AVOIDING for u in units[:3])
    assert {u.kind for u in units[3:]} == {SIMPLE, NON_REVERSING}
    states = {tuple(u.seed.generate_state(2)) for u in units}
    assert len(states) == len(units), "work units must not share a stream"


def test_run_unit_unknown_kind():
    unit = WorkUnit("spiral", 0, 10, 1, np.random.SeedSequence(0))
    with pytest.raises(ValueError, match="Unknown walk kind"):
        run_unit(unit)


def test_rows_are_sorted_by_step_count():
    result = run_sweep(SweepConfig(samples=50, steps=[10, 990, 30], jobs=1, seed=3))
    assert list(result.steps) == [10, 30, 990]
    assert result.mean_simple[0] < result.mean_simple[2]
    assert result.mean_non_reversing[0] < result.mean_non_reversing[2]


def test_sorted_rows_keep_their_own_means():
    """Reordering moves a row's means with its step count."""
    seeded = run_sweep(SweepConfig(samples=200, steps=[0, 400], jobs=1, seed=4))
    swapped = run_sweep(SweepConfig(samples=200, steps=[400, 0], jobs=1, seed=4))
    assert list(swapped.steps) == [0, 400]
    assert swapped.mean_simple[0] == 0.0
    assert swapped.mean_non_reversing[0] == 0.0
    assert seeded.mean_simple[0] == 0.0
    assert swapped.mean_simple[1] > 5.0


def test_seeded_sweep_is_reproducible():
    config = dict(samples=300, steps=[10, 50], chunk_size=100, seed=21)
    a = run_sweep(SweepConfig(jobs=1, **config))
    b = run_sweep(SweepConfig(jobs=1, **config))
    np.testing.assert_array_equal(a.mean_simple, b.mean_simple)
    np.testing.assert_array_equal(a.mean_non_reversing, b.mean_non_reversing)
    assert a.mean_self_avoiding == b.mean_self_avoiding
    assert a.meta["seed"] == 21


def test_process_pool_matches_inline_run():
    """Completion order in the pool must not change the numbers or the row order."""
    config = dict(samples=400, steps=[10, 990, 30], chunk_size=100, seed=99)
    inline = run_sweep(SweepConfig(jobs=1, **config))
    pooled = run_sweep(SweepConfig(jobs=2, **config))
    assert list(pooled.steps) == [10, 30, 990]
    np.testing.assert_array_equal(inline.mean_simple, pooled.mean_simple)
    np.testing.assert_array_equal(inline.mean_non_reversing, pooled.mean_non_reversing)
    assert inline.mean_self_avoiding == pooled.mean_self_avoiding


def test_run_sweep_accepts_dict():
    result = run_sweep({"samples": 5, "steps": [2], "jobs": 1, "seed": 0})
    assert result.samples == 5
    assert list(result.steps) == [2]
