"""Tabular text output for a sweep."""

from __future__ import annotations

from typing import List

from .utils import SweepResult

TABLE_HEADER = "# steps\tlattice\tno_ret"


def saw_line(result: SweepResult) -> str:
    return (
        f"# Mean number of steps for 2D SAW = {float(result.mean_self_avoiding)!r} "
        f"({result.samples} samples)"
    )


def table_lines(result: SweepResult) -> List[str]:
    lines = [TABLE_HEADER]
    for steps, simple, no_ret in result.rows():
        lines.append(f"{steps}\t{simple!r}\t{no_ret!r}")
    return lines


def format_report(result: SweepResult) -> str:
    """Render the SAW summary line followed by the step-count table."""
    return "\n".join([saw_line(result), *table_lines(result)]) + "\n"
