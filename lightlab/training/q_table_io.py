# =============================================================================
# Q-Table I/O
# =============================================================================
"""
Export, import and print Q-tables.

Storage Format: CSV
-------------------
    state,a0,a1,...,a7
    0,0.0000,0.0000,...
    1,1.2500,-0.3750,...

One row per state, the StateIndex first, values with four decimals. Four
decimals is finer than anything the greedy policy can distinguish in
practice, so a saved table reproduces the same policy when loaded back
(bit-exact floats are not preserved).

Why CSV?
- Opens in any spreadsheet for eyeballing a policy
- Row-per-state matches how the table is indexed
- No binary format to version
"""

import csv
from pathlib import Path
from typing import Any, List, Union

import numpy as np

from lightlab.agents.q_table_store import GoalDescriptor
from lightlab.errors import QTableFormatError

PRECISION = 4


def q_table_filename(
    goal: Any,
    episodes: int,
    alpha: float,
    gamma: float,
    epsilon: float,
) -> str:
    """
    File name that records the goal and hyperparameters of a run.

    >>> q_table_filename((2, 3), 2500, 0.5, 0.8, 0.4)
    'qtable_2_3_episode2500_alpha0.500000_gamma0.800000_epsilon0.400000.csv'
    """
    goal = GoalDescriptor.of(goal)
    return (
        f"qtable_{goal.z1}_{goal.z2}_episode{episodes}"
        f"_alpha{alpha:f}_gamma{gamma:f}_epsilon{epsilon:f}.csv"
    )


def save_q_table(table: np.ndarray, path: Union[str, Path]) -> Path:
    """Write ``table`` as CSV; parent directories are created."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["state"] + [f"a{i}" for i in range(table.shape[1])])
        for i, row in enumerate(table):
            writer.writerow([i] + [f"{v:.{PRECISION}f}" for v in row])

    return path


def load_q_table(path: Union[str, Path]) -> np.ndarray:
    """
    Read a table written by save_q_table.

    Raises QTableFormatError on a bad header, missing or out-of-order state
    indices, ragged rows or unparseable values.
    """
    path = Path(path)
    with open(path, "r", newline="") as f:
        rows = list(csv.reader(f))

    if not rows or not rows[0] or rows[0][0] != "state":
        raise QTableFormatError(f"{path}: missing 'state,a0,...' header")
    action_count = len(rows[0]) - 1
    if action_count <= 0:
        raise QTableFormatError(f"{path}: header has no action columns")

    values: List[List[float]] = []
    for line_no, row in enumerate(rows[1:], start=2):
        if not row:
            continue
        if len(row) != action_count + 1:
            raise QTableFormatError(
                f"{path}:{line_no}: expected {action_count + 1} fields, got {len(row)}"
            )
        try:
            state = int(row[0])
            values.append([float(v) for v in row[1:]])
        except ValueError as exc:
            raise QTableFormatError(f"{path}:{line_no}: {exc}") from exc
        if state != len(values) - 1:
            raise QTableFormatError(
                f"{path}:{line_no}: expected state {len(values) - 1}, got {state}"
            )

    return np.array(values, dtype=np.float64).reshape(len(values), action_count)


def format_q_table(table: np.ndarray) -> str:
    """Human-readable dump, one line per state."""
    lines = ["Q matrix"]
    for i, row in enumerate(table):
        lines.append(f"From state {i}:  " + "".join(f"{v:6.2f} " for v in row))
    return "\n".join(lines)
