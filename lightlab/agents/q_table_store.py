# =============================================================================
# Q-Table Store
# =============================================================================
"""
Goal descriptors and the store that maps them to trained Q-tables.

A goal is the pair of illuminance ranks wanted in zone 1 and zone 2, e.g.
(2, 3). Each goal gets its own Q-table, because the reward the trainer
optimizes depends on the goal.

Goal Keys:
----------
Goals arrive from many places: YAML configs ("2"), agent beliefs (2.0),
numpy arrays (np.int64(2)). They are canonicalized to plain ints in a
NamedTuple, so equal rank pairs are always the same dictionary key no matter
how the caller spelled them.

Visibility:
-----------
A table is added only once its training run has completed, and it is frozen
(read-only numpy array) before it is shared. Readers therefore never see a
half-trained table.
"""

import logging
import threading
from numbers import Integral, Real
from typing import Any, Dict, Iterator, NamedTuple, Optional, Sequence

import numpy as np

from lightlab.environment.discretization import NUM_RANKS
from lightlab.errors import InvalidParameter, NoTrainedPolicy

logger = logging.getLogger(__name__)


def _canonical_rank(value: Any) -> int:
    if isinstance(value, (bool, np.bool_)):
        raise InvalidParameter(f"Goal rank must be an integer, got {value!r}")
    if isinstance(value, Integral):
        rank = int(value)
    elif isinstance(value, Real) and float(value).is_integer():
        rank = int(value)
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        rank = int(value.strip())
    else:
        raise InvalidParameter(f"Goal rank must be an integer, got {value!r}")
    if not 0 <= rank < NUM_RANKS:
        raise InvalidParameter(f"Goal rank must be in 0..{NUM_RANKS - 1}, got {rank}")
    return rank


class GoalDescriptor(NamedTuple):
    """Target illuminance ranks for zone 1 and zone 2."""

    z1: int
    z2: int

    @classmethod
    def of(cls, goal: Any) -> "GoalDescriptor":
        """
        Canonicalize a goal given as a descriptor or any 2-sequence.

        >>> GoalDescriptor.of(["2", 3.0])
        GoalDescriptor(z1=2, z2=3)
        """
        if isinstance(goal, cls):
            return goal
        if isinstance(goal, (str, bytes)):
            raise InvalidParameter(f"Goal must be a pair of ranks, got {goal!r}")
        try:
            z1, z2 = goal
        except (TypeError, ValueError):
            raise InvalidParameter(
                f"Goal must be a pair of ranks, got {goal!r}"
            ) from None
        return cls(_canonical_rank(z1), _canonical_rank(z2))

    def matches(self, z1: int, z2: int) -> bool:
        return self.z1 == z1 and self.z2 == z2


class QTableStore:
    """
    Thread-safe mapping from GoalDescriptor to frozen Q-table.

    Entries are only ever added or replaced, never evicted.

    Example:
    --------
    >>> store = QTableStore()
    >>> store.put((2, 3), np.zeros((4, 8)))
    >>> store.get(GoalDescriptor(2, 3)).shape
    (4, 8)
    """

    def __init__(self):
        self._tables: Dict[GoalDescriptor, np.ndarray] = {}
        self._lock = threading.Lock()

    def put(self, goal: Any, table: np.ndarray) -> GoalDescriptor:
        """Store ``table`` under ``goal``, replacing any previous table."""
        key = GoalDescriptor.of(goal)
        frozen = np.array(table, dtype=np.float64, copy=True)
        frozen.setflags(write=False)
        with self._lock:
            replaced = key in self._tables
            self._tables[key] = frozen
        logger.debug("Stored Q-table for goal %s (replaced=%s)", tuple(key), replaced)
        return key

    def get(self, goal: Any) -> np.ndarray:
        """The table for ``goal``; raises NoTrainedPolicy if there is none."""
        key = GoalDescriptor.of(goal)
        with self._lock:
            table = self._tables.get(key)
        if table is None:
            raise NoTrainedPolicy(key)
        return table

    def find(self, goal: Any) -> Optional[np.ndarray]:
        key = GoalDescriptor.of(goal)
        with self._lock:
            return self._tables.get(key)

    def goals(self) -> Sequence[GoalDescriptor]:
        with self._lock:
            return sorted(self._tables)

    def __contains__(self, goal: Any) -> bool:
        return self.find(goal) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)

    def __iter__(self) -> Iterator[GoalDescriptor]:
        return iter(self.goals())
