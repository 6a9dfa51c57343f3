# =============================================================================
# Learning Environment
# =============================================================================
"""
The interface the Q-learning engine uses to talk to a lab.

The engine never looks inside the lab. It only needs to:
1. Know how big the state and action spaces are
2. Enumerate every state as a StateVector (the row order of a Q-table)
3. Ask which actions are valid from a given state
4. Read the current state and perform an action
5. Discretize raw readings the same way the state space was enumerated

Anything that implements these methods can be learnt: the bundled
LabSimulator, or a client for a real building.

Action Encoding:
----------------
Actions come in pairs, one pair per actuator:

    index  actuator      value
    -----  ------------  -----
    0, 1   zone 1 light  False, True
    2, 3   zone 2 light  False, True
    4, 5   zone 1 blinds False, True
    6, 7   zone 2 blinds False, True

so ``group = action // 2`` and ``value = action % 2 == 1``.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from lightlab.environment.discretization import (
    StateVector,
    rank_light_level,
    rank_sunshine,
)

NUM_ACTUATORS = 4
NUM_ACTIONS = NUM_ACTUATORS * 2


def action_group(action: int) -> int:
    """Which actuator an action drives (0-3)."""
    return action // 2


def action_value(action: int) -> bool:
    """The boolean an action sets its actuator to."""
    return action % 2 == 1


class LearningEnvironment(ABC):
    """
    Abstract lab as seen by the learner.

    Subclasses provide the state enumeration, action availability and
    actuation. The rank functions default to the standard thresholds and
    can be overridden by labs with differently calibrated sensors.
    """

    @property
    @abstractmethod
    def state_count(self) -> int:
        """Number of states in the enumerated state space."""

    @property
    @abstractmethod
    def action_count(self) -> int:
        """Number of actions in the fixed action enumeration."""

    @abstractmethod
    def state_space(self) -> Sequence[StateVector]:
        """All states, ordered by StateIndex."""

    @abstractmethod
    def applicable_actions(self, state_index: int) -> List[int]:
        """Actions valid from ``state_index``, in a fixed order."""

    @abstractmethod
    def current_state_index(self) -> int:
        """StateIndex of the lab as it is right now."""

    @abstractmethod
    def perform_action(self, action: int) -> None:
        """
        Perform an action.

        Raises ActionExecutionError if the lab could not actuate.
        """

    def rank_light_level(self, lux: float) -> int:
        return rank_light_level(lux)

    def rank_sunshine(self, lux: float) -> int:
        return rank_sunshine(lux)

    def state_index_of(self, vector: Sequence[int]) -> Optional[int]:
        """
        Exact lookup of a StateVector's index.

        Returns None when the vector is not enumerated. The index is built
        once from ``state_space()``, which must not change afterwards.
        """
        index: Optional[Dict[StateVector, int]] = getattr(self, "_state_index", None)
        if index is None:
            index = {tuple(v): i for i, v in enumerate(self.state_space())}
            self._state_index = index
        return index.get(tuple(int(x) for x in vector))
