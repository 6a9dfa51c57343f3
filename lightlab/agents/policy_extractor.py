# =============================================================================
# Policy Extractor
# =============================================================================
"""
Turn a trained Q-table into actuator commands.

Given a goal and a raw lab observation, the extractor:
1. Discretizes the observation into a StateVector (environment thresholds)
2. Finds the StateIndex by exact match; never approximates
3. Picks the applicable action with the highest Q-value
4. Translates the action into a semantic command

Command Format:
---------------
    action  tag                                  payload
    ------  -----------------------------------  ----------------
    0 / 1   http://example.org/was#SetZ1Light    Z1Light  = F / T
    2 / 3   http://example.org/was#SetZ2Light    Z2Light  = F / T
    4 / 5   http://example.org/was#SetZ1Blinds   Z1Blinds = F / T
    6 / 7   http://example.org/was#SetZ2Blinds   Z2Blinds = F / T

Ties between equal Q-values go to the action listed first by the
environment, so the same observation always yields the same command.
"""

import logging
from typing import Any, Mapping, NamedTuple, Sequence

import numpy as np

from lightlab.agents.q_table_store import QTableStore
from lightlab.environment.discretization import NAMESPACE, state_vector_from_observation
from lightlab.environment.learning_environment import (
    LearningEnvironment,
    action_group,
    action_value,
)
from lightlab.errors import InvalidParameter, UnknownState

logger = logging.getLogger(__name__)

AFFORDANCES = (
    NAMESPACE + "SetZ1Light",
    NAMESPACE + "SetZ2Light",
    NAMESPACE + "SetZ1Blinds",
    NAMESPACE + "SetZ2Blinds",
)

PAYLOAD_KEYS = ("Z1Light", "Z2Light", "Z1Blinds", "Z2Blinds")


class ActionCommand(NamedTuple):
    """A single actuator command, ready to send to the lab."""

    tag: str
    payload_key: str
    payload_value: bool


def greedy_action(q_row: np.ndarray, actions: Sequence[int]) -> int:
    """
    Applicable action with the largest Q-value.

    Ties go to the earliest action in ``actions``.
    """
    if not actions:
        raise InvalidParameter("No applicable actions to choose from")
    best = actions[0]
    best_q = q_row[best]
    for action in actions[1:]:
        if q_row[action] > best_q:
            best, best_q = action, q_row[action]
    return int(best)


def action_to_command(action: int) -> ActionCommand:
    group = action_group(action)
    return ActionCommand(AFFORDANCES[group], PAYLOAD_KEYS[group], action_value(action))


def command_to_action(command: ActionCommand) -> int:
    """Inverse of action_to_command."""
    try:
        group = AFFORDANCES.index(command.tag)
    except ValueError:
        raise InvalidParameter(f"Unknown action tag {command.tag!r}") from None
    return group * 2 + int(bool(command.payload_value))


class PolicyExtractor:
    """
    Read-only greedy policy over the tables in a QTableStore.

    Example:
    --------
    >>> extractor = PolicyExtractor(lab, store)
    >>> command = extractor.next_action((2, 3), lab.observe())
    >>> command.payload_key, command.payload_value  # e.g. ('Z1Blinds', True)
    """

    def __init__(self, environment: LearningEnvironment, store: QTableStore):
        self.environment = environment
        self.store = store

    def state_index(self, observation: Mapping[str, Any]) -> int:
        """StateIndex of a raw observation; raises UnknownState if absent."""
        env = self.environment
        vector = state_vector_from_observation(
            observation, env.rank_light_level, env.rank_sunshine
        )
        index = env.state_index_of(vector)
        if index is None:
            logger.warning("State not in space: %s", list(vector))
            raise UnknownState(f"State {list(vector)} is not in the state space")
        return index

    def greedy_action(self, goal: Any, state_index: int) -> int:
        """Best applicable ActionIndex at ``state_index`` for ``goal``."""
        q_table = self.store.get(goal)
        return greedy_action(
            q_table[state_index], self.environment.applicable_actions(state_index)
        )

    def next_action(self, goal: Any, observation: Mapping[str, Any]) -> ActionCommand:
        """
        Next best command for ``goal`` from a raw observation.

        Raises NoTrainedPolicy if ``goal`` was never trained and
        UnknownState if the observation does not discretize into the
        environment's state space.
        """
        # Table first: an untrained goal is reported even for odd observations
        self.store.get(goal)
        state = self.state_index(observation)
        action = self.greedy_action(goal, state)
        command = action_to_command(action)
        logger.debug("Goal %s, state %d -> action %d %s", tuple(goal), state, action, command)
        return command
