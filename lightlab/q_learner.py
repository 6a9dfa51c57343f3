# =============================================================================
# Q-Learner
# =============================================================================
"""
One object that wires the engine together.

    ┌──────────────┐  train()   ┌──────────────┐   put()   ┌──────────────┐
    │   Caller     │───────────▶│   QTrainer   │──────────▶│ QTableStore  │
    │  (agent)     │            └──────────────┘           └──────────────┘
    │              │                   │ kicks/acts               │ get()
    │              │                   ▼                          ▼
    │              │            ┌──────────────┐   ┌─────────────────────┐
    │              │ next_action│  Learning    │◀──│   PolicyExtractor   │
    │              │───────────▶│  Environment │   │   GoalChecker       │
    └──────────────┘            └──────────────┘   └─────────────────────┘

The store is created here (or passed in) and handed to every component, so
several learners can share tables or keep them apart.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np

from lightlab.agents.goal_checker import GoalChecker
from lightlab.agents.policy_extractor import ActionCommand, PolicyExtractor
from lightlab.agents.q_table_store import GoalDescriptor, QTableStore
from lightlab.environment.discretization import observation_from_pairs
from lightlab.environment.learning_environment import LearningEnvironment
from lightlab.training.q_table_io import q_table_filename, save_q_table
from lightlab.training.q_trainer import DEFAULT_MAX_KICKS, DEFAULT_MAX_STEPS, QTrainer

logger = logging.getLogger(__name__)


class QLearner:
    """
    Train, query and export Q-tables for illuminance goals.

    Example:
    --------
    >>> learner = QLearner(LabSimulator(), seed=42)
    >>> learner.train((2, 3), episodes=2500, alpha=0.5, gamma=0.8,
    ...               epsilon=0.4, goal_reward=15)
    >>> learner.next_action((2, 3), observation)
    >>> learner.is_goal_reached((2, 3), observation)
    """

    def __init__(
        self,
        environment: LearningEnvironment,
        store: Optional[QTableStore] = None,
        seed: Optional[int] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        max_kicks: int = DEFAULT_MAX_KICKS,
        log_every: int = 0,
        episode_logger=None,
    ):
        self.environment = environment
        self.state_count = environment.state_count
        self.action_count = environment.action_count
        logger.info("Initialized with a state space of n=%d", self.state_count)
        logger.info("Initialized with an action space of m=%d", self.action_count)

        self.store = store if store is not None else QTableStore()
        self.trainer = QTrainer(
            environment,
            self.store,
            seed=seed,
            max_steps=max_steps,
            max_kicks=max_kicks,
            log_every=log_every,
            episode_logger=episode_logger,
        )
        self.extractor = PolicyExtractor(environment, self.store)
        self.goal_checker = GoalChecker(environment)

        # Hyperparameters of the last run per goal, for export file names
        self._runs = {}

    def train(
        self,
        goal: Any,
        episodes: int,
        alpha: float,
        gamma: float,
        epsilon: float,
        goal_reward: float,
    ) -> np.ndarray:
        """Train a table for ``goal``; see QTrainer.train."""
        table = self.trainer.train(goal, episodes, alpha, gamma, epsilon, goal_reward)
        self._runs[GoalDescriptor.of(goal)] = (episodes, alpha, gamma, epsilon)
        return table

    def next_action(self, goal: Any, observation: Mapping[str, Any]) -> ActionCommand:
        return self.extractor.next_action(goal, observation)

    def is_goal_reached(self, goal: Any, observation: Mapping[str, Any]) -> bool:
        return self.goal_checker.is_goal_reached(goal, observation)

    def next_action_from_pairs(
        self,
        goal: Any,
        tags: Sequence[Any],
        values: Sequence[Any],
    ) -> ActionCommand:
        """next_action for an observation given as parallel tag/value lists."""
        return self.next_action(goal, observation_from_pairs(tags, values))

    def is_goal_reached_from_pairs(
        self,
        goal: Any,
        tags: Sequence[Any],
        values: Sequence[Any],
    ) -> bool:
        return self.is_goal_reached(goal, observation_from_pairs(tags, values))

    def q_table(self, goal: Any) -> np.ndarray:
        return self.store.get(goal)

    def export(self, goal: Any, directory: Union[str, Path] = ".") -> Path:
        """
        Save the table for ``goal`` as CSV in ``directory``.

        The file name records the hyperparameters of the run that produced
        it; tables stored from elsewhere get a ``qtable_<z1>_<z2>.csv`` name.
        """
        goal = GoalDescriptor.of(goal)
        table = self.store.get(goal)
        run = self._runs.get(goal)
        if run is not None:
            filename = q_table_filename(goal, *run)
        else:
            filename = f"qtable_{goal.z1}_{goal.z2}.csv"

        path = save_q_table(table, Path(directory) / filename)
        logger.info("Saved Q-table (with state indices) to %s", path)
        return path
