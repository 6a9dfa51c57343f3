# =============================================================================
# Q-Learning Trainer
# =============================================================================
"""
Tabular Q-learning for one illuminance goal.

This module provides:
- QTrainer: fills a Q-table for a goal by interacting with a LearningEnvironment
- shaped_reward: the reward the trainer optimizes
- EpisodeStats: what happened in one training episode

Q-Learning Explained:
---------------------
Q[s, a] estimates the discounted return of taking action a in state s and
acting greedily afterwards. After every step the estimate moves towards the
one-step target:

    Q[s, a] <- Q[s, a] + alpha * (R + gamma * max_a' Q[s', a'] - Q[s, a])

Where:
- alpha = learning rate (how far to move per update)
- gamma = discount factor (how much future reward counts)
- R     = shaped reward of the step (see below)

The max runs over the whole next-state row, not only the actions applicable
in s'. Unvisited and inapplicable entries stay at 0.

Reward Shaping:
---------------
With (z1, z2) the zone ranks after the step and (g1, g2) the goal:

    match   = goal_reward if (z1, z2) == (g1, g2) else -1
    energy  = -0.5 * lights_on - 0.1 * blinds_open
    partial = (3 - |z1 - g1|) + (3 - |z2 - g2|)
    R       = 0.5 * partial + match + energy

`partial` pays for getting closer even when the goal is not reached yet;
`energy` makes the cheapest way to the goal (blinds before lights) win.

Training Loop:
--------------
for episode in range(episodes):
    1. Kick the lab with 1..max_kicks random applicable actions
    2. Read the start state s
    3. Up to max_steps times:
       a. pick a (epsilon-greedy over applicable actions)
       b. perform a, read s'
       c. update Q[s, a]
       d. stop if s' meets the goal, else s = s'

The random kicks matter: the lab does not reset between episodes, so without
them every episode would start where the previous one ended (at the goal).
"""

import logging
from dataclasses import dataclass, asdict
from numbers import Integral, Real
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from lightlab.agents.policy_extractor import greedy_action
from lightlab.agents.q_table_store import GoalDescriptor, QTableStore
from lightlab.environment.learning_environment import LearningEnvironment
from lightlab.errors import ActionExecutionError, InvalidParameter

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 50
DEFAULT_MAX_KICKS = 10

# Reward shaping weights
PARTIAL_WEIGHT = 0.5
MISS_PENALTY = -1.0
LIGHT_COST = 0.5
BLINDS_COST = 0.1


@dataclass
class EpisodeStats:
    """
    Outcome of one training episode.

    Attributes:
    -----------
    episode : int
        Episode number, starting at 1
    start_state : int
        StateIndex after the random kicks (-1 if a kick failed)
    steps : int
        Number of Q-updates performed
    reached_goal : bool
        Whether the episode ended on the goal
    total_reward : float
        Sum of shaped rewards
    aborted : bool
        Whether an ActionExecutionError ended the episode
    """
    episode: int
    start_state: int
    steps: int
    reached_goal: bool
    total_reward: float
    aborted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def shaped_reward(
    goal: GoalDescriptor,
    state_vector: Sequence[int],
    goal_reward: float,
) -> float:
    """Reward for arriving in ``state_vector`` while pursuing ``goal``."""
    z1, z2, light1, light2, blinds1, blinds2 = (int(x) for x in state_vector[:6])

    match = goal_reward if goal.matches(z1, z2) else MISS_PENALTY
    energy = -LIGHT_COST * (light1 + light2) - BLINDS_COST * (blinds1 + blinds2)
    partial = (3 - abs(z1 - goal.z1)) + (3 - abs(z2 - goal.z2))

    return PARTIAL_WEIGHT * partial + match + energy


def _check_rate(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameter(f"{name} must be a number in [0, 1], got {value!r}")
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise InvalidParameter(f"{name} must be in [0, 1], got {value}")
    return value


def _check_positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
        raise InvalidParameter(f"{name} must be a positive integer, got {value!r}")
    return int(value)


class QTrainer:
    """
    Fills Q-tables for goals and publishes them to a QTableStore.

    The trainer is the only writer of the store. A table becomes visible only
    after its run has finished; training the same goal twice replaces the
    earlier table.

    Example:
    --------
    >>> lab = LabSimulator(sunshine_lux=400.0)
    >>> store = QTableStore()
    >>> trainer = QTrainer(lab, store, seed=7)
    >>> q = trainer.train((2, 3), episodes=500, alpha=0.5, gamma=0.8,
    ...                   epsilon=0.4, goal_reward=15)
    >>> q.shape
    (1024, 8)
    """

    def __init__(
        self,
        environment: LearningEnvironment,
        store: QTableStore,
        seed: Optional[int] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        max_kicks: int = DEFAULT_MAX_KICKS,
        log_every: int = 0,
        episode_logger=None,
    ):
        """
        Initialize the trainer.

        Parameters:
        -----------
        environment : LearningEnvironment
            The lab to learn
        store : QTableStore
            Where finished tables are published
        seed : int, optional
            Seed for kicks and exploration
        max_steps : int
            Step cap per episode
        max_kicks : int
            Upper bound of random kicks before each episode
        log_every : int
            Log a progress line every N episodes (0 disables)
        episode_logger : EpisodeLogger, optional
            Receives an EpisodeStats record per episode
        """
        self.environment = environment
        self.store = store
        self.max_steps = _check_positive_int("max_steps", max_steps)
        self.max_kicks = _check_positive_int("max_kicks", max_kicks)
        if isinstance(log_every, bool) or not isinstance(log_every, Integral) or log_every < 0:
            raise InvalidParameter(f"log_every must be a non-negative integer, got {log_every!r}")
        self.log_every = int(log_every)
        self.episode_logger = episode_logger
        self.rng = np.random.default_rng(seed)

        # Stats of the most recent run
        self.history: List[EpisodeStats] = []

    def train(
        self,
        goal: Any,
        episodes: int,
        alpha: float,
        gamma: float,
        epsilon: float,
        goal_reward: float,
    ) -> np.ndarray:
        """
        Learn a Q-table for ``goal`` and store it.

        Parameters:
        -----------
        goal : GoalDescriptor or pair
            Target ranks, e.g. (2, 3)
        episodes : int
            Number of episodes (> 0)
        alpha : float
            Learning rate in [0, 1]
        gamma : float
            Discount factor in [0, 1]
        epsilon : float
            Exploration probability in [0, 1]
        goal_reward : float
            Bonus for reaching the goal (> 0)

        Returns:
        --------
        np.ndarray
            The frozen (state_count x action_count) table, as stored
        """
        goal = GoalDescriptor.of(goal)
        episodes = _check_positive_int("episodes", episodes)
        alpha = _check_rate("alpha", alpha)
        gamma = _check_rate("gamma", gamma)
        epsilon = _check_rate("epsilon", epsilon)
        if isinstance(goal_reward, bool) or not isinstance(goal_reward, Real) or not goal_reward > 0:
            raise InvalidParameter(f"goal_reward must be a positive number, got {goal_reward!r}")
        goal_reward = float(goal_reward)

        env = self.environment
        q_table = np.zeros((env.state_count, env.action_count), dtype=np.float64)
        states = env.state_space()

        logger.info(
            "Starting Q-learning for goal %s: episodes=%d alpha=%.3f gamma=%.3f "
            "epsilon=%.3f reward=%.1f",
            tuple(goal), episodes, alpha, gamma, epsilon, goal_reward,
        )

        self.history = []
        window_reached = 0
        for episode in range(1, episodes + 1):
            stats = self._run_episode(
                q_table, states, goal, episode, alpha, gamma, epsilon, goal_reward
            )
            self.history.append(stats)
            if self.episode_logger is not None:
                self.episode_logger.log_episode(stats, goal=goal)
            window_reached += stats.reached_goal

            if self.log_every and episode % self.log_every == 0:
                logger.info(
                    "Episode %d/%d: goal reached in %.1f%% of the last %d episodes",
                    episode, episodes, 100.0 * window_reached / self.log_every,
                    self.log_every,
                )
                window_reached = 0

        aborted = sum(s.aborted for s in self.history)
        if aborted:
            logger.warning("%d of %d episodes aborted by actuation failures", aborted, episodes)

        self.store.put(goal, q_table)
        logger.info("Finished Q-learning for goal %s", tuple(goal))
        return self.store.get(goal)

    def _randomize_start_state(self) -> None:
        kicks = int(self.rng.integers(1, self.max_kicks + 1))
        for _ in range(kicks):
            current = self.environment.current_state_index()
            actions = self.environment.applicable_actions(current)
            self.environment.perform_action(self._random_choice(actions))

    def _random_choice(self, actions: Sequence[int]) -> int:
        return actions[int(self.rng.integers(len(actions)))]

    def _select_action(
        self,
        q_table: np.ndarray,
        state: int,
        actions: Sequence[int],
        epsilon: float,
    ) -> int:
        """Epsilon-greedy over the applicable actions."""
        if self.rng.random() < epsilon:
            return self._random_choice(actions)
        return greedy_action(q_table[state], actions)

    def _run_episode(
        self,
        q_table: np.ndarray,
        states: Sequence[Sequence[int]],
        goal: GoalDescriptor,
        episode: int,
        alpha: float,
        gamma: float,
        epsilon: float,
        goal_reward: float,
    ) -> EpisodeStats:
        env = self.environment
        stats = EpisodeStats(
            episode=episode, start_state=-1, steps=0,
            reached_goal=False, total_reward=0.0,
        )

        try:
            self._randomize_start_state()
            state = env.current_state_index()
            stats.start_state = state

            for _ in range(self.max_steps):
                action = self._select_action(
                    q_table, state, env.applicable_actions(state), epsilon
                )
                env.perform_action(action)
                next_state = env.current_state_index()
                next_vector = states[next_state]

                reward = shaped_reward(goal, next_vector, goal_reward)
                td_target = reward + gamma * float(q_table[next_state].max())
                q_table[state, action] += alpha * (td_target - q_table[state, action])

                stats.steps += 1
                stats.total_reward += reward
                logger.debug(
                    "ep=%d s=%d a=%d s'=%d R=%.2f Q=%.4f",
                    episode, state, action, next_state, reward, q_table[state, action],
                )

                if goal.matches(next_vector[0], next_vector[1]):
                    stats.reached_goal = True
                    break
                state = next_state
        except ActionExecutionError as exc:
            logger.warning("Episode %d abandoned: %s", episode, exc)
            stats.aborted = True

        return stats
