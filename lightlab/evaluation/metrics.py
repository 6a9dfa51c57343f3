# =============================================================================
# Evaluation Metrics
# =============================================================================
"""
Metrics for evaluating learned illuminance policies.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from lightlab.agents.policy_extractor import command_to_action
from lightlab.agents.q_table_store import GoalDescriptor
from lightlab.environment.lab_simulator import ACTUATORS, LabSimulator
from lightlab.environment.learning_environment import LearningEnvironment
from lightlab.errors import ActionExecutionError

RANDOM_START = "random"


def compute_success_rate(
    successes: List[bool],
) -> float:
    """
    Compute success rate.

    Parameters:
    -----------
    successes : List[bool]
        List of success flags per episode

    Returns:
    --------
    float
        Success rate (0.0 to 1.0)
    """
    if not successes:
        return 0.0
    return sum(successes) / len(successes)


def greedy_state_value(
    table: np.ndarray,
    environment: LearningEnvironment,
    state_index: int,
) -> float:
    """Largest Q-value among the actions applicable at ``state_index``."""
    actions = environment.applicable_actions(state_index)
    return float(max(table[state_index, a] for a in actions))


class EvaluationSuite:
    """
    Greedy rollouts of a trained learner on the simulated lab.

    Each rollout resets the lab, then alternates goal check and
    next_action until the goal is reached or the step cap runs out.

    Example:
    --------
    >>> suite = EvaluationSuite(lab, max_steps=50)
    >>> metrics = suite.evaluate(learner, (2, 3), num_episodes=100)
    >>> print(f"Success rate: {metrics['success_rate']:.1%}")
    """

    def __init__(
        self,
        environment: LabSimulator,
        max_steps: int = 50,
        seed: int = 42,
    ):
        """
        Initialize evaluation suite.

        Parameters:
        -----------
        environment : LabSimulator
            Lab to roll out in (the learner's own environment is fine)
        max_steps : int
            Maximum actions per rollout
        seed : int
            Seed for random start positions
        """
        self.environment = environment
        self.max_steps = max_steps
        self.seed = seed

    def rollout(
        self,
        learner,
        goal: Any,
        start_actuators: Optional[Mapping[str, bool]] = None,
    ) -> Dict[str, Any]:
        """
        Run one greedy episode.

        Returns:
        --------
        dict
            success, length (actions taken), actions, aborted, start_state
        """
        goal = GoalDescriptor.of(goal)
        options = {"actuators": dict(start_actuators)} if start_actuators else None
        obs, info = self.environment.reset(options=options)
        start_state = info["state_index"]

        actions: List[int] = []
        success = learner.is_goal_reached(goal, obs)
        aborted = False
        while not success and len(actions) < self.max_steps:
            action = command_to_action(learner.next_action(goal, obs))
            actions.append(action)
            try:
                obs, _, _, _, info = self.environment.step(action)
            except ActionExecutionError:
                aborted = True
                break
            success = learner.is_goal_reached(goal, obs)

        return {
            "success": success,
            "length": len(actions),
            "actions": actions,
            "aborted": aborted,
            "start_state": start_state,
        }

    def evaluate(
        self,
        learner,
        goal: Any,
        num_episodes: int = 100,
        start_actuators: Union[None, str, Mapping[str, bool]] = None,
        verbose: bool = False,
    ) -> Dict[str, Any]:
        """
        Run evaluation.

        Parameters:
        -----------
        learner : QLearner
            Trained learner (needs next_action and is_goal_reached)
        goal : GoalDescriptor or pair
            Goal to pursue
        num_episodes : int
            Number of rollouts
        start_actuators : dict, "random" or None
            Start positions; None is everything off, "random" draws a
            fresh position per rollout
        verbose : bool
            Print results

        Returns:
        --------
        dict
            Evaluation metrics
        """
        rng = np.random.default_rng(self.seed)

        successes = []
        lengths = []
        episodes_data = []
        for _ in range(num_episodes):
            if start_actuators == RANDOM_START:
                start = {name: bool(rng.integers(2)) for name in ACTUATORS}
            else:
                start = start_actuators
            result = self.rollout(learner, goal, start)
            successes.append(result["success"])
            lengths.append(result["length"])
            episodes_data.append(result)

        metrics = {
            "success_rate": compute_success_rate(successes),
            "mean_length": float(np.mean(lengths)) if lengths else 0.0,
            "std_length": float(np.std(lengths)) if lengths else 0.0,
            "aborted": sum(1 for e in episodes_data if e["aborted"]),
            "num_episodes": num_episodes,
            "episodes": episodes_data,
        }

        if verbose:
            print(f"\n=== Evaluation Results (goal {tuple(GoalDescriptor.of(goal))}) ===")
            print(f"Success rate: {metrics['success_rate']:.1%}")
            print(f"Mean length:  {metrics['mean_length']:.1f} ± {metrics['std_length']:.1f}")
            if metrics["aborted"]:
                print(f"Aborted:      {metrics['aborted']}")

        return metrics
