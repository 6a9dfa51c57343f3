"""Tests for evaluation helpers."""

import numpy as np

from lightlab import QLearner
from lightlab.environment import LabSimulator
from lightlab.evaluation import EvaluationSuite, compute_success_rate, greedy_state_value


def test_success_rate():
    assert compute_success_rate([]) == 0.0
    assert compute_success_rate([True, False, True, True]) == 0.75


def test_greedy_state_value_ignores_inapplicable(lab):
    table = np.zeros((lab.state_count, lab.action_count))
    state = lab.state_index_of((0, 0, 0, 0, 0, 0, 2))
    table[state] = [100.0, -1.0, 0.0, -3.0, 0.0, -2.0, 0.0, -4.0]
    assert greedy_state_value(table, lab, state) == -1.0


def test_rollout_already_at_goal(lab):
    learner = QLearner(lab)
    learner.store.put((2, 3), np.zeros((lab.state_count, lab.action_count)))
    suite = EvaluationSuite(lab, max_steps=10)

    result = suite.rollout(learner, (2, 3), {"z1_blinds": True, "z2_light": True, "z2_blinds": True})
    assert result["success"]
    assert result["length"] == 0


def test_rollout_respects_step_cap(lab):
    learner = QLearner(lab)
    # Untrained-looking table on an unreachable goal: greedy toggles forever
    learner.store.put((1, 1), np.zeros((lab.state_count, lab.action_count)))
    suite = EvaluationSuite(lab, max_steps=7)

    result = suite.rollout(learner, (1, 1))
    assert not result["success"]
    assert result["length"] == 7


def test_rollout_reports_actuation_failure():
    lab = LabSimulator(failure_rate=1.0, seed=0)
    learner = QLearner(lab)
    learner.store.put((2, 3), np.zeros((lab.state_count, lab.action_count)))

    metrics = EvaluationSuite(lab, max_steps=5).evaluate(learner, (2, 3), num_episodes=3)
    assert metrics["aborted"] == 3
    assert metrics["success_rate"] == 0.0
