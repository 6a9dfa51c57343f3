"""Tests for the Q-learning training loop."""

import logging
import math

import numpy as np
import pytest

from lightlab.agents.q_table_store import GoalDescriptor, QTableStore
from lightlab.environment import LabSimulator
from lightlab.errors import InvalidParameter
from lightlab.training import EpisodeLogger, QTrainer, shaped_reward

GOAL = GoalDescriptor(2, 3)


# -----------------------------------------------------------------------------
# Reward shaping
# -----------------------------------------------------------------------------

def test_reward_on_goal():
    # partial 6 * 0.5 + 15 - 0.5 (one light) - 0.2 (two blinds)
    assert shaped_reward(GOAL, (2, 3, 0, 1, 1, 1, 2), 15) == pytest.approx(17.3)


def test_reward_off_goal():
    # partial (3 - 2) + (3 - 3) = 1, miss -1, no energy use
    assert shaped_reward(GOAL, (0, 0, 0, 0, 0, 0, 2), 15) == pytest.approx(-0.5)


def test_reward_counts_energy_use():
    # partial 5, all four actuators on
    assert shaped_reward(GOAL, (2, 2, 1, 1, 1, 1, 0), 15) == pytest.approx(2.5 - 1 - 1.0 - 0.2)


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

VALID = dict(episodes=10, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)


@pytest.mark.parametrize("override", [
    {"episodes": 0},
    {"episodes": -3},
    {"episodes": 2.5},
    {"episodes": True},
    {"alpha": -0.01},
    {"alpha": 1.01},
    {"alpha": math.nan},
    {"gamma": 2.0},
    {"epsilon": -1.0},
    {"epsilon": "0.4"},
    {"goal_reward": 0},
    {"goal_reward": -15},
])
def test_invalid_parameters_rejected_before_any_mutation(lab, store, override):
    lab.reset()
    before = lab.current_state_index()
    trainer = QTrainer(lab, store, seed=1)

    with pytest.raises(InvalidParameter):
        trainer.train(GOAL, **{**VALID, **override})

    assert lab.current_state_index() == before
    assert len(store) == 0
    assert trainer.history == []


@pytest.mark.parametrize("kwargs", [
    {"max_steps": 0},
    {"max_kicks": 0},
    {"log_every": -1},
])
def test_invalid_trainer_settings(lab, store, kwargs):
    with pytest.raises(InvalidParameter):
        QTrainer(lab, store, **kwargs)


@pytest.mark.parametrize("boundary", [0.0, 1.0])
def test_rate_boundaries_accepted(lab, store, boundary):
    trainer = QTrainer(lab, store, seed=1)
    trainer.train(GOAL, episodes=3, alpha=boundary, gamma=boundary,
                  epsilon=boundary, goal_reward=1)
    assert GOAL in store


# -----------------------------------------------------------------------------
# TD update on a scripted environment
# -----------------------------------------------------------------------------

def test_single_update(scripted, store):
    # kick -> state 0, step -> state 1 (the goal)
    env = scripted([0, 1])
    trainer = QTrainer(env, store, seed=0, max_kicks=1)
    q = trainer.train(GOAL, episodes=1, alpha=0.5, gamma=0.8, epsilon=0.0, goal_reward=15)

    # R = 0.5 * 6 + 15 = 18, next row all zero
    assert q[0, 0] == pytest.approx(9.0)
    assert np.count_nonzero(q) == 1
    stats = trainer.history[0]
    assert stats.reached_goal and stats.steps == 1 and stats.start_state == 0


def test_update_bootstraps_from_full_next_row(scripted, store):
    # episode 1 starts on the goal and stays there, episode 2 walks into it
    env = scripted([1, 1, 0, 1])
    trainer = QTrainer(env, store, seed=0, max_kicks=1)
    q = trainer.train(GOAL, episodes=2, alpha=0.5, gamma=0.8, epsilon=0.0, goal_reward=15)

    assert q[1, 0] == pytest.approx(9.0)
    # 0.5 * (18 + 0.8 * 9)
    assert q[0, 0] == pytest.approx(12.6)


def test_greedy_ties_go_to_first_applicable_action(scripted, store):
    env = scripted([0, 1], actions=(1, 0))
    trainer = QTrainer(env, store, seed=0, max_kicks=1)
    q = trainer.train(GOAL, episodes=1, alpha=0.5, gamma=0.8, epsilon=0.0, goal_reward=15)

    assert q[0, 1] == pytest.approx(9.0)
    assert q[0, 0] == 0.0


def test_actuation_failure_abandons_only_that_episode(scripted, store, actuation_failure):
    env = scripted([0, actuation_failure, 0, 1])
    trainer = QTrainer(env, store, seed=0, max_kicks=1)
    q = trainer.train(GOAL, episodes=2, alpha=0.5, gamma=0.8, epsilon=0.0, goal_reward=15)

    first, second = trainer.history
    assert first.aborted and first.steps == 0 and not first.reached_goal
    assert second.reached_goal and not second.aborted
    assert q[0, 0] == pytest.approx(9.0)
    assert GOAL in store


def test_failure_during_kicks_abandons_episode(scripted, store, actuation_failure):
    env = scripted([actuation_failure, 0, 1])
    trainer = QTrainer(env, store, seed=0, max_kicks=1)
    trainer.train(GOAL, episodes=2, alpha=0.5, gamma=0.8, epsilon=0.0, goal_reward=15)

    assert trainer.history[0].aborted
    assert trainer.history[0].start_state == -1
    assert trainer.history[1].reached_goal


# -----------------------------------------------------------------------------
# Training on the simulator
# -----------------------------------------------------------------------------

def test_table_is_stored_frozen(lab, store):
    trainer = QTrainer(lab, store, seed=5)
    q = trainer.train(GOAL, episodes=20, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)

    assert q.shape == (lab.state_count, lab.action_count)
    assert q is store.get(GOAL)
    assert not q.flags.writeable
    assert len(trainer.history) == 20


def test_same_seed_same_table():
    tables = []
    histories = []
    for _ in range(2):
        lab = LabSimulator(sunshine_lux=400.0, seed=0)
        trainer = QTrainer(lab, QTableStore(), seed=11)
        tables.append(trainer.train(GOAL, episodes=200, alpha=0.5, gamma=0.8,
                                    epsilon=0.4, goal_reward=15))
        histories.append(trainer.history)

    np.testing.assert_array_equal(tables[0], tables[1])
    assert histories[0] == histories[1]


def test_unreachable_goal_hits_step_cap(lab, store):
    # With rank-2 sunshine a zone is either 10, 160, 210 or 360 lx: rank 1 never occurs
    trainer = QTrainer(lab, store, seed=2, max_steps=5)
    trainer.train((1, 1), episodes=20, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)

    assert all(s.steps == 5 and not s.reached_goal for s in trainer.history)
    assert (1, 1) in store


def test_retraining_replaces_table(lab, store):
    trainer = QTrainer(lab, store, seed=3)
    first = trainer.train(GOAL, episodes=5, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)
    second = trainer.train(GOAL, episodes=50, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)

    assert store.get(GOAL) is second
    assert first is not second
    assert len(store) == 1


def test_progress_logging(lab, store, caplog):
    caplog.set_level(logging.INFO, logger="lightlab.training.q_trainer")
    trainer = QTrainer(lab, store, seed=4, log_every=10)
    trainer.train(GOAL, episodes=20, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Episode 10/20") for m in messages)
    assert any(m.startswith("Episode 20/20") for m in messages)
    assert any("Finished Q-learning for goal (2, 3)" in m for m in messages)


def test_aborted_episodes_are_logged(store, caplog):
    lab = LabSimulator(failure_rate=0.5, seed=8)
    caplog.set_level(logging.WARNING, logger="lightlab.training.q_trainer")
    trainer = QTrainer(lab, store, seed=4)
    trainer.train(GOAL, episodes=30, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)

    aborted = [s for s in trainer.history if s.aborted]
    assert aborted
    assert any("abandoned" in r.getMessage() for r in caplog.records)


def test_episode_logger_receives_every_episode(lab, store, tmp_path):
    episode_logger = EpisodeLogger(str(tmp_path), "run.jsonl")
    trainer = QTrainer(lab, store, seed=6, episode_logger=episode_logger)
    trainer.train(GOAL, episodes=15, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)

    entries = episode_logger.load_all()
    assert len(entries) == 15
    assert entries[0]["goal"] == [2, 3]
    assert [e["episode"] for e in entries] == list(range(1, 16))

    stats = episode_logger.get_stats()
    assert stats["total_episodes"] == 15
    assert stats["goals"] == [(2, 3)]
    assert 0.0 <= stats["goal_reach_rate"] <= 1.0
