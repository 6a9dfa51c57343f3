"""Shared fixtures for the lightlab test suite."""

import pytest

from lightlab import QLearner, QTableStore
from lightlab.environment import LabSimulator
from lightlab.environment.discretization import (
    SUNSHINE,
    Z1_BLINDS,
    Z1_LEVEL,
    Z1_LIGHT,
    Z2_BLINDS,
    Z2_LEVEL,
    Z2_LIGHT,
)
from lightlab.environment.learning_environment import LearningEnvironment
from lightlab.errors import ActionExecutionError

GOAL = (2, 3)
SCENARIO = dict(episodes=2500, alpha=0.5, gamma=0.8, epsilon=0.4, goal_reward=15)


def make_observation(
    z1_lux=10.0,
    z2_lux=10.0,
    z1_light=False,
    z2_light=False,
    z1_blinds=False,
    z2_blinds=False,
    sunshine=400.0,
):
    return {
        Z1_LEVEL: z1_lux,
        Z2_LEVEL: z2_lux,
        Z1_LIGHT: z1_light,
        Z2_LIGHT: z2_light,
        Z1_BLINDS: z1_blinds,
        Z2_BLINDS: z2_blinds,
        SUNSHINE: sunshine,
    }


class ScriptedEnvironment(LearningEnvironment):
    """
    Two-state environment whose transitions follow a script.

    State 0 is (0, 0, ...) and state 1 is (2, 3, ...). Each performed action
    moves to the next scripted state; an exception in the script is raised
    instead.
    """

    STATES = [
        (0, 0, 0, 0, 0, 0, 0),
        (2, 3, 0, 0, 0, 0, 0),
    ]

    def __init__(self, script, actions=(0, 1), state=0):
        self.script = iter(script)
        self.actions = list(actions)
        self.state = state
        self.performed = []

    @property
    def state_count(self):
        return len(self.STATES)

    @property
    def action_count(self):
        return 2

    def state_space(self):
        return self.STATES

    def applicable_actions(self, state_index):
        return list(self.actions)

    def current_state_index(self):
        return self.state

    def perform_action(self, action):
        self.performed.append(action)
        nxt = next(self.script)
        if isinstance(nxt, Exception):
            raise nxt
        self.state = nxt


class TableEnvironment(LearningEnvironment):
    """
    Deterministic environment driven by a transition table.

    ``TRANSITIONS[s]`` maps each applicable action of state s to the next
    state. State 5 has zone ranks (2, 3); the other states are one or more
    actuator changes away from it.
    """

    STATES = [
        (0, 0, 0, 0, 0, 0, 0),
        (1, 0, 1, 0, 0, 0, 0),
        (0, 1, 0, 1, 0, 0, 0),
        (2, 1, 1, 0, 1, 0, 0),
        (1, 2, 0, 1, 0, 1, 0),
        (2, 3, 1, 1, 1, 0, 0),
    ]
    TRANSITIONS = [
        {1: 1, 3: 2},
        {0: 0, 5: 3},
        {2: 0, 7: 4},
        {4: 1, 3: 5},
        {6: 2, 1: 5},
        {0: 4, 4: 3},
    ]

    def __init__(self, state=0):
        self.state = state

    @property
    def state_count(self):
        return len(self.STATES)

    @property
    def action_count(self):
        return 8

    def state_space(self):
        return self.STATES

    def applicable_actions(self, state_index):
        return sorted(self.TRANSITIONS[state_index])

    def current_state_index(self):
        return self.state

    def perform_action(self, action):
        self.state = self.TRANSITIONS[self.state][action]


@pytest.fixture
def observation():
    """Factory for raw observations."""
    return make_observation


@pytest.fixture
def lab():
    return LabSimulator(sunshine_lux=400.0, seed=0)


@pytest.fixture
def store():
    return QTableStore()


@pytest.fixture
def scripted():
    return ScriptedEnvironment


@pytest.fixture
def table_environment():
    return TableEnvironment()


@pytest.fixture
def actuation_failure():
    return ActionExecutionError(0, "scripted failure")


@pytest.fixture(scope="session")
def trained_learner():
    """Learner trained on goal (2, 3) with the reference hyperparameters."""
    lab = LabSimulator(sunshine_lux=400.0, seed=0)
    learner = QLearner(lab, seed=42)
    learner.train(GOAL, **SCENARIO)
    return learner
