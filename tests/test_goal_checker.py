"""Tests for goal satisfaction checks."""

from itertools import product

import pytest

from lightlab.agents.goal_checker import GoalChecker
from lightlab.environment.discretization import (
    Z1_LEVEL,
    Z2_LEVEL,
    state_vector_from_observation,
)
from lightlab.errors import InvalidParameter, UnknownState

LUX_GRID = [0.0, 49.9, 50.0, 75.0, 100.0, 200.0, 299.9, 300.0, 450.0]


@pytest.mark.parametrize("z1_lux, z2_lux, expected", [
    (150.0, 300.0, True),
    (100.0, 1000.0, True),
    (150.0, 299.9, False),
    (99.9, 500.0, False),
    (300.0, 300.0, False),
])
def test_goal_2_3(lab, z1_lux, z2_lux, expected):
    checker = GoalChecker(lab)
    assert checker.is_goal_reached((2, 3), {Z1_LEVEL: z1_lux, Z2_LEVEL: z2_lux}) is expected


def test_matches_discretized_zone_ranks(lab, observation):
    checker = GoalChecker(lab)
    for goal in product(range(4), repeat=2):
        for z1_lux, z2_lux in product(LUX_GRID, repeat=2):
            obs = observation(z1_lux=z1_lux, z2_lux=z2_lux)
            vector = state_vector_from_observation(obs)
            assert checker.is_goal_reached(goal, obs) == (vector[:2] == goal)


def test_ignores_actuators_and_sunshine(lab, observation):
    checker = GoalChecker(lab)
    dark_sky = observation(z1_lux=150.0, z2_lux=320.0, sunshine=0.0)
    all_on = observation(z1_lux=150.0, z2_lux=320.0, z1_light=True, z2_light=True,
                         z1_blinds=True, z2_blinds=True)
    assert checker.is_goal_reached((2, 3), dark_sky)
    assert checker.is_goal_reached((2, 3), all_on)


def test_missing_zone_reading(lab):
    with pytest.raises(UnknownState):
        GoalChecker(lab).is_goal_reached((2, 3), {Z1_LEVEL: 150.0})


def test_invalid_goal(lab, observation):
    with pytest.raises(InvalidParameter):
        GoalChecker(lab).is_goal_reached((2, 7), observation())
