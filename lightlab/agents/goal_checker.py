# =============================================================================
# Goal Checker
# =============================================================================
"""
Decide whether a raw lab observation satisfies an illuminance goal.

Only the two zone illuminance readings matter: they are ranked with the
environment's light thresholds and compared to the goal pair. Actuators and
sunshine are ignored.
"""

import logging
from typing import Any, Mapping

from lightlab.agents.q_table_store import GoalDescriptor
from lightlab.environment.discretization import zone_ranks_from_observation
from lightlab.environment.learning_environment import LearningEnvironment

logger = logging.getLogger(__name__)


class GoalChecker:
    """Pure check of observed zone ranks against a goal."""

    def __init__(self, environment: LearningEnvironment):
        self.environment = environment

    def is_goal_reached(self, goal: Any, observation: Mapping[str, Any]) -> bool:
        goal = GoalDescriptor.of(goal)
        z1, z2 = zone_ranks_from_observation(
            observation, self.environment.rank_light_level
        )
        logger.debug("Checking goal %s against ranks (%d, %d)", tuple(goal), z1, z2)
        return goal.matches(z1, z2)
