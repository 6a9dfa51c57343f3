# =============================================================================
# lightlab
# =============================================================================
"""
Tabular Q-learning for two-zone illuminance control.

Given target illuminance ranks for two lab zones, the engine learns which
light/blind command to issue from any observed lab state.

Subpackages:
- environment: discretization, the LearningEnvironment interface, a simulator
- agents: goal descriptors, Q-table store, policy extraction, goal checks
- training: the Q-learning loop, configs, table export, episode logs
- evaluation: greedy rollouts and metrics
"""

__version__ = "0.1.0"

from lightlab.agents import GoalChecker, GoalDescriptor, PolicyExtractor, QTableStore
from lightlab.errors import (
    ActionExecutionError,
    InvalidParameter,
    NoTrainedPolicy,
    QLearningError,
    UnknownState,
)
from lightlab.q_learner import QLearner

__all__ = [
    "QLearner",
    "GoalDescriptor",
    "QTableStore",
    "PolicyExtractor",
    "GoalChecker",
    "QLearningError",
    "InvalidParameter",
    "NoTrainedPolicy",
    "UnknownState",
    "ActionExecutionError",
]
