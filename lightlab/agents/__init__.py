# =============================================================================
# Agents Module
# =============================================================================
"""
Consumers of trained Q-tables.

- QTableStore / GoalDescriptor: where tables live and how goals key them
- PolicyExtractor: raw observation -> next actuator command
- GoalChecker: raw observation -> goal reached?
"""

from lightlab.agents.q_table_store import GoalDescriptor, QTableStore
from lightlab.agents.policy_extractor import ActionCommand, PolicyExtractor
from lightlab.agents.goal_checker import GoalChecker

__all__ = [
    "GoalDescriptor",
    "QTableStore",
    "ActionCommand",
    "PolicyExtractor",
    "GoalChecker",
]
