# =============================================================================
# Errors
# =============================================================================
"""
Exception taxonomy for the Q-learning engine.

Every error raised by lightlab derives from QLearningError, and each one also
derives from the closest built-in exception so callers that only know about
ValueError / LookupError / RuntimeError still catch them.

Error Kinds:
------------
1. InvalidParameter      - bad hyperparameter, goal rank or input shape
2. NoTrainedPolicy       - a lookup for a goal that was never trained
3. UnknownState          - an observation that does not map into the state space
4. ActionExecutionError  - the environment failed to actuate
5. QTableFormatError     - a persisted table could not be parsed
"""


class QLearningError(Exception):
    """Base class for all lightlab errors."""


class InvalidParameter(QLearningError, ValueError):
    """A hyperparameter or input value is outside its valid range."""


class NoTrainedPolicy(QLearningError, LookupError):
    """No Q-table has been stored for the requested goal."""

    def __init__(self, goal):
        super().__init__(f"No Q-table for goal {tuple(goal)}")
        self.goal = goal


class UnknownState(QLearningError, LookupError):
    """A discretized observation is not part of the enumerated state space."""


class ActionExecutionError(QLearningError, RuntimeError):
    """The environment could not perform an action."""

    def __init__(self, action: int, reason: str = "actuation failed"):
        super().__init__(f"Action {action}: {reason}")
        self.action = action
        self.reason = reason


class QTableFormatError(QLearningError, ValueError):
    """A Q-table file is malformed."""
