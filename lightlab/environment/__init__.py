# =============================================================================
# Environment Module
# =============================================================================
"""
The lab as seen by the learner.

This module provides:
- Discretization: rank thresholds and StateVector construction
- LearningEnvironment: the interface the engine trains against
- LabSimulator: a Gymnasium lab with two zones, lights, blinds and sunshine

Why a simulator?
----------------
Training needs thousands of actions. A real lab answers in seconds per
actuation; the simulator answers in microseconds and is deterministic, so
trained policies can be checked in tests.
"""

from lightlab.environment.learning_environment import LearningEnvironment
from lightlab.environment.lab_simulator import LabSimulator

__all__ = ["LearningEnvironment", "LabSimulator"]
