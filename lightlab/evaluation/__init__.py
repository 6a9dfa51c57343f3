# =============================================================================
# Evaluation Module
# =============================================================================
"""
Evaluation of trained illuminance policies.

Key Metrics Explained:
----------------------

1. SUCCESS RATE
   - % of greedy rollouts that reach the goal ranks within the step cap
   - Target: >95% from a neutral (all off, blinds closed) start

2. MEAN LENGTH
   - Actions needed to reach the goal
   - Shorter is better; the energy penalty also favors blinds over lights

3. GREEDY STATE VALUE
   - max Q over applicable actions; should be highest near the goal
"""

from lightlab.evaluation.metrics import (
    compute_success_rate,
    greedy_state_value,
    EvaluationSuite,
)

__all__ = [
    "compute_success_rate",
    "greedy_state_value",
    "EvaluationSuite",
]
