# =============================================================================
# Lab Simulator
# =============================================================================
"""
A simulated two-zone lab that implements LearningEnvironment.

The simulator lets the learner be trained and evaluated without a real
building. It is also a Gymnasium environment, so it can be driven with the
usual reset()/step() loop.

Physics:
--------
Each zone's illuminance is the sum of three sources:

    lux = ambient_lux                       (always present, default 10)
        + light_lux      if the light is on (default 150)
        + sunshine_gain[sunshine_rank]      if the blinds are open

With the defaults and a rank-2 sunshine (e.g. 400 lx outside):

    light  blinds  lux   rank
    -----  ------  ----  ----
    off    closed   10    0
    on     closed  160    2
    off    open    210    2
    on     open    360    3

Sunshine is constant (``sunshine_lux``) unless a ``sunshine_schedule`` is
given, in which case it advances one entry per performed action, wrapping
around at the end.

Transitions are deterministic. Randomness only enters through
``failure_rate``, the probability that an actuation fails with
ActionExecutionError.

STATE SPACE:
The full Cartesian product of feature values, 4*4*2*2*2*2*4 = 1024 states,
in lexicographic order. Many of them can never be observed with a given
sunshine; they keep all-zero Q rows.

ACTION SPACE:
8 actions (see learning_environment). An action is applicable only if it
changes its actuator.
"""

from itertools import product
from typing import Any, Dict, List, Optional, Sequence, Tuple

import gymnasium as gym
from gymnasium import spaces
import numpy as np

from lightlab.environment.discretization import (
    NUM_RANKS,
    SUNSHINE,
    Z1_BLINDS,
    Z1_LEVEL,
    Z1_LIGHT,
    Z2_BLINDS,
    Z2_LEVEL,
    Z2_LIGHT,
    StateVector,
)
from lightlab.environment.learning_environment import (
    NUM_ACTIONS,
    LearningEnvironment,
    action_group,
    action_value,
)
from lightlab.errors import ActionExecutionError, InvalidParameter, UnknownState

DEFAULT_SUNSHINE_GAIN = (0.0, 60.0, 200.0, 400.0)

# Actuator slots, in action-group order
ACTUATORS = ("z1_light", "z2_light", "z1_blinds", "z2_blinds")


class LabSimulator(LearningEnvironment, gym.Env):
    """
    Deterministic two-zone lab with seeded actuation failures.

    Example:
    --------
    >>> lab = LabSimulator(sunshine_lux=400.0, seed=0)
    >>> obs, info = lab.reset()
    >>> lab.state_space()[info["state_index"]]
    (0, 0, 0, 0, 0, 0, 2)
    >>> lab.perform_action(3)   # zone 2 light on
    >>> lab.observe()["http://example.org/was#Z2Level"]
    160.0
    """

    ACTION_NAMES = [
        "z1_light_off", "z1_light_on",
        "z2_light_off", "z2_light_on",
        "z1_blinds_close", "z1_blinds_open",
        "z2_blinds_close", "z2_blinds_open",
    ]

    metadata = {"render_modes": []}

    def __init__(
        self,
        sunshine_lux: float = 400.0,
        ambient_lux: float = 10.0,
        light_lux: float = 150.0,
        sunshine_gain: Sequence[float] = DEFAULT_SUNSHINE_GAIN,
        sunshine_schedule: Optional[Sequence[float]] = None,
        failure_rate: float = 0.0,
        seed: Optional[int] = None,
    ):
        """
        Initialize the simulator.

        Parameters:
        -----------
        sunshine_lux : float
            Constant outside sunshine reading
        ambient_lux : float
            Illuminance present in both zones regardless of actuators
        light_lux : float
            Illuminance added by a zone's light
        sunshine_gain : sequence of 4 floats
            Illuminance admitted by open blinds, per sunshine rank
        sunshine_schedule : sequence of float, optional
            Sunshine readings cycled through, one per performed action
        failure_rate : float
            Probability in [0, 1] that perform_action fails
        seed : int, optional
            Seed for the failure RNG
        """
        super().__init__()

        if len(sunshine_gain) != NUM_RANKS:
            raise InvalidParameter(
                f"sunshine_gain needs {NUM_RANKS} entries, got {len(sunshine_gain)}"
            )
        if not 0.0 <= failure_rate <= 1.0:
            raise InvalidParameter(f"failure_rate must be in [0, 1], got {failure_rate}")
        if sunshine_schedule is not None and len(sunshine_schedule) == 0:
            raise InvalidParameter("sunshine_schedule must not be empty")

        self.sunshine_lux = float(sunshine_lux)
        self.ambient_lux = float(ambient_lux)
        self.light_lux = float(light_lux)
        self.sunshine_gain = tuple(float(g) for g in sunshine_gain)
        self.sunshine_schedule = (
            tuple(float(s) for s in sunshine_schedule)
            if sunshine_schedule is not None else None
        )
        self.failure_rate = float(failure_rate)

        self._rng = np.random.default_rng(seed)
        self._actuators: Dict[str, bool] = {name: False for name in ACTUATORS}
        self._tick = 0

        self._states: List[StateVector] = [
            tuple(v) for v in product(
                range(NUM_RANKS), range(NUM_RANKS),
                (0, 1), (0, 1), (0, 1), (0, 1),
                range(NUM_RANKS),
            )
        ]

        self.action_space = spaces.Discrete(NUM_ACTIONS)
        self.observation_space = spaces.Dict({
            Z1_LEVEL: spaces.Box(0.0, np.inf, shape=(), dtype=np.float64),
            Z2_LEVEL: spaces.Box(0.0, np.inf, shape=(), dtype=np.float64),
            Z1_LIGHT: spaces.Discrete(2),
            Z2_LIGHT: spaces.Discrete(2),
            Z1_BLINDS: spaces.Discrete(2),
            Z2_BLINDS: spaces.Discrete(2),
            SUNSHINE: spaces.Box(0.0, np.inf, shape=(), dtype=np.float64),
        })

    # -------------------------------------------------------------------------
    # LearningEnvironment
    # -------------------------------------------------------------------------

    @property
    def state_count(self) -> int:
        return len(self._states)

    @property
    def action_count(self) -> int:
        return NUM_ACTIONS

    def state_space(self) -> List[StateVector]:
        return self._states

    def applicable_actions(self, state_index: int) -> List[int]:
        vector = self._states[state_index]
        flags = vector[2:6]
        return [
            a for a in range(NUM_ACTIONS)
            if int(action_value(a)) != flags[action_group(a)]
        ]

    def current_state_index(self) -> int:
        vector = self.current_state_vector()
        index = self.state_index_of(vector)
        if index is None:
            raise UnknownState(f"State {list(vector)} is not in the state space")
        return index

    def perform_action(self, action: int) -> None:
        action = int(action)
        if not 0 <= action < NUM_ACTIONS:
            raise ActionExecutionError(action, "unknown action")
        if action not in self.applicable_actions(self.current_state_index()):
            raise ActionExecutionError(action, "not applicable in current state")
        if self.failure_rate > 0.0 and self._rng.random() < self.failure_rate:
            raise ActionExecutionError(action, "actuator did not respond")

        self._actuators[ACTUATORS[action_group(action)]] = action_value(action)
        self._tick += 1

    # -------------------------------------------------------------------------
    # Readings
    # -------------------------------------------------------------------------

    @property
    def current_sunshine(self) -> float:
        if self.sunshine_schedule is None:
            return self.sunshine_lux
        return self.sunshine_schedule[self._tick % len(self.sunshine_schedule)]

    def zone_lux(self, zone: int) -> float:
        """Illuminance of zone 1 or 2 under the current actuators."""
        lux = self.ambient_lux
        if self._actuators[f"z{zone}_light"]:
            lux += self.light_lux
        if self._actuators[f"z{zone}_blinds"]:
            lux += self.sunshine_gain[self.rank_sunshine(self.current_sunshine)]
        return lux

    def observe(self) -> Dict[str, Any]:
        """Raw observation keyed by property identifier."""
        return {
            Z1_LEVEL: self.zone_lux(1),
            Z2_LEVEL: self.zone_lux(2),
            Z1_LIGHT: self._actuators["z1_light"],
            Z2_LIGHT: self._actuators["z2_light"],
            Z1_BLINDS: self._actuators["z1_blinds"],
            Z2_BLINDS: self._actuators["z2_blinds"],
            SUNSHINE: self.current_sunshine,
        }

    def current_state_vector(self) -> StateVector:
        obs = self.observe()
        return (
            self.rank_light_level(obs[Z1_LEVEL]),
            self.rank_light_level(obs[Z2_LEVEL]),
            int(obs[Z1_LIGHT]),
            int(obs[Z2_LIGHT]),
            int(obs[Z1_BLINDS]),
            int(obs[Z2_BLINDS]),
            self.rank_sunshine(obs[SUNSHINE]),
        )

    def set_actuators(self, **actuators: bool) -> None:
        """
        Force actuator positions, e.g. ``set_actuators(z1_light=True)``.

        Unnamed actuators keep their position.
        """
        for name, value in actuators.items():
            if name not in self._actuators:
                raise InvalidParameter(
                    f"Unknown actuator {name!r}, expected one of {ACTUATORS}"
                )
            self._actuators[name] = bool(value)

    # -------------------------------------------------------------------------
    # Gymnasium
    # -------------------------------------------------------------------------

    def reset(
        self,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Switch everything off and close the blinds.

        ``options={"actuators": {...}}`` starts from other positions instead.
        """
        super().reset(seed=seed)
        if seed is not None:
            self._rng = np.random.default_rng(seed)

        self._actuators = {name: False for name in ACTUATORS}
        self._tick = 0
        if options and "actuators" in options:
            self.set_actuators(**options["actuators"])

        return self.observe(), {"state_index": self.current_state_index()}

    def step(
        self, action: int
    ) -> Tuple[Dict[str, Any], float, bool, bool, Dict[str, Any]]:
        """
        Perform an action and return the new raw observation.

        The reward is always 0.0: reward shaping depends on the goal and is
        done by the trainer.
        """
        self.perform_action(action)
        info = {
            "state_index": self.current_state_index(),
            "action_name": self.ACTION_NAMES[int(action)],
        }
        return self.observe(), 0.0, False, False, info


def neutral_state_vector(simulator: LabSimulator) -> StateVector:
    """StateVector with all actuators off under the simulator's sunshine."""
    sun_rank = simulator.rank_sunshine(simulator.current_sunshine)
    dark = simulator.rank_light_level(simulator.ambient_lux)
    return (dark, dark, 0, 0, 0, 0, sun_rank)

