# =============================================================================
# Discretization
# =============================================================================
"""
Threshold functions that turn raw lab readings into ranks.

The lab reports continuous illuminance (lux) for both zones and for the
outside sunshine, plus four booleans for the actuators. The learner works on
a small discrete state space, so every reading is bucketed into a rank:

    Zone light level          Sunshine
    ----------------          --------
    lux <  50  -> 0           lux <  50  -> 0
    lux < 100  -> 1           lux < 200  -> 1
    lux < 300  -> 2           lux < 700  -> 2
    otherwise  -> 3           otherwise  -> 3

Comparisons are strict, so a reading exactly on a threshold falls into the
higher bucket (100 lx is rank 2, not rank 1).

A reading that is not a finite number raises InvalidParameter. Actuator
flags must be booleans (0 and 1 are accepted); anything else raises
UnknownState naming the property.

StateVector Layout:
-------------------
[Z1Level, Z2Level, Z1Light, Z2Light, Z1Blinds, Z2Blinds, Sunshine]

Observations are keyed by the semantic property identifiers below. Readings
the learner does not use (e.g. the hour of day) are ignored.
"""

import math
from numbers import Integral
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple

import numpy as np

from lightlab.errors import InvalidParameter, UnknownState

NAMESPACE = "http://example.org/was#"

Z1_LEVEL = NAMESPACE + "Z1Level"
Z2_LEVEL = NAMESPACE + "Z2Level"
Z1_LIGHT = NAMESPACE + "Z1Light"
Z2_LIGHT = NAMESPACE + "Z2Light"
Z1_BLINDS = NAMESPACE + "Z1Blinds"
Z2_BLINDS = NAMESPACE + "Z2Blinds"
SUNSHINE = NAMESPACE + "Sunshine"

# Order of the features inside a StateVector
STATE_PROPERTIES = (
    Z1_LEVEL, Z2_LEVEL,
    Z1_LIGHT, Z2_LIGHT,
    Z1_BLINDS, Z2_BLINDS,
    SUNSHINE,
)

LIGHT_LEVEL_THRESHOLDS = (50.0, 100.0, 300.0)
SUNSHINE_THRESHOLDS = (50.0, 200.0, 700.0)

NUM_RANKS = len(LIGHT_LEVEL_THRESHOLDS) + 1

StateVector = Tuple[int, int, int, int, int, int, int]


def _lux(value: Any) -> float:
    if isinstance(value, (bool, np.bool_)):
        raise InvalidParameter(f"Illuminance reading must be a number, got {value!r}")
    try:
        lux = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(
            f"Illuminance reading must be a number, got {value!r}"
        ) from None
    if not math.isfinite(lux):
        raise InvalidParameter(f"Illuminance reading must be finite, got {value!r}")
    return lux


def _rank(value: float, thresholds: Sequence[float]) -> int:
    for rank, threshold in enumerate(thresholds):
        if value < threshold:
            return rank
    return len(thresholds)


def rank_light_level(lux: float) -> int:
    """Rank a zone illuminance reading (0-3)."""
    return _rank(_lux(lux), LIGHT_LEVEL_THRESHOLDS)


def rank_sunshine(lux: float) -> int:
    """Rank an outside sunshine reading (0-3)."""
    return _rank(_lux(lux), SUNSHINE_THRESHOLDS)


def observation_from_pairs(
    tags: Sequence[Any],
    values: Sequence[Any],
) -> Dict[str, Any]:
    """
    Build an observation mapping from parallel tag/value sequences.

    Lab clients usually return property identifiers and readings as two
    lists; this zips them into the mapping the learner expects.

    Parameters:
    -----------
    tags : sequence
        Property identifiers, e.g. ["http://example.org/was#Z1Level", ...]
    values : sequence
        Raw readings in the same order, e.g. [123.4, ..., True, ...]

    Returns:
    --------
    dict
        Mapping from identifier (as str) to raw reading
    """
    if len(tags) != len(values):
        raise InvalidParameter(
            f"Got {len(tags)} property tags but {len(values)} values"
        )
    return {str(tag): value for tag, value in zip(tags, values)}


def _require(observation: Mapping[str, Any], prop: str) -> Any:
    try:
        return observation[prop]
    except KeyError:
        raise UnknownState(f"Observation lacks property {prop}") from None


def _flag(observation: Mapping[str, Any], prop: str) -> int:
    value = _require(observation, prop)
    if isinstance(value, (bool, np.bool_)):
        return int(value)
    if isinstance(value, Integral) and value in (0, 1):
        return int(value)
    # No truthiness: "false" is a non-empty string
    raise UnknownState(f"Property {prop} must be a boolean, got {value!r}")


def zone_ranks_from_observation(
    observation: Mapping[str, Any],
    rank_light: Callable[[float], int] = rank_light_level,
) -> Tuple[int, int]:
    """Discretize only the two zone illuminance readings."""
    return (
        rank_light(_require(observation, Z1_LEVEL)),
        rank_light(_require(observation, Z2_LEVEL)),
    )


def state_vector_from_observation(
    observation: Mapping[str, Any],
    rank_light: Callable[[float], int] = rank_light_level,
    rank_sun: Callable[[float], int] = rank_sunshine,
) -> StateVector:
    """
    Discretize a raw observation into a StateVector.

    The rank functions default to the thresholds above; environments pass
    their own so the vector always matches their state enumeration.
    """
    z1, z2 = zone_ranks_from_observation(observation, rank_light)
    return (
        z1,
        z2,
        _flag(observation, Z1_LIGHT),
        _flag(observation, Z2_LIGHT),
        _flag(observation, Z1_BLINDS),
        _flag(observation, Z2_BLINDS),
        rank_sun(_require(observation, SUNSHINE)),
    )
