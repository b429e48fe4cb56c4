"""Core simulation primitives: targets, the target registry and the RNG."""

from srsim.sim.core.rng import SimRNG
from srsim.sim.core.target import ModifierInstance, Target, TargetRegistry

__all__ = [
    # rng
    "SimRNG",
    # target
    "ModifierInstance",
    "Target",
    "TargetRegistry",
]
