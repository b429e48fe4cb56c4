"""Energy rules -- saturation and regen scaling.

Energy is stored directly on the target rather than derived, but every
write saturates into ``[0, max_energy]`` where ``max_energy`` is the
resolved ``MAX_ENERGY`` attribute.  Regular gains are scaled by the
target's energy regeneration rate; fixed gains are not.
"""

from __future__ import annotations


def clamp_energy(value: float, max_energy: float) -> float:
    """Saturate *value* into ``[0, max_energy]``."""
    return max(0.0, min(value, max(0.0, max_energy)))


def energy_gain(amount: float, regen_rate: float, fixed: bool = False) -> float:
    """Return the energy actually granted for a requested *amount*.

    Parameters
    ----------
    amount:
        Requested change (negative values drain energy).
    regen_rate:
        The resolved ``ENERGY_REGEN`` attribute (``0.194`` for +19.4%).
    fixed:
        Skip regen scaling.  Drains are never scaled.
    """
    if fixed or amount <= 0:
        return amount
    return amount * (1.0 + regen_rate)
