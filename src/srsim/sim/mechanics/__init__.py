"""Core mechanics for the simulation engine.

Re-exports the primary functions from each mechanics module for convenience.

Usage::

    from srsim.sim.mechanics import (
        apply_modifier, remove_modifier, dispel_modifiers, tick_modifiers,
        resolve, resolve_all, prop_total,
        clamp_energy, energy_gain,
    )
"""

# -- modifiers ---------------------------------------------------------------
from .modifiers import (
    ApplyOutcome,
    ApplyResult,
    TickOutcome,
    active_modifiers,
    apply_modifier,
    dispel_modifiers,
    remove_modifier,
    tick_modifiers,
    transition_for,
)

# -- attributes --------------------------------------------------------------
from .attributes import prop_total, resolve, resolve_all

# -- energy ------------------------------------------------------------------
from .energy import clamp_energy, energy_gain

__all__ = [
    # modifiers
    "ApplyOutcome",
    "ApplyResult",
    "TickOutcome",
    "active_modifiers",
    "apply_modifier",
    "dispel_modifiers",
    "remove_modifier",
    "tick_modifiers",
    "transition_for",
    # attributes
    "prop_total",
    "resolve",
    "resolve_all",
    # energy
    "clamp_energy",
    "energy_gain",
]
