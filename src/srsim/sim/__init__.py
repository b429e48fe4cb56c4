"""Event-driven modifier and attribute resolution engine.

The :class:`~srsim.sim.engine.Engine` is the integration surface for
ability code; the submodules hold the pieces it composes:

- ``events``: ordered synchronous event bus and payload models
- ``registry``: sealable modifier/character template catalogs
- ``core``: targets, the target registry and the seeded RNG
- ``mechanics``: modifier store, attribute resolver, energy rules
- ``runner``: many independent battles, optionally in parallel
"""

from srsim.sim.engine import Engine
from srsim.sim.errors import (
    EventPayloadError,
    InvariantViolation,
    RegistrationError,
    SimError,
    UnknownCharacterError,
    UnknownModifierError,
    UnknownTargetError,
)
from srsim.sim.events import EventBus, EventKind, RemovalCause, Subscription
from srsim.sim.registry import (
    Catalog,
    CharacterRegistry,
    ModifierRegistry,
    default_catalog,
    register_character,
    register_modifier,
)
from srsim.sim.runner import BatchRunner, BattleResult
from srsim.sim.settings import EngineSettings

__all__ = [
    "Engine",
    "EngineSettings",
    # events
    "EventBus",
    "EventKind",
    "RemovalCause",
    "Subscription",
    # registry
    "Catalog",
    "CharacterRegistry",
    "ModifierRegistry",
    "default_catalog",
    "register_character",
    "register_modifier",
    # runner
    "BatchRunner",
    "BattleResult",
    # errors
    "SimError",
    "RegistrationError",
    "InvariantViolation",
    "UnknownTargetError",
    "UnknownModifierError",
    "UnknownCharacterError",
    "EventPayloadError",
]
