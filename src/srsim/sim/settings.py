"""Engine settings.

Tunable per-engine options live in :class:`EngineSettings`; values are
validated when the model is built so a bad setting fails before the
battle starts.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_MAX_TURNS = 200


class EngineSettings(BaseModel):
    """Options for a single engine instance."""

    model_config = {"frozen": True}

    seed: int = 0
    """Seed for the engine's :class:`~srsim.sim.core.rng.SimRNG`."""

    record_mutations: bool = True
    """Append a :class:`~srsim.sim.telemetry.MutationRecord` for every mutation."""

    max_turns: int = Field(default=DEFAULT_MAX_TURNS, ge=1)
    """Turn count after which ``Engine.turn_limit_reached`` reports True."""

    strict_events: bool = True
    """Reject payloads whose type does not match the published event kind."""
