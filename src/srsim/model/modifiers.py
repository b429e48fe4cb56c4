"""Modifier definitions -- registered templates and per-application specs.

A :class:`ModifierConfig` is the immutable template registered once at
startup.  A :class:`ModifierSpec` is what ability code hands to the
engine each time it applies that modifier to a target.
"""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, Field

from .enums import StackingPolicy, StatusType, TickMoment
from .props import PropMap

PERMANENT = -1
"""Duration sentinel: the modifier stays until explicitly removed."""


class ModifierListeners(BaseModel):
    """Callbacks a modifier template can attach to its own lifecycle.

    Every listener is called as ``listener(engine, instance)``.
    """

    model_config = {"frozen": True}

    on_add: Callable[..., Any] | None = None
    """Fires after the instance is first attached to its owner."""

    on_remove: Callable[..., Any] | None = None
    """Fires after the instance has left the owner, for any reason."""

    on_tick: Callable[..., Any] | None = None
    """Fires on each qualifying turn boundary, before the duration drops.

    Also fires at (re)application time when ``tick_immediately`` is set.
    """


class ModifierConfig(BaseModel):
    """Static configuration of a modifier, keyed by the registry."""

    model_config = {"frozen": True}

    stacking: StackingPolicy
    status_type: StatusType
    duration: int = PERMANENT
    """Default duration in turns, or :data:`PERMANENT`."""

    tick_immediately: bool = False
    max_count: int | None = None
    """Upper bound on stacks.  Required for ``STACK``."""

    max_duration: int | None = None
    """Upper bound on every non-permanent duration, including ``EXTEND``
    accumulation; ``None`` means uncapped."""

    dispellable: bool = True
    tick_moment: TickMoment = TickMoment.TURN_END
    listeners: ModifierListeners = Field(default_factory=ModifierListeners)

    @property
    def is_permanent(self) -> bool:
        return self.duration == PERMANENT

    def consistency_errors(self) -> list[str]:
        """Return the reasons this config cannot be registered, if any.

        Field types are checked by pydantic when the config is built;
        cross-field rules are checked here, when the registry accepts it.
        """
        errors: list[str] = []
        if self.duration != PERMANENT and self.duration <= 0:
            errors.append(f"duration must be positive or PERMANENT, got {self.duration}")
        if self.stacking == StackingPolicy.STACK:
            if self.max_count is None or self.max_count < 1:
                errors.append("STACK modifiers require max_count >= 1")
        elif self.max_count is not None and self.max_count < 1:
            errors.append(f"max_count must be >= 1, got {self.max_count}")
        if self.max_duration is not None:
            if self.max_duration < 1:
                errors.append(f"max_duration must be >= 1, got {self.max_duration}")
            elif self.duration != PERMANENT and self.duration > self.max_duration:
                errors.append(
                    f"duration {self.duration} exceeds max_duration {self.max_duration}"
                )
        return errors

    def cap_duration(self, duration: int) -> int:
        """Bound a non-permanent *duration* by ``max_duration``."""
        if duration == PERMANENT or self.max_duration is None:
            return duration
        return min(duration, self.max_duration)


class ModifierSpec(BaseModel):
    """A single application request for a registered modifier."""

    name: str
    """Registry key of the modifier config."""

    source: int
    """Target id of the applier."""

    stats: PropMap = Field(default_factory=dict)
    """Per-stack deltas this application contributes."""

    duration: int | None = None
    """Overrides the config's default duration when set."""

    count: int = 1
    tick_immediately: bool | None = None
    """Overrides the config's ``tick_immediately`` when set."""

    state: dict[str, Any] = Field(default_factory=dict)
    """Free-form data the owning ability wants to carry on the instance."""
