"""Modifier store -- apply, remove, dispel and tick modifiers on a target.

Manages the ordered ``modifiers`` list on :class:`Target` objects.  Every
modifier is either absent or active on a target; reapplying an active
modifier is resolved by a transition function chosen by the config's
:class:`StackingPolicy`.  The functions here only mutate target state and
report what happened; the engine publishes the matching events and runs
the config's listeners.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from srsim.model.enums import DispelOrder, StackingPolicy, StatusType, TickMoment
from srsim.model.modifiers import PERMANENT
from srsim.sim.core.target import ModifierInstance

if TYPE_CHECKING:
    from srsim.model.modifiers import ModifierConfig, ModifierSpec
    from srsim.sim.core.target import Target
    from srsim.sim.registry import ModifierRegistry


class ApplyResult(str, Enum):
    ADDED = "ADDED"
    REFRESHED = "REFRESHED"
    IGNORED = "IGNORED"
    REJECTED = "REJECTED"
    """A zero-duration application on a target without the modifier."""

    REMOVED = "REMOVED"
    """A zero-duration application that ended the active instance."""


@dataclass
class ApplyOutcome:
    """What :func:`apply_modifier` did.

    Attributes
    ----------
    result:
        What happened to the target's instance.
    instance:
        The active instance after the call (the untouched one when ignored,
        the detached one when removed, ``None`` when rejected).
    tick_now:
        True when the application should fire the config's ``on_tick``
        listener right away.
    """

    result: ApplyResult
    instance: ModifierInstance | None
    tick_now: bool = False


@dataclass
class TickOutcome:
    ticked: list[ModifierInstance] = field(default_factory=list)
    expired: list[ModifierInstance] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Normalisation helpers
# ---------------------------------------------------------------------------

def clamp_duration(duration: int) -> int:
    """Clamp a requested duration: negatives other than PERMANENT become 0."""
    if duration == PERMANENT:
        return PERMANENT
    return max(0, duration)


def clamp_count(count: int, config: ModifierConfig) -> int:
    count = max(1, count)
    if config.max_count is not None:
        count = min(count, config.max_count)
    return count


def _requested_duration(spec: ModifierSpec, config: ModifierConfig) -> int:
    if spec.duration is None:
        return config.cap_duration(config.duration)
    return config.cap_duration(clamp_duration(spec.duration))


# ---------------------------------------------------------------------------
# Stacking transitions (active -> active)
# ---------------------------------------------------------------------------

def _replace(
    existing: ModifierInstance,
    spec: ModifierSpec,
    config: ModifierConfig,
    duration: int,
) -> ApplyResult:
    existing.source = spec.source
    existing.duration = duration
    existing.stats = dict(spec.stats)
    existing.count = clamp_count(spec.count, config)
    existing.state = dict(spec.state)
    return ApplyResult.REFRESHED


def _stack(
    existing: ModifierInstance,
    spec: ModifierSpec,
    config: ModifierConfig,
    duration: int,
) -> ApplyResult:
    # Duration overrides only shape the first application of a stack.
    existing.source = spec.source
    existing.duration = config.duration
    existing.stats = dict(spec.stats)
    existing.count = clamp_count(existing.count + spec.count, config)
    existing.state.update(spec.state)
    return ApplyResult.REFRESHED


def _extend(
    existing: ModifierInstance,
    spec: ModifierSpec,
    config: ModifierConfig,
    duration: int,
) -> ApplyResult:
    if existing.is_permanent:
        return ApplyResult.REFRESHED
    if duration == PERMANENT:
        existing.duration = PERMANENT
        return ApplyResult.REFRESHED
    existing.duration = config.cap_duration(existing.duration + duration)
    return ApplyResult.REFRESHED


def _ignore(
    existing: ModifierInstance,
    spec: ModifierSpec,
    config: ModifierConfig,
    duration: int,
) -> ApplyResult:
    return ApplyResult.IGNORED


_Transition = Callable[
    [ModifierInstance, "ModifierSpec", "ModifierConfig", int], ApplyResult,
]

_TRANSITIONS: dict[StackingPolicy, _Transition] = {
    StackingPolicy.REPLACE: _replace,
    StackingPolicy.STACK: _stack,
    StackingPolicy.EXTEND: _extend,
    StackingPolicy.IGNORE: _ignore,
}


def transition_for(policy: StackingPolicy) -> _Transition:
    """Return the reapplication transition of a stacking policy."""
    return _TRANSITIONS[policy]


# ---------------------------------------------------------------------------
# Store operations
# ---------------------------------------------------------------------------

def apply_modifier(
    target: Target,
    spec: ModifierSpec,
    config: ModifierConfig,
    generation: int,
) -> ApplyOutcome:
    """Attach *spec* to *target*, resolving against any active instance.

    Parameters
    ----------
    target:
        The owner of the modifier.
    spec:
        The application request.
    config:
        The registered config for ``spec.name``.
    generation:
        Engine-wide sequence number stamped on the instance when the call
        adds or refreshes it.

    A request that resolves to zero turns never leaves an active
    instance: it is rejected when the modifier is absent, and it removes
    the active instance when the stacking transition leaves it at zero.
    """
    duration = _requested_duration(spec, config)
    tick_immediately = (
        config.tick_immediately if spec.tick_immediately is None
        else spec.tick_immediately
    )

    existing = target.find_modifier(spec.name)
    if existing is None:
        if duration == 0:
            return ApplyOutcome(ApplyResult.REJECTED, None)
        instance = ModifierInstance(
            key=spec.name,
            source=spec.source,
            owner=target.id,
            duration=duration,
            count=clamp_count(spec.count, config),
            stats=dict(spec.stats),
            applied_seq=target.applied_total,
            generation=generation,
            state=dict(spec.state),
        )
        target.applied_total += 1
        target.modifiers.append(instance)
        return ApplyOutcome(ApplyResult.ADDED, instance, tick_now=tick_immediately)

    result = transition_for(config.stacking)(existing, spec, config, duration)
    if result == ApplyResult.IGNORED:
        return ApplyOutcome(result, existing)
    if existing.duration == 0:
        _detach(target, existing)
        return ApplyOutcome(ApplyResult.REMOVED, existing)
    existing.generation = generation
    return ApplyOutcome(result, existing, tick_now=tick_immediately)


def _detach(target: Target, instance: ModifierInstance) -> bool:
    for i, active in enumerate(target.modifiers):
        if active is instance:
            target.modifiers.pop(i)
            return True
    return False


def remove_modifier(target: Target, key: str) -> ModifierInstance | None:
    """Remove the instance of *key* from *target* and return it, if any."""
    instance = target.find_modifier(key)
    if instance is not None:
        _detach(target, instance)
    return instance


def dispel_modifiers(
    target: Target,
    count: int,
    registry: ModifierRegistry,
    status: StatusType = StatusType.BUFF,
    order: DispelOrder = DispelOrder.OLDEST,
) -> list[ModifierInstance]:
    """Remove up to *count* dispellable modifiers of classification *status*.

    Candidates are taken oldest-applied first (or newest first with
    ``DispelOrder.NEWEST``).  The number removed is added to
    ``target.dispel_count``.

    Returns
    -------
    list[ModifierInstance]
        The removed instances, in removal order.
    """
    if count <= 0:
        return []

    candidates = [
        m for m in target.modifiers
        if registry.get(m.key).status_type == status
        and registry.get(m.key).dispellable
    ]
    candidates.sort(key=lambda m: m.applied_seq, reverse=order == DispelOrder.NEWEST)

    removed = candidates[:count]
    for instance in removed:
        _detach(target, instance)
    target.dispel_count += len(removed)
    return removed


def tick_modifiers(
    target: Target,
    moment: TickMoment,
    registry: ModifierRegistry,
    on_tick: Callable[[ModifierInstance], None] | None = None,
) -> TickOutcome:
    """Advance every qualifying non-permanent modifier on *target* by one turn.

    An instance qualifies when its config ticks at *moment*.  The
    qualifying set is fixed when the call starts.  First ``on_tick`` is
    called for each qualifying instance still attached; then each one
    still attached loses one turn of duration and is removed once it
    reaches zero.

    Returns
    -------
    TickOutcome
        The instances that were ticked and those that expired.
    """
    outcome = TickOutcome()
    qualifying = [
        m for m in target.modifiers
        if not m.is_permanent and registry.get(m.key).tick_moment == moment
    ]

    for instance in qualifying:
        if on_tick is not None and _is_attached(target, instance):
            on_tick(instance)

    for instance in qualifying:
        if not _is_attached(target, instance) or instance.is_permanent:
            continue
        instance.duration = max(0, instance.duration - 1)
        outcome.ticked.append(instance)
        if instance.duration == 0:
            _detach(target, instance)
            outcome.expired.append(instance)

    return outcome


def _is_attached(target: Target, instance: ModifierInstance) -> bool:
    return any(m is instance for m in target.modifiers)


def active_modifiers(
    target: Target,
    registry: ModifierRegistry,
    status: StatusType | None = None,
) -> list[ModifierInstance]:
    """Return *target*'s modifiers, optionally filtered by classification."""
    if status is None:
        return list(target.modifiers)
    return [m for m in target.modifiers if registry.get(m.key).status_type == status]
