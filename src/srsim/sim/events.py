"""Event bus -- ordered, synchronous publish/subscribe for lifecycle events.

Abilities subscribe callbacks to an :class:`EventKind`.  Publishing a kind
calls every subscriber of that kind in subscription order, on the calling
thread, with a frozen payload.  Each dispatch iterates a copy of the
subscriber list taken when the publish starts, so subscribing or
unsubscribing from inside a callback only affects later publishes.
Callbacks may publish further events; exceptions propagate to the
publisher.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from srsim.model.enums import ActionType, TargetKind
from srsim.sim.errors import EventPayloadError

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    BATTLE_START = "BATTLE_START"
    BATTLE_END = "BATTLE_END"
    TURN_START = "TURN_START"
    TURN_END = "TURN_END"
    ACTION_START = "ACTION_START"
    ACTION_END = "ACTION_END"
    MODIFIER_ADDED = "MODIFIER_ADDED"
    MODIFIER_REMOVED = "MODIFIER_REMOVED"
    MODIFIER_DISPELLED = "MODIFIER_DISPELLED"
    ENERGY_CHANGED = "ENERGY_CHANGED"
    TARGET_ADDED = "TARGET_ADDED"
    TARGET_REMOVED = "TARGET_REMOVED"


class RemovalCause(str, Enum):
    EXPIRED = "EXPIRED"
    REMOVED = "REMOVED"
    DISPELLED = "DISPELLED"
    OWNER_REMOVED = "OWNER_REMOVED"


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

class _Payload(BaseModel):
    model_config = {"frozen": True}


class BattleEvent(_Payload):
    turn: int
    characters: tuple[int, ...]
    enemies: tuple[int, ...]


class TurnEvent(_Payload):
    actor: int
    turn: int


class ActionEvent(_Payload):
    actor: int
    action_type: ActionType
    targets: tuple[int, ...]
    turn: int


class ModifierEvent(_Payload):
    """Describes a modifier that was added, refreshed or removed."""

    target: int
    key: str
    source: int
    duration: int
    count: int
    generation: int
    reason: str
    refreshed: bool = False
    """For ``MODIFIER_ADDED``: True when an existing instance was updated."""

    cause: RemovalCause | None = None
    """For ``MODIFIER_REMOVED`` / ``MODIFIER_DISPELLED``."""


class EnergyEvent(_Payload):
    target: int
    source: int
    previous: float
    current: float
    reason: str


class TargetEvent(_Payload):
    target: int
    kind: TargetKind


_PAYLOAD_TYPES: dict[EventKind, type[_Payload]] = {
    EventKind.BATTLE_START: BattleEvent,
    EventKind.BATTLE_END: BattleEvent,
    EventKind.TURN_START: TurnEvent,
    EventKind.TURN_END: TurnEvent,
    EventKind.ACTION_START: ActionEvent,
    EventKind.ACTION_END: ActionEvent,
    EventKind.MODIFIER_ADDED: ModifierEvent,
    EventKind.MODIFIER_REMOVED: ModifierEvent,
    EventKind.MODIFIER_DISPELLED: ModifierEvent,
    EventKind.ENERGY_CHANGED: EnergyEvent,
    EventKind.TARGET_ADDED: TargetEvent,
    EventKind.TARGET_REMOVED: TargetEvent,
}


def payload_type(kind: EventKind) -> type[_Payload]:
    """Return the payload model published for *kind*."""
    return _PAYLOAD_TYPES[kind]


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`."""

    id: int
    kind: EventKind
    callback: Callable[[Any], Any]
    owner: int | None = None


class EventBus:
    """Per-kind ordered subscriber lists with snapshot dispatch.

    Parameters
    ----------
    strict:
        When True, :meth:`publish` rejects payloads that are not instances
        of the kind's payload model.
    """

    def __init__(self, strict: bool = True) -> None:
        self._strict = strict
        self._subscribers: dict[EventKind, list[Subscription]] = {
            kind: [] for kind in EventKind
        }
        self._ids = itertools.count(1)

    def subscribe(
        self,
        kind: EventKind,
        callback: Callable[[Any], Any],
        owner: int | None = None,
    ) -> Subscription:
        """Append *callback* to the subscribers of *kind*.

        Parameters
        ----------
        kind:
            The event kind to listen to.
        callback:
            Called as ``callback(payload)`` on every publish of *kind*.
        owner:
            Target id whose lifetime bounds the subscription, if any.
        """
        sub = Subscription(next(self._ids), EventKind(kind), callback, owner)
        self._subscribers[sub.kind].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove a subscription.  Returns False if it was not registered."""
        subs = self._subscribers[subscription.kind]
        for i, sub in enumerate(subs):
            if sub.id == subscription.id:
                subs.pop(i)
                return True
        return False

    def unsubscribe_owner(self, owner: int) -> int:
        """Drop every subscription owned by *owner*.  Returns how many."""
        removed = 0
        for kind, subs in self._subscribers.items():
            kept = [s for s in subs if s.owner != owner]
            removed += len(subs) - len(kept)
            self._subscribers[kind] = kept
        if removed:
            logger.debug("Dropped %d subscriptions owned by target %d", removed, owner)
        return removed

    def subscribers(self, kind: EventKind) -> list[Subscription]:
        return list(self._subscribers[kind])

    def publish(self, kind: EventKind, payload: Any) -> None:
        """Invoke every subscriber of *kind* with *payload*, in order.

        Raises
        ------
        EventPayloadError
            In strict mode, if *payload* is not the kind's payload model.
        """
        if self._strict:
            expected = payload_type(kind)
            if not isinstance(payload, expected):
                raise EventPayloadError(
                    f"{kind.value} expects {expected.__name__}, "
                    f"got {type(payload).__name__}"
                )
        for sub in list(self._subscribers[kind]):
            sub.callback(payload)
