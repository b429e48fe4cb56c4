"""Targets and the per-battle target registry.

A :class:`Target` is any character or enemy taking part in a battle.  It
owns its base stat block, its stored energy and the ordered list of
active :class:`ModifierInstance` objects.  Targets are mutated only
through the engine facade.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from pydantic import BaseModel, Field

from srsim.model.enums import TargetKind
from srsim.model.modifiers import PERMANENT
from srsim.model.props import Attribute, Prop, PropMap, StatBlock
from srsim.sim.errors import UnknownTargetError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ModifierInstance
# ---------------------------------------------------------------------------

class ModifierInstance(BaseModel):
    """An active modifier attached to a target."""

    key: str
    """Registry key of the config this instance was built from."""

    source: int
    owner: int
    duration: int
    """Remaining turns, or :data:`~srsim.model.modifiers.PERMANENT`."""

    count: int = 1
    stats: PropMap = Field(default_factory=dict)
    """Per-stack deltas; the resolver multiplies them by ``count``."""

    applied_seq: int = 0
    """Order of first application on the owner."""

    generation: int = 0
    """Engine-wide sequence number of the latest (re)application."""

    state: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_permanent(self) -> bool:
        return self.duration == PERMANENT

    def contribution(self, prop: Prop) -> float:
        """Return this instance's total delta for *prop* (stats times stacks)."""
        return self.stats.get(prop, 0.0) * self.count


# ---------------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------------

class Target(BaseModel):
    """A character or enemy and all of its mutable battle state."""

    id: int
    name: str
    kind: TargetKind
    base_stats: StatBlock = Field(default_factory=dict)
    props: PropMap = Field(default_factory=dict)
    """Always-on bonuses (traces, equipment) folded in before modifiers."""

    energy: float = 0.0
    base_max_energy: float = 0.0
    modifiers: list[ModifierInstance] = Field(default_factory=list)
    """Active modifiers in first-application order."""

    dispel_count: int = 0
    """Number of modifiers removed from this target by dispels."""

    applied_total: int = 0
    """Counter used to stamp ``applied_seq`` on new instances."""

    template: str | None = None
    level: int | None = None

    @property
    def is_character(self) -> bool:
        return self.kind == TargetKind.CHARACTER

    def base_value(self, attribute: Attribute) -> float:
        if attribute == Attribute.MAX_ENERGY:
            return self.base_max_energy
        return self.base_stats.get(attribute, 0.0)

    def find_modifier(self, key: str) -> ModifierInstance | None:
        for instance in self.modifiers:
            if instance.key == key:
                return instance
        return None


# ---------------------------------------------------------------------------
# TargetRegistry
# ---------------------------------------------------------------------------

class TargetRegistry:
    """Holds every target of one battle, keyed by a never-reused integer id."""

    def __init__(self) -> None:
        self._targets: dict[int, Target] = {}
        self._next_id = 1

    def add(
        self,
        name: str,
        kind: TargetKind,
        base_stats: StatBlock | None = None,
        *,
        props: PropMap | None = None,
        energy: float = 0.0,
        max_energy: float = 0.0,
        template: str | None = None,
        level: int | None = None,
    ) -> Target:
        """Create a target with a fresh id and store it."""
        target = Target(
            id=self._next_id,
            name=name,
            kind=kind,
            base_stats=dict(base_stats or {}),
            props=dict(props or {}),
            energy=energy,
            base_max_energy=max_energy,
            template=template,
            level=level,
        )
        self._next_id += 1
        self._targets[target.id] = target
        logger.debug("Added %s %s as target %d", kind.value, name, target.id)
        return target

    def get(self, target_id: int) -> Target:
        try:
            return self._targets[target_id]
        except KeyError:
            raise UnknownTargetError(target_id) from None

    def remove(self, target_id: int) -> Target:
        """Remove and return a target.  Its id is never handed out again."""
        target = self.get(target_id)
        del self._targets[target_id]
        return target

    def characters(self) -> list[int]:
        return [t.id for t in self._targets.values() if t.kind == TargetKind.CHARACTER]

    def enemies(self) -> list[int]:
        return [t.id for t in self._targets.values() if t.kind == TargetKind.ENEMY]

    def ids(self) -> list[int]:
        return list(self._targets)

    def __contains__(self, target_id: object) -> bool:
        return target_id in self._targets

    def __iter__(self) -> Iterator[Target]:
        return iter(list(self._targets.values()))

    def __len__(self) -> int:
        return len(self._targets)
