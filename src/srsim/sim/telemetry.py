"""Telemetry data models for mutation history and attribute snapshots.

- **MutationRecord**: one engine mutation with the reason that caused it.
- **BattleLog**: ordered list of mutation records with simple queries.
- **ModifierSnapshot** / **TargetSnapshot**: point-in-time view of a
  target's resolved attributes, energy and active modifiers.

All classes are plain ``dataclass`` instances (not Pydantic models) to
keep recording cheap inside long batch runs.  Reasons are metadata only;
nothing in the engine reads them back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from srsim.model.enums import TargetKind
from srsim.model.props import Attribute


@dataclass(frozen=True)
class MutationRecord:
    """A single state change made through the engine.

    Attributes
    ----------
    seq:
        Position of the record in the battle log.
    turn:
        Engine turn counter when the mutation happened.
    op:
        Operation name (``"add_modifier"``, ``"modify_energy"``, ...).
    target:
        Target id that was mutated.
    source:
        Target id that caused the mutation, if known.
    reason:
        Free-form cause tag supplied by the caller.
    key:
        Modifier key for modifier operations.
    detail:
        Operation-specific values (old/new energy, duration, count, ...).
    """

    seq: int
    turn: int
    op: str
    target: int
    source: int | None
    reason: str
    key: str | None = None
    detail: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        subject = f"{self.op}({self.key})" if self.key else self.op
        extras = ", ".join(f"{k}={v}" for k, v in self.detail.items())
        text = f"[turn {self.turn}] #{self.target} {subject} <- {self.reason}"
        return f"{text} ({extras})" if extras else text


@dataclass
class BattleLog:
    """Ordered mutation history of one engine."""

    records: list[MutationRecord] = field(default_factory=list)

    def append(self, record: MutationRecord) -> None:
        self.records.append(record)

    def for_target(self, target_id: int) -> list[MutationRecord]:
        return [r for r in self.records if r.target == target_id]

    def by_reason(self, reason: str) -> list[MutationRecord]:
        return [r for r in self.records if r.reason == reason]

    def explain(self, target_id: int) -> list[str]:
        """Human-readable history of everything that touched *target_id*."""
        return [r.describe() for r in self.for_target(target_id)]

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class ModifierSnapshot:
    key: str
    source: int
    duration: int
    count: int
    generation: int


@dataclass(frozen=True)
class TargetSnapshot:
    """Resolved view of one target at a point in time."""

    target: int
    name: str
    kind: TargetKind
    turn: int
    energy: float
    max_energy: float
    stats: dict[Attribute, float]
    modifiers: tuple[ModifierSnapshot, ...] = ()
    dispel_count: int = 0
