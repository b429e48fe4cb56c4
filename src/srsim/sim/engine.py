"""Engine facade -- the single integration surface for ability code.

The :class:`Engine` composes the event bus, the target registry, the
modifier store and the attribute resolver of one battle.  Ability code
subscribes to events, applies and removes modifiers, reads attributes
and changes energy only through this class, which keeps the invariants
(energy saturation, one instance per modifier key, synchronous expiry)
and records every mutation with its reason.

Usage::

    engine = Engine(catalog, EngineSettings(seed=7))
    hero = engine.add_character("huohuo", level=80)
    foe = engine.add_enemy("Dummy", {Attribute.HP: 100_000})

    engine.start_battle()
    engine.use_ability(hero, ActionType.ULT)
    engine.run_turn(hero, ActionType.SKILL)
    engine.stat(hero, Attribute.ATK)

Each engine is independent; parallel simulations build one engine each.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, Sequence

from srsim.model.characters import AbilityLevels, CharacterInfo
from srsim.model.enums import (
    ActionType,
    DispelOrder,
    StatusType,
    TargetKind,
    TargetType,
    TickMoment,
)
from srsim.model.modifiers import ModifierSpec
from srsim.model.props import Attribute, Prop, PropMap, StatBlock
from srsim.sim.core.rng import SimRNG
from srsim.sim.core.target import ModifierInstance, Target, TargetRegistry
from srsim.sim.errors import InvariantViolation
from srsim.sim.events import (
    ActionEvent,
    BattleEvent,
    EnergyEvent,
    EventBus,
    EventKind,
    ModifierEvent,
    RemovalCause,
    Subscription,
    TargetEvent,
    TurnEvent,
)
from srsim.sim.mechanics.attributes import prop_total, resolve, resolve_all
from srsim.sim.mechanics.energy import clamp_energy, energy_gain
from srsim.sim.mechanics.modifiers import (
    ApplyOutcome,
    ApplyResult,
    active_modifiers,
    apply_modifier,
    dispel_modifiers,
    remove_modifier,
    tick_modifiers,
)
from srsim.sim.registry import Catalog, default_catalog
from srsim.sim.settings import EngineSettings
from srsim.sim.telemetry import (
    BattleLog,
    ModifierSnapshot,
    MutationRecord,
    TargetSnapshot,
)

logger = logging.getLogger(__name__)

# Character instance method invoked by use_ability for each action type.
_ABILITY_METHODS: dict[ActionType, str] = {
    ActionType.ATTACK: "attack",
    ActionType.SKILL: "skill",
    ActionType.ULT: "ult",
    ActionType.TECHNIQUE: "technique",
}


class Engine:
    """Runs one battle's worth of targets, modifiers and events.

    Parameters
    ----------
    catalog:
        Modifier and character templates.  Sealed on construction.
        Defaults to :data:`~srsim.sim.registry.default_catalog`.
    settings:
        Per-engine options, including the RNG seed.
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.catalog = (catalog if catalog is not None else default_catalog).seal()
        self.settings = settings or EngineSettings()
        self.rng = SimRNG(self.settings.seed)
        self.events = EventBus(strict=self.settings.strict_events)
        self.targets = TargetRegistry()
        self.log = BattleLog()
        self.turn = 0
        self.in_battle = False
        self._generations = itertools.count(1)
        self._instances: dict[int, Any] = {}

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    def add_character(
        self,
        key: str,
        *,
        level: int | None = None,
        traces: Sequence[str] | None = None,
        abilities: AbilityLevels | None = None,
        eidolon: int = 0,
        energy: float = 0.0,
        props: PropMap | None = None,
    ) -> int:
        """Create a character from its registered template.

        Parameters
        ----------
        key:
            Character template key.
        level:
            Character level; defaults to the template's maximum.
        traces:
            Trace ids to enable; ``None`` enables every unlocked trace.
        abilities:
            Ability levels handed to the kit through :class:`CharacterInfo`.
        eidolon:
            Eidolon rank handed to the kit.
        energy:
            Starting energy (saturated into ``[0, max]``).
        props:
            Extra always-on props (equipment, relics) added to the traces.

        Returns
        -------
        int
            The new target id.
        """
        config = self.catalog.characters.get(key)
        level = config.max_level if level is None else level
        enabled = list(traces) if traces is not None else None

        bonus = config.trace_props(level, enabled)
        for prop, value in (props or {}).items():
            bonus[prop] = bonus.get(prop, 0.0) + value

        target = self.targets.add(
            key,
            TargetKind.CHARACTER,
            config.base_stats(level),
            props=bonus,
            max_energy=config.max_energy,
            template=key,
            level=level,
        )
        target.energy = clamp_energy(energy, resolve(target, Attribute.MAX_ENERGY))

        info = CharacterInfo(
            key=key,
            level=level,
            ascension=config.ascension_for(level),
            traces=tuple(enabled if enabled is not None else config.traces),
            abilities=abilities or AbilityLevels(),
            eidolon=eidolon,
        )
        self.events.publish(
            EventKind.TARGET_ADDED, TargetEvent(target=target.id, kind=target.kind),
        )
        self._instances[target.id] = config.create(self, target.id, info)
        logger.debug("Character %r created as target %d (level %d)", key, target.id, level)
        return target.id

    def add_enemy(
        self,
        name: str,
        base_stats: StatBlock,
        *,
        max_energy: float = 0.0,
        energy: float = 0.0,
        props: PropMap | None = None,
    ) -> int:
        """Create an enemy from an explicit stat block.  Returns its id."""
        target = self.targets.add(
            name,
            TargetKind.ENEMY,
            base_stats,
            props=props,
            max_energy=max_energy,
        )
        target.energy = clamp_energy(energy, resolve(target, Attribute.MAX_ENERGY))
        self.events.publish(
            EventKind.TARGET_ADDED, TargetEvent(target=target.id, kind=target.kind),
        )
        return target.id

    def remove_target(self, target_id: int, reason: str = "remove_target") -> None:
        """Remove a target, its modifiers and every subscription it owns."""
        target = self.target(target_id)
        for instance in list(target.modifiers):
            remove_modifier(target, instance.key)
            self._finish_removal(target, instance, RemovalCause.OWNER_REMOVED, reason, None)
        self.events.unsubscribe_owner(target_id)
        self.targets.remove(target_id)
        self._instances.pop(target_id, None)
        self._record("remove_target", target_id, None, reason)
        self.events.publish(
            EventKind.TARGET_REMOVED, TargetEvent(target=target_id, kind=target.kind),
        )

    def target(self, target_id: int) -> Target:
        """Return the live :class:`Target` for *target_id*.

        Raises
        ------
        UnknownTargetError
            If no such target exists in this engine.
        """
        return self.targets.get(target_id)

    def characters(self) -> list[int]:
        """Character ids in insertion order."""
        return self.targets.characters()

    def enemies(self) -> list[int]:
        """Enemy ids in insertion order."""
        return self.targets.enemies()

    def char_instance(self, target_id: int) -> Any:
        """Return the ability kit object created for a character."""
        self.target(target_id)
        try:
            return self._instances[target_id]
        except KeyError:
            raise InvariantViolation(
                f"Target {target_id} has no character instance"
            ) from None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(
        self,
        kind: EventKind,
        callback: Callable[[Any], Any],
        owner: int | None = None,
    ) -> Subscription:
        """Subscribe *callback* to *kind*; see :meth:`EventBus.subscribe`."""
        if owner is not None:
            self.target(owner)
        return self.events.subscribe(kind, callback, owner)

    def unsubscribe(self, subscription: Subscription) -> bool:
        return self.events.unsubscribe(subscription)

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def add_modifier(
        self,
        target_id: int,
        spec: ModifierSpec,
        reason: str | None = None,
    ) -> ApplyOutcome:
        """Apply a registered modifier to a target.

        A request that resolves to zero turns never leaves an active
        instance; on an active modifier it ends it with ``MODIFIER_REMOVED``.

        Parameters
        ----------
        target_id:
            Target receiving the modifier.
        spec:
            The application request; ``spec.name`` must be registered.
        reason:
            Cause tag for the mutation log.  Defaults to ``spec.name``.

        Raises
        ------
        UnknownTargetError
            If *target_id* does not exist.
        UnknownModifierError
            If ``spec.name`` was never registered.
        """
        target = self.target(target_id)
        config = self.catalog.modifiers.get(spec.name)
        reason = reason or spec.name

        outcome = apply_modifier(target, spec, config, next(self._generations))
        instance = outcome.instance
        if instance is None:
            self._record(
                "add_modifier", target_id, spec.source, reason, key=spec.name,
                result=outcome.result.value,
            )
            return outcome
        self._record(
            "add_modifier", target_id, spec.source, reason, key=spec.name,
            result=outcome.result.value, duration=instance.duration, count=instance.count,
        )
        if outcome.result == ApplyResult.IGNORED:
            return outcome
        if outcome.result == ApplyResult.REMOVED:
            self._finish_removal(target, instance, RemovalCause.REMOVED, reason, spec.source)
            return outcome

        if outcome.result == ApplyResult.ADDED and config.listeners.on_add is not None:
            config.listeners.on_add(self, instance)
        self.events.publish(
            EventKind.MODIFIER_ADDED,
            self._modifier_event(
                instance, reason, refreshed=outcome.result == ApplyResult.REFRESHED,
            ),
        )
        if outcome.tick_now and config.listeners.on_tick is not None:
            config.listeners.on_tick(self, instance)
        self._clamp_energy(target, reason)
        return outcome

    def remove_modifier(
        self,
        target_id: int,
        key: str,
        reason: str | None = None,
        source: int | None = None,
    ) -> bool:
        """Remove modifier *key* from a target.  Returns False if absent."""
        target = self.target(target_id)
        self.catalog.modifiers.get(key)
        instance = remove_modifier(target, key)
        if instance is None:
            logger.debug("remove_modifier: %r not active on target %d", key, target_id)
            return False
        self._finish_removal(target, instance, RemovalCause.REMOVED, reason or key, source)
        return True

    def dispel(
        self,
        target_id: int,
        count: int,
        *,
        status: StatusType = StatusType.BUFF,
        order: DispelOrder = DispelOrder.OLDEST,
        source: int | None = None,
        reason: str = "dispel",
    ) -> list[ModifierInstance]:
        """Remove up to *count* dispellable modifiers of classification *status*.

        Buffs are dispelled by default; pass ``StatusType.DEBUFF`` to cleanse.
        The target's ``dispel_count`` grows by the number removed.
        """
        target = self.target(target_id)
        removed = dispel_modifiers(target, count, self.catalog.modifiers, status, order)
        for instance in removed:
            self._finish_removal(target, instance, RemovalCause.DISPELLED, reason, source)
            self.events.publish(
                EventKind.MODIFIER_DISPELLED,
                self._modifier_event(instance, reason, cause=RemovalCause.DISPELLED),
            )
        return removed

    def has_modifier(self, target_id: int, key: str) -> bool:
        return self.target(target_id).find_modifier(key) is not None

    def modifier(self, target_id: int, key: str) -> ModifierInstance | None:
        return self.target(target_id).find_modifier(key)

    def modifiers(
        self, target_id: int, status: StatusType | None = None,
    ) -> list[ModifierInstance]:
        """Active modifiers of a target in application order."""
        return active_modifiers(self.target(target_id), self.catalog.modifiers, status)

    def tick(self, target_id: int, moment: TickMoment = TickMoment.TURN_END) -> list[ModifierInstance]:
        """Advance the durations of a target's modifiers by one turn.

        Returns the instances that expired; each one has already been
        removed and announced with ``MODIFIER_REMOVED`` when this returns.
        """
        target = self.target(target_id)

        def _fire(instance: ModifierInstance) -> None:
            on_tick = self.catalog.modifiers.get(instance.key).listeners.on_tick
            if on_tick is not None:
                on_tick(self, instance)

        outcome = tick_modifiers(target, moment, self.catalog.modifiers, _fire)
        for instance in outcome.expired:
            self._finish_removal(
                target, instance, RemovalCause.EXPIRED, f"{instance.key}:expired", None,
            )
        return outcome.expired

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def stat(self, target_id: int, attribute: Attribute) -> float:
        """Resolve *attribute* for a target."""
        return resolve(self.target(target_id), attribute)

    def stats(self, target_id: int) -> dict[Attribute, float]:
        return resolve_all(self.target(target_id))

    def prop(self, target_id: int, prop: Prop) -> float:
        """Total delta of a single prop on a target (intrinsic plus modifiers)."""
        return prop_total(self.target(target_id), prop)

    # ------------------------------------------------------------------
    # Energy
    # ------------------------------------------------------------------

    def energy(self, target_id: int) -> float:
        return self.target(target_id).energy

    def max_energy(self, target_id: int) -> float:
        return resolve(self.target(target_id), Attribute.MAX_ENERGY)

    def modify_energy(
        self,
        target_id: int,
        amount: float,
        *,
        source: int | None = None,
        reason: str = "energy",
    ) -> float:
        """Change energy by *amount* scaled by the target's energy regen.

        Returns the target's energy afterwards.
        """
        target = self.target(target_id)
        gained = energy_gain(amount, resolve(target, Attribute.ENERGY_REGEN))
        return self._set_energy(target, target.energy + gained, source, reason, "modify_energy")

    def modify_energy_fixed(
        self,
        target_id: int,
        amount: float,
        *,
        source: int | None = None,
        reason: str = "energy",
    ) -> float:
        """Change energy by exactly *amount*, ignoring energy regen."""
        target = self.target(target_id)
        return self._set_energy(
            target, target.energy + amount, source, reason, "modify_energy_fixed",
        )

    def modify_energy_percent(
        self,
        target_id: int,
        ratio: float,
        *,
        source: int | None = None,
        reason: str = "energy",
    ) -> float:
        """Change energy by ``ratio`` of the target's resolved max energy."""
        target = self.target(target_id)
        amount = ratio * resolve(target, Attribute.MAX_ENERGY)
        return self._set_energy(
            target, target.energy + amount, source, reason, "modify_energy_percent",
        )

    def set_energy(
        self,
        target_id: int,
        value: float,
        *,
        source: int | None = None,
        reason: str = "energy",
    ) -> float:
        return self._set_energy(self.target(target_id), value, source, reason, "set_energy")

    # ------------------------------------------------------------------
    # Turn driver surface
    # ------------------------------------------------------------------

    @property
    def turn_limit_reached(self) -> bool:
        return self.turn >= self.settings.max_turns

    def start_battle(self) -> None:
        if self.in_battle:
            raise InvariantViolation("Battle already started")
        self.in_battle = True
        logger.info(
            "Battle start: %d characters, %d enemies (seed=%d)",
            len(self.characters()), len(self.enemies()), self.settings.seed,
        )
        self.events.publish(EventKind.BATTLE_START, self._battle_event())

    def end_battle(self) -> None:
        if not self.in_battle:
            raise InvariantViolation("Battle has not started")
        self.events.publish(EventKind.BATTLE_END, self._battle_event())
        self.in_battle = False
        logger.info("Battle end after %d turns", self.turn)

    def execute_action(
        self,
        actor: int,
        action_type: ActionType,
        targets: Sequence[int] = (),
        action: Callable[[ActionEvent], Any] | None = None,
    ) -> Any:
        """Run *action* between ``ACTION_START`` and ``ACTION_END``.

        The same :class:`ActionEvent` is published to both events and
        passed to *action*.  Returns whatever *action* returns.
        """
        self.target(actor)
        for target_id in targets:
            self.target(target_id)
        event = ActionEvent(
            actor=actor, action_type=action_type, targets=tuple(targets), turn=self.turn,
        )
        self.events.publish(EventKind.ACTION_START, event)
        result = action(event) if action is not None else None
        self.events.publish(EventKind.ACTION_END, event)
        return result

    def use_ability(
        self,
        actor: int,
        action_type: ActionType,
        target: int | None = None,
    ) -> Any:
        """Run a character's ``attack`` / ``skill`` / ``ult`` / ``technique``.

        The kit method is called as ``method(target, event)``.  When
        *target* is omitted the action's targets come from the template's
        targeting metadata and the first of them is passed.
        """
        instance = self.char_instance(actor)
        method_name = _ABILITY_METHODS.get(action_type)
        if method_name is None or not hasattr(instance, method_name):
            raise InvariantViolation(
                f"Target {actor} cannot perform {action_type.value}"
            )
        method = getattr(instance, method_name)

        targets = [target] if target is not None else self._default_targets(actor, action_type)
        primary = targets[0] if targets else actor
        return self.execute_action(
            actor, action_type, targets, lambda event: method(primary, event),
        )

    def run_turn(
        self,
        actor: int,
        action_type: ActionType | None = None,
        target: int | None = None,
        action: Callable[[ActionEvent], Any] | None = None,
    ) -> None:
        """Advance one turn of *actor*.

        Order: turn counter increments, turn-start ticks, ``TURN_START``,
        the action (if any), ``TURN_END``, turn-end ticks.  With *action*
        the callable runs through :meth:`execute_action`; otherwise a
        character's kit method for *action_type* runs through
        :meth:`use_ability`.
        """
        self.target(actor)
        self.turn += 1
        self.tick(actor, TickMoment.TURN_START)
        self.events.publish(EventKind.TURN_START, TurnEvent(actor=actor, turn=self.turn))

        if action is not None:
            targets = [target] if target is not None else []
            self.execute_action(actor, action_type or ActionType.ENEMY, targets, action)
        elif action_type is not None:
            self.use_ability(actor, action_type, target)

        self.events.publish(EventKind.TURN_END, TurnEvent(actor=actor, turn=self.turn))
        if actor in self.targets:
            self.tick(actor, TickMoment.TURN_END)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self, target_id: int) -> TargetSnapshot:
        target = self.target(target_id)
        return TargetSnapshot(
            target=target.id,
            name=target.name,
            kind=target.kind,
            turn=self.turn,
            energy=target.energy,
            max_energy=resolve(target, Attribute.MAX_ENERGY),
            stats=resolve_all(target),
            modifiers=tuple(
                ModifierSnapshot(m.key, m.source, m.duration, m.count, m.generation)
                for m in target.modifiers
            ),
            dispel_count=target.dispel_count,
        )

    def snapshots(self) -> list[TargetSnapshot]:
        return [self.snapshot(target_id) for target_id in self.targets.ids()]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _default_targets(self, actor: int, action_type: ActionType) -> list[int]:
        template = self.target(actor).template
        if template is None:
            return [actor]
        info = self.catalog.characters.get(template).skill_info
        action_info = {
            ActionType.ATTACK: info.attack,
            ActionType.SKILL: info.skill,
            ActionType.ULT: info.ult,
            ActionType.TECHNIQUE: info.technique,
        }.get(action_type)
        if action_info is None or action_info.target_type == TargetType.SELF:
            return [actor]
        if action_info.target_type == TargetType.ALLIES:
            return self.characters()
        return self.enemies()

    def _set_energy(
        self,
        target: Target,
        value: float,
        source: int | None,
        reason: str,
        op: str,
    ) -> float:
        previous = target.energy
        target.energy = clamp_energy(value, resolve(target, Attribute.MAX_ENERGY))
        self._record(op, target.id, source, reason, previous=previous, current=target.energy)
        if target.energy != previous:
            self.events.publish(
                EventKind.ENERGY_CHANGED,
                EnergyEvent(
                    target=target.id,
                    source=source if source is not None else target.id,
                    previous=previous,
                    current=target.energy,
                    reason=reason,
                ),
            )
        return target.energy

    def _clamp_energy(self, target: Target, reason: str) -> None:
        max_energy = resolve(target, Attribute.MAX_ENERGY)
        if target.energy > max_energy:
            self._set_energy(target, max_energy, None, reason, "clamp_energy")

    def _finish_removal(
        self,
        target: Target,
        instance: ModifierInstance,
        cause: RemovalCause,
        reason: str,
        source: int | None,
    ) -> None:
        config = self.catalog.modifiers.get(instance.key)
        self._record(
            "remove_modifier", target.id, source, reason, key=instance.key,
            cause=cause.value,
        )
        if config.listeners.on_remove is not None:
            config.listeners.on_remove(self, instance)
        self.events.publish(
            EventKind.MODIFIER_REMOVED, self._modifier_event(instance, reason, cause=cause),
        )
        if target.id in self.targets:
            self._clamp_energy(target, reason)

    def _modifier_event(
        self,
        instance: ModifierInstance,
        reason: str,
        *,
        refreshed: bool = False,
        cause: RemovalCause | None = None,
    ) -> ModifierEvent:
        return ModifierEvent(
            target=instance.owner,
            key=instance.key,
            source=instance.source,
            duration=instance.duration,
            count=instance.count,
            generation=instance.generation,
            reason=reason,
            refreshed=refreshed,
            cause=cause,
        )

    def _battle_event(self) -> BattleEvent:
        return BattleEvent(
            turn=self.turn,
            characters=tuple(self.characters()),
            enemies=tuple(self.enemies()),
        )

    def _record(
        self,
        op: str,
        target_id: int,
        source: int | None,
        reason: str,
        key: str | None = None,
        **detail: Any,
    ) -> None:
        logger.debug("%s target=%d key=%s reason=%s %s", op, target_id, key, reason, detail)
        if not self.settings.record_mutations:
            return
        self.log.append(MutationRecord(
            seq=len(self.log),
            turn=self.turn,
            op=op,
            target=target_id,
            source=source,
            reason=reason,
            key=key,
            detail=detail,
        ))
