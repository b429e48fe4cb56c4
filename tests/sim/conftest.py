"""Shared fixtures for simulation tests: a sample catalog, a healer kit, engines."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from srsim.model import (
    PERMANENT,
    ActionInfo,
    Attribute,
    CharacterConfig,
    CharacterInfo,
    DamageType,
    ModifierConfig,
    ModifierListeners,
    ModifierSpec,
    Path,
    PromotionData,
    Prop,
    SkillInfo,
    StackingPolicy,
    StatusType,
    TargetType,
    TickMoment,
    Trace,
)
from srsim.sim.engine import Engine
from srsim.sim.events import ActionEvent, EventKind
from srsim.sim.registry import Catalog
from srsim.sim.settings import EngineSettings

# ---------------------------------------------------------------------------
# Sample healer kit
# ---------------------------------------------------------------------------

HEALER_ULT_BUFF = "healer-ult"
HEALER_TALENT = "healer-talent"

ULT_ENERGY = [0.20] * 15
ULT_ATTACK = [0.20, 0.21, 0.22, 0.23, 0.24, 0.25, 0.26, 0.27, 0.28, 0.29,
              0.30, 0.31, 0.32, 0.33, 0.34]

_PROMOTIONS = [
    PromotionData(max_level=20, atk_base=81.0, atk_add=4.0, def_base=69.0, def_add=3.4,
                  hp_base=184.0, hp_add=9.2, spd=98.0),
    PromotionData(max_level=80, atk_base=601.0, atk_add=0.0, def_base=509.0, def_add=0.0,
                  hp_base=1358.0, hp_add=0.0, spd=98.0),
]


class HealerKit:
    """Ult: grant 20% of max energy to every other ally and an ATK% buff.

    Talent: whenever an ally starts an action, cleanse one debuff from it.
    """

    def __init__(self, engine: Engine, target_id: int, info: CharacterInfo) -> None:
        self.engine = engine
        self.id = target_id
        self.info = info
        self.cleansed = 0
        engine.subscribe(EventKind.ACTION_START, self.talent_action_start, owner=target_id)

    def talent_action_start(self, event: ActionEvent) -> None:
        if event.actor not in self.engine.characters():
            return
        removed = self.engine.dispel(
            event.actor, 1, status=StatusType.DEBUFF, source=self.id, reason=HEALER_TALENT,
        )
        self.cleansed += len(removed)

    def attack(self, target: int, event: ActionEvent) -> None:
        pass

    def skill(self, target: int, event: ActionEvent) -> None:
        pass

    def ult(self, target: int, event: ActionEvent) -> None:
        idx = self.info.ult_level_index()
        for ally in self.engine.characters():
            if ally == self.id:
                continue
            self.engine.modify_energy_fixed(
                ally,
                self.engine.max_energy(ally) * ULT_ENERGY[idx],
                source=self.id,
                reason=HEALER_ULT_BUFF,
            )
            self.engine.add_modifier(ally, ModifierSpec(
                name=HEALER_ULT_BUFF,
                source=self.id,
                tick_immediately=False,
                stats={Prop.ATK_PERCENT: ULT_ATTACK[idx]},
            ))


class PlainKit:
    def __init__(self, engine: Engine, target_id: int, info: CharacterInfo) -> None:
        self.engine = engine
        self.id = target_id
        self.info = info

    def attack(self, target: int, event: ActionEvent) -> None:
        pass

    def skill(self, target: int, event: ActionEvent) -> None:
        pass

    def ult(self, target: int, event: ActionEvent) -> None:
        pass


def _skill_info(ult_target: TargetType) -> SkillInfo:
    return SkillInfo(
        attack=ActionInfo(target_type=TargetType.ENEMIES, sp_add=1),
        skill=ActionInfo(target_type=TargetType.ALLIES, sp_need=1, is_attack=False),
        ult=ActionInfo(target_type=ult_target, is_attack=False),
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

def _energy_tick(engine: Engine, instance: Any) -> None:
    engine.modify_energy_fixed(instance.owner, 5.0, source=instance.source, reason=instance.key)


def build_catalog() -> Catalog:
    """Catalog used across the simulation tests."""
    catalog = Catalog()
    mods = catalog.modifiers

    mods.register("atk-flat", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=2))
    mods.register("atk-pct", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=2))
    mods.register("stack-buff", ModifierConfig(
        stacking=StackingPolicy.STACK, status_type=StatusType.BUFF, duration=3, max_count=3))
    mods.register("extend-buff", ModifierConfig(
        stacking=StackingPolicy.EXTEND, status_type=StatusType.BUFF, duration=2, max_duration=5))
    mods.register("ignore-buff", ModifierConfig(
        stacking=StackingPolicy.IGNORE, status_type=StatusType.BUFF, duration=2))
    mods.register("perm-buff", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=PERMANENT))
    mods.register("buff-a", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=3))
    mods.register("buff-b", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=3))
    mods.register("buff-c", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=3))
    mods.register("sealed-buff", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=3,
        dispellable=False))
    mods.register("def-down", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.DEBUFF, duration=2))
    mods.register("max-energy-up", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=1))
    mods.register("energy-regen", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=2,
        listeners=ModifierListeners(on_tick=_energy_tick)))
    mods.register("energy-regen-now", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=2,
        tick_immediately=True, listeners=ModifierListeners(on_tick=_energy_tick)))
    mods.register("start-tick", ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.NEUTRAL, duration=1,
        tick_moment=TickMoment.TURN_START))
    mods.register(HEALER_ULT_BUFF, ModifierConfig(
        stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF, duration=2))

    catalog.characters.register("healer", CharacterConfig(
        create=HealerKit,
        rarity=5,
        element=DamageType.WIND,
        path=Path.ABUNDANCE,
        max_energy=140,
        promotions=_PROMOTIONS,
        traces={
            "hp-1": Trace(ascension=0, stats={Prop.HP_PERCENT: 0.04}),
            "spd-1": Trace(ascension=1, stats={Prop.SPD_FLAT: 2.0}),
        },
        skill_info=_skill_info(TargetType.ALLIES),
    ))
    catalog.characters.register("plain", CharacterConfig(
        create=PlainKit,
        rarity=4,
        element=DamageType.FIRE,
        path=Path.DESTRUCTION,
        max_energy=120,
        promotions=_PROMOTIONS,
        skill_info=_skill_info(TargetType.ENEMIES),
    ))
    return catalog


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def catalog() -> Catalog:
    """Module-scoped catalog, sealed by the first engine that uses it."""
    return build_catalog()


@pytest.fixture
def engine(catalog: Catalog) -> Engine:
    return Engine(catalog, EngineSettings(seed=1))


@pytest.fixture
def make_enemy(engine: Engine) -> Callable[..., int]:
    """Factory adding an enemy with the given stats to ``engine``."""

    def _make(name: str = "Dummy", **stats: float) -> int:
        max_energy = stats.pop("max_energy", 100.0)
        defaults = {Attribute.HP: 1000.0, Attribute.ATK: 1000.0, Attribute.DEF: 500.0}
        for key, value in stats.items():
            defaults[Attribute[key.upper()]] = value
        return engine.add_enemy(name, defaults, max_energy=max_energy)

    return _make


@pytest.fixture
def catalog_factory() -> Callable[[], Catalog]:
    return build_catalog
