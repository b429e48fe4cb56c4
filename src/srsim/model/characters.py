"""Character templates -- rarity, element, path, promotion and trace data.

Templates are registered once per character module and describe how to
build the character's base stat block at a given level plus the factory
that instantiates its ability kit against an engine.
"""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, Field

from .enums import DamageType, Path, TargetType
from .props import Attribute, PropMap, StatBlock


class PromotionData(BaseModel):
    """Stat curve for one ascension bracket (levels up to ``max_level``)."""

    model_config = {"frozen": True}

    max_level: int
    atk_base: float
    atk_add: float
    def_base: float
    def_add: float
    hp_base: float
    hp_add: float
    spd: float
    crit_chance: float = 0.05
    crit_dmg: float = 0.5
    aggro: float = 100.0


class Trace(BaseModel):
    """A passive stat node unlocked at ``ascension``."""

    model_config = {"frozen": True}

    ascension: int = 0
    stats: PropMap = Field(default_factory=dict)


class ActionInfo(BaseModel):
    """Targeting and skill-point metadata for one action of a kit."""

    model_config = {"frozen": True}

    target_type: TargetType
    sp_add: int = 0
    sp_need: int = 0
    is_attack: bool = True


class SkillInfo(BaseModel):
    model_config = {"frozen": True}

    attack: ActionInfo
    skill: ActionInfo
    ult: ActionInfo
    technique: ActionInfo | None = None


class CharacterConfig(BaseModel):
    """Registered template for a playable character."""

    model_config = {"frozen": True}

    create: Callable[..., Any]
    """``create(engine, target_id, info) -> instance`` builds the ability kit."""

    rarity: int
    element: DamageType
    path: Path
    max_energy: float
    promotions: list[PromotionData]
    traces: dict[str, Trace] = Field(default_factory=dict)
    skill_info: SkillInfo

    def consistency_errors(self) -> list[str]:
        """Return the reasons this template cannot be registered, if any."""
        errors: list[str] = []
        if not self.promotions:
            errors.append("character config requires at least one promotion")
        levels = [p.max_level for p in self.promotions]
        if levels != sorted(levels):
            errors.append(f"promotions must be sorted by max_level, got {levels}")
        if self.max_energy < 0:
            errors.append(f"max_energy must be >= 0, got {self.max_energy}")
        return errors

    @property
    def max_level(self) -> int:
        return self.promotions[-1].max_level

    def ascension_for(self, level: int) -> int:
        """Return the promotion index that covers *level*."""
        if level < 1 or level > self.max_level:
            raise ValueError(f"level must be in [1, {self.max_level}], got {level}")
        for idx, promo in enumerate(self.promotions):
            if level <= promo.max_level:
                return idx
        return len(self.promotions) - 1

    def base_stats(self, level: int) -> StatBlock:
        """Compute the base stat block for *level*.

        Each linear stat grows as ``base + add * (level - 1)`` within the
        promotion bracket that covers the level.
        """
        promo = self.promotions[self.ascension_for(level)]
        steps = level - 1
        return {
            Attribute.HP: promo.hp_base + promo.hp_add * steps,
            Attribute.ATK: promo.atk_base + promo.atk_add * steps,
            Attribute.DEF: promo.def_base + promo.def_add * steps,
            Attribute.SPD: promo.spd,
            Attribute.CRIT_CHANCE: promo.crit_chance,
            Attribute.CRIT_DMG: promo.crit_dmg,
            Attribute.AGGRO: promo.aggro,
        }

    def trace_props(self, level: int, enabled: list[str] | None = None) -> PropMap:
        """Sum the stats of every trace unlocked at *level*.

        Parameters
        ----------
        level:
            Character level; only traces whose ascension requirement is met
            are included.
        enabled:
            Trace ids to consider.  ``None`` means every trace.
        """
        ascension = self.ascension_for(level)
        total: PropMap = {}
        for trace_id, trace in self.traces.items():
            if enabled is not None and trace_id not in enabled:
                continue
            if trace.ascension > ascension:
                continue
            for prop, value in trace.stats.items():
                total[prop] = total.get(prop, 0.0) + value
        return total


class AbilityLevels(BaseModel):
    """Levels of a character's four abilities (1-based)."""

    model_config = {"frozen": True}

    attack: int = Field(default=1, ge=1)
    skill: int = Field(default=1, ge=1)
    ult: int = Field(default=1, ge=1)
    talent: int = Field(default=1, ge=1)


class CharacterInfo(BaseModel):
    """Build of one character instance, handed to the template's ``create``."""

    model_config = {"frozen": True}

    key: str
    level: int
    ascension: int
    traces: tuple[str, ...] = ()
    abilities: AbilityLevels = Field(default_factory=AbilityLevels)
    eidolon: int = Field(default=0, ge=0, le=6)

    def attack_level_index(self) -> int:
        return self.abilities.attack - 1

    def skill_level_index(self) -> int:
        return self.abilities.skill - 1

    def ult_level_index(self) -> int:
        return self.abilities.ult - 1

    def talent_level_index(self) -> int:
        return self.abilities.talent - 1
