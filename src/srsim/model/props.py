"""Attribute and property keys.

An :class:`Attribute` is a resolved stat of a target (ATK, DEF, ...).  A
:class:`Prop` is a single delta a modifier or an intrinsic bonus can
carry; every prop feeds exactly one attribute either as a flat amount
or as a percentage of the flat-adjusted total.
"""

from __future__ import annotations

from enum import Enum


class Attribute(str, Enum):
    HP = "HP"
    ATK = "ATK"
    DEF = "DEF"
    SPD = "SPD"
    CRIT_CHANCE = "CRIT_CHANCE"
    CRIT_DMG = "CRIT_DMG"
    BREAK_EFFECT = "BREAK_EFFECT"
    OUTGOING_HEALING = "OUTGOING_HEALING"
    ENERGY_REGEN = "ENERGY_REGEN"
    EFFECT_HIT_RATE = "EFFECT_HIT_RATE"
    EFFECT_RES = "EFFECT_RES"
    MAX_ENERGY = "MAX_ENERGY"
    AGGRO = "AGGRO"


class Composition(str, Enum):
    FLAT = "FLAT"
    PERCENT = "PERCENT"


class Prop(str, Enum):
    HP_FLAT = "HP_FLAT"
    HP_PERCENT = "HP_PERCENT"
    ATK_FLAT = "ATK_FLAT"
    ATK_PERCENT = "ATK_PERCENT"
    DEF_FLAT = "DEF_FLAT"
    DEF_PERCENT = "DEF_PERCENT"
    SPD_FLAT = "SPD_FLAT"
    SPD_PERCENT = "SPD_PERCENT"
    CRIT_CHANCE = "CRIT_CHANCE"
    CRIT_DMG = "CRIT_DMG"
    BREAK_EFFECT = "BREAK_EFFECT"
    HEAL_BOOST = "HEAL_BOOST"
    ENERGY_REGEN = "ENERGY_REGEN"
    EFFECT_HIT_RATE = "EFFECT_HIT_RATE"
    EFFECT_RES = "EFFECT_RES"
    MAX_ENERGY_FLAT = "MAX_ENERGY_FLAT"
    MAX_ENERGY_PERCENT = "MAX_ENERGY_PERCENT"
    AGGRO_PERCENT = "AGGRO_PERCENT"


PropMap = dict[Prop, float]
"""Mapping of prop to its (per-stack) delta."""

StatBlock = dict[Attribute, float]
"""Mapping of attribute to its base value."""


PROP_TARGETS: dict[Prop, tuple[Attribute, Composition]] = {
    Prop.HP_FLAT: (Attribute.HP, Composition.FLAT),
    Prop.HP_PERCENT: (Attribute.HP, Composition.PERCENT),
    Prop.ATK_FLAT: (Attribute.ATK, Composition.FLAT),
    Prop.ATK_PERCENT: (Attribute.ATK, Composition.PERCENT),
    Prop.DEF_FLAT: (Attribute.DEF, Composition.FLAT),
    Prop.DEF_PERCENT: (Attribute.DEF, Composition.PERCENT),
    Prop.SPD_FLAT: (Attribute.SPD, Composition.FLAT),
    Prop.SPD_PERCENT: (Attribute.SPD, Composition.PERCENT),
    Prop.CRIT_CHANCE: (Attribute.CRIT_CHANCE, Composition.FLAT),
    Prop.CRIT_DMG: (Attribute.CRIT_DMG, Composition.FLAT),
    Prop.BREAK_EFFECT: (Attribute.BREAK_EFFECT, Composition.FLAT),
    Prop.HEAL_BOOST: (Attribute.OUTGOING_HEALING, Composition.FLAT),
    Prop.ENERGY_REGEN: (Attribute.ENERGY_REGEN, Composition.FLAT),
    Prop.EFFECT_HIT_RATE: (Attribute.EFFECT_HIT_RATE, Composition.FLAT),
    Prop.EFFECT_RES: (Attribute.EFFECT_RES, Composition.FLAT),
    Prop.MAX_ENERGY_FLAT: (Attribute.MAX_ENERGY, Composition.FLAT),
    Prop.MAX_ENERGY_PERCENT: (Attribute.MAX_ENERGY, Composition.PERCENT),
    Prop.AGGRO_PERCENT: (Attribute.AGGRO, Composition.PERCENT),
}

# Attributes that can never resolve below zero.
NON_NEGATIVE_ATTRIBUTES = frozenset({
    Attribute.HP,
    Attribute.ATK,
    Attribute.DEF,
    Attribute.SPD,
    Attribute.MAX_ENERGY,
    Attribute.AGGRO,
})
