"""Tests for modifier and character templates: fields, consistency, stat curves."""

import pytest
from pydantic import ValidationError

from srsim.model import (
    PERMANENT,
    ActionInfo,
    Attribute,
    CharacterConfig,
    DamageType,
    ModifierConfig,
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
from srsim.sim.errors import RegistrationError
from srsim.sim.registry import CharacterRegistry, ModifierRegistry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _promotions() -> list[PromotionData]:
    return [
        PromotionData(max_level=20, atk_base=100.0, atk_add=5.0, def_base=50.0,
                      def_add=2.0, hp_base=200.0, hp_add=10.0, spd=100.0),
        PromotionData(max_level=40, atk_base=300.0, atk_add=5.0, def_base=150.0,
                      def_add=2.0, hp_base=600.0, hp_add=10.0, spd=100.0),
    ]


def _make_character(**kw) -> CharacterConfig:
    defaults = dict(
        create=lambda engine, target_id, info: None,
        rarity=5,
        element=DamageType.ICE,
        path=Path.HARMONY,
        max_energy=110,
        promotions=_promotions(),
        skill_info=SkillInfo(
            attack=ActionInfo(target_type=TargetType.ENEMIES),
            skill=ActionInfo(target_type=TargetType.ALLIES),
            ult=ActionInfo(target_type=TargetType.ALLIES),
        ),
    )
    defaults.update(kw)
    return CharacterConfig(**defaults)


def _modifier(**kw) -> ModifierConfig:
    defaults = dict(stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF)
    defaults.update(kw)
    return ModifierConfig(**defaults)


def _register(config: ModifierConfig) -> None:
    ModifierRegistry().register("mod", config)


# ---------------------------------------------------------------------------
# ModifierConfig
# ---------------------------------------------------------------------------

class TestModifierConfig:
    def test_defaults(self):
        config = ModifierConfig(stacking=StackingPolicy.REPLACE, status_type=StatusType.BUFF)

        assert config.duration == PERMANENT
        assert config.is_permanent
        assert config.dispellable
        assert config.tick_moment == TickMoment.TURN_END
        assert not config.tick_immediately

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            ModifierConfig(stacking=StackingPolicy.REPLACE, duration=2)

    def test_consistent_config_has_no_errors(self):
        assert _modifier(duration=2).consistency_errors() == []

    def test_zero_duration_rejected(self):
        with pytest.raises(RegistrationError, match="duration"):
            _register(_modifier(duration=0))

    def test_negative_duration_other_than_permanent_rejected(self):
        with pytest.raises(RegistrationError, match="duration"):
            _register(_modifier(duration=-3))

    def test_stack_requires_max_count(self):
        config = _modifier(stacking=StackingPolicy.STACK, duration=2)

        with pytest.raises(RegistrationError, match="max_count"):
            _register(config)

    def test_stack_with_max_count(self):
        config = _modifier(stacking=StackingPolicy.STACK, duration=2, max_count=3)

        _register(config)
        assert config.max_count == 3

    def test_duration_above_max_duration_rejected(self):
        config = _modifier(stacking=StackingPolicy.EXTEND, duration=6, max_duration=5)

        with pytest.raises(RegistrationError, match="max_duration"):
            _register(config)

    def test_permanent_duration_ignores_max_duration(self):
        config = _modifier(stacking=StackingPolicy.EXTEND, max_duration=5)

        assert config.consistency_errors() == []

    def test_every_problem_reported(self):
        config = _modifier(stacking=StackingPolicy.STACK, duration=0, max_duration=0)

        assert len(config.consistency_errors()) == 3

    def test_cap_duration(self):
        config = _modifier(stacking=StackingPolicy.EXTEND, duration=2, max_duration=5)

        assert config.cap_duration(9) == 5
        assert config.cap_duration(3) == 3
        assert config.cap_duration(PERMANENT) == PERMANENT

    def test_config_is_frozen(self):
        config = ModifierConfig(stacking=StackingPolicy.IGNORE, status_type=StatusType.DEBUFF)
        with pytest.raises(ValidationError):
            config.duration = 5


# ---------------------------------------------------------------------------
# CharacterConfig
# ---------------------------------------------------------------------------

class TestCharacterConfig:
    def test_requires_promotions(self):
        with pytest.raises(RegistrationError, match="promotion"):
            CharacterRegistry().register("hero", _make_character(promotions=[]))

    def test_unsorted_promotions_rejected(self):
        config = _make_character(promotions=list(reversed(_promotions())))

        with pytest.raises(RegistrationError, match="sorted"):
            CharacterRegistry().register("hero", config)

    def test_negative_max_energy_rejected(self):
        assert _make_character(max_energy=-1).consistency_errors() == [
            "max_energy must be >= 0, got -1.0",
        ]

    def test_base_stats_first_bracket(self):
        stats = _make_character().base_stats(11)

        assert stats[Attribute.ATK] == pytest.approx(150.0)
        assert stats[Attribute.DEF] == pytest.approx(70.0)
        assert stats[Attribute.HP] == pytest.approx(300.0)
        assert stats[Attribute.SPD] == 100.0

    def test_base_stats_second_bracket(self):
        config = _make_character()
        assert config.ascension_for(21) == 1
        assert config.base_stats(21)[Attribute.ATK] == pytest.approx(400.0)

    def test_level_out_of_range(self):
        with pytest.raises(ValueError):
            _make_character().base_stats(41)

    def test_trace_props_respect_ascension(self):
        config = _make_character(traces={
            "early": Trace(ascension=0, stats={Prop.ATK_PERCENT: 0.04}),
            "late": Trace(ascension=1, stats={Prop.ATK_PERCENT: 0.06}),
        })

        assert config.trace_props(10) == {Prop.ATK_PERCENT: pytest.approx(0.04)}
        assert config.trace_props(30) == {Prop.ATK_PERCENT: pytest.approx(0.10)}

    def test_trace_props_enabled_subset(self):
        config = _make_character(traces={
            "a": Trace(stats={Prop.CRIT_CHANCE: 0.02}),
            "b": Trace(stats={Prop.CRIT_CHANCE: 0.03}),
        })

        assert config.trace_props(40, ["b"]) == {Prop.CRIT_CHANCE: pytest.approx(0.03)}
