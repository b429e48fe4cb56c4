"""End-to-end test of a support ult: energy grant plus a timed team ATK buff."""

import pytest

from srsim.model import ActionType, Attribute
from srsim.sim.events import EventKind

HEALER_ULT_BUFF = "healer-ult"


@pytest.fixture
def party(engine, make_enemy):
    """Healer ults for a second healer (MaxEnergy 140) and a plain ally (120)."""
    healer = engine.add_character("healer")
    other_healer = engine.add_character("healer")
    plain = engine.add_character("plain")
    foe = make_enemy()
    return healer, other_healer, plain, foe


class TestHealerUlt:
    def test_energy_grant_is_fraction_of_max(self, engine, party):
        healer, other_healer, plain, _ = party

        engine.use_ability(healer, ActionType.ULT)

        assert engine.energy(other_healer) == pytest.approx(28.0)
        assert engine.energy(plain) == pytest.approx(24.0)
        assert engine.energy(healer) == 0.0

    def test_energy_grant_saturates(self, engine, party):
        healer, other_healer, _, _ = party
        engine.set_energy(other_healer, 130.0)

        engine.use_ability(healer, ActionType.ULT)

        assert engine.energy(other_healer) == 140.0

    def test_attack_buff_only_on_other_allies(self, engine, party):
        healer, other_healer, plain, foe = party

        engine.use_ability(healer, ActionType.ULT)

        assert engine.stat(other_healer, Attribute.ATK) == pytest.approx(601.0 * 1.2)
        assert engine.stat(plain, Attribute.ATK) == pytest.approx(601.0 * 1.2)
        assert engine.stat(healer, Attribute.ATK) == pytest.approx(601.0)
        assert not engine.has_modifier(foe, HEALER_ULT_BUFF)

    def test_buff_expires_after_two_owner_turns(self, engine, party):
        healer, _, plain, _ = party
        engine.use_ability(healer, ActionType.ULT)

        engine.run_turn(plain)
        assert engine.has_modifier(plain, HEALER_ULT_BUFF)

        engine.run_turn(plain)
        assert not engine.has_modifier(plain, HEALER_ULT_BUFF)
        assert engine.stat(plain, Attribute.ATK) == pytest.approx(601.0)

    def test_second_ult_refreshes(self, engine, party):
        healer, _, plain, _ = party
        engine.use_ability(healer, ActionType.ULT)
        engine.run_turn(plain)
        engine.use_ability(healer, ActionType.ULT)

        instance = engine.modifier(plain, HEALER_ULT_BUFF)
        assert instance.duration == 2
        assert engine.stat(plain, Attribute.ATK) == pytest.approx(601.0 * 1.2)

    def test_events_carry_the_ult_reason(self, engine, party):
        healer, other_healer, plain, _ = party
        changes = []
        engine.subscribe(EventKind.ENERGY_CHANGED, changes.append)

        engine.use_ability(healer, ActionType.ULT)

        assert [(e.target, e.source, e.reason) for e in changes] == [
            (other_healer, healer, HEALER_ULT_BUFF),
            (plain, healer, HEALER_ULT_BUFF),
        ]
