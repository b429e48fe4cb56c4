"""Attribute resolution -- fold base values and modifier deltas into stats.

For a target and an attribute the resolved value is::

    (base + sum(flat deltas)) * (1 + sum(percent deltas))

floored at zero for attributes that cannot go negative.  Deltas are
summed in a fixed order: the target's intrinsic props first, then active
modifiers in application order, each modifier contributing its per-stack
stats times its stack count.  Percentages from different sources add
together before multiplying.  The result depends only on the target's
current state, so repeated reads are identical.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from srsim.model.props import (
    NON_NEGATIVE_ATTRIBUTES,
    PROP_TARGETS,
    Attribute,
    Composition,
    Prop,
)

if TYPE_CHECKING:
    from srsim.sim.core.target import Target


# Props feeding each attribute, split by composition.  Built once from
# PROP_TARGETS so resolution never scans unrelated props.
_FLAT_PROPS: dict[Attribute, tuple[Prop, ...]] = {}
_PERCENT_PROPS: dict[Attribute, tuple[Prop, ...]] = {}
for _prop, (_attr, _comp) in PROP_TARGETS.items():
    _bucket = _FLAT_PROPS if _comp == Composition.FLAT else _PERCENT_PROPS
    _bucket[_attr] = _bucket.get(_attr, ()) + (_prop,)


def prop_total(target: Target, prop: Prop) -> float:
    """Sum every delta of *prop* on *target* in resolution order."""
    total = target.props.get(prop, 0.0)
    for instance in target.modifiers:
        total += instance.contribution(prop)
    return total


def _sum_props(target: Target, props: tuple[Prop, ...]) -> float:
    total = 0.0
    for prop in props:
        total += target.props.get(prop, 0.0)
    for instance in target.modifiers:
        for prop in props:
            total += instance.contribution(prop)
    return total


def resolve(target: Target, attribute: Attribute) -> float:
    """Return the effective value of *attribute* for *target*."""
    flat = _sum_props(target, _FLAT_PROPS.get(attribute, ()))
    percent = _sum_props(target, _PERCENT_PROPS.get(attribute, ()))
    value = (target.base_value(attribute) + flat) * (1.0 + percent)
    if attribute in NON_NEGATIVE_ATTRIBUTES:
        value = max(0.0, value)
    return value


def resolve_all(target: Target) -> dict[Attribute, float]:
    """Resolve every attribute for *target*."""
    return {attribute: resolve(target, attribute) for attribute in Attribute}
