"""Static definitions for the simulation core.

Everything in this package is immutable configuration: enumerations,
attribute/property keys, modifier templates and character templates.
All templates are Pydantic models so malformed definitions are rejected
when a module registers them at startup.
"""

from .characters import (
    AbilityLevels,
    ActionInfo,
    CharacterConfig,
    CharacterInfo,
    PromotionData,
    SkillInfo,
    Trace,
)
from .enums import (
    ActionType,
    DamageType,
    DispelOrder,
    Path,
    StackingPolicy,
    StatusType,
    TargetKind,
    TargetType,
    TickMoment,
)
from .modifiers import PERMANENT, ModifierConfig, ModifierListeners, ModifierSpec
from .props import (
    NON_NEGATIVE_ATTRIBUTES,
    PROP_TARGETS,
    Attribute,
    Composition,
    Prop,
    PropMap,
    StatBlock,
)

__all__ = [
    # characters
    "AbilityLevels",
    "ActionInfo",
    "CharacterConfig",
    "CharacterInfo",
    "PromotionData",
    "SkillInfo",
    "Trace",
    # enums
    "ActionType",
    "DamageType",
    "DispelOrder",
    "Path",
    "StackingPolicy",
    "StatusType",
    "TargetKind",
    "TargetType",
    "TickMoment",
    # modifiers
    "PERMANENT",
    "ModifierConfig",
    "ModifierListeners",
    "ModifierSpec",
    # props
    "NON_NEGATIVE_ATTRIBUTES",
    "PROP_TARGETS",
    "Attribute",
    "Composition",
    "Prop",
    "PropMap",
    "StatBlock",
]
