"""Enumerations shared by modifier configs, character templates and the engine."""

from __future__ import annotations

from enum import Enum


class StatusType(str, Enum):
    """Classification of a modifier as shown on the target's status bar."""

    BUFF = "BUFF"
    DEBUFF = "DEBUFF"
    NEUTRAL = "NEUTRAL"


class StackingPolicy(str, Enum):
    """Conflict-resolution rule when a modifier is applied while one is active."""

    REPLACE = "REPLACE"
    """Overwrite duration, stats and source with the new application."""

    STACK = "STACK"
    """Add stacks up to ``max_count`` and reset duration to the default."""

    EXTEND = "EXTEND"
    """Add the new duration to the remaining one, capped at ``max_duration``."""

    IGNORE = "IGNORE"
    """Keep the active instance; the new application is a no-op."""


class TickMoment(str, Enum):
    """Which turn boundary of the owner decrements a modifier's duration."""

    TURN_START = "TURN_START"
    TURN_END = "TURN_END"


class DispelOrder(str, Enum):
    OLDEST = "OLDEST"
    NEWEST = "NEWEST"


class TargetKind(str, Enum):
    CHARACTER = "CHARACTER"
    ENEMY = "ENEMY"


class ActionType(str, Enum):
    """The kind of action a target performs during its turn."""

    ATTACK = "ATTACK"
    SKILL = "SKILL"
    ULT = "ULT"
    TECHNIQUE = "TECHNIQUE"
    ENEMY = "ENEMY"


class TargetType(str, Enum):
    """Who an action may be aimed at."""

    SELF = "SELF"
    ALLIES = "ALLIES"
    ENEMIES = "ENEMIES"


class DamageType(str, Enum):
    PHYSICAL = "PHYSICAL"
    FIRE = "FIRE"
    ICE = "ICE"
    THUNDER = "THUNDER"
    WIND = "WIND"
    QUANTUM = "QUANTUM"
    IMAGINARY = "IMAGINARY"


class Path(str, Enum):
    DESTRUCTION = "DESTRUCTION"
    HUNT = "HUNT"
    ERUDITION = "ERUDITION"
    HARMONY = "HARMONY"
    NIHILITY = "NIHILITY"
    PRESERVATION = "PRESERVATION"
    ABUNDANCE = "ABUNDANCE"
