"""Error taxonomy for the simulation core.

Configuration errors surface while registries are populated and must stop
the process before any battle starts.  Invariant violations are
programming errors in ability code; they are raised to the caller of the
offending operation and never swallowed by the engine.  Bounds conditions
(energy above max, negative durations) are clamped and are not errors.
"""

from __future__ import annotations


class SimError(Exception):
    """Base class for every error raised by the simulation core."""


class RegistrationError(SimError, ValueError):
    """Duplicate key, registration after seal, or an inconsistent template."""


class InvariantViolation(SimError, RuntimeError):
    """A runtime operation referenced state that cannot exist."""


class UnknownTargetError(InvariantViolation, KeyError):
    def __init__(self, target_id: int) -> None:
        self.target_id = target_id
        super().__init__(f"Unknown target id {target_id!r}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownModifierError(InvariantViolation, KeyError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Modifier {key!r} is not registered")

    def __str__(self) -> str:
        return self.args[0]


class UnknownCharacterError(InvariantViolation, KeyError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Character {key!r} is not registered")

    def __str__(self) -> str:
        return self.args[0]


class EventPayloadError(InvariantViolation, TypeError):
    """A payload of the wrong type was published for an event kind."""
