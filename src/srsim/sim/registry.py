"""Startup-time catalogs of modifier and character templates.

Ability modules register their templates once, while the process starts.
A :class:`Catalog` bundles both registries and is sealed before the first
engine uses it; after that it is read-only, so any number of engines can
share it without interfering.

Usage::

    catalog = Catalog()
    catalog.modifiers.register("huohuo-ult", ModifierConfig(...))
    catalog.characters.register("huohuo", CharacterConfig(...))
    engine = Engine(catalog)        # seals the catalog

Modules that register at import time can use :func:`register_modifier`
and :func:`register_character`, which write to :data:`default_catalog`.
"""

from __future__ import annotations

import logging
from typing import Generic, Iterator, TypeVar

from srsim.model.characters import CharacterConfig
from srsim.model.modifiers import ModifierConfig
from srsim.sim.errors import (
    RegistrationError,
    UnknownCharacterError,
    UnknownModifierError,
)

logger = logging.getLogger(__name__)

C = TypeVar("C")


class _Registry(Generic[C]):
    """Write-once, read-many mapping of key to template."""

    kind = "template"
    config_type: type = object

    def __init__(self) -> None:
        self._configs: dict[str, C] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True

    def register(self, key: str, config: C) -> None:
        """Register *config* under *key*.

        Raises
        ------
        RegistrationError
            If the registry is sealed, the key is empty or already taken,
            *config* is not the expected template type, or its fields
            contradict each other.
        """
        if self._sealed:
            raise RegistrationError(
                f"Cannot register {self.kind} {key!r}: registry is sealed"
            )
        if not key:
            raise RegistrationError(f"{self.kind} key must be a non-empty string")
        if not isinstance(config, self.config_type):
            raise RegistrationError(
                f"{self.kind} {key!r} must be registered with a "
                f"{self.config_type.__name__}, got {type(config).__name__}"
            )
        errors = config.consistency_errors()
        if errors:
            raise RegistrationError(
                f"{self.kind} {key!r} is inconsistent: " + "; ".join(errors)
            )
        if key in self._configs:
            raise RegistrationError(f"{self.kind} {key!r} already registered")
        self._configs[key] = config
        logger.debug("Registered %s %r", self.kind, key)

    def get(self, key: str) -> C:
        try:
            return self._configs[key]
        except KeyError:
            raise self._unknown(key) from None

    def has(self, key: str) -> bool:
        return key in self._configs

    def keys(self) -> list[str]:
        return list(self._configs)

    def _unknown(self, key: str) -> Exception:
        return KeyError(key)

    def __contains__(self, key: object) -> bool:
        return key in self._configs

    def __iter__(self) -> Iterator[str]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)


class ModifierRegistry(_Registry[ModifierConfig]):
    kind = "modifier"
    config_type = ModifierConfig

    def _unknown(self, key: str) -> Exception:
        return UnknownModifierError(key)


class CharacterRegistry(_Registry[CharacterConfig]):
    kind = "character"
    config_type = CharacterConfig

    def _unknown(self, key: str) -> Exception:
        return UnknownCharacterError(key)


class Catalog:
    """Modifier and character registries populated during initialisation."""

    def __init__(self) -> None:
        self.modifiers = ModifierRegistry()
        self.characters = CharacterRegistry()

    @property
    def sealed(self) -> bool:
        return self.modifiers.sealed and self.characters.sealed

    def seal(self) -> Catalog:
        """Freeze both registries.  Returns ``self`` for chaining."""
        if not self.sealed:
            self.modifiers.seal()
            self.characters.seal()
            logger.info(
                "Sealed catalog with %d modifiers and %d characters",
                len(self.modifiers), len(self.characters),
            )
        return self

    def __repr__(self) -> str:
        return (
            f"Catalog(modifiers={len(self.modifiers)}, "
            f"characters={len(self.characters)}, sealed={self.sealed})"
        )


default_catalog = Catalog()


def register_modifier(key: str, config: ModifierConfig) -> None:
    default_catalog.modifiers.register(key, config)


def register_character(key: str, config: CharacterConfig) -> None:
    default_catalog.characters.register(key, config)
