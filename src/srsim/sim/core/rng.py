"""Seeded random source handed to ability code.

The engine itself never rolls: effect-hit checks, crit rolls and random
targeting all live in ability kits, which draw from ``engine.rng``.  An
ability that rolls on its own schedule should take a named fork so its
draws cannot shift anyone else's sequence.
"""

from __future__ import annotations

import hashlib
import random


class SimRNG:
    """Reproducible random source with named, independent forks.

    Parameters
    ----------
    seed:
        Battle seed, normally ``EngineSettings.seed``.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random_float(self) -> float:
        """Draw from ``[0.0, 1.0)``."""
        return self._rng.random()

    def random_int(self, low: int, high: int) -> int:
        """Draw an integer from ``low`` to ``high`` inclusive."""
        return self._rng.randint(low, high)

    def chance(self, probability: float) -> bool:
        """Roll once against *probability*; values outside ``[0, 1]`` saturate."""
        return self._rng.random() < max(0.0, min(1.0, probability))

    def fork(self, name: str) -> SimRNG:
        """Child source keyed by this seed and *name*.

        The child depends only on the seed, never on how far this source
        has been drawn, so ``rng.fork("crit")`` is the same stream at any
        point of the battle.
        """
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        return SimRNG(int.from_bytes(digest[:8], "big"))

    def __repr__(self) -> str:
        return f"SimRNG(seed={self._seed})"
