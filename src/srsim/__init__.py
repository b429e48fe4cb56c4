"""srsim -- deterministic turn-based combat simulation core."""

__version__ = "0.1.0"
