"""Engine systems: deterministic RNG."""

from arpg.systems.rng import DeterministicRNG, RandomSource

__all__ = ["DeterministicRNG", "RandomSource"]
