from __future__ import annotations

import logging
import random
from typing import Optional, Sequence, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

VARIANCE_MIN = -2
VARIANCE_MAX = 2


class RandomOracle:
    """
    Single source of randomness for the engine.

    Every probabilistic rule (miss, crit, variance, boss AI, map/event picks)
    draws through one of these three methods, so a run can be made fully
    deterministic by seeding it or by handing the engine a subclass that
    answers from a fixed script.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Uniform real in [0, 1)."""
        return self._rng.random()

    def randint(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi], both inclusive."""
        return self._rng.randint(lo, hi)

    def choice(self, options: Sequence[T]) -> T:
        return options[self.randint(0, len(options) - 1)]


def roll_variance(rng: RandomOracle) -> int:
    v = rng.randint(VARIANCE_MIN, VARIANCE_MAX)
    logger.debug("variance roll=%s", v)
    return v


def roll_check(rng: RandomOracle, chance: float, label: str = "") -> bool:
    """True when a uniform draw lands below `chance`."""
    r = rng.random()
    hit = r < chance
    logger.debug("check %s: roll=%.4f chance=%.2f -> %s", label or "?", r, chance, hit)
    return hit
