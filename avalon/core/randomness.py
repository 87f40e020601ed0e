"""
Random source used when a game is created.
"""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class GameRandom:
    """Uniform shuffle and integer-range source, optionally seeded."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed) if seed is not None else random.Random()

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a new list holding a uniform permutation of ``items``."""
        shuffled = list(items)
        self._random.shuffle(shuffled)
        return shuffled

    def uniform_int(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]`` (both inclusive)."""
        return self._random.randint(low, high)
