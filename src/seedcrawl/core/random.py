from __future__ import annotations

import logging
import random
from typing import Any, List, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SEED_MASK = 0xFFFF_FFFF_FFFF_FFFF


class RandomStream:
    """
    The single seeded source of randomness for a run.

    - wraps one random.Random so a given integer seed replays the same draws
      on every platform
    - exposes only the draw shapes the game needs (float, bounded int, shuffle)
    - every draw is counted, which makes consumption-order regressions visible in tests

    Sessions own their stream; nothing in the package creates a second one.
    """

    def __init__(self, seed: int) -> None:
        if not isinstance(seed, int):
            raise TypeError("RandomStream seed must be an int, got %r" % (type(seed),))
        self.seed = seed
        # random.Random seeds from abs(); the two's-complement image keeps s and -s apart.
        self._rng = random.Random(seed & _SEED_MASK)
        self.draws = 0
        logger.debug("Initialized RandomStream with seed=%d", seed)

    def random(self) -> float:
        """Float draw in [0, 1)."""
        self.draws += 1
        return self._rng.random()

    def intn(self, n: int) -> int:
        """Integer draw in [0, n). ``n`` must be positive."""
        if n <= 0:
            raise ValueError(f"intn() requires a positive bound, got {n}")
        self.draws += 1
        return self._rng.randrange(n)

    def shuffle(self, items: List[T]) -> None:
        self.draws += 1
        self._rng.shuffle(items)

    def weighted_choice(self, table: Sequence[Tuple[Any, float]]) -> Any:
        """
        Select a key from an ordered sequence of (key, weight) pairs.

        Order matters: a single float draw is compared against cumulative weights,
        so reordering the table changes which key a given draw selects.
        """
        if not table:
            raise ValueError("weighted_choice requires a non-empty table")

        keys: List[Any] = []
        cumulative: List[float] = []
        total = 0.0
        for k, w in table:
            if w < 0:
                raise ValueError(f"Weight for {k!r} must be non-negative, got {w}")
            if w == 0:
                continue
            total += w
            keys.append(k)
            cumulative.append(total)

        if total == 0:
            raise ValueError("All weights are zero; cannot make a weighted choice")

        r = self.random() * total
        for i, c in enumerate(cumulative):
            if r <= c:
                return keys[i]
        # Rounding on the last bucket
        return keys[-1]


__all__ = ["RandomStream"]
