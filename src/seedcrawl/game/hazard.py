from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from ..config import HazardRules
from ..core.random import RandomStream
from ..dungeon.map import Dungeon

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

_NEIGHBOURS_8: Tuple[Coord, ...] = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


@dataclass
class HazardTrap:
    """The level's single "merge conflict" tile.

    Entering the tile the first time triggers it: the player is hurt once and a
    burning area is marked around it. Enemies standing in that area afterwards
    take burn damage every turn; the player is never hurt by it again.
    """

    x: int
    y: int
    triggered: bool = False
    affected: Set[Coord] = field(default_factory=set)

    @property
    def pos(self) -> Coord:
        return (self.x, self.y)

    def is_at(self, x: int, y: int) -> bool:
        return self.x == x and self.y == y

    def contains(self, x: int, y: int) -> bool:
        """True if (x, y) burns. Always False before the trap triggers."""
        return (x, y) in self.affected

    def distance_to(self, x: int, y: int) -> int:
        return max(abs(self.x - x), abs(self.y - y))

    def trigger(self, dungeon: Dungeon, rng: RandomStream, rules: HazardRules) -> Set[Coord]:
        """Mark the trap triggered and compute its affected area.

        The area is the square of ``rules.radius`` around the trap plus up to
        ``rules.spread`` walkable tiles bordering the wider core
        (``radius + 1`` horizontally), picked after one shuffle draw.
        Triggering twice is a no-op and draws nothing.
        """
        if self.triggered:
            return self.affected
        self.triggered = True

        r = rules.radius
        for dy in range(-r, r + 1):
            for dx in range(-r, r + 1):
                ax, ay = self.x + dx, self.y + dy
                if dungeon.in_bounds(ax, ay):
                    self.affected.add((ax, ay))

        spread = self._spread_candidates(dungeon, r)
        if spread:
            rng.shuffle(spread)
        self.affected.update(spread[: rules.spread])
        logger.debug("Hazard at (%d,%d) triggered; %d tiles affected", self.x, self.y, len(self.affected))
        return self.affected

    def _spread_candidates(self, dungeon: Dungeon, r: int) -> List[Coord]:
        core: List[Coord] = [
            (self.x + dx, self.y + dy) for dy in range(-r, r + 1) for dx in range(-(r + 1), r + 2)
        ]
        core_set = set(core)
        seen: Set[Coord] = set()
        out: List[Coord] = []
        for cx, cy in core:
            for dx, dy in _NEIGHBOURS_8:
                p = (cx + dx, cy + dy)
                if p in core_set or p in seen:
                    continue
                seen.add(p)
                if dungeon.is_walkable(*p):
                    out.append(p)
        return out


def warning_applies(hazard: Optional[HazardTrap], x: int, y: int, warning_distance: int) -> bool:
    """Proximity warning: an untriggered trap within ``warning_distance`` but not underfoot."""
    if hazard is None or hazard.triggered:
        return False
    d = hazard.distance_to(x, y)
    return 0 < d <= warning_distance
