from __future__ import annotations

import logging
from typing import List, Tuple

from ..dungeon.map import Dungeon

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]


def chebyshev_distance(ax: int, ay: int, bx: int, by: int) -> int:
    return max(abs(ax - bx), abs(ay - by))


def sample_line(x1: int, y1: int, x2: int, y2: int) -> List[Coord]:
    """
    Tiles sampled along the segment from (x1, y1) to (x2, y2), origin excluded.

    One sample per unit of Chebyshev length, interpolated and rounded half up,
    so the last sample is the target itself.
    """
    dx = x2 - x1
    dy = y2 - y1
    steps = max(abs(dx), abs(dy))
    if steps == 0:
        return []
    x_inc = dx / steps
    y_inc = dy / steps
    x, y = float(x1), float(y1)
    points: List[Coord] = []
    for _ in range(steps):
        x += x_inc
        y += y_inc
        points.append((int(x + 0.5), int(y + 0.5)))
    return points


def has_line_of_sight(dungeon: Dungeon, x1: int, y1: int, x2: int, y2: int) -> bool:
    """True when every sampled tile between the two points is walkable."""
    for x, y in sample_line(x1, y1, x2, y2):
        if not dungeon.is_walkable(x, y):
            logger.debug("LoS blocked at (%d,%d) between (%d,%d)->(%d,%d)", x, y, x1, y1, x2, y2)
            return False
    return True
