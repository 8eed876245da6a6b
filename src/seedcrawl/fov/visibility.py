from __future__ import annotations

import logging
import math
from enum import Enum
from typing import List, Tuple

from ..dungeon.map import Dungeon
from ..dungeon.tiles import is_opaque_tile

logger = logging.getLogger(__name__)


VISION_RADIUS = 7
# One ray every RAY_STEP_DEGREES around the full circle.
RAY_STEP_DEGREES = 2


class FogTileState(str, Enum):
    UNSEEN = "unseen"         # never seen; fully dark
    SEEN = "seen"             # seen before but not currently visible; dim
    VISIBLE = "visible"       # currently visible; full brightness


class VisibilityMap:
    """
    Fog of war for one dungeon.

    - ``visible[y][x]`` is what the observer sees right now; it is cleared on
      every :func:`compute_visibility` call.
    - ``explored[y][x]`` only ever gains tiles. A new level gets a new map.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("VisibilityMap width/height must be > 0")
        self.width = width
        self.height = height
        self.visible: List[List[bool]] = [[False] * width for _ in range(height)]
        self.explored: List[List[bool]] = [[False] * width for _ in range(height)]

    @classmethod
    def for_dungeon(cls, dungeon: Dungeon) -> "VisibilityMap":
        return cls(dungeon.width, dungeon.height)

    def clear_visible(self) -> None:
        for row in self.visible:
            for x in range(self.width):
                row[x] = False

    def mark(self, x: int, y: int) -> None:
        self.visible[y][x] = True
        self.explored[y][x] = True

    def is_visible(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and self.visible[y][x]

    def is_explored(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and self.explored[y][x]

    def get_state(self, x: int, y: int) -> FogTileState:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError("Tile out of bounds")
        if self.visible[y][x]:
            return FogTileState.VISIBLE
        if self.explored[y][x]:
            return FogTileState.SEEN
        return FogTileState.UNSEEN

    def snapshot(self) -> Tuple[Tuple[Tuple[bool, ...], ...], Tuple[Tuple[bool, ...], ...]]:
        return (
            tuple(tuple(row) for row in self.visible),
            tuple(tuple(row) for row in self.explored),
        )


def _cast_ray(dungeon: Dungeon, vis: VisibilityMap, ox: int, oy: int, angle: int, radius: int) -> None:
    rad = math.radians(angle)
    dx = math.cos(rad)
    dy = math.sin(rad)
    x = float(ox)
    y = float(oy)
    for _ in range(radius + 1):
        ix, iy = int(x + 0.5), int(y + 0.5)
        if not dungeon.in_bounds(ix, iy):
            break
        vis.mark(ix, iy)
        if is_opaque_tile(dungeon.tiles[iy][ix]):
            # The wall is seen; what is behind it is not.
            break
        x += dx
        y += dy


def compute_visibility(
    dungeon: Dungeon,
    ox: int,
    oy: int,
    visibility: VisibilityMap,
    radius: int = VISION_RADIUS,
) -> VisibilityMap:
    """
    Recompute what an observer at (ox, oy) sees and add it to the explored memory.

    Rays are walked in unit steps, so this is an approximate radial field of
    view; light slipping diagonally between two wall corners is expected.
    Returns ``visibility`` for convenience; it is updated in place.
    """
    if radius < 0:
        raise ValueError("radius must be >= 0")
    visibility.clear_visible()
    for angle in range(0, 360, RAY_STEP_DEGREES):
        _cast_ray(dungeon, visibility, ox, oy, angle, radius)
    logger.debug("Visibility from (%d,%d) radius %d", ox, oy, radius)
    return visibility
