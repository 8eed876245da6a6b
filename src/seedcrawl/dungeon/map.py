from __future__ import annotations

import hashlib
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .tiles import TILE_CHARS, Tile, is_walkable_tile

logger = logging.getLogger(__name__)

Point = Tuple[int, int]


@dataclass(frozen=True)
class Room:
    x: int
    y: int
    w: int
    h: int

    def center(self) -> Point:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.x + self.w and self.y <= y < self.y + self.h

    def contains_interior(self, x: int, y: int) -> bool:
        """True when (x, y) lies inside the room with a one-tile margin."""
        return self.x + 1 <= x < self.x + self.w - 1 and self.y + 1 <= y < self.y + self.h - 1


class Dungeon:
    """
    The tile grid of one level plus the rooms it was carved from.

    All reads go through bounds-checked helpers: out-of-bounds coordinates are
    never walkable and never raise from the query methods. ``set`` is the only
    writer and refuses out-of-bounds writes loudly, since generation never
    targets cells outside the grid.

    ``background`` is an opaque reference handed in by the caller (the source
    file shown behind the map); the core never looks inside it.
    """

    def __init__(
        self,
        width: int,
        height: int,
        default: Tile = Tile.WALL,
        background: Optional[Any] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("Dungeon dimensions must be positive")
        self.width = width
        self.height = height
        self.tiles: List[List[Tile]] = [[default for _ in range(width)] for _ in range(height)]
        self.rooms: List[Room] = []
        self.background = background

    # ---- Bounds / access -------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        return self.tiles[y][x]

    def safe_get(self, x: int, y: int) -> Optional[Tile]:
        if not self.in_bounds(x, y):
            return None
        return self.tiles[y][x]

    def set(self, x: int, y: int, tile: Tile) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        self.tiles[y][x] = tile

    def is_walkable(self, x: int, y: int) -> bool:
        tile = self.safe_get(x, y)
        if tile is None:
            return False
        return is_walkable_tile(tile)

    def neighbors_4(self, x: int, y: int) -> Iterator[Point]:
        # Ordered for deterministic traversal
        for dx, dy in ((0, -1), (1, 0), (0, 1), (-1, 0)):
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                yield (nx, ny)

    # ---- Carving ---------------------------------------------------------
    def carve_room(self, room: Room) -> None:
        for yy in range(room.y, room.y + room.h):
            for xx in range(room.x, room.x + room.w):
                if self.in_bounds(xx, yy):
                    self.tiles[yy][xx] = Tile.FLOOR

    def carve_h_corridor(self, x1: int, x2: int, y: int) -> None:
        if x2 < x1:
            x1, x2 = x2, x1
        for xx in range(x1, x2 + 1):
            if self.in_bounds(xx, y):
                self.tiles[y][xx] = Tile.FLOOR

    def carve_v_corridor(self, y1: int, y2: int, x: int) -> None:
        if y2 < y1:
            y1, y2 = y2, y1
        for yy in range(y1, y2 + 1):
            if self.in_bounds(x, yy):
                self.tiles[yy][x] = Tile.FLOOR

    # ---- Search ----------------------------------------------------------
    def bfs_distances(self, start: Point) -> Dict[Point, int]:
        """Walking distance from ``start`` to every walkable tile it can reach."""
        sx, sy = start
        if not self.is_walkable(sx, sy):
            return {}
        dist: Dict[Point, int] = {start: 0}
        dq = deque([start])
        while dq:
            x, y = dq.popleft()
            d = dist[(x, y)]
            for n in self.neighbors_4(x, y):
                if n in dist or not self.is_walkable(*n):
                    continue
                dist[n] = d + 1
                dq.append(n)
        return dist

    # ---- Export / Compare ------------------------------------------------
    def snapshot(self) -> Tuple[Tuple[int, ...], ...]:
        """Deterministic, hashable snapshot of the tiles for equality tests."""
        return tuple(tuple(t.value for t in row) for row in self.tiles)

    def signature(self) -> str:
        payload = repr((self.width, self.height, self.snapshot(), [(r.x, r.y, r.w, r.h) for r in self.rooms]))
        return hashlib.blake2b(payload.encode("utf-8"), digest_size=16).hexdigest()

    def to_lines(self) -> List[str]:
        return ["".join(TILE_CHARS[t] for t in row) for row in self.tiles]

    @classmethod
    def from_lines(cls, lines: Sequence[str], rooms: Sequence[Room] = ()) -> "Dungeon":
        """
        Build a Dungeon from ASCII rows ('#' wall, '.' floor, '>' door) for tests/tools.
        Unknown characters are read as floor.
        """
        if not lines:
            raise ValueError("lines must not be empty")
        width = len(lines[0])
        for i, row in enumerate(lines):
            if len(row) != width:
                raise ValueError(f"All rows must have equal width; row 0 has {width}, row {i} has {len(row)}")
        chars = {ch: tile for tile, ch in TILE_CHARS.items()}
        dungeon = cls(width, len(lines))
        for y, row in enumerate(lines):
            for x, ch in enumerate(row):
                dungeon.tiles[y][x] = chars.get(ch, Tile.FLOOR)
        dungeon.rooms = list(rooms)
        return dungeon

    def __repr__(self) -> str:
        return f"Dungeon({self.width}x{self.height}, rooms={len(self.rooms)})"
