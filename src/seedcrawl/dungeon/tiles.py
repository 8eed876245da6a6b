from __future__ import annotations

from enum import Enum
from typing import Dict, Set


class Tile(Enum):
    """Tile types of the dungeon grid."""

    WALL = 0
    FLOOR = 1
    DOOR = 2  # level exit


# Define which tiles are walkable. This makes it straightforward to extend later.
WALKABLE_TILES: Set[Tile] = {Tile.FLOOR, Tile.DOOR}

# Only walls stop a ray.
OPAQUE_TILES: Set[Tile] = {Tile.WALL}

TILE_CHARS: Dict[Tile, str] = {Tile.WALL: "#", Tile.FLOOR: ".", Tile.DOOR: ">"}


def is_walkable_tile(tile: Tile) -> bool:
    return tile in WALKABLE_TILES


def is_opaque_tile(tile: Tile) -> bool:
    return tile in OPAQUE_TILES
