from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from ..core.random import RandomStream
from .bsp import BSPTree
from .map import Dungeon, Point, Room
from .tiles import Tile

logger = logging.getLogger(__name__)

BSP_DEPTH = 4
MIN_ROOM_SIZE = 6
MAX_ROOM_SIZE = 15

MIN_WIDTH = 40
MIN_HEIGHT = 20


def clamp_dimensions(width: int, height: int, min_width: int = MIN_WIDTH, min_height: int = MIN_HEIGHT) -> Tuple[int, int]:
    """Raise degenerate sizes to the smallest playable map."""
    return max(width, min_width), max(height, min_height)


def generate_dungeon(
    width: int,
    height: int,
    rng: RandomStream,
    background: Optional[Any] = None,
    *,
    depth: int = BSP_DEPTH,
    min_room_size: int = MIN_ROOM_SIZE,
    max_room_size: int = MAX_ROOM_SIZE,
    min_width: int = MIN_WIDTH,
    min_height: int = MIN_HEIGHT,
) -> Dungeon:
    """
    Generate one level: BSP partition, one room per large-enough leaf, and
    L-shaped corridors joining sibling subtrees.

    The result depends only on the arguments and the stream's position, so the
    same seed replays the same level. Leaves too small for a room are left
    empty and take no part in connectivity; every room that exists is
    reachable from every other.
    """
    width, height = clamp_dimensions(width, height, min_width, min_height)
    dungeon = Dungeon(width, height, default=Tile.WALL, background=background)

    tree = BSPTree(width, height)
    tree.split(tree.root, rng, depth, min_room_size)
    tree.create_rooms(tree.root, rng, min_room_size, max_room_size)

    dungeon.rooms = tree.rooms()
    for room in dungeon.rooms:
        dungeon.carve_room(room)

    for node in tree.internal_post_order():
        a = tree.first_room(node.left)  # type: ignore[arg-type]
        b = tree.first_room(node.right)  # type: ignore[arg-type]
        if a is None or b is None:
            continue
        connect_rooms(dungeon, a, b, rng)

    logger.debug(
        "Generated %dx%d dungeon: %d BSP nodes, %d leaves, %d rooms",
        width,
        height,
        len(tree.nodes),
        len(tree.leaves()),
        len(dungeon.rooms),
    )
    return dungeon


def connect_rooms(dungeon: Dungeon, a: Room, b: Room, rng: RandomStream) -> None:
    x1, y1 = a.center()
    x2, y2 = b.center()
    if rng.random() > 0.5:
        # horizontal then vertical
        dungeon.carve_h_corridor(x1, x2, y1)
        dungeon.carve_v_corridor(y1, y2, x2)
    else:
        # vertical then horizontal
        dungeon.carve_v_corridor(y1, y2, x1)
        dungeon.carve_h_corridor(x1, x2, y2)


def place_door(dungeon: Dungeon, rng: RandomStream) -> Point:
    """Put the level exit inside the last room, away from its walls."""
    if not dungeon.rooms:
        logger.warning("No rooms generated; door falls back to the grid center")
        return dungeon.width // 2, dungeon.height // 2
    room = dungeon.rooms[-1]
    x = room.x + rng.intn(room.w - 2) + 1
    y = room.y + rng.intn(room.h - 2) + 1
    dungeon.set(x, y, Tile.DOOR)
    return x, y
