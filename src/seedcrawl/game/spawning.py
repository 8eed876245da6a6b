from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..config import Rules
from ..core.random import RandomStream
from ..dungeon.generation import place_door
from ..dungeon.map import Dungeon
from ..entities import Entity, EntityKind, spawn_entity
from .hazard import HazardTrap

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]


@dataclass
class LevelPopulation:
    door: Coord
    hazard: HazardTrap
    enemies: List[Entity] = field(default_factory=list)
    potions: List[Entity] = field(default_factory=list)


def random_floor_tile(
    dungeon: Dungeon,
    rng: RandomStream,
    blocked: Iterable[Optional[Coord]] = (),
    attempts: int = 100,
) -> Coord:
    """
    Pick a walkable tile inside a random room, avoiding ``blocked`` coordinates.

    Each attempt draws a room, then a column and a row within it. After
    ``attempts`` misses (or with no rooms at all) the grid center is returned
    even if it is blocked or solid.
    """
    avoid = {c for c in blocked if c is not None}
    if dungeon.rooms:
        for _ in range(attempts):
            room = dungeon.rooms[rng.intn(len(dungeon.rooms))]
            x = room.x + rng.intn(room.w)
            y = room.y + rng.intn(room.h)
            if dungeon.is_walkable(x, y) and (x, y) not in avoid:
                return x, y
    center = (dungeon.width // 2, dungeon.height // 2)
    logger.warning("No free floor tile after %d attempts; using grid center %s", attempts, center)
    return center


def populate_level(dungeon: Dungeon, rng: RandomStream, level: int, player_pos: Coord, rules: Rules) -> LevelPopulation:
    """
    Place the door, the hazard trap, the enemies and the potions, in that order.

    Draw order is part of the level's identity for a given seed: door, hazard
    tile, then per enemy its tile followed by its kind, then the potion jitter
    and one tile per potion. Enemies and potions may share tiles with each
    other but never with the player, the door or the hazard.
    """
    spawn = rules.spawn
    door = place_door(dungeon, rng)

    hx, hy = random_floor_tile(dungeon, rng, (player_pos, door), spawn.placement_attempts)
    hazard = HazardTrap(hx, hy)
    blocked = (player_pos, door, hazard.pos)

    enemies: List[Entity] = []
    for _ in range(spawn.enemy_count(level)):
        x, y = random_floor_tile(dungeon, rng, blocked, spawn.placement_attempts)
        kind: EntityKind = rng.weighted_choice(spawn.enemy_table)
        enemies.append(spawn_entity(kind, x, y, rules.profiles))

    potions: List[Entity] = []
    for _ in range(spawn.potion_count(level, rng.intn(spawn.potion_jitter))):
        x, y = random_floor_tile(dungeon, rng, blocked, spawn.placement_attempts)
        potions.append(spawn_entity(EntityKind.POTION, x, y, rules.profiles))

    logger.debug(
        "Level %d populated: door=%s hazard=%s enemies=%d potions=%d",
        level,
        door,
        hazard.pos,
        len(enemies),
        len(potions),
    )
    return LevelPopulation(door=door, hazard=hazard, enemies=enemies, potions=potions)
