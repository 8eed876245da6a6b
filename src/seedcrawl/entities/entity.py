from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .kinds import DEFAULT_PROFILES, EntityKind, ProfileTable


@dataclass
class Entity:
    """A player, enemy or pickup on the grid.

    Entities hold no references to each other; the turn engine relates them
    by position. HP is kept in [0, max_hp] by ``take_damage``/``heal``; an
    entity at 0 HP is dead and inert but keeps its tile until its level is
    discarded.
    """

    kind: EntityKind
    x: int
    y: int
    hp: int = 0
    max_hp: int = 0
    damage: int = 0
    glyph: str = "?"

    @property
    def pos(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def is_enemy(self) -> bool:
        return self.kind.is_enemy

    def move_to(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def take_damage(self, amount: int) -> None:
        self.hp = max(0, self.hp - amount)

    def heal(self, amount: int) -> None:
        self.hp = min(self.max_hp, self.hp + amount)

    def distance_to(self, other: "Entity") -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def is_adjacent(self, other: "Entity") -> bool:
        """Chebyshev distance of exactly one (the same tile does not count)."""
        return self.distance_to(other) == 1

    def __repr__(self) -> str:
        return f"Entity({self.kind.value}@{self.x},{self.y} hp={self.hp}/{self.max_hp})"


def spawn_entity(kind: EntityKind, x: int, y: int, profiles: ProfileTable = DEFAULT_PROFILES) -> Entity:
    """Create a fresh entity of ``kind`` at full health from its profile."""
    profile = profiles[kind]
    return Entity(
        kind=kind,
        x=x,
        y=y,
        hp=profile.hp,
        max_hp=profile.hp,
        damage=profile.damage,
        glyph=profile.glyph,
    )
