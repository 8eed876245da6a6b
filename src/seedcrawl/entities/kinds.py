from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping


class EntityKind(str, Enum):
    PLAYER = "player"
    BUG = "bug"                  # weak fodder, dies to one hit
    SCOPE_CREEP = "scope_creep"  # tougher, hits harder
    POTION = "potion"

    @property
    def is_enemy(self) -> bool:
        return self in ENEMY_KINDS


ENEMY_KINDS = frozenset({EntityKind.BUG, EntityKind.SCOPE_CREEP})


@dataclass(frozen=True)
class EntityProfile:
    """Everything kind-specific about an entity.

    The turn engine never branches on the kind itself; it looks the profile up
    and uses the stats and text found here. Adding an enemy kind means adding
    an enum member and a profile, not another branch.
    """

    kind: EntityKind
    name: str
    glyph: str
    hp: int = 0
    damage: int = 0
    kill_message: str = ""
    attack_message: str = ""

    @property
    def death_tag(self) -> str:
        return self.kind.value

    def describe_attack(self, amount: int) -> str:
        return self.attack_message.format(name=self.name, damage=amount)


ProfileTable = Mapping[EntityKind, EntityProfile]


DEFAULT_PROFILES: Dict[EntityKind, EntityProfile] = {
    EntityKind.PLAYER: EntityProfile(EntityKind.PLAYER, "you", "@", hp=20, damage=2),
    EntityKind.BUG: EntityProfile(
        EntityKind.BUG,
        "bug",
        "b",
        hp=1,
        damage=1,
        kill_message="You squashed a bug!",
        attack_message="A {name} attacked - {damage} HP damage",
    ),
    EntityKind.SCOPE_CREEP: EntityProfile(
        EntityKind.SCOPE_CREEP,
        "scope creep",
        "s",
        hp=3,
        damage=2,
        kill_message="You eliminated a scope creep!",
        attack_message="A {name} attacked - {damage} HP damage",
    ),
    EntityKind.POTION: EntityProfile(EntityKind.POTION, "health potion", "+"),
}
