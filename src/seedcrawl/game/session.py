from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Any, Deque, Hashable, Iterable, List, Optional, Sequence, Tuple

from ..config import Rules, default_rules
from ..core.random import RandomStream
from ..dungeon.generation import generate_dungeon
from ..dungeon.map import Dungeon
from ..entities import Entity, EntityKind, spawn_entity
from ..fov import VisibilityMap, compute_visibility, has_line_of_sight
from . import events
from .events import EventBus
from .hazard import HazardTrap, warning_applies
from .spawning import populate_level

logger = logging.getLogger(__name__)

Coord = Tuple[int, int]

MSG_ATTACK = "You attack!"
MSG_DESCEND = "You descend deeper into the dungeon..."
MSG_VICTORY = "You've escaped the dungeon! Victory!"
MSG_DIED = "You died!"
MSG_HAZARD = "MERGE CONFLICT! The code tears apart around you!"
MSG_HAZARD_WARNING = "WARNING: MERGE CONFLICT DETECTED. TREAD CAREFULLY."
MSG_KONAMI = "KONAMI CODE ACTIVATED! You are now invulnerable!"

KONAMI_CODE: Tuple[str, ...] = ("up", "up", "down", "down", "left", "right", "left", "right", "b", "a")


class Phase(str, Enum):
    GENERATING = "generating"
    PLAYING = "playing"
    GAME_OVER = "game_over"
    VICTORY = "victory"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.GAME_OVER, Phase.VICTORY)


class MessageTone(str, Enum):
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


class GameSession:
    """
    One run of the game: the current level plus everything that survives a
    level change (player, random stream, counters).

    ``move_player`` is the only gameplay mutator. A call either applies a whole
    turn or is rejected before anything changes; the turn phases always run in
    the same order so a seed and an input sequence replay exactly.
    """

    def __init__(
        self,
        rng: RandomStream,
        view_width: int,
        view_height: int,
        background_refs: Sequence[Any] = (),
        rules: Optional[Rules] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.rules = rules or default_rules()
        self.rng = rng
        self.bus = bus or EventBus()
        self.background_refs: List[Any] = list(background_refs)
        self.view_width = view_width
        self.view_height = view_height

        self.level = 1
        self.max_level = self.rules.max_level
        self.phase = Phase.GENERATING

        self.player: Optional[Entity] = None
        self.enemies: List[Entity] = []
        self.potions: List[Entity] = []
        self.dungeon: Optional[Dungeon] = None
        self.visibility: Optional[VisibilityMap] = None
        self.door: Coord = (0, 0)
        self.hazard: Optional[HazardTrap] = None

        self.kills = 0
        self.move_count = 0
        self.message = ""
        self.message_tone = MessageTone.INFO
        self.death_cause: Optional[str] = None
        self.invulnerable = False
        self._recent_keys: Deque[str] = deque(maxlen=len(KONAMI_CODE))

    # ---------- Read accessors ----------
    @property
    def game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def victory(self) -> bool:
        return self.phase is Phase.VICTORY

    @property
    def living_enemies(self) -> List[Entity]:
        return [e for e in self.enemies if e.is_alive]

    def enemy_at(self, x: int, y: int) -> Optional[Entity]:
        for e in self.enemies:
            if e.is_alive and e.x == x and e.y == y:
                return e
        return None

    def potion_at(self, x: int, y: int) -> Optional[Entity]:
        for p in self.potions:
            if p.x == x and p.y == y:
                return p
        return None

    # ---------- Level lifecycle ----------
    def background_for_level(self, level: int) -> Optional[Any]:
        if not self.background_refs:
            return None
        return self.background_refs[(level - 1) % len(self.background_refs)]

    def generate_level(self) -> None:
        """Replace the dungeon and everything on it for ``self.level``."""
        self.phase = Phase.GENERATING
        d = self.rules.dungeon
        width, height = self.rules.level_size(self.view_width, self.view_height)
        dungeon = generate_dungeon(
            width,
            height,
            self.rng,
            self.background_for_level(self.level),
            depth=d.bsp_depth,
            min_room_size=d.min_room_size,
            max_room_size=d.max_room_size,
            min_width=d.min_width,
            min_height=d.min_height,
        )

        if dungeon.rooms:
            start = dungeon.rooms[0].center()
        else:
            start = (dungeon.width // 2, dungeon.height // 2)
        self._place_player(*start)

        population = populate_level(dungeon, self.rng, self.level, start, self.rules)

        self.dungeon = dungeon
        self.visibility = VisibilityMap.for_dungeon(dungeon)
        self.door = population.door
        self.hazard = population.hazard
        self.enemies = population.enemies
        self.potions = population.potions
        self._refresh_visibility()
        self._set_message("")
        self.phase = Phase.PLAYING

        logger.info(
            "Level %d/%d ready: %dx%d, %d rooms, %d enemies, %d potions",
            self.level,
            self.max_level,
            dungeon.width,
            dungeon.height,
            len(dungeon.rooms),
            len(self.enemies),
            len(self.potions),
        )
        self.bus.publish(
            events.LEVEL_CHANGED,
            {"level": self.level, "width": dungeon.width, "height": dungeon.height, "rooms": len(dungeon.rooms)},
        )

    def load_level(
        self,
        dungeon: Dungeon,
        player_pos: Coord,
        door: Coord,
        hazard: Optional[HazardTrap] = None,
        enemies: Iterable[Entity] = (),
        potions: Iterable[Entity] = (),
    ) -> None:
        """Install a prepared level instead of generating one. Used by tools and tests."""
        self._place_player(*player_pos)
        self.dungeon = dungeon
        self.visibility = VisibilityMap.for_dungeon(dungeon)
        self.door = door
        self.hazard = hazard
        self.enemies = list(enemies)
        self.potions = list(potions)
        self._refresh_visibility()
        self._set_message("")
        self.phase = Phase.PLAYING

    def resize(self, view_width: int, view_height: int) -> None:
        """Record a new viewport. Only the next generated level uses it."""
        self.view_width = view_width
        self.view_height = view_height

    def _place_player(self, x: int, y: int) -> None:
        if self.player is None:
            self.player = spawn_entity(EntityKind.PLAYER, x, y, self.rules.profiles)
        else:
            self.player.move_to(x, y)

    # ---------- Turn resolution ----------
    def move_player(self, dx: int, dy: int) -> bool:
        """Resolve one player action. Returns False if the action was rejected."""
        if self.phase is not Phase.PLAYING:
            return False
        if dx == 0 and dy == 0:
            return False
        assert self.player is not None and self.dungeon is not None
        nx, ny = self.player.x + dx, self.player.y + dy
        if not self.dungeon.is_walkable(nx, ny):
            logger.debug("Move to (%d,%d) rejected: not walkable", nx, ny)
            return False

        self._set_message("")

        target = self.enemy_at(nx, ny)
        if target is not None:
            self._bump_attack(target)
            self._enemy_phase()
            self._refresh_visibility()
            self._check_death()
            return True

        self.player.move_to(nx, ny)
        self.move_count += 1

        self._pickup_potion(nx, ny)

        if self.hazard is not None and self.hazard.is_at(nx, ny) and not self.hazard.triggered:
            self._trigger_hazard()
            if self.phase is Phase.GAME_OVER:
                return True

        if (nx, ny) == self.door:
            self._take_door()
            return True

        self._full_turn()
        return True

    def _bump_attack(self, target: Entity) -> None:
        self._strike(target)
        if target.is_alive:
            self._set_message(MSG_ATTACK)

    def _strike(self, enemy: Entity) -> None:
        assert self.player is not None
        before = enemy.hp
        enemy.take_damage(self.player.damage)
        self.bus.publish(
            events.DAMAGE,
            {"target": enemy.kind.value, "amount": self.player.damage, "source": "player", "hp_before": before, "hp_after": enemy.hp},
        )
        if not enemy.is_alive:
            self.kills += 1
            profile = self.rules.profile(enemy.kind)
            self._set_message(profile.kill_message)
            self.bus.publish(events.ENEMY_KILLED, {"kind": enemy.kind.value, "x": enemy.x, "y": enemy.y, "kills": self.kills})

    def _pickup_potion(self, x: int, y: int) -> None:
        potion = self.potion_at(x, y)
        if potion is None:
            return
        assert self.player is not None
        heal = self.rules.potion_heal
        self.potions.remove(potion)
        self.player.heal(heal)
        self._set_message(f"You drink a health potion! (+{heal} HP)")
        self.bus.publish(events.POTION_PICKED, {"x": x, "y": y, "heal": heal, "hp": self.player.hp})

    def _trigger_hazard(self) -> None:
        assert self.player is not None and self.dungeon is not None and self.hazard is not None
        hz = self.rules.hazard
        self.hazard.trigger(self.dungeon, self.rng, hz)
        if not self.invulnerable:
            before = self.player.hp
            self.player.take_damage(hz.damage)
            self.bus.publish(
                events.DAMAGE,
                {"target": "player", "amount": hz.damage, "source": self.hazard_tag, "hp_before": before, "hp_after": self.player.hp},
            )
        self._set_message(MSG_HAZARD, MessageTone.DANGER)
        self.bus.publish(
            events.HAZARD_TRIGGERED,
            {"x": self.hazard.x, "y": self.hazard.y, "affected": sorted(self.hazard.affected)},
        )
        if not self.player.is_alive:
            self._record_death(self.hazard_tag)
            self._end_game(f"You died in a {hz.name}!")

    @property
    def hazard_tag(self) -> str:
        return self.rules.hazard.name.replace(" ", "_")

    def _take_door(self) -> None:
        if self.level >= self.max_level:
            self.phase = Phase.VICTORY
            self._set_message(MSG_VICTORY)
            logger.info("Victory on level %d after %d moves, %d kills", self.level, self.move_count, self.kills)
            self.bus.publish(events.VICTORY, {"level": self.level, "kills": self.kills, "moves": self.move_count})
            return
        self.level += 1
        self.generate_level()
        self._set_message(MSG_DESCEND)

    def _full_turn(self) -> None:
        assert self.player is not None
        for enemy in self.enemies:
            if enemy.is_alive and self.player.is_adjacent(enemy):
                self._strike(enemy)
        self._enemy_phase()
        self._refresh_visibility()
        if self._check_death():
            return
        if self.message == "" and warning_applies(
            self.hazard, self.player.x, self.player.y, self.rules.hazard.warning_distance
        ):
            self._set_message(MSG_HAZARD_WARNING, MessageTone.WARNING)

    def _enemy_phase(self) -> None:
        self._move_enemies()
        self._enemy_attacks()

    def _move_enemies(self) -> None:
        assert self.player is not None and self.dungeon is not None
        px, py = self.player.x, self.player.y
        for enemy in self.enemies:
            if not enemy.is_alive:
                continue
            if has_line_of_sight(self.dungeon, enemy.x, enemy.y, px, py):
                dx, dy = _sign(px - enemy.x), _sign(py - enemy.y)
                if self._enemy_can_enter(enemy.x + dx, enemy.y + dy, enemy):
                    enemy.move_to(enemy.x + dx, enemy.y + dy)
                elif dx != 0 and self._enemy_can_enter(enemy.x + dx, enemy.y, enemy):
                    enemy.move_to(enemy.x + dx, enemy.y)
                elif dy != 0 and self._enemy_can_enter(enemy.x, enemy.y + dy, enemy):
                    enemy.move_to(enemy.x, enemy.y + dy)
                self._burn(enemy)

    def _enemy_can_enter(self, x: int, y: int, mover: Entity) -> bool:
        assert self.player is not None and self.dungeon is not None
        if not self.dungeon.is_walkable(x, y):
            return False
        if x == self.player.x and y == self.player.y:
            return False
        for e in self.enemies:
            if e is not mover and e.is_alive and e.x == x and e.y == y:
                return False
        return True

    def _burn(self, enemy: Entity) -> None:
        if self.hazard is None or not self.hazard.triggered or not self.hazard.contains(enemy.x, enemy.y):
            return
        amount = self.rules.hazard.burn_damage
        before = enemy.hp
        enemy.take_damage(amount)
        self.bus.publish(
            events.DAMAGE,
            {"target": enemy.kind.value, "amount": amount, "source": self.hazard_tag, "hp_before": before, "hp_after": enemy.hp},
        )

    def _enemy_attacks(self) -> None:
        if self.invulnerable:
            return
        assert self.player is not None
        for enemy in self.enemies:
            if not (enemy.is_alive and self.player.is_adjacent(enemy)):
                continue
            profile = self.rules.profile(enemy.kind)
            before = self.player.hp
            self.player.take_damage(enemy.damage)
            self._set_message(profile.describe_attack(enemy.damage), MessageTone.DANGER)
            self.bus.publish(
                events.DAMAGE,
                {"target": "player", "amount": enemy.damage, "source": profile.death_tag, "hp_before": before, "hp_after": self.player.hp},
            )
            if not self.player.is_alive:
                self._record_death(profile.death_tag)

    def _check_death(self) -> bool:
        assert self.player is not None
        if self.player.is_alive:
            return False
        self._end_game(MSG_DIED)
        return True

    def _record_death(self, cause: str) -> None:
        if self.death_cause is None:
            self.death_cause = cause

    def _end_game(self, message: str) -> None:
        self.phase = Phase.GAME_OVER
        self._set_message(message, MessageTone.DANGER)
        logger.info("Game over on level %d: %s", self.level, self.death_cause)
        self.bus.publish(events.GAME_OVER, {"level": self.level, "cause": self.death_cause, "kills": self.kills})

    def _refresh_visibility(self) -> None:
        assert self.player is not None and self.dungeon is not None and self.visibility is not None
        compute_visibility(self.dungeon, self.player.x, self.player.y, self.visibility, self.rules.vision_radius)

    def _set_message(self, text: str, tone: MessageTone = MessageTone.INFO) -> None:
        self.message = text
        self.message_tone = tone

    # ---------- Keys ----------
    def register_key(self, name: str) -> bool:
        """Feed a key name into the cheat-code matcher. Returns True on activation."""
        self._recent_keys.append(name.strip().lower())
        if self.invulnerable or tuple(self._recent_keys) != KONAMI_CODE:
            return False
        self.invulnerable = True
        self._set_message(MSG_KONAMI)
        logger.info("Invulnerability enabled")
        return True

    # ---------- Introspection ----------
    def snapshot(self) -> Hashable:
        """Hashable copy of every piece of mutable session state."""

        def ent(e: Entity) -> Tuple[Any, ...]:
            return (e.kind.value, e.x, e.y, e.hp, e.max_hp, e.damage)

        hazard = None
        if self.hazard is not None:
            hazard = (self.hazard.x, self.hazard.y, self.hazard.triggered, frozenset(self.hazard.affected))
        return (
            self.level,
            self.phase,
            ent(self.player) if self.player is not None else None,
            tuple(ent(e) for e in self.enemies),
            tuple(ent(p) for p in self.potions),
            self.dungeon.snapshot() if self.dungeon is not None else None,
            self.visibility.snapshot() if self.visibility is not None else None,
            self.door,
            hazard,
            self.kills,
            self.move_count,
            self.message,
            self.message_tone,
            self.death_cause,
            self.invulnerable,
            tuple(self._recent_keys),
            self.rng.draws,
        )


def new_session(
    background_refs: Sequence[Any],
    seed: int,
    view_width: int,
    view_height: int,
    rules: Optional[Rules] = None,
    bus: Optional[EventBus] = None,
) -> GameSession:
    """Start a run: seed the stream and generate level 1."""
    session = GameSession(RandomStream(seed), view_width, view_height, background_refs, rules=rules, bus=bus)
    logger.info("New session seed=%d view=%dx%d", seed, view_width, view_height)
    session.generate_level()
    return session
