import pytest

from seedcrawl.core.random import RandomStream
from seedcrawl.dungeon import Dungeon, Room, Tile
from seedcrawl.entities import EntityKind, spawn_entity
from seedcrawl.game import GameSession, HazardTrap, MessageTone, Phase, events
from seedcrawl.game.session import (
    MSG_DESCEND,
    MSG_DIED,
    MSG_HAZARD,
    MSG_HAZARD_WARNING,
    MSG_KONAMI,
    MSG_VICTORY,
)

ROOM = [
    "##########",
    "#........#",
    "#........#",
    "#........#",
    "#........#",
    "##########",
]

BUG = EntityKind.BUG
CREEP = EntityKind.SCOPE_CREEP


def make_session(rows=ROOM, player=(1, 1), door=(0, 0), hazard=None, enemies=(), potions=(), seed=7):
    dungeon = Dungeon.from_lines(rows, rooms=[Room(1, 1, len(rows[0]) - 2, len(rows) - 2)])
    session = GameSession(RandomStream(seed), 80, 24)
    session.load_level(
        dungeon,
        player,
        door,
        hazard=hazard,
        enemies=[spawn_entity(kind, x, y) for kind, x, y in enemies],
        potions=[spawn_entity(EntityKind.POTION, x, y) for x, y in potions],
    )
    return session


def test_plain_move_advances_move_counter():
    s = make_session()
    assert s.move_player(1, 0) is True
    assert s.player.pos == (2, 1)
    assert s.move_count == 1
    assert s.message == ""
    assert s.visibility.is_visible(2, 1)


def test_rejected_moves_change_nothing():
    s = make_session()
    s.message = "keep me"
    before = s.snapshot()
    assert s.move_player(-1, 0) is False
    assert s.move_player(0, -1) is False
    assert s.move_player(0, 0) is False
    assert s.snapshot() == before
    assert s.message == "keep me"
    assert s.move_count == 0


def test_bump_attack_does_not_move_player():
    s = make_session(enemies=[(CREEP, 2, 1)])
    creep = s.enemies[0]
    assert s.move_player(1, 0)
    assert s.player.pos == (1, 1)
    assert s.move_count == 0
    assert creep.hp == 1 and creep.pos == (2, 1)
    # the surviving creep hits back in the same action
    assert s.player.hp == 18
    assert s.message == "A scope creep attacked - 2 HP damage"
    assert s.message_tone is MessageTone.DANGER
    assert s.kills == 0


def test_bump_kill_counts_and_corpse_does_not_block():
    s = make_session(enemies=[(BUG, 2, 1)])
    assert s.move_player(1, 0)
    assert s.kills == 1
    assert s.message == "You squashed a bug!"
    assert not s.enemies[0].is_alive
    assert s.player.pos == (1, 1)

    assert s.move_player(1, 0)
    assert s.player.pos == (2, 1)
    assert s.move_count == 1
    assert s.message == ""


def test_bump_that_wounds_says_you_attack():
    s = make_session(enemies=[(CREEP, 2, 1)])
    s.invulnerable = True
    s.move_player(1, 0)
    assert s.message == "You attack!"


def test_auto_attack_hits_adjacent_enemies_after_moving():
    s = make_session(enemies=[(BUG, 3, 2)])
    s.move_player(1, 0)
    assert s.player.pos == (2, 1)
    assert s.kills == 1
    assert s.message == "You squashed a bug!"


def test_enemy_chases_diagonally_when_it_sees_the_player():
    s = make_session(player=(1, 3), enemies=[(CREEP, 6, 1)])
    s.move_player(1, 0)
    assert s.enemies[0].pos == (5, 2)
    assert s.player.hp == 20


def test_enemy_without_line_of_sight_stays_put():
    rows = [
        "###########",
        "#....#....#",
        "#....#....#",
        "#....#....#",
        "###########",
    ]
    s = make_session(rows=rows, enemies=[(CREEP, 8, 2)])
    s.move_player(0, 1)
    assert s.enemies[0].pos == (8, 2)


def test_enemy_out_of_sight_does_not_burn():
    rows = [
        "###########",
        "#....#....#",
        "#....#....#",
        "#....#....#",
        "###########",
    ]
    trap = HazardTrap(8, 2, triggered=True, affected={(7, 2), (8, 2), (8, 3), (9, 2)})
    s = make_session(rows=rows, hazard=trap, enemies=[(CREEP, 8, 3)])
    assert s.move_player(0, 1) is True
    creep = s.enemies[0]
    assert creep.pos == (8, 3)
    assert creep.hp == creep.max_hp


def test_enemy_falls_back_to_horizontal_step():
    rows = [
        "#######",
        "#.....#",
        "#...#.#",
        "#.....#",
        "#######",
    ]
    s = make_session(rows=rows, enemies=[(CREEP, 5, 1)])
    s.move_player(0, 1)
    assert s.player.pos == (1, 2)
    assert s.enemies[0].pos == (4, 1)


def test_living_enemies_block_each_other():
    s = make_session(enemies=[(CREEP, 3, 1), (CREEP, 4, 1)])
    s.move_player(1, 0)
    front, back = s.enemies
    assert front.pos == (3, 1) and front.hp == 1
    assert back.pos == (4, 1)
    assert s.player.hp == 18


def test_potion_heals_and_is_consumed():
    s = make_session(potions=[(2, 1)])
    s.player.hp = 15
    s.move_player(1, 0)
    assert s.player.hp == 18
    assert s.potions == []
    assert s.message == "You drink a health potion! (+3 HP)"


def test_potion_heal_is_capped_and_takes_one_potion_per_step():
    s = make_session(potions=[(2, 1), (2, 1)])
    s.player.hp = 19
    s.move_player(1, 0)
    assert s.player.hp == 20
    assert len(s.potions) == 1


def test_hazard_hurts_once_and_marks_area():
    s = make_session(hazard=HazardTrap(2, 1))
    s.move_player(1, 0)
    assert s.hazard.triggered
    assert s.player.hp == 18
    assert s.message == MSG_HAZARD
    assert s.message_tone is MessageTone.DANGER
    assert {(1, 0), (2, 2), (3, 2)} <= s.hazard.affected

    s.move_player(-1, 0)
    s.move_player(1, 0)
    assert s.player.hp == 18
    assert len(s.bus.of_type(events.HAZARD_TRIGGERED)) == 1


def test_hazard_death_stops_the_turn():
    s = make_session(hazard=HazardTrap(2, 1), enemies=[(BUG, 3, 2)])
    s.player.hp = 2
    s.move_player(1, 0)
    assert s.phase is Phase.GAME_OVER
    assert s.game_over
    assert s.death_cause == "merge_conflict"
    assert s.message == "You died in a merge conflict!"
    # no auto-attack happened
    assert s.enemies[0].is_alive
    assert s.move_count == 1


def test_invulnerable_player_ignores_hazard_damage():
    s = make_session(hazard=HazardTrap(2, 1))
    s.invulnerable = True
    s.move_player(1, 0)
    assert s.hazard.triggered
    assert s.player.hp == 20


def test_enemies_burn_inside_triggered_hazard():
    s = make_session(hazard=HazardTrap(2, 1), enemies=[(CREEP, 3, 2)])
    s.move_player(1, 0)
    creep = s.enemies[0]
    # auto-attack 3 -> 1, steps to (2, 2), burns 1 -> 0
    assert creep.pos == (2, 2)
    assert not creep.is_alive
    assert s.kills == 0
    assert s.player.hp == 18


def test_proximity_warning():
    s = make_session(hazard=HazardTrap(4, 1))
    s.move_player(1, 0)
    assert s.message == MSG_HAZARD_WARNING
    assert s.message_tone is MessageTone.WARNING

    far = make_session(hazard=HazardTrap(5, 1))
    far.move_player(1, 0)
    assert far.message == ""


def test_door_descends_and_keeps_player():
    rows = list(ROOM)
    rows[1] = "#.>......#"
    s = make_session(rows=rows, door=(2, 1))
    s.player.hp = 12
    s.move_player(1, 0)
    assert s.level == 2
    assert s.phase is Phase.PLAYING
    assert s.message == MSG_DESCEND
    assert (s.dungeon.width, s.dungeon.height) == (80, 21)
    assert s.player.pos == s.dungeon.rooms[0].center()
    assert s.player.hp == 12
    assert s.move_count == 1
    assert len(s.enemies) == 7
    assert s.dungeon.get(*s.door) == Tile.DOOR
    assert not s.hazard.triggered


def test_descending_replaces_a_triggered_trap():
    rows = list(ROOM)
    rows[1] = "#.>......#"
    old = HazardTrap(5, 3, triggered=True, affected={(5, 3)})
    s = make_session(rows=rows, door=(2, 1), hazard=old)
    s.move_player(1, 0)
    assert s.hazard is not old
    assert not s.hazard.triggered and not s.hazard.affected
    assert s.dungeon.get(*s.hazard.pos) == Tile.FLOOR
    assert s.hazard.pos not in (s.player.pos, s.door)


def test_final_door_is_victory_and_freezes_session():
    rows = list(ROOM)
    rows[1] = "#.>......#"
    s = make_session(rows=rows, door=(2, 1))
    s.level = s.max_level
    s.move_player(1, 0)
    assert s.victory
    assert s.phase is Phase.VICTORY
    assert s.message == MSG_VICTORY
    assert len(s.bus.of_type(events.VICTORY)) == 1

    frozen = s.snapshot()
    assert s.move_player(0, 1) is False
    assert s.snapshot() == frozen


def test_player_killed_by_scope_creep():
    s = make_session(enemies=[(CREEP, 3, 1)])
    s.player.hp = 2
    s.move_player(1, 0)
    assert s.player.hp == 0
    assert s.game_over
    assert s.death_cause == "scope_creep"
    assert s.message == MSG_DIED
    assert s.bus.of_type(events.GAME_OVER)[0].payload["cause"] == "scope_creep"

    frozen = s.snapshot()
    assert s.move_player(1, 0) is False
    assert s.snapshot() == frozen


def test_konami_code_grants_invulnerability():
    s = make_session(enemies=[(CREEP, 3, 1)])
    keys = ["UP", "up", "down", "DOWN", "left", "right", "left", "right", "b", "A"]
    results = [s.register_key(k) for k in keys]
    assert results[-1] is True and not any(results[:-1])
    assert s.invulnerable
    assert s.message == MSG_KONAMI

    s.move_player(1, 0)
    assert s.player.hp == 20


def test_wrong_sequence_does_not_activate():
    s = make_session()
    for k in ["up", "down", "up", "down", "left", "right", "left", "right", "b", "a"]:
        s.register_key(k)
    assert not s.invulnerable


def test_events_are_published_for_kills_and_potions():
    s = make_session(enemies=[(BUG, 2, 1)], potions=[(1, 2)])
    seen = []
    s.bus.subscribe(events.ENEMY_KILLED, seen.append)
    s.move_player(1, 0)
    s.move_player(0, 1)
    assert [e.payload["kind"] for e in seen] == ["bug"]
    picked = s.bus.of_type(events.POTION_PICKED)
    assert picked and picked[0].payload["heal"] == 3


def test_failing_handler_does_not_break_the_bus():
    bus = events.EventBus()
    got = []

    def bad(evt):
        raise RuntimeError("boom")

    bus.subscribe("x", bad)
    bus.subscribe("x", got.append)
    bus.publish("x", {"a": 1})
    assert got[0].payload == {"a": 1}

    bus.unsubscribe("x", bad)
    bus.unsubscribe("x", bad)
    bus.publish("x")
    assert len(got) == 2
    assert len(bus.history) == 2


@pytest.mark.parametrize("phase", [Phase.GAME_OVER, Phase.VICTORY, Phase.GENERATING])
def test_moves_only_accepted_while_playing(phase):
    s = make_session()
    s.phase = phase
    assert s.move_player(1, 0) is False
    assert s.player.pos == (1, 1)
