from seedcrawl.core.random import RandomStream
from seedcrawl.dungeon import Dungeon, Room
from seedcrawl.entities import EntityKind, spawn_entity
from seedcrawl.game import GameSession, HazardTrap, Phase
from seedcrawl.render import Style, end_screen_lines, render_cells, render_lines

ROWS = [
    "###########",
    "#....#....#",
    "#....#....#",
    "#....#..>.#",
    "###########",
]


def _session():
    d = Dungeon.from_lines(ROWS, rooms=[Room(1, 1, 4, 3), Room(6, 1, 4, 3)])
    s = GameSession(RandomStream(1), 80, 24)
    s.load_level(
        d,
        (1, 1),
        (8, 3),
        enemies=[spawn_entity(EntityKind.BUG, 3, 3), spawn_entity(EntityKind.SCOPE_CREEP, 8, 1)],
        potions=[spawn_entity(EntityKind.POTION, 2, 2)],
    )
    return s


def test_frame_layout_and_status_bar():
    s = _session()
    lines = render_lines(s)
    assert len(lines) == len(ROWS) + 2
    assert lines[-2] == "HP: 20/20 | Level: 1/5 | Kills: 0 | [q]uit"
    assert lines[-1] == ""
    assert lines[1][1] == "@"
    assert lines[3][3] == "b"
    assert lines[2][2] == "+"


def test_fog_hides_unseen_tiles_and_enemies():
    s = _session()
    lines = render_lines(s)
    # far side of the dividing wall is unexplored
    assert lines[1][8] == " "
    assert lines[3][8] == " "
    assert lines[1][5] == "#"


def test_explored_tiles_render_as_fog_when_out_of_sight():
    s = _session()
    s.visibility.clear_visible()
    cells = render_cells(s)
    assert cells[2][2].style is Style.FOG  # potion hidden, floor remembered
    assert cells[2][2].char == "."
    assert cells[1][1].style is Style.PLAYER


def test_background_reference_is_not_drawn():
    plain = _session()
    s = _session()
    s.dungeon.background = "src/main.go"
    assert render_lines(s) == render_lines(plain)
    assert render_lines(s)[1][3] == "."


def test_triggered_hazard_area_is_drawn():
    s = _session()
    s.hazard = HazardTrap(2, 1, triggered=True, affected={(3, 1)})
    cells = render_cells(s)
    assert cells[1][3].style is Style.HAZARD


def test_status_mentions_invulnerability_and_end_screen():
    s = _session()
    assert end_screen_lines(s) == []
    s.invulnerable = True
    assert render_lines(s)[-2].endswith("| INVULNERABLE")
    s.phase = Phase.GAME_OVER
    box = "\n".join(end_screen_lines(s))
    assert "GAME OVER" in box
    assert "Levels Cleared: 0" in box
