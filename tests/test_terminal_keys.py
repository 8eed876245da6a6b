import pytest

curses = pytest.importorskip("curses")

from seedcrawl.core.random import RandomStream  # noqa: E402
from seedcrawl.dungeon import Dungeon, Room  # noqa: E402
from seedcrawl.game import GameSession, Phase  # noqa: E402
from seedcrawl.render.terminal import TerminalUI, key_name  # noqa: E402


class FakeScreen:
    def __init__(self, rows=30, cols=100):
        self.size = (rows, cols)

    def getmaxyx(self):
        return self.size


def _ui():
    d = Dungeon.from_lines(["#######", "#.....#", "#.....#", "#######"], rooms=[Room(1, 1, 5, 2)])
    s = GameSession(RandomStream(1), 80, 24)
    s.load_level(d, (1, 1), (0, 0))
    return TerminalUI(FakeScreen(), s), s


def test_key_names():
    assert key_name(curses.KEY_UP) == "UP"
    assert key_name(27) == "ESCAPE"
    assert key_name(ord("h")) == "h"
    assert key_name(ord(" ")) == "SPACE"
    assert key_name(0) is None


def test_movement_and_quit():
    ui, s = _ui()
    assert ui.handle_key(ord("l")) is True
    assert s.player.pos == (2, 1)
    assert ui.handle_key(curses.KEY_DOWN) is True
    assert s.player.pos == (2, 2)
    assert ui.handle_key(ord("q")) is False


def test_resize_records_new_viewport():
    ui, s = _ui()
    ui.handle_key(curses.KEY_RESIZE)
    assert (s.view_width, s.view_height) == (100, 30)


def test_end_screen_waits_for_confirm():
    ui, s = _ui()
    s.phase = Phase.VICTORY
    assert ui.handle_key(ord("l")) is True
    assert s.player.pos == (1, 1)
    assert ui.handle_key(10) is False


def test_konami_through_frontend():
    ui, s = _ui()
    for code in [curses.KEY_UP, curses.KEY_UP, curses.KEY_DOWN, curses.KEY_DOWN,
                 curses.KEY_LEFT, curses.KEY_RIGHT, curses.KEY_LEFT, curses.KEY_RIGHT, ord("b"), ord("a")]:
        ui.handle_key(code)
    assert s.invulnerable
