"""Curses frontend. Everything here is presentation; game rules live in ``seedcrawl.game``."""
from __future__ import annotations

import curses
import logging
from typing import Dict, Optional

from ..game.session import GameSession, MessageTone
from ..input.keys import KeyMapper
from .text import Style, end_screen_lines, render_cells, status_line

logger = logging.getLogger(__name__)

_SPECIAL_KEYS: Dict[int, str] = {
    curses.KEY_UP: "UP",
    curses.KEY_DOWN: "DOWN",
    curses.KEY_LEFT: "LEFT",
    curses.KEY_RIGHT: "RIGHT",
    curses.KEY_ENTER: "ENTER",
    10: "ENTER",
    13: "ENTER",
    27: "ESCAPE",
    3: "CTRL_C",
    32: "SPACE",
}

# (foreground, extra attribute); pairs are allocated in this order.
_STYLE_COLORS = {
    Style.WALL: (curses.COLOR_WHITE, curses.A_NORMAL),
    Style.FLOOR: (curses.COLOR_WHITE, curses.A_DIM),
    Style.FOG: (curses.COLOR_BLUE, curses.A_DIM),
    Style.DOOR: (curses.COLOR_MAGENTA, curses.A_BOLD),
    Style.HAZARD: (curses.COLOR_RED, curses.A_BOLD),
    Style.PLAYER: (curses.COLOR_YELLOW, curses.A_BOLD),
    Style.ENEMY: (curses.COLOR_RED, curses.A_NORMAL),
    Style.POTION: (curses.COLOR_GREEN, curses.A_BOLD),
}

_TONE_COLORS = {
    MessageTone.INFO: curses.COLOR_GREEN,
    MessageTone.WARNING: curses.COLOR_YELLOW,
    MessageTone.DANGER: curses.COLOR_RED,
}


def key_name(code: int) -> Optional[str]:
    """Translate a curses key code into a name the key mapper understands."""
    if code in _SPECIAL_KEYS:
        return _SPECIAL_KEYS[code]
    if 32 < code < 127:
        return chr(code)
    return None


class TerminalUI:
    def __init__(self, stdscr, session: GameSession, mapper: Optional[KeyMapper] = None) -> None:
        self.stdscr = stdscr
        self.session = session
        self.mapper = mapper or KeyMapper.default()
        self._style_attrs: Dict[Style, int] = {}
        self._tone_attrs: Dict[MessageTone, int] = {}

    def init_colors(self) -> None:
        attrs_style = {s: a for s, (_, a) in _STYLE_COLORS.items()}
        attrs_tone = {t: curses.A_BOLD for t in _TONE_COLORS}
        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            pair = 1
            for style, (fg, attr) in _STYLE_COLORS.items():
                curses.init_pair(pair, fg, -1)
                attrs_style[style] = curses.color_pair(pair) | attr
                pair += 1
            for tone, fg in _TONE_COLORS.items():
                curses.init_pair(pair, fg, -1)
                attrs_tone[tone] = curses.color_pair(pair) | curses.A_BOLD
                pair += 1
        attrs_style[Style.HIDDEN] = curses.A_NORMAL
        self._style_attrs = attrs_style
        self._tone_attrs = attrs_tone

    def _put(self, y: int, x: int, text: str, attr: int = 0) -> None:
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error:
            # Writing the bottom-right cell or past a shrunk window raises; clip silently.
            pass

    def draw(self) -> None:
        scr = self.stdscr
        scr.erase()
        max_y, max_x = scr.getmaxyx()
        cells = render_cells(self.session)
        map_rows = min(len(cells), max(0, max_y - 2))
        for y in range(map_rows):
            for x, cell in enumerate(cells[y][: max_x]):
                if cell.style is not Style.HIDDEN:
                    self._put(y, x, cell.char, self._style_attrs.get(cell.style, 0))

        self._put(map_rows, 0, status_line(self.session)[: max_x - 1], self._style_attrs[Style.FLOOR])
        if self.session.message:
            self._put(map_rows + 1, 0, self.session.message[: max_x - 1], self._tone_attrs[self.session.message_tone])

        box = end_screen_lines(self.session)
        if box:
            top = max(0, (max_y - len(box)) // 2)
            for i, line in enumerate(box):
                self._put(top + i, max(0, (max_x - len(line)) // 2), line[: max_x - 1], curses.A_BOLD)
        scr.refresh()

    def handle_key(self, code: int) -> bool:
        """Apply one key press. Returns False when the loop should stop."""
        if code == curses.KEY_RESIZE:
            max_y, max_x = self.stdscr.getmaxyx()
            self.session.resize(max_x, max_y)
            return True
        name = key_name(code)
        if name is None:
            return True
        if self.mapper.is_quit(name):
            return False
        if self.session.phase.is_terminal:
            return not self.mapper.is_confirm(name)

        canonical = self.mapper.canonical(name)
        if canonical is not None:
            self.session.register_key(canonical)
        move = self.mapper.move_for(name)
        if move is not None:
            self.session.move_player(*move)
        return True

    def run(self) -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            logger.debug("Terminal does not support hiding the cursor")
        self.stdscr.keypad(True)
        self.init_colors()
        while True:
            self.draw()
            if not self.handle_key(self.stdscr.getch()):
                break


def play(session: GameSession, mapper: Optional[KeyMapper] = None) -> None:
    """Run the interactive loop until the player quits. Restores the terminal on exit."""

    def _main(stdscr) -> None:
        TerminalUI(stdscr, session, mapper).run()

    curses.wrapper(_main)
