from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from .actions import Command

logger = logging.getLogger(__name__)


class KeyMapper:
    """Rebindable mapping from key names to commands.

    Keys are plain strings normalized to upper case, so ``"k"`` and ``"K"``
    are the same binding. Frontends translate their own key codes to names
    (``"UP"``, ``"ESCAPE"``, ``"q"`` ...) before asking the mapper; integer
    codes can be routed through :meth:`set_alias`.

    Example:
        mapper = KeyMapper.default()
        mapper.move_for("h")      # -> (-1, 0)
        mapper.translate("ESC")   # -> Command.QUIT
    """

    def __init__(self, bindings: Optional[Dict[str, Command]] = None) -> None:
        self._bindings: Dict[str, Command] = {}
        self._aliases: Dict[str, str] = {}
        if bindings:
            for key, command in bindings.items():
                self.bind(key, command)

    @staticmethod
    def _normalize(key: str | int | None) -> Optional[str]:
        if key is None:
            return None
        if isinstance(key, int):
            return str(key)
        if not isinstance(key, str):
            return None
        k = key.strip()
        if not k:
            # A lone space is a real key.
            return "SPACE" if key == " " else None
        return k.upper()

    def bind(self, key: str | int, command: Command) -> None:
        nk = self._normalize(key)
        if nk is None:
            logger.warning("Attempted to bind invalid key: %r", key)
            return
        self._bindings[nk] = command

    def bind_many(self, keys: Iterable[str | int], command: Command) -> None:
        for k in keys:
            self.bind(k, command)

    def unbind(self, key: str | int) -> None:
        nk = self._normalize(key)
        if nk is not None:
            self._bindings.pop(nk, None)

    def set_alias(self, physical: str | int, canonical_name: str) -> None:
        """Route a backend-specific key (e.g. a curses key code) to a canonical name."""
        nk = self._normalize(physical)
        cn = self._normalize(canonical_name)
        if nk and cn:
            self._aliases[nk] = cn

    def canonical(self, key: str | int | None) -> Optional[str]:
        nk = self._normalize(key)
        if nk is None:
            return None
        return self._aliases.get(nk, nk)

    def translate(self, key: str | int | None) -> Optional[Command]:
        canonical = self.canonical(key)
        if canonical is None:
            return None
        return self._bindings.get(canonical)

    def move_for(self, key: str | int | None) -> Optional[Tuple[int, int]]:
        """The (dx, dy) a key moves the player by, or None for non-movement keys."""
        command = self.translate(key)
        return command.delta if command is not None else None

    def is_quit(self, key: str | int | None) -> bool:
        return self.translate(key) is Command.QUIT

    def is_confirm(self, key: str | int | None) -> bool:
        return self.translate(key) is Command.CONFIRM

    @classmethod
    def default(cls) -> "KeyMapper":
        """Arrows, vi keys (hjkl plus yubn diagonals) and WASD; q/Escape quit."""
        mapper = cls()

        mapper.bind_many(["UP", "K", "W"], Command.MOVE_UP)
        mapper.bind_many(["DOWN", "J", "S"], Command.MOVE_DOWN)
        mapper.bind_many(["LEFT", "H", "A"], Command.MOVE_LEFT)
        mapper.bind_many(["RIGHT", "L", "D"], Command.MOVE_RIGHT)

        mapper.bind("Y", Command.MOVE_UP_LEFT)
        mapper.bind("U", Command.MOVE_UP_RIGHT)
        mapper.bind("B", Command.MOVE_DOWN_LEFT)
        mapper.bind("N", Command.MOVE_DOWN_RIGHT)

        mapper.bind_many(["ENTER", "RETURN", "SPACE"], Command.CONFIRM)
        mapper.set_alias("RET", "ENTER")

        mapper.bind_many(["Q", "ESCAPE", "ESC", "CTRL_C"], Command.QUIT)
        return mapper


__all__ = ["KeyMapper"]
