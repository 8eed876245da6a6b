from __future__ import annotations

from enum import Enum, auto
from typing import Dict, Optional, Tuple


class Command(Enum):
    """Logical commands the frontends understand, independent of the key pressed."""

    MOVE_UP = auto()
    MOVE_DOWN = auto()
    MOVE_LEFT = auto()
    MOVE_RIGHT = auto()
    MOVE_UP_LEFT = auto()
    MOVE_UP_RIGHT = auto()
    MOVE_DOWN_LEFT = auto()
    MOVE_DOWN_RIGHT = auto()
    CONFIRM = auto()
    QUIT = auto()

    @property
    def delta(self) -> Optional[Tuple[int, int]]:
        return MOVE_DELTAS.get(self)


MOVE_DELTAS: Dict[Command, Tuple[int, int]] = {
    Command.MOVE_UP: (0, -1),
    Command.MOVE_DOWN: (0, 1),
    Command.MOVE_LEFT: (-1, 0),
    Command.MOVE_RIGHT: (1, 0),
    Command.MOVE_UP_LEFT: (-1, -1),
    Command.MOVE_UP_RIGHT: (1, -1),
    Command.MOVE_DOWN_LEFT: (-1, 1),
    Command.MOVE_DOWN_RIGHT: (1, 1),
}


__all__ = ["Command", "MOVE_DELTAS"]
