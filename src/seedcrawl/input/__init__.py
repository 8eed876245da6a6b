from .actions import Command, MOVE_DELTAS
from .keys import KeyMapper

__all__ = ["Command", "KeyMapper", "MOVE_DELTAS"]
