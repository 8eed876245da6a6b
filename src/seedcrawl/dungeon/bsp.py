from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from ..core.random import RandomStream
from .map import Room

logger = logging.getLogger(__name__)

# Aspect ratio beyond which a region is always cut across its long side.
SPLIT_ASPECT = 1.25


@dataclass
class BSPNode:
    x: int
    y: int
    w: int
    h: int
    left: Optional[int] = None
    right: Optional[int] = None
    room: Optional[Room] = None

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


class BSPTree:
    """
    Binary space partition of a rectangle, stored as an arena of nodes.

    Children are referenced by index into ``nodes``; index 0 is the root. A split
    node's two children tile its extent exactly along one axis. Traversals are
    always left child first, which fixes the order rooms are discovered in and
    therefore the order random draws are consumed.
    """

    def __init__(self, width: int, height: int) -> None:
        self.nodes: List[BSPNode] = [BSPNode(0, 0, width, height)]

    @property
    def root(self) -> int:
        return 0

    def node(self, idx: int) -> BSPNode:
        return self.nodes[idx]

    def _add(self, x: int, y: int, w: int, h: int) -> int:
        self.nodes.append(BSPNode(x, y, w, h))
        return len(self.nodes) - 1

    # ---- Partitioning ----------------------------------------------------
    def split(self, idx: int, rng: RandomStream, depth: int, min_size: int) -> None:
        """Recursively split node ``idx`` up to ``depth`` levels."""
        if depth <= 0:
            return
        n = self.nodes[idx]

        # The draw happens even when the shape overrides it
        horizontal = rng.random() > 0.5
        if n.w / n.h >= SPLIT_ASPECT:
            horizontal = False
        elif n.h / n.w >= SPLIT_ASPECT:
            horizontal = True

        span = (n.h if horizontal else n.w) - min_size
        if span <= min_size:
            return

        offset = rng.intn(span - min_size) + min_size
        if horizontal:
            left = self._add(n.x, n.y, n.w, offset)
            right = self._add(n.x, n.y + offset, n.w, n.h - offset)
        else:
            left = self._add(n.x, n.y, offset, n.h)
            right = self._add(n.x + offset, n.y, n.w - offset, n.h)
        n.left, n.right = left, right

        self.split(left, rng, depth - 1, min_size)
        self.split(right, rng, depth - 1, min_size)

    # ---- Rooms -----------------------------------------------------------
    def create_rooms(self, idx: int, rng: RandomStream, min_size: int, max_size: int) -> None:
        n = self.nodes[idx]
        if n.left is not None and n.right is not None:
            self.create_rooms(n.left, rng, min_size, max_size)
            self.create_rooms(n.right, rng, min_size, max_size)
            return

        if n.w < min_size + 2 or n.h < min_size + 2:
            logger.debug("Leaf %d (%dx%d) too small for a room", idx, n.w, n.h)
            return

        max_w = max(min_size, min(max_size, n.w - 2))
        max_h = max(min_size, min(max_size, n.h - 2))

        room_w = min_size
        if max_w > min_size:
            room_w = rng.intn(max_w - min_size + 1) + min_size
        room_h = min_size
        if max_h > min_size:
            room_h = rng.intn(max_h - min_size + 1) + min_size

        room_x = n.x + 1
        if n.w - room_w - 1 > 1:
            room_x = n.x + rng.intn(n.w - room_w - 1) + 1
        room_y = n.y + 1
        if n.h - room_h - 1 > 1:
            room_y = n.y + rng.intn(n.h - room_h - 1) + 1

        n.room = Room(room_x, room_y, room_w, room_h)

    def rooms(self, idx: int = 0) -> List[Room]:
        """All rooms below ``idx`` in pre-order, left first."""
        n = self.nodes[idx]
        if n.room is not None:
            return [n.room]
        out: List[Room] = []
        if n.left is not None:
            out.extend(self.rooms(n.left))
        if n.right is not None:
            out.extend(self.rooms(n.right))
        return out

    def first_room(self, idx: int) -> Optional[Room]:
        """Representative room of a subtree: the first one a pre-order search finds."""
        n = self.nodes[idx]
        if n.room is not None:
            return n.room
        if n.left is not None:
            room = self.first_room(n.left)
            if room is not None:
                return room
        if n.right is not None:
            return self.first_room(n.right)
        return None

    def internal_post_order(self, idx: int = 0) -> Iterator[BSPNode]:
        """Yield split nodes children-first, so subtrees come before their parent."""
        n = self.nodes[idx]
        if n.left is None or n.right is None:
            return
        yield from self.internal_post_order(n.left)
        yield from self.internal_post_order(n.right)
        yield n

    def leaves(self) -> List[BSPNode]:
        return [n for n in self.nodes if n.is_leaf()]
