from .tiles import Tile
from .map import Dungeon, Room
from .bsp import BSPNode, BSPTree
from .generation import generate_dungeon, place_door

__all__ = ["Tile", "Dungeon", "Room", "BSPNode", "BSPTree", "generate_dungeon", "place_door"]
