from .events import Event, EventBus
from .hazard import HazardTrap
from .session import GameSession, MessageTone, Phase, new_session
from .spawning import LevelPopulation, populate_level, random_floor_tile

__all__ = [
    "Event",
    "EventBus",
    "GameSession",
    "HazardTrap",
    "LevelPopulation",
    "MessageTone",
    "Phase",
    "new_session",
    "populate_level",
    "random_floor_tile",
]
