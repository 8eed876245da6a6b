from .kinds import DEFAULT_PROFILES, ENEMY_KINDS, EntityKind, EntityProfile
from .entity import Entity, spawn_entity

__all__ = ["DEFAULT_PROFILES", "ENEMY_KINDS", "Entity", "EntityKind", "EntityProfile", "spawn_entity"]
