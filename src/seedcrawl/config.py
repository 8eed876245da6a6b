from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft7Validator

from .entities.kinds import DEFAULT_PROFILES, EntityKind, EntityProfile
from .exceptions import RulesError, RulesValidationError

logger = logging.getLogger(__name__)

RULES_ENV_VAR = "SEEDCRAWL_RULES_FILE"
_PKG = "seedcrawl.data"


@dataclass(frozen=True)
class DungeonRules:
    bsp_depth: int = 4
    min_room_size: int = 6
    max_room_size: int = 15
    min_width: int = 40
    min_height: int = 20
    # Terminal rows reserved below the map for the status bar and message.
    ui_rows: int = 3


@dataclass(frozen=True)
class SpawnRules:
    enemy_base: int = 3
    enemy_per_level: int = 2
    potion_base: int = 2
    potion_per_level: int = 1
    potion_jitter: int = 2
    placement_attempts: int = 100
    enemy_table: Tuple[Tuple[EntityKind, float], ...] = (
        (EntityKind.SCOPE_CREEP, 0.4),
        (EntityKind.BUG, 0.6),
    )

    def enemy_count(self, level: int) -> int:
        return self.enemy_base + self.enemy_per_level * level

    def potion_count(self, level: int, jitter: int) -> int:
        return self.potion_base + self.potion_per_level * level + jitter


@dataclass(frozen=True)
class HazardRules:
    name: str = "merge conflict"
    damage: int = 2
    burn_damage: int = 1
    radius: int = 1
    spread: int = 7
    warning_distance: int = 2


@dataclass(frozen=True)
class Rules:
    """Game balance constants.

    Defaults mirror the bundled ``rules.yaml``; ``load_rules`` is the normal
    way to obtain an instance so that a custom file goes through the same
    schema validation as the bundled one.
    """

    max_level: int = 5
    vision_radius: int = 7
    potion_heal: int = 3
    dungeon: DungeonRules = field(default_factory=DungeonRules)
    spawn: SpawnRules = field(default_factory=SpawnRules)
    hazard: HazardRules = field(default_factory=HazardRules)
    profiles: Mapping[EntityKind, EntityProfile] = field(default_factory=lambda: dict(DEFAULT_PROFILES), hash=False)

    def profile(self, kind: EntityKind) -> EntityProfile:
        return self.profiles[kind]

    def level_size(self, view_width: int, view_height: int) -> Tuple[int, int]:
        """Map size for a terminal of the given size, clamped to the playable minimum."""
        width = max(view_width, self.dungeon.min_width)
        height = max(view_height - self.dungeon.ui_rows, self.dungeon.min_height)
        return width, height


@lru_cache(maxsize=1)
def _schema_validator() -> Draft7Validator:
    raw = resources.files(_PKG).joinpath("rules.schema.json").read_text(encoding="utf-8")
    schema = json.loads(raw)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def validate_rules_data(data: Any) -> None:
    errors = sorted(_schema_validator().iter_errors(data), key=lambda e: list(e.path))
    if errors:
        raise RulesValidationError("Rules failed schema validation", errors)
    if data["dungeon"]["min_room_size"] > data["dungeon"]["max_room_size"]:
        raise RulesValidationError("dungeon.min_room_size must not exceed dungeon.max_room_size")


def rules_from_dict(data: Dict[str, Any]) -> Rules:
    """Validate a parsed rules document and convert it to a :class:`Rules`."""
    validate_rules_data(data)

    profiles: Dict[EntityKind, EntityProfile] = {}
    for key, raw in data["entities"].items():
        kind = EntityKind(key)
        profiles[kind] = EntityProfile(
            kind=kind,
            name=str(raw["name"]),
            glyph=str(raw["glyph"]),
            hp=int(raw.get("hp", 0)),
            damage=int(raw.get("damage", 0)),
            kill_message=str(raw.get("kill_message", "")),
            attack_message=str(raw.get("attack_message", "")),
        )

    spawn_raw = dict(data["spawn"])
    table = tuple((EntityKind(row["kind"]), float(row["weight"])) for row in spawn_raw.pop("enemy_table"))

    return Rules(
        max_level=int(data["max_level"]),
        vision_radius=int(data["vision_radius"]),
        potion_heal=int(data["potion_heal"]),
        dungeon=DungeonRules(**data["dungeon"]),
        spawn=SpawnRules(enemy_table=table, **spawn_raw),
        hazard=HazardRules(**data["hazard"]),
        profiles=profiles,
    )


def _embedded_rules_text() -> str:
    return resources.files(_PKG).joinpath("rules.yaml").read_text(encoding="utf-8")


def parse_rules(text: str) -> Rules:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise RulesError(f"Rules file is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise RulesError("Rules document must be a mapping")
    return rules_from_dict(data)


def load_rules(path: Optional[os.PathLike | str] = None) -> Rules:
    """Load game rules from YAML.

    If path is None, ``SEEDCRAWL_RULES_FILE`` is consulted, then the embedded
    default resource at seedcrawl/data/rules.yaml is used.
    """
    if path is None:
        path = os.getenv(RULES_ENV_VAR) or None

    if path is None:
        text = _embedded_rules_text()
        logger.debug("Loaded embedded rules resource")
    else:
        p = Path(path)
        if not p.exists():
            raise RulesError(f"Rules file not found: {p}")
        text = p.read_text(encoding="utf-8")
        logger.debug("Loaded rules from path: %s", p)

    rules = parse_rules(text)
    logger.info(
        "Rules: max_level=%d vision=%d rooms=%d..%d",
        rules.max_level,
        rules.vision_radius,
        rules.dungeon.min_room_size,
        rules.dungeon.max_room_size,
    )
    return rules


@lru_cache(maxsize=1)
def default_rules() -> Rules:
    """Bundled rules, parsed once per process. Ignores the environment override."""
    return parse_rules(_embedded_rules_text())
