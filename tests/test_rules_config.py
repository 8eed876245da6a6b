from importlib import resources

import pytest

from seedcrawl.config import RULES_ENV_VAR, Rules, default_rules, load_rules, parse_rules
from seedcrawl.entities import EntityKind
from seedcrawl.exceptions import RulesError, RulesValidationError, SeedcrawlError


def _bundled_text() -> str:
    return resources.files("seedcrawl.data").joinpath("rules.yaml").read_text(encoding="utf-8")


def test_bundled_rules_match_defaults():
    rules = load_rules()
    assert rules.max_level == 5
    assert rules.vision_radius == 7
    assert rules.potion_heal == 3
    assert (rules.dungeon.bsp_depth, rules.dungeon.min_room_size, rules.dungeon.max_room_size) == (4, 6, 15)
    assert rules.spawn.enemy_count(1) == 5
    assert rules.spawn.potion_count(1, 1) == 4
    assert rules.spawn.enemy_table == ((EntityKind.SCOPE_CREEP, 0.4), (EntityKind.BUG, 0.6))
    assert rules.hazard.damage == 2
    assert rules.profile(EntityKind.PLAYER).hp == 20
    assert rules.profile(EntityKind.BUG).kill_message == "You squashed a bug!"


def test_default_rules_is_cached_and_matches_dataclass_defaults():
    assert default_rules() is default_rules()
    builtin = Rules()
    loaded = default_rules()
    assert loaded.dungeon == builtin.dungeon
    assert loaded.spawn == builtin.spawn
    assert loaded.hazard == builtin.hazard
    assert dict(loaded.profiles) == dict(builtin.profiles)


def test_level_size_reserves_ui_rows_and_clamps():
    rules = default_rules()
    assert rules.level_size(80, 43) == (80, 40)
    assert rules.level_size(20, 10) == (40, 20)


def test_custom_rules_file(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(_bundled_text().replace("max_level: 5", "max_level: 3"), encoding="utf-8")
    assert load_rules(path).max_level == 3


def test_env_var_selects_rules_file(tmp_path, monkeypatch):
    path = tmp_path / "env_rules.yaml"
    path.write_text(_bundled_text().replace("vision_radius: 7", "vision_radius: 4"), encoding="utf-8")
    monkeypatch.setenv(RULES_ENV_VAR, str(path))
    assert load_rules().vision_radius == 4
    # the cached bundled rules ignore the environment
    assert default_rules().vision_radius == 7


def test_missing_rules_file(tmp_path):
    with pytest.raises(RulesError):
        load_rules(tmp_path / "nope.yaml")


def test_schema_violation_is_reported_by_path():
    text = _bundled_text().replace("max_level: 5", "max_level: 0")
    with pytest.raises(RulesValidationError) as excinfo:
        parse_rules(text)
    human = excinfo.value.to_human()
    assert "max_level" in human
    assert excinfo.value.errors
    assert isinstance(excinfo.value, SeedcrawlError)


def test_unknown_keys_are_rejected():
    with pytest.raises(RulesValidationError):
        parse_rules(_bundled_text() + "\nsurprise: true\n")


def test_room_size_bounds_must_be_ordered():
    text = _bundled_text().replace("min_room_size: 6", "min_room_size: 20")
    with pytest.raises(RulesValidationError, match="min_room_size"):
        parse_rules(text)


def test_bad_yaml_and_non_mapping():
    with pytest.raises(RulesError):
        parse_rules("max_level: [unclosed")
    with pytest.raises(RulesError):
        parse_rules("- just\n- a list\n")
    with pytest.raises(RulesValidationError):
        parse_rules("")
