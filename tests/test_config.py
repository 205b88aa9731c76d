# tests/test_config.py
"""
Unit tests for the bot configuration resolver.
"""
import pytest

from chess_mimic.config import settings
from chess_mimic.config.resolver import DEFAULT_CONFIG, merge_config, resolve_bot_config
from chess_mimic.exceptions import ConfigurationError


def test_defaults_resolve_to_documented_values():
    config = resolve_bot_config()

    assert (config.elo.min, config.elo.max) == (1100, 2800)
    assert (config.skill.min, config.skill.max) == (0, 20)
    assert config.phase.opening_above == 10
    assert config.phase.endgame_at_or_below == 6
    assert config.boltzmann.multi_pv_count == 4
    assert config.depth_by_skill[0] == (3, 5)
    assert config.depth_by_skill[-1] == (20, 22)
    assert config.trie.win_bias == 0.0
    assert config.think_time.book_move_range == (500, 2000)


def test_partial_group_override_keeps_siblings():
    config = resolve_bot_config({"boltzmann": {"temperature_scale": 25}})

    assert config.boltzmann.temperature_scale == 25
    assert config.boltzmann.temperature_floor == DEFAULT_CONFIG.boltzmann.temperature_floor
    assert config.boltzmann.multi_pv_count == DEFAULT_CONFIG.boltzmann.multi_pv_count
    assert config.elo == DEFAULT_CONFIG.elo


def test_depth_table_is_replaced_wholesale():
    config = resolve_bot_config({"depth_by_skill": [[20, 8]]})
    assert config.depth_by_skill == ((20, 8),)


def test_merge_does_not_modify_inputs():
    base = {"group": {"a": 1, "b": 2}, "table": [[1, 2]]}
    overrides = {"group": {"b": 3}, "table": [[5, 6]]}

    merged = merge_config(base, overrides)

    assert merged == {"group": {"a": 1, "b": 3}, "table": [[5, 6]]}
    assert base == {"group": {"a": 1, "b": 2}, "table": [[1, 2]]}
    assert overrides == {"group": {"b": 3}, "table": [[5, 6]]}


@pytest.mark.parametrize("overrides", [None, {}])
def test_merge_without_overrides_returns_equal_copy(overrides):
    merged = merge_config(settings.DEFAULT_BOT_CONFIG, overrides)
    assert merged == settings.DEFAULT_BOT_CONFIG
    assert merged is not settings.DEFAULT_BOT_CONFIG


def test_resolving_never_mutates_defaults():
    resolve_bot_config({"elo": {"min": 800}, "depth_by_skill": [[20, 4]]})
    assert settings.DEFAULT_BOT_CONFIG["elo"]["min"] == 1100
    assert settings.DEFAULT_BOT_CONFIG["depth_by_skill"][0] == [3, 5]


@pytest.mark.parametrize("overrides", [
    {"unknown_group": {"x": 1}},
    {"boltzmann": {"not_a_field": 1}},
    {"elo": {"min": 2800, "max": 1100}},
    {"skill": {"min": 5, "max": 5}},
    {"error": {"mistake": 400, "blunder": 300}},
    {"think_time": {"book_move_range": [2000, 500]}},
    {"think_time": {"book_move_range": [500]}},
    {"depth_by_skill": [[1, 2, 3]]},
    {"trie": 5},
    {"think_time": {"base_by_phase": {"opening": 1000}}},
    {"think_time": {"base_by_phase": 1000}},
    {"boltzmann": {"temperature_floor": 0}},
    {"boltzmann": {"temperature_floor": -0.5}},
])
def test_invalid_overrides_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        resolve_bot_config(overrides)


def test_resolved_config_is_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_CONFIG.elo.min = 0


def test_full_phase_time_override_is_accepted():
    config = resolve_bot_config(
        {"think_time": {"base_by_phase": {"opening": 1000, "middlegame": 2000, "endgame": 1800}}}
    )
    assert config.think_time.base_by_phase["middlegame"] == 2000


def test_phase_times_cannot_be_changed_in_place():
    config = resolve_bot_config()
    with pytest.raises(TypeError):
        config.think_time.base_by_phase["opening"] = 1
    assert DEFAULT_CONFIG.think_time.base_by_phase["opening"] == 1500
