# chess_mimic/config/resolver.py
"""
Resolves partial bot configuration overrides into an immutable BotConfig.

Overrides are merged one nesting level deep onto the documented defaults in
`settings.DEFAULT_BOT_CONFIG`: a group such as `{"boltzmann": {"temperature_scale": 25}}`
only replaces that one field and keeps its siblings. Lists (the depth table,
the book think-time range) and scalars are replaced wholesale.
"""
import copy
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple

from chess_mimic.config import settings
from chess_mimic.exceptions import ConfigurationError
from chess_mimic.types import (
    GAME_PHASES,
    BoltzmannParams,
    BotConfig,
    ComplexityDepthParams,
    DynamicSkillParams,
    EloRange,
    ErrorThresholds,
    MoveStyleParams,
    PhaseThresholds,
    SkillRange,
    ThinkTimeParams,
    TrieParams,
)

logger = logging.getLogger(settings.APP_NAME + ".ConfigResolver")

# Group name -> dataclass built from that group's merged mapping.
_GROUP_TYPES = {
    "elo": EloRange,
    "skill": SkillRange,
    "phase": PhaseThresholds,
    "error": ErrorThresholds,
    "dynamic_skill": DynamicSkillParams,
    "boltzmann": BoltzmannParams,
    "trie": TrieParams,
    "move_style": MoveStyleParams,
    "complexity_depth": ComplexityDepthParams,
    "think_time": ThinkTimeParams,
}


def merge_config(
    base: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """
    Merges `overrides` onto `base`, one level deep.

    Neither input is modified. For every key in `overrides`, if both values
    are mappings the result holds `{**base[key], **overrides[key]}`;
    otherwise the override value replaces the base value as a whole.
    """
    result: Dict[str, Any] = copy.deepcopy(dict(base))
    if not overrides:
        return result

    for key, override_val in overrides.items():
        base_val = result.get(key)
        if isinstance(base_val, Mapping) and isinstance(override_val, Mapping):
            result[key] = {**base_val, **copy.deepcopy(dict(override_val))}
        elif override_val is not None:
            result[key] = copy.deepcopy(override_val)
    return result


def _build_group(name: str, values: Any):
    group_type = _GROUP_TYPES[name]
    if not isinstance(values, Mapping):
        raise ConfigurationError(f"Config group '{name}' must be a mapping, got {type(values).__name__}.")
    try:
        return group_type(**values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid keys in config group '{name}': {e}") from e


def _build_depth_table(rows: Any) -> Tuple[Tuple[int, int], ...]:
    try:
        table = tuple((int(max_skill), int(depth)) for max_skill, depth in rows)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"depth_by_skill must be a list of [max_skill, depth] pairs: {e}") from e
    return table


def _validate(config: BotConfig) -> None:
    if config.elo.min >= config.elo.max:
        raise ConfigurationError(f"Elo range requires min < max, got {config.elo}.")
    if config.skill.min >= config.skill.max:
        raise ConfigurationError(f"Skill range requires min < max, got {config.skill}.")
    if config.error.mistake > config.error.blunder:
        raise ConfigurationError(f"Mistake threshold must not exceed blunder threshold, got {config.error}.")
    low, high = config.think_time.book_move_range
    if low > high:
        raise ConfigurationError(f"book_move_range must be ascending, got {config.think_time.book_move_range}.")
    missing_phases = [phase for phase in GAME_PHASES if phase not in config.think_time.base_by_phase]
    if missing_phases:
        raise ConfigurationError(f"think_time.base_by_phase is missing phases: {missing_phases}.")
    if config.boltzmann.temperature_floor <= 0:
        raise ConfigurationError(
            f"boltzmann.temperature_floor must be positive, got {config.boltzmann.temperature_floor}."
        )


def resolve_bot_config(overrides: Optional[Mapping[str, Any]] = None) -> BotConfig:
    """
    Produces the immutable BotConfig for one bot from optional overrides.

    Raises:
        ConfigurationError: On unknown groups or fields, malformed values, or
            ranges whose min is not below their max.
    """
    merged = merge_config(settings.DEFAULT_BOT_CONFIG, overrides)

    unknown = set(merged) - set(_GROUP_TYPES) - {"depth_by_skill"}
    if unknown:
        raise ConfigurationError(f"Unknown config groups: {sorted(unknown)}")

    groups = {name: _build_group(name, merged[name]) for name in _GROUP_TYPES}

    think_time: ThinkTimeParams = groups["think_time"]
    try:
        low, high = think_time.book_move_range
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"book_move_range must be a [min, max] pair: {e}") from e
    if not isinstance(think_time.base_by_phase, Mapping):
        raise ConfigurationError(f"base_by_phase must be a mapping, got {think_time.base_by_phase!r}.")
    groups["think_time"] = ThinkTimeParams(
        enabled=think_time.enabled,
        base_by_phase=MappingProxyType(dict(think_time.base_by_phase)),
        book_move_range=(low, high),
        difficulty_bonus_max=think_time.difficulty_bonus_max,
        close_eval_threshold=think_time.close_eval_threshold,
        jitter=think_time.jitter,
        minimum=think_time.minimum,
    )

    config = BotConfig(depth_by_skill=_build_depth_table(merged["depth_by_skill"]), **groups)
    _validate(config)
    logger.debug(f"Resolved bot config with overrides for: {sorted(overrides or {})}")
    return config


DEFAULT_CONFIG: BotConfig = resolve_bot_config()
"""The resolved default configuration."""
