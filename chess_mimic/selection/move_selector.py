# chess_mimic/selection/move_selector.py
"""
Skill mapping and probabilistic move selection.

Provides the linear elo -> skill mapping, the per-phase dynamic skill
adjustment driven by an error profile, and Boltzmann (softmax) selection
among the oracle's ranked candidates.

The kind of mistake the bot makes is never chosen directly: at low skill
the temperature is high, so alternatives close to the best move are picked
often. Whether that alternative is a 20cp drift or a 200cp miss depends on
the concrete position.
"""
import logging
import math
import random
from typing import Optional, Sequence

from chess_mimic.config import settings
from chess_mimic.config.resolver import DEFAULT_CONFIG
from chess_mimic.exceptions import NoCandidatesError
from chess_mimic.types import (
    BotConfig,
    CandidateMove,
    EloRange,
    ErrorProfile,
    GamePhase,
    SkillRange,
)

logger = logging.getLogger(settings.APP_NAME + ".MoveSelector")

PERFECT_PHASE_RATIO = 0.01


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def elo_to_skill_level(
    elo: float,
    elo_range: EloRange = DEFAULT_CONFIG.elo,
    skill_range: SkillRange = DEFAULT_CONFIG.skill,
) -> int:
    """Maps an elo rating linearly onto the skill range, rounded and clamped."""
    fraction = (elo - elo_range.min) / (elo_range.max - elo_range.min)
    skill = fraction * (skill_range.max - skill_range.min) + skill_range.min
    return int(_clamp(round(skill), skill_range.min, skill_range.max))


def dynamic_skill_level(
    base_skill: int,
    error_profile: ErrorProfile,
    phase: GamePhase,
    config: BotConfig = DEFAULT_CONFIG,
) -> int:
    """
    Shifts the base skill for one game phase according to the error profile.

    ratio = phase_error_rate / overall_error_rate
    adjustment = round(scale * log2(ratio))

    With the default negative scale, a phase twice as error-prone as the
    player's average lowers skill by 3, a phase half as error-prone raises
    it by 3. Without enough evidence the base skill is returned unchanged.
    """
    params = config.dynamic_skill
    skill_range = config.skill
    phase_stats = error_profile.for_phase(phase)
    overall = error_profile.overall

    if (
        overall.error_rate == 0
        or overall.total_moves < params.min_overall_moves
        or phase_stats.total_moves < params.min_phase_moves
    ):
        return base_skill

    ratio = phase_stats.error_rate / overall.error_rate

    # log2(0) is undefined; treat a near-zero ratio as a flawless phase.
    if ratio < PERFECT_PHASE_RATIO:
        return min(skill_range.max, base_skill + params.perfect_phase_bonus)

    adjustment = round(params.scale * math.log2(ratio))
    return int(_clamp(base_skill + adjustment, skill_range.min, skill_range.max))


def temperature_from_skill(skill: float, config: BotConfig = DEFAULT_CONFIG) -> float:
    """temperature = max(floor, (skill_max - skill) * scale)"""
    boltzmann = config.boltzmann
    return max(boltzmann.temperature_floor, (config.skill.max - skill) * boltzmann.temperature_scale)


def boltzmann_select(
    candidates: Sequence[CandidateMove],
    skill: float,
    config: BotConfig = DEFAULT_CONFIG,
    rng: Optional[random.Random] = None,
) -> CandidateMove:
    """
    Picks one candidate with probability proportional to exp(score / temperature).

    Scores are shifted by the maximum before exponentiation so the weights
    stay finite. Returns the first candidate if floating point rounding
    leaves the draw unconsumed.

    Raises:
        NoCandidatesError: If `candidates` is empty.
    """
    if not candidates:
        raise NoCandidatesError("No candidate moves to select from.")
    if len(candidates) == 1:
        return candidates[0]

    rng = rng if rng is not None else random.Random()
    temperature = temperature_from_skill(skill, config)
    max_score = max(c.score for c in candidates)
    weights = [math.exp((c.score - max_score) / temperature) for c in candidates]

    remaining = rng.random() * sum(weights)
    for candidate, weight in zip(candidates, weights):
        remaining -= weight
        if remaining <= 0:
            return candidate

    return candidates[0]
