# chess_mimic/analysis/move_style.py
"""
Player style analysis and style bias for candidate moves.

`analyze_style_from_records` condenses a player's game history into four
0-100 style axes. `apply_style_bonus` then nudges the oracle's candidate
scores toward the kind of move (capture, check or quiet) that style favours,
before the Boltzmann selection runs.
"""
import functools
import logging
from dataclasses import replace
from typing import Iterable, List, Sequence

import chess

from chess_mimic.config import settings
from chess_mimic.types import BotConfig, CandidateMove, GameRecord, MoveType, StyleMetrics
from chess_mimic.utils.chess_utils import Position, get_material_value, to_fen

logger = logging.getLogger(settings.APP_NAME + ".MoveStyle")

NEUTRAL_STYLE_SCORE = 50
STARTING_MATERIAL = 39


# --- Move Classification ---

@functools.lru_cache(maxsize=4096)
def _classify(fen: str, uci: str) -> MoveType:
    try:
        board = chess.Board(fen)
        move = chess.Move.from_uci(uci)
    except ValueError:
        return "quiet"
    if not board.is_legal(move):
        return "quiet"
    if board.is_capture(move):
        return "capture"
    if board.gives_check(move):
        return "check"
    return "quiet"


def classify_move(position: Position, uci: str) -> MoveType:
    """
    Classifies a coordinate move as a capture, a check or a quiet move.

    Captures take precedence over checks. Malformed or illegal moves count as
    quiet. Results are cached per (position, move).
    """
    return _classify(to_fen(position), uci)


# --- Style Bonus ---

def _style_bias(score: float) -> float:
    """Maps a 0-100 style score onto -1..+1 around the neutral 50."""
    return (score - NEUTRAL_STYLE_SCORE) / NEUTRAL_STYLE_SCORE


def apply_style_bonus(
    candidates: Sequence[CandidateMove],
    position: Position,
    style: StyleMetrics,
    config: BotConfig,
    dynamic_skill: float,
) -> List[CandidateMove]:
    """
    Returns new candidates whose scores are nudged toward the player's style.

    effective_influence = influence * (1 - (skill / skill_max) * skill_damping)
    capture: score += bias(aggression) * capture_bonus * effective_influence
    check:   score += bias(tactical)   * check_bonus   * effective_influence
    quiet:   score += bias(positional) * quiet_bonus   * effective_influence

    The input sequence and its candidates are never modified.
    """
    params = config.move_style
    if params.influence == 0 or not candidates:
        return list(candidates)

    skill_fraction = dynamic_skill / config.skill.max
    effective_influence = params.influence * (1 - skill_fraction * params.skill_damping)
    if effective_influence <= 0:
        return list(candidates)

    bonus_by_type = {
        "capture": _style_bias(style.aggression) * params.capture_bonus,
        "check": _style_bias(style.tactical) * params.check_bonus,
        "quiet": _style_bias(style.positional) * params.quiet_bonus,
    }

    fen = to_fen(position)
    styled: List[CandidateMove] = []
    for candidate in candidates:
        bonus = bonus_by_type[classify_move(fen, candidate.uci)]
        styled.append(replace(candidate, score=candidate.score + bonus * effective_influence))
    return styled


# --- Style Analysis ---

def _dampen(raw: float, sample_size: int, prior: int = settings.STYLE_DAMPING_PRIOR_GAMES) -> float:
    """Pulls a raw score toward 50 with weight n / (n + prior)."""
    weight = sample_size / (sample_size + prior)
    return raw * weight + NEUTRAL_STYLE_SCORE * (1 - weight)


def _clamp_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def _count_sacrifices(san_moves: List[str], color: chess.Color) -> int:
    """Counts plies after the sixth where the player's own material dropped by 3 or more."""
    board = chess.Board()
    previous = STARTING_MATERIAL
    sacrifices = 0
    for ply, san in enumerate(san_moves[:settings.STYLE_SACRIFICE_SCAN_PLIES]):
        try:
            board.push_san(san)
        except ValueError:
            break
        material = get_material_value(board, color)
        if previous - material >= settings.STYLE_SACRIFICE_MIN_MATERIAL and ply > 5:
            sacrifices += 1
        previous = material
    return sacrifices


def analyze_style_from_records(records: Iterable[GameRecord]) -> StyleMetrics:
    """
    Derives StyleMetrics from a player's game records.

    aggression -- quick wins (<30 moves) and material sacrifices
    tactical   -- decisive games shorter than 40 moves
    positional -- few early losses (<25 moves), longer games on average
    endgame    -- win rate in games longer than 30 moves

    Every axis is dampened toward 50 for small samples.
    """
    early_wins = sacrifices = short_decisive = 0
    long_games = long_game_wins = early_losses = 0
    total_moves = games = 0

    for record in records:
        if not record.moves:
            continue
        san_moves = record.moves.split()
        move_count = len(san_moves) // 2
        total_moves += move_count
        games += 1

        is_white = record.player_color == "white"
        won = record.result == record.player_color
        lost = record.result is not None and record.result != "draw" and not won

        if move_count < 30 and won:
            early_wins += 1
        sacrifices += _count_sacrifices(san_moves, chess.WHITE if is_white else chess.BLACK)
        if move_count < 40 and record.result is not None and record.result != "draw":
            short_decisive += 1
        if move_count > 30:
            long_games += 1
            if won:
                long_game_wins += 1
        if move_count < 25 and lost:
            early_losses += 1

    if games == 0:
        return StyleMetrics()

    avg_moves = total_moves / games
    early_win_pct = early_wins / games * 100
    sacrifice_pct = sacrifices / games * 100
    aggression = min(100, round(early_win_pct * 0.7 + sacrifice_pct * 0.3))

    tactical = min(100, round(short_decisive / games * 100))

    early_loss_pct = early_losses / games * 100
    length_bonus = min(20.0, max(0.0, (avg_moves - 25) * 0.8))
    positional = _clamp_score(70 - early_loss_pct * 1.5 + length_bonus)

    endgame = min(100, round(long_game_wins / long_games * 100)) if long_games > 0 else NEUTRAL_STYLE_SCORE

    metrics = StyleMetrics(
        aggression=_clamp_score(_dampen(aggression, games)),
        tactical=_clamp_score(_dampen(tactical, games)),
        positional=_clamp_score(_dampen(positional, games)),
        endgame=_clamp_score(_dampen(endgame, games)),
        sample_size=games,
    )
    logger.info(f"Style metrics from {games} games: {metrics}")
    return metrics
