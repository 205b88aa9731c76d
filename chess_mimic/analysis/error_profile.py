# chess_mimic/analysis/error_profile.py
"""
Builds a player's per-phase error profile from evaluated historical games.

For every move the profiled player made, the centipawn loss (CPL) is the
drop in evaluation from the mover's point of view between the position
before and after the move. Moves are bucketed by the phase of the position
*before* the move and counted as mistakes or blunders using the configured
CPL cutoffs.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

import chess

from chess_mimic.analysis.phase_detector import detect_phase_from_board
from chess_mimic.config import settings
from chess_mimic.config.resolver import DEFAULT_CONFIG
from chess_mimic.types import (
    GAME_PHASES,
    ErrorProfile,
    ErrorThresholds,
    GameEvalData,
    PhaseErrorStats,
    PhaseThresholds,
)
from chess_mimic.utils.chess_utils import is_player_ply

logger = logging.getLogger(settings.APP_NAME + ".ErrorProfile")


@dataclass
class _PhaseAccumulator:
    total_moves: int = 0
    mistakes: int = 0
    blunders: int = 0
    total_cpl: float = 0.0

    def add_move(self, cp_loss: float, thresholds: ErrorThresholds) -> None:
        self.total_moves += 1
        self.total_cpl += cp_loss
        if cp_loss >= thresholds.blunder:
            self.blunders += 1
        elif cp_loss >= thresholds.mistake:
            self.mistakes += 1

    def finalize(self) -> PhaseErrorStats:
        if self.total_moves == 0:
            return PhaseErrorStats()
        return PhaseErrorStats(
            total_moves=self.total_moves,
            mistakes=self.mistakes,
            blunders=self.blunders,
            avg_cpl=round(self.total_cpl / self.total_moves),
            error_rate=(self.mistakes + self.blunders) / self.total_moves,
            blunder_rate=self.blunders / self.total_moves,
        )


def eval_at(evals: Sequence[Optional[float]], index: int) -> Optional[float]:
    """Returns the eval at `index`, or None when it is absent or not a number."""
    if index < 0 or index >= len(evals):
        return None
    value = evals[index]
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def _replay_game(
    game: GameEvalData,
    accumulators: Dict[str, _PhaseAccumulator],
    thresholds: ErrorThresholds,
    phase_thresholds: PhaseThresholds,
) -> bool:
    """Feeds one game into the accumulators. Returns True if any move was counted."""
    board = chess.Board()
    counted_any = False

    for ply, san in enumerate(game.moves.split()):
        if is_player_ply(ply, game.player_color):
            cp_before = settings.STARTING_POSITION_EVAL_CP if ply == 0 else eval_at(game.evals, ply - 1)
            cp_after = eval_at(game.evals, ply)

            if cp_before is not None and cp_after is not None:
                phase = detect_phase_from_board(board, phase_thresholds)
                white_moved = board.turn == chess.WHITE
                cp_loss = max(0.0, cp_before - cp_after) if white_moved else max(0.0, cp_after - cp_before)
                accumulators[phase].add_move(cp_loss, thresholds)
                accumulators["overall"].add_move(cp_loss, thresholds)
                counted_any = True

        try:
            board.push_san(san)
        except ValueError:
            logger.debug(f"Stopping replay at ply {ply}: unparsable move '{san}'.")
            break

    return counted_any


def build_error_profile_from_evals(
    evaluated_games: Iterable[GameEvalData],
    thresholds: ErrorThresholds = DEFAULT_CONFIG.error,
    phase_thresholds: PhaseThresholds = DEFAULT_CONFIG.phase,
) -> ErrorProfile:
    """
    Aggregates per-phase mistake and blunder statistics for the profiled player.

    Games without moves or evaluations are skipped, plies lacking an
    evaluation are skipped, and an unparsable move ends that game's replay.
    Bad input never aborts the build.

    Args:
        evaluated_games: Historical games with per-ply evaluations (White POV).
        thresholds: Mistake and blunder CPL cutoffs.
        phase_thresholds: Piece-count thresholds for phase detection.

    Returns:
        A frozen ErrorProfile with opening, middlegame, endgame and overall stats.
    """
    accumulators: Dict[str, _PhaseAccumulator] = {
        name: _PhaseAccumulator() for name in (*GAME_PHASES, "overall")
    }
    games_analyzed = 0
    games_skipped = 0

    for game in evaluated_games:
        if not game.moves or not game.evals:
            games_skipped += 1
            continue
        if _replay_game(game, accumulators, thresholds, phase_thresholds):
            games_analyzed += 1

    profile = ErrorProfile(
        opening=accumulators["opening"].finalize(),
        middlegame=accumulators["middlegame"].finalize(),
        endgame=accumulators["endgame"].finalize(),
        overall=accumulators["overall"].finalize(),
        games_analyzed=games_analyzed,
    )
    logger.info(
        f"Error profile built from {games_analyzed} games "
        f"({profile.overall.total_moves} moves, {games_skipped} games without eval data)."
    )
    return profile
