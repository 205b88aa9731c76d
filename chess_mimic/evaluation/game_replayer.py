# chess_mimic/evaluation/game_replayer.py
"""
Replays one held-out game and asks the bot for a move at each of the
player's turns.

This module contains the GameReplayer class, which walks a game record
move by move, lets the bot decide in every position where the profiled
player was to move, and compares the decision with what the player
actually played.

Whether the player's move counts as a top-N move is decided by a separate
full-strength MultiPV search (depth TOP_N_REFERENCE_DEPTH, with
TOP_N_REFERENCE_LINES lines). With `full_strength_top_n=False` the replayer
runs in triage mode instead: it reuses the bot's own candidate list, which
costs no extra search but is skill-limited.
"""
import logging
from typing import List, Optional, Sequence, Set

import chess

from chess_mimic.analysis.error_profile import eval_at
from chess_mimic.analysis.phase_detector import detect_phase_from_board
from chess_mimic.bot.bot_controller import BotController
from chess_mimic.config import settings
from chess_mimic.types import CandidateMove, GameRecord, PositionResult, ProgressReporter, SearchOracle
from chess_mimic.utils.chess_utils import is_player_ply

logger = logging.getLogger(__name__.split('.')[0] + ".GameReplayer")


def _score_of(candidates: Sequence[CandidateMove], uci: str) -> Optional[float]:
    for candidate in candidates:
        if candidate.uci == uci:
            return candidate.score
    return None


def actual_cpl_at(
    ply: int,
    actual_uci: str,
    evals: Sequence[Optional[float]],
    candidates: Sequence[CandidateMove],
) -> Optional[float]:
    """
    Centipawn loss of the player's move at `ply`.

    Taken from the record's White-POV evals when both the eval before and
    after the move exist. Otherwise falls back to the candidates: the gap
    between the best candidate and the player's move, or between the best
    and worst candidate when the player's move is not among them.
    """
    cp_before = settings.STARTING_POSITION_EVAL_CP if ply == 0 else eval_at(evals, ply - 1)
    cp_after = eval_at(evals, ply)
    if cp_before is not None and cp_after is not None:
        sign = 1 if ply % 2 == 0 else -1
        return max(0.0, sign * (cp_before - cp_after))

    if not candidates:
        return None
    best = max(c.score for c in candidates)
    played = _score_of(candidates, actual_uci)
    if played is not None:
        return max(0.0, best - played)
    return max(0.0, best - min(c.score for c in candidates))


def bot_cpl_of(bot_uci: str, candidates: Sequence[CandidateMove]) -> Optional[float]:
    """Gap between the best candidate and the bot's move, or None if it is not a candidate."""
    played = _score_of(candidates, bot_uci)
    if played is None:
        return None
    return max(0.0, max(c.score for c in candidates) - played)


class GameReplayer:
    """A worker that executes the position-by-position comparison for a game."""

    def __init__(
        self,
        bot: BotController,
        reference_oracle: Optional[SearchOracle] = None,
        full_strength_top_n: bool = True,
    ):
        self.bot = bot
        self.reference_oracle = reference_oracle or bot.oracle
        self.full_strength_top_n = full_strength_top_n
        logger.debug(f"GameReplayer initialized (full-strength top-N: {full_strength_top_n}).")

    def _top_n_ucis(self, fen: str, bot_candidates: Sequence[CandidateMove]) -> Set[str]:
        if not self.full_strength_top_n:
            return {c.uci for c in bot_candidates}
        reference = self.reference_oracle.evaluate_multipv(
            fen, settings.TOP_N_REFERENCE_DEPTH, settings.TOP_N_REFERENCE_LINES
        )
        return {c.uci for c in reference}

    def replay_game(
        self,
        game_index: int,
        record: GameRecord,
        max_positions: Optional[int] = None,
        progress: Optional[ProgressReporter] = None,
        evals: Sequence[Optional[float]] = (),
    ) -> List[PositionResult]:
        """
        Returns one PositionResult per player turn, stopping after
        `max_positions` positions or at the first unparsable move.

        `evals` are the record's White-POV evaluations after each ply, used
        for the player's centipawn loss.
        """
        results: List[PositionResult] = []
        if record.player_color != self.bot.bot_color:
            return results

        board = chess.Board()
        for ply, san in enumerate(record.moves.split()):
            if max_positions is not None and len(results) >= max_positions:
                break
            try:
                actual_move = board.parse_san(san)
            except ValueError:
                logger.debug(f"Game {game_index}: unparsable move '{san}' at ply {ply}, stopping replay.")
                break

            if is_player_ply(ply, record.player_color):
                fen = board.fen()
                decision = self.bot.get_move(fen)
                actual_uci = actual_move.uci()
                candidates = decision.candidates or ()
                top_n = self._top_n_ucis(fen, candidates)
                results.append(PositionResult(
                    game_index=game_index,
                    ply=ply,
                    fen=fen,
                    phase=detect_phase_from_board(board, self.bot.config.phase),
                    actual_uci=actual_uci,
                    bot_uci=decision.uci,
                    bot_source=decision.source,
                    dynamic_skill=decision.dynamic_skill,
                    think_time_ms=decision.think_time_ms,
                    is_match=decision.uci == actual_uci,
                    is_in_top_n=decision.uci == actual_uci or actual_uci in top_n,
                    actual_cpl=actual_cpl_at(ply, actual_uci, evals, candidates),
                    bot_cpl=bot_cpl_of(decision.uci, candidates),
                ))
                if progress:
                    progress.update(1)

            board.push(actual_move)

        return results
