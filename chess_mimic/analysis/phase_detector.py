# chess_mimic/analysis/phase_detector.py
"""
Material-based game phase detection.

The phase is decided by how many non-pawn, non-king pieces remain on the
board (both sides combined). The starting position has 14.
"""
from typing import Final

import chess

from chess_mimic.config.resolver import DEFAULT_CONFIG
from chess_mimic.types import GamePhase, PhaseThresholds
from chess_mimic.utils.chess_utils import Position

FULL_MINOR_MAJOR_COUNT: Final[int] = 14


def _count_on_board(board: chess.Board) -> int:
    return sum(
        1 for piece in board.piece_map().values()
        if piece.piece_type not in (chess.PAWN, chess.KING)
    )


def count_minor_major_pieces(position: Position) -> int:
    """Counts knights, bishops, rooks and queens of both colors."""
    if isinstance(position, chess.Board):
        return _count_on_board(position)
    return _count_on_board(chess.Board(position))


def _phase_from_count(count: int, thresholds: PhaseThresholds) -> GamePhase:
    if count > thresholds.opening_above:
        return "opening"
    if count <= thresholds.endgame_at_or_below:
        return "endgame"
    return "middlegame"


def detect_phase(position: Position, thresholds: PhaseThresholds = DEFAULT_CONFIG.phase) -> GamePhase:
    """Classifies a position as opening, middlegame or endgame."""
    return _phase_from_count(count_minor_major_pieces(position), thresholds)


def detect_phase_from_board(board: chess.Board, thresholds: PhaseThresholds = DEFAULT_CONFIG.phase) -> GamePhase:
    """Same as `detect_phase`, for callers already holding a board mid-replay."""
    return _phase_from_count(_count_on_board(board), thresholds)


def material_score(position: Position) -> float:
    """Continuous phase measure: 0.0 = no pieces left, 1.0 = all 14 present."""
    return min(1.0, count_minor_major_pieces(position) / FULL_MINOR_MAJOR_COUNT)
