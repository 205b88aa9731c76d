# chess_mimic/analysis/complexity.py
"""
Position complexity detection for search depth tuning.

Tactical positions (many legal captures) get a deeper search; quiet
positions get a shallower one, which produces more natural, imperfect play.
"""
from chess_mimic.types import ComplexityDepthParams
from chess_mimic.utils.chess_utils import Position, to_board


def count_legal_captures(position: Position) -> int:
    board = to_board(position)
    return sum(1 for _ in board.generate_legal_captures())


def complexity_depth_adjust(position: Position, params: ComplexityDepthParams) -> int:
    """Returns a positive depth bonus for tactical positions, negative for quiet ones, else 0."""
    if not params.enabled:
        return 0

    captures = count_legal_captures(position)
    if captures >= params.capture_threshold:
        return params.tactical_bonus
    if captures <= params.quiet_threshold:
        return -params.quiet_reduction
    return 0
