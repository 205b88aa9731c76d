# chess_mimic/utils/chess_utils.py
"""
Generic chess-related utility functions.

This module provides helper functions that operate on chess concepts,
boards, or pieces, and are not tied to a specific component like
the opening book or the bot controller. These are pure functions, making
them easy to test and reason about.
"""
import re
from typing import Dict, Final, Optional, Union

import chess

Position = Union[str, chess.Board]
"""A position given either as a FEN string or as a python-chess board."""

# --- Piece Material Values ---
# Standard pawn units. Kings carry no material value.
PIECE_VALUES: Final[Dict[chess.PieceType, int]] = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}

_UCI_PATTERN: Final[re.Pattern] = re.compile(r"^[a-h][1-8][a-h][1-8][qrbn]?$")


def to_board(position: Position) -> chess.Board:
    """Returns a board for `position`, copying boards so callers never share state."""
    if isinstance(position, chess.Board):
        return position.copy(stack=False)
    return chess.Board(position)


def to_fen(position: Position) -> str:
    return position.fen() if isinstance(position, chess.Board) else position


def position_key(position: Position) -> str:
    """
    Normalized position fingerprint used by the opening book.

    Keeps piece placement, side to move, castling rights and the en passant
    square, and drops the halfmove and fullmove clocks so transpositions
    reaching the same position share one key. FEN strings are parsed first:
    python-chess only writes an en passant square when a legal capture onto
    it exists, so "... b KQkq e3 0 1" and "... b KQkq - 0 1" share a key.
    """
    board = position if isinstance(position, chess.Board) else chess.Board(position)
    return " ".join(board.fen().split(" ")[:4])


def is_valid_uci(uci: Optional[str]) -> bool:
    """Checks that a string looks like a coordinate move such as 'e2e4' or 'e7e8q'."""
    return bool(uci) and _UCI_PATTERN.match(uci) is not None


def is_player_ply(ply: int, player_color: str) -> bool:
    """True when `ply` (0 = White's first move) belongs to the player of `player_color`."""
    return (ply % 2 == 0) == (player_color == "white")


def get_material_value(board: chess.Board, color: chess.Color) -> int:
    """
    Calculates the total material value for a given color on the board.

    Args:
        board: A `chess.Board` object representing the position.
        color: A `chess.Color` (chess.WHITE or chess.BLACK) for which to
               calculate material.

    Returns:
        The total material value in pawn units.
    """
    material = 0
    for piece_type, value in PIECE_VALUES.items():
        material += len(board.pieces(piece_type, color)) * value
    return material
