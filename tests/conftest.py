# tests/conftest.py
"""
Shared fixtures for the ChessMimic test suite.
"""
from typing import List, Optional, Sequence

import chess
import pytest

from chess_mimic.types import CandidateMove, ErrorProfile, GameRecord, PhaseErrorStats

START_FEN = chess.STARTING_FEN
AFTER_E4_FEN = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
# White: Kg1, Ra1; Black: Kg8, Ra8. Few captures, endgame material.
QUIET_ENDGAME_FEN = "r5k1/8/8/8/8/8/8/R5K1 w - - 0 1"


class FakeOracle:
    """
    An in-memory SearchOracle returning scripted candidates.

    Records every call so tests can assert on depth and strength hints.
    """

    def __init__(self, candidates: Sequence[CandidateMove] = (), best: Optional[CandidateMove] = None):
        self.candidates = list(candidates)
        self.best = best
        self.multipv_calls: List[dict] = []
        self.evaluate_calls: List[dict] = []
        self.disposed = False

    def evaluate_multipv(self, fen, depth, num_candidates, strength_hint=None):
        self.multipv_calls.append(
            {"fen": fen, "depth": depth, "num_candidates": num_candidates, "strength_hint": strength_hint}
        )
        return list(self.candidates[:num_candidates])

    def evaluate(self, fen, depth):
        self.evaluate_calls.append({"fen": fen, "depth": depth})
        return self.best

    def dispose(self):
        self.disposed = True


@pytest.fixture
def fake_oracle() -> FakeOracle:
    """An oracle offering the three most common replies to the starting position."""
    return FakeOracle(
        candidates=[
            CandidateMove(uci="e2e4", score=35, depth=10, san="e4"),
            CandidateMove(uci="d2d4", score=30, depth=10, san="d4"),
            CandidateMove(uci="g1f3", score=25, depth=10, san="Nf3"),
        ],
        best=CandidateMove(uci="e2e4", score=35, depth=10, san="e4"),
    )


@pytest.fixture
def white_records() -> List[GameRecord]:
    """
    Five games of a player with White: three 1. e4, two 1. d4.
    """
    return [
        GameRecord(moves="e4 e5 Nf3 Nc6 Bb5 a6", player_color="white", result="white"),
        GameRecord(moves="e4 c5 Nf3 d6", player_color="white", result="black"),
        GameRecord(moves="e4 e5 Nf3 Nf6", player_color="white", result="draw"),
        GameRecord(moves="d4 d5 c4 e6", player_color="white", result="white"),
        GameRecord(moves="d4 Nf6 c4 g6", player_color="white", result="white"),
    ]


def make_stats(total_moves: int, error_rate: float) -> PhaseErrorStats:
    errors = round(total_moves * error_rate)
    return PhaseErrorStats(
        total_moves=total_moves,
        mistakes=errors,
        blunders=0,
        avg_cpl=40,
        error_rate=error_rate,
        blunder_rate=0.0,
    )


@pytest.fixture
def error_profile() -> ErrorProfile:
    """
    A player twice as error-prone in the endgame and half as error-prone in
    the opening, relative to their overall rate of 0.2.
    """
    return ErrorProfile(
        opening=make_stats(40, 0.1),
        middlegame=make_stats(40, 0.2),
        endgame=make_stats(20, 0.4),
        overall=make_stats(100, 0.2),
        games_analyzed=10,
    )
