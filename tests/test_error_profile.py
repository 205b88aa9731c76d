# tests/test_error_profile.py
"""
Unit tests for building per-phase error profiles from evaluated games.
"""
import pytest

from chess_mimic.analysis.error_profile import build_error_profile_from_evals
from chess_mimic.types import GameEvalData

MOVES = "e4 e5 Nf3 Nc6"


def test_white_player_centipawn_loss_and_mistake():
    # ply 0: 15 -> 30 (gain), ply 2: 25 -> -200 (loss 225, a mistake)
    game = GameEvalData(moves=MOVES, player_color="white", evals=(30, 25, -200, -190))

    profile = build_error_profile_from_evals([game])

    assert profile.games_analyzed == 1
    assert profile.opening.total_moves == 2
    assert profile.opening.mistakes == 1
    assert profile.opening.blunders == 0
    assert profile.opening.error_rate == pytest.approx(0.5)
    assert profile.opening.avg_cpl == 112  # round(112.5)
    assert profile.overall == profile.opening
    assert profile.middlegame.total_moves == 0
    assert profile.endgame.total_moves == 0


def test_black_player_loss_is_measured_from_blacks_side():
    # ply 1: 30 -> 25 (Black gains), ply 3: -200 -> 200 (Black loses 400, a blunder)
    game = GameEvalData(moves=MOVES, player_color="black", evals=(30, 25, -200, 200))

    profile = build_error_profile_from_evals([game])

    assert profile.overall.total_moves == 2
    assert profile.overall.blunders == 1
    assert profile.overall.mistakes == 0
    assert profile.overall.blunder_rate == pytest.approx(0.5)
    assert profile.overall.avg_cpl == 200


def test_plies_without_evaluation_are_skipped():
    game = GameEvalData(moves=MOVES, player_color="white", evals=(30, None, -200, -190))

    profile = build_error_profile_from_evals([game])

    # ply 2 has no "before" eval, only ply 0 counts
    assert profile.overall.total_moves == 1
    assert profile.overall.mistakes == 0


def test_games_without_evals_or_moves_are_skipped():
    games = [
        GameEvalData(moves=MOVES, player_color="white", evals=()),
        GameEvalData(moves="", player_color="white", evals=(10,)),
    ]
    profile = build_error_profile_from_evals(games)
    assert profile.games_analyzed == 0
    assert profile.overall.total_moves == 0
    assert profile.overall.error_rate == 0.0


def test_unparsable_move_ends_replay():
    game = GameEvalData(moves="e4 e5 Zz9 Nc6 Bc4", player_color="white", evals=(30, 25, 20, 15, -500))
    profile = build_error_profile_from_evals([game])
    # ply 0 and ply 2 are counted (ply 2's eval exists), the replay stops after ply 2
    assert profile.overall.total_moves == 2
    assert profile.overall.blunders == 0


def test_empty_input_gives_zero_profile():
    profile = build_error_profile_from_evals([])
    assert profile.games_analyzed == 0
    for phase in ("opening", "middlegame", "endgame"):
        assert profile.for_phase(phase).total_moves == 0
