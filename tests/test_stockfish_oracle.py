# tests/test_stockfish_oracle.py
"""
Unit tests for the Stockfish-backed oracle. The engine process itself is
replaced by a scripted stand-in for the python-stockfish `Stockfish` class.
"""
import chess
import pytest

from chess_mimic.engine import stockfish_oracle
from chess_mimic.engine.stockfish_oracle import StockfishOracle, score_from_line
from chess_mimic.exceptions import OracleAnalysisError, OracleError, OracleInitializationError
from stockfish import StockfishException

from conftest import AFTER_E4_FEN, START_FEN

# --- Tests for score_from_line ---

@pytest.mark.parametrize("line, side_to_move, expected_score", [
    # White to move, centipawn score
    ({"Centipawn": 125, "Move": "e2e4"}, chess.WHITE, 125.0),
    # Black to move, same White-POV score
    ({"Centipawn": 125, "Move": "e7e5"}, chess.BLACK, -125.0),
    # White mates in 3, White to move
    ({"Mate": 3, "Move": "d1h5"}, chess.WHITE, 29997.0),
    # White mates in 3, Black to move
    ({"Mate": 3, "Move": "e8f7"}, chess.BLACK, -29997.0),
    # Black mates in 2, White to move
    ({"Mate": -2, "Move": "g1f3"}, chess.WHITE, -29998.0),
    # Black mates in 2, Black to move
    ({"Mate": -2, "Move": "d8h4"}, chess.BLACK, 29998.0),
    # No score
    ({"Move": "e2e4"}, chess.WHITE, None),
    # Invalid score data
    ({"Centipawn": "invalid"}, chess.WHITE, None),
    # Mate 0 counts as level
    ({"Mate": 0}, chess.WHITE, 0.0),
])
def test_score_from_line(line, side_to_move, expected_score):
    score = score_from_line(line, side_to_move)
    if expected_score is None:
        assert score is None
    else:
        assert score == pytest.approx(expected_score)


# --- StockfishOracle with a scripted engine ---

class ScriptedStockfish:
    """Stands in for `stockfish.Stockfish`, returning canned top-move lines."""

    lines = []
    fail_analysis = False

    def __init__(self, path, parameters):
        self.path = path
        self.parameters = parameters
        self.calls = []
        self._stockfish = None

    def get_stockfish_major_version(self):
        return 16

    def set_skill_level(self, level):
        self.calls.append(("skill", level))

    def set_depth(self, depth):
        self.calls.append(("depth", depth))

    def set_fen_position(self, fen):
        self.calls.append(("fen", fen))

    def get_top_moves(self, num_top_moves, verbose=False):
        if self.fail_analysis:
            raise StockfishException("engine crashed")
        self.calls.append(("top", num_top_moves, verbose))
        return [dict(line) for line in self.lines[:num_top_moves]]


@pytest.fixture
def engine_path(tmp_path):
    path = tmp_path / "stockfish"
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def scripted(monkeypatch):
    monkeypatch.setattr(ScriptedStockfish, "lines", [])
    monkeypatch.setattr(ScriptedStockfish, "fail_analysis", False)
    monkeypatch.setattr(stockfish_oracle, "Stockfish", ScriptedStockfish)
    return ScriptedStockfish


def test_missing_executable_raises(tmp_path):
    with pytest.raises(OracleInitializationError):
        StockfishOracle(str(tmp_path / "does-not-exist"))


def test_candidates_are_sorted_best_first_with_san(scripted, engine_path):
    scripted.lines = [
        {"Move": "d2d4", "Centipawn": 20, "Mate": None, "PVMoves": "d2d4 d7d5"},
        {"Move": "e2e4", "Centipawn": 35, "Mate": None, "PVMoves": "e2e4 e7e5"},
        {"Move": "g1f3", "Centipawn": None, "Mate": None},
    ]
    with StockfishOracle(engine_path, threads=1, hash_mb=16) as oracle:
        candidates = oracle.evaluate_multipv(START_FEN, depth=8, num_candidates=3, strength_hint=4)
        engine = oracle._stockfish

        assert [c.uci for c in candidates] == ["e2e4", "d2d4"]
        assert [c.san for c in candidates] == ["e4", "d4"]
        assert candidates[0].pv == "e2e4 e7e5"
        assert all(c.depth == 8 for c in candidates)
        assert engine.parameters == {"Threads": 1, "Hash": 16}
        assert engine.calls == [("skill", 4), ("depth", 8), ("fen", START_FEN), ("top", 3, True)]
        assert oracle.get_stockfish_version() == "16"


def test_black_to_move_scores_are_flipped(scripted, engine_path):
    scripted.lines = [
        {"Move": "e7e5", "Centipawn": 40, "Mate": None},
        {"Move": "c7c5", "Centipawn": 25, "Mate": None},
    ]
    with StockfishOracle(engine_path) as oracle:
        candidates = oracle.evaluate_multipv(AFTER_E4_FEN, depth=6, num_candidates=2)
    assert [(c.uci, c.score) for c in candidates] == [("c7c5", -25.0), ("e7e5", -40.0)]


def test_evaluate_restores_full_strength(scripted, engine_path):
    scripted.lines = [{"Move": "e2e4", "Centipawn": 30, "Mate": None}]
    with StockfishOracle(engine_path) as oracle:
        best = oracle.evaluate(START_FEN, depth=10)
        assert oracle._stockfish.calls[0] == ("skill", 20)
    assert best.uci == "e2e4"


def test_evaluate_returns_none_without_moves(scripted, engine_path):
    with StockfishOracle(engine_path) as oracle:
        assert oracle.evaluate(START_FEN, depth=10) is None


def test_engine_failure_is_wrapped(scripted, engine_path):
    scripted.fail_analysis = True
    with StockfishOracle(engine_path) as oracle:
        with pytest.raises(OracleAnalysisError):
            oracle.evaluate_multipv(START_FEN, depth=5, num_candidates=2)


def test_closed_oracle_rejects_requests(scripted, engine_path):
    oracle = StockfishOracle(engine_path)
    oracle.dispose()
    oracle.dispose()
    with pytest.raises(OracleError):
        oracle.evaluate(START_FEN, depth=5)
