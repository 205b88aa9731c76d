# chess_mimic/engine/stockfish_oracle.py
"""
A search oracle backed by the Stockfish chess engine.

This module provides `StockfishOracle`, the production implementation of the
`SearchOracle` protocol. It wraps the `python-stockfish` library, ranks the
best few moves of a position at a requested depth, and ensures robust
process management.
"""
import logging
import os
import subprocess
from typing import Any, Dict, List, Optional

import chess
from stockfish import Stockfish, StockfishException

from chess_mimic.config import settings
from chess_mimic.exceptions import (
    OracleAnalysisError,
    OracleError,
    OracleInitializationError,
)
from chess_mimic.types import CandidateMove

logger = logging.getLogger(settings.APP_NAME + ".StockfishOracle")


def score_from_line(line: Dict[str, Any], side_to_move: chess.Color) -> Optional[float]:
    """
    Converts one `get_top_moves` line into centipawns from the side to move's POV.

    python-stockfish reports scores from White's point of view. A mate in n
    for the side to move becomes 30000 - n, a mate against it -(30000 - n).
    Returns None when the line carries no usable score.
    """
    mate_val = line.get("Mate")
    cp_val = line.get("Centipawn")

    if mate_val is not None:
        try:
            mate_wpov = int(mate_val)
        except (TypeError, ValueError):
            return None
        if mate_wpov == 0:
            return 0.0
        score_wpov = settings.MATE_SCORE_EQUIVALENT_CP - abs(mate_wpov)
        if mate_wpov < 0:
            score_wpov = -score_wpov
    elif cp_val is not None:
        try:
            score_wpov = float(cp_val)
        except (TypeError, ValueError):
            return None
    else:
        return None

    return score_wpov if side_to_move == chess.WHITE else -score_wpov


class StockfishOracle:
    """
    Ranks candidate moves with a Stockfish instance.
    This class is a context manager to ensure the engine process is terminated.
    """

    def __init__(
        self,
        path: str,
        threads: int = settings.DEFAULT_STOCKFISH_THREADS,
        hash_mb: int = settings.DEFAULT_STOCKFISH_HASH_MB,
    ):
        """
        Initializes the oracle and starts the Stockfish engine.

        Args:
            path: Absolute or relative path to the Stockfish executable.
            threads: Number of CPU threads for Stockfish.
            hash_mb: Hash memory (in MB) for Stockfish.
        """
        self.stockfish_path: str = os.path.realpath(path)
        self._stockfish_parameters: Dict[str, Any] = {
            "Threads": threads,
            "Hash": hash_mb,
        }
        self._stockfish: Optional[Stockfish] = None
        self._stockfish_version: str = settings.STOCKFISH_VERSION_UNKNOWN
        self._is_closed: bool = False

        self._initialize_engine()
        logger.info(
            f"StockfishOracle initialized. Version: {self._stockfish_version}, "
            f"Params: {self._stockfish_parameters}"
        )

    def _validate_stockfish_path(self) -> None:
        """Checks if the Stockfish path is valid and executable."""
        if not os.path.exists(self.stockfish_path):
            raise OracleInitializationError(f"Stockfish executable not found: {self.stockfish_path}")
        if not os.access(self.stockfish_path, os.X_OK):
            raise OracleInitializationError(f"Stockfish executable is not executable: {self.stockfish_path}")

    def _initialize_engine(self) -> None:
        if self._is_closed:
            raise OracleError("Oracle is permanently closed and cannot be re-initialized.")

        self._validate_stockfish_path()
        try:
            self._stockfish = Stockfish(
                path=self.stockfish_path,
                parameters=self._stockfish_parameters.copy(),
            )
            version_val = self._stockfish.get_stockfish_major_version()
            self._stockfish_version = str(version_val) if version_val else settings.STOCKFISH_VERSION_UNKNOWN
        except StockfishException as e:
            self._stockfish = None
            raise OracleInitializationError(f"Failed to initialize Stockfish via library: {e}") from e
        except (OSError, ValueError) as e:
            self._stockfish = None
            raise OracleInitializationError(f"Could not start Stockfish process: {e}") from e

    def get_stockfish_version(self) -> str:
        return self._stockfish_version

    def _ensure_engine_ready(self) -> Stockfish:
        if self._is_closed:
            raise OracleError("Operation on a closed StockfishOracle.")
        if self._stockfish is None:
            logger.warning("Stockfish engine not ready. Attempting re-initialization.")
            self._initialize_engine()
        assert self._stockfish is not None
        return self._stockfish

    def evaluate_multipv(
        self,
        fen: str,
        depth: int,
        num_candidates: int,
        strength_hint: Optional[int] = None,
    ) -> List[CandidateMove]:
        """
        Returns up to `num_candidates` moves for `fen`, best first.

        `strength_hint` is applied as Stockfish's Skill Level; without it the
        engine is put back at full strength so no weakening leaks into the
        next call.
        """
        stockfish = self._ensure_engine_ready()
        skill_level = settings.FULL_STRENGTH_SKILL_LEVEL if strength_hint is None else strength_hint
        board = chess.Board(fen)

        try:
            stockfish.set_skill_level(skill_level)
            stockfish.set_depth(depth)
            stockfish.set_fen_position(fen)
            lines = stockfish.get_top_moves(max(1, num_candidates), verbose=True)
        except StockfishException as e:
            logger.error(f"Stockfish process error on FEN '{fen}'.", exc_info=True)
            self._stockfish = None
            raise OracleAnalysisError(f"Stockfish engine failed on FEN '{fen}'.") from e

        candidates: List[CandidateMove] = []
        for line in lines:
            uci = line.get("Move") or ""
            score = score_from_line(line, board.turn)
            if score is None:
                logger.debug(f"Skipping engine line without score: {line}")
                continue
            candidates.append(CandidateMove(
                uci=uci,
                san=self._san_or_none(board, uci),
                score=score,
                depth=depth,
                pv=line.get("PVMoves") or uci,
            ))

        candidates.sort(key=lambda c: c.score, reverse=True)
        logger.debug(f"Oracle returned {len(candidates)} candidates for '{fen}' at depth {depth}.")
        return candidates

    def evaluate(self, fen: str, depth: int) -> Optional[CandidateMove]:
        """Returns the single best move at full strength, or None if there is none."""
        candidates = self.evaluate_multipv(fen, depth, 1)
        return candidates[0] if candidates else None

    @staticmethod
    def _san_or_none(board: chess.Board, uci: str) -> Optional[str]:
        try:
            return board.san(chess.Move.from_uci(uci))
        except (ValueError, AssertionError):
            return None

    def dispose(self) -> None:
        """Properly terminates the Stockfish engine process and closes the oracle."""
        if self._is_closed:
            return

        logger.info("Closing StockfishOracle and terminating engine process...")
        if self._stockfish and hasattr(self._stockfish, '_stockfish'):
            proc = self._stockfish._stockfish
            if proc and proc.poll() is None:
                try:
                    proc.terminate()
                    proc.wait(timeout=2.0)
                    logger.debug("Stockfish process terminated.")
                except ProcessLookupError:
                    logger.debug("Stockfish process was already gone.")
                except subprocess.TimeoutExpired:
                    logger.warning("Stockfish process did not terminate gracefully, killing it.")
                    proc.kill()
                    proc.wait(timeout=1.0)
                except OSError as e:
                    logger.error(f"Exception during Stockfish process termination: {e}", exc_info=True)

        self._stockfish = None
        self._is_closed = True
        logger.info("StockfishOracle closed.")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
