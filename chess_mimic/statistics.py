# chess_mimic/statistics.py
"""
Manages statistics tracking for ChessMimic evaluation runs.

This module provides the StatisticsTracker class, a centralized component
for counting records, decisions and failures during a run and logging
them at the end together with the evaluation metrics.
"""
import logging
import os
from collections import Counter
from typing import Optional

from chess_mimic.config import settings
from chess_mimic.types import EvaluationMetrics, PositionResult

logger = logging.getLogger(settings.APP_NAME + ".Statistics")


def _format_cpl(cpl: Optional[float]) -> str:
    return "n/a" if cpl is None else f"{cpl:.1f}"


class StatisticsTracker:
    """
    A stateful class to aggregate and report statistics for an evaluation run.
    """

    def __init__(self):
        """Initializes the StatisticsTracker with all counters set to zero."""
        self.stats: Counter[str] = Counter()
        self.report_path: Optional[str] = None
        logger.debug("StatisticsTracker initialized.")

    def reset(self) -> None:
        """Resets all statistics to their initial state for a new run."""
        self.stats.clear()
        self.report_path = None
        logger.info("StatisticsTracker has been reset.")

    def add_records_read(self, count: int) -> None:
        self.stats["records_read"] += count

    def set_split(self, profile_records: int, held_out_records: int) -> None:
        self.stats["profile_records"] = profile_records
        self.stats["held_out_records"] = held_out_records

    def add_game_replayed(self) -> None:
        self.stats["games_replayed"] += 1

    def add_game_skipped(self, reason: str) -> None:
        """Increments the counter for skipped games, categorized by reason."""
        self.stats["games_skipped_total"] += 1
        self.stats[f"skipped_{reason}"] += 1

    def add_game_with_error(self) -> None:
        """Increments the counter for games aborted by an oracle failure."""
        self.stats["games_with_errors"] += 1

    def add_position(self, result: PositionResult) -> None:
        self.stats["positions_evaluated"] += 1
        self.stats[f"decisions_{result.bot_source}"] += 1

    def set_report_path(self, path: str) -> None:
        """Stores the path to the CSV report file for final reporting."""
        self.report_path = os.path.abspath(path)

    def log_summary(self, metrics: Optional[EvaluationMetrics] = None) -> None:
        """
        Logs a formatted summary of all collected statistics for the run.
        """
        logger.info("\n--- Evaluation Run Summary ---")

        display_order = [
            ("records_read", "Records Read"),
            ("profile_records", "Records Used for Profile"),
            ("held_out_records", "Records Held Out"),
            ("games_replayed", "Games Replayed"),
            ("games_skipped_total", "Games Skipped"),
            ("skipped_other_color", "  - Skipped (Player Had Other Color)"),
            ("games_with_errors", "Games with Oracle Errors"),
            ("positions_evaluated", "Positions Evaluated"),
            ("decisions_book", "  - Book Moves"),
            ("decisions_engine", "  - Engine Moves"),
        ]
        for key, display_text in display_order:
            if key in self.stats:
                logger.info(f"{display_text}: {self.stats[key]}")

        if metrics is not None and metrics.total_positions:
            logger.info("---")
            logger.info(f"Match Rate: {metrics.match_rate:.1%}")
            logger.info(f"Top-N Rate: {metrics.top_n_rate:.1%}")
            logger.info(f"Book Coverage: {metrics.book_coverage:.1%}")
            logger.info(f"Avg Player CPL: {_format_cpl(metrics.avg_actual_cpl)}")
            logger.info(f"Avg Bot CPL: {_format_cpl(metrics.avg_bot_cpl)}")
            logger.info(f"CPL Delta: {_format_cpl(metrics.cpl_delta)}")
            for phase, phase_metrics in metrics.by_phase.items():
                if phase_metrics.positions:
                    logger.info(
                        f"  {phase.capitalize()}: {phase_metrics.positions} positions, "
                        f"match {phase_metrics.match_rate:.1%}, top-N {phase_metrics.top_n_rate:.1%}, "
                        f"CPL {_format_cpl(phase_metrics.avg_cpl)} (bot {_format_cpl(phase_metrics.bot_avg_cpl)})"
                    )

        if self.report_path:
            if os.path.exists(self.report_path):
                logger.info(f"CSV Report Generated: '{self.report_path}'")
            else:
                logger.info(f"CSV Report Target (not generated): '{self.report_path}'")
