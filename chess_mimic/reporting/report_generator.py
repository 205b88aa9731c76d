# chess_mimic/reporting/report_generator.py
"""
Generates reports from evaluation runs.

This module provides the `ReportGenerator` class, which writes one CSV row
per position the bot was asked about: what the player played, what the
bot chose, where the decision came from, at which skill, and the
centipawn loss of both moves.
"""
import csv
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

from chess_mimic.config import settings
from chess_mimic.exceptions import CSVReportError
from chess_mimic.types import PositionResult

logger = logging.getLogger(settings.APP_NAME + ".ReportGenerator")


def _format_cpl(cpl: Optional[float]) -> str:
    """Rounds a centipawn loss for the report; unknown losses stay empty."""
    return "" if cpl is None else str(round(cpl))


class ReportGenerator:
    """Generates reports from evaluation data."""

    _CSV_HEADERS: List[str] = [
        "GameIndex", "Ply", "MoveNumber", "Phase", "FEN",
        "ActualMove", "BotMove", "BotSource", "DynamicSkill",
        "ThinkTimeMs", "Match", "InTopN", "ActualCPL", "BotCPL",
    ]

    def __init__(self):
        """Initializes the ReportGenerator."""
        logger.debug("ReportGenerator initialized.")

    def _row_for(self, result: PositionResult) -> Dict[str, Any]:
        return {
            "GameIndex": result.game_index,
            "Ply": result.ply,
            "MoveNumber": result.ply // 2 + 1,
            "Phase": result.phase,
            "FEN": result.fen,
            "ActualMove": result.actual_uci,
            "BotMove": result.bot_uci,
            "BotSource": result.bot_source,
            "DynamicSkill": result.dynamic_skill,
            "ThinkTimeMs": result.think_time_ms,
            "Match": int(result.is_match),
            "InTopN": int(result.is_in_top_n),
            "ActualCPL": _format_cpl(result.actual_cpl),
            "BotCPL": _format_cpl(result.bot_cpl),
        }

    def generate_csv_report(self, results: Sequence[PositionResult], output_report_path: str) -> None:
        """Writes one CSV row per evaluated position."""
        if not results:
            logger.info("No position results provided; CSV report will not be generated.")
            return

        logger.info(f"Generating CSV report for {len(results)} positions at: '{output_report_path}'")
        rows_to_write = [self._row_for(r) for r in results]

        try:
            if (output_dir := os.path.dirname(output_report_path)):
                os.makedirs(output_dir, exist_ok=True)

            with open(output_report_path, 'w', newline='', encoding='utf-8') as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=self._CSV_HEADERS)
                writer.writeheader()
                writer.writerows(rows_to_write)
            logger.info(f"CSV report generated successfully: '{output_report_path}'")
        except OSError as e:
            raise CSVReportError(f"Could not write CSV report '{output_report_path}': {e}") from e
