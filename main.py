# main.py
"""
Main entry point for the ChessMimic application.

This script handles command-line argument parsing, sets up logging, and
runs one evaluation of a player-mimicking bot against the player's own
held-out games via the EvaluationPipeline.
"""
import argparse
import logging
import os
import sys
from typing import Any, Dict, Optional

# Adjust the Python path to include the project's root directory.
# This allows the script to be run directly from the project root via `python main.py`.
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from chess_mimic.config import settings
from chess_mimic.exceptions import ChessMimicError
from chess_mimic.pipeline import EvaluationPipeline
from chess_mimic.utils.logging_config import TqdmLoggingHandler, setup_logging


def find_stockfish_executable() -> Optional[str]:
    """Tries to find the Stockfish executable in common locations."""
    # Priority 1: Environment variable
    if 'STOCKFISH_PATH' in os.environ:
        path = os.environ['STOCKFISH_PATH']
        if os.path.exists(path) and os.access(path, os.X_OK):
            return path

    # Priority 2: Common relative paths for local development
    for path in ['./stockfish/stockfish', './stockfish', './stockfish.exe']:
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return os.path.abspath(path)

    # Priority 3: System PATH
    from shutil import which
    return which('stockfish')


def build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Turns the feature-toggle flags into partial bot configuration overrides."""
    overrides: Dict[str, Any] = {}
    if args.no_style:
        overrides["move_style"] = {"influence": 0.0}
    if args.no_think_time:
        overrides["think_time"] = {"enabled": False}
    if args.no_complexity_depth:
        overrides["complexity_depth"] = {"enabled": False}
    return overrides


def main():
    """Parses command-line arguments and runs the evaluation pipeline."""
    parser = argparse.ArgumentParser(
        description="Builds a bot that mimics a player from their game records "
                    "and measures how often it picks the player's real moves.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument("input_records", help="Path to the JSON Lines file of the player's game records.")
    parser.add_argument("--elo", type=float, required=True, help="The player's estimated elo.")
    parser.add_argument(
        "--color", choices=["white", "black"], default="white",
        help="The color whose games are profiled and replayed."
    )
    parser.add_argument(
        "-s", "--stockfish",
        default=find_stockfish_executable(),
        help="Path to the Stockfish executable. Tries to find it automatically if not provided."
    )
    parser.add_argument(
        "--train-fraction", type=float, default=settings.DEFAULT_TRAIN_FRACTION,
        help="Fraction of records (in file order) used to build the profile; the rest is held out."
    )
    parser.add_argument(
        "--max-positions", type=int, default=settings.DEFAULT_MAX_POSITIONS,
        help="Maximum number of held-out positions to evaluate."
    )
    parser.add_argument("--seed", type=int, default=settings.DEFAULT_SEED, help="Random seed for the bot.")
    parser.add_argument(
        "-r", "--report", dest="report_path", default=None,
        help=f"Path for the CSV report. Defaults to '{settings.DEFAULT_REPORT_FILENAME}'."
    )
    parser.add_argument(
        "--threads", type=int,
        default=min(settings.DEFAULT_STOCKFISH_THREADS, (os.cpu_count() or 1)),
        help="Number of CPU threads for Stockfish to use."
    )
    parser.add_argument(
        "--hash", type=int, default=settings.DEFAULT_STOCKFISH_HASH_MB,
        help="Hash memory (in MB) for Stockfish."
    )
    parser.add_argument("--no-book", action="store_true", help="Do not use an opening book.")
    parser.add_argument("--no-style", action="store_true", help="Do not bias candidates toward the player's style.")
    parser.add_argument(
        "--no-error-profile", action="store_true",
        help="Do not adjust skill per phase from the player's error profile."
    )
    parser.add_argument("--no-think-time", action="store_true", help="Report zero think time for every move.")
    parser.add_argument(
        "--no-complexity-depth", action="store_true",
        help="Do not adjust search depth by position complexity."
    )
    parser.add_argument(
        "--skip-top-n", action="store_true",
        help="Judge top-N moves from the bot's own candidates instead of a full-strength search (faster)."
    )
    parser.add_argument(
        "--log-level", default=settings.DEFAULT_LOG_LEVEL,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help="Set the logging level for console and file output."
    )
    parser.add_argument("--log-file", default=settings.DEFAULT_LOG_FILENAME, help="Path to the log file.")
    parser.add_argument("--no-console-log", action="store_true", help="Disable logging to the console.")

    args = parser.parse_args()

    setup_logging(
        log_level_str=args.log_level,
        log_file=args.log_file,
        log_to_console=not args.no_console_log,
        extra_handlers=None if args.no_console_log else [TqdmLoggingHandler()],
    )

    if not args.stockfish:
        logging.critical("Stockfish executable not found. Please specify the path with the -s/--stockfish argument or set the STOCKFISH_PATH environment variable.")
        sys.exit(1)
    if not 0.0 < args.train_fraction < 1.0:
        logging.critical(f"--train-fraction must be between 0 and 1, got {args.train_fraction}.")
        sys.exit(2)

    logging.info(f"{settings.APP_NAME} starting up...")

    try:
        pipeline = EvaluationPipeline(
            elo=args.elo,
            color=args.color,
            stockfish_path=args.stockfish,
            bot_config=build_config_overrides(args),
            seed=args.seed,
            use_book=not args.no_book,
            use_style=not args.no_style,
            use_error_profile=not args.no_error_profile,
            skip_top_n=args.skip_top_n,
            stockfish_threads=args.threads,
            stockfish_hash_mb=args.hash,
        )
        pipeline.run(
            records_path=args.input_records,
            train_fraction=args.train_fraction,
            max_positions=args.max_positions,
            report_path=args.report_path,
        )
    except ChessMimicError as e:
        logging.critical(f"Evaluation failed: {e}")
        sys.exit(1)
    except Exception as e:
        logging.critical(f"A fatal, unhandled exception occurred at the top level: {e}", exc_info=True)
        sys.exit(1)

    logging.info(f"{settings.APP_NAME} has finished successfully.")
    sys.exit(0)


if __name__ == "__main__":
    main()
