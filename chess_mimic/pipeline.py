# chess_mimic/pipeline.py
"""
The evaluation pipeline for the ChessMimic application.

Builds the player's error profile, opening book and style from one part of
their game records, creates a bot on top of a Stockfish oracle, replays the
held-out games and measures how closely the bot's choices match the
player's real moves.
"""
import logging
import time
from typing import Any, List, Mapping, Optional

from tqdm import tqdm

from chess_mimic.analysis.error_profile import build_error_profile_from_evals
from chess_mimic.analysis.move_style import analyze_style_from_records
from chess_mimic.book.opening_trie import build_opening_trie
from chess_mimic.bot.bot_controller import BotController
from chess_mimic.config import settings
from chess_mimic.config.resolver import resolve_bot_config
from chess_mimic.engine.stockfish_oracle import StockfishOracle
from chess_mimic.evaluation.game_replayer import GameReplayer
from chess_mimic.evaluation.metrics import compute_metrics
from chess_mimic.exceptions import NoCandidatesError, OracleError
from chess_mimic.records import split_records, stream_records
from chess_mimic.reporting.report_generator import ReportGenerator
from chess_mimic.statistics import StatisticsTracker
from chess_mimic.types import EvaluationMetrics, PlayerColor, PositionResult, SearchOracle

logger = logging.getLogger(settings.APP_NAME + ".Pipeline")


# --- TQDM Adapter for our ProgressReporter Protocol ---
class TqdmProgressReporter:
    """An adapter that makes a tqdm progress bar conform to our ProgressReporter protocol."""
    def __init__(self, pbar: tqdm):
        self._pbar = pbar

    def reset(self, total: int = 0) -> None:
        self._pbar.reset(total=total)

    def update(self, n: int = 1) -> None:
        self._pbar.update(n)

    def set_description(self, desc: str) -> None:
        self._pbar.set_description_str(desc)

    def close(self) -> None:
        self._pbar.close()


class EvaluationPipeline:
    """
    Orchestrates a full evaluation run from record file to report output.
    """

    def __init__(
        self,
        elo: float,
        color: PlayerColor,
        stockfish_path: Optional[str] = None,
        oracle: Optional[SearchOracle] = None,
        **kwargs,
    ):
        """
        Initializes the pipeline.

        Either `oracle` or `stockfish_path` must be given; a Stockfish oracle
        is started from the path when no oracle is injected.

        Keyword Args:
            bot_config: Partial overrides for the bot configuration.
            seed: Seed for the bot's random source.
            use_book / use_style / use_error_profile: Toggle the profile inputs.
            skip_top_n: Judge top-N moves from the bot's own candidates instead of
                a separate full-strength search.
            stockfish_threads / stockfish_hash_mb: Stockfish resources.
        """
        if oracle is None and not stockfish_path:
            raise ValueError("EvaluationPipeline needs either an oracle or a Stockfish path.")

        self.elo = elo
        self.color: PlayerColor = color
        self.bot_config: Optional[Mapping[str, Any]] = kwargs.get('bot_config')
        self.seed: int = kwargs.get('seed', settings.DEFAULT_SEED)
        self.use_book: bool = kwargs.get('use_book', True)
        self.use_style: bool = kwargs.get('use_style', True)
        self.use_error_profile: bool = kwargs.get('use_error_profile', True)
        self.skip_top_n: bool = kwargs.get('skip_top_n', False)

        self.oracle: SearchOracle = oracle or StockfishOracle(
            path=stockfish_path,
            threads=kwargs.get('stockfish_threads', settings.DEFAULT_STOCKFISH_THREADS),
            hash_mb=kwargs.get('stockfish_hash_mb', settings.DEFAULT_STOCKFISH_HASH_MB),
        )
        self.report_generator = ReportGenerator()
        self.stats_tracker = StatisticsTracker()

    def build_bot(self, profile_pairs) -> BotController:
        """Builds the profile inputs from the training records and creates the bot."""
        records = [record for record, _ in profile_pairs]
        eval_data = [evals for _, evals in profile_pairs if evals is not None]

        error_profile = None
        if self.use_error_profile and eval_data:
            error_profile = build_error_profile_from_evals(eval_data)
        elif self.use_error_profile:
            logger.warning("No evaluated records available; dynamic skill will stay at base skill.")

        trie_params = resolve_bot_config(self.bot_config).trie
        opening_trie = build_opening_trie(records, self.color, trie_params) if self.use_book else None
        style = analyze_style_from_records(records) if self.use_style else None
        return BotController(
            oracle=self.oracle,
            elo=self.elo,
            error_profile=error_profile,
            opening_trie=opening_trie,
            bot_color=self.color,
            config=self.bot_config,
            style_metrics=style,
            seed=self.seed,
        )

    def run(self, records_path: str, **kwargs) -> EvaluationMetrics:
        """Executes one evaluation run and returns its metrics."""
        start_time = time.time()
        self.stats_tracker.reset()

        train_fraction = kwargs.get('train_fraction', settings.DEFAULT_TRAIN_FRACTION)
        max_positions = kwargs.get('max_positions', settings.DEFAULT_MAX_POSITIONS)
        report_file = kwargs.get('report_path') or settings.DEFAULT_REPORT_FILENAME
        self.stats_tracker.set_report_path(report_file)

        results: List[PositionResult] = []
        metrics = compute_metrics(results)
        logger.info(f"Starting evaluation run for {self.color} at elo {self.elo}...")

        try:
            pairs = list(stream_records(records_path))
            self.stats_tracker.add_records_read(len(pairs))
            profile_pairs, held_out = split_records(pairs, train_fraction)
            self.stats_tracker.set_split(len(profile_pairs), len(held_out))

            bot = self.build_bot(profile_pairs)
            replayer = GameReplayer(bot, full_strength_top_n=not self.skip_top_n)

            with tqdm(total=max_positions, unit="pos") as pbar:
                progress = TqdmProgressReporter(pbar)
                progress.set_description("Replaying held-out games")
                for game_index, (record, eval_data) in enumerate(held_out):
                    remaining = max_positions - len(results)
                    if remaining <= 0:
                        break
                    if record.player_color != self.color:
                        self.stats_tracker.add_game_skipped("other_color")
                        continue
                    try:
                        evals = eval_data.evals if eval_data is not None else ()
                        game_results = replayer.replay_game(game_index, record, remaining, progress, evals)
                    except (OracleError, NoCandidatesError) as e:
                        logger.error(f"Oracle failure replaying game {game_index}: {e}. Skipping.")
                        self.stats_tracker.add_game_with_error()
                        continue
                    self.stats_tracker.add_game_replayed()
                    for result in game_results:
                        self.stats_tracker.add_position(result)
                    results.extend(game_results)

            metrics = compute_metrics(results)
            self.report_generator.generate_csv_report(results, report_file)
        finally:
            self.oracle.dispose()
            run_duration = time.time() - start_time
            logger.info(f"Evaluation run finished in {run_duration:.2f} seconds.")
            self.stats_tracker.log_summary(metrics)

        return metrics
