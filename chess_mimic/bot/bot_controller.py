# chess_mimic/bot/bot_controller.py
"""
The bot controller: one human-like move decision per call.

`BotController.get_move` runs the full decision flow for a position:

 1. Opening book: if the position is in the player's book, play a sampled
    book move without consulting the oracle.
 2. Detect the game phase.
 3. Shift the base skill for that phase using the error profile.
 4. Pick a search depth from the skill table, tuned by position complexity.
 5. Ask the oracle for the top candidates, passing the skill as a strength hint.
 6. Drop candidates that are not coordinate moves.
 7. If nothing is left, fall back to the oracle's single best move.
 8. Nudge candidate scores toward the player's style.
 9. Boltzmann-select one candidate.
10. Attach a simulated think time.

The controller keeps no state between calls other than its resolved
configuration and the shared, read-only profile inputs.
"""
import logging
import random
from typing import Any, Mapping, Optional, Sequence

from chess_mimic.analysis.complexity import complexity_depth_adjust
from chess_mimic.analysis.move_style import apply_style_bonus
from chess_mimic.analysis.phase_detector import detect_phase
from chess_mimic.book.opening_trie import lookup_trie, sample_trie_move
from chess_mimic.config import settings
from chess_mimic.config.resolver import resolve_bot_config
from chess_mimic.exceptions import NoCandidatesError
from chess_mimic.selection.move_selector import (
    boltzmann_select,
    dynamic_skill_level,
    elo_to_skill_level,
)
from chess_mimic.types import (
    BotConfig,
    BotMoveResult,
    CandidateMove,
    ErrorProfile,
    GamePhase,
    OpeningTrie,
    PlayerColor,
    SearchOracle,
    StyleMetrics,
)
from chess_mimic.utils.chess_utils import is_valid_uci

logger = logging.getLogger(settings.APP_NAME + ".BotController")


def depth_for_skill(skill: int, config: BotConfig) -> int:
    """Depth of the first (max_skill, depth) row covering `skill`, else the last row's depth."""
    for max_skill, depth in config.depth_by_skill:
        if skill <= max_skill:
            return depth
    if config.depth_by_skill:
        return config.depth_by_skill[-1][1]
    return settings.FALLBACK_SEARCH_DEPTH


class BotController:
    """Emulates one specific player's move choices on top of a neutral search oracle."""

    def __init__(
        self,
        oracle: SearchOracle,
        elo: float,
        error_profile: Optional[ErrorProfile] = None,
        opening_trie: Optional[OpeningTrie] = None,
        bot_color: PlayerColor = "white",
        config: Optional[Mapping[str, Any]] = None,
        style_metrics: Optional[StyleMetrics] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        """
        Initializes the controller.

        Args:
            oracle: The search oracle used for candidate moves.
            elo: The target player's estimated elo.
            error_profile: Per-phase error statistics; skill stays flat without it.
            opening_trie: The player's book; every decision goes to the oracle without it.
            bot_color: The color the bot plays.
            config: Partial overrides merged onto the default bot configuration.
            style_metrics: The player's style; candidate scores are unbiased without it.
            rng: Random source for book sampling, move selection and think time.
            seed: Seeds a fresh random source when `rng` is not given.
        """
        self._config: BotConfig = resolve_bot_config(config)
        self._oracle = oracle
        self._base_skill: int = elo_to_skill_level(elo, self._config.elo, self._config.skill)
        self._error_profile = error_profile
        self._opening_trie = opening_trie
        self._style_metrics = style_metrics
        self._rng: random.Random = rng if rng is not None else random.Random(seed)
        self.bot_color: PlayerColor = bot_color
        logger.debug(
            f"BotController initialized for {bot_color}: elo {elo} -> base skill {self._base_skill}, "
            f"book={'yes' if opening_trie else 'no'}, profile={'yes' if error_profile else 'no'}, "
            f"style={'yes' if style_metrics else 'no'}."
        )

    @property
    def config(self) -> BotConfig:
        return self._config

    @property
    def oracle(self) -> SearchOracle:
        return self._oracle

    @property
    def base_skill(self) -> int:
        return self._base_skill

    def get_move(self, fen: str) -> BotMoveResult:
        """
        Decides the bot's move for the position `fen`.

        Raises:
            NoCandidatesError: If the oracle yields no move at all, even in
                the single-best-move fallback.
        """
        book_result = self._try_book_move(fen)
        if book_result is not None:
            return book_result

        phase = detect_phase(fen, self._config.phase)
        skill = (
            dynamic_skill_level(self._base_skill, self._error_profile, phase, self._config)
            if self._error_profile is not None
            else self._base_skill
        )

        complexity = self._config.complexity_depth
        depth = max(
            complexity.min_depth,
            depth_for_skill(skill, self._config) + complexity_depth_adjust(fen, complexity),
        )

        candidates = self._oracle.evaluate_multipv(
            fen, depth, self._config.boltzmann.multi_pv_count, skill
        )
        valid = [c for c in candidates if is_valid_uci(c.uci)]
        if len(valid) < len(candidates):
            logger.debug(f"Discarded {len(candidates) - len(valid)} malformed oracle moves for '{fen}'.")

        if not valid:
            return self._fallback_move(fen, depth, phase, skill)

        styled = (
            apply_style_bonus(valid, fen, self._style_metrics, self._config, skill)
            if self._style_metrics is not None
            else valid
        )
        selected = boltzmann_select(styled, skill, self._config, self._rng)

        result = BotMoveResult(
            uci=selected.uci,
            san=selected.san,
            source="engine",
            think_time_ms=self._engine_think_time(phase, styled),
            phase=phase,
            dynamic_skill=skill,
            candidates=tuple(styled),
        )
        logger.debug(
            f"Engine move {result.uci} ({phase}, skill {skill}, depth {depth}, "
            f"{len(styled)} candidates, {result.think_time_ms}ms)."
        )
        return result

    def _try_book_move(self, fen: str) -> Optional[BotMoveResult]:
        if self._opening_trie is None:
            return None
        node = lookup_trie(self._opening_trie, fen)
        if node is None:
            return None

        book_move = sample_trie_move(node, self._config.trie.win_bias, self._rng)
        if book_move is None or not is_valid_uci(book_move.uci):
            return None

        logger.debug(f"Book move {book_move.uci} ({book_move.count}/{node.total_games} games).")
        return BotMoveResult(
            uci=book_move.uci,
            san=book_move.san,
            source="book",
            think_time_ms=self._book_think_time(),
            phase=detect_phase(fen, self._config.phase),
            dynamic_skill=self._base_skill,
        )

    def _fallback_move(self, fen: str, depth: int, phase: GamePhase, skill: int) -> BotMoveResult:
        logger.warning(f"No valid oracle candidates for '{fen}'; falling back to single best move.")
        best = self._oracle.evaluate(fen, depth)
        if best is None:
            raise NoCandidatesError(f"Oracle returned no move for '{fen}', even in fallback.")
        return BotMoveResult(
            uci=best.uci,
            san=best.san,
            source="engine",
            think_time_ms=self._engine_think_time(phase, []),
            phase=phase,
            dynamic_skill=skill,
        )

    # --- Think time ---

    def _book_think_time(self) -> int:
        think_time = self._config.think_time
        if not think_time.enabled:
            return 0
        low, high = think_time.book_move_range
        return round(self._rng.uniform(low, high))

    def _engine_think_time(self, phase: GamePhase, candidates: Sequence[CandidateMove]) -> int:
        """
        Base time for the phase, plus a bonus when the top two candidates are
        close, plus uniform jitter, floored at the configured minimum.
        """
        think_time = self._config.think_time
        if not think_time.enabled:
            return 0

        time_ms = float(think_time.base_by_phase[phase])

        if len(candidates) >= 2 and think_time.close_eval_threshold > 0:
            gap = abs(candidates[0].score - candidates[1].score)
            if gap <= think_time.close_eval_threshold:
                closeness = 1 - gap / think_time.close_eval_threshold
                time_ms += closeness * think_time.difficulty_bonus_max

        time_ms += self._rng.uniform(-think_time.jitter, think_time.jitter)
        return max(round(think_time.minimum), round(time_ms))


def create_bot(
    oracle: SearchOracle,
    elo: float,
    error_profile: Optional[ErrorProfile] = None,
    opening_trie: Optional[OpeningTrie] = None,
    bot_color: PlayerColor = "white",
    config: Optional[Mapping[str, Any]] = None,
    style_metrics: Optional[StyleMetrics] = None,
    seed: Optional[int] = None,
) -> BotController:
    """Creates a bot controller, the primary entry point for consumers."""
    return BotController(
        oracle=oracle,
        elo=elo,
        error_profile=error_profile,
        opening_trie=opening_trie,
        bot_color=bot_color,
        config=config,
        style_metrics=style_metrics,
        seed=seed,
    )
