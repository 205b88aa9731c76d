# chess_mimic/evaluation/metrics.py
"""Aggregate metrics over the bot's decisions on held-out positions."""
from typing import Dict, Optional, Sequence

from chess_mimic.types import GAME_PHASES, EvaluationMetrics, PhaseMetrics, PositionResult


def _rate(count: int, total: int) -> float:
    return count / total if total else 0.0


def _average(values: Sequence[Optional[float]]) -> Optional[float]:
    """Mean of the known values, or None when there are none."""
    known = [v for v in values if v is not None]
    return sum(known) / len(known) if known else None


def compute_metrics(positions: Sequence[PositionResult]) -> EvaluationMetrics:
    """
    Match rate, top-N rate and book coverage, overall and per phase, plus the
    average centipawn loss of the player's and the bot's moves.

    CPL averages are None when no position carries a CPL; `cpl_delta` is the
    absolute gap between the two averages and is None unless both exist.
    """
    total = len(positions)
    by_phase: Dict[str, PhaseMetrics] = {}
    for phase in GAME_PHASES:
        in_phase = [p for p in positions if p.phase == phase]
        by_phase[phase] = PhaseMetrics(
            positions=len(in_phase),
            match_rate=_rate(sum(p.is_match for p in in_phase), len(in_phase)),
            top_n_rate=_rate(sum(p.is_in_top_n for p in in_phase), len(in_phase)),
            avg_cpl=_average([p.actual_cpl for p in in_phase]),
            bot_avg_cpl=_average([p.bot_cpl for p in in_phase]),
        )

    avg_actual = _average([p.actual_cpl for p in positions])
    avg_bot = _average([p.bot_cpl for p in positions])
    cpl_delta = abs(avg_bot - avg_actual) if avg_actual is not None and avg_bot is not None else None

    return EvaluationMetrics(
        total_positions=total,
        match_rate=_rate(sum(p.is_match for p in positions), total),
        top_n_rate=_rate(sum(p.is_in_top_n for p in positions), total),
        book_coverage=_rate(sum(p.bot_source == "book" for p in positions), total),
        by_phase=by_phase,
        avg_actual_cpl=avg_actual,
        avg_bot_cpl=avg_bot,
        cpl_delta=cpl_delta,
    )
