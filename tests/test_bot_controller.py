# tests/test_bot_controller.py
"""
Unit tests for the bot controller's decision flow, using an in-memory oracle.
"""
import random

import pytest

from chess_mimic.book.opening_trie import build_opening_trie
from chess_mimic.bot.bot_controller import BotController, create_bot, depth_for_skill
from chess_mimic.config.resolver import DEFAULT_CONFIG
from chess_mimic.exceptions import ConfigurationError, NoCandidatesError
from chess_mimic.types import CandidateMove, StyleMetrics

from conftest import AFTER_E4_FEN, START_FEN, FakeOracle


@pytest.mark.parametrize("skill, expected_depth", [
    (0, 5), (3, 5), (4, 7), (10, 12), (16, 17), (19, 20), (20, 22),
])
def test_depth_for_skill(skill, expected_depth):
    assert depth_for_skill(skill, DEFAULT_CONFIG) == expected_depth


# --- Book path ---

def test_book_move_skips_oracle(fake_oracle, white_records):
    trie = build_opening_trie(white_records, "white")
    bot = BotController(fake_oracle, elo=1500, opening_trie=trie, seed=1)

    result = bot.get_move(START_FEN)

    assert result.source == "book"
    assert result.uci in {"e2e4", "d2d4"}
    assert result.san in {"e4", "d4"}
    assert result.phase == "opening"
    assert result.dynamic_skill == bot.base_skill
    assert 500 <= result.think_time_ms <= 2000
    assert fake_oracle.multipv_calls == []


def test_out_of_book_position_uses_oracle(fake_oracle, white_records):
    trie = build_opening_trie(white_records, "white")
    bot = BotController(fake_oracle, elo=1500, opening_trie=trie, seed=1)
    bot.get_move(AFTER_E4_FEN)
    assert len(fake_oracle.multipv_calls) == 1


# --- Engine path ---

def test_low_elo_end_to_end_depth_and_hint(fake_oracle):
    # elo 1100 -> skill 0 -> depth 5, quiet start position -> 4
    bot = BotController(fake_oracle, elo=1100, seed=3)

    result = bot.get_move(START_FEN)

    call = fake_oracle.multipv_calls[0]
    assert call["depth"] == 4
    assert call["strength_hint"] == 0
    assert call["num_candidates"] == 4
    assert result.source == "engine"
    assert result.dynamic_skill == 0
    assert result.uci in {"e2e4", "d2d4", "g1f3"}
    assert len(result.candidates) == 3
    assert result.think_time_ms >= 300


def test_complexity_adjustment_can_be_disabled(fake_oracle):
    bot = BotController(fake_oracle, elo=1100, config={"complexity_depth": {"enabled": False}}, seed=3)
    bot.get_move(START_FEN)
    assert fake_oracle.multipv_calls[0]["depth"] == 5


def test_full_strength_plays_best_candidate(fake_oracle):
    bot = BotController(fake_oracle, elo=2800, seed=0)
    results = {bot.get_move(START_FEN).uci for _ in range(20)}
    assert results == {"e2e4"}
    assert fake_oracle.multipv_calls[0]["depth"] == 21


def test_error_profile_shifts_skill_for_phase(fake_oracle, error_profile):
    # elo 1950 -> skill 10; the profile's opening is half as error-prone -> 13
    bot = BotController(fake_oracle, elo=1950, error_profile=error_profile, seed=0)
    result = bot.get_move(START_FEN)
    assert result.dynamic_skill == 13
    assert fake_oracle.multipv_calls[0]["strength_hint"] == 13


def test_invalid_candidates_are_filtered():
    oracle = FakeOracle(candidates=[
        CandidateMove(uci="", score=90, depth=5),
        CandidateMove(uci="(none)", score=80, depth=5),
        CandidateMove(uci="g1f3", score=20, depth=5),
    ])
    bot = BotController(oracle, elo=1100, seed=0)
    result = bot.get_move(START_FEN)
    assert result.uci == "g1f3"
    assert [c.uci for c in result.candidates] == ["g1f3"]
    assert oracle.evaluate_calls == []


def test_fallback_to_single_best_move():
    oracle = FakeOracle(
        candidates=[CandidateMove(uci="bad", score=0, depth=5)],
        best=CandidateMove(uci="d2d4", score=30, depth=5, san="d4"),
    )
    bot = BotController(oracle, elo=1100, seed=0)

    result = bot.get_move(START_FEN)

    assert result.uci == "d2d4"
    assert result.source == "engine"
    assert result.candidates is None
    assert oracle.evaluate_calls == [{"fen": START_FEN, "depth": 4}]


def test_no_move_at_all_raises():
    bot = BotController(FakeOracle(), elo=1500, seed=0)
    with pytest.raises(NoCandidatesError):
        bot.get_move(START_FEN)


def test_style_metrics_change_candidate_scores(fake_oracle):
    style = StyleMetrics(aggression=50, tactical=50, positional=100, endgame=50, sample_size=40)
    bot = BotController(fake_oracle, elo=1100, style_metrics=style, seed=0)
    result = bot.get_move(START_FEN)
    # all three replies are quiet: +20 * 0.5 at skill 0
    assert [c.score for c in result.candidates] == [pytest.approx(45), pytest.approx(40), pytest.approx(35)]


def test_think_time_can_be_disabled(fake_oracle, white_records):
    trie = build_opening_trie(white_records, "white")
    bot = BotController(
        fake_oracle, elo=1500, opening_trie=trie, config={"think_time": {"enabled": False}}, seed=0
    )
    assert bot.get_move(START_FEN).think_time_ms == 0
    assert bot.get_move(AFTER_E4_FEN).think_time_ms == 0


def test_close_candidates_raise_think_time():
    close = FakeOracle(candidates=[
        CandidateMove(uci="e2e4", score=30, depth=5),
        CandidateMove(uci="d2d4", score=30, depth=5),
    ])
    clear = FakeOracle(candidates=[
        CandidateMove(uci="e2e4", score=300, depth=5),
        CandidateMove(uci="d2d4", score=30, depth=5),
    ])
    no_jitter = {"think_time": {"jitter": 0}}
    close_time = BotController(close, elo=1100, config=no_jitter, seed=0).get_move(START_FEN).think_time_ms
    clear_time = BotController(clear, elo=1100, config=no_jitter, seed=0).get_move(START_FEN).think_time_ms
    assert clear_time == 1500
    assert close_time == 3500


def test_same_seed_gives_same_decisions(fake_oracle):
    first = create_bot(fake_oracle, elo=1300, seed=99)
    second = create_bot(fake_oracle, elo=1300, seed=99)
    assert [first.get_move(START_FEN) for _ in range(10)] == [second.get_move(START_FEN) for _ in range(10)]


def test_injected_rng_is_used(fake_oracle):
    first = BotController(fake_oracle, elo=1300, rng=random.Random(4))
    second = BotController(fake_oracle, elo=1300, rng=random.Random(4))
    assert first.get_move(START_FEN).uci == second.get_move(START_FEN).uci


def test_partial_phase_times_are_rejected_before_any_move(fake_oracle):
    with pytest.raises(ConfigurationError):
        BotController(fake_oracle, elo=1500, config={"think_time": {"base_by_phase": {"opening": 1000}}})
