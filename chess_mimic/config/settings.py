# chess_mimic/config/settings.py
"""
Configuration settings for the ChessMimic application.

This module centralizes all tunable parameters, default values, thresholds,
and file paths used throughout the application. The bot parameter tree
(`DEFAULT_BOT_CONFIG`) is a plain nested mapping; `config.resolver` merges
per-bot overrides onto it and turns the result into a frozen `BotConfig`.
"""
from typing import Any, Dict, Final

# --- Bot Parameter Defaults ---
# Keys mirror the fields of `types.BotConfig`. Each bot resolves its own
# immutable copy; nothing mutates this tree.
DEFAULT_BOT_CONFIG: Final[Dict[str, Any]] = {
    # Linear mapping: elo 1100 -> skill 0, elo 2800 -> skill 20
    "elo": {"min": 1100, "max": 2800},
    "skill": {"min": 0, "max": 20},

    # Non-pawn, non-king piece count. The starting position has 14.
    # opening: > 10, middlegame: 7-10, endgame: <= 6
    "phase": {
        "opening_above": 10,
        "endgame_at_or_below": 6,
    },

    # Centipawn loss cutoffs
    "error": {
        "mistake": 100,
        "blunder": 300,
    },

    # adjustment = round(scale * log2(phase_error_rate / overall_error_rate))
    "dynamic_skill": {
        "scale": -3,
        "perfect_phase_bonus": 6,
        "min_overall_moves": 50,
        "min_phase_moves": 10,
    },

    # temperature = max(floor, (skill_max - dynamic_skill) * scale)
    "boltzmann": {
        "multi_pv_count": 4,
        "temperature_floor": 0.1,
        "temperature_scale": 15,
    },

    # (max_skill, depth) rows, checked in order
    "depth_by_skill": [
        [3, 5],
        [6, 7],
        [9, 10],
        [12, 12],
        [15, 15],
        [17, 17],
        [19, 20],
        [20, 22],
    ],

    "trie": {
        "max_ply": 40,  # 20 full moves
        "min_games": 3,
        "win_bias": 0.0,
    },

    # adjusted = score + bonus * influence * (1 - skill/skill_max * skill_damping)
    "move_style": {
        "influence": 0.5,
        "skill_damping": 0.7,
        "capture_bonus": 30,
        "check_bonus": 25,
        "quiet_bonus": 20,
    },

    "complexity_depth": {
        "enabled": True,
        "capture_threshold": 6,
        "quiet_threshold": 1,
        "tactical_bonus": 2,
        "quiet_reduction": 1,
        "min_depth": 3,
    },

    # All times in milliseconds
    "think_time": {
        "enabled": True,
        "base_by_phase": {"opening": 1500, "middlegame": 3000, "endgame": 2500},
        "book_move_range": [500, 2000],
        "difficulty_bonus_max": 2000,
        "close_eval_threshold": 20,
        "jitter": 1000,
        "minimum": 300,
    },
}

FALLBACK_SEARCH_DEPTH: Final[int] = 22
"""Search depth used when the depth-by-skill table is empty."""

# --- Score Interpretation ---
MATE_SCORE_EQUIVALENT_CP: Final[float] = 30000.0
"""A large centipawn value used to numerically represent a mate."""

STARTING_POSITION_EVAL_CP: Final[float] = 15.0
"""Evaluation assumed for the initial position when a record has no eval before ply 0."""

# --- Evaluation Reference Search ---
TOP_N_REFERENCE_DEPTH: Final[int] = 12
"""Depth of the full-strength search that decides whether the player's move was a top-N move."""

TOP_N_REFERENCE_LINES: Final[int] = 4
"""Number of full-strength lines counted as top-N."""

FULL_STRENGTH_SKILL_LEVEL: Final[int] = 20
"""Stockfish skill level restored whenever no strength hint is given."""

# --- Style Analysis ---
STYLE_DAMPING_PRIOR_GAMES: Final[int] = 30
"""Pseudo-count pulling style scores toward 50 when few games are available."""

STYLE_SACRIFICE_MIN_MATERIAL: Final[int] = 3
"""Own material drop (pawn units) counted as a sacrifice."""

STYLE_SACRIFICE_SCAN_PLIES: Final[int] = 40
"""Plies scanned for sacrifices in each game."""

# --- Stockfish Engine Parameters ---
DEFAULT_STOCKFISH_THREADS: Final[int] = 2
"""Default number of CPU threads for Stockfish."""

DEFAULT_STOCKFISH_HASH_MB: Final[int] = 256
"""Default hash memory (in MB) for Stockfish."""

STOCKFISH_VERSION_UNKNOWN: Final[str] = "Unknown"
"""Placeholder for when the Stockfish version cannot be determined."""

# --- Evaluation Run Defaults ---
DEFAULT_TRAIN_FRACTION: Final[float] = 0.8
"""Share of the records used to build the profile; the rest is replayed against the bot."""

DEFAULT_MAX_POSITIONS: Final[int] = 200
"""Maximum number of held-out positions the bot is asked about in one run."""

DEFAULT_SEED: Final[int] = 42
"""Seed for the bot's random source in evaluation runs."""

# --- File Names and Paths ---
DEFAULT_REPORT_FILENAME: Final[str] = "mimic_evaluation_report.csv"
"""Default filename for the per-position CSV report."""

DEFAULT_LOG_FILENAME: Final[str] = "chess_mimic.log"
"""Default filename for the application log."""

# --- Logging ---
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
"""Default logging level for the application."""

# --- Application Specific ---
APP_NAME: Final[str] = "ChessMimic"
"""Application name, used for logging and other identifiers."""
