# chess_mimic/types.py
"""
A central module for shared data structures and type definitions.

Everything built once and then shared between bots (configuration, error
profiles, opening tries, style metrics) is a frozen dataclass so it can be
handed to any number of BotController instances without copying.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Protocol, Tuple

# --- Literal vocabularies ---
GamePhase = Literal["opening", "middlegame", "endgame"]
MoveSource = Literal["book", "engine"]
MoveType = Literal["capture", "check", "quiet"]
PlayerColor = Literal["white", "black"]
GameResult = Literal["white", "black", "draw"]

GAME_PHASES: Tuple[GamePhase, ...] = ("opening", "middlegame", "endgame")


# --- Bot configuration ---
@dataclass(frozen=True)
class EloRange:
    min: int
    max: int

@dataclass(frozen=True)
class SkillRange:
    min: int
    max: int

@dataclass(frozen=True)
class PhaseThresholds:
    """Non-pawn, non-king piece counts that separate the game phases."""
    opening_above: int
    endgame_at_or_below: int

@dataclass(frozen=True)
class ErrorThresholds:
    """Centipawn-loss cutoffs for mistake and blunder classification."""
    mistake: float
    blunder: float

@dataclass(frozen=True)
class DynamicSkillParams:
    scale: float
    perfect_phase_bonus: int
    min_overall_moves: int
    min_phase_moves: int

@dataclass(frozen=True)
class BoltzmannParams:
    multi_pv_count: int
    temperature_floor: float
    temperature_scale: float

@dataclass(frozen=True)
class TrieParams:
    max_ply: int
    min_games: int
    win_bias: float = 0.0

@dataclass(frozen=True)
class MoveStyleParams:
    influence: float
    skill_damping: float
    capture_bonus: float
    check_bonus: float
    quiet_bonus: float

@dataclass(frozen=True)
class ComplexityDepthParams:
    enabled: bool
    capture_threshold: int
    quiet_threshold: int
    tactical_bonus: int
    quiet_reduction: int
    min_depth: int

@dataclass(frozen=True)
class ThinkTimeParams:
    enabled: bool
    base_by_phase: Mapping[str, float]
    book_move_range: Tuple[float, float]
    difficulty_bonus_max: float
    close_eval_threshold: float
    jitter: float
    minimum: float

@dataclass(frozen=True)
class BotConfig:
    """The fully resolved, immutable configuration of one bot."""
    elo: EloRange
    skill: SkillRange
    phase: PhaseThresholds
    error: ErrorThresholds
    dynamic_skill: DynamicSkillParams
    boltzmann: BoltzmannParams
    depth_by_skill: Tuple[Tuple[int, int], ...]
    trie: TrieParams
    move_style: MoveStyleParams
    complexity_depth: ComplexityDepthParams
    think_time: ThinkTimeParams


# --- Error profile ---
@dataclass(frozen=True)
class PhaseErrorStats:
    total_moves: int = 0
    mistakes: int = 0
    blunders: int = 0
    avg_cpl: int = 0
    error_rate: float = 0.0
    blunder_rate: float = 0.0

@dataclass(frozen=True)
class ErrorProfile:
    opening: PhaseErrorStats
    middlegame: PhaseErrorStats
    endgame: PhaseErrorStats
    overall: PhaseErrorStats
    games_analyzed: int

    def for_phase(self, phase: GamePhase) -> PhaseErrorStats:
        return getattr(self, phase)


# --- Opening book ---
@dataclass(frozen=True)
class TrieMove:
    uci: str
    san: str
    count: int
    win_rate: float  # from the profiled player's perspective, 0..1

@dataclass(frozen=True)
class TrieNode:
    moves: Tuple[TrieMove, ...]
    total_games: int

# Read-only mapping from normalized position key to book node.
OpeningTrie = Mapping[str, TrieNode]


# --- Style ---
@dataclass(frozen=True)
class StyleMetrics:
    aggression: int = 50
    tactical: int = 50
    positional: int = 50
    endgame: int = 50
    sample_size: int = 0


# --- Moves and decisions ---
@dataclass(frozen=True)
class CandidateMove:
    """A move proposed by the search oracle. Score is from the side to move's POV."""
    uci: str
    score: float
    depth: int
    pv: str = ""
    san: Optional[str] = None

@dataclass(frozen=True)
class BotMoveResult:
    uci: str
    source: MoveSource
    think_time_ms: int
    phase: GamePhase
    dynamic_skill: int
    san: Optional[str] = None
    candidates: Optional[Tuple[CandidateMove, ...]] = None


# --- Historical game data ---
@dataclass(frozen=True)
class GameRecord:
    """A historical game of the profiled player. `moves` is space-separated SAN."""
    moves: str
    player_color: PlayerColor
    result: Optional[GameResult] = None

@dataclass(frozen=True)
class GameEvalData:
    """
    Per-ply evaluations of a historical game.

    evals[i] is the evaluation in centipawns from White's point of view after
    ply i. None or NaN marks a position that was not evaluated.
    """
    moves: str
    player_color: PlayerColor
    evals: Tuple[Optional[float], ...] = ()


# --- Evaluation run results ---
@dataclass(frozen=True)
class PositionResult:
    """The bot's decision at one historical position, compared with the player's move."""
    game_index: int
    ply: int
    fen: str
    phase: GamePhase
    actual_uci: str
    bot_uci: str
    bot_source: MoveSource
    dynamic_skill: int
    think_time_ms: int
    is_match: bool
    is_in_top_n: bool
    actual_cpl: Optional[float] = None
    bot_cpl: Optional[float] = None

@dataclass(frozen=True)
class PhaseMetrics:
    positions: int = 0
    match_rate: float = 0.0
    top_n_rate: float = 0.0
    avg_cpl: Optional[float] = None
    bot_avg_cpl: Optional[float] = None

@dataclass(frozen=True)
class EvaluationMetrics:
    total_positions: int
    match_rate: float
    top_n_rate: float
    book_coverage: float
    by_phase: Dict[str, PhaseMetrics] = field(default_factory=dict)
    avg_actual_cpl: Optional[float] = None
    avg_bot_cpl: Optional[float] = None
    cpl_delta: Optional[float] = None


# --- Collaborator protocols ---
class SearchOracle(Protocol):
    """
    The neutral search engine the bot consults.

    Implementations must tolerate repeated calls within one session. Omitting
    `strength_hint` must put the oracle back at full strength so state does
    not leak between decisions or players.
    """
    def evaluate_multipv(
        self,
        fen: str,
        depth: int,
        num_candidates: int,
        strength_hint: Optional[int] = None,
    ) -> List[CandidateMove]:
        """Returns up to `num_candidates` moves, best first."""
        ...

    def evaluate(self, fen: str, depth: int) -> Optional[CandidateMove]:
        """Returns the single best move, or None if the oracle found none."""
        ...

    def dispose(self) -> None:
        """Releases engine processes or other resources."""
        ...

class ProgressReporter(Protocol):
    """
    A protocol defining the interface for reporting progress.
    This allows the core logic to report progress without being tied
    to a specific UI implementation like tqdm.
    """
    def reset(self, total: int = 0) -> None:
        ...

    def update(self, n: int = 1) -> None:
        ...

    def set_description(self, desc: str) -> None:
        ...

    def close(self) -> None:
        ...
