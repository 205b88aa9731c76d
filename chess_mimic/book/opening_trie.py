# chess_mimic/book/opening_trie.py
"""
The player's personal opening book.

The book maps a normalized position key (FEN without move clocks) to the
moves the profiled player actually chose there, with how often and how
successfully. It is built once from game records and is read-only after
construction, so many bots can share one instance.
"""
import logging
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Optional

import chess

from chess_mimic.config import settings
from chess_mimic.config.resolver import DEFAULT_CONFIG
from chess_mimic.types import GameRecord, OpeningTrie, PlayerColor, TrieMove, TrieNode, TrieParams
from chess_mimic.utils.chess_utils import Position, is_player_ply, is_valid_uci, position_key

logger = logging.getLogger(settings.APP_NAME + ".OpeningTrie")

MIN_BIASED_WEIGHT = 0.1


@dataclass
class _MoveTally:
    san: str
    count: int = 0
    wins: int = 0
    draws: int = 0


def _accumulate_record(
    record: GameRecord,
    max_ply: int,
    positions: Dict[str, Dict[str, _MoveTally]],
) -> None:
    board = chess.Board()
    player_won = record.result == record.player_color
    is_draw = record.result == "draw"

    for ply, san in enumerate(record.moves.split()[:max_ply]):
        key = position_key(board) if is_player_ply(ply, record.player_color) else None
        try:
            move = board.push_san(san)
        except ValueError:
            logger.debug(f"Stopping book replay at ply {ply}: unparsable move '{san}'.")
            return

        if key is None:
            continue

        uci = move.uci()
        if not is_valid_uci(uci):
            continue
        tally = positions.setdefault(key, {}).setdefault(uci, _MoveTally(san=san))
        tally.count += 1
        if player_won:
            tally.wins += 1
        if is_draw:
            tally.draws += 1


def build_opening_trie(
    records: Iterable[GameRecord],
    color: PlayerColor,
    params: TrieParams = DEFAULT_CONFIG.trie,
) -> OpeningTrie:
    """
    Builds the book for the profiled player playing `color`.

    Only records where the player had `color` are used, and each is replayed
    for at most `params.max_ply` plies. Positions reached in fewer than
    `params.min_games` games are dropped; moves inside a node are sorted by
    how often they were played.
    """
    positions: Dict[str, Dict[str, _MoveTally]] = {}
    games_used = 0

    for record in records:
        if not record.moves or record.player_color != color:
            continue
        games_used += 1
        _accumulate_record(record, params.max_ply, positions)

    trie: Dict[str, TrieNode] = {}
    for key, tallies in positions.items():
        total_games = sum(t.count for t in tallies.values())
        if total_games < params.min_games:
            continue

        moves = [
            TrieMove(uci=uci, san=t.san, count=t.count, win_rate=t.wins / t.count)
            for uci, t in tallies.items() if t.count >= 1
        ]
        moves.sort(key=lambda m: m.count, reverse=True)
        if moves:
            trie[key] = TrieNode(moves=tuple(moves), total_games=total_games)

    logger.info(f"Opening book for {color}: {len(trie)} positions from {games_used} games.")
    return MappingProxyType(trie)


def lookup_trie(trie: OpeningTrie, position: Position) -> Optional[TrieNode]:
    """Returns the book node for `position`, or None when out of book."""
    return trie.get(position_key(position))


def sample_trie_move(
    node: TrieNode,
    win_bias: float = 0.0,
    rng: Optional[random.Random] = None,
) -> Optional[TrieMove]:
    """
    Samples a book move weighted by frequency and, optionally, win rate.

    weight = count                                        if win_bias == 0
    weight = max(0.1, count * (1 + win_bias * (win_rate - 0.5)))  otherwise

    With win_bias=1 a move scoring 75% gets a quarter more weight and one
    scoring 25% a quarter less.
    """
    if not node.moves:
        return None

    rng = rng if rng is not None else random.Random()
    if win_bias == 0:
        weights = [float(m.count) for m in node.moves]
    else:
        weights = [max(MIN_BIASED_WEIGHT, m.count * (1 + win_bias * (m.win_rate - 0.5))) for m in node.moves]

    remaining = rng.random() * sum(weights)
    for move, weight in zip(node.moves, weights):
        remaining -= weight
        if remaining <= 0:
            return move

    return node.moves[0]
