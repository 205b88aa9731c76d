# chess_mimic/records.py
"""
Reads historical game records of the profiled player.

Records come as JSON Lines, one already-parsed game per line:

    {"moves": "e4 e5 Nf3 ...", "player_color": "white",
     "result": "white", "evals": [18, 25, null, ...]}

`moves` is space-separated SAN, `result` is "white", "black", "draw" or
absent, and `evals` (optional) lists centipawns from White's POV after each
ply, with null for unevaluated plies. Malformed lines are skipped.
"""
import json
import logging
import os
import threading
from typing import Any, Dict, Generator, Iterable, List, Optional, Tuple

from chess_mimic.config import settings
from chess_mimic.exceptions import RecordImportError
from chess_mimic.types import GameEvalData, GameRecord

logger = logging.getLogger(settings.APP_NAME + ".Records")

_VALID_COLORS = ("white", "black")
_VALID_RESULTS = ("white", "black", "draw")


def _parse_line(raw: Dict[str, Any]) -> Tuple[GameRecord, Optional[GameEvalData]]:
    moves = raw.get("moves")
    if not isinstance(moves, str) or not moves.strip():
        raise ValueError("missing 'moves'")

    color = raw.get("player_color")
    if color not in _VALID_COLORS:
        raise ValueError(f"invalid player_color {color!r}")

    result = raw.get("result")
    if result is not None and result not in _VALID_RESULTS:
        raise ValueError(f"invalid result {result!r}")

    record = GameRecord(moves=moves.strip(), player_color=color, result=result)

    evals = raw.get("evals")
    if not evals:
        return record, None
    if not isinstance(evals, list):
        raise ValueError("'evals' must be a list")
    eval_data = GameEvalData(
        moves=record.moves,
        player_color=color,
        evals=tuple(None if v is None else float(v) for v in evals),
    )
    return record, eval_data


def stream_records(
    path: str, shutdown_event: Optional[threading.Event] = None
) -> Generator[Tuple[GameRecord, Optional[GameEvalData]], None, None]:
    """Streams (record, eval data or None) pairs from a JSON Lines file."""
    if not os.path.exists(path):
        raise RecordImportError(f"Record file not found: {path}")

    count = 0
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as infile:
            for line_no, line in enumerate(infile, start=1):
                if shutdown_event and shutdown_event.is_set():
                    break
                if not line.strip():
                    continue
                try:
                    raw = json.loads(line)
                    if not isinstance(raw, dict):
                        raise ValueError("record is not an object")
                    parsed = _parse_line(raw)
                except (ValueError, TypeError) as e:
                    logger.warning(f"Skipping malformed record at line {line_no}: {e}")
                    continue
                count += 1
                yield parsed
    except OSError as e:
        raise RecordImportError(f"IOError reading record file '{path}'") from e

    logger.info(f"Finished streaming {count} records from '{path}'.")


def split_records(
    pairs: Iterable[Tuple[GameRecord, Optional[GameEvalData]]], train_fraction: float
) -> Tuple[List[Tuple[GameRecord, Optional[GameEvalData]]], List[Tuple[GameRecord, Optional[GameEvalData]]]]:
    """Splits records in file order into a profile-building part and a held-out part."""
    items = list(pairs)
    cut = int(round(len(items) * train_fraction))
    return items[:cut], items[cut:]
