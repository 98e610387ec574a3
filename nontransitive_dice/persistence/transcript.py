"""
transcript.py
Turns the reveals of a game into CSV rows and checks saved rows against their digests,
so the losing party can verify every random decision after the game.
Related modules:
- csv_io.py: Writes and reads the rows.
- core/commitment.py: verify() recomputes the HMAC.
"""

import datetime
from typing import Any, Dict, Iterable, List

from nontransitive_dice.core.commitment import verify
from nontransitive_dice.core.session import Reveal


def rows_from_reveals(game_id: str, decisions: Iterable[str], reveals: Iterable[Reveal],
                      timestamp: str = None) -> List[Dict[str, Any]]:
    """
    One row per resolved session.
    Args:
        game_id (str): Identifier shared by every row of the game.
        decisions (iterable[str]): Decision name for each reveal (e.g. 'first_mover').
        reveals (iterable[Reveal]): Reveals in session order.
        timestamp (str, optional): Defaults to now (UTC, ISO format).
    """
    timestamp = timestamp or datetime.datetime.now(datetime.timezone.utc).isoformat()
    rows = []
    for index, (decision, r) in enumerate(zip(decisions, reveals)):
        rows.append({
            "game_id": game_id,
            "session_index": index,
            "decision": decision,
            "range": r.range,
            "digest": r.digest,
            "key": r.key_hex,
            "secret": r.secret,
            "counterpart_value": r.counterpart_value,
            "result": r.result,
            "timestamp": timestamp,
        })
    return rows


def check_row(row: Dict[str, Any]) -> List[str]:
    """
    Verify one transcript row (values may be strings, as read back from CSV).
    Returns:
        list[str]: Problems found; empty when the row is consistent.
    """
    problems = []
    try:
        rng = int(row["range"])
        secret = int(row["secret"])
        counterpart = int(row["counterpart_value"])
        result = int(row["result"])
        key = bytes.fromhex(str(row["key"]))
    except (KeyError, ValueError) as e:
        return [f"malformed row: {e}"]
    if rng < 1:
        return [f"malformed row: range {rng}"]
    if not (0 <= counterpart < rng):
        problems.append(f"counterpart value {counterpart} outside [0, {rng})")
    if not (0 <= secret < rng):
        problems.append(f"secret {secret} outside [0, {rng})")
    if not verify(str(row["digest"]), key, secret):
        problems.append("digest does not match key and secret")
    if (secret + counterpart) % rng != result:
        problems.append(f"result {result} != ({secret} + {counterpart}) mod {rng}")
    return problems


def verify_rows(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Check every row of a transcript.
    Returns:
        list[dict]: The failing rows, each with an added 'problems' list.
    """
    failures = []
    for row in rows:
        problems = check_row(row)
        if problems:
            failures.append(dict(row, problems=problems))
    return failures
