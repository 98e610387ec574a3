"""
csv_io.py
Persistence utilities for writing and reading verification transcripts as CSV files.
"""

import os
import csv
from typing import Dict, Iterable, List, Any

TRANSCRIPT_HEADER = [
    "game_id", "session_index", "decision", "range", "digest", "key", "secret",
    "counterpart_value", "result", "timestamp",
]
SUMMARY_HEADER = [
    "game_id", "timestamp", "agent", "dice", "first_mover", "computer_die", "user_die",
    "computer_roll", "user_roll", "winner", "status",
]

def append_rows_to_csv(rows: Iterable[Dict[str, Any]], csv_path: str, header: List[str]):
    """
    Append rows to csv_path; the header is written only when the file is new.
    Columns missing from a row are left empty.
    """
    new_file = not os.path.exists(csv_path)
    with open(csv_path, "a", newline='', encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=header, restval="")
        if new_file:
            writer.writeheader()
        writer.writerows(rows)

def append_row_to_csv(row: Dict[str, Any], csv_path: str, header: List[str]):
    append_rows_to_csv([row], csv_path, header)

def read_rows(csv_path: str) -> List[Dict[str, str]]:
    with open(csv_path, newline='', encoding="utf-8") as f:
        return list(csv.DictReader(f))

def get_transcript_header():
    return TRANSCRIPT_HEADER.copy()

def get_summary_header():
    return SUMMARY_HEADER.copy()
