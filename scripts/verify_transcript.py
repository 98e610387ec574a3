"""
Re-verify every commitment in a saved transcript: the HMAC must match the revealed key and number,
and each result must equal (number + your number) mod range.
Usage: python scripts/verify_transcript.py data/transcript.csv [--game-id ID]
"""
import argparse
import sys

from nontransitive_dice.persistence import csv_io
from nontransitive_dice.persistence.transcript import verify_rows


def main():
    parser = argparse.ArgumentParser(description='Verify the commitments of saved games')
    parser.add_argument('transcript', type=str, help='Path to transcript.csv')
    parser.add_argument('--game-id', type=str, default=None, help='Only check rows of this game')
    args = parser.parse_args()

    rows = csv_io.read_rows(args.transcript)
    if args.game_id:
        rows = [r for r in rows if r.get('game_id') == args.game_id]
    if not rows:
        print('No transcript rows to verify.')
        return 1

    failures = verify_rows(rows)
    for f in failures:
        print(f"game {f['game_id']} session {f['session_index']} ({f['decision']}): {'; '.join(f['problems'])}")
    print(f"{len(rows) - len(failures)}/{len(rows)} commitments verified.")
    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
