import argparse
import datetime
import hashlib
import os
import sys
from typing import List, Optional, Sequence

from tabulate import tabulate

from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import ConfigurationError, Die, parse_dice
from nontransitive_dice.core.commitment import RandomnessSourceError
from nontransitive_dice.core.engine import GameEngine
from nontransitive_dice.core.probability import probability_table
from nontransitive_dice.core.signals import ESCAPE, HELP
from nontransitive_dice.agents import AGENT_MAP
from nontransitive_dice.persistence import csv_io, serializer, transcript
from nontransitive_dice.persistence.recorder import InMemoryRecorder


PROTOCOL_HELP = (
    "I pick a number first and show you its HMAC (SHA3-256) so I cannot change it later.\n"
    "Your number is added to mine modulo the range, so neither of us controls the result alone.\n"
    "After you answer I show my number and the key: recompute HMAC(key, number) to check me."
)


class ConsoleInput:
    """
    Input collector backed by input(). Re-prompts on anything that is not a number,
    the escape input or the help input.
    """
    def __init__(self, config: GameConfig):
        self.config = config

    def request_integer(self, range_: int, prompt: str, options: Optional[Sequence[str]] = None):
        while True:
            print(prompt)
            labels = options if options is not None else [str(i) for i in range(range_)]
            for i, label in enumerate(labels):
                print(f"{i} - {label}")
            print(f"{self.config.escape_input} - exit")
            print(f"{self.config.help_input} - help")
            try:
                raw = input("Your selection: ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                return ESCAPE
            if raw.upper() == self.config.escape_input.upper():
                return ESCAPE
            if raw == self.config.help_input:
                return HELP
            try:
                return int(raw)
            except ValueError:
                print(f"Please enter a number between 0 and {range_ - 1}.")


def render_table(dice: Sequence[Die]) -> str:
    """
    Win probability of the user's die (rows) against the computer's die (columns).
    """
    table = probability_table(dice)
    headers = ["User dice v"] + [str(d) for d in dice]
    rows = []
    for i, row_die in enumerate(dice):
        row = [str(row_die)]
        for j, p in enumerate(table[i]):
            cell = f"{float(p):.4f}"
            row.append(f"- ({cell})" if i == j else cell)
        rows.append(row)
    return "Probability of the win for the user:\n" + tabulate(rows, headers=headers, tablefmt="grid")


class ConsoleDisplay:
    """
    Display sink printing engine events. Also keeps them in an InMemoryRecorder.
    """
    def __init__(self, dice: Sequence[Die]):
        self.dice = dice
        self.recorder = InMemoryRecorder()

    def __call__(self, event):
        self.recorder.record(event)
        handler = getattr(self, "_on_" + event["type"], None)
        if handler is not None:
            handler(event)

    def _on_GameStarted(self, e):
        print("Let's determine who makes the first move.")

    def _on_CommitmentPublished(self, e):
        print(f"I selected a random value in the range 0..{e['range'] - 1} (HMAC={e['digest'].upper()}).")

    def _on_ContributionRejected(self, e):
        print(f"Invalid answer {e['value']!r}: choose a number between 0 and {e['range'] - 1}.")

    def _on_HelpRequested(self, e):
        if e["context"] == "session":
            print(PROTOCOL_HELP)
        print(render_table(self.dice))

    def _on_CommitmentRevealed(self, e):
        print(f"My number is {e['secret']} (KEY={e['key'].upper()}).")
        print(f"The fair number generation result is {e['secret']} + {e['counterpart_value']} "
              f"= {e['result']} (mod {e['range']}).")

    def _on_FirstMoverDetermined(self, e):
        if e["first_mover"] == "user":
            print("You make the first move.")
        else:
            print("I make the first move.")

    def _on_DieSelected(self, e):
        if e["player"] == "computer":
            print(f"I choose the [{e['die']}] dice.")
        else:
            print(f"You choose the [{e['die']}] dice.")

    def _on_DieRolled(self, e):
        whose = "My" if e["player"] == "computer" else "Your"
        print(f"{whose} roll result is {e['roll']}.")

    def _on_GameEnded(self, e):
        c, u = e["computer_roll"], e["user_roll"]
        if e["winner"] == "user":
            print(f"You win ({u} > {c})!")
        elif e["winner"] == "computer":
            print(f"I win ({c} > {u})!")
        else:
            print(f"It's a draw ({u} = {c}).")

    def _on_GameAborted(self, e):
        print("Game aborted. Goodbye!")


def save_transcript(engine: GameEngine, data_dir: str, agent_name: str) -> str:
    """
    Append the game's reveals and summary to CSV files under data_dir, and dump the turn log as JSON.
    Returns:
        str: Path of the transcript CSV.
    """
    timestamp = datetime.datetime.now(datetime.timezone.utc).isoformat()
    raw_id = f"cli_{timestamp}_{os.getpid()}_{agent_name}"
    game_id = hashlib.sha256(raw_id.encode()).hexdigest()[:16]
    os.makedirs(data_dir, exist_ok=True)

    public = engine.state.public
    rows = transcript.rows_from_reveals(game_id, public.decisions, public.reveals, timestamp)
    transcript_csv = os.path.join(data_dir, "transcript.csv")
    csv_io.append_rows_to_csv(rows, transcript_csv, csv_io.get_transcript_header())

    computer, user = engine.state.players
    summary_row = {
        "game_id": game_id,
        "timestamp": timestamp,
        "agent": agent_name,
        "dice": " ".join(str(d) for d in engine.dice),
        "first_mover": public.first_mover,
        "computer_die": str(computer.die) if computer.die else None,
        "user_die": str(user.die) if user.die else None,
        "computer_roll": computer.roll,
        "user_roll": user.roll,
        "winner": public.winner,
        "status": public.status,
    }
    csv_io.append_row_to_csv(summary_row, os.path.join(data_dir, "summary.csv"), csv_io.get_summary_header())

    with open(os.path.join(data_dir, f"turn_log_{game_id}.json"), "w", encoding="utf-8") as f:
        f.write(serializer.dumps(engine.turn_log))
    return transcript_csv


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Non-transitive dice game with provably fair rolls")
    parser.add_argument("dice", nargs="*", help="Dice as comma-separated faces, e.g. 2,2,4,4,9,9")
    parser.add_argument("--agent", type=str, default="random", choices=sorted(AGENT_MAP),
                        help="How the computer picks its die")
    parser.add_argument("--save-transcript", type=str, default=None, metavar="DIR",
                        help="Directory to append the verification transcript to")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the computer's die choice (protocol randomness is never seeded)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = GameConfig(computer_agent=args.agent, rng_seed=args.seed)
    try:
        dice = parse_dice(args.dice, config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    display = ConsoleDisplay(dice)
    engine = GameEngine(dice, ConsoleInput(config), sink=display, config=config)
    try:
        state = engine.play()
    except RandomnessSourceError as e:
        print(f"Fatal: {e}", file=sys.stderr)
        return 2

    if args.save_transcript and state.public.reveals:
        path = save_transcript(engine, args.save_transcript, args.agent)
        print(f"\n[Verification transcript saved to {path}]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
