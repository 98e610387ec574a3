"""
engine.py
Implements the GameEngine class, the turn state machine that sequences one game:
first mover -> dice selection -> computer roll -> user roll -> outcome.
Every randomness-consuming step runs its own FairRandomSession.
Related modules:
- config.py: GameConfig configures key size and the computer agent.
- state.py: GameState, PlayerState, PublicState hold all game data.
- session.py: The commit-reveal protocol, and GameAborted.
- probability.py: The win probability table shown on help.
- rules.py: First-mover convention and outcome comparison.
"""

import random
from typing import Callable, Dict, List, Optional, Sequence

from .config import GameConfig
from .dice import Die
from .commitment import Commitment, commit
from .probability import probability_table
from .rules import first_mover, other, winner_of
from .session import FairRandomSession, GameAborted, Reveal
from .signals import Escape, Help
from .state import COMPUTER, USER, GameState, PlayerState, PublicState
from ..agents import make_agent


class IllegalStateError(Exception):
    """
    Raised when a step is run out of order (e.g. rolling before dice are selected).
    """
    pass


class GameEngine:
    """
    Main state machine for one human-vs-computer game. Owns the dice pool and the rolls,
    runs fair sessions through the injected input collector and emits events to the display sink.
    """
    def __init__(self, dice: Sequence[Die], collector, sink: Optional[Callable[[Dict], None]] = None,
                 config: Optional[GameConfig] = None,
                 commit_fn: Callable[[int, int], Commitment] = commit,
                 agent=None):
        """
        Args:
            dice (list[Die]): Already validated dice configuration.
            collector: Input collector with request_integer(range, prompt, options=None).
            sink (callable, optional): Receives every emitted event dict as it happens.
            config (GameConfig, optional): Game configuration. Defaults to GameConfig().
            commit_fn (callable): Commitment generator used by every session.
            agent (Agent, optional): Computer die-selection agent. Defaults to config.computer_agent.
        """
        self.config = config or GameConfig()
        if len(dice) < 2:
            raise ValueError("at least two dice are needed to play")
        self.dice = list(dice)
        self.collector = collector
        self.sink = sink
        self.commit_fn = commit_fn
        self.agent = agent or make_agent(self.config.computer_agent, rng=random.Random(self.config.rng_seed))
        self._events = []
        # turn_log will contain per-step snapshots that can be serialized to JSON
        self.turn_log = []
        self.state = self._fresh_state()

    def _fresh_state(self) -> GameState:
        players = (PlayerState(name=COMPUTER), PlayerState(name=USER))
        return GameState(config=self.config, players=players, public=PublicState())

    # Events are simple dicts, forwarded to the sink as soon as they are emitted
    def _emit(self, event: Dict):
        self._events.append(event)
        if self.sink is not None:
            self.sink(event)

    def get_events(self):
        """
        Return all events emitted so far (does not clear).
        """
        return list(self._events)

    def _snapshot(self, step: str):
        """
        Internal: Record a snapshot of the current state after a step.
        """
        public = self.state.public
        snap = {
            "step": step,
            "status": public.status,
            "first_mover": public.first_mover,
            "pool": list(public.pool),
            "winner": public.winner,
            "sessions": len(public.reveals),
            "players": [
                {"name": p.name, "die_index": p.die_index, "roll_index": p.roll_index, "roll": p.roll}
                for p in self.state.players
            ],
        }
        self.turn_log.append(snap)
        return snap

    def _require(self, status: str):
        if self.state.public.status != status:
            raise IllegalStateError(f"expected status {status}, game is {self.state.public.status}")

    def _help_event(self, context: str) -> Dict:
        return {
            "type": "HelpRequested",
            "context": context,
            "dice": [str(d) for d in self.dice],
            "table": probability_table(self.dice),
        }

    def _run_session(self, decision: str, range_: int, prompt: str) -> Reveal:
        """
        Internal: Run one fair session and record its reveal.
        Raises:
            GameAborted: Escape answered during the session.
        """
        session = FairRandomSession(range_, key_bytes=self.config.key_bytes, commit_fn=self.commit_fn)
        reveal = session.run(
            self.collector,
            prompt,
            on_publish=lambda digest: self._emit({
                "type": "CommitmentPublished", "decision": decision, "range": range_, "digest": digest,
            }),
            on_help=lambda: self._emit(self._help_event("session")),
            on_invalid=lambda value: self._emit({
                "type": "ContributionRejected", "decision": decision, "value": value, "range": range_,
            }),
        )
        self.state.public.reveals.append(reveal)
        self.state.public.decisions.append(decision)
        self._emit({
            "type": "CommitmentRevealed",
            "decision": decision,
            "range": reveal.range,
            "secret": reveal.secret,
            "key": reveal.key_hex,
            "digest": reveal.digest,
            "counterpart_value": reveal.counterpart_value,
            "result": reveal.result,
        })
        return reveal

    def reset(self) -> None:
        """
        Discard the current game. The next start() uses the full original pool.
        """
        self.state = self._fresh_state()
        self._events.clear()
        self.turn_log = []

    def start(self) -> None:
        """
        Start a new game: fill the pool with every configured die.
        """
        self._require("NOT_STARTED")
        self.state.public.pool = list(range(len(self.dice)))
        self.state.public.status = "FIRST_MOVER"
        self._emit({"type": "GameStarted", "dice": [str(d) for d in self.dice]})
        self._snapshot("start")

    def determine_first_mover(self) -> str:
        """
        Range-2 session framed as a guess of the computer's hidden bit.
        Returns:
            str: COMPUTER or USER.
        """
        self._require("FIRST_MOVER")
        reveal = self._run_session("first_mover", 2, "Try to guess my selection (0 or 1).")
        mover = first_mover(reveal.result)
        self.state.public.first_mover = mover
        self.state.public.status = "SELECT_DICE"
        self._emit({"type": "FirstMoverDetermined", "first_mover": mover})
        self._snapshot("first_mover")
        return mover

    def get_selection_view(self, name: str) -> Dict:
        """
        View handed to a selecting party.
        """
        opponent = self.state.player(other(name))
        return {
            "player": name,
            "pool": list(self.state.public.pool),
            "dice": self.dice,
            "opponent_die": opponent.die,
            "config": self.config,
        }

    def _take(self, name: str, die_index: int) -> None:
        pool = self.state.public.pool
        if die_index not in pool:
            raise IllegalStateError(f"die {die_index} is not in the pool")
        # removal by stable index, never by faces
        pool.remove(die_index)
        player = self.state.player(name)
        player.die_index = die_index
        player.die = self.dice[die_index]
        self._emit({"type": "DieSelected", "player": name, "die_index": die_index, "die": str(player.die)})

    def _computer_choice(self) -> int:
        return self.agent.choose_die(self.get_selection_view(COMPUTER))

    def _user_choice(self) -> int:
        """
        Ask the user for a die until a valid pool position is given.
        Raises:
            GameAborted: Escape answered.
        """
        while True:
            pool = self.state.public.pool
            options = [str(self.dice[i]) for i in pool]
            answer = self.collector.request_integer(len(pool), "Choose your die.", options=options)
            if isinstance(answer, Escape):
                raise GameAborted("user asked to exit during dice selection")
            if isinstance(answer, Help):
                self._emit(self._help_event("selection"))
                continue
            if isinstance(answer, int) and not isinstance(answer, bool) and 0 <= answer < len(pool):
                return pool[answer]
            self._emit({"type": "ContributionRejected", "decision": "select_die", "value": answer, "range": len(pool)})

    def _choose(self, name: str) -> None:
        die_index = self._computer_choice() if name == COMPUTER else self._user_choice()
        self._take(name, die_index)

    def select_dice(self) -> None:
        """
        First mover picks from the full pool, second mover from what remains.
        """
        self._require("SELECT_DICE")
        mover = self.state.public.first_mover
        self._choose(mover)
        self._choose(other(mover))
        self.state.public.status = "ROLL_COMPUTER"
        self._snapshot("select_dice")

    def roll(self, name: str) -> int:
        """
        Roll a party's die with a fair session over its face indices.
        Returns:
            int: Face value rolled.
        """
        expected = "ROLL_COMPUTER" if name == COMPUTER else "ROLL_USER"
        self._require(expected)
        player = self.state.player(name)
        die = player.die
        whose = "my" if name == COMPUTER else "your"
        reveal = self._run_session(
            f"roll_{name}", die.num_faces,
            f"It is time for {whose} roll. Add your number modulo {die.num_faces}.",
        )
        player.roll_index = reveal.result
        player.roll = die.face(reveal.result)
        self.state.public.status = "ROLL_USER" if name == COMPUTER else "RESOLVE"
        self._emit({"type": "DieRolled", "player": name, "roll_index": player.roll_index, "roll": player.roll})
        self._snapshot(f"roll_{name}")
        return player.roll

    def resolve(self) -> Optional[str]:
        """
        Compare the rolls. Terminal.
        Returns:
            str|None: Winner, or None for a draw.
        """
        self._require("RESOLVE")
        computer, user = self.state.players
        winner = winner_of(computer.roll, user.roll)
        self.state.public.winner = winner
        self.state.public.status = "ENDED"
        self._emit({"type": "GameEnded", "computer_roll": computer.roll, "user_roll": user.roll, "winner": winner})
        self._snapshot("resolve")
        return winner

    def is_terminal(self) -> bool:
        return self.state.public.status in ("ENDED", "ABORTED")

    def play(self) -> GameState:
        """
        Run a complete game. An escape at any question unwinds the whole game.
        Returns:
            GameState: status ENDED with a winner (or draw), or ABORTED with no outcome.
        """
        if self.state.public.status != "NOT_STARTED":
            self.reset()
        self.start()
        try:
            self.determine_first_mover()
            self.select_dice()
            self.roll(COMPUTER)
            self.roll(USER)
            self.resolve()
        except GameAborted as e:
            interrupted = self.state.public.status
            self.state.public.status = "ABORTED"
            # an aborted game records no rolls
            for p in self.state.players:
                p.roll_index = None
                p.roll = None
            self._emit({"type": "GameAborted", "during": interrupted, "reason": str(e)})
            self._snapshot("abort")
        return self.state

    @property
    def reveals(self) -> List[Reveal]:
        return list(self.state.public.reveals)
