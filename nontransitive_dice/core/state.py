"""
state.py
Defines all game state dataclasses: PlayerState, PublicState, GameState.
Related modules:
- engine.py: Mutates and reads GameState during play.
- session.py: Reveal objects are collected in PublicState.reveals.
- config.py: GameConfig is part of GameState.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import GameConfig
from .dice import Die
from .session import Reveal

COMPUTER = "computer"
USER = "user"


@dataclass
class PlayerState:
    """
    Stores one party's die and roll.
    Fields:
        name (str): COMPUTER or USER.
        die_index (int|None): Stable index of the chosen die in the configured dice.
        die (Die|None): The chosen die.
        roll_index (int|None): Face index produced by the fair session.
        roll (int|None): Face value rolled.
    """
    name: str
    die_index: Optional[int] = None
    die: Optional[Die] = None
    roll_index: Optional[int] = None
    roll: Optional[int] = None


@dataclass
class PublicState:
    """
    Stores the state visible to both parties.
    Fields:
        status (str): NOT_STARTED | FIRST_MOVER | SELECT_DICE | ROLL_COMPUTER | ROLL_USER | RESOLVE | ENDED | ABORTED.
        first_mover (str|None): COMPUTER or USER.
        pool (list[int]): Indices of the dice still available for selection.
        winner (str|None): COMPUTER, USER or None (draw or no outcome).
        reveals (list[Reveal]): Every resolved fair session, in order.
        decisions (list[str]): Decision name of each reveal (first_mover, roll_computer, roll_user).
    """
    status: str = "NOT_STARTED"
    first_mover: Optional[str] = None
    pool: List[int] = field(default_factory=list)
    winner: Optional[str] = None
    reveals: List[Reveal] = field(default_factory=list)
    decisions: List[str] = field(default_factory=list)


@dataclass
class GameState:
    """
    Composite state for one play-through: config, both parties and public state.
    Fields:
        config (GameConfig): Game configuration.
        players (tuple): (computer, user) PlayerState.
        public (PublicState): Public game state.
    """
    config: GameConfig
    players: Tuple[PlayerState, PlayerState]
    public: PublicState

    def player(self, name: str) -> PlayerState:
        computer, user = self.players
        return computer if name == COMPUTER else user
