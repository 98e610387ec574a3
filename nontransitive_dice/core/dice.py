"""
dice.py
Defines the Die model and the parser that turns command-line dice specs into dice.
Related modules:
- config.py: GameConfig supplies the minimum number of dice.
- probability.py: Compares dice face by face.
- engine.py: Holds the dice pool and indexes faces with fair session results.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .config import GameConfig


USAGE_EXAMPLE = "python UI/cli.py 2,2,4,4,9,9 1,1,6,6,8,8 3,3,5,5,7,7"


class ConfigurationError(ValueError):
    """
    Raised when the dice configuration cannot be used to start a game.
    The message always ends with a corrective usage example.
    """
    def __init__(self, message: str):
        self.reason = message
        super().__init__(f"{message}\nExample: {USAGE_EXAMPLE}")


@dataclass(frozen=True, eq=False)
class Die:
    """
    An immutable die with an ordered tuple of integer faces.
    Equality and hashing are by identity: two dice built from the same faces are still two dice.
    Args:
        faces (tuple[int]): Face values, at least one.
    """
    faces: Tuple[int, ...]

    def __post_init__(self):
        # accept any iterable but store a tuple
        object.__setattr__(self, "faces", tuple(self.faces))
        if len(self.faces) == 0:
            raise ValueError("a die must have at least one face")

    @property
    def num_faces(self) -> int:
        return len(self.faces)

    def face(self, index: int) -> int:
        """Return the face at a position (0-based)."""
        return self.faces[index]

    def __str__(self) -> str:
        return ",".join(str(f) for f in self.faces)


def parse_die(spec: str) -> Die:
    """
    Parse a single comma-separated die spec such as "2,2,4,4,9,9".
    Raises:
        ConfigurationError: If the spec is empty or holds a non-integer face.
    """
    parts = [p.strip() for p in spec.split(",")]
    if not spec.strip() or any(p == "" for p in parts):
        raise ConfigurationError(f"Die '{spec}' is empty or has an empty face.")
    faces = []
    for p in parts:
        try:
            faces.append(int(p))
        except ValueError:
            raise ConfigurationError(f"Die '{spec}' has a non-integer face '{p}'.") from None
    return Die(tuple(faces))


def parse_dice(args: Iterable[str], config: Optional[GameConfig] = None) -> List[Die]:
    """
    Parse and validate the dice configuration given on the command line.
    Args:
        args (iterable[str]): One comma-separated spec per die.
        config (GameConfig, optional): Supplies min_dice. Defaults to GameConfig().
    Returns:
        list[Die]: Dice in the order given.
    Raises:
        ConfigurationError: Too few dice, non-integer faces or inconsistent face counts.
    """
    config = config or GameConfig()
    args = list(args)
    if len(args) < config.min_dice:
        raise ConfigurationError(f"At least {config.min_dice} dice are required, got {len(args)}.")
    dice = [parse_die(a) for a in args]
    expected = dice[0].num_faces
    for d in dice[1:]:
        if d.num_faces != expected:
            raise ConfigurationError(
                f"All dice must have the same number of faces: [{d}] has {d.num_faces}, expected {expected}."
            )
    return dice
