"""
rules.py
Fixed, published conventions of the game.
Related modules:
- engine.py: Maps the first-mover session result and compares the final rolls.
"""

from typing import Optional

from .state import COMPUTER, USER


def first_mover(result: int) -> str:
    """
    Map the range-2 session result to the party that selects first.
    0 -> the committing party (computer), 1 -> the user.
    """
    if result not in (0, 1):
        raise ValueError("first-mover result must be 0 or 1")
    return COMPUTER if result == 0 else USER


def other(name: str) -> str:
    return USER if name == COMPUTER else COMPUTER


def winner_of(computer_roll: int, user_roll: int) -> Optional[str]:
    """
    Strictly greater roll wins.
    Returns:
        str|None: COMPUTER, USER, or None for a draw.
    """
    if user_roll > computer_roll:
        return USER
    if computer_roll > user_roll:
        return COMPUTER
    return None
