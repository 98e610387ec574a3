"""
signals.py
Non-numeric answers an input collector can return instead of a number.
Related modules:
- session.py: Escape aborts the game, Help is answered without consuming a contribution.
- engine.py: Same handling while the user picks a die.
"""

from dataclasses import dataclass


class Signal:
    """
    Base class for non-numeric collector answers. Subclassed by Escape and Help.
    """
    pass


@dataclass(frozen=True)
class Escape(Signal):
    """The user asked to leave. Unwinds the whole game, not just the current session."""
    pass


@dataclass(frozen=True)
class Help(Signal):
    """The user asked for help. Control returns to the same question."""
    pass


ESCAPE = Escape()
HELP = Help()
