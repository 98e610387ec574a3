"""
config.py
Defines the GameConfig dataclass, which centralizes the protocol constants and game options.
Related modules:
- commitment.py: Uses key_bytes for fresh HMAC keys.
- engine.py: Uses GameConfig to build sessions and pick the computer agent.
- dice.py: Uses min_dice when validating the dice configuration.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GameConfig:
    """
    Centralizes all options for a non-transitive dice game.
    Fields:
        key_bytes (int): Size of each one-time HMAC key (at least 32 bytes = 256 bits).
        min_dice (int): Minimum number of dice in the configuration.
        escape_input (str): Input that aborts the whole game.
        help_input (str): Input that shows help without consuming a contribution.
        computer_agent (str): Name of the registered agent that picks the computer's die.
        rng_seed (int|None): Seed for the computer's die choice only; never used for protocol randomness.
    """
    key_bytes: int = 32
    min_dice: int = 3
    escape_input: str = "X"
    help_input: str = "?"
    computer_agent: str = "random"
    rng_seed: Optional[int] = None
