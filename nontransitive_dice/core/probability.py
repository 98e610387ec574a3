"""
probability.py
Win/tie probabilities between dice. Everything here is pure and exact (fractions.Fraction).
Related modules:
- engine.py: Emits the full table when the user asks for help while selecting a die.
- agents/counter_agent.py: Picks the die with the best odds.
"""

from fractions import Fraction
from typing import List, Sequence

from .dice import Die


def win_probability(die_a: Die, die_b: Die) -> Fraction:
    """
    Probability that die_a rolls strictly higher than die_b.
    Counts the pairs (fa, fb) with fa > fb over the full cross product of faces.
    Args:
        die_a (Die): The die we want to win with.
        die_b (Die): The opposing die.
    Returns:
        Fraction: Value in [0, 1].
    """
    wins = sum(1 for fa in die_a.faces for fb in die_b.faces if fa > fb)
    return Fraction(wins, die_a.num_faces * die_b.num_faces)


def tie_probability(die_a: Die, die_b: Die) -> Fraction:
    """Probability that both dice show the same value."""
    ties = sum(1 for fa in die_a.faces for fb in die_b.faces if fa == fb)
    return Fraction(ties, die_a.num_faces * die_b.num_faces)


def beats(die_a: Die, die_b: Die) -> bool:
    """True if die_a wins more than half of the time against die_b."""
    return win_probability(die_a, die_b) > Fraction(1, 2)


def probability_table(dice: Sequence[Die]) -> List[List[Fraction]]:
    """
    Square matrix where row i, column j is win_probability(dice[i], dice[j]).
    Every ordered pair is computed: the relation is not symmetric around 1/2.
    The diagonal is a self-comparison and renderers show it as non-competitive.
    """
    return [[win_probability(row, col) for col in dice] for row in dice]
