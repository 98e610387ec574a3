from abc import ABC, abstractmethod
from typing import Any


class Agent(ABC):
    """
    Abstract base class for the computer's die-selection strategies.
    Agents must implement choose_die(view), which receives the selection view and returns the index of a die in the pool.
    The choice is not fairness-critical: only the computer picks, from dice both parties can see.
    """

    @abstractmethod
    def choose_die(self, view: Any) -> int:
        """
        Given a selection view, return the stable index of the die to take.
        Args:
            view (dict): Keys 'pool' (list of die indices), 'dice' (all configured dice),
                'opponent_die' (Die or None when choosing first) and 'config'.
        Returns:
            int: One of the indices in view['pool'].
        """
        raise NotImplementedError

    def pool_dice(self, view):
        """
        Pairs of (index, die) still available.
        """
        dice = view["dice"]
        return [(i, dice[i]) for i in view["pool"]]
