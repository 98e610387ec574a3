import random

from .base import Agent
from . import register_agent


@register_agent("random")
class RandomAgent(Agent):
    """
    Picks a die uniformly at random from the pool.
    """
    def __init__(self, rng=None):
        """
        Args:
            rng: Optional random number generator (random.Random).
        """
        self.rng = rng or random.Random()

    def choose_die(self, view):
        return self.rng.choice(list(view["pool"]))
