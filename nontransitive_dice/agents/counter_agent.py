import random

from nontransitive_dice.agents.base import Agent
from nontransitive_dice.agents import register_agent
from nontransitive_dice.core.probability import win_probability


@register_agent("counter")
class CounterAgent(Agent):
    """
    CounterAgent:
    - Choosing second: takes the pool die with the highest win probability against the opponent's die.
    - Choosing first: takes the die with the best average win probability against the rest of the pool.
    Ties are broken at random.
    """
    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def choose_die(self, view):
        candidates = self.pool_dice(view)
        opponent = view.get("opponent_die")
        if opponent is not None:
            scores = {i: win_probability(d, opponent) for i, d in candidates}
        else:
            scores = {}
            for i, d in candidates:
                rivals = [o for j, o in candidates if j != i]
                if not rivals:
                    scores[i] = 0
                    continue
                scores[i] = sum(win_probability(d, o) for o in rivals) / len(rivals)
        best = max(scores.values())
        return self.rng.choice([i for i, s in scores.items() if s == best])
