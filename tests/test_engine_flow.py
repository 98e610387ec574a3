import unittest

from nontransitive_dice.agents.base import Agent
from nontransitive_dice.agents.counter_agent import CounterAgent
from nontransitive_dice.core.commitment import make_commitment, verify
from nontransitive_dice.core.config import GameConfig
from nontransitive_dice.core.dice import Die
from nontransitive_dice.core.engine import GameEngine, IllegalStateError
from nontransitive_dice.core.signals import ESCAPE, HELP
from nontransitive_dice.core.state import COMPUTER, USER
from nontransitive_dice.persistence.recorder import InMemoryRecorder


class ScriptedInput:
    """Input collector answering from a fixed script; records every question."""
    def __init__(self, answers):
        self.answers = list(answers)
        self.questions = []

    def request_integer(self, range_, prompt, options=None):
        self.questions.append((range_, prompt, options))
        if not self.answers:
            raise AssertionError(f"unexpected question: {prompt}")
        return self.answers.pop(0)


class PoolHeadAgent(Agent):
    def choose_die(self, view):
        return view["pool"][0]


class FixedAgent(Agent):
    def __init__(self, die_index):
        self.die_index = die_index
        self.views = []

    def choose_die(self, view):
        self.views.append(view)
        return self.die_index


def forced_secrets(*secrets):
    queue = list(secrets)

    def commit_fn(range_, key_bytes):
        return make_commitment(queue.pop(0), bytes([len(queue)]) * key_bytes, range_)
    return commit_fn


def classic_dice():
    return [Die((2, 2, 4, 4, 9, 9)), Die((1, 1, 6, 6, 8, 8)), Die((3, 3, 5, 5, 7, 7))]


class TestEngineFlow(unittest.TestCase):
    """
    End-to-end games driven by scripted input and forced commitments.
    """

    def test_full_game_user_moves_first(self):
        recorder = InMemoryRecorder()
        # first mover: 0 + 1 -> 1 (user); user picks A; counter agent answers with C;
        # computer roll: 2 + 1 -> face 3 of C = 5; user roll: 5 + 0 -> face 5 of A = 9
        collector = ScriptedInput([1, 0, 1, 0])
        engine = GameEngine(classic_dice(), collector, sink=recorder,
                            commit_fn=forced_secrets(0, 2, 5), agent=CounterAgent())
        state = engine.play()

        self.assertEqual(state.public.status, "ENDED")
        self.assertEqual(state.public.first_mover, USER)
        computer, user = state.players
        self.assertEqual(user.die_index, 0)
        self.assertEqual(computer.die_index, 2)
        self.assertEqual((computer.roll_index, computer.roll), (3, 5))
        self.assertEqual((user.roll_index, user.roll), (5, 9))
        self.assertEqual(state.public.winner, USER)
        self.assertEqual(state.public.decisions, ["first_mover", "roll_computer", "roll_user"])
        self.assertEqual([q[0] for q in collector.questions], [2, 3, 6, 6])
        self.assertEqual(recorder.types()[-1], "GameEnded")

    def test_full_game_computer_moves_first_and_draw(self):
        dice = [Die((1, 2, 3)), Die((3, 3, 3)), Die((0, 3, 9))]
        agent = FixedAgent(1)
        # first mover: 0 + 0 -> computer; computer takes index 1; user takes pool position 1 -> die 2
        # computer roll: 0 + 0 -> 3; user roll: 0 + 1 -> face 1 of die 2 = 3 -> draw
        collector = ScriptedInput([0, 1, 0, 1])
        engine = GameEngine(dice, collector, commit_fn=forced_secrets(0, 0, 0), agent=agent)
        state = engine.play()
        self.assertEqual(state.public.first_mover, COMPUTER)
        self.assertIsNone(agent.views[0]["opponent_die"])
        self.assertEqual(state.player(USER).die_index, 2)
        self.assertEqual(state.player(COMPUTER).roll, 3)
        self.assertEqual(state.player(USER).roll, 3)
        self.assertIsNone(state.public.winner)
        self.assertEqual(state.public.status, "ENDED")

    def test_escape_during_first_mover_aborts_without_outcome(self):
        recorder = InMemoryRecorder()
        engine = GameEngine(classic_dice(), ScriptedInput([ESCAPE]), sink=recorder,
                            commit_fn=forced_secrets(0))
        state = engine.play()
        self.assertEqual(state.public.status, "ABORTED")
        self.assertIsNone(state.public.winner)
        self.assertEqual(state.public.reveals, [])
        for p in state.players:
            self.assertIsNone(p.roll)
            self.assertIsNone(p.die)
        self.assertEqual(recorder.types(), ["GameStarted", "CommitmentPublished", "GameAborted"])
        self.assertTrue(engine.is_terminal())

    def test_escape_during_selection_aborts(self):
        engine = GameEngine(classic_dice(), ScriptedInput([1, ESCAPE]), commit_fn=forced_secrets(0))
        state = engine.play()
        self.assertEqual(state.public.status, "ABORTED")
        self.assertEqual(engine.get_events()[-1]["during"], "SELECT_DICE")

    def test_digest_published_before_each_question(self):
        recorder = InMemoryRecorder()

        class Checking(ScriptedInput):
            def request_integer(self, range_, prompt, options=None):
                if options is None:
                    last = recorder.events()[-1]
                    assert last["type"] in ("CommitmentPublished", "ContributionRejected", "HelpRequested")
                return super().request_integer(range_, prompt, options)

        engine = GameEngine(classic_dice(), Checking([0, 0, 3, 4]), sink=recorder, agent=PoolHeadAgent())
        state = engine.play()
        self.assertEqual(state.public.status, "ENDED")
        for e in recorder.events("CommitmentRevealed"):
            self.assertTrue(verify(e["digest"], bytes.fromhex(e["key"]), e["secret"]))
            self.assertEqual(e["result"], (e["secret"] + e["counterpart_value"]) % e["range"])

    def test_pool_removal_by_identity(self):
        twin_a = Die((1, 2, 3))
        twin_b = Die((1, 2, 3))
        other = Die((4, 5, 6))
        engine = GameEngine([twin_a, twin_b, other], ScriptedInput([0, 0]),
                            commit_fn=forced_secrets(0), agent=FixedAgent(0))
        engine.start()
        engine.determine_first_mover()
        engine.select_dice()
        computer, user = engine.state.players
        self.assertIs(computer.die, twin_a)
        self.assertIs(user.die, twin_b)
        self.assertEqual(engine.state.public.pool, [2])
        self.assertIsNot(computer.die, user.die)

    def test_pool_shrinks_by_one_per_selection(self):
        dice = classic_dice() + [Die((0, 0, 0, 9, 9, 9))]
        agent = FixedAgent(3)
        engine = GameEngine(dice, ScriptedInput([0, 1]), commit_fn=forced_secrets(0), agent=agent)
        engine.start()
        engine.determine_first_mover()
        engine.select_dice()
        # computer saw the full pool, user saw it minus the computer's die
        self.assertEqual(agent.views[0]["pool"], [0, 1, 2, 3])
        self.assertEqual(engine.state.public.pool, [0, 2])
        self.assertEqual(engine.state.player(USER).die_index, 1)

    def test_help_during_selection_shows_table(self):
        recorder = InMemoryRecorder()
        collector = ScriptedInput([1, HELP, "nope", 9, 0])
        engine = GameEngine(classic_dice(), collector, sink=recorder,
                            commit_fn=forced_secrets(0), agent=FixedAgent(1))
        engine.start()
        engine.determine_first_mover()
        engine.select_dice()
        helps = recorder.events("HelpRequested")
        self.assertEqual(len(helps), 1)
        self.assertEqual(helps[0]["context"], "selection")
        self.assertEqual(len(helps[0]["table"]), 3)
        self.assertEqual(len(recorder.events("ContributionRejected")), 2)
        self.assertEqual(engine.state.player(USER).die_index, 0)
        # options offered to the user only list the pool
        self.assertEqual(len(collector.questions[-1][2]), 3)

    def test_help_during_roll_does_not_advance(self):
        recorder = InMemoryRecorder()
        collector = ScriptedInput([0, 0, HELP, 2, 3])
        engine = GameEngine(classic_dice(), collector, sink=recorder,
                            commit_fn=forced_secrets(1, 0, 0), agent=FixedAgent(1))
        state = engine.play()
        self.assertEqual(state.public.status, "ENDED")
        self.assertEqual(len(state.public.reveals), 3)
        self.assertEqual(recorder.events("HelpRequested")[0]["context"], "session")

    def test_steps_out_of_order_raise(self):
        engine = GameEngine(classic_dice(), ScriptedInput([]))
        with self.assertRaises(IllegalStateError):
            engine.determine_first_mover()
        engine.start()
        with self.assertRaises(IllegalStateError):
            engine.select_dice()
        with self.assertRaises(IllegalStateError):
            engine.roll(COMPUTER)
        with self.assertRaises(IllegalStateError):
            engine.resolve()

    def test_play_again_resets_pool(self):
        collector = ScriptedInput([1, 0, 0, 0])
        engine = GameEngine(classic_dice(), collector, commit_fn=forced_secrets(0, 0, 0, 0),
                            agent=FixedAgent(1))
        engine.play()
        self.assertEqual(engine.state.public.pool, [2])
        collector.answers = [ESCAPE]
        state = engine.play()
        self.assertEqual(state.public.pool, [0, 1, 2])
        self.assertEqual(state.public.status, "ABORTED")

    def test_turn_log_snapshots(self):
        engine = GameEngine(classic_dice(), ScriptedInput([1, 0, 0, 0]),
                            commit_fn=forced_secrets(0, 0, 0), agent=FixedAgent(1))
        engine.play()
        steps = [s["step"] for s in engine.turn_log]
        self.assertEqual(steps, ["start", "first_mover", "select_dice", "roll_computer", "roll_user", "resolve"])
        self.assertEqual(engine.turn_log[-1]["status"], "ENDED")

    def test_agent_from_config(self):
        engine = GameEngine(classic_dice(), ScriptedInput([]), config=GameConfig(computer_agent="counter"))
        self.assertIsInstance(engine.agent, CounterAgent)

    def test_escape_during_computer_roll_records_no_rolls(self):
        recorder = InMemoryRecorder()
        engine = GameEngine(classic_dice(), ScriptedInput([1, 0, ESCAPE]), sink=recorder,
                            commit_fn=forced_secrets(0, 0), agent=FixedAgent(1))
        state = engine.play()
        self.assertEqual(state.public.status, "ABORTED")
        self.assertEqual(engine.get_events()[-1]["during"], "ROLL_COMPUTER")
        for p in state.players:
            self.assertIsNone(p.roll)
            self.assertIsNone(p.roll_index)
        self.assertIsNone(state.public.winner)
        self.assertEqual(recorder.events("DieRolled"), [])

    def test_escape_during_user_roll_discards_computer_roll(self):
        recorder = InMemoryRecorder()
        engine = GameEngine(classic_dice(), ScriptedInput([1, 0, 0, ESCAPE]), sink=recorder,
                            commit_fn=forced_secrets(0, 0, 0), agent=FixedAgent(1))
        state = engine.play()
        self.assertEqual(state.public.status, "ABORTED")
        self.assertEqual(engine.get_events()[-1]["during"], "ROLL_USER")
        computer, user = state.players
        self.assertIsNone(computer.roll)
        self.assertIsNone(computer.roll_index)
        self.assertIsNone(user.roll)
        self.assertIsNone(state.public.winner)
        self.assertEqual(recorder.events("GameEnded"), [])
        # the resolved sessions stay available for verification
        self.assertEqual(state.public.decisions, ["first_mover", "roll_computer"])
        self.assertEqual(engine.turn_log[-1]["step"], "abort")
        self.assertTrue(all(p["roll"] is None for p in engine.turn_log[-1]["players"]))


if __name__ == '__main__':
    unittest.main()
