import sys
import threading
import time
from pathlib import Path
import unittest
from unittest.mock import patch

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.narration_log import NarrationEvent  # noqa: E402
from game_runner import Game  # noqa: E402
from game_session import GameSession  # noqa: E402
from scripted_rolls import ScriptedOracle  # noqa: E402
from ui.events import format_event  # noqa: E402
from ui.web_provider import WebProvider  # noqa: E402


class DummyUI:
    is_blocking = True

    def __init__(self):
        self.calls = []

    def scene(self, text, data=None):
        self.calls.append(("scene", text))

    def narration(self, text, data=None):
        self.calls.append(("narration", text))

    def system(self, text, data=None):
        self.calls.append(("system", text))

    def error(self, text, data=None):
        self.calls.append(("error", text))

    def choice(self, prompt, options, data=None):
        return 0


class TestGameStep(unittest.TestCase):
    def test_start_narrates_to_blocking_ui(self):
        ui = DummyUI()
        game = Game(ui, rng=ScriptedOracle())
        result = game.step({"action": "start"})
        self.assertTrue(result.ok)
        self.assertIn(("narration", "Run 1 begins."), ui.calls)
        self.assertIn(("scene", "Orc Skirmish: Orc Raider, Orc Warrior"), ui.calls)
        self.assertEqual(game.snapshot()["scene"], "combat")

    def test_unknown_action_is_rejected(self):
        ui = DummyUI()
        game = Game(ui, rng=ScriptedOracle())
        result = game.step({"action": "fly"})
        self.assertFalse(result.ok)
        self.assertEqual(result.reason, "invalid_option")
        self.assertEqual(ui.calls[-1], ("error", "Unknown action: fly"))

    def test_round_through_step(self):
        ui = DummyUI()
        game = Game(ui, rng=ScriptedOracle([0.5, 0, 0.01, 0.01]))
        game.step({"action": "start"})
        self.assertTrue(game.step({"action": "select_target", "target": 0}).ok)
        self.assertTrue(game.step({"action": "attack"}).ok)
        self.assertIn(("narration", "Hero attacks Orc Raider for 18 damage."), ui.calls)
        self.assertIn(("narration", "Orc Raider attacks Hero but misses."), ui.calls)
        self.assertEqual(game.snapshot()["round"], 2)

    def test_hover_without_target_clears(self):
        game = Game(DummyUI(), rng=ScriptedOracle())
        game.step({"action": "start"})
        game.step({"action": "hover", "target": 1})
        self.assertEqual(game.snapshot()["hover_target_index"], 1)
        game.step({"action": "hover"})
        self.assertIsNone(game.snapshot()["hover_target_index"])


class TestWebSession(unittest.TestCase):
    def make_session(self, *draws):
        session = GameSession(None)
        session.game = Game(WebProvider(session), rng=ScriptedOracle(draws), clock=lambda: 1000.0)
        return session

    def test_step_returns_structured_events(self):
        session = self.make_session()
        result, events, snap = session.step({"action": "start"})
        types = [e["type"] for e in events]
        self.assertIn("narration_event", types)
        self.assertEqual(types[-2:], ["state", "hero_update"])
        self.assertNotIn("narration", types)
        first = next(e for e in events if e["type"] == "narration_event")
        self.assertEqual(first["event"]["kind"], "run_started")
        self.assertTrue(result.ok)
        self.assertIs(session.last_result, result)
        self.assertEqual(snap["scene"], "combat")

    def test_rejection_emits_warning_event(self):
        session = self.make_session()
        session.step({"action": "start"})
        result, events, _snap = session.step({"action": "attack"})
        warning = next(e for e in events if e["type"] == "narration_event")
        self.assertEqual(warning["event"]["kind"], "warning")
        self.assertEqual(warning["event"]["data"]["reason"], "no_target")
        self.assertEqual(result.reason, "no_target")

    def test_step_events_are_not_drained_again(self):
        session = self.make_session()
        _result, events, _snap = session.step({"action": "start"})
        self.assertTrue(events)
        self.assertEqual(session.drain(), [])

    def test_drain_empties_queue(self):
        session = self.make_session()
        session.step({"action": "start"})
        session.emit({"type": "system", "text": "server restarting", "data": None})
        self.assertEqual([e["text"] for e in session.drain()], ["server restarting"])
        self.assertEqual(session.drain(), [])

    def test_concurrent_steps_get_their_own_state(self):
        session = self.make_session()
        session.step({"action": "start"})
        game = session.game
        handle = game.handle_input

        def slow_handle(player_input, s=None):
            result = handle(player_input, s)
            time.sleep(0.05)
            return result

        responses = {}

        def worker(target):
            responses[target] = session.step({"action": "hover", "target": target})

        with patch.object(game, "handle_input", side_effect=slow_handle):
            threads = [threading.Thread(target=worker, args=(t,)) for t in (0, 1)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        for target, (result, events, snap) in responses.items():
            self.assertTrue(result.ok)
            self.assertEqual(snap["hover_target_index"], target)
            state = [e for e in events if e["type"] == "state"]
            self.assertEqual(state[-1]["snapshot"], snap)


class TestFormatEvent(unittest.TestCase):
    def test_lines(self):
        crit = NarrationEvent(seq=1, run=1, kind="attack", actor="Hero", action="power_attack", target="Orc Warrior", amount=30, critical=True)
        self.assertEqual(format_event(crit), "Hero unleashes a power attack on Orc Warrior for 30 damage. Critical hit!")
        heavy = NarrationEvent(seq=2, run=1, kind="attack", actor="Orc Warlord", action="heavy_strike", target="Hero", amount=22)
        self.assertEqual(format_event(heavy), "Orc Warlord lands a HEAVY STRIKE on Hero for 22 damage.")
        trap = NarrationEvent(seq=3, run=1, kind="damage", action="chest_trap", target="Hero", amount=10)
        self.assertEqual(format_event(trap), "A trap springs! Hero takes 10 damage.")
        warn = NarrationEvent(seq=4, run=1, kind="warning", data={"reason": "no_target", "message": "Select a target first."})
        self.assertEqual(format_event(warn), "Select a target first.")


if __name__ == "__main__":
    unittest.main()
