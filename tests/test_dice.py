import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.dice import RandomOracle, roll_check, roll_variance  # noqa: E402
from scripted_rolls import ScriptedOracle  # noqa: E402


class TestRandomOracle(unittest.TestCase):
    def test_same_seed_same_draws(self):
        a = RandomOracle(42)
        b = RandomOracle(42)
        self.assertEqual(
            [a.random() for _ in range(5)] + [a.randint(-2, 2) for _ in range(5)],
            [b.random() for _ in range(5)] + [b.randint(-2, 2) for _ in range(5)],
        )

    def test_ranges(self):
        rng = RandomOracle(1)
        for _ in range(200):
            r = rng.random()
            self.assertGreaterEqual(r, 0.0)
            self.assertLess(r, 1.0)
            self.assertIn(roll_variance(rng), range(-2, 3))
            self.assertIn(rng.choice(["a", "b", "c"]), ["a", "b", "c"])


class TestScriptedOracle(unittest.TestCase):
    def test_pops_in_order(self):
        rng = ScriptedOracle([0.25, 1, 2])
        self.assertEqual(rng.random(), 0.25)
        self.assertEqual(rng.randint(-2, 2), 1)
        self.assertEqual(rng.choice(["x", "y", "z"]), "z")
        self.assertEqual(rng.consumed, [0.25, 1, 2])

    def test_out_of_rolls_raises(self):
        rng = ScriptedOracle()
        with self.assertRaises(RuntimeError):
            rng.random()

    def test_out_of_range_randint_raises(self):
        rng = ScriptedOracle([5])
        with self.assertRaises(ValueError):
            rng.randint(-2, 2)

    def test_push_appends(self):
        rng = ScriptedOracle([0.1])
        rng.push(0.2, 0)
        self.assertEqual(rng.draws, [0.1, 0.2, 0])

    def test_roll_check_is_strictly_below(self):
        self.assertTrue(roll_check(ScriptedOracle([0.69]), 0.7))
        self.assertFalse(roll_check(ScriptedOracle([0.7]), 0.7))
        self.assertFalse(roll_check(ScriptedOracle([0.0]), 0.0))


if __name__ == "__main__":
    unittest.main()
