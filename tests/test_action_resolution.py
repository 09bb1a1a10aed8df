import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.action_resolution import (  # noqa: E402
    ENEMY_ATTACK,
    HEAVY_STRIKE,
    HERO_ATTACKS,
    HeroAction,
    hero_heal_amount,
    parse_hero_action,
    resolve_attack,
)
from engine.character import Enemy, init_hero  # noqa: E402
from engine.dice import RandomOracle  # noqa: E402
from scripted_rolls import ScriptedOracle  # noqa: E402


def goblin(defense=3, hp=35):
    return Enemy(name="Goblin Fighter", max_hp=hp, hp=hp, attack=12, defense=defense)


class TestHeroAttack(unittest.TestCase):
    def test_basic_attack_zero_variance(self):
        hero = init_hero()
        enemy = goblin()
        rng = ScriptedOracle([0.5, 0])
        result = resolve_attack(hero, enemy, HERO_ATTACKS[HeroAction.ATTACK], rng)
        self.assertFalse(result.missed)
        self.assertEqual(result.damage, 17)
        self.assertEqual(enemy.hp, 18)
        self.assertEqual(rng.draws, [])

    def test_power_attack_miss_deals_nothing(self):
        hero = init_hero()
        enemy = goblin()
        rng = ScriptedOracle([0.1])
        result = resolve_attack(hero, enemy, HERO_ATTACKS[HeroAction.POWER], rng)
        self.assertTrue(result.missed)
        self.assertEqual(result.damage, 0)
        self.assertEqual(enemy.hp, 35)
        # no variance drawn after a miss
        self.assertEqual(rng.consumed, [0.1])

    def test_power_attack_hit(self):
        hero = init_hero()
        enemy = goblin()
        rng = ScriptedOracle([0.35, 2])
        result = resolve_attack(hero, enemy, HERO_ATTACKS[HeroAction.POWER], rng)
        # floor(22 * 1.8) - 3 = 39 - 3
        self.assertEqual(result.damage, 36)
        self.assertTrue(result.killed)
        self.assertEqual(enemy.hp, 0)

    def test_crit_only_drawn_with_crit_chance(self):
        hero = init_hero()
        hero.crit_chance = 0.10
        enemy = goblin()
        rng = ScriptedOracle([0.5, 0.05, 0])
        result = resolve_attack(hero, enemy, HERO_ATTACKS[HeroAction.ATTACK], rng)
        self.assertTrue(result.critical)
        # floor(20 * 1.5) - 3
        self.assertEqual(result.damage, 27)

        hero.crit_chance = 0.10
        rng = ScriptedOracle([0.5, 0.5, 0])
        result = resolve_attack(hero, goblin(), HERO_ATTACKS[HeroAction.ATTACK], rng)
        self.assertFalse(result.critical)
        self.assertEqual(result.damage, 17)

    def test_weakness_scales_damage(self):
        hero = init_hero()
        hero.weakness_turns = 2
        low = resolve_attack(hero, goblin(), HERO_ATTACKS[HeroAction.ATTACK], ScriptedOracle([0.5, -2]))
        high = resolve_attack(hero, goblin(), HERO_ATTACKS[HeroAction.ATTACK], ScriptedOracle([0.5, 2]))
        # floor(18 * 0.8) - 3 and floor(22 * 0.8) - 3
        self.assertEqual(low.damage, 11)
        self.assertEqual(high.damage, 14)
        self.assertAlmostEqual(high.multiplier, 0.8)

    def test_weakened_damage_stays_in_bounds(self):
        rng = RandomOracle(seed=11)
        seen = set()
        for _ in range(500):
            hero = init_hero()
            hero.weakness_turns = 2
            result = resolve_attack(hero, goblin(hp=500), HERO_ATTACKS[HeroAction.ATTACK], rng)
            if result.missed:
                self.assertEqual(result.damage, 0)
                continue
            self.assertFalse(result.critical)
            self.assertGreaterEqual(result.damage, 11)
            self.assertLessEqual(result.damage, 14)
            seen.add(result.damage)
        self.assertEqual(seen, {11, 12, 13, 14})

    def test_weakness_and_crit_stack(self):
        hero = init_hero()
        hero.weakness_turns = 1
        hero.crit_chance = 0.5
        result = resolve_attack(hero, goblin(), HERO_ATTACKS[HeroAction.ATTACK], ScriptedOracle([0.5, 0.1, 0]))
        # floor(20 * 0.8 * 1.5) - 3
        self.assertEqual(result.damage, 21)
        self.assertAlmostEqual(result.multiplier, 1.2)

    def test_damage_never_negative(self):
        hero = init_hero()
        enemy = goblin(defense=50)
        result = resolve_attack(hero, enemy, HERO_ATTACKS[HeroAction.ATTACK], ScriptedOracle([0.5, 0]))
        self.assertFalse(result.missed)
        self.assertEqual(result.damage, 0)
        self.assertEqual(enemy.hp, 35)

    def test_dead_defender_draws_nothing(self):
        hero = init_hero()
        enemy = goblin(hp=35)
        enemy.hp = 0
        rng = ScriptedOracle()
        result = resolve_attack(hero, enemy, HERO_ATTACKS[HeroAction.ATTACK], rng)
        self.assertTrue(result.missed)
        self.assertEqual(rng.consumed, [])


class TestEnemyAttack(unittest.TestCase):
    def test_enemy_miss_and_hit(self):
        hero = init_hero()
        enemy = goblin()
        self.assertTrue(resolve_attack(enemy, hero, ENEMY_ATTACK, ScriptedOracle([0.04])).missed)
        hit = resolve_attack(enemy, hero, ENEMY_ATTACK, ScriptedOracle([0.05, 0]))
        self.assertEqual(hit.damage, 7)
        self.assertEqual(hero.hp, 93)

    def test_enemy_ignores_hero_weakness(self):
        hero = init_hero()
        hero.weakness_turns = 2
        hit = resolve_attack(goblin(), hero, ENEMY_ATTACK, ScriptedOracle([0.5, 0]))
        self.assertEqual(hit.damage, 7)

    def test_heavy_strike_never_misses(self):
        hero = init_hero()
        warlord = Enemy(name="Orc Warlord", max_hp=120, hp=120, attack=18, defense=6)
        hit = resolve_attack(warlord, hero, HEAVY_STRIKE, ScriptedOracle([0.0, 0]))
        self.assertFalse(hit.missed)
        # floor(18 * 1.5) - 5
        self.assertEqual(hit.damage, 22)


class TestHealAmount(unittest.TestCase):
    def test_quarter_of_max_hp(self):
        hero = init_hero()
        self.assertEqual(hero_heal_amount(hero), 25)
        hero.max_hp = 120
        self.assertEqual(hero_heal_amount(hero), 30)

    def test_minimum_eight(self):
        hero = init_hero()
        hero.max_hp = 20
        self.assertEqual(hero_heal_amount(hero), 8)

    def test_parse_hero_action(self):
        self.assertEqual(parse_hero_action("POWER"), HeroAction.POWER)
        self.assertIsNone(parse_hero_action("dance"))


if __name__ == "__main__":
    unittest.main()
