import sys
from itertools import product
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.character import (  # noqa: E402
    equip_item,
    grant_perk,
    heal,
    init_hero,
    percent_of_max_hp,
    round_half_up,
    take_damage,
)
from engine.stats import ItemKind, PerkId  # noqa: E402


def stat_block(hero):
    return (hero.attack, hero.defense, hero.max_hp, hero.hp, hero.item.kind if hero.item else None)


class TestHeroBaseline(unittest.TestCase):
    def test_init_hero(self):
        hero = init_hero()
        self.assertEqual((hero.max_hp, hero.hp, hero.attack, hero.defense), (100, 100, 20, 5))
        self.assertEqual((hero.gold, hero.xp, hero.level), (0, 0, 1))
        self.assertEqual(hero.crit_chance, 0.0)
        self.assertEqual(hero.crit_multiplier, 1.5)
        self.assertEqual(hero.perks, [])
        self.assertIsNone(hero.item)
        self.assertEqual(hero.weakness_turns, 0)


class TestEquip(unittest.TestCase):
    def test_second_item_replaces_first(self):
        for first, second in product(ItemKind, ItemKind):
            swapped = init_hero()
            equip_item(swapped, first)
            equip_item(swapped, second)
            direct = init_hero()
            equip_item(direct, second)
            self.assertEqual(stat_block(swapped), stat_block(direct), f"{first} -> {second}")

    def test_second_item_replaces_first_when_damaged(self):
        for first, second in product(ItemKind, ItemKind):
            swapped = init_hero()
            swapped.hp = 70
            equip_item(swapped, first)
            equip_item(swapped, second)
            direct = init_hero()
            direct.hp = 70
            equip_item(direct, second)
            self.assertEqual(stat_block(swapped), stat_block(direct), f"{first} -> {second}")
            self.assertEqual(swapped.hp, 70)

    def test_sword_then_shield(self):
        hero = init_hero()
        equip_item(hero, ItemKind.SWORD)
        self.assertEqual(hero.attack, 24)
        equip_item(hero, ItemKind.SHIELD)
        self.assertEqual((hero.attack, hero.defense), (20, 8))

    def test_ring_does_not_raise_current_hp(self):
        hero = init_hero()
        equip_item(hero, ItemKind.RING_HP)
        self.assertEqual((hero.max_hp, hero.hp), (120, 100))

    def test_removing_ring_clamps_hp(self):
        hero = init_hero()
        equip_item(hero, ItemKind.RING_HP)
        hero.hp = 115
        equip_item(hero, ItemKind.SWORD)
        self.assertEqual((hero.max_hp, hero.hp), (100, 100))

    def test_reequip_same_item_is_noop(self):
        hero = init_hero()
        equip_item(hero, ItemKind.SWORD)
        equip_item(hero, ItemKind.SWORD)
        self.assertEqual(hero.attack, 24)


class TestHealAndDamage(unittest.TestCase):
    def test_heal_caps_at_max(self):
        hero = init_hero()
        hero.hp = 90
        self.assertEqual(heal(hero, 25), 10)
        self.assertEqual(hero.hp, 100)

    def test_heal_does_nothing_when_down(self):
        hero = init_hero()
        hero.hp = 0
        self.assertEqual(heal(hero, 25), 0)
        self.assertEqual(hero.hp, 0)

    def test_heal_bonus_rounds_up(self):
        hero = init_hero()
        grant_perk(hero, PerkId.HEAL)
        hero.hp = 50
        # ceil(25 * 1.2) = 30
        self.assertEqual(heal(hero, 25), 30)
        hero.hp = 50
        # ceil(11 * 1.2) = ceil(13.2) = 14
        self.assertEqual(heal(hero, 11), 14)

    def test_take_damage_clamps_at_zero(self):
        hero = init_hero()
        self.assertEqual(take_damage(hero, 250), 100)
        self.assertEqual(hero.hp, 0)
        self.assertFalse(hero.alive)

    def test_percent_of_max_hp(self):
        hero = init_hero()
        self.assertEqual(percent_of_max_hp(hero, 0.10), 10)
        hero.max_hp = 5
        self.assertEqual(percent_of_max_hp(hero, 0.10), 1)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(7.5), 8)
        self.assertEqual(round_half_up(7.49), 7)


class TestPerks(unittest.TestCase):
    def test_crit_perk(self):
        hero = init_hero()
        grant_perk(hero, PerkId.CRIT)
        self.assertAlmostEqual(hero.crit_chance, 0.10)
        self.assertEqual(hero.level, 2)
        self.assertEqual(hero.perks, [PerkId.CRIT])

    def test_heal_perk(self):
        hero = init_hero()
        grant_perk(hero, PerkId.HEAL)
        self.assertAlmostEqual(hero.heal_bonus, 0.20)
        self.assertEqual(hero.crit_chance, 0.0)


if __name__ == "__main__":
    unittest.main()
