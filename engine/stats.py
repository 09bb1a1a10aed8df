# engine/stats.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


HERO_BASE = {
    "name": "Hero",
    "max_hp": 100,
    "attack": 20,
    "defense": 5,
}

CRIT_MULTIPLIER = 1.5
LEVEL_CAP = 2
LEVEL_UP_XP = 50

# (xp, gold) per cleared encounter
REWARDS = {
    "normal": (20, 15),
    "boss": (60, 50),
}


class BossKind(str, Enum):
    ORC_WARLORD = "orcWarlord"
    GOBLIN_SHAMAN = "goblinShaman"


class MidNodeKind(str, Enum):
    EVENT = "event"
    CAMP = "camp"
    MERCHANT = "merchant"
    COMBAT = "combat"


class EventKind(str, Enum):
    CHEST = "chest"
    SHRINE = "shrine"
    POTION = "potion"


class ItemKind(str, Enum):
    SWORD = "sword"
    SHIELD = "shield"
    RING_HP = "ring_hp"


class PerkId(str, Enum):
    CRIT = "crit"
    HEAL = "heal"


@dataclass(frozen=True)
class ItemSpec:
    kind: ItemKind
    name: str
    price: int
    attack: int = 0
    defense: int = 0
    max_hp: int = 0


ITEMS = {
    ItemKind.SWORD: ItemSpec(ItemKind.SWORD, "Sword (+4 Attack)", price=30, attack=4),
    ItemKind.SHIELD: ItemSpec(ItemKind.SHIELD, "Shield (+3 Defense)", price=30, defense=3),
    ItemKind.RING_HP: ItemSpec(ItemKind.RING_HP, "Ring of Life (+20 HP)", price=40, max_hp=20),
}

# perk -> (label, crit_chance delta, heal_bonus delta)
PERKS = {
    PerkId.CRIT: ("+10% crit chance", 0.10, 0.0),
    PerkId.HEAL: ("+20% healing", 0.0, 0.20),
}


def item_spec(kind: ItemKind) -> ItemSpec:
    return ITEMS[kind]


def rewards_for(is_boss: bool) -> tuple[int, int]:
    return REWARDS["boss" if is_boss else "normal"]
