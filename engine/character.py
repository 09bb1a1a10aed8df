from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from engine.stats import (
    CRIT_MULTIPLIER,
    HERO_BASE,
    PERKS,
    BossKind,
    ItemKind,
    ItemSpec,
    PerkId,
    item_spec,
)


logger = logging.getLogger(__name__)


def _clamp(v: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, v))


@dataclass
class Unit:
    name: str
    max_hp: int
    hp: int
    attack: int
    defense: int

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "hp": self.hp,
            "max_hp": self.max_hp,
            "attack": self.attack,
            "defense": self.defense,
            "alive": self.alive,
        }


@dataclass
class Enemy(Unit):
    boss_key: Optional[BossKind] = None

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["boss_key"] = self.boss_key.value if self.boss_key else None
        return d


@dataclass
class Hero(Unit):
    gold: int = 0
    xp: int = 0
    level: int = 1
    crit_chance: float = 0.0
    crit_multiplier: float = CRIT_MULTIPLIER
    heal_bonus: float = 0.0
    perks: List[PerkId] = field(default_factory=list)
    item: Optional[ItemSpec] = None
    weakness_turns: int = 0

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d.update({
            "gold": self.gold,
            "xp": self.xp,
            "level": self.level,
            "crit_chance": self.crit_chance,
            "crit_multiplier": self.crit_multiplier,
            "heal_bonus": self.heal_bonus,
            "perks": [p.value for p in self.perks],
            "item": self.item.kind.value if self.item else None,
            "item_name": self.item.name if self.item else None,
            "weakness_turns": self.weakness_turns,
        })
        return d


def init_hero() -> Hero:
    return Hero(
        name=HERO_BASE["name"],
        max_hp=HERO_BASE["max_hp"],
        hp=HERO_BASE["max_hp"],
        attack=HERO_BASE["attack"],
        defense=HERO_BASE["defense"],
    )


def _remove_item(hero: Hero) -> None:
    item = hero.item
    if item is None:
        return
    hero.attack -= item.attack
    hero.defense -= item.defense
    if item.max_hp > 0:
        hero.max_hp -= item.max_hp
        hero.hp = _clamp(hero.hp, 0, hero.max_hp)
    hero.item = None


def equip_item(hero: Hero, kind: ItemKind) -> ItemSpec:
    """
    Swap the hero's item for `kind`.

    The old item's deltas are fully reversed first (hp is clamped into the
    smaller range when a max-HP item comes off). Equipping never raises
    current hp, and re-equipping the held item leaves the stats as they are.
    """
    spec = item_spec(kind)
    if hero.item is not None and hero.item.kind == spec.kind:
        return spec
    _remove_item(hero)
    hero.item = spec
    hero.attack += spec.attack
    hero.defense += spec.defense
    if spec.max_hp > 0:
        hero.max_hp += spec.max_hp
        hero.hp = _clamp(hero.hp, 0, hero.max_hp)
    logger.debug("equipped %s -> atk=%s def=%s hp=%s/%s", spec.kind.value, hero.attack, hero.defense, hero.hp, hero.max_hp)
    return spec


def grant_perk(hero: Hero, perk: PerkId) -> None:
    """
    Precondition: the caller fires the level-up transition at most once per run.
    """
    _label, crit, heal = PERKS[perk]
    hero.crit_chance += crit
    hero.heal_bonus += heal
    hero.perks.append(perk)
    hero.level = 2


def apply_heal_bonus(hero: Hero, amount: int) -> int:
    if hero.heal_bonus and hero.heal_bonus > 0:
        return math.ceil(amount * (1 + hero.heal_bonus))
    return int(amount)


def heal(hero: Hero, raw_amount: int) -> int:
    """Heal with the perk bonus applied; returns the hp actually restored."""
    if hero.hp <= 0:
        return 0
    amount = apply_heal_bonus(hero, raw_amount)
    before = hero.hp
    hero.hp = _clamp(hero.hp + amount, 0, hero.max_hp)
    return hero.hp - before


def take_damage(unit: Unit, amount: int) -> int:
    before = unit.hp
    unit.hp = _clamp(unit.hp - int(amount), 0, unit.max_hp)
    return before - unit.hp


def missing_hp(unit: Unit) -> int:
    return unit.max_hp - unit.hp


def percent_of_max_hp(unit: Unit, fraction: float, *, minimum: int = 1) -> int:
    """ceil(max_hp * fraction), never below `minimum`."""
    return max(minimum, math.ceil(unit.max_hp * fraction))


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))
