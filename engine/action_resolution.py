from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from engine.character import Hero, Unit, round_half_up, take_damage
from engine.dice import RandomOracle, roll_check, roll_variance
from engine.status import WEAKNESS_ATTACK_FACTOR, is_weakened


logger = logging.getLogger(__name__)


class HeroAction(str, Enum):
    ATTACK = "attack"
    POWER = "power"
    HEAL = "heal"


@dataclass(frozen=True)
class AttackProfile:
    action: str
    multiplier: float
    miss_chance: float


HERO_ATTACKS = {
    HeroAction.ATTACK: AttackProfile("attack", 1.0, 0.0),
    HeroAction.POWER: AttackProfile("power_attack", 1.8, 0.35),
}

ENEMY_ATTACK = AttackProfile("attack", 1.0, 0.05)
HEAVY_STRIKE = AttackProfile("heavy_strike", 1.5, 0.0)
HEX_ATTACK = AttackProfile("hex", 1.0, 0.05)

HEAL_FRACTION = 0.25
HEAL_MINIMUM = 8


@dataclass
class AttackResult:
    attacker: str
    defender: str
    action: str
    missed: bool
    damage: int = 0
    critical: bool = False
    multiplier: float = 1.0
    killed: bool = False


def effective_multiplier(attacker: Unit, base: float, rng: RandomOracle) -> tuple[float, bool]:
    """
    Apply the hero's weakness and crit modifiers to `base`.
    The crit roll is only drawn when the hero actually has crit chance.
    """
    effective = base
    crit = False
    if isinstance(attacker, Hero):
        if is_weakened(attacker):
            effective *= WEAKNESS_ATTACK_FACTOR
        if attacker.crit_chance > 0 and roll_check(rng, attacker.crit_chance, "crit"):
            effective *= attacker.crit_multiplier or 1.5
            crit = True
    return effective, crit


def compute_damage(attacker: Unit, defender: Unit, base_multiplier: float, rng: RandomOracle) -> tuple[int, bool, float]:
    effective, crit = effective_multiplier(attacker, base_multiplier, rng)
    raw = math.floor((attacker.attack + roll_variance(rng)) * effective)
    dmg = max(0, raw - defender.defense)
    return dmg, crit, effective


def resolve_attack(attacker: Unit, defender: Unit, profile: AttackProfile, rng: RandomOracle) -> AttackResult:
    """
    One attack: miss check, then damage roll, then hp update.

    Returns a missed result without drawing anything when either side is
    already down. A miss deals exactly 0 and never touches defense.
    """
    result = AttackResult(
        attacker=attacker.name,
        defender=defender.name,
        action=profile.action,
        missed=True,
        multiplier=profile.multiplier,
    )
    if attacker.hp <= 0 or defender.hp <= 0:
        return result
    if roll_check(rng, profile.miss_chance, "miss"):
        logger.debug("%s %s -> %s: miss", attacker.name, profile.action, defender.name)
        return result

    dmg, crit, effective = compute_damage(attacker, defender, profile.multiplier, rng)
    take_damage(defender, dmg)
    result.missed = False
    result.damage = dmg
    result.critical = crit
    result.multiplier = effective
    result.killed = defender.hp <= 0
    logger.debug(
        "%s %s -> %s: dmg=%s crit=%s mult=%.3f hp=%s/%s",
        attacker.name, profile.action, defender.name, dmg, crit, effective, defender.hp, defender.max_hp,
    )
    return result


def hero_heal_amount(hero: Hero) -> int:
    """Raw heal for the heal action, before the perk bonus."""
    return max(round_half_up(hero.max_hp * HEAL_FRACTION), HEAL_MINIMUM)


def parse_hero_action(kind) -> Optional[HeroAction]:
    if isinstance(kind, HeroAction):
        return kind
    try:
        return HeroAction(str(kind).strip().lower())
    except ValueError:
        return None
