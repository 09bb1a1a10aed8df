from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from engine.character import Enemy
from engine.combat_state import CombatSession
from engine.dice import RandomOracle
from engine.stats import BossKind, EventKind, MidNodeKind


logger = logging.getLogger(__name__)


class Branch(str, Enum):
    A = "A"
    B = "B"


# name, max_hp, attack, defense
OPENING_SKIRMISH = ("Orc Skirmish", [
    ("Orc Raider", 30, 10, 2),
    ("Orc Warrior", 60, 15, 4),
])

GOBLIN_AMBUSH = ("Goblin Ambush", [
    ("Goblin Fighter", 35, 12, 3),
    ("Goblin Bandit", 40, 14, 2),
])

BOSSES = {
    BossKind.ORC_WARLORD: ("Orc Warlord", 120, 18, 6),
    BossKind.GOBLIN_SHAMAN: ("Goblin Shaman", 100, 16, 4),
}

MID_NODE_POOL = [MidNodeKind.EVENT, MidNodeKind.CAMP, MidNodeKind.MERCHANT, MidNodeKind.COMBAT]
BOSS_POOL = [BossKind.ORC_WARLORD, BossKind.GOBLIN_SHAMAN]
EVENT_POOL = [EventKind.CHEST, EventKind.SHRINE, EventKind.POTION]


@dataclass(frozen=True)
class BranchOption:
    mid_node: MidNodeKind
    boss: BossKind


@dataclass
class CampaignMap:
    option_a: BranchOption
    option_b: BranchOption
    branch: Optional[Branch] = None

    def option(self, branch: Branch) -> BranchOption:
        return self.option_a if branch == Branch.A else self.option_b

    def committed(self) -> Optional[BranchOption]:
        if self.branch is None:
            return None
        return self.option(self.branch)

    def to_dict(self) -> Dict[str, Any]:
        def _opt(o: BranchOption) -> Dict[str, Any]:
            return {"mid_node": o.mid_node.value, "boss": o.boss.value, "boss_name": boss_name(o.boss)}

        return {
            "branch": self.branch.value if self.branch else None,
            "options": {"A": _opt(self.option_a), "B": _opt(self.option_b)},
        }


def _enemy(row, boss_key: Optional[BossKind] = None) -> Enemy:
    name, hp, atk, dfn = row
    return Enemy(name=name, max_hp=hp, hp=hp, attack=atk, defense=dfn, boss_key=boss_key)


def _group(spec) -> CombatSession:
    name, rows = spec
    return CombatSession(name=name, enemies=[_enemy(r) for r in rows])


def opening_skirmish() -> CombatSession:
    return _group(OPENING_SKIRMISH)


def goblin_ambush() -> CombatSession:
    return _group(GOBLIN_AMBUSH)


def boss_name(kind: BossKind) -> str:
    return BOSSES[kind][0]


def build_boss(kind: BossKind) -> CombatSession:
    boss = _enemy(BOSSES[kind], boss_key=kind)
    return CombatSession(name=boss.name, enemies=[boss], is_boss=True, boss_key=kind)


def build_map(rng: RandomOracle) -> CampaignMap:
    """
    Each branch gets an independent mid-node pick; the two branches always
    lead to different bosses.
    """
    mid_a = rng.choice(MID_NODE_POOL)
    mid_b = rng.choice(MID_NODE_POOL)
    boss_a = rng.choice(BOSS_POOL)
    boss_b = next(b for b in BOSS_POOL if b != boss_a)
    logger.debug("map built: A=%s/%s B=%s/%s", mid_a.value, boss_a.value, mid_b.value, boss_b.value)
    return CampaignMap(
        option_a=BranchOption(mid_node=mid_a, boss=boss_a),
        option_b=BranchOption(mid_node=mid_b, boss=boss_b),
    )


def roll_event(rng: RandomOracle) -> EventKind:
    return rng.choice(EVENT_POOL)


def enemy_names(session: CombatSession) -> List[str]:
    return [e.name for e in session.enemies]
