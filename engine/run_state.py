"""
Run context: the one value every engine operation is threaded through.
Holds the hero, the current encounter, the map, the RNG and the log for a
single player session. Nothing in the engine keeps state anywhere else.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from engine.character import Hero
from engine.combat_state import CombatSession
from engine.dice import RandomOracle
from engine.encounters import CampaignMap, boss_name
from engine.narration_log import NarrationLog
from engine.phases import Outcome, Scene, allowed_actions, node_options
from engine.stats import ITEMS, LEVEL_UP_XP, PERKS, BossKind, EventKind, MidNodeKind


@dataclass
class RunState:
    rng: RandomOracle = field(default_factory=RandomOracle)
    log: NarrationLog = field(default_factory=NarrationLog)
    clock: Callable[[], float] = time.time
    scene: Scene = Scene.MENU
    hero: Optional[Hero] = None
    combat: Optional[CombatSession] = None
    map: Optional[CampaignMap] = None
    node_event: Optional[EventKind] = None
    perk_offered: bool = False
    perk_pending: bool = False
    outcome: Optional[Outcome] = None
    wins: int = 0
    start_ts: int = 0
    elapsed_at_end: Optional[int] = None
    run_number: int = 0

    def current_mid_node(self) -> Optional[MidNodeKind]:
        opt = self.map.committed() if self.map else None
        return opt.mid_node if opt else None

    def current_boss(self) -> Optional[BossKind]:
        opt = self.map.committed() if self.map else None
        return opt.boss if opt else None

    def now(self) -> int:
        return int(self.clock())

    def elapsed(self) -> int:
        # frozen once the run reaches its summary
        if self.elapsed_at_end is not None:
            return self.elapsed_at_end
        if not self.start_ts:
            return 0
        return max(0, self.now() - self.start_ts)


def new_run_state(seed: Optional[int] = None, rng: Optional[RandomOracle] = None, clock: Optional[Callable[[], float]] = None) -> RunState:
    return RunState(
        rng=rng if rng is not None else RandomOracle(seed),
        clock=clock or time.time,
    )


def _merchant_offers(run: RunState) -> list:
    gold = run.hero.gold if run.hero else 0
    held = run.hero.item.kind if run.hero and run.hero.item else None
    return [
        {
            "item": spec.kind.value,
            "name": spec.name,
            "price": spec.price,
            "affordable": gold >= spec.price,
            "equipped": held == spec.kind,
        }
        for spec in ITEMS.values()
    ]


def _node_block(run: RunState) -> Optional[Dict[str, Any]]:
    if run.scene != Scene.MID_NODE:
        return None
    kind = run.current_mid_node()
    block: Dict[str, Any] = {"kind": kind.value if kind else None}
    if kind == MidNodeKind.EVENT:
        block["event"] = run.node_event.value if run.node_event else None
    if kind == MidNodeKind.MERCHANT:
        block["offers"] = _merchant_offers(run)
    block["options"] = node_options(run)
    return block


def _summary_block(run: RunState) -> Dict[str, Any]:
    hero = run.hero
    boss = run.current_boss()
    return {
        "outcome": run.outcome.value if run.outcome else None,
        "elapsed": run.elapsed(),
        "wins": run.wins,
        "branch": run.map.branch.value if run.map and run.map.branch else None,
        "boss": boss_name(boss) if boss else None,
        "level": hero.level if hero else None,
        "xp": hero.xp if hero else None,
        "gold": hero.gold if hero else None,
        "perks": [PERKS[p][0] for p in hero.perks] if hero else [],
        "item": hero.item.name if hero and hero.item else None,
    }


def snapshot(run: RunState) -> Dict[str, Any]:
    """Read-only, JSON-ready view of the run for presentation layers."""
    combat = run.combat.to_dict() if run.combat else None
    return {
        "scene": run.scene.value,
        "run": run.run_number,
        "hero": run.hero.to_dict() if run.hero else None,
        "xp_to_level": LEVEL_UP_XP,
        "combat": combat,
        "enemies": combat["enemies"] if combat else [],
        "round": combat["round"] if combat else None,
        "turn_locked": combat["turn_locked"] if combat else False,
        "selected_target_index": combat["selected_target_index"] if combat else None,
        "hover_target_index": combat["hover_target_index"] if combat else None,
        "map": run.map.to_dict() if run.map else None,
        "node": _node_block(run),
        "perk": {
            "pending": run.perk_pending,
            "offered": run.perk_offered,
            "options": [{"id": p.value, "label": label} for p, (label, _c, _h) in PERKS.items()] if run.perk_pending else [],
        },
        "summary": _summary_block(run) if run.scene == Scene.SUMMARY else None,
        "outcome": run.outcome.value if run.outcome else None,
        "wins": run.wins,
        "start_ts": run.start_ts,
        "elapsed": run.elapsed(),
        "log_seq": len(run.log),
        "allowed_actions": allowed_actions(run),
    }
