from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from engine.stats import EventKind, MidNodeKind


logger = logging.getLogger(__name__)


class Scene(str, Enum):
    MENU = "menu"
    COMBAT = "combat"
    BRANCH_CHOICE = "branch_choice"
    MID_NODE = "mid_node"
    SUMMARY = "summary"


class Outcome(str, Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"


# Reason codes carried by rejected intents.
WRONG_SCENE = "wrong_scene"
TURN_LOCKED = "turn_locked"
HERO_DOWN = "hero_down"
NO_TARGET = "no_target"
INVALID_TARGET = "invalid_target"
INVALID_OPTION = "invalid_option"
INSUFFICIENT_GOLD = "insufficient_gold"
BRANCH_COMMITTED = "branch_committed"
NO_PERK_PENDING = "no_perk_pending"


@dataclass
class IntentResult:
    status: str  # "applied" | "rejected"
    reason: str = ""
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "applied"

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "ok": self.ok, "reason": self.reason, "message": self.message, "data": self.data}


def applied(message: str = "", **data: Any) -> IntentResult:
    return IntentResult(status="applied", message=message, data=data)


def reject(run, reason: str, message: str, **data: Any) -> IntentResult:
    """Refuse an intent: no state change, one warning record in the log."""
    logger.info("intent rejected (%s): %s", reason, message)
    run.log.warn(reason, message, **data)
    return IntentResult(status="rejected", reason=reason, message=message, data=data)


# Two choices per event / camp node.
NODE_OPTIONS = {
    EventKind.CHEST: ("open", "skip"),
    EventKind.SHRINE: ("donate", "leave"),
    EventKind.POTION: ("drink", "skip"),
    MidNodeKind.CAMP: ("heal", "attack"),
}


def node_options(run) -> List[str]:
    """Option ids valid for the current Event/Camp mid-node, else []."""
    if run.scene != Scene.MID_NODE:
        return []
    kind = run.current_mid_node()
    if kind == MidNodeKind.EVENT and run.node_event is not None:
        return list(NODE_OPTIONS[run.node_event])
    if kind == MidNodeKind.CAMP:
        return list(NODE_OPTIONS[MidNodeKind.CAMP])
    return []


def allowed_actions(run) -> List[str]:
    """
    Intents the presentation layer should offer right now (enabled buttons).
    The engine validates every intent again on entry.
    """
    actions: List[str] = ["start_new_run"]
    if run.perk_pending:
        actions.append("choose_perk")

    if run.scene == Scene.COMBAT and run.combat is not None:
        combat = run.combat
        if combat.turn_locked or run.hero is None or not run.hero.alive:
            return actions
        actions.append("select_target")
        if combat.selected_target() is not None:
            actions.extend(["attack", "power"])
        actions.append("heal")
        return actions

    if run.scene == Scene.BRANCH_CHOICE:
        actions.append("choose_branch")
        return actions

    if run.scene == Scene.MID_NODE:
        kind: Optional[MidNodeKind] = run.current_mid_node()
        if kind == MidNodeKind.MERCHANT:
            actions.extend(["buy", "continue"])
        elif node_options(run):
            actions.append("choose_option")
    return actions
