"""
Shared UI event emitters.
Works for both CLI and Web providers by probing for a session.emit hook.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from engine.narration_log import NarrationEvent


logger = logging.getLogger(__name__)


def emit_event(ui, payload: Dict[str, Any]) -> None:
    """
    Best-effort emit of structured events for non-blocking UIs.
    A provider without a session (CLI) gets nothing.
    """
    provider = getattr(ui, "provider", None) or ui
    session = getattr(provider, "session", None)
    if session is None or not hasattr(session, "emit"):
        return
    try:
        session.emit(payload)
    except Exception:
        # emitting must never break the game loop
        logger.exception("emit_event failed for type=%s", payload.get("type"))


# =========================
# NARRATION TEXT
# =========================

def _attack_text(e: NarrationEvent) -> str:
    verb = {
        "attack": "attacks",
        "power_attack": "unleashes a power attack on",
        "heavy_strike": "lands a HEAVY STRIKE on",
        "hex": "hexes",
    }.get(e.action or "", "attacks")
    if e.missed:
        return f"{e.actor} {verb} {e.target} but misses."
    crit = " Critical hit!" if e.critical else ""
    return f"{e.actor} {verb} {e.target} for {e.amount} damage.{crit}"


def format_event(e: NarrationEvent) -> str:
    """One human-readable line per narration event."""
    d = e.data or {}
    kind = e.kind
    if kind == "attack":
        return _attack_text(e)
    if kind == "defeated":
        return f"{e.actor} is defeated!"
    if kind == "heal":
        source = "" if e.action == "heal" else f" ({e.action})"
        return f"{e.target} recovers {e.amount} HP{source}."
    if kind == "damage":
        cause = {"chest_trap": "A trap springs!", "potion_poison": "The potion is poisoned!"}.get(e.action or "", "")
        return f"{cause} {e.target} takes {e.amount} damage.".strip()
    if kind == "hex":
        return f"{e.actor} begins a hex..."
    if kind == "weakness":
        return f"{e.target} is weakened for {e.amount} turns."
    if kind == "weakness_expired":
        return f"{e.target} is no longer weakened."
    if kind == "target_selected":
        return f"Target: {e.target}."
    if kind == "round_end":
        return f"-- end of round {d.get('round')} --"
    if kind == "run_started":
        return f"Run {d.get('run')} begins."
    if kind == "combat_started":
        enemies = ", ".join(d.get("enemies") or [])
        return f"{e.action}: {enemies}"
    if kind == "reward":
        return f"Victory! +{d.get('xp')} XP, +{d.get('gold')} gold."
    if kind == "level_up":
        return f"{e.target} reaches level 2! Choose a perk."
    if kind == "perk":
        return f"Perk gained: {d.get('label')}."
    if kind == "branch_choice":
        return "The road forks. Choose path A or B."
    if kind == "branch_chosen":
        return f"You take path {e.action}."
    if kind == "event":
        return f"You find a {e.action}."
    if kind == "camp":
        return "You reach a quiet camp."
    if kind == "merchant":
        return f"A merchant offers wares. You have {d.get('gold')} gold."
    if kind == "gold":
        return f"The chest holds {e.amount} gold."
    if kind == "donation":
        return f"{e.actor} donates {e.amount} gold at the shrine."
    if kind == "attack_up":
        return f"{e.target} trains at camp: attack +{e.amount} (now {d.get('attack')})."
    if kind == "purchase":
        return f"Bought {d.get('name')} for {e.amount} gold."
    if kind == "node_skipped":
        return f"You move on from the {e.action}."
    if kind == "summary":
        return f"Run over: {(e.action or '').upper()} in {d.get('elapsed')}s. Wins: {d.get('wins')}."
    if kind == "warning":
        return d.get("message") or d.get("reason") or "Not allowed."
    return kind


# =========================
# PAYLOADS
# =========================

def build_narration(event: NarrationEvent) -> Dict[str, Any]:
    return {"type": "narration_event", "event": event.to_dict(), "text": format_event(event)}


def build_state_update(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "state", "snapshot": snapshot}


def build_hero_update(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """Compact hero bar payload (hp, xp, gold, weakness)."""
    hero = snapshot.get("hero") or {}
    return {
        "type": "hero_update",
        "hero": {
            "name": hero.get("name"),
            "hp": {"current": hero.get("hp"), "max": hero.get("max_hp")},
            "xp": {"current": hero.get("xp"), "next": snapshot.get("xp_to_level")},
            "level": hero.get("level"),
            "gold": hero.get("gold"),
            "weakness_turns": hero.get("weakness_turns", 0),
        },
    }


def emit_narration(ui, event: NarrationEvent) -> None:
    emit_event(ui, build_narration(event))
    if not getattr(ui, "is_blocking", True):
        return
    text = format_event(event)
    if event.kind == "warning":
        ui.error(text)
    elif event.kind in ("combat_started", "branch_choice", "summary"):
        ui.scene(text)
    else:
        ui.narration(text)


def emit_state(ui, snapshot: Dict[str, Any]) -> None:
    emit_event(ui, build_state_update(snapshot))
    if snapshot.get("hero"):
        emit_event(ui, build_hero_update(snapshot))
