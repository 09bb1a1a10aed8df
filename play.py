"""
Command-line front end.

    python play.py            # interactive
    python play.py --auto     # scripted smoke run
    python play.py --seed 7   # reproducible rolls
"""
from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional, Tuple

from engine.campaign import SHRINE_COST
from game_context import configure_logging, load_config
from game_runner import Game
from ui.cli_provider import CLIProvider
from ui.ui import UI

logger = logging.getLogger(__name__)

AUTO_HEAL_BELOW = 0.35
AUTO_MAX_STEPS = 500

Option = Tuple[str, Dict[str, Any]]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--auto", action="store_true", help="Run in automated mode (no prompts).")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible rolls.")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Logging level (DEBUG, INFO, ...).")
    return parser.parse_args(argv)


# =========================
# STATUS LINES
# =========================

def hero_line(snap: Dict[str, Any]) -> str:
    hero = snap.get("hero") or {}
    parts = [
        f"{hero.get('name')} HP {hero.get('hp')}/{hero.get('max_hp')}",
        f"ATK {hero.get('attack')} DEF {hero.get('defense')}",
        f"Lv {hero.get('level')} XP {hero.get('xp')}/{snap.get('xp_to_level')}",
        f"Gold {hero.get('gold')}",
    ]
    if hero.get("weakness_turns"):
        parts.append(f"Weakened ({hero['weakness_turns']})")
    if hero.get("item_name"):
        parts.append(f"Item: {hero['item_name']}")
    return " | ".join(parts)


def enemy_lines(snap: Dict[str, Any]) -> List[str]:
    out = []
    selected = snap.get("selected_target_index")
    for e in snap.get("enemies") or []:
        marker = ">" if e["index"] == selected else " "
        state = f"{e['hp']}/{e['max_hp']}" if e["alive"] else "defeated"
        out.append(f"{marker} [{e['index']}] {e['name']} {state}")
    return out


# =========================
# OPTIONS
# =========================

def build_options(snap: Dict[str, Any]) -> List[Option]:
    """Menu entries (label, step input) for the current scene."""
    allowed = set(snap.get("allowed_actions") or [])
    perk = snap.get("perk") or {}
    options: List[Option] = []

    if "choose_perk" in allowed:
        for p in perk.get("options") or []:
            options.append((f"Perk: {p['label']}", {"action": "choose_perk", "perk": p["id"]}))

    scene = snap.get("scene")
    if scene == "combat":
        if "select_target" in allowed:
            for e in snap.get("enemies") or []:
                if e["alive"] and e["index"] != snap.get("selected_target_index"):
                    options.append((f"Target {e['name']}", {"action": "select_target", "target": e["index"]}))
        if "attack" in allowed:
            options.append(("Attack", {"action": "attack"}))
            options.append(("Power attack", {"action": "power"}))
        if "heal" in allowed:
            options.append(("Heal", {"action": "heal"}))
    elif scene == "branch_choice":
        m = snap.get("map") or {}
        for key in ("A", "B"):
            opt = (m.get("options") or {}).get(key) or {}
            options.append((f"Path {key}: {opt.get('mid_node')} then {opt.get('boss_name')}", {"action": "choose_branch", "branch": key}))
    elif scene == "mid_node":
        node = snap.get("node") or {}
        for offer in node.get("offers") or []:
            options.append((f"Buy {offer['name']} ({offer['price']}g)", {"action": "buy", "item": offer["item"]}))
        if "continue" in allowed:
            options.append(("Continue", {"action": "continue"}))
        for opt in node.get("options") or []:
            options.append((opt.capitalize(), {"action": "choose_option", "option": opt}))

    options.append(("New run", {"action": "start"}))
    return options


def auto_policy(snap: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Simple scripted player. Returns None when the run is over."""
    scene = snap.get("scene")
    hero = snap.get("hero") or {}
    perk = snap.get("perk") or {}

    if scene in ("menu", "summary"):
        return None
    if perk.get("pending"):
        return {"action": "choose_perk", "perk": "crit"}

    if scene == "combat":
        if hero.get("hp", 0) < hero.get("max_hp", 1) * AUTO_HEAL_BELOW:
            return {"action": "heal"}
        living = [e for e in snap.get("enemies") or [] if e["alive"]]
        selected = snap.get("selected_target_index")
        if not any(e["index"] == selected for e in living):
            return {"action": "select_target", "target": living[0]["index"]}
        return {"action": "attack"}

    if scene == "branch_choice":
        return {"action": "choose_branch", "branch": "A"}

    if scene == "mid_node":
        node = snap.get("node") or {}
        if node.get("kind") == "merchant":
            if hero.get("item") is None:
                for offer in node.get("offers") or []:
                    if offer["item"] == "sword" and offer["affordable"]:
                        return {"action": "buy", "item": "sword"}
            return {"action": "continue"}
        if node.get("kind") == "camp":
            return {"action": "choose_option", "option": "heal"}
        if node.get("event") == "shrine" and hero.get("gold", 0) < SHRINE_COST:
            return {"action": "choose_option", "option": "leave"}
        opts = node.get("options") or []
        if opts:
            return {"action": "choose_option", "option": opts[0]}
    return None


def prompt_input(ui: UI, snap: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    ui.system(hero_line(snap))
    for line in enemy_lines(snap):
        ui.system(line)
    options = build_options(snap)
    labels = [label for label, _ in options] + ["Quit"]
    idx = ui.choice("What do you do?", labels)
    if idx is None or idx >= len(options):
        return None
    return options[idx][1]


def run_auto(game: Game, max_steps: int = AUTO_MAX_STEPS) -> Dict[str, Any]:
    game.step({"action": "start"})
    for _ in range(max_steps):
        snap = game.snapshot()
        player_input = auto_policy(snap)
        if player_input is None:
            return snap
        game.step(player_input)
    logger.warning("auto run stopped after %s steps", max_steps)
    return game.snapshot()


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config().with_overrides(seed=args.seed, log_level=(args.log_level or "").upper() or None)
    configure_logging(config)

    ui = UI(CLIProvider())
    game = Game(ui, seed=config.seed)

    if args.auto:
        snap = run_auto(game)
        ui.system(hero_line(snap))
        return

    game.step({"action": "start"})
    while True:
        player_input = prompt_input(ui, game.snapshot())
        if player_input is None:
            break
        game.step(player_input)


if __name__ == "__main__":
    main()
