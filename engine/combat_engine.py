from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from engine.action_resolution import (
    ENEMY_ATTACK,
    HEAVY_STRIKE,
    HERO_ATTACKS,
    HEX_ATTACK,
    AttackProfile,
    AttackResult,
    HeroAction,
    hero_heal_amount,
    parse_hero_action,
    resolve_attack,
)
from engine.character import Enemy, heal
from engine.dice import roll_check
from engine.phases import (
    HERO_DOWN,
    INVALID_OPTION,
    INVALID_TARGET,
    NO_TARGET,
    TURN_LOCKED,
    WRONG_SCENE,
    IntentResult,
    Scene,
    applied,
    reject,
)
from engine.stats import BossKind
from engine.status import WEAKNESS_TURNS, apply_weakness, is_weakened, tick_weakness


logger = logging.getLogger(__name__)

HEAVY_STRIKE_CHANCE = 0.10
HEX_CHANCE = 0.5
HEX_ROUND_PERIOD = 3


class CombatOutcome(str, Enum):
    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"


def narrate_attack(run, result: AttackResult, target_index: Optional[int] = None) -> None:
    data = {"multiplier": result.multiplier}
    if target_index is not None:
        data["target_index"] = target_index
    run.log.emit(
        "attack",
        actor=result.attacker,
        action=result.action,
        target=result.defender,
        amount=result.damage,
        critical=result.critical,
        missed=result.missed,
        data=data,
    )
    if result.killed:
        run.log.emit("defeated", actor=result.defender, action="defeated")


# =========================
# ENEMY BEHAVIORS
# =========================

def _default_attack(run, enemy: Enemy) -> None:
    narrate_attack(run, resolve_attack(enemy, run.hero, ENEMY_ATTACK, run.rng))


def _orc_warlord_attack(run, enemy: Enemy) -> None:
    profile: AttackProfile = ENEMY_ATTACK
    if roll_check(run.rng, HEAVY_STRIKE_CHANCE, "heavy_strike"):
        profile = HEAVY_STRIKE
    narrate_attack(run, resolve_attack(enemy, run.hero, profile, run.rng))


def _goblin_shaman_attack(run, enemy: Enemy) -> None:
    hero = run.hero
    if run.combat.round_number % HEX_ROUND_PERIOD == 0 and roll_check(run.rng, HEX_CHANCE, "hex"):
        run.log.emit("hex", actor=enemy.name, action="hex", target=hero.name)
        narrate_attack(run, resolve_attack(enemy, hero, HEX_ATTACK, run.rng))
        if hero.alive:
            apply_weakness(hero, WEAKNESS_TURNS)
            run.log.emit("weakness", actor=enemy.name, action="weakness", target=hero.name, amount=WEAKNESS_TURNS)
        return
    _default_attack(run, enemy)


ENEMY_BEHAVIORS = {
    None: _default_attack,
    BossKind.ORC_WARLORD: _orc_warlord_attack,
    BossKind.GOBLIN_SHAMAN: _goblin_shaman_attack,
}


class CombatEngine:
    """
    Resolves hero intents and the enemy phase for `run.combat`.

    When an encounter ends, control goes to the injected `end_handler`
    (the campaign), which decides what comes next.
    """

    def __init__(self, end_handler: Callable[[object, CombatOutcome], None]):
        self.end_handler = end_handler

    # =========================
    # INTENTS
    # =========================

    def _precheck(self, run) -> Optional[IntentResult]:
        if run.scene != Scene.COMBAT or run.combat is None:
            return reject(run, WRONG_SCENE, "Not in combat.")
        if run.combat.turn_locked:
            return reject(run, TURN_LOCKED, "A round is still resolving.")
        if run.hero is None or not run.hero.alive:
            return reject(run, HERO_DOWN, "The hero is down.")
        return None

    def select_target(self, run, index) -> IntentResult:
        refused = self._precheck(run)
        if refused:
            return refused
        if not run.combat.is_valid_target(index):
            return reject(run, INVALID_TARGET, "That is not a living enemy.", index=index)
        run.combat.selected_target_index = index
        enemy = run.combat.enemies[index]
        run.log.emit("target_selected", actor=run.hero.name, action="select", target=enemy.name, data={"target_index": index})
        return applied(target_index=index)

    def hover_target(self, run, index) -> IntentResult:
        if run.scene != Scene.COMBAT or run.combat is None:
            return reject(run, WRONG_SCENE, "Not in combat.")
        if index is not None and run.combat.enemy_at(index) is None:
            return reject(run, INVALID_TARGET, "No enemy there.", index=index)
        run.combat.hover_target_index = index
        return applied(hover_index=index)

    def perform_hero_action(self, run, kind) -> IntentResult:
        action = parse_hero_action(kind)
        if action is None:
            return reject(run, INVALID_OPTION, f"Unknown action: {kind}")
        refused = self._precheck(run)
        if refused:
            return refused

        session = run.combat
        hero = run.hero
        target = session.selected_target()
        if action in HERO_ATTACKS and target is None:
            return reject(run, NO_TARGET, "Select a target first.")

        session.turn_locked = True
        session.weakness_at_round_start = is_weakened(hero)
        round_number = session.round_number
        try:
            if action == HeroAction.HEAL:
                raw = hero_heal_amount(hero)
                delta = heal(hero, raw)
                run.log.emit("heal", actor=hero.name, action="heal", target=hero.name, amount=delta, data={"requested": raw})
            else:
                result = resolve_attack(hero, target, HERO_ATTACKS[action], run.rng)
                narrate_attack(run, result, session.selected_target_index)

            if self.check_end(run) != CombatOutcome.ONGOING:
                return applied(action=action.value, round=round_number)

            self.run_enemy_phase(run)
            self.check_end(run)
        finally:
            session.turn_locked = False
        return applied(action=action.value, round=round_number)

    # =========================
    # ROUND RESOLUTION
    # =========================

    def run_enemy_phase(self, run) -> None:
        """
        Every living enemy acts once, in session order. Enemies after a
        killing blow on the hero do not act.
        """
        session = run.combat
        hero = run.hero
        behavior = ENEMY_BEHAVIORS[session.boss_key if session.is_boss else None]
        for enemy in session.enemies:
            if not enemy.alive or not hero.alive:
                continue
            behavior(run, enemy)

        tick = tick_weakness(hero, session.weakness_at_round_start)
        if tick["expired"]:
            run.log.emit("weakness_expired", target=hero.name, action="weakness_expired")
        run.log.emit("round_end", data={"round": session.round_number})
        logger.debug("round %s done: hero hp=%s/%s", session.round_number, hero.hp, hero.max_hp)
        session.round_number += 1
        session.turn_locked = False

    def check_end(self, run) -> CombatOutcome:
        if not run.hero.alive:
            outcome = CombatOutcome.DEFEAT
        elif not run.combat.any_enemy_alive():
            outcome = CombatOutcome.VICTORY
        else:
            return CombatOutcome.ONGOING
        logger.info("combat '%s' ended: %s", run.combat.name, outcome.value)
        self.end_handler(run, outcome)
        return outcome
