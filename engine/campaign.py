"""
Campaign state machine.

    Opening Combat -> Branch Choice -> Mid-Node -> Boss Combat -> Summary
                                                              -> (start_new_run) Opening Combat

Defeat in any combat goes straight to Summary. Every intent validates the
current scene first and answers with an IntentResult; refused intents change
nothing.
"""

from __future__ import annotations

import logging
import math

from engine.character import (
    equip_item,
    grant_perk,
    heal,
    init_hero,
    missing_hp,
    percent_of_max_hp,
    take_damage,
)
from engine.combat_engine import CombatEngine, CombatOutcome
from engine.combat_state import CombatSession
from engine.dice import roll_check
from engine.encounters import (
    Branch,
    build_boss,
    build_map,
    enemy_names,
    goblin_ambush,
    opening_skirmish,
    roll_event,
)
from engine.phases import (
    BRANCH_COMMITTED,
    INSUFFICIENT_GOLD,
    INVALID_OPTION,
    NO_PERK_PENDING,
    TURN_LOCKED,
    WRONG_SCENE,
    IntentResult,
    Outcome,
    Scene,
    applied,
    node_options,
    reject,
)
from engine.run_state import RunState
from engine.stats import (
    ITEMS,
    LEVEL_CAP,
    LEVEL_UP_XP,
    PERKS,
    EventKind,
    ItemKind,
    MidNodeKind,
    PerkId,
    rewards_for,
)


logger = logging.getLogger(__name__)

CHEST_GOLD_CHANCE = 0.7
CHEST_GOLD = 20
POTION_HEAL_CHANCE = 0.75
POTION_HEAL_FRACTION = 0.20
HARM_FRACTION = 0.10
SHRINE_COST = 10
SHRINE_HEAL_FRACTION = 0.25
CAMP_HEAL_FRACTION = 0.4
CAMP_ATTACK_BONUS = 1


def _parse(enum_cls, value, case=str.lower):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(case(str(value).strip()))
    except ValueError:
        return None


def _missing_fraction_heal(run: RunState, fraction: float) -> int:
    """floor(missing * fraction), at least 1 while any hp is missing."""
    missing = missing_hp(run.hero)
    amount = math.floor(missing * fraction)
    if amount < 1 and missing > 0:
        amount = 1
    return amount


class CampaignStateMachine:
    def __init__(self):
        self.combat = CombatEngine(end_handler=self.on_combat_end)

    # =========================
    # RUN LIFECYCLE
    # =========================

    def start_new_run(self, run: RunState) -> IntentResult:
        if run.combat is not None and run.combat.turn_locked:
            return reject(run, TURN_LOCKED, "A round is still resolving.")
        run.run_number += 1
        run.log.run = run.run_number
        run.hero = init_hero()
        run.combat = None
        run.map = None
        run.node_event = None
        run.perk_offered = False
        run.perk_pending = False
        run.outcome = None
        run.wins = 0
        run.elapsed_at_end = None
        run.start_ts = run.now()
        logger.info("run %s started", run.run_number)
        run.log.emit("run_started", data={"run": run.run_number, "start_ts": run.start_ts})
        self._start_combat(run, opening_skirmish())
        return applied(run=run.run_number)

    def _start_combat(self, run: RunState, session: CombatSession) -> None:
        run.combat = session
        run.scene = Scene.COMBAT
        logger.info("combat '%s' started (boss=%s)", session.name, session.is_boss)
        run.log.emit(
            "combat_started",
            action=session.name,
            data={
                "enemies": enemy_names(session),
                "is_boss": session.is_boss,
                "boss_key": session.boss_key.value if session.boss_key else None,
            },
        )

    def _finish(self, run: RunState, outcome: Outcome) -> None:
        run.scene = Scene.SUMMARY
        run.outcome = outcome
        run.elapsed_at_end = run.elapsed()
        logger.info("run %s finished: %s", run.run_number, outcome.value)
        run.log.emit("summary", action=outcome.value, data={"wins": run.wins, "elapsed": run.elapsed()})

    # =========================
    # COMBAT HANDOFF
    # =========================

    def on_combat_end(self, run: RunState, outcome: CombatOutcome) -> None:
        if outcome == CombatOutcome.DEFEAT:
            self._finish(run, Outcome.DEFEAT)
            return

        was_boss = run.combat.is_boss
        self._grant_rewards(run, was_boss)
        self._check_level_up(run)

        if was_boss:
            run.wins += 1
            self._finish(run, Outcome.VICTORY)
        elif run.map is None:
            self._present_branch_choice(run)
        else:
            self._enter_boss(run)

    def _grant_rewards(self, run: RunState, is_boss: bool) -> None:
        xp, gold = rewards_for(is_boss)
        hero = run.hero
        hero.xp += xp
        hero.gold += gold
        run.log.emit(
            "reward",
            target=hero.name,
            amount=xp,
            data={"xp": xp, "gold": gold, "total_xp": hero.xp, "total_gold": hero.gold},
        )

    def _check_level_up(self, run: RunState) -> None:
        hero = run.hero
        if run.perk_offered or hero.level >= LEVEL_CAP or hero.xp < LEVEL_UP_XP:
            return
        run.perk_offered = True
        run.perk_pending = True
        run.log.emit("level_up", target=hero.name, data={"options": [p.value for p in PERKS]})

    # =========================
    # COMBAT INTENTS
    # =========================

    def select_target(self, run: RunState, index) -> IntentResult:
        return self.combat.select_target(run, index)

    def hover_target(self, run: RunState, index) -> IntentResult:
        return self.combat.hover_target(run, index)

    def perform_hero_action(self, run: RunState, kind) -> IntentResult:
        return self.combat.perform_hero_action(run, kind)

    # =========================
    # PERK
    # =========================

    def choose_perk(self, run: RunState, perk_id) -> IntentResult:
        if not run.perk_pending or run.hero is None or run.hero.level >= LEVEL_CAP:
            return reject(run, NO_PERK_PENDING, "No perk choice is available.")
        perk = _parse(PerkId, perk_id)
        if perk is None:
            return reject(run, INVALID_OPTION, f"Unknown perk: {perk_id}")
        grant_perk(run.hero, perk)
        run.perk_pending = False
        run.log.emit("perk", target=run.hero.name, action=perk.value, data={"label": PERKS[perk][0]})
        return applied(perk=perk.value)

    # =========================
    # BRANCH CHOICE
    # =========================

    def _present_branch_choice(self, run: RunState) -> None:
        run.map = build_map(run.rng)
        run.scene = Scene.BRANCH_CHOICE
        run.log.emit("branch_choice", data=run.map.to_dict())

    def choose_branch(self, run: RunState, branch_id) -> IntentResult:
        if run.scene != Scene.BRANCH_CHOICE or run.map is None:
            return reject(run, WRONG_SCENE, "There is no path to choose right now.")
        if run.map.branch is not None:
            return reject(run, BRANCH_COMMITTED, "The path is already chosen.")
        branch = _parse(Branch, branch_id, case=str.upper)
        if branch is None:
            return reject(run, INVALID_OPTION, f"Unknown path: {branch_id}")
        run.map.branch = branch
        logger.info("branch %s chosen", branch.value)
        run.log.emit("branch_chosen", action=branch.value, data=run.map.to_dict())
        self._enter_mid_node(run)
        return applied(branch=branch.value)

    # =========================
    # MID-NODES
    # =========================

    def _enter_event(self, run: RunState) -> None:
        run.scene = Scene.MID_NODE
        run.node_event = roll_event(run.rng)
        run.log.emit("event", action=run.node_event.value, data={"options": node_options(run)})

    def _enter_camp(self, run: RunState) -> None:
        run.scene = Scene.MID_NODE
        run.log.emit("camp", data={"options": node_options(run)})

    def _enter_merchant(self, run: RunState) -> None:
        run.scene = Scene.MID_NODE
        run.log.emit("merchant", data={"gold": run.hero.gold, "items": [k.value for k in ITEMS]})

    def _enter_mid_combat(self, run: RunState) -> None:
        self._start_combat(run, goblin_ambush())

    def _enter_mid_node(self, run: RunState) -> None:
        kind = run.current_mid_node()
        handlers = {
            MidNodeKind.EVENT: self._enter_event,
            MidNodeKind.CAMP: self._enter_camp,
            MidNodeKind.MERCHANT: self._enter_merchant,
            MidNodeKind.COMBAT: self._enter_mid_combat,
        }
        logger.info("entering mid-node %s", kind.value)
        handlers[kind](run)

    def choose_mid_node_outcome(self, run: RunState, option_id) -> IntentResult:
        if run.scene != Scene.MID_NODE:
            return reject(run, WRONG_SCENE, "There is nothing to decide here.")
        options = node_options(run)
        if not options:
            return reject(run, WRONG_SCENE, "This stop has no choices; buy or continue instead.")
        option = str(option_id).strip().lower() if option_id is not None else ""
        if option not in options:
            return reject(run, INVALID_OPTION, f"Unknown option: {option_id}", options=options)

        kind = run.current_mid_node()
        if kind == MidNodeKind.CAMP:
            outcome = self._resolve_camp(run, option)
        else:
            resolvers = {
                EventKind.CHEST: self._resolve_chest,
                EventKind.SHRINE: self._resolve_shrine,
                EventKind.POTION: self._resolve_potion,
            }
            outcome = resolvers[run.node_event](run, option)
        if isinstance(outcome, IntentResult):
            return outcome

        run.node_event = None
        self._enter_boss(run)
        return applied(option=option, outcome=outcome)

    def _harm(self, run: RunState, action: str) -> int:
        dmg = percent_of_max_hp(run.hero, HARM_FRACTION)
        delta = take_damage(run.hero, dmg)
        run.log.emit("damage", action=action, target=run.hero.name, amount=delta)
        return delta

    def _node_heal(self, run: RunState, action: str, raw: int) -> int:
        delta = heal(run.hero, raw)
        run.log.emit("heal", actor=run.hero.name, action=action, target=run.hero.name, amount=delta, data={"requested": raw})
        return delta

    def _skip(self, run: RunState, action: str) -> str:
        run.log.emit("node_skipped", action=action)
        return "skipped"

    def _resolve_chest(self, run: RunState, option: str):
        if option == "skip":
            return self._skip(run, "chest")
        if roll_check(run.rng, CHEST_GOLD_CHANCE, "chest"):
            run.hero.gold += CHEST_GOLD
            run.log.emit("gold", action="chest", target=run.hero.name, amount=CHEST_GOLD)
            return "gold"
        self._harm(run, "chest_trap")
        return "trap"

    def _resolve_shrine(self, run: RunState, option: str):
        if option == "leave":
            return self._skip(run, "shrine")
        if run.hero.gold < SHRINE_COST:
            return reject(run, INSUFFICIENT_GOLD, f"The shrine asks for {SHRINE_COST} gold.", gold=run.hero.gold)
        run.hero.gold -= SHRINE_COST
        run.log.emit("donation", actor=run.hero.name, action="shrine", amount=SHRINE_COST)
        self._node_heal(run, "shrine", _missing_fraction_heal(run, SHRINE_HEAL_FRACTION))
        return "healed"

    def _resolve_potion(self, run: RunState, option: str):
        if option == "skip":
            return self._skip(run, "potion")
        if roll_check(run.rng, POTION_HEAL_CHANCE, "potion"):
            self._node_heal(run, "potion", math.ceil(run.hero.max_hp * POTION_HEAL_FRACTION))
            return "healed"
        self._harm(run, "potion_poison")
        return "poisoned"

    def _resolve_camp(self, run: RunState, option: str):
        if option == "heal":
            self._node_heal(run, "camp", _missing_fraction_heal(run, CAMP_HEAL_FRACTION))
            return "healed"
        run.hero.attack += CAMP_ATTACK_BONUS
        run.log.emit("attack_up", target=run.hero.name, amount=CAMP_ATTACK_BONUS, data={"attack": run.hero.attack})
        return "attack_up"

    # =========================
    # MERCHANT
    # =========================

    def _at_merchant(self, run: RunState) -> bool:
        return run.scene == Scene.MID_NODE and run.current_mid_node() == MidNodeKind.MERCHANT

    def choose_merchant_purchase(self, run: RunState, item_kind) -> IntentResult:
        if not self._at_merchant(run):
            return reject(run, WRONG_SCENE, "There is no merchant here.")
        kind = _parse(ItemKind, item_kind)
        if kind is None:
            return reject(run, INVALID_OPTION, f"The merchant does not sell {item_kind}.")
        spec = ITEMS[kind]
        if run.hero.gold < spec.price:
            return reject(run, INSUFFICIENT_GOLD, f"{spec.name} costs {spec.price} gold.", gold=run.hero.gold)
        run.hero.gold -= spec.price
        equip_item(run.hero, kind)
        run.log.emit(
            "purchase",
            actor=run.hero.name,
            action=kind.value,
            amount=spec.price,
            data={"name": spec.name, "gold": run.hero.gold},
        )
        return applied(item=kind.value, gold=run.hero.gold)

    def continue_from_merchant(self, run: RunState) -> IntentResult:
        if not self._at_merchant(run):
            return reject(run, WRONG_SCENE, "There is no merchant here.")
        run.log.emit("node_skipped", action="merchant")
        self._enter_boss(run)
        return applied()

    # =========================
    # BOSS
    # =========================

    def _enter_boss(self, run: RunState) -> None:
        if not run.hero.alive:
            run.log.emit("defeated", actor=run.hero.name, action="defeated")
            self._finish(run, Outcome.DEFEAT)
            return
        self._start_combat(run, build_boss(run.current_boss()))
