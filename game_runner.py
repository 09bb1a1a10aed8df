"""
game_runner.py
--------------
Step-based wrapper around the engine. One Game per player session.
Maps adapter input dicts to campaign intents and forwards narration
and state to the UI provider. Works for both CLI and web.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from engine.campaign import CampaignStateMachine
from engine.dice import RandomOracle
from engine.phases import INVALID_OPTION, IntentResult, reject
from engine.run_state import new_run_state, snapshot
from ui.events import emit_narration, emit_state

logger = logging.getLogger(__name__)


class Game:
    def __init__(self, ui, seed: Optional[int] = None, rng: Optional[RandomOracle] = None, clock: Optional[Callable[[], float]] = None):
        self.ui = ui
        self.run = new_run_state(seed=seed, rng=rng, clock=clock)
        self.campaign = CampaignStateMachine()
        self.run.log.subscribe(self._on_narration)

        c = self.campaign
        self._handlers: Dict[str, Callable[[Dict[str, Any]], IntentResult]] = {
            "start": lambda p: c.start_new_run(self.run),
            "select_target": lambda p: c.select_target(self.run, p.get("target")),
            "hover": lambda p: c.hover_target(self.run, p.get("target")),
            "attack": lambda p: c.perform_hero_action(self.run, "attack"),
            "power": lambda p: c.perform_hero_action(self.run, "power"),
            "heal": lambda p: c.perform_hero_action(self.run, "heal"),
            "choose_branch": lambda p: c.choose_branch(self.run, p.get("branch")),
            "choose_option": lambda p: c.choose_mid_node_outcome(self.run, p.get("option")),
            "buy": lambda p: c.choose_merchant_purchase(self.run, p.get("item")),
            "continue": lambda p: c.continue_from_merchant(self.run),
            "choose_perk": lambda p: c.choose_perk(self.run, p.get("perk")),
        }

    def _on_narration(self, event) -> None:
        emit_narration(self.ui, event)

    def snapshot(self) -> Dict[str, Any]:
        return snapshot(self.run)

    def step(self, player_input: dict) -> IntentResult:
        """
        Advance the game by one intent.
        Non-blocking. Safe for web.
        """
        action = (player_input or {}).get("action")
        handler = self._handlers.get(action)
        if handler is None:
            result = reject(self.run, INVALID_OPTION, f"Unknown action: {action}")
        else:
            logger.debug("step action=%s input=%s", action, player_input)
            result = handler(player_input)
        emit_state(self.ui, self.snapshot())
        return result

    def handle_input(self, player_input: dict, session=None) -> IntentResult:
        """
        Adapter for GameSession; forwards to step().
        """
        return self.step(player_input)
