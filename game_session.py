import threading
from typing import Dict, Any, List, Optional, Tuple

from engine.phases import IntentResult


class GameSession:
    def __init__(self, game):
        self.game = game
        self.events: List[Dict[str, Any]] = []
        self.last_result: Optional[IntentResult] = None
        # one intent at a time per session
        self.lock = threading.Lock()

    def emit(self, event: Dict[str, Any]):
        self.events.append(event)

    def step(self, player_input: Dict[str, Any]) -> Tuple[IntentResult, List[Dict[str, Any]], Dict[str, Any]]:
        """
        Apply one intent and return (result, events, snapshot) read under the
        same lock. The step's events are handed back here only, so drain()
        never returns them a second time.
        """
        with self.lock:
            self.events = []
            result = self.game.handle_input(player_input, self)
            self.last_result = result
            events = self.events
            self.events = []
            return result, events, self.game.snapshot()

    def snapshot(self) -> Dict[str, Any]:
        with self.lock:
            return self.game.snapshot()

    def drain(self) -> List[Dict[str, Any]]:
        """Events emitted outside of step(), oldest first."""
        with self.lock:
            evs = self.events[:]
            self.events = []
            return evs
