"""
Narration Log
-------------
Ordered, append-only record of everything the engine did.
Consumed by presentation layers for display. Never read back by rules.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NarrationEvent:
    seq: int
    run: int
    kind: str
    actor: Optional[str] = None
    action: Optional[str] = None
    target: Optional[str] = None
    amount: Optional[int] = None
    critical: bool = False
    missed: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


Subscriber = Callable[[NarrationEvent], None]


class NarrationLog:
    def __init__(self):
        self._events: List[NarrationEvent] = []
        self._subscribers: List[Subscriber] = []
        self.run = 0

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(self._events)

    @property
    def events(self) -> tuple:
        return tuple(self._events)

    def last(self, kind: Optional[str] = None) -> Optional[NarrationEvent]:
        for e in reversed(self._events):
            if kind is None or e.kind == kind:
                return e
        return None

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    def emit(self, kind: str, **fields: Any) -> NarrationEvent:
        event = NarrationEvent(seq=len(self._events) + 1, run=self.run, kind=kind, **fields)
        self._events.append(event)
        for fn in list(self._subscribers):
            fn(event)
        return event

    def warn(self, reason: str, message: str, **data: Any) -> NarrationEvent:
        payload = {"reason": reason, "message": message}
        payload.update(data)
        return self.emit("warning", data=payload)
