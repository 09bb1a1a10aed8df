from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from engine.character import Enemy
from engine.stats import BossKind


@dataclass
class CombatSession:
    """Ephemeral state of one encounter. Enemy order is fixed at creation."""
    name: str
    enemies: List[Enemy] = field(default_factory=list)
    is_boss: bool = False
    boss_key: Optional[BossKind] = None
    round_number: int = 1
    selected_target_index: Optional[int] = None
    hover_target_index: Optional[int] = None
    turn_locked: bool = False
    weakness_at_round_start: bool = False

    def any_enemy_alive(self) -> bool:
        return any(e.alive for e in self.enemies)

    def enemy_at(self, index: Optional[int]) -> Optional[Enemy]:
        if index is None or not isinstance(index, int):
            return None
        if index < 0 or index >= len(self.enemies):
            return None
        return self.enemies[index]

    def is_valid_target(self, index: Optional[int]) -> bool:
        enemy = self.enemy_at(index)
        return enemy is not None and enemy.alive

    def selected_target(self) -> Optional[Enemy]:
        if not self.is_valid_target(self.selected_target_index):
            return None
        return self.enemies[self.selected_target_index]

    def to_dict(self) -> Dict[str, Any]:
        enemies = []
        for i, e in enumerate(self.enemies):
            d = e.to_dict()
            d["index"] = i
            enemies.append(d)
        return {
            "name": self.name,
            "round": self.round_number,
            "is_boss": self.is_boss,
            "boss_key": self.boss_key.value if self.boss_key else None,
            "enemies": enemies,
            "selected_target_index": self.selected_target_index,
            "hover_target_index": self.hover_target_index,
            "turn_locked": self.turn_locked,
        }
