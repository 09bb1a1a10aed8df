from __future__ import annotations

from engine.character import Hero


WEAKNESS_TURNS = 2
WEAKNESS_ATTACK_FACTOR = 0.8


def apply_weakness(hero: Hero, turns: int = WEAKNESS_TURNS) -> int:
    """
    Impose (or refresh) the weakness debuff. Refreshing sets the countdown,
    it does not add to it.
    """
    hero.weakness_turns = int(turns)
    return hero.weakness_turns


def is_weakened(hero: Hero) -> bool:
    return hero.weakness_turns > 0


def tick_weakness(hero: Hero, active_at_round_start: bool) -> dict:
    """
    End-of-round countdown. Only a debuff that was already running when the
    round began loses a turn, so a fresh hex keeps its full duration.
    Returns a summary {"ticked": bool, "expired": bool, "remaining": int}.
    """
    summary = {"ticked": False, "expired": False, "remaining": hero.weakness_turns}
    if not active_at_round_start or hero.weakness_turns <= 0:
        return summary
    hero.weakness_turns -= 1
    summary["ticked"] = True
    summary["remaining"] = hero.weakness_turns
    if hero.weakness_turns == 0:
        summary["expired"] = True
    return summary
