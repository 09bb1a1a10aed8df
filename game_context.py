"""
Central place for game-wide settings read from the environment
(seed, logging, allowed web origins) and for logging setup.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class GameConfig:
    seed: Optional[int] = None
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    def with_overrides(self, **changes) -> "GameConfig":
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


def _parse_seed(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-integer RPG2D_SEED=%r", raw)
        return None


def load_config(env: Optional[Mapping[str, str]] = None) -> GameConfig:
    env = os.environ if env is None else env
    origins_raw = env.get("RPG2D_CORS_ORIGINS", "")
    origins = [o.strip() for o in origins_raw.split(",") if o.strip()]
    return GameConfig(
        seed=_parse_seed(env.get("RPG2D_SEED")),
        log_level=(env.get("RPG2D_LOG_LEVEL") or "WARNING").upper(),
        log_file=env.get("RPG2D_LOG_FILE") or None,
        cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
    )


def configure_logging(config: GameConfig) -> None:
    """
    Root logger at the configured level. With a log file, everything at DEBUG
    also goes to that file (rolls, damage, transitions).
    """
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.WARNING
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    handlers[0].setLevel(level)
    root_level = level
    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)
        root_level = logging.DEBUG
    logging.basicConfig(level=root_level, format=LOG_FORMAT, handlers=handlers, force=True)
