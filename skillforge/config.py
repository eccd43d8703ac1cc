"""
Engine configuration.

Hosts either build an EngineConfig directly or read it from the
environment:

    SKILLFORGE_TICK_INTERVAL_MS      Host tick period in ms (default 100)
    SKILLFORGE_CRITICAL_MULTIPLIER   Reward/experience multiplier on a crit (2.0)
    SKILLFORGE_RANDOM_SEED           Seed for the shared random source (unset = random)
    SKILLFORGE_UNLOCK_ORDER          Comma-separated skill ids, display order
    SKILLFORGE_DEFINITIONS_DIR       Directory of YAML skill definitions
    SKILLFORGE_NOTIFICATION_LIMIT    Max buffered notifications (0 = unbounded)
    SKILLFORGE_LOG_LEVEL             Level used by configure_logging()
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping
import logging
import os


DEFAULT_UNLOCK_ORDER = ["woodcutting"]
DEFAULT_MILESTONE_LEVELS = (10, 20, 30, 40, 50, 60, 70, 80, 90, 99)


@dataclass
class EngineConfig:
    """
    Settings shared by every engine in a session.
    """
    tick_interval_ms: int = 100
    critical_multiplier: float = 2.0
    random_seed: int | None = None
    unlock_order: list[str] = field(default_factory=lambda: list(DEFAULT_UNLOCK_ORDER))
    definitions_dir: Path | None = None
    notification_limit: int = 1000
    milestone_levels: tuple[int, ...] = DEFAULT_MILESTONE_LEVELS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from SKILLFORGE_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("SKILLFORGE_TICK_INTERVAL_MS"):
            config.tick_interval_ms = int(env["SKILLFORGE_TICK_INTERVAL_MS"])
        if env.get("SKILLFORGE_CRITICAL_MULTIPLIER"):
            config.critical_multiplier = float(env["SKILLFORGE_CRITICAL_MULTIPLIER"])
        if env.get("SKILLFORGE_RANDOM_SEED"):
            config.random_seed = int(env["SKILLFORGE_RANDOM_SEED"])
        if env.get("SKILLFORGE_UNLOCK_ORDER"):
            config.unlock_order = [
                skill_id.strip()
                for skill_id in env["SKILLFORGE_UNLOCK_ORDER"].split(",")
                if skill_id.strip()
            ]
        if env.get("SKILLFORGE_DEFINITIONS_DIR"):
            config.definitions_dir = Path(env["SKILLFORGE_DEFINITIONS_DIR"])
        if env.get("SKILLFORGE_NOTIFICATION_LIMIT"):
            config.notification_limit = int(env["SKILLFORGE_NOTIFICATION_LIMIT"])
        if env.get("SKILLFORGE_LOG_LEVEL"):
            config.log_level = env["SKILLFORGE_LOG_LEVEL"].upper()

        return config


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Library code only logs; hosts call this once at startup if they
    want engine output on stderr.
    """
    logger = logging.getLogger("skillforge")
    logger.setLevel(level)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)
    return logger
