"""
Tests for EngineConfig and logging setup.
"""

import logging
from pathlib import Path

import pytest

from ..config import DEFAULT_UNLOCK_ORDER, EngineConfig, configure_logging


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.critical_multiplier == 2.0
        assert config.unlock_order == DEFAULT_UNLOCK_ORDER
        assert config.random_seed is None
        assert config.definitions_dir is None

    def test_unlock_order_not_shared(self):
        a, b = EngineConfig(), EngineConfig()
        a.unlock_order.append("fishing")
        assert b.unlock_order == ["woodcutting"]

    def test_from_env(self):
        config = EngineConfig.from_env({
            "SKILLFORGE_TICK_INTERVAL_MS": "250",
            "SKILLFORGE_CRITICAL_MULTIPLIER": "1.5",
            "SKILLFORGE_RANDOM_SEED": "42",
            "SKILLFORGE_UNLOCK_ORDER": "woodcutting, mining,,fishing",
            "SKILLFORGE_DEFINITIONS_DIR": "/tmp/skills",
            "SKILLFORGE_NOTIFICATION_LIMIT": "0",
            "SKILLFORGE_LOG_LEVEL": "debug",
        })
        assert config.tick_interval_ms == 250
        assert config.critical_multiplier == 1.5
        assert config.random_seed == 42
        assert config.unlock_order == ["woodcutting", "mining", "fishing"]
        assert config.definitions_dir == Path("/tmp/skills")
        assert config.notification_limit == 0
        assert config.log_level == "DEBUG"

    def test_from_env_empty(self):
        assert EngineConfig.from_env({}) == EngineConfig()

    def test_from_env_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("SKILLFORGE_RANDOM_SEED", "7")
        assert EngineConfig.from_env().random_seed == 7

    def test_from_env_bad_number(self):
        with pytest.raises(ValueError):
            EngineConfig.from_env({"SKILLFORGE_TICK_INTERVAL_MS": "soon"})


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level_once(self):
        logger = configure_logging("DEBUG")
        handlers = list(logger.handlers)
        try:
            assert logger.name == "skillforge"
            assert logger.level == logging.DEBUG
            configure_logging("WARNING")
            assert logger.level == logging.WARNING
            assert logger.handlers == handlers
        finally:
            for handler in handlers:
                if isinstance(handler, logging.StreamHandler):
                    logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
