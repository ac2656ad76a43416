"""Tests for configuration loading and logging setup."""

import logging
from pathlib import Path

import pytest

from castaway.config import (
    DEFAULT_CONFIG_PATH,
    AgentConfig,
    Config,
    ExploreStrategy,
    LoggingConfig,
    load_config,
    setup_logging,
)

ENV_VARS = ["CASTAWAY_HOST", "CASTAWAY_PORT", "CASTAWAY_LOG_LEVEL", "CASTAWAY_EXPLORE_STRATEGY"]

DEFAULT_YAML = Path(__file__).parent.parent / "config" / "default.yaml"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestAgentConfig:
    """Tests for AgentConfig defaults and helpers."""

    def test_default_values(self):
        config = AgentConfig()
        assert config.home_pos == 80
        assert config.view_dist == 2
        assert config.search_depth_cap == 100
        assert config.depth_fallback_max == 10
        assert config.explore_strategy == "dfs"
        assert config.max_turns == 0
        assert config.max_search_nodes is None

    def test_explore_strategy(self):
        assert AgentConfig(explore_strategy="BFS").get_explore_strategy() == ExploreStrategy.BFS

    def test_invalid_strategy_falls_back(self, caplog):
        with caplog.at_level("WARNING", logger="castaway.config"):
            strategy = AgentConfig(explore_strategy="astar").get_explore_strategy()
        assert strategy == ExploreStrategy.DFS
        assert "astar" in caplog.text


class TestLoadConfig:
    """Tests for YAML loading and environment overrides."""

    def test_shipped_defaults_match_dataclasses(self):
        config = load_config(str(DEFAULT_YAML))
        assert config == Config()

    def test_default_path(self):
        assert DEFAULT_CONFIG_PATH.resolve() == DEFAULT_YAML.resolve()
        assert load_config() == Config()

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "nope.yaml"))
        assert config == Config()

    def test_yaml_sections(self, tmp_path):
        path = tmp_path / "castaway.yaml"
        path.write_text(
            "agent:\n"
            "  home_pos: 40\n"
            "  explore_strategy: bfs\n"
            "transport:\n"
            "  host: engine.local\n"
            "  port: 31415\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        config = load_config(str(path))

        assert config.agent.home_pos == 40
        assert config.agent.get_explore_strategy() == ExploreStrategy.BFS
        assert config.agent.search_depth_cap == 100
        assert config.transport.host == "engine.local"
        assert config.transport.port == 31415
        assert config.logging.level == "DEBUG"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == Config()

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "castaway.yaml"
        path.write_text("transport:\n  port: 1000\n")
        monkeypatch.setenv("CASTAWAY_PORT", "2000")
        monkeypatch.setenv("CASTAWAY_HOST", "10.0.0.5")
        monkeypatch.setenv("CASTAWAY_LOG_LEVEL", "INFO")
        monkeypatch.setenv("CASTAWAY_EXPLORE_STRATEGY", "bfs")

        config = load_config(str(path))

        assert config.transport.port == 2000
        assert config.transport.host == "10.0.0.5"
        assert config.logging.level == "INFO"
        assert config.agent.explore_strategy == "bfs"

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("agent:\n  warp_speed: 9\n")
        with pytest.raises(TypeError):
            load_config(str(path))


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_level_applied(self):
        setup_logging(LoggingConfig(level="debug"))
        assert logging.getLogger().level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "castaway.log"

        setup_logging(LoggingConfig(level="INFO", file=str(log_file)))
        logging.getLogger("castaway.test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert log_file.exists()
        assert "hello" in log_file.read_text()
