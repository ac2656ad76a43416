"""Configuration management for the castaway agent."""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


class ExploreStrategy(Enum):
    """How the agent looks for unexplored terrain.

    DFS shares the iterative-deepening search used for winning; BFS is the
    plain nearest-frontier search.
    """
    DFS = "dfs"
    BFS = "bfs"


@dataclass
class AgentConfig:
    """Agent configuration (world model + search settings)."""

    # World model
    home_pos: int = 80  # Grid is 2 * home_pos + 1 cells square
    view_dist: int = 2

    # Search settings
    search_depth_cap: int = 100
    depth_fallback_max: int = 10
    max_search_nodes: Optional[int] = None  # None = search every depth up to the cap
    # Options: "dfs", "bfs"
    explore_strategy: str = "dfs"

    # Runtime settings
    max_turns: int = 0  # 0 = unlimited
    log_map_every: int = 0  # Log the known map every N turns (0 = never)

    def get_explore_strategy(self) -> ExploreStrategy:
        """Get explore strategy as enum, defaulting to DFS if invalid."""
        try:
            return ExploreStrategy(self.explore_strategy.lower())
        except ValueError:
            logger.warning(f"Invalid explore_strategy '{self.explore_strategy}', defaulting to dfs")
            return ExploreStrategy.DFS


@dataclass
class TransportConfig:
    """Game engine connection configuration."""

    host: str = "localhost"
    port: Optional[int] = None
    timeout: Optional[float] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration container."""

    agent: AgentConfig = field(default_factory=AgentConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "default.yaml"

_SECTIONS = {
    "agent": AgentConfig,
    "transport": TransportConfig,
    "logging": LoggingConfig,
}

# Environment variable -> (section, field, parser)
ENV_OVERRIDES = {
    "CASTAWAY_HOST": ("transport", "host", str),
    "CASTAWAY_PORT": ("transport", "port", int),
    "CASTAWAY_LOG_LEVEL": ("logging", "level", str),
    "CASTAWAY_EXPLORE_STRATEGY": ("agent", "explore_strategy", str),
}


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML, then apply CASTAWAY_* environment variables.

    A missing file leaves the dataclass defaults in place.

    Args:
        config_path: Path to config file. Defaults to the shipped config/default.yaml

    Returns:
        Populated Config dataclass
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    config = Config()

    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        for section, section_cls in _SECTIONS.items():
            if section in data:
                setattr(config, section, section_cls(**data[section]))

    for name, (section, attr, parse) in ENV_OVERRIDES.items():
        value = os.environ.get(name)
        if value:
            setattr(getattr(config, section), attr, parse(value))

    return config


def setup_logging(config: LoggingConfig) -> None:
    """Send log records to stderr, and also to `config.file` when one is set."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file))

    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.WARNING),
        format=config.format,
        handlers=handlers,
        force=True,
    )
    logger.info(f"Logging configured at level {config.level}")
