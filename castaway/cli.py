"""
Command-line interface for the castaway agent.

Usage:
    castaway -p 31415                 Play against a game engine on localhost
    castaway -p 31415 --explore bfs   Use breadth-first exploration
    castaway -p 31415 -l DEBUG        Verbose search logging
"""

import argparse
import logging
import sys
from typing import Optional

from castaway.agent import CastawayAgent
from castaway.api.environment import GameConnection, TransportError
from castaway.config import load_config, setup_logging

logger = logging.getLogger(__name__)


def cmd_play(args: argparse.Namespace) -> int:
    """Connect to the game engine and play one game."""
    config = args.config_obj

    if args.port is not None:
        config.transport.port = args.port
    if args.host:
        config.transport.host = args.host
    if args.explore:
        config.agent.explore_strategy = args.explore

    if config.transport.port is None:
        print("Error: no port given (use -p PORT or CASTAWAY_PORT)", file=sys.stderr)
        return 1

    agent = CastawayAgent(config.agent)
    connection = GameConnection(
        host=config.transport.host,
        port=config.transport.port,
        timeout=config.transport.timeout,
        view_dist=config.agent.view_dist,
    )

    try:
        with connection:
            result = agent.run(connection)
    except TransportError as e:
        logger.error(f"Could not play: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0 if result.won else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="castaway - an agent that finds the treasure and brings it home",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=None,
        help="Game engine TCP port",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Game engine host (default: localhost)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level override",
    )
    parser.add_argument(
        "--explore",
        type=str,
        default=None,
        choices=["dfs", "bfs"],
        help="Exploration strategy override",
    )
    parser.set_defaults(func=cmd_play)

    args = parser.parse_args(argv)

    # Load config and set up logging
    config = load_config(args.config)
    if args.log_level:
        config.logging.level = args.log_level
    setup_logging(config.logging)
    args.config_obj = config

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
