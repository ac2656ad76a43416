"""
Main agent orchestration loop.

Coordinates view integration, goal search and action execution to play
the game one turn at a time.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from castaway.api.actions import apply_action
from castaway.api.environment import ConnectionClosed, GameConnection, TransportError
from castaway.api.models import Action, actions_to_string
from castaway.api.pathfinding import Goal, PathResult, find_frontier_bfs, search
from castaway.api.tiles import Tile, View
from castaway.config import AgentConfig, ExploreStrategy
from castaway.memory.world import WorldModel

logger = logging.getLogger(__name__)


class PlanKind(Enum):
    """Which goal produced the actions being executed."""

    WIN = "win"
    EXPLORE = "explore"
    DEPTH = "depth"
    IDLE = "idle"


# Plans that are followed to the end instead of being recomputed each turn
COMMITTED_PLANS = (PlanKind.WIN, PlanKind.DEPTH)


@dataclass
class AgentState:
    """Current state of the agent."""

    turn: int = 0
    plan: list[Action] = field(default_factory=list)
    plan_kind: Optional[PlanKind] = None
    searches_run: int = 0
    search_nodes: int = 0
    illegal_moves: int = 0
    idle_turns: int = 0
    last_action: Optional[Action] = None
    treasure_seen: bool = False
    running: bool = False


@dataclass
class AgentResult:
    """Result of one game."""

    started_at: datetime
    ended_at: Optional[datetime] = None
    end_reason: str = ""
    turns: int = 0
    won: bool = False
    has_treasure: bool = False
    illegal_moves: int = 0
    errors: list[str] = field(default_factory=list)


class CastawayAgent:
    """
    Agent that explores the island and brings the treasure home.

    Each turn it merges the view into its world model, then either keeps
    following a committed plan or searches for a new one in priority
    order: win, explore, then depth-limited fallbacks. The chosen action
    is applied to the model before it is returned, since the next view
    describes the world after that action.

    Example usage:
        agent = CastawayAgent()

        # Run a full game
        with GameConnection("localhost", port) as conn:
            result = agent.run(conn)

        # Or turn by turn
        action = agent.get_action(view)
    """

    def __init__(self, config: Optional[AgentConfig] = None):
        """
        Initialize the agent.

        Args:
            config: Agent configuration
        """
        self.config = config or AgentConfig()
        self.explore_strategy = self.config.get_explore_strategy()

        self.world: Optional[WorldModel] = None
        self.state = AgentState()

    @property
    def has_won(self) -> bool:
        """Whether the agent stands on Home holding the treasure."""
        if self.world is None:
            return False
        return self.world.inventory.has_treasure and self.world.at_home

    # ==================== Turn handling ====================

    def observe(self, view: View) -> None:
        """Merge a view into the world model, creating it on the first turn."""
        if self.world is None:
            self.world = WorldModel.create(view, home_pos=self.config.home_pos, view_dist=self.config.view_dist)
            logger.info(f"World model created, home at {self.world.home}")
        else:
            self.world.update_view(view)

        if not self.state.treasure_seen and self.world.contains(Tile.TREASURE):
            self.state.treasure_seen = True
            logger.info(f"Treasure spotted at {self.world.find_tiles(Tile.TREASURE)}")

    def get_action(self, view: View) -> Action:
        """
        Decide this turn's action.

        Args:
            view: View received this turn

        Returns:
            The action to send; it has already been applied to the model
        """
        self.observe(view)
        self.state.turn += 1

        if self.state.plan and self.state.plan_kind in COMMITTED_PLANS:
            action = self.state.plan.pop(0)
        else:
            action = self._replan()

        self._commit(action)

        if self.config.log_map_every and self.state.turn % self.config.log_map_every == 0:
            logger.debug(f"Turn {self.state.turn} map:\n{self.world.to_ascii()}")

        return action

    def _search(self, goal: Goal) -> PathResult:
        """Run the search engine for one goal and record statistics."""
        result = search(
            self.world,
            goal,
            max_depth=self.config.search_depth_cap,
            max_nodes=self.config.max_search_nodes,
        )
        self.state.searches_run += 1
        self.state.search_nodes += result.nodes
        return result

    def _explore(self) -> PathResult:
        """Look for the nearest unexplored terrain with the configured strategy."""
        if self.explore_strategy == ExploreStrategy.BFS:
            result = find_frontier_bfs(self.world, max_nodes=self.config.max_search_nodes)
            self.state.searches_run += 1
            self.state.search_nodes += result.nodes
            return result
        return self._search(Goal.explore())

    def _start_plan(self, kind: PlanKind, result: PathResult) -> Action:
        """Adopt a search result as the current plan and take its first action."""
        self.state.plan = list(result.path)
        self.state.plan_kind = kind
        logger.info(f"Turn {self.state.turn}: {kind.value} plan '{actions_to_string(result.path)}'")
        return self.state.plan.pop(0)

    def _replan(self) -> Action:
        """Search goals in priority order and return the first action found."""
        self.state.plan = []

        result = self._search(Goal.win())
        if result:
            return self._start_plan(PlanKind.WIN, result)

        result = self._explore()
        if result:
            # Only the first step is trusted; the next view may move the frontier
            self.state.plan_kind = PlanKind.EXPLORE
            logger.debug(f"Turn {self.state.turn}: exploring via '{actions_to_string(result.path)}'")
            return result.path[0]

        for depth in range(self.config.depth_fallback_max, 0, -1):
            result = self._search(Goal.depth_limited(depth))
            if result:
                return self._start_plan(PlanKind.DEPTH, result)

        self.state.plan_kind = PlanKind.IDLE
        self.state.idle_turns += 1
        logger.warning(f"Turn {self.state.turn}: no goal reachable, turning in place")
        return Action.TURN_LEFT

    def _commit(self, action: Action) -> None:
        """Apply the chosen action to the live model."""
        delta = apply_action(self.world, action)
        self.state.last_action = action

        if not delta.legal:
            self.state.illegal_moves += 1
            self.state.plan = []
            logger.error(f"Turn {self.state.turn}: illegal action '{action.value}', plan dropped")
        elif delta.inventory_changed:
            logger.info(f"Turn {self.state.turn}: inventory now {self.world.inventory.summary()}")

    # ==================== Game loop ====================

    def run(self, connection: GameConnection) -> AgentResult:
        """
        Play until the game engine closes the connection.

        Args:
            connection: Open connection to the game engine

        Returns:
            AgentResult with the game outcome
        """
        self.state.running = True
        result = AgentResult(started_at=datetime.now())
        logger.info("Game started")

        try:
            while self.state.running:
                if self.config.max_turns and self.state.turn >= self.config.max_turns:
                    result.end_reason = "max_turns"
                    break

                view = connection.read_view()
                action = self.get_action(view)
                connection.send_action(action)
        except ConnectionClosed as e:
            logger.info(f"Game engine closed the connection: {e}")
            result.end_reason = "connection_closed"
        except TransportError as e:
            logger.error(f"Transport failure: {e}")
            result.end_reason = "transport_error"
            result.errors.append(str(e))

        self.state.running = False
        result.ended_at = datetime.now()
        result.turns = self.state.turn
        result.won = self.has_won
        result.has_treasure = bool(self.world and self.world.inventory.has_treasure)
        result.illegal_moves = self.state.illegal_moves

        logger.info(
            f"Game ended ({result.end_reason}) after {result.turns} turns, "
            f"won={result.won}, searches={self.state.searches_run}, nodes={self.state.search_nodes}"
        )
        return result
