"""
Goal-directed search over the world model.

Implements the searches the agent plans with:
- a one-step shortcut when the cell ahead already satisfies the goal
- an iterative-deepening search that sweeps each stretch of fixed
  tiles and inventory breadth-first and branches where a step picks up
  an item, chops, unlocks or launches onto the water
- a breadth-first nearest-frontier search

All searches return a PathResult holding the actions to send to the game
and the reason for success or failure. They never mutate the caller's
model: hypothetical moves are applied to one private copy and undone
through the action executor's deltas.
"""

import logging
from collections import deque
from dataclasses import astuple, dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .actions import Delta, apply_actions, undo_actions
from .models import Action, Direction, Inventory, Pose, Position, actions_to_string, turn_actions
from .tiles import Tile, is_resource_tile, is_water

if TYPE_CHECKING:
    from castaway.memory.world import WorldModel

logger = logging.getLogger(__name__)

# Deepest iteration of the search, in cell moves
SEARCH_DEPTH_CAP = 100

# Absolute expansion order of the breadth-first frontier search
BFS_DIRECTIONS = (Direction.UP, Direction.RIGHT, Direction.LEFT, Direction.DOWN)

# Tiles the breadth-first search may walk on from dry ground
BFS_LAND_TILES = frozenset({
    Tile.HOME,
    Tile.LAND,
    Tile.USED_STONE,
    Tile.AXE,
    Tile.KEY,
    Tile.TREASURE,
})


class GoalKind(Enum):
    """What a search is trying to reach."""
    WIN = "win"
    EXPLORE = "explore"
    DEPTH = "depth"


@dataclass(frozen=True)
class Goal:
    """Termination condition and permissibility rules of one search."""
    kind: GoalKind
    depth: Optional[int] = None

    @classmethod
    def win(cls) -> "Goal":
        """Holding the treasure while standing on Home."""
        return cls(GoalKind.WIN)

    @classmethod
    def explore(cls) -> "Goal":
        """Standing where the view would reveal an unknown cell."""
        return cls(GoalKind.EXPLORE)

    @classmethod
    def depth_limited(cls, depth: int) -> "Goal":
        """Explore's target set, searched no deeper than `depth` moves."""
        if depth < 1:
            raise ValueError(f"Depth goal needs a positive depth, got {depth}")
        return cls(GoalKind.DEPTH, depth)

    @property
    def is_exploring(self) -> bool:
        """Explore and Depth goals share the frontier test and water rule."""
        return self.kind in (GoalKind.EXPLORE, GoalKind.DEPTH)

    def __str__(self) -> str:
        if self.kind == GoalKind.DEPTH:
            return f"depth({self.depth})"
        return self.kind.value


class PathStopReason(Enum):
    """Reasons why a search stopped."""
    SUCCESS = "success"
    NO_PATH_EXISTS = "no_path_exists"
    BUDGET_EXHAUSTED = "budget_exhausted"


@dataclass
class PathResult:
    """Result of a search."""
    path: list[Action]
    reason: PathStopReason
    message: str = ""
    depth: int = 0
    nodes: int = 0

    @property
    def success(self) -> bool:
        """Whether the search succeeded."""
        return self.reason == PathStopReason.SUCCESS

    def __bool__(self) -> bool:
        """Allow `if result:` to check for success."""
        return self.success and len(self.path) > 0

    def __iter__(self):
        """Allow `for action in result:` to iterate the path."""
        return iter(self.path)

    def __len__(self) -> int:
        """Return path length in actions."""
        return len(self.path)

    def __repr__(self) -> str:
        if self.success:
            return f"PathResult(path='{actions_to_string(self.path)}', depth={self.depth}, nodes={self.nodes})"
        return f"PathResult(path=[], reason={self.reason.value}, message='{self.message}')"


# =============================================================================
# Goal and Permissibility Tests
# =============================================================================


def is_permissible(
    world: "WorldModel",
    from_pos: Position,
    to_pos: Position,
    goal: Goal,
) -> bool:
    """
    Check if the agent may step from `from_pos` onto `to_pos`.

    Args:
        world: Model in the state the step would be taken from
        from_pos: Cell the agent stands on
        to_pos: Adjacent cell to enter
        goal: Goal whose relaxations apply

    Returns:
        True if entering the cell is currently legal for this goal
    """
    if not world.in_bounds(to_pos):
        return False

    tile = world.get_tile(to_pos)
    inventory = world.inventory

    if tile in (Tile.UNKNOWN, Tile.WALL):
        return False
    if tile == Tile.TREE and (not inventory.has_axe or goal.kind == GoalKind.EXPLORE):
        return False
    if tile == Tile.DOOR and not inventory.has_key:
        return False
    if tile == Tile.STONE and goal.kind == GoalKind.EXPLORE:
        return False

    from_water = is_water(world.get_tile(from_pos))
    if tile == Tile.WATER and not (from_water or inventory.can_cross_water):
        return False

    # Exploring never leaves or enters the water
    if goal.is_exploring and from_water != is_water(tile):
        return False

    return True


def goal_reached(world: "WorldModel", goal: Goal, pos: Optional[Position] = None) -> bool:
    """Check if standing on `pos` (default: the agent's cell) satisfies the goal."""
    if pos is None:
        pos = world.position
    if goal.kind == GoalKind.WIN:
        return world.inventory.has_treasure and world.get_tile(pos) == Tile.HOME
    return world.has_unknown_near(pos)


def step_actions(facing: Direction, heading: Direction, target_tile: Tile) -> list[Action]:
    """
    Actions that move the agent one cell in direction `heading`.

    Turns come first, then a chop or unlock when the target is a tree or
    a door, then the forward move.
    """
    actions = turn_actions(facing, heading)
    if target_tile == Tile.TREE:
        actions.append(Action.CHOP)
    elif target_tile == Tile.DOOR:
        actions.append(Action.UNLOCK)
    actions.append(Action.FORWARD)
    return actions


def headings_to_actions(facing: Direction, headings: list[Direction]) -> list[Action]:
    """Convert a list of move directions into turn and forward actions."""
    actions: list[Action] = []
    for heading in headings:
        actions.extend(turn_actions(facing, heading))
        actions.append(Action.FORWARD)
        facing = heading
    return actions


def _walk_back(came_from: dict[Position, Direction], start: Position, end: Position) -> list[Direction]:
    """Move directions from `start` to `end`, read back through `came_from`."""
    headings: list[Direction] = []
    pos = end
    while pos != start:
        heading = came_from[pos]
        headings.append(heading)
        pos = pos.move(heading.opposite)
    headings.reverse()
    return headings


def _take_step(world: "WorldModel", heading: Direction) -> Optional[tuple[list[Action], list[Delta]]]:
    """
    Apply the actions for one step on a hypothetical model.

    Returns the actions and their deltas, or None (with the model
    restored) when the move did not happen.
    """
    target = world.position.move(heading)
    actions = step_actions(world.facing, heading, world.get_tile(target))
    deltas = apply_actions(world, actions)
    if world.position != target:
        undo_actions(world, deltas)
        return None
    return actions, deltas


def _one_step(world: "WorldModel", goal: Goal) -> Optional[list[Action]]:
    """Return the single step ahead if it is permissible and reaches the goal."""
    ahead = world.pose.ahead
    if not is_permissible(world, world.position, ahead, goal):
        return None

    step = _take_step(world, world.facing)
    if step is None:
        return None

    actions, deltas = step
    reached = goal_reached(world, goal)
    undo_actions(world, deltas)
    return actions if reached else None


# =============================================================================
# Iterative-Deepening Generation Search
# =============================================================================


@dataclass
class _Crossing:
    """A state-changing step found at the edge of a generation."""
    source: Position
    facing: Direction
    heading: Direction
    remaining: int


def _changes_state(world: "WorldModel", from_pos: Position, to_pos: Position) -> bool:
    """Whether a permissible step from `from_pos` onto `to_pos` alters tiles or inventory."""
    tile = world.get_tile(to_pos)
    if not is_resource_tile(tile):
        return False
    if tile == Tile.WATER:
        # Moving about on the water is free
        return not is_water(world.get_tile(from_pos))
    return True


def _gained(before: Inventory, after: Inventory) -> bool:
    """Whether `after` holds something `before` did not."""
    return (
        after.stones > before.stones
        or (after.has_axe and not before.has_axe)
        or (after.has_key and not before.has_key)
        or (after.has_raft and not before.has_raft)
        or (after.has_treasure and not before.has_treasure)
    )


class _GenerationSearch:
    """
    One depth-limited pass of the search.

    A generation is the part of the search between two state changes.
    Tiles and inventory are fixed inside it, so it is swept breadth-first
    from its entry cell with a plain seen set, expanding neighbours
    forward, right, left, backward relative to the facing on arrival.

    Steps that change the model (pickups, chops, unlocks, launching onto
    the water) are collected as crossings instead of being walked. Once
    the sweep is done each crossing is applied in turn and starts a child
    generation from its cell, with a fresh seen set and the depth left
    after the step; the child is undone before the next crossing.

    A crossing is not searched further when it adds nothing to the
    inventory and opens no cell the generation could not already reach
    or cross into; such a step can only shorten a route. A child is also
    skipped when the same tile changes, inventory and entry cell were
    already searched with at least as much depth left.
    """

    def __init__(self, world: "WorldModel", goal: Goal, limit: int, budget: Optional[int] = None):
        self.world = world
        self.goal = goal
        self.limit = limit
        self.budget = budget
        self.nodes = 0
        self.cutoff = False
        self.out_of_budget = False
        self._searched: dict[tuple, int] = {}

    def run(self) -> Optional[list[Action]]:
        """Search from the model's pose; the model is restored afterwards."""
        return self._generation(self.limit, frozenset())

    def _spend(self) -> bool:
        """Count one step, or flag the budget as gone."""
        if self.budget is not None and self.nodes >= self.budget:
            self.out_of_budget = True
            return False
        self.nodes += 1
        return True

    def _generation(self, remaining: int, changed: frozenset) -> Optional[list[Action]]:
        world = self.world
        entry = replace(world.pose)

        key = (entry.position, changed, astuple(world.inventory))
        if self._searched.get(key, -1) >= remaining:
            return None
        self._searched[key] = remaining

        arrivals: dict[Position, tuple[int, Direction]] = {entry.position: (0, entry.facing)}
        came_from: dict[Position, Direction] = {}
        crossings: dict[Position, _Crossing] = {}
        queue = deque([entry.position])

        while queue:
            pos = queue.popleft()
            dist, facing = arrivals[pos]
            left = remaining - dist - 1

            for heading in facing.relative_order():
                target = pos.move(heading)
                if target in arrivals or not is_permissible(world, pos, target, self.goal):
                    continue

                if _changes_state(world, pos, target):
                    if target not in crossings:
                        crossings[target] = _Crossing(pos, facing, heading, left)
                    continue

                if not self._spend():
                    return None
                arrivals[target] = (dist + 1, heading)
                came_from[target] = heading

                if goal_reached(world, self.goal, target):
                    return headings_to_actions(entry.facing, _walk_back(came_from, entry.position, target))
                if left == 0:
                    self.cutoff = True
                else:
                    queue.append(target)

        try:
            for target in crossings:
                path = self._cross(entry, came_from, arrivals, crossings, target, changed)
                if path is not None or self.out_of_budget:
                    return path
        finally:
            world.pose = entry
        return None

    def _cross(
        self,
        entry: Pose,
        came_from: dict[Position, Direction],
        arrivals: dict[Position, tuple[int, Direction]],
        crossings: dict[Position, _Crossing],
        target: Position,
        changed: frozenset,
    ) -> Optional[list[Action]]:
        """Apply one crossing and search the child generation behind it."""
        world = self.world
        crossing = crossings[target]
        if not self._spend():
            return None

        world.pose = Pose(crossing.source, crossing.facing)
        step = _take_step(world, crossing.heading)
        if step is None:
            return None
        actions, deltas = step

        try:
            if goal_reached(world, self.goal):
                tail: Optional[list[Action]] = []
            elif crossing.remaining == 0:
                self.cutoff = True
                return None
            elif not self._opens_up(target, deltas[0].inventory, arrivals, crossings):
                return None
            else:
                changed = changed | {pos for delta in deltas for pos, _ in delta.tiles}
                tail = self._generation(crossing.remaining, changed)
                if tail is None:
                    return None

            prefix = headings_to_actions(entry.facing, _walk_back(came_from, entry.position, crossing.source))
            return prefix + actions + tail
        finally:
            undo_actions(world, deltas)

    def _opens_up(
        self,
        pos: Position,
        before: Inventory,
        arrivals: dict[Position, tuple[int, Direction]],
        crossings: dict[Position, _Crossing],
    ) -> bool:
        """Whether standing on `pos` gave an item or leads somewhere new."""
        world = self.world
        if _gained(before, world.inventory):
            return True
        for heading in Direction:
            neighbor = pos.move(heading)
            if neighbor in arrivals or neighbor in crossings:
                continue
            if is_permissible(world, pos, neighbor, self.goal):
                return True
        return False


def search(
    world: "WorldModel",
    goal: Goal,
    max_depth: int = SEARCH_DEPTH_CAP,
    max_nodes: Optional[int] = None,
) -> PathResult:
    """
    Find actions that take the agent to a state satisfying `goal`.

    Tries the one-step shortcut first, then runs iterative deepening from
    depth 1 up to `max_depth` (or the goal's own depth for Depth goals).
    The first path found is returned; it is not necessarily the shortest
    in actions.

    Args:
        world: Live model; left unchanged
        goal: Goal to reach
        max_depth: Deepest iteration for Win and Explore goals
        max_nodes: Optional cap on cells examined; None searches every
            depth up to the cap

    Returns:
        PathResult with the action path and reason for success/failure
    """
    cap = goal.depth if goal.kind == GoalKind.DEPTH else max_depth

    if goal.kind == GoalKind.WIN and not world.inventory.has_treasure and not world.contains(Tile.TREASURE):
        return PathResult([], PathStopReason.NO_PATH_EXISTS, "No treasure known")

    hypothetical = world.copy()

    shortcut = _one_step(hypothetical, goal)
    if shortcut:
        logger.debug(f"search[{goal}]: one step ahead '{actions_to_string(shortcut)}'")
        return PathResult(shortcut, PathStopReason.SUCCESS, depth=1, nodes=1)

    nodes = 0
    for limit in range(1, cap + 1):
        budget = None if max_nodes is None else max_nodes - nodes
        sweep = _GenerationSearch(hypothetical, goal, limit, budget)
        path = sweep.run()
        nodes += sweep.nodes

        if path is not None:
            logger.debug(
                f"search[{goal}]: found '{actions_to_string(path)}' "
                f"at depth {limit} after {nodes} nodes"
            )
            return PathResult(path, PathStopReason.SUCCESS, depth=limit, nodes=nodes)

        if sweep.out_of_budget:
            logger.debug(f"search[{goal}]: node limit of {max_nodes} reached at depth {limit}")
            return PathResult(
                [], PathStopReason.BUDGET_EXHAUSTED,
                f"Gave up after {nodes} nodes at depth {limit}", depth=limit, nodes=nodes,
            )

        # Nothing was cut off by the limit, so deeper passes see the same cells
        if not sweep.cutoff:
            break

    logger.debug(f"search[{goal}]: no path after {nodes} nodes")
    return PathResult([], PathStopReason.NO_PATH_EXISTS, f"No path to {goal} goal", nodes=nodes)


# =============================================================================
# Breadth-First Frontier Search
# =============================================================================


def _bfs_permissible(world: "WorldModel", start_tile: Tile, pos: Position) -> bool:
    """Water-bound agents stay on water; others walk plain ground and items."""
    tile = world.get_tile(pos)
    if start_tile == Tile.WATER:
        return tile == Tile.WATER
    return tile in BFS_LAND_TILES


def find_frontier_bfs(world: "WorldModel", max_nodes: Optional[int] = None) -> PathResult:
    """
    Find the nearest cell that would reveal unknown terrain.

    Breadth-first over cells with no resource use: trees, doors and stones
    are never entered and the agent stays on its side of the water.

    Args:
        world: Live model; left unchanged
        max_nodes: Optional cap on cells examined

    Returns:
        PathResult with the action path and reason for success/failure
    """
    start = world.position
    start_tile = world.standing_on

    ahead = world.pose.ahead
    if _bfs_permissible(world, start_tile, ahead) and world.has_unknown_near(ahead):
        return PathResult([Action.FORWARD], PathStopReason.SUCCESS, depth=1, nodes=1)

    came_from: dict[Position, Direction] = {}
    checked = {start}
    queue = deque([start])
    nodes = 0
    found: Optional[Position] = None

    while queue:
        pos = queue.popleft()
        if pos != start:
            if not _bfs_permissible(world, start_tile, pos):
                continue
            if world.has_unknown_near(pos):
                found = pos
                break

        nodes += 1
        if max_nodes is not None and nodes > max_nodes:
            return PathResult([], PathStopReason.BUDGET_EXHAUSTED, f"Gave up after {max_nodes} nodes", nodes=nodes)

        for heading in BFS_DIRECTIONS:
            neighbor = pos.move(heading)
            if neighbor in checked or not world.in_bounds(neighbor):
                continue
            checked.add(neighbor)
            came_from[neighbor] = heading
            queue.append(neighbor)

    if found is None:
        return PathResult([], PathStopReason.NO_PATH_EXISTS, "No frontier reachable", nodes=nodes)

    headings = _walk_back(came_from, start, found)

    actions = headings_to_actions(world.facing, headings)
    logger.debug(f"find_frontier_bfs: frontier {found} via '{actions_to_string(actions)}'")
    return PathResult(actions, PathStopReason.SUCCESS, depth=len(headings), nodes=nodes)
