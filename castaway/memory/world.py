"""
World model for tracking the explored map.

Maintains a fixed-size grid of tiles centred on the agent's starting
position, together with the agent's pose and inventory. Partial views are
merged in every turn; known tiles are never overwritten.
"""

import logging
from dataclasses import replace
from typing import Optional

import numpy as np

from castaway.api.models import Direction, Inventory, Pose, Position
from castaway.api.tiles import Tile, View, tile_from_code

logger = logging.getLogger(__name__)

# Home is the centre of the grid; game maps are at most 80 cells across
HOME_POS = 80
VIEW_DIST = 2

_UNKNOWN = Tile.UNKNOWN.code

_AGENT_CHARS = {
    Direction.UP: "^",
    Direction.RIGHT: ">",
    Direction.DOWN: "v",
    Direction.LEFT: "<",
}


class WorldModel:
    """
    The agent's persistent picture of the world.

    Holds the tile grid, the agent pose and the inventory. The grid is a
    square numpy array of tile codes with side 2 * home_pos + 1; the agent
    starts at its centre, on the Home tile, facing up.

    Example usage:
        world = WorldModel.create(first_view)

        # Each later turn
        world.update_view(view)
        tile = world.get_tile(world.pose.ahead)
    """

    def __init__(self, home_pos: int = HOME_POS, view_dist: int = VIEW_DIST):
        """
        Initialize an unexplored world.

        Args:
            home_pos: Grid coordinate of home on both axes
            view_dist: Radius of the view window
        """
        self.home_pos = home_pos
        self.view_dist = view_dist
        self.size = 2 * home_pos + 1

        self._grid = np.full((self.size, self.size), _UNKNOWN, dtype=np.uint8)

        self.home = Position(home_pos, home_pos)
        self._grid[self.home.y, self.home.x] = Tile.HOME.code

        self.pose = Pose(self.home, Direction.UP)
        self.inventory = Inventory()

    @classmethod
    def create(
        cls,
        initial_view: View,
        home_pos: int = HOME_POS,
        view_dist: Optional[int] = None,
    ) -> "WorldModel":
        """
        Create the world model from the first view of the game.

        Args:
            initial_view: View received before the first action
            home_pos: Grid coordinate of home on both axes
            view_dist: Radius of the view window (defaults to the view's own)

        Returns:
            World model with the initial view merged in
        """
        world = cls(home_pos=home_pos, view_dist=view_dist or initial_view.radius)
        world.update_view(initial_view)
        world._grid[world.home.y, world.home.x] = Tile.HOME.code
        return world

    # ==================== Tile access ====================

    def in_bounds(self, pos: Position) -> bool:
        """Check if a position lies on the grid."""
        return 0 <= pos.x < self.size and 0 <= pos.y < self.size

    def get_tile(self, pos: Position) -> Tile:
        """Get the tile at a position. Cells off the grid read as walls."""
        if not self.in_bounds(pos):
            return Tile.WALL
        return tile_from_code(self._grid[pos.y, pos.x])

    def set_tile(self, pos: Position, tile: Tile) -> None:
        """Set the tile at a position. Off-grid writes are ignored."""
        if self.in_bounds(pos):
            self._grid[pos.y, pos.x] = tile.code

    def is_unknown(self, pos: Position) -> bool:
        """Check if a cell has not been observed yet."""
        return self.in_bounds(pos) and self._grid[pos.y, pos.x] == _UNKNOWN

    @property
    def position(self) -> Position:
        """Current agent position."""
        return self.pose.position

    @property
    def facing(self) -> Direction:
        """Current agent facing."""
        return self.pose.facing

    @property
    def tile_ahead(self) -> Tile:
        """Tile directly in front of the agent."""
        return self.get_tile(self.pose.ahead)

    @property
    def standing_on(self) -> Tile:
        """Tile under the agent."""
        return self.get_tile(self.pose.position)

    @property
    def at_home(self) -> bool:
        """Whether the agent stands on the Home tile."""
        return self.pose.position == self.home

    # ==================== View integration ====================

    def view_to_world(self, row: int, col: int, radius: Optional[int] = None) -> Position:
        """
        Map a view cell to its absolute grid position.

        Row 0 of the view is farthest ahead of the agent; column 0 is to
        its left.
        """
        if radius is None:
            radius = self.view_dist
        facing = self.pose.facing
        pos = self.pose.position.move(facing, radius - row)
        return pos.move(facing.turn_right(), col - radius)

    def update_view(self, view: View) -> int:
        """
        Merge a newly observed view into the grid.

        Only unknown cells are written; tiles already known are kept
        as they are.

        Args:
            view: Agent-relative window for this turn

        Returns:
            Number of cells revealed by this view
        """
        revealed = 0
        radius = view.radius
        for row, col, tile in view.cells():
            if tile == Tile.UNKNOWN:
                continue
            pos = self.view_to_world(row, col, radius)
            if self.is_unknown(pos):
                self._grid[pos.y, pos.x] = tile.code
                revealed += 1

        if revealed:
            logger.debug(f"update_view: revealed {revealed} tiles around {self.pose.position}")
        return revealed

    def has_unknown_near(self, pos: Position, radius: Optional[int] = None) -> bool:
        """
        Check if standing at `pos` would reveal new terrain.

        True when the square window of the given radius (the view radius
        by default) around `pos` holds at least one unknown cell.
        """
        if radius is None:
            radius = self.view_dist
        y0 = max(pos.y - radius, 0)
        x0 = max(pos.x - radius, 0)
        window = self._grid[y0:pos.y + radius + 1, x0:pos.x + radius + 1]
        return bool((window == _UNKNOWN).any())

    def contains(self, tile: Tile) -> bool:
        """Check if any known cell holds the given tile."""
        return bool((self._grid == tile.code).any())

    def find_tiles(self, tile: Tile) -> list[Position]:
        """Positions of every cell holding the given tile."""
        ys, xs = np.nonzero(self._grid == tile.code)
        return [Position(int(x), int(y)) for x, y in zip(xs, ys)]

    def count_unknown(self) -> int:
        """Number of cells not yet observed."""
        return int((self._grid == _UNKNOWN).sum())

    # ==================== Copies and rendering ====================

    def copy(self) -> "WorldModel":
        """Deep copy for hypothetical lookahead; shares nothing with self."""
        clone = WorldModel.__new__(WorldModel)
        clone.home_pos = self.home_pos
        clone.view_dist = self.view_dist
        clone.size = self.size
        clone._grid = self._grid.copy()
        clone.home = self.home
        clone.pose = replace(self.pose)
        clone.inventory = replace(self.inventory)
        return clone

    def grid_equals(self, other: "WorldModel") -> bool:
        """Check if two models hold identical grids."""
        return bool(np.array_equal(self._grid, other._grid))

    def known_bounds(self) -> tuple[Position, Position]:
        """Top-left and bottom-right corners of the observed area."""
        ys, xs = np.nonzero(self._grid != _UNKNOWN)
        return Position(int(xs.min()), int(ys.min())), Position(int(xs.max()), int(ys.max()))

    def to_ascii(self) -> str:
        """
        Render the observed part of the map as ASCII art.

        The agent is drawn as ^, >, v or < depending on its facing.

        Returns:
            ASCII representation of the known map
        """
        top_left, bottom_right = self.known_bounds()
        lines = []
        for y in range(top_left.y, bottom_right.y + 1):
            line = []
            for x in range(top_left.x, bottom_right.x + 1):
                if (x, y) == (self.pose.position.x, self.pose.position.y):
                    line.append(_AGENT_CHARS[self.pose.facing])
                else:
                    line.append(chr(self._grid[y, x]))
            lines.append("".join(line))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"WorldModel(pos=({self.position.x}, {self.position.y}), "
            f"facing={self.facing.value}, inventory={self.inventory.summary()})"
        )
