"""
Tile codes and view windows.

The game engine describes everything on the map with a single character.
This module maps those characters to Tile values and parses the
agent-relative view window received every turn.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence


class UnknownTileError(ValueError):
    """Raised when the game sends a character that is not a tile code."""


class Tile(Enum):
    """Terrain or item occupying one grid cell, keyed by its game character."""

    UNKNOWN = "?"
    HOME = "H"
    LAND = " "
    USED_STONE = "O"
    WATER = "~"
    TREE = "T"
    DOOR = "-"
    WALL = "*"
    AXE = "a"
    KEY = "k"
    STONE = "o"
    TREASURE = "$"

    @classmethod
    def from_char(cls, char: str) -> "Tile":
        """Parse a tile character."""
        try:
            return cls(char)
        except ValueError:
            raise UnknownTileError(f"Unknown tile character {char!r}") from None

    @property
    def code(self) -> int:
        """Byte value stored in the world grid."""
        return ord(self.value)


# Tiles that are walked onto without any extra action or resource
OPEN_TILES = frozenset({Tile.HOME, Tile.LAND, Tile.USED_STONE})

# Tiles holding an item that is picked up by walking onto it
ITEM_TILES = frozenset({Tile.AXE, Tile.KEY, Tile.STONE, Tile.TREASURE})

# Tiles that block movement until removed (or always, for walls)
OBSTACLE_TILES = frozenset({Tile.TREE, Tile.DOOR, Tile.WALL})

# Tiles whose traversal consumes a resource or unlocks further cells
RESOURCE_TILES = frozenset({
    Tile.KEY,
    Tile.WATER,
    Tile.TREE,
    Tile.DOOR,
    Tile.AXE,
    Tile.STONE,
    Tile.TREASURE,
})

_TILE_BY_CODE = {tile.code: tile for tile in Tile}


def tile_from_code(code: int) -> Tile:
    """Look up the tile stored as a grid byte."""
    return _TILE_BY_CODE[int(code)]


def is_water(tile: Tile) -> bool:
    """Water is the only tile that needs a raft or stone to enter."""
    return tile == Tile.WATER


def is_resource_tile(tile: Tile) -> bool:
    """Check if crossing this tile changes inventory or permissibility."""
    return tile in RESOURCE_TILES


@dataclass
class View:
    """
    The agent-relative window observed in one turn.

    Row 0 is the row farthest ahead of the agent, column 0 is the
    leftmost column. The centre cell is the agent itself and holds None.
    """

    rows: list[list[Optional[Tile]]]

    @property
    def size(self) -> int:
        """Side length of the window."""
        return len(self.rows)

    @property
    def radius(self) -> int:
        """How many cells the agent sees in each direction."""
        return self.size // 2

    @classmethod
    def from_chars(cls, chars: str, radius: int = 2) -> "View":
        """
        Build a view from the raw character stream of one turn.

        The stream lists the window row by row with the centre omitted.
        """
        side = 2 * radius + 1
        expected = side * side - 1
        if len(chars) != expected:
            raise ValueError(f"Expected {expected} view characters, got {len(chars)}")

        tiles = iter(Tile.from_char(c) for c in chars)
        rows: list[list[Optional[Tile]]] = []
        for i in range(side):
            row: list[Optional[Tile]] = []
            for j in range(side):
                if i == radius and j == radius:
                    row.append(None)
                else:
                    row.append(next(tiles))
            rows.append(row)
        return cls(rows)

    @classmethod
    def from_rows(cls, lines: Sequence[str]) -> "View":
        """
        Build a view from full rows of text.

        The centre character is ignored, so any placeholder such as '^'
        may be used for the agent.
        """
        side = len(lines)
        if side % 2 == 0 or any(len(line) != side for line in lines):
            raise ValueError("View rows must form a square of odd side")

        radius = side // 2
        rows: list[list[Optional[Tile]]] = []
        for i, line in enumerate(lines):
            row: list[Optional[Tile]] = []
            for j, char in enumerate(line):
                if i == radius and j == radius:
                    row.append(None)
                else:
                    row.append(Tile.from_char(char))
            rows.append(row)
        return cls(rows)

    def cells(self) -> Iterator[tuple[int, int, Tile]]:
        """Yield (row, column, tile) for every cell except the centre."""
        for i, row in enumerate(self.rows):
            for j, tile in enumerate(row):
                if tile is not None:
                    yield i, j, tile

    def to_ascii(self) -> str:
        """Render the window with the agent shown as '^'."""
        return "\n".join(
            "".join("^" if tile is None else tile.value for tile in row)
            for row in self.rows
        )
