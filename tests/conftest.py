"""Shared fixtures: ASCII-map worlds and a small in-process game engine."""

import logging
from typing import Optional

import pytest

from castaway.api.actions import apply_action
from castaway.api.models import Action, Direction, Position
from castaway.api.tiles import Tile, View
from castaway.memory.world import WorldModel

# Agent markers usable in test maps, standing on land
AGENT_MARKERS = {
    "^": Direction.UP,
    ">": Direction.RIGHT,
    "v": Direction.DOWN,
    "<": Direction.LEFT,
}


def make_world(
    lines: list[str],
    facing: Direction = Direction.UP,
    home_pos: int = 20,
    **inventory,
) -> WorldModel:
    """
    Build a world model from an ASCII map.

    'H' is placed on the grid centre. '.' is an alias for land so maps
    stay readable. An agent marker (^ > v <) puts the agent on that cell
    with that facing; without one the agent stands on H facing `facing`.
    Cells outside the map stay unknown.
    """
    world = WorldModel(home_pos=home_pos)

    home_row = next(r for r, line in enumerate(lines) if "H" in line)
    home_col = lines[home_row].index("H")

    agent: Optional[tuple[Position, Direction]] = None
    for r, line in enumerate(lines):
        for c, char in enumerate(line):
            pos = Position(world.home.x + c - home_col, world.home.y + r - home_row)
            if char in AGENT_MARKERS:
                agent = (pos, AGENT_MARKERS[char])
                world.set_tile(pos, Tile.LAND)
            elif char == ".":
                world.set_tile(pos, Tile.LAND)
            else:
                world.set_tile(pos, Tile.from_char(char))

    if agent:
        world.pose.position, world.pose.facing = agent
    else:
        world.pose.facing = facing

    for name, value in inventory.items():
        setattr(world.inventory, name, value)
    return world


class GameSimulator:
    """
    Plays the game engine's part against a fully known map.

    Views are cut from the true map around the agent; cells outside the
    map are shown as walls.
    """

    def __init__(self, lines: list[str]):
        self.truth = make_world(lines)

    def view(self) -> View:
        radius = self.truth.view_dist
        side = 2 * radius + 1
        rows: list[list[Optional[Tile]]] = []
        for i in range(side):
            row: list[Optional[Tile]] = []
            for j in range(side):
                if i == radius and j == radius:
                    row.append(None)
                    continue
                tile = self.truth.get_tile(self.truth.view_to_world(i, j))
                row.append(Tile.WALL if tile == Tile.UNKNOWN else tile)
            rows.append(row)
        return View(rows)

    def step(self, action: Action) -> None:
        apply_action(self.truth, action)

    @property
    def won(self) -> bool:
        return self.truth.inventory.has_treasure and self.truth.at_home


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo setup_logging() calls made by a test."""
    root = logging.getLogger()
    level = root.level
    yield
    # pytest's capture handlers are subclasses and are left alone
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def world_from_map():
    """Factory fixture building a WorldModel from an ASCII map."""
    return make_world


@pytest.fixture
def simulator():
    """Factory fixture building a GameSimulator from an ASCII map."""
    return GameSimulator


@pytest.fixture
def open_view() -> View:
    """A view of plain land all around the agent."""
    return View.from_rows(["     ", "     ", "  ^  ", "     ", "     "])


@pytest.fixture
def blind_view() -> View:
    """A view that reveals nothing (every cell unknown)."""
    return View.from_rows(["?????", "?????", "??^??", "?????", "?????"])
