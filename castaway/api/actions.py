"""
Action execution for the world model.

Applies a single game action to a WorldModel, updating pose, inventory
and tiles the same way the game engine does. Every application returns a
Delta so the change can be undone, which lets the search engine explore
hypothetical moves on one private copy of the model.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .models import Action, Inventory, Pose, Position
from .tiles import ITEM_TILES, OBSTACLE_TILES, OPEN_TILES, Tile

if TYPE_CHECKING:
    from castaway.memory.world import WorldModel

logger = logging.getLogger(__name__)


@dataclass
class Delta:
    """Undo record for one applied action."""

    action: Action
    pose: Pose
    inventory: Inventory
    tiles: list[tuple[Position, Tile]] = field(default_factory=list)
    legal: bool = True
    moved: bool = False
    inventory_changed: bool = False

    @property
    def changed_state(self) -> bool:
        """Whether the action changed a tile or the inventory."""
        return bool(self.tiles) or self.inventory_changed


def _set_tile(world: "WorldModel", delta: Delta, pos: Position, tile: Tile) -> None:
    """Overwrite a tile, remembering the old one in the delta."""
    delta.tiles.append((pos, world.get_tile(pos)))
    world.set_tile(pos, tile)


def _pick_up(world: "WorldModel", tile: Tile) -> None:
    """Add the item lying on `tile` to the inventory."""
    inventory = world.inventory
    if tile == Tile.KEY:
        inventory.has_key = True
    elif tile == Tile.AXE:
        inventory.has_axe = True
    elif tile == Tile.STONE:
        inventory.stones += 1
    elif tile == Tile.TREASURE:
        inventory.has_treasure = True


def _forward(world: "WorldModel", delta: Delta) -> None:
    """Move one cell ahead, handling water, obstacles and items."""
    target = world.pose.ahead
    if not world.in_bounds(target):
        logger.error(f"Move off the grid at {target}")
        delta.legal = False
        return

    tile = world.get_tile(target)
    if tile == Tile.UNKNOWN:
        logger.error(f"Move into unknown tile at {target}")
        delta.legal = False
        return

    if tile in OBSTACLE_TILES:
        logger.warning(f"Move into {tile.name.lower()} at {target} ignored")
        delta.legal = False
        return

    if tile == Tile.WATER:
        # Stones and rafts are only spent when stepping in from dry ground
        if world.standing_on != Tile.WATER:
            if world.inventory.has_stone:
                world.inventory.stones -= 1
                _set_tile(world, delta, target, Tile.USED_STONE)
            elif world.inventory.has_raft:
                world.inventory.has_raft = False
            else:
                logger.warning(f"Entering water at {target} with no stone or raft")
    elif tile in ITEM_TILES:
        _pick_up(world, tile)
        _set_tile(world, delta, target, Tile.LAND)
    elif tile not in OPEN_TILES:
        raise ValueError(f"Unhandled tile {tile!r} at {target}")

    world.pose.position = target


def apply_action(world: "WorldModel", action: Action) -> Delta:
    """
    Apply an action to the world model.

    Illegal forward moves (into unknown cells, trees, doors or walls) are
    logged and leave the model unchanged.

    Args:
        world: Model to mutate
        action: Action to apply

    Returns:
        Delta that undoes the action when passed to undo_action()
    """
    delta = Delta(action=action, pose=replace(world.pose), inventory=replace(world.inventory))

    if action == Action.FORWARD:
        _forward(world, delta)

    elif action == Action.TURN_LEFT:
        world.pose.facing = world.pose.facing.turn_left()

    elif action == Action.TURN_RIGHT:
        world.pose.facing = world.pose.facing.turn_right()

    elif action == Action.CHOP:
        target = world.pose.ahead
        if world.get_tile(target) == Tile.TREE:
            _set_tile(world, delta, target, Tile.LAND)
            world.inventory.has_raft = True

    elif action == Action.UNLOCK:
        target = world.pose.ahead
        if world.get_tile(target) == Tile.DOOR:
            _set_tile(world, delta, target, Tile.LAND)

    delta.moved = world.pose.position != delta.pose.position
    delta.inventory_changed = world.inventory != delta.inventory
    return delta


def undo_action(world: "WorldModel", delta: Delta) -> None:
    """Restore the model to its state before the action in `delta`."""
    for pos, tile in reversed(delta.tiles):
        world.set_tile(pos, tile)
    world.pose = replace(delta.pose)
    world.inventory = replace(delta.inventory)


def apply_actions(world: "WorldModel", actions: list[Action]) -> list[Delta]:
    """Apply a sequence of actions, returning their deltas in order."""
    return [apply_action(world, action) for action in actions]


def undo_actions(world: "WorldModel", deltas: list[Delta]) -> None:
    """Undo a sequence of deltas returned by apply_actions()."""
    for delta in reversed(deltas):
        undo_action(world, delta)
