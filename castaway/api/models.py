"""
Data models for the castaway agent.

These dataclasses represent the agent's pose, inventory and actions in a
structured, type-safe way shared by the world model, the action executor
and the search engine.
"""

from dataclasses import dataclass
from enum import Enum


class Direction(Enum):
    """Facing directions, cyclic in the order up, left, down, right."""

    UP = "up"
    LEFT = "left"
    DOWN = "down"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        """Get (dx, dy) for this direction. Y grows downwards."""
        deltas = {
            Direction.UP: (0, -1),
            Direction.LEFT: (-1, 0),
            Direction.DOWN: (0, 1),
            Direction.RIGHT: (1, 0),
        }
        return deltas[self]

    def turn_right(self) -> "Direction":
        """Direction after a quarter turn clockwise."""
        return _CYCLE[(_CYCLE.index(self) - 1) % 4]

    def turn_left(self) -> "Direction":
        """Direction after a quarter turn anticlockwise."""
        return _CYCLE[(_CYCLE.index(self) + 1) % 4]

    @property
    def opposite(self) -> "Direction":
        """Direction after a half turn."""
        return _CYCLE[(_CYCLE.index(self) + 2) % 4]

    def relative_order(self) -> tuple["Direction", "Direction", "Direction", "Direction"]:
        """Forward, right, left and backward as seen while facing this way."""
        return (self, self.turn_right(), self.turn_left(), self.opposite)


# Anticlockwise order; turning left steps forwards through it
_CYCLE = (Direction.UP, Direction.LEFT, Direction.DOWN, Direction.RIGHT)


class Action(Enum):
    """Single-character actions understood by the game engine."""

    FORWARD = "f"
    TURN_LEFT = "l"
    TURN_RIGHT = "r"
    CHOP = "c"
    UNLOCK = "u"

    @classmethod
    def from_char(cls, char: str) -> "Action":
        """Parse an action code, raising ValueError for unknown codes."""
        return cls(char)


def turn_actions(facing: Direction, heading: Direction) -> list[Action]:
    """
    Get the turns needed to face `heading` when currently facing `facing`.

    A half turn is always taken to the right, matching the game's
    reference agent.
    """
    if heading == facing:
        return []
    if heading == facing.turn_right():
        return [Action.TURN_RIGHT]
    if heading == facing.turn_left():
        return [Action.TURN_LEFT]
    return [Action.TURN_RIGHT, Action.TURN_RIGHT]


def actions_to_string(actions: list[Action]) -> str:
    """Render an action list as the characters sent to the game."""
    return "".join(action.value for action in actions)


@dataclass(frozen=True, order=True)
class Position:
    """An absolute position on the grid."""

    x: int
    y: int

    def move(self, direction: Direction, amount: int = 1) -> "Position":
        """Get position after moving `amount` steps in a direction."""
        dx, dy = direction.delta
        return Position(self.x + dx * amount, self.y + dy * amount)


@dataclass
class Pose:
    """Where the agent is and which way it faces."""

    position: Position
    facing: Direction = Direction.UP

    @property
    def ahead(self) -> Position:
        """The cell directly in front of the agent."""
        return self.position.move(self.facing)


@dataclass
class Inventory:
    """Items carried by the agent."""

    has_axe: bool = False
    has_key: bool = False
    has_raft: bool = False
    stones: int = 0
    has_treasure: bool = False

    @property
    def has_stone(self) -> bool:
        """Whether a stone is available to drop into water."""
        return self.stones > 0

    @property
    def can_cross_water(self) -> bool:
        """Whether the agent can step from land into water."""
        return self.has_raft or self.has_stone

    def summary(self) -> str:
        """Short human-readable description for log lines."""
        items = []
        if self.has_axe:
            items.append("axe")
        if self.has_key:
            items.append("key")
        if self.has_raft:
            items.append("raft")
        if self.stones:
            items.append(f"stones={self.stones}")
        if self.has_treasure:
            items.append("treasure")
        return ", ".join(items) if items else "empty"
