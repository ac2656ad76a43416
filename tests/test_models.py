"""Tests for pose, direction, action and inventory models."""

import pytest

from castaway.api.models import (
    Action,
    Direction,
    Inventory,
    Pose,
    Position,
    actions_to_string,
    turn_actions,
)


class TestDirection:
    """Tests for Direction turning and deltas."""

    def test_deltas_grow_downwards(self):
        """Test that UP decreases y and RIGHT increases x."""
        assert Direction.UP.delta == (0, -1)
        assert Direction.DOWN.delta == (0, 1)
        assert Direction.LEFT.delta == (-1, 0)
        assert Direction.RIGHT.delta == (1, 0)

    def test_turn_right_is_clockwise(self):
        """Test a full clockwise cycle."""
        assert Direction.UP.turn_right() == Direction.RIGHT
        assert Direction.RIGHT.turn_right() == Direction.DOWN
        assert Direction.DOWN.turn_right() == Direction.LEFT
        assert Direction.LEFT.turn_right() == Direction.UP

    def test_turn_left_is_anticlockwise(self):
        """Test a full anticlockwise cycle."""
        assert Direction.UP.turn_left() == Direction.LEFT
        assert Direction.LEFT.turn_left() == Direction.DOWN
        assert Direction.DOWN.turn_left() == Direction.RIGHT
        assert Direction.RIGHT.turn_left() == Direction.UP

    @pytest.mark.parametrize("direction", list(Direction))
    def test_turns_cancel(self, direction):
        """Test that left then right returns to the same facing."""
        assert direction.turn_left().turn_right() == direction
        assert direction.opposite.opposite == direction

    def test_relative_order(self):
        """Test forward, right, left, back ordering."""
        assert Direction.UP.relative_order() == (
            Direction.UP,
            Direction.RIGHT,
            Direction.LEFT,
            Direction.DOWN,
        )
        assert Direction.RIGHT.relative_order() == (
            Direction.RIGHT,
            Direction.DOWN,
            Direction.UP,
            Direction.LEFT,
        )


class TestTurnActions:
    """Tests for turn planning."""

    def test_no_turn_when_facing_heading(self):
        assert turn_actions(Direction.LEFT, Direction.LEFT) == []

    def test_quarter_turns(self):
        """Test single left and right turns."""
        assert turn_actions(Direction.UP, Direction.RIGHT) == [Action.TURN_RIGHT]
        assert turn_actions(Direction.UP, Direction.LEFT) == [Action.TURN_LEFT]

    def test_half_turn_goes_right_twice(self):
        """Test that turning around always uses two right turns."""
        assert turn_actions(Direction.UP, Direction.DOWN) == [Action.TURN_RIGHT, Action.TURN_RIGHT]
        assert turn_actions(Direction.LEFT, Direction.RIGHT) == [Action.TURN_RIGHT, Action.TURN_RIGHT]


class TestAction:
    """Tests for Action parsing and rendering."""

    def test_from_char(self):
        assert Action.from_char("f") == Action.FORWARD
        assert Action.from_char("u") == Action.UNLOCK

    def test_from_char_rejects_unknown(self):
        with pytest.raises(ValueError):
            Action.from_char("x")

    def test_actions_to_string(self):
        actions = [Action.TURN_RIGHT, Action.CHOP, Action.FORWARD, Action.TURN_LEFT]
        assert actions_to_string(actions) == "rcfl"
        assert actions_to_string([]) == ""


class TestPosition:
    """Tests for Position arithmetic."""

    def test_move(self):
        pos = Position(5, 5)
        assert pos.move(Direction.UP) == Position(5, 4)
        assert pos.move(Direction.RIGHT, 3) == Position(8, 5)
        assert pos.move(Direction.DOWN, -2) == Position(5, 3)

    def test_hashable(self):
        """Test that positions work as dict keys."""
        visited = {Position(1, 2): 3}
        assert visited[Position(1, 2)] == 3

    def test_pose_ahead(self):
        pose = Pose(Position(4, 4), Direction.LEFT)
        assert pose.ahead == Position(3, 4)


class TestInventory:
    """Tests for Inventory helpers."""

    def test_empty_inventory(self):
        inventory = Inventory()
        assert inventory.has_stone is False
        assert inventory.can_cross_water is False
        assert inventory.summary() == "empty"

    def test_stone_or_raft_crosses_water(self):
        assert Inventory(stones=1).can_cross_water is True
        assert Inventory(has_raft=True).can_cross_water is True
        assert Inventory(stones=0, has_axe=True).can_cross_water is False

    def test_summary_lists_items(self):
        inventory = Inventory(has_key=True, stones=2, has_treasure=True)
        assert inventory.summary() == "key, stones=2, treasure"
