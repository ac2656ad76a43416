"""Tests for tile codes and view parsing."""

import pytest

from castaway.api.tiles import (
    ITEM_TILES,
    OBSTACLE_TILES,
    Tile,
    UnknownTileError,
    View,
    is_resource_tile,
    is_water,
    tile_from_code,
)


class TestTile:
    """Tests for tile characters and classification."""

    def test_from_char(self):
        assert Tile.from_char("~") == Tile.WATER
        assert Tile.from_char(" ") == Tile.LAND
        assert Tile.from_char("$") == Tile.TREASURE

    def test_from_char_rejects_unknown(self):
        """Test that unknown characters raise a ValueError subclass."""
        with pytest.raises(UnknownTileError):
            Tile.from_char("#")
        with pytest.raises(ValueError):
            Tile.from_char("x")

    @pytest.mark.parametrize("tile", list(Tile))
    def test_code_round_trip(self, tile):
        assert tile_from_code(tile.code) == tile

    def test_classification(self):
        assert Tile.KEY in ITEM_TILES
        assert Tile.TREE in OBSTACLE_TILES
        assert Tile.WATER not in OBSTACLE_TILES
        assert is_water(Tile.WATER)
        assert not is_water(Tile.USED_STONE)
        assert is_resource_tile(Tile.DOOR)
        assert not is_resource_tile(Tile.LAND)


class TestView:
    """Tests for view window parsing."""

    def test_from_chars_skips_centre(self):
        """Test that the 24-character stream fills every cell but the centre."""
        chars = "~" * 12 + "$" + "*" * 11
        view = View.from_chars(chars)

        assert view.size == 5
        assert view.radius == 2
        assert view.rows[2][2] is None
        # 13th character lands right of the centre
        assert view.rows[2][3] == Tile.TREASURE
        assert view.rows[2][1] == Tile.WATER

    def test_from_chars_wrong_length(self):
        with pytest.raises(ValueError):
            View.from_chars("~" * 25)

    def test_from_rows(self):
        view = View.from_rows([
            "~~~~~",
            "  T  ",
            "  ^ $",
            " k   ",
            "*****",
        ])
        assert view.rows[1][2] == Tile.TREE
        assert view.rows[2][4] == Tile.TREASURE
        assert view.rows[3][1] == Tile.KEY
        assert view.rows[2][2] is None

    def test_from_rows_requires_odd_square(self):
        with pytest.raises(ValueError):
            View.from_rows(["    ", "    ", "    ", "    "])
        with pytest.raises(ValueError):
            View.from_rows(["   ", "  ", "   "])

    def test_cells_excludes_centre(self):
        view = View.from_chars(" " * 24)
        cells = list(view.cells())
        assert len(cells) == 24
        assert (2, 2) not in [(i, j) for i, j, _ in cells]

    def test_to_ascii(self):
        rows = ["~~~~~", "  T  ", "  ^ $", " k   ", "*****"]
        assert View.from_rows(rows).to_ascii() == "\n".join(rows)
