"""Tests for row buckets."""

import pytest
from nds_tiles.buckets import RowBuckets
from nds_tiles.tile import NdsTile


class TestRowBuckets:
    """Tests for RowBuckets."""

    def test_sorted_and_unique(self):
        buckets = RowBuckets({3: [5, 1, 5, 2]})
        assert buckets.row(3) == [1, 2, 5]
        assert len(buckets) == 3

    def test_missing_row(self):
        assert RowBuckets().row(7) == []

    def test_add(self):
        buckets = RowBuckets()
        buckets.add(4, 1)
        buckets.add(2, 1)
        buckets.add(4, 1)
        buckets.add(0, 0)
        assert buckets.rows() == {1: [2, 4], 0: [0]}
        assert len(buckets) == 3

    def test_contains(self):
        buckets = RowBuckets({0: [1, 3]})
        assert (1, 0) in buckets
        assert (3, 0) in buckets
        assert (2, 0) not in buckets
        assert (1, 1) not in buckets

    def test_bounds(self):
        buckets = RowBuckets({2: [4, 7], 5: [1], 3: [9]})
        assert buckets.bounds() == (1, 9, 2, 5)

    def test_bounds_empty(self):
        with pytest.raises(ValueError):
            RowBuckets().bounds()

    def test_cells_row_order(self):
        buckets = RowBuckets({1: [3, 0], 0: [2]})
        assert list(buckets.cells()) == [(2, 0), (0, 1), (3, 1)]
        assert list(buckets) == list(buckets.cells())

    def test_rows_is_a_copy(self):
        buckets = RowBuckets({0: [1]})
        buckets.rows()[0].append(2)
        assert buckets.row(0) == [1]

    def test_equality(self):
        assert RowBuckets({0: [1, 2]}) == RowBuckets({0: [2, 1, 1]})
        assert RowBuckets({0: [1]}) != RowBuckets({1: [1]})


class TestTileNumbers:
    """Tests for conversion from and to tile numbers."""

    def test_from_tile_numbers(self):
        level = 4
        tiles = [NdsTile.from_xy(level, x, y) for x, y in [(3, 2), (1, 2), (3, 2), (5, 7)]]
        buckets = RowBuckets.from_tile_numbers(level, [t.tile_number for t in tiles])
        assert buckets.rows() == {2: [1, 3], 7: [5]}

    def test_round_trip(self):
        level = 6
        numbers = list(range(0, 8192, 37))
        buckets = RowBuckets.from_tile_numbers(level, numbers)
        assert sorted(buckets.to_tile_numbers(level)) == numbers
