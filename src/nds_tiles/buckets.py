"""
Row buckets: tile grid indices grouped by row.

Maps a grid row (tile y index) to the sorted tile x indices present in
that row. This is the intermediate form between tile numbers and the
dense grid used for flood filling.
"""

from __future__ import annotations

import bisect
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .tile import number_from_tile_xy, tile_xy_from_number


class RowBuckets:
    """Sorted, duplicate-free x indices per y index."""

    def __init__(self, rows: Optional[Dict[int, List[int]]] = None):
        self._rows: Dict[int, List[int]] = {}
        if rows:
            for y, xs in rows.items():
                self._rows[y] = sorted(set(xs))

    @classmethod
    def from_tile_numbers(cls, level: int, tile_numbers: Iterable[int]) -> RowBuckets:
        """Bucket tile numbers on ``level`` by their grid row."""
        rows: Dict[int, List[int]] = {}
        for number in tile_numbers:
            x, y = tile_xy_from_number(level, number)
            rows.setdefault(y, []).append(x)
        # single bulk sort per row instead of sorting on every insert
        return cls(rows)

    def add(self, x: int, y: int) -> None:
        """Insert (x, y), keeping the row sorted."""
        row = self._rows.setdefault(y, [])
        i = bisect.bisect_left(row, x)
        if i == len(row) or row[i] != x:
            row.insert(i, x)

    def row(self, y: int) -> List[int]:
        return list(self._rows.get(y, []))

    def rows(self) -> Dict[int, List[int]]:
        """Copy of the row mapping."""
        return {y: list(xs) for y, xs in self._rows.items()}

    def bounds(self) -> Tuple[int, int, int, int]:
        """
        Bounding box of all cells.

        Returns:
            Tuple of (min_x, max_x, min_y, max_y)

        Raises:
            ValueError: if the buckets are empty
        """
        rows = [(y, xs) for y, xs in self._rows.items() if xs]
        if not rows:
            raise ValueError("Empty row buckets have no bounds")
        min_x = min(xs[0] for _, xs in rows)
        max_x = max(xs[-1] for _, xs in rows)
        min_y = min(y for y, _ in rows)
        max_y = max(y for y, _ in rows)
        return min_x, max_x, min_y, max_y

    def cells(self) -> Iterator[Tuple[int, int]]:
        """Iterate over (x, y) cells, row by row in ascending order."""
        for y in sorted(self._rows):
            for x in self._rows[y]:
                yield x, y

    def to_tile_numbers(self, level: int) -> List[int]:
        """Translate all cells back to tile numbers on ``level``."""
        return [number_from_tile_xy(level, x, y) for x, y in self.cells()]

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return self.cells()

    def __len__(self) -> int:
        return sum(len(xs) for xs in self._rows.values())

    def __contains__(self, cell: Tuple[int, int]) -> bool:
        x, y = cell
        row = self._rows.get(y)
        if not row:
            return False
        i = bisect.bisect_left(row, x)
        return i < len(row) and row[i] == x

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RowBuckets):
            return NotImplemented
        return set(self.cells()) == set(other.cells())

    def __repr__(self) -> str:
        return f"RowBuckets(rows={len(self._rows)}, cells={len(self)})"
