"""
Flood fill of boundary tiles.

The boundary tiles of a polygon are painted into a dense grid covering
their bounding box. A seed cell inside the polygon is located with an
even-odd crossing count, the interior is recovered with an iterative
4-connected fill, and a final pass closes one-cell gaps that the fill
cannot reach through diagonal boundary steps.

The grid is a list of columns (``grid[x][y]``) holding:
- BACKGROUND (0): not yet covered
- BOUNDARY (1): boundary tile, also used for filled cells
"""

from __future__ import annotations

import logging
from collections import deque
from typing import List, Optional, Tuple

from .buckets import RowBuckets

logger = logging.getLogger(__name__)

BACKGROUND = 0
BOUNDARY = 1
FILLED = BOUNDARY

Grid = List[bytearray]


class FloodFill:
    """
    Flood fill over a dense grid of boundary cells.

    The grid is modified in place.
    """

    def __init__(self, grid: Grid, origin: Tuple[int, int] = (0, 0)):
        """
        Args:
            grid: Columns of cells, ``grid[x][y]``; must be non-empty and
                rectangular
            origin: Tile (x, y) index of ``grid[0][0]``
        """
        if not grid or not grid[0]:
            raise ValueError("Flood fill grid must not be empty")
        self.grid = grid
        self.width = len(grid)
        self.height = len(grid[0])
        self.origin = origin
        self.seed: Optional[Tuple[int, int]] = self._find_seed()

    @classmethod
    def from_buckets(cls, buckets: RowBuckets) -> FloodFill:
        """Paint the cells of ``buckets`` as boundary into a fresh grid."""
        min_x, max_x, min_y, max_y = buckets.bounds()
        width = max_x - min_x + 1
        height = max_y - min_y + 1
        grid = [bytearray(height) for _ in range(width)]
        for x, y in buckets.cells():
            grid[x - min_x][y - min_y] = BOUNDARY
        return cls(grid, origin=(min_x, min_y))

    def _find_seed(self) -> Optional[Tuple[int, int]]:
        """
        Locate a background cell inside the boundary.

        The middle column is walked up past the leading background and the
        first boundary run, then row by row until the number of cells right
        of the column that switch from background to boundary is odd. That
        cell is used if its background region does not touch the grid edge;
        otherwise the first enclosed background cell is used, scanning the
        middle column first and then the remaining columns bottom-up.
        """
        candidate = self._parity_seed()
        if candidate is not None:
            _, enclosed = self._background_region(*candidate)
            if enclosed:
                return candidate

        middle = int(0.5 * self.width)
        columns = [middle] + [x for x in range(self.width) if x != middle]
        outside = set()
        for x in columns:
            column = self.grid[x]
            for y in range(self.height):
                if column[y] != BACKGROUND or (x, y) in outside:
                    continue
                region, enclosed = self._background_region(x, y)
                if enclosed:
                    return x, y
                outside.update(region)
        return None

    def _parity_seed(self) -> Optional[Tuple[int, int]]:
        grid = self.grid
        x = int(0.5 * self.width)
        column = grid[x]
        y = 0
        while y < self.height and column[y] == BACKGROUND:
            y += 1
        while y < self.height and column[y] == BOUNDARY:
            y += 1
        while y < self.height:
            crossings = 0
            for cx in range(x, self.width):
                if grid[cx][y - 1] != grid[cx][y]:
                    crossings += grid[cx][y]
            if crossings % 2 == 1:
                if column[y] == BACKGROUND:
                    return x, y
                return None
            y += 1
        return None

    def _background_region(self, x: int, y: int) -> Tuple[List[Tuple[int, int]], bool]:
        """
        Collect the 4-connected background region around (x, y).

        Returns:
            Tuple of (cells, enclosed) where enclosed is False if the region
            reaches the edge of the grid
        """
        grid = self.grid
        last_x = self.width - 1
        last_y = self.height - 1
        seen = {(x, y)}
        cells = []
        enclosed = True
        queue = deque([(x, y)])
        while queue:
            cx, cy = queue.popleft()
            cells.append((cx, cy))
            if cx == 0 or cy == 0 or cx == last_x or cy == last_y:
                enclosed = False
            for nx, ny in ((cx + 1, cy), (cx, cy + 1), (cx - 1, cy), (cx, cy - 1)):
                if 0 <= nx <= last_x and 0 <= ny <= last_y and (nx, ny) not in seen \
                        and grid[nx][ny] == BACKGROUND:
                    seen.add((nx, ny))
                    queue.append((nx, ny))
        return cells, enclosed

    def fill(self) -> int:
        """
        Fill background cells 4-connected to the seed.

        Returns:
            Number of cells filled
        """
        if self.seed is None:
            logger.warning("No interior seed found in %dx%d grid, nothing filled",
                           self.width, self.height)
            return 0

        grid = self.grid
        filled = 0
        queue = deque([self.seed])
        while queue:
            x, y = queue.popleft()
            if x < 0 or y < 0 or x >= self.width or y >= self.height:
                continue
            if grid[x][y] == BACKGROUND:
                grid[x][y] = FILLED
                filled += 1
                queue.append((x + 1, y))
                queue.append((x, y + 1))
                queue.append((x - 1, y))
                queue.append((x, y - 1))
        return filled

    def fill_holes(self) -> int:
        """
        Close gaps left over by the flood fill.

        First, runs of background cells along x whose neighbors in the rows
        above and below are covered are filled; then the same is done along
        y with the neighbors in the columns left and right.

        Returns:
            Number of cells filled
        """
        return self._fill_runs_along_x() + self._fill_runs_along_y()

    def _fill_runs_along_x(self) -> int:
        grid = self.grid
        repaired = 0
        start = stop = -1
        for y in range(1, self.height - 1):
            in_run = False
            ended = False
            for x in range(1, self.width - 1):
                if grid[x][y - 1] != BACKGROUND and grid[x][y + 1] != BACKGROUND:
                    if grid[x][y] == BACKGROUND and grid[x - 1][y] != BACKGROUND:
                        start = x
                        in_run = True
                    elif in_run and grid[x][y] == BACKGROUND:
                        pass
                    elif in_run and grid[x][y] != BACKGROUND:
                        stop = x
                        ended = True
                elif (in_run
                      and (grid[x][y + 1] != BACKGROUND or grid[x][y - 1] != BACKGROUND)
                      and grid[x][y] != BACKGROUND):
                    stop = x
                    ended = True
                else:
                    in_run = False
                    ended = False
                if in_run and ended:
                    logger.debug("Filling gap x=%d..%d at y=%d", start, stop - 1, y)
                    for i in range(start, stop):
                        grid[i][y] = FILLED
                    repaired += stop - start
                    in_run = False
                    ended = False
        return repaired

    def _fill_runs_along_y(self) -> int:
        grid = self.grid
        repaired = 0
        start = stop = -1
        for x in range(1, self.width - 1):
            in_run = False
            ended = False
            for y in range(1, self.height - 1):
                if grid[x + 1][y] != BACKGROUND and grid[x - 1][y] != BACKGROUND:
                    if grid[x][y] == BACKGROUND and grid[x][y - 1] != BACKGROUND:
                        start = y
                        in_run = True
                    elif in_run and grid[x][y] == BACKGROUND:
                        pass
                    elif in_run and grid[x][y] != BACKGROUND:
                        stop = y
                        ended = True
                elif (in_run
                      and (grid[x + 1][y] != BACKGROUND or grid[x - 1][y] != BACKGROUND)
                      and grid[x][y] != BACKGROUND):
                    stop = y
                    ended = True
                else:
                    in_run = False
                    ended = False
                if in_run and ended:
                    logger.debug("Filling gap y=%d..%d at x=%d", start, stop - 1, x)
                    for i in range(start, stop):
                        grid[x][i] = FILLED
                    repaired += stop - start
                    in_run = False
                    ended = False
        return repaired

    def to_buckets(self) -> RowBuckets:
        """All covered cells, translated back to tile indices."""
        ox, oy = self.origin
        rows = {}
        for y in range(self.height):
            xs = [x + ox for x in range(self.width) if self.grid[x][y] != BACKGROUND]
            if xs:
                rows[y + oy] = xs
        return RowBuckets(rows)


def fill_buckets(buckets: RowBuckets, fill_holes: bool = True) -> RowBuckets:
    """
    Boundary cells in, boundary plus interior cells out.

    Args:
        buckets: Boundary cells of a closed polygon
        fill_holes: Run the gap repair pass after the flood fill

    Returns:
        New RowBuckets with all covered cells
    """
    ff = FloodFill.from_buckets(buckets)
    ff.fill()
    if fill_holes:
        ff.fill_holes()
    return ff.to_buckets()
