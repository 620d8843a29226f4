"""
Polygon rasterization onto the tiles of one level.

Pipeline:
1. Refine the polygon edges so that no segment spans more than a fraction
   of a tile width on the target level.
2. Map every refined vertex to its tile; these are the boundary tiles.
3. Bucket the boundary tiles by grid row.
4. Flood fill the interior from a seed found inside the boundary.
5. Repair one-cell gaps the flood fill could not reach.
6. Translate all covered cells back to tile numbers.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .buckets import RowBuckets
from .coordinates import NdsCoordinate
from .errors import InvalidPolygonError
from .floodfill import FloodFill
from .master import Point, as_lon_lat
from .tile import NdsTile, check_level, tile_number_for, tile_size_degrees

logger = logging.getLogger(__name__)

ADAPTIVE = -1
"""Sample count requesting adaptive edge refinement."""

DEFAULT_EDGE_FRACTION = 0.4


@dataclass
class RasterizerConfig:
    """Configuration for the polygon rasterizer."""

    level: int
    """Target tile level (0..15)."""

    num_samples: int = ADAPTIVE
    """Points inserted per edge: ADAPTIVE (-1), 0 to disable, or a fixed count."""

    edge_fraction: float = DEFAULT_EDGE_FRACTION
    """Largest refined segment length as a fraction of the tile width."""

    fill_holes: bool = True
    """Run the gap repair pass after the flood fill."""

    def __post_init__(self):
        check_level(self.level)
        if self.num_samples < ADAPTIVE:
            raise ValueError("num_samples must be ADAPTIVE (-1), 0, or positive")
        if not self.edge_fraction > 0:
            raise ValueError("edge_fraction must be positive")


@dataclass
class RasterStats:
    """Statistics collected during one rasterization."""

    input_vertices: int = 0
    refined_vertices: int = 0
    num_samples: int = 0
    boundary_tiles: int = 0
    flood_filled: int = 0
    holes_repaired: int = 0
    covered_tiles: int = 0
    seed: Optional[Tuple[int, int]] = None
    grid_size: Tuple[int, int] = field(default=(0, 0))


def adaptive_sample_count(level: int, points: Sequence[Point],
                          edge_fraction: float = DEFAULT_EDGE_FRACTION) -> int:
    """
    Number of points to insert per edge so that no refined segment is
    longer than ``edge_fraction`` of a tile width on ``level``.

    Edge lengths are Euclidean in degree space. Returns at least 1.
    """
    coords = [as_lon_lat(p) for p in points]
    max_dist = 0.0
    for (x0, y0), (x1, y1) in zip(coords, coords[1:]):
        max_dist = max(max_dist, math.sqrt((x1 - x0) ** 2 + (y1 - y0) ** 2))
    tile_width, _ = tile_size_degrees(level)
    max_target = tile_width * edge_fraction
    if max_dist <= max_target:
        return 1
    return int(math.ceil(max_dist / max_target))


def refine_polygon(level: int, points: Sequence[Point], num_samples: int = ADAPTIVE,
                   edge_fraction: float = DEFAULT_EDGE_FRACTION) -> List[Tuple[float, float]]:
    """
    Insert evenly spaced points along every polygon edge.

    The polygon is expected to be closed (first point == last point); the
    last point is copied once at the end instead of being refined towards
    the first.

    Args:
        level: Target tile level
        points: Polygon vertices as (lon, lat)
        num_samples: Points per edge, ADAPTIVE, or 0 to return the input

    Returns:
        List of (lon, lat) tuples
    """
    coords = [as_lon_lat(p) for p in points]
    if num_samples == 0:
        logger.info("Polygon refinement off")
        return coords
    if num_samples == ADAPTIVE:
        num_samples = adaptive_sample_count(level, coords, edge_fraction)
        logger.info("Adaptive refinement on level %d: %d samples per edge", level, num_samples)
    if len(coords) < 2:
        return coords

    steps = num_samples + 1
    refined = []
    for (x0, y0), (x1, y1) in zip(coords, coords[1:]):
        for j in range(steps):
            refined.append((
                x0 + (x1 - x0) * j / steps,
                y0 + (y1 - y0) * j / steps,
            ))
    refined.append(coords[-1])
    return refined


def tile_numbers_on_level(level: int, points: Sequence[Point]) -> List[int]:
    """Tile number on ``level`` for every point, in input order."""
    numbers = []
    for p in points:
        lon, lat = as_lon_lat(p)
        numbers.append(tile_number_for(level, NdsCoordinate.from_wgs84(lon, lat)))
    return numbers


def unique_tile_numbers_on_level(level: int, points: Sequence[Point]) -> List[int]:
    """Distinct tile numbers on ``level`` touched by ``points``."""
    return list(dict.fromkeys(tile_numbers_on_level(level, points)))


def _closed_ring(points: Sequence[Point]) -> List[Tuple[float, float]]:
    """
    Validate and close a polygon ring.

    Raises:
        InvalidPolygonError: if fewer than 2 distinct vertices are given
    """
    coords = [as_lon_lat(p) for p in points]
    if len(set(coords)) < 2:
        raise InvalidPolygonError(
            f"Polygon needs at least 2 distinct vertices, got {len(set(coords))}"
        )
    if coords[0] != coords[-1]:
        coords.append(coords[0])
    return coords


class PolygonRasterizer:
    """
    Rasterizes polygons onto the tiles of one level.

    Memory use grows with the bounding box of the polygon's tiles on the
    target level (4x per level), so keep the level bounded for large
    polygons.
    """

    def __init__(self, config: RasterizerConfig):
        self.config = config
        self.stats = RasterStats()

    def boundary_tiles(self, points: Sequence[Point]) -> List[int]:
        """Distinct tile numbers touched by the refined polygon outline."""
        ring = _closed_ring(points)
        refined = refine_polygon(self.config.level, ring, self.config.num_samples,
                                 self.config.edge_fraction)
        return unique_tile_numbers_on_level(self.config.level, refined)

    def rasterize(self, points: Sequence[Point]) -> List[int]:
        """
        Compute all tiles covered by a polygon.

        Args:
            points: Polygon vertices as (lon, lat); the ring is closed
                automatically if the last point differs from the first

        Returns:
            Sorted tile numbers on the configured level

        Raises:
            InvalidPolygonError: if fewer than 2 distinct vertices are given
        """
        self.stats = RasterStats()  # Reset stats
        level = self.config.level

        ring = _closed_ring(points)
        self.stats.input_vertices = len(ring)

        num_samples = self.config.num_samples
        if num_samples == ADAPTIVE:
            num_samples = adaptive_sample_count(level, ring, self.config.edge_fraction)
            logger.info("Adaptive refinement on level %d: %d samples per edge", level, num_samples)
        refined = refine_polygon(level, ring, num_samples, self.config.edge_fraction)
        self.stats.refined_vertices = len(refined)
        self.stats.num_samples = num_samples

        boundary = unique_tile_numbers_on_level(level, refined)
        self.stats.boundary_tiles = len(boundary)

        buckets = RowBuckets.from_tile_numbers(level, boundary)
        ff = FloodFill.from_buckets(buckets)
        self.stats.grid_size = (ff.width, ff.height)
        if ff.seed is not None:
            self.stats.seed = (ff.seed[0] + ff.origin[0], ff.seed[1] + ff.origin[1])

        self.stats.flood_filled = ff.fill()
        if self.config.fill_holes:
            self.stats.holes_repaired = ff.fill_holes()

        covered = sorted(ff.to_buckets().to_tile_numbers(level))
        self.stats.covered_tiles = len(covered)
        logger.debug(
            "Rasterized %d vertices on level %d: %d boundary, %d covered tiles",
            len(ring), level, len(boundary), len(covered),
        )
        return covered

    def rasterize_tiles(self, points: Sequence[Point]) -> List[NdsTile]:
        """Like rasterize, but returns NdsTile objects."""
        return [NdsTile(self.config.level, n) for n in self.rasterize(points)]


def rasterize_polygon(points: Sequence[Point], level: int,
                      num_samples: int = ADAPTIVE) -> List[int]:
    """
    Convenience function to rasterize a polygon.

    Args:
        points: Polygon vertices as (lon, lat)
        level: Target tile level
        num_samples: Points inserted per edge (ADAPTIVE by default)

    Returns:
        Sorted tile numbers covered by the polygon on ``level``
    """
    rasterizer = PolygonRasterizer(RasterizerConfig(level=level, num_samples=num_samples))
    return rasterizer.rasterize(points)
