"""
nds-tiles: NDS tile scheme addressing and polygon rasterization.

This package maps WGS84 coordinates to tiles of the NDS quadtree tile
scheme (packed tile IDs, tile numbers, quadkeys, bounding boxes), finds
the master tile enclosing a set of points, and rasterizes polygons such
as country borders into the set of tiles they cover on a given level.
"""

__version__ = "0.1.0"

from .coordinates import NdsCoordinate, WGS84Coordinate, clamp_coords
from .errors import (
    NdsError,
    InvalidLevelError,
    InvalidTileNumberError,
    InvalidTileIdError,
    InvalidQuadkeyError,
    InvalidPolygonError,
    UnresolvableMasterTileError,
)
from .tile import (
    MAX_LEVEL,
    NdsTile,
    NdsBBox,
    WGS84BBox,
    tile_xy_from_number,
    number_from_tile_xy,
    quadkey_from_xy,
    xy_from_quadkey,
)
from .master import Envelope, resolve_master_tile, master_tile_for_points
from .buckets import RowBuckets
from .floodfill import FloodFill, fill_buckets
from .rasterize import (
    ADAPTIVE,
    PolygonRasterizer,
    RasterizerConfig,
    RasterStats,
    refine_polygon,
    rasterize_polygon,
)

__all__ = [
    "NdsCoordinate",
    "WGS84Coordinate",
    "clamp_coords",
    "NdsError",
    "InvalidLevelError",
    "InvalidTileNumberError",
    "InvalidTileIdError",
    "InvalidQuadkeyError",
    "InvalidPolygonError",
    "UnresolvableMasterTileError",
    "MAX_LEVEL",
    "NdsTile",
    "NdsBBox",
    "WGS84BBox",
    "tile_xy_from_number",
    "number_from_tile_xy",
    "quadkey_from_xy",
    "xy_from_quadkey",
    "Envelope",
    "resolve_master_tile",
    "master_tile_for_points",
    "RowBuckets",
    "FloodFill",
    "fill_buckets",
    "ADAPTIVE",
    "PolygonRasterizer",
    "RasterizerConfig",
    "RasterStats",
    "refine_polygon",
    "rasterize_polygon",
]
