"""
Master tile resolution.

The master tile of a set of points is the finest tile that still contains
all of them. It is found by walking down the levels with the four corners
of the points' bounding rectangle and stopping at the first level where
the corners no longer share a tile.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from .coordinates import NdsCoordinate, WGS84Coordinate
from .errors import InvalidLevelError, InvalidPolygonError, UnresolvableMasterTileError
from .tile import MAX_LEVEL, NdsTile, tile_number_for


Point = Union[Tuple[float, float], Sequence[float], WGS84Coordinate]


def as_lon_lat(point: Point) -> Tuple[float, float]:
    """Normalize a point to a (lon, lat) tuple of floats."""
    if isinstance(point, WGS84Coordinate):
        return point.longitude, point.latitude
    lon, lat = point[0], point[1]
    return float(lon), float(lat)


@dataclass(frozen=True)
class Envelope:
    """Axis-aligned bounding rectangle of a point set, in degrees."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> Envelope:
        """
        Compute the envelope of ``points``.

        Raises:
            InvalidPolygonError: if ``points`` is empty
        """
        coords = [as_lon_lat(p) for p in points]
        if not coords:
            raise InvalidPolygonError("Cannot compute the envelope of an empty point set")
        lons = [lon for lon, _ in coords]
        lats = [lat for _, lat in coords]
        return cls(min(lons), min(lats), max(lons), max(lats))

    @property
    def south_west(self) -> NdsCoordinate:
        return NdsCoordinate.from_wgs84(self.min_lon, self.min_lat)

    @property
    def south_east(self) -> NdsCoordinate:
        return NdsCoordinate.from_wgs84(self.max_lon, self.min_lat)

    @property
    def north_east(self) -> NdsCoordinate:
        return NdsCoordinate.from_wgs84(self.max_lon, self.max_lat)

    @property
    def north_west(self) -> NdsCoordinate:
        return NdsCoordinate.from_wgs84(self.min_lon, self.max_lat)

    def corners(self) -> List[NdsCoordinate]:
        """Corners ordered SW, SE, NE, NW."""
        return [self.south_west, self.south_east, self.north_east, self.north_west]

    def master_tile(self, max_level: int = MAX_LEVEL) -> NdsTile:
        """The master tile of this envelope, searching levels below ``max_level``."""
        return resolve_master_tile(self.corners(), max_level)


def resolve_master_tile(corners: Sequence[NdsCoordinate], max_level: int = MAX_LEVEL) -> NdsTile:
    """
    Find the finest tile containing all ``corners``.

    Levels 0 .. max_level-1 are examined in order; the search stops at the
    first level where the corners map to different tiles.

    Args:
        corners: Corner coordinates of the region (usually four)
        max_level: Exclusive upper bound of the levels to examine (1..16)

    Returns:
        The master tile

    Raises:
        InvalidLevelError: if ``max_level`` is outside 1..16
        InvalidPolygonError: if no corners are given
        UnresolvableMasterTileError: if the corners already differ on
            level 0 (region straddles the antimeridian or prime meridian
            split of the level-0 tiles)
    """
    if not 1 <= max_level <= MAX_LEVEL + 1:
        raise InvalidLevelError(
            f"max_level {max_level} exceeds the range [1, {MAX_LEVEL + 1}]"
        )
    if not corners:
        raise InvalidPolygonError("No corners given")

    best = None
    for level in range(max_level):
        numbers = {tile_number_for(level, c) for c in corners}
        if len(numbers) != 1:
            break
        best = NdsTile(level, numbers.pop())

    if best is None:
        raise UnresolvableMasterTileError(
            "Corners do not share a tile on level 0; the region crosses a "
            "hemisphere boundary"
        )
    return best


def master_tile_for_points(points: Iterable[Point], max_level: int = MAX_LEVEL) -> NdsTile:
    """Convenience wrapper: envelope of ``points``, then its master tile."""
    return Envelope.from_points(points).master_tile(max_level)
