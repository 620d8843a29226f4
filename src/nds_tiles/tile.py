"""
Tile addressing for the NDS tile scheme.

A tile is identified by its level (0..15) and a tile number of
2*level+1 bits. The tile number equals the most significant bits of the
Morton code of the tile's south-west corner, so the containing tile of a
coordinate on any level is a plain shift of the coordinate's Morton code.

On level 0 there are exactly two tiles split at the prime meridian:
tile 0 covers the eastern hemisphere, tile 1 the western one. Each level
below splits every tile into four children.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union

from .coordinates import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    NdsCoordinate,
    WGS84Coordinate,
    compact_bits,
    spread_bits,
)
from .errors import (
    InvalidLevelError,
    InvalidQuadkeyError,
    InvalidTileIdError,
    InvalidTileNumberError,
)


MAX_LEVEL = 15

Coordinate = Union[NdsCoordinate, WGS84Coordinate]


def check_level(level: int) -> None:
    if not 0 <= level <= MAX_LEVEL:
        raise InvalidLevelError(
            f"The tile level {level} exceeds the range [0, {MAX_LEVEL}]"
        )


def _morton_shift(level: int) -> int:
    """Right shift turning a Morton code into a tile number on ``level``."""
    return 32 + (MAX_LEVEL - level) * 2


def _as_nds(coord: Coordinate) -> NdsCoordinate:
    if isinstance(coord, WGS84Coordinate):
        return coord.to_nds()
    return coord


def tile_count(level: int) -> int:
    """Number of tiles on a level: 2^(2*level+1)."""
    check_level(level)
    return 1 << (2 * level + 1)


def grid_dimensions(level: int) -> Tuple[int, int]:
    """
    Planar grid size of a level.

    Returns:
        Tuple of (width, height) = (2^(level+1), 2^level)
    """
    check_level(level)
    return 1 << (level + 1), 1 << level


def tile_size_degrees(level: int) -> Tuple[float, float]:
    """
    Size of one tile on ``level`` in degrees.

    Returns:
        Tuple of (width, height) in degrees of longitude and latitude
    """
    width, height = grid_dimensions(level)
    return 360.0 / width, 180.0 / height


def tile_number_for(level: int, coord: Coordinate) -> int:
    """Tile number of the tile on ``level`` containing ``coord``."""
    check_level(level)
    code = _as_nds(coord).morton_code
    return (code >> _morton_shift(level)) & ((1 << (2 * level + 1)) - 1)


def tile_xy_from_number(level: int, number: int) -> Tuple[int, int]:
    """
    Convert a tile number to its (x, y) index in the level's planar grid.

    The grid origin (0, 0) is the tile at 180W/90S; x grows eastwards up
    to 2^(level+1)-1 and y grows northwards up to 2^level-1.

    The tile number stores the longitude sign bit on top followed by
    (latitude, longitude) bit pairs, so the grid index falls out of
    de-interleaving and flipping the two sign bits.
    """
    check_level(level)
    if not 0 <= number < (1 << (2 * level + 1)):
        raise InvalidTileNumberError(
            f"Invalid tile number {number} for level {level}"
        )
    x = compact_bits(number) ^ (1 << level)
    if level == 0:
        return x, 0
    y = compact_bits(number >> 1) ^ (1 << (level - 1))
    return x, y


def number_from_tile_xy(level: int, x: int, y: int) -> int:
    """Inverse of tile_xy_from_number."""
    width, height = grid_dimensions(level)
    if not (0 <= x < width and 0 <= y < height):
        raise InvalidTileNumberError(
            f"Tile index ({x}, {y}) outside the {width}x{height} grid of level {level}"
        )
    number = spread_bits(x ^ (1 << level))
    if level > 0:
        number |= spread_bits(y ^ (1 << (level - 1))) << 1
    return number


def quadkey_from_xy(level: int, x: int, y: int) -> str:
    """
    Build the quadkey of tile (x, y) on ``level``.

    One digit per bit, most significant first, level+1 digits in total:
    0 = neither bit set, 1 = x bit only, 2 = y bit only, 3 = both.
    """
    check_level(level)
    digits = []
    for i in range(level + 1, 0, -1):
        mask = 1 << (i - 1)
        digit = 0
        if x & mask:
            digit += 1
        if y & mask:
            digit += 2
        digits.append(str(digit))
    return "".join(digits)


def xy_from_quadkey(quadkey: str) -> Tuple[int, int]:
    """
    Decode a quadkey into (x, y).

    Raises:
        InvalidQuadkeyError: on an empty quadkey or a digit outside 0..3
    """
    if not quadkey:
        raise InvalidQuadkeyError("Empty quadkey")
    x = y = 0
    n = len(quadkey)
    for pos, char in enumerate(quadkey):
        mask = 1 << (n - 1 - pos)
        if char == "0":
            continue
        elif char == "1":
            x |= mask
        elif char == "2":
            y |= mask
        elif char == "3":
            x |= mask
            y |= mask
        else:
            raise InvalidQuadkeyError(
                f"Invalid quadkey digit {char!r} in {quadkey!r}"
            )
    return x, y


@dataclass(frozen=True)
class WGS84BBox:
    """A bounding box in degrees."""

    north: float
    east: float
    south: float
    west: float

    def ring(self) -> List[List[float]]:
        """Closed ring SW -> SE -> NE -> NW -> SW as [lon, lat] pairs."""
        return [
            [self.west, self.south],
            [self.east, self.south],
            [self.east, self.north],
            [self.west, self.north],
            [self.west, self.south],
        ]

    def to_geojson_dict(self) -> Dict[str, Any]:
        """GeoJSON "Polygon" feature as a dictionary."""
        return {
            "type": "Feature",
            "properties": {},
            "geometry": {
                "type": "Polygon",
                "coordinates": [self.ring()],
            },
        }

    def to_geojson(self) -> str:
        """GeoJSON "Polygon" feature as a string."""
        return json.dumps(self.to_geojson_dict())


@dataclass(frozen=True)
class NdsBBox:
    """
    A bounding box in NDS units.

    Edges are inclusive: the corners belong to the box.
    """

    north: int
    east: int
    south: int
    west: int

    def south_west(self) -> NdsCoordinate:
        return NdsCoordinate(self.west, self.south)

    def south_east(self) -> NdsCoordinate:
        return NdsCoordinate(self.east, self.south)

    def north_east(self) -> NdsCoordinate:
        return NdsCoordinate(self.east, self.north)

    def north_west(self) -> NdsCoordinate:
        return NdsCoordinate(self.west, self.north)

    def center(self) -> NdsCoordinate:
        return self.south_west().midpoint(self.north_east())

    def to_wgs84(self) -> WGS84BBox:
        sw = self.south_west().to_wgs84()
        ne = self.north_east().to_wgs84()
        return WGS84BBox(ne.latitude, ne.longitude, sw.latitude, sw.longitude)

    def to_geojson(self) -> str:
        return self.to_wgs84().to_geojson()


EAST_HEMISPHERE = NdsBBox(MAX_LATITUDE, MAX_LONGITUDE, MIN_LATITUDE, 0)
WEST_HEMISPHERE = NdsBBox(MAX_LATITUDE, 0, MIN_LATITUDE, MIN_LONGITUDE)


@dataclass(frozen=True)
class NdsTile:
    """
    A tile of the NDS tile scheme.

    The packed 32-bit ID is only used at the serialization boundary
    (``from_packed`` / ``packed_id``); the tile itself is the plain
    (level, tile_number) pair.
    """

    level: int
    tile_number: int

    def __post_init__(self):
        check_level(self.level)
        max_number = (1 << (2 * self.level + 1)) - 1
        if not 0 <= self.tile_number <= max_number:
            raise InvalidTileNumberError(
                f"Invalid tile number {self.tile_number} for level {self.level}, "
                f"numbers 0 .. {max_number} are allowed"
            )

    @classmethod
    def from_packed(cls, packed_id: int) -> NdsTile:
        """
        Decode a packed tile ID.

        The level is the position of the highest marker bit at 16+level.
        Negative values are read as signed 32-bit integers, where the sign
        bit is the level-15 marker.

        Raises:
            InvalidTileIdError: if the value does not fit 32 bits, no marker
                bit is set, or the payload does not fit the tile number
                width of the decoded level
        """
        if not -(1 << 31) <= packed_id < (1 << 32):
            raise InvalidTileIdError(
                f"Invalid packed tile ID {packed_id}: not a 32-bit value"
            )
        value = packed_id & 0xFFFFFFFF
        for level in range(MAX_LEVEL, -1, -1):
            marker = 1 << (16 + level)
            if value & marker:
                number = value ^ marker
                if number >> (2 * level + 1):
                    raise InvalidTileIdError(
                        f"Invalid packed tile ID {packed_id}: payload exceeds "
                        f"the tile number width of level {level}"
                    )
                return cls(level, number)
        raise InvalidTileIdError(
            f"Invalid packed tile ID {packed_id}: no level bit present"
        )

    @classmethod
    def from_coordinate(cls, level: int, coord: Coordinate) -> NdsTile:
        """The tile on ``level`` containing ``coord``."""
        return cls(level, tile_number_for(level, coord))

    @classmethod
    def from_xy(cls, level: int, x: int, y: int) -> NdsTile:
        return cls(level, number_from_tile_xy(level, x, y))

    @classmethod
    def from_quadkey(cls, quadkey: str) -> NdsTile:
        x, y = xy_from_quadkey(quadkey)
        return cls.from_xy(len(quadkey) - 1, x, y)

    @property
    def packed_id(self) -> int:
        """Packed tile ID as an unsigned 32-bit value."""
        return self.tile_number | (1 << (16 + self.level))

    @property
    def signed_packed_id(self) -> int:
        """Packed tile ID as a signed 32-bit value (negative on level 15)."""
        packed = self.packed_id
        return packed - (1 << 32) if packed & (1 << 31) else packed

    def _south_west(self) -> NdsCoordinate:
        return NdsCoordinate.from_morton_code(
            self.tile_number << _morton_shift(self.level)
        )

    @property
    def bbox(self) -> NdsBBox:
        """Bounding box of this tile in NDS units."""
        if self.level == 0:
            return EAST_HEMISPHERE if self.tile_number == 0 else WEST_HEMISPHERE
        sw = self._south_west()
        north = sw.latitude + LATITUDE_RANGE // (1 << self.level) + (1 if sw.latitude < 0 else 0)
        east = sw.longitude + LONGITUDE_RANGE // (1 << (self.level + 1)) + (1 if sw.longitude < 0 else 0)
        return NdsBBox(north, east, sw.latitude, sw.longitude)

    @property
    def center(self) -> NdsCoordinate:
        """Center of this tile in NDS units."""
        if self.level == 0:
            if self.tile_number == 0:
                return NdsCoordinate(MAX_LONGITUDE // 2, 0)
            return NdsCoordinate(MIN_LONGITUDE // 2, 0)
        # half a tile span, i.e. the bounding box spans of the next level
        sw = self._south_west()
        lat = sw.latitude + LATITUDE_RANGE // (1 << (self.level + 1)) + (1 if sw.latitude < 0 else 0)
        lon = sw.longitude + LONGITUDE_RANGE // (1 << (self.level + 2)) + (1 if sw.longitude < 0 else 0)
        return NdsCoordinate(lon, lat)

    def corners(self) -> List[NdsCoordinate]:
        """Corners ordered SW, SE, NE, NW."""
        bb = self.bbox
        return [bb.south_west(), bb.south_east(), bb.north_east(), bb.north_west()]

    @property
    def child_south_west(self) -> int:
        return self.tile_number << 2

    @property
    def child_south_east(self) -> int:
        return (self.tile_number << 2) + 1

    @property
    def child_north_east(self) -> int:
        return (self.tile_number << 2) + 3

    @property
    def child_north_west(self) -> int:
        return (self.tile_number << 2) + 2

    def child_tile_numbers(self) -> List[int]:
        """
        Tile numbers of the four children on the next level.

        Ordered SW, SE, NE, NW. Bit 0 of the quadrant is the x parity and
        bit 1 the y parity, so NE (3) comes before NW (2).
        """
        return [
            self.child_south_west,
            self.child_south_east,
            self.child_north_east,
            self.child_north_west,
        ]

    def children(self) -> List[NdsTile]:
        if self.level == MAX_LEVEL:
            raise InvalidLevelError(f"Tiles on level {MAX_LEVEL} have no children")
        return [NdsTile(self.level + 1, n) for n in self.child_tile_numbers()]

    def parent(self) -> NdsTile:
        if self.level == 0:
            raise InvalidLevelError("Tiles on level 0 have no parent")
        return NdsTile(self.level - 1, self.tile_number >> 2)

    def contains(self, coord: Coordinate) -> bool:
        """Check if ``coord`` lies in this tile (edges included)."""
        return tile_number_for(self.level, coord) == self.tile_number

    def xy(self) -> Tuple[int, int]:
        """Index of this tile in its level's planar grid."""
        return tile_xy_from_number(self.level, self.tile_number)

    def quadkey(self) -> str:
        x, y = self.xy()
        return quadkey_from_xy(self.level, x, y)

    def to_geojson(self) -> str:
        """GeoJSON "Polygon" feature of the tile's bounding box."""
        return self.bbox.to_geojson()
