"""
Coordinate codec for the NDS tile scheme.

This module converts between WGS84 degrees and the NDS fixed-point integer
representation, and computes the Morton code that addresses every tile
level at once.

Fixed-point layout:
- longitude is a signed 32-bit integer, the full range spans 360 degrees
- latitude is a signed 31-bit integer, the full range spans 180 degrees

Morton layout (63 bits):
- longitude bit i is stored at code bit 2i
- latitude bit i is stored at code bit 2i+1

The most significant code bit is the longitude sign bit, so the top bit
splits the globe at the prime meridian (level 0), and every further pair
of bits halves the tile in latitude and longitude (levels 1..15).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


MAX_LONGITUDE = 2**31 - 1
MIN_LONGITUDE = -(2**31)
MAX_LATITUDE = 2**30 - 1
MIN_LATITUDE = -(2**30)

LONGITUDE_RANGE = MAX_LONGITUDE - MIN_LONGITUDE  # 2^32 - 1
LATITUDE_RANGE = MAX_LATITUDE - MIN_LATITUDE  # 2^31 - 1

_LON_MASK = 0xFFFFFFFF
_LAT_MASK = 0x7FFFFFFF
MORTON_MASK = (1 << 63) - 1


def clamp_coords(lon: float, lat: float) -> Tuple[float, float]:
    """
    Clamp longitude and latitude to valid WGS84 ranges.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees

    Returns:
        Tuple of (clamped_lon, clamped_lat)
    """
    clamped_lon = max(-180.0, min(180.0, lon))
    clamped_lat = max(-90.0, min(90.0, lat))
    return clamped_lon, clamped_lat


def _to_signed(value: int, bits: int) -> int:
    """Interpret the low ``bits`` bits of value as a two's complement integer."""
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        value -= 1 << bits
    return value


def spread_bits(x: int) -> int:
    """Insert a zero bit between each of the low 32 bits of x."""
    x &= 0xFFFFFFFF
    x = (x | (x << 16)) & 0x0000FFFF0000FFFF
    x = (x | (x << 8)) & 0x00FF00FF00FF00FF
    x = (x | (x << 4)) & 0x0F0F0F0F0F0F0F0F
    x = (x | (x << 2)) & 0x3333333333333333
    x = (x | (x << 1)) & 0x5555555555555555
    return x


def compact_bits(x: int) -> int:
    """Inverse of spread_bits: collect every even bit of x."""
    x &= 0x5555555555555555
    x = (x | (x >> 1)) & 0x3333333333333333
    x = (x | (x >> 2)) & 0x0F0F0F0F0F0F0F0F
    x = (x | (x >> 4)) & 0x00FF00FF00FF00FF
    x = (x | (x >> 8)) & 0x0000FFFF0000FFFF
    x = (x | (x >> 16)) & 0x00000000FFFFFFFF
    return x


def morton_encode(longitude: int, latitude: int) -> int:
    """
    Interleave fixed-point longitude and latitude into a Morton code.

    Components are masked to 32 (longitude) and 31 (latitude) bits, so
    values outside the NDS range wrap instead of overflowing.
    """
    return spread_bits(longitude & _LON_MASK) | (spread_bits(latitude & _LAT_MASK) << 1)


def morton_decode(code: int) -> Tuple[int, int]:
    """
    Split a Morton code into signed (longitude, latitude) components.
    """
    code &= MORTON_MASK
    longitude = _to_signed(compact_bits(code), 32)
    latitude = _to_signed(compact_bits(code >> 1), 31)
    return longitude, latitude


@dataclass(frozen=True)
class WGS84Coordinate:
    """A (longitude, latitude) pair in degrees."""

    longitude: float
    latitude: float

    def to_nds(self) -> NdsCoordinate:
        """Convert to the fixed-point NDS representation."""
        return NdsCoordinate.from_wgs84(self.longitude, self.latitude)

    def as_tuple(self) -> Tuple[float, float]:
        return self.longitude, self.latitude


@dataclass(frozen=True)
class NdsCoordinate:
    """
    A coordinate in NDS fixed-point units.

    ``longitude`` lies in [MIN_LONGITUDE, MAX_LONGITUDE] and ``latitude``
    in [MIN_LATITUDE, MAX_LATITUDE]. Values produced by ``add`` may leave
    that range; the Morton code masks them back to the defined widths.
    """

    longitude: int
    latitude: int

    @classmethod
    def from_wgs84(cls, lon: float, lat: float) -> NdsCoordinate:
        """
        Convert WGS84 degrees to NDS units.

        The conversion is:
            longitude = floor(lon / 360 * LONGITUDE_RANGE)
            latitude = floor(lat / 180 * LATITUDE_RANGE)
        after clamping to [-180, 180] x [-90, 90].
        """
        lon, lat = clamp_coords(lon, lat)
        longitude = math.floor(lon / 360.0 * LONGITUDE_RANGE)
        latitude = math.floor(lat / 180.0 * LATITUDE_RANGE)
        return cls(longitude, latitude)

    @classmethod
    def from_morton_code(cls, code: int) -> NdsCoordinate:
        """Reconstruct a coordinate from its Morton code."""
        longitude, latitude = morton_decode(code)
        return cls(longitude, latitude)

    @property
    def morton_code(self) -> int:
        """The 63-bit Morton code of this coordinate."""
        return morton_encode(self.longitude, self.latitude)

    def to_wgs84(self) -> WGS84Coordinate:
        """Convert back to degrees (exact inverse up to integer truncation)."""
        return WGS84Coordinate(
            self.longitude * 360.0 / LONGITUDE_RANGE,
            self.latitude * 180.0 / LATITUDE_RANGE,
        )

    def add(self, d_lon: int, d_lat: int) -> NdsCoordinate:
        """Offset this coordinate by integer amounts."""
        return NdsCoordinate(self.longitude + d_lon, self.latitude + d_lat)

    def midpoint(self, other: NdsCoordinate) -> NdsCoordinate:
        """Component-wise arithmetic mean (not geodesic)."""
        return NdsCoordinate(
            (self.longitude + other.longitude) // 2,
            (self.latitude + other.latitude) // 2,
        )
