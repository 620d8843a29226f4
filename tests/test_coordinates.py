"""Tests for the coordinate codec."""

from dataclasses import FrozenInstanceError

import pytest
from nds_tiles.coordinates import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    NdsCoordinate,
    WGS84Coordinate,
    clamp_coords,
    compact_bits,
    morton_decode,
    morton_encode,
    spread_bits,
)


class TestClampCoords:
    """Tests for coordinate clamping."""

    def test_within_bounds(self):
        """Test coordinates within valid range are unchanged."""
        lon, lat = clamp_coords(-90.0, 45.0)
        assert lon == -90.0
        assert lat == 45.0

    def test_clamp_latitude(self):
        """Test latitude clamping at the poles."""
        assert clamp_coords(0.0, 100.0) == (0.0, 90.0)
        assert clamp_coords(0.0, -100.0) == (0.0, -90.0)

    def test_clamp_longitude(self):
        """Test longitude clamping at the dateline."""
        assert clamp_coords(200.0, 0.0) == (180.0, 0.0)
        assert clamp_coords(-200.0, 0.0) == (-180.0, 0.0)


class TestConstants:
    """Tests for the fixed-point ranges."""

    def test_ranges(self):
        assert LONGITUDE_RANGE == 2**32 - 1
        assert LATITUDE_RANGE == 2**31 - 1


class TestFromWgs84:
    """Tests for degree to fixed-point conversion."""

    def test_extremes(self):
        """Test that the WGS84 extremes map to the fixed-point extremes."""
        assert NdsCoordinate.from_wgs84(180.0, 90.0) == NdsCoordinate(MAX_LONGITUDE, MAX_LATITUDE)
        assert NdsCoordinate.from_wgs84(-180.0, -90.0) == NdsCoordinate(MIN_LONGITUDE, MIN_LATITUDE)

    def test_origin(self):
        assert NdsCoordinate.from_wgs84(0.0, 0.0) == NdsCoordinate(0, 0)

    def test_out_of_range_is_clamped(self):
        """Test that degrees beyond the valid range are clamped first."""
        assert NdsCoordinate.from_wgs84(500.0, -500.0) == NdsCoordinate(MAX_LONGITUDE, MIN_LATITUDE)

    def test_floor_for_negative(self):
        """Test that negative fractions round towards minus infinity."""
        coord = NdsCoordinate.from_wgs84(-1e-9, -1e-9)
        assert coord.longitude == -1
        assert coord.latitude == -1

    def test_wgs84_coordinate_to_nds(self):
        assert WGS84Coordinate(6.0, 45.9).to_nds() == NdsCoordinate.from_wgs84(6.0, 45.9)


class TestToWgs84:
    """Tests for fixed-point to degree conversion."""

    @pytest.mark.parametrize("lon,lat", [
        (6.0, 45.9),
        (-73.9857, 40.7484),
        (139.6917, 35.6895),
        (-58.3816, -34.6037),
        (179.999, -89.999),
    ])
    def test_round_trip(self, lon, lat):
        """Test that converting back stays within one fixed-point unit."""
        wgs = NdsCoordinate.from_wgs84(lon, lat).to_wgs84()
        assert wgs.longitude == pytest.approx(lon, abs=1e-7)
        assert wgs.latitude == pytest.approx(lat, abs=1e-7)

    def test_extremes(self):
        wgs = NdsCoordinate(MAX_LONGITUDE, MAX_LATITUDE).to_wgs84()
        assert wgs.longitude == pytest.approx(180.0, abs=1e-7)
        assert wgs.latitude == pytest.approx(90.0, abs=1e-7)

        wgs = NdsCoordinate(MIN_LONGITUDE, MIN_LATITUDE).to_wgs84()
        assert wgs.longitude == pytest.approx(-180.0, abs=1e-7)
        assert wgs.latitude == pytest.approx(-90.0, abs=1e-7)


class TestBitInterleave:
    """Tests for the bit spreading helpers."""

    def test_spread(self):
        assert spread_bits(0b1) == 0b1
        assert spread_bits(0b11) == 0b101
        assert spread_bits(0b1011) == 0b1000101
        assert spread_bits(0xFFFFFFFF) == 0x5555555555555555

    def test_compact_inverts_spread(self):
        for value in (0, 1, 2, 0x12345678, 0xDEADBEEF, 0xFFFFFFFF):
            assert compact_bits(spread_bits(value)) == value

    def test_compact_ignores_odd_bits(self):
        assert compact_bits(0b1010) == 0
        assert compact_bits(0b1111) == 0b11


class TestMortonCode:
    """Tests for Morton encoding and decoding."""

    @pytest.mark.parametrize("lon,lat,expected", [
        (6.0, 45.9, 581131592357515410),
        (15.0, 45.9, 595825689965249734),
        (15.0, 55.0, 607500946658223212),
        (6.0, 55.0, 592806849050488888),
    ])
    def test_known_codes(self, lon, lat, expected):
        """Test Morton codes of the corners of a box around Germany."""
        assert NdsCoordinate.from_wgs84(lon, lat).morton_code == expected

    def test_layout(self):
        """Test longitude bits on even and latitude bits on odd positions."""
        assert morton_encode(1, 0) == 0b01
        assert morton_encode(0, 1) == 0b10
        assert morton_encode(0b11, 0b01) == 0b0111

    def test_code_fits_63_bits(self):
        for coord in (
            NdsCoordinate(MIN_LONGITUDE, MIN_LATITUDE),
            NdsCoordinate(MAX_LONGITUDE, MAX_LATITUDE),
            NdsCoordinate(-1, -1),
        ):
            assert 0 <= coord.morton_code < 2**63

    def test_negative_components_set_top_bits(self):
        """Test that the sign bits land on the top two code bits."""
        code = NdsCoordinate(-1, -1).morton_code
        assert code == 2**63 - 1

    @pytest.mark.parametrize("lon,lat", [
        (0, 0),
        (1, 1),
        (-1, -1),
        (MAX_LONGITUDE, MAX_LATITUDE),
        (MIN_LONGITUDE, MIN_LATITUDE),
        (MIN_LONGITUDE, MAX_LATITUDE),
        (24772607, 493486079),
        (-882685269, -405648192),
    ])
    def test_decode_inverts_encode(self, lon, lat):
        coord = NdsCoordinate(lon, lat)
        assert NdsCoordinate.from_morton_code(coord.morton_code) == coord
        assert morton_decode(morton_encode(lon, lat)) == (lon, lat)

    def test_out_of_range_wraps(self):
        """Test that components beyond the NDS range wrap around."""
        over = NdsCoordinate(MAX_LONGITUDE + 1, 0)
        assert over.morton_code == NdsCoordinate(MIN_LONGITUDE, 0).morton_code


class TestArithmetic:
    """Tests for coordinate arithmetic."""

    def test_add(self):
        assert NdsCoordinate(10, 20).add(5, -30) == NdsCoordinate(15, -10)

    def test_midpoint(self):
        assert NdsCoordinate(0, 0).midpoint(NdsCoordinate(10, 20)) == NdsCoordinate(5, 10)

    def test_midpoint_rounds_down(self):
        """Test that odd sums are floored, also for negative values."""
        assert NdsCoordinate(0, 0).midpoint(NdsCoordinate(3, -3)) == NdsCoordinate(1, -2)

    def test_immutable(self):
        coord = NdsCoordinate(1, 2)
        with pytest.raises(FrozenInstanceError):
            coord.longitude = 3
