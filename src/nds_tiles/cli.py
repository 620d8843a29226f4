"""
Command-line interface for nds-tiles.

Provides commands for inspecting tiles and rasterizing polygons.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .borders import Ring, open_natural_earth, read_polygon_file
from .coordinates import NdsCoordinate
from .errors import NdsError
from .master import Envelope
from .rasterize import ADAPTIVE, PolygonRasterizer, RasterizerConfig
from .tile import NdsTile, grid_dimensions, tile_count, tile_size_degrees


# Default data directory (relative to package)
DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent / "data"
DEFAULT_SHAPEFILE = "ne_10m_admin_0_countries_tlc.shp"


def _add_polygon_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--polygon",
        type=Path,
        help="JSON file with [lon, lat] pairs or a GeoJSON polygon",
    )
    source.add_argument(
        "--country",
        type=str,
        help="ISO code of a country in the Natural Earth shapefile",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory containing Natural Earth shapefile (default: data/)",
    )
    parser.add_argument(
        "--shapefile",
        type=str,
        default=DEFAULT_SHAPEFILE,
        help=f"Shapefile name (default: {DEFAULT_SHAPEFILE})",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nds-tiles",
        description="Inspect NDS tiles and rasterize polygons onto them",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Tile command
    tile_parser = subparsers.add_parser(
        "tile",
        help="Describe a packed tile ID",
    )
    tile_parser.add_argument("packed_id", type=int, help="Packed tile ID")
    tile_parser.add_argument(
        "--geojson",
        action="store_true",
        help="Also print the tile as GeoJSON",
    )

    # Locate command
    locate_parser = subparsers.add_parser(
        "locate",
        help="Find the tile containing a coordinate",
    )
    locate_parser.add_argument("lon", type=float, help="Longitude in degrees")
    locate_parser.add_argument("lat", type=float, help="Latitude in degrees")
    locate_parser.add_argument(
        "-l", "--level",
        type=int,
        default=13,
        help="Tile level (default: 13)",
    )

    # Quadkey command
    quadkey_parser = subparsers.add_parser(
        "quadkey",
        help="Decode a quadkey",
    )
    quadkey_parser.add_argument("quadkey", type=str, help="Quadkey digits 0-3")

    # Master command
    master_parser = subparsers.add_parser(
        "master",
        help="Find the master tile of a polygon",
    )
    _add_polygon_arguments(master_parser)
    master_parser.add_argument(
        "--max-level",
        type=int,
        default=15,
        help="Exclusive upper bound of levels to search (default: 15)",
    )

    # Fill command
    fill_parser = subparsers.add_parser(
        "fill",
        help="Rasterize a polygon onto the tiles of one level",
    )
    _add_polygon_arguments(fill_parser)
    fill_parser.add_argument(
        "-l", "--level",
        type=int,
        default=11,
        help="Tile level (default: 11)",
    )
    fill_parser.add_argument(
        "--samples",
        type=int,
        default=ADAPTIVE,
        help="Points inserted per edge, -1 for adaptive, 0 for none (default: -1)",
    )
    fill_parser.add_argument(
        "--no-fill-holes",
        action="store_true",
        help="Disable the gap repair pass",
    )
    fill_parser.add_argument(
        "--ids",
        action="store_true",
        help="Print the packed IDs of all covered tiles",
    )

    # Stats command
    stats_parser = subparsers.add_parser(
        "stats",
        help="Show grid statistics for a level",
    )
    stats_parser.add_argument(
        "-l", "--level",
        type=int,
        default=13,
        help="Tile level (default: 13)",
    )

    return parser


def _print_tile(tile: NdsTile) -> None:
    bb = tile.bbox.to_wgs84()
    center = tile.center.to_wgs84()
    x, y = tile.xy()
    print(f"Tile level {tile.level}, number {tile.tile_number}")
    print(f"  Packed ID: {tile.packed_id}")
    print(f"  Grid index: x={x}, y={y}")
    print(f"  Quadkey: {tile.quadkey()}")
    print(f"  Center: lon={center.longitude:.7f}, lat={center.latitude:.7f}")
    print(f"  Bounds: N={bb.north:.7f} E={bb.east:.7f} S={bb.south:.7f} W={bb.west:.7f}")


def _load_polygon(args: argparse.Namespace) -> Ring:
    if args.polygon:
        print(f"Reading polygon from: {args.polygon}")
        return read_polygon_file(args.polygon)

    data_dir = args.data_dir or DEFAULT_DATA_DIR
    print(f"Loading shapefile from: {data_dir / args.shapefile}")
    with open_natural_earth(data_dir, args.shapefile) as borders:
        return borders.polygon(args.country)


def cmd_tile(args: argparse.Namespace) -> int:
    """Handle the tile command."""
    tile = NdsTile.from_packed(args.packed_id)
    _print_tile(tile)
    if args.geojson:
        print(tile.to_geojson())
    return 0


def cmd_locate(args: argparse.Namespace) -> int:
    """Handle the locate command."""
    tile = NdsTile.from_coordinate(args.level, NdsCoordinate.from_wgs84(args.lon, args.lat))
    _print_tile(tile)
    return 0


def cmd_quadkey(args: argparse.Namespace) -> int:
    """Handle the quadkey command."""
    tile = NdsTile.from_quadkey(args.quadkey)
    _print_tile(tile)
    return 0


def cmd_master(args: argparse.Namespace) -> int:
    """Handle the master command."""
    ring = _load_polygon(args)
    envelope = Envelope.from_points(ring)
    print(f"Envelope: lon {envelope.min_lon}..{envelope.max_lon}, "
          f"lat {envelope.min_lat}..{envelope.max_lat}")
    tile = envelope.master_tile(args.max_level)
    _print_tile(tile)
    return 0


def cmd_fill(args: argparse.Namespace) -> int:
    """Handle the fill command."""
    ring = _load_polygon(args)
    config = RasterizerConfig(
        level=args.level,
        num_samples=args.samples,
        fill_holes=not args.no_fill_holes,
    )
    rasterizer = PolygonRasterizer(config)
    print(f"Rasterizing {len(ring)} vertices on level {args.level}...")
    numbers = rasterizer.rasterize(ring)
    stats = rasterizer.stats

    print(f"\nRaster statistics:")
    print(f"  Samples per edge: {stats.num_samples}")
    print(f"  Refined vertices: {stats.refined_vertices}")
    print(f"  Boundary tiles: {stats.boundary_tiles}")
    print(f"  Grid size: {stats.grid_size[0]} x {stats.grid_size[1]}")
    print(f"  Seed: {stats.seed}")
    print(f"  Flood filled: {stats.flood_filled}")
    print(f"  Holes repaired: {stats.holes_repaired}")
    print(f"  Covered tiles: {stats.covered_tiles}")

    if args.ids:
        print()
        for number in numbers:
            print(NdsTile(args.level, number).packed_id)

    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Handle the stats command."""
    level = args.level
    width, height = grid_dimensions(level)
    size_x, size_y = tile_size_degrees(level)

    print(f"Grid statistics for level {level}:")
    print(f"  Grid: {width} x {height}")
    print(f"  Total tiles: {tile_count(level):,}")
    print(f"  Tile size: {size_x} x {size_y} degrees")

    return 0


COMMANDS = {
    "tile": cmd_tile,
    "locate": cmd_locate,
    "quadkey": cmd_quadkey,
    "master": cmd_master,
    "fill": cmd_fill,
    "stats": cmd_stats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return COMMANDS[args.command](args)
    except (NdsError, FileNotFoundError, KeyError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
