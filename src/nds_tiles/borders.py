"""
Country border polygons for rasterization.

This module loads Natural Earth ADM0 boundaries with DuckDB's spatial
extension and hands out country outlines as (lon, lat) rings, and reads
polygon rings from JSON / GeoJSON files.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json
import shutil
import tempfile
import zipfile

import duckdb

from .errors import InvalidPolygonError


Ring = List[Tuple[float, float]]


class BorderSource:
    """
    Country outlines from a Natural Earth ADM0 shapefile.

    The shapefile is loaded once into an in-memory DuckDB database;
    ``polygon`` returns the exterior ring of a country's largest part.
    """

    def __init__(self, shapefile_path: Path, iso_field: str = "ADM0_ISO"):
        """
        Args:
            shapefile_path: ``.shp`` file, or a ``.zip`` archive holding one
            iso_field: Attribute with the ISO code used by ``polygon``
        """
        self.iso_field = iso_field
        self._con: Optional[duckdb.DuckDBPyConnection] = None
        self._unpacked: Optional[Path] = None

        if shapefile_path.suffix == ".zip":
            shapefile_path = self._unpack(shapefile_path)
        self._shapefile_path = shapefile_path

        self._con = duckdb.connect(":memory:")
        self._con.install_extension("spatial")
        self._con.load_extension("spatial")
        self._con.execute(f"""
            CREATE TABLE countries AS
            SELECT * FROM st_read('{self._shapefile_path}')
        """)

    def _unpack(self, archive: Path) -> Path:
        """Extract ``archive`` to a scratch directory and return its shapefile."""
        self._unpacked = Path(tempfile.mkdtemp(prefix="nds-borders-"))
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(self._unpacked)
        shapefile = next(iter(sorted(self._unpacked.glob("*.shp"))), None)
        if shapefile is None:
            self.close()
            raise FileNotFoundError(f"{archive} holds no .shp file")
        return shapefile

    def country_codes(self) -> List[str]:
        """All ISO codes present in the shapefile, sorted."""
        result = self._con.execute(f"""
            SELECT DISTINCT {self.iso_field}
            FROM countries
            WHERE {self.iso_field} IS NOT NULL AND {self.iso_field} != '-99'
            ORDER BY {self.iso_field}
        """).fetchall()
        return [code for (code,) in result]

    def polygon(self, iso_code: str) -> Ring:
        """
        Exterior ring of the largest polygon part of a country.

        Args:
            iso_code: ISO code as stored in ``iso_field``

        Returns:
            Closed ring of (lon, lat) tuples

        Raises:
            KeyError: if the shapefile has no geometry for ``iso_code``
        """
        row = self._con.execute(f"""
            WITH parts AS (
                SELECT UNNEST(ST_Dump(geom)) AS part
                FROM countries
                WHERE {self.iso_field} = ?
            )
            SELECT ST_AsGeoJSON(ST_ExteriorRing(part.geom))
            FROM parts
            ORDER BY ST_Area(part.geom) DESC
            LIMIT 1
        """, [iso_code]).fetchone()

        if row is None or row[0] is None:
            raise KeyError(f"No border found for {iso_code!r}")
        line = json.loads(row[0])
        return [(float(lon), float(lat)) for lon, lat in line["coordinates"]]

    def close(self) -> None:
        """Release the DuckDB connection and any unpacked archive."""
        if self._con is not None:
            self._con.close()
            self._con = None
        if self._unpacked is not None:
            shutil.rmtree(self._unpacked, ignore_errors=True)
            self._unpacked = None

    def __enter__(self) -> "BorderSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def open_natural_earth(
    data_dir: Path,
    filename: str = "ne_10m_admin_0_countries_tlc.zip",
) -> BorderSource:
    """
    Open the Natural Earth country borders kept in ``data_dir``.

    ``filename`` may name the zip download or the extracted shapefile;
    for a zip name, the extracted ``.shp`` next to it is used when the
    archive itself is missing.

    Raises:
        FileNotFoundError: if neither file exists
    """
    candidates = [data_dir / filename]
    if filename.endswith(".zip"):
        candidates.append(data_dir / (filename[:-len(".zip")] + ".shp"))
    for path in candidates:
        if path.exists():
            return BorderSource(path)
    raise FileNotFoundError(
        f"No Natural Earth borders at {', '.join(str(p) for p in candidates)}"
    )


def _ring_from_geojson(obj: Dict[str, Any]) -> List[Any]:
    kind = obj.get("type")
    if kind == "FeatureCollection":
        features = obj.get("features") or []
        if not features:
            raise InvalidPolygonError("FeatureCollection has no features")
        return _ring_from_geojson(features[0])
    if kind == "Feature":
        return _ring_from_geojson(obj.get("geometry") or {})
    if kind == "Polygon":
        return obj["coordinates"][0]
    if kind == "MultiPolygon":
        return obj["coordinates"][0][0]
    raise InvalidPolygonError(f"Unsupported GeoJSON type {kind!r}")


def parse_polygon(data: Any) -> Ring:
    """
    Extract a (lon, lat) ring from decoded JSON.

    Accepts a plain list of [lon, lat] pairs or a GeoJSON Polygon,
    MultiPolygon (first part), Feature, or FeatureCollection (first
    feature). Only the exterior ring is used.
    """
    if isinstance(data, dict):
        data = _ring_from_geojson(data)
    if not isinstance(data, list):
        raise InvalidPolygonError("Polygon must be a list of [lon, lat] pairs")
    ring = []
    for point in data:
        if not isinstance(point, (list, tuple)) or len(point) < 2:
            raise InvalidPolygonError(f"Invalid polygon point {point!r}")
        ring.append((float(point[0]), float(point[1])))
    return ring


def read_polygon_file(path: Path) -> Ring:
    """Read a polygon ring from a JSON or GeoJSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_polygon(json.load(f))
