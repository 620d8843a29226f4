"""Tests for the command-line interface."""

import json

import pytest
from nds_tiles.cli import create_parser, main


RECTANGLE = [[10.1, 50.1], [13.9, 50.1], [13.9, 53.9], [10.1, 53.9], [10.1, 50.1]]


@pytest.fixture
def rectangle_file(tmp_path):
    path = tmp_path / "rectangle.json"
    path.write_text(json.dumps(RECTANGLE))
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_fill_defaults(self):
        args = create_parser().parse_args(["fill", "--polygon", "x.json"])
        assert args.level == 11
        assert args.samples == -1
        assert args.no_fill_holes is False

    def test_polygon_source_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["fill"])

    def test_polygon_sources_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["master", "--polygon", "x.json", "--country", "DEU"])


class TestCommands:
    """Tests for the CLI commands."""

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_tile(self, capsys):
        assert main(["tile", "539636700"]) == 0
        out = capsys.readouterr().out
        assert "Tile level 13, number 2765788" in out
        assert "Packed ID: 539636700" in out

    def test_tile_negative_id(self, capsys):
        assert main(["tile", "-2103231037"]) == 0
        out = capsys.readouterr().out
        assert "Tile level 15, number 44252611" in out

    def test_tile_geojson(self, capsys):
        assert main(["tile", "539636700", "--geojson"]) == 0
        out = capsys.readouterr().out
        assert '"type": "Polygon"' in out

    def test_invalid_tile(self, capsys):
        assert main(["tile", "0"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_locate(self, capsys):
        assert main(["locate", "30", "-34", "-l", "10"]) == 0
        out = capsys.readouterr().out
        assert "Tile level 10, number 675564" in out

    def test_quadkey(self, capsys):
        assert main(["quadkey", "1213"]) == 0
        out = capsys.readouterr().out
        assert "Tile level 3" in out
        assert "Grid index: x=11, y=5" in out

    def test_invalid_quadkey(self, capsys):
        assert main(["quadkey", "19"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_stats(self, capsys):
        assert main(["stats", "-l", "2"]) == 0
        out = capsys.readouterr().out
        assert "Grid: 8 x 4" in out
        assert "Total tiles: 32" in out
        assert "Tile size: 45.0 x 45.0 degrees" in out

    def test_stats_invalid_level(self, capsys):
        assert main(["stats", "-l", "16"]) == 1

    def test_master(self, capsys, tmp_path, germany):
        path = tmp_path / "germany.json"
        path.write_text(json.dumps(germany))
        assert main(["master", "--polygon", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Tile level 3, number 8" in out

    def test_fill(self, capsys, rectangle_file):
        assert main(["fill", "--polygon", str(rectangle_file), "-l", "8"]) == 0
        out = capsys.readouterr().out
        assert "Boundary tiles: 20" in out
        assert "Covered tiles: 36" in out

    def test_fill_ids(self, capsys, rectangle_file):
        assert main(["fill", "--polygon", str(rectangle_file), "-l", "8", "--ids"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        ids = [int(line) for line in lines[-36:]]
        assert all(packed >> 24 == 1 for packed in ids)

    def test_fill_missing_file(self, capsys, tmp_path):
        assert main(["fill", "--polygon", str(tmp_path / "missing.json")]) == 1
        assert "Error:" in capsys.readouterr().out
