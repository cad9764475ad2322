import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import config
import main
from sc2map import SC2Map, load_map
from sc2file import MissingChunkError, FormatError
from structures import StructureGrid, StructureMap
from citydata import city_file


def test_load_builds_models():
    city = SC2Map.load(city_file(altitude=7, water=2, tiles={(0, 0): (3, 0, 0x0D)}))
    assert city.terrain.get_terrain_altitude(5, 5) == 7
    assert city.terrain.get_water_altitude(5, 5) == 2
    assert city.terrain.is_flat(0, 0)
    assert city.terrain.get_smooth_altitude(0.5, 0.5) == 4.0
    assert isinstance(city.structures, StructureGrid)
    assert not city.structures.is_road(5, 5)
    assert city.declared_size > 128 * 128 * 2


def test_sizes():
    data = city_file().getvalue()
    city = SC2Map.load(city_file())
    # the length field counts everything after itself
    assert city.declared_size == len(data) - 8
    assert city.size == len(data) - 4


def test_segments_view():
    city = SC2Map.load(city_file(extra=[("XZON", b"\x01" * 50)]))
    assert sorted(city.segments) == ["ALTM", "CNAM", "XBLD", "XTER", "XZON"]
    assert city.get_segment("CNAM").data == b"\x0bTest City\x00"
    assert city.get_segment("XZON").data == b"\x01" * 50
    assert city.get_segment("XTRF") is None
    with pytest.raises(TypeError):
        city.segments["XTRF"] = None


@pytest.mark.parametrize("tag", ["ALTM", "XTER", "XBLD"])
def test_missing_required_chunk(tag):
    with pytest.raises(MissingChunkError) as info:
        SC2Map.load(city_file(skip=[tag]))
    assert tag in str(info.value)


def test_structure_factory_receives_building_data():
    seen = []

    def factory(data):
        seen.append(data)
        return StructureMap()

    city = SC2Map.load(city_file(xbld=b"\x07" * 300), structure_factory=factory)
    assert seen == [b"\x07" * 300]
    assert type(city.structures) is StructureMap


def test_load_map_from_path(tmp_path):
    path = tmp_path / "TEST.SC2"
    path.write_bytes(city_file(altitude=3).getvalue())
    city = load_map(str(path))
    assert city.terrain.get_terrain_altitude(100, 1) == 3


def test_load_map_rejects_other_files(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello world")
    with pytest.raises(FormatError):
        load_map(str(path))


def test_cli_converts_region(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(config, "LOG_COLOR", False)
    monkeypatch.setattr(config, "RANDOM_SEED", config.RANDOM_SEED)
    monkeypatch.setattr(config, "LOG_LEVEL", config.LOG_LEVEL)
    path = tmp_path / "TEST.SC2"
    path.write_bytes(city_file(altitude=3).getvalue())
    assert main.main([str(path), "--region", "60", "60", "62", "62", "--seed", "5"]) == 0
    out = capsys.readouterr().out
    assert "100% complete" in out
    assert "4 tiles converted into 4 sectors" in out
    assert config.RANDOM_SEED == 5


def test_cli_lists_segments(tmp_path, capsys):
    path = tmp_path / "TEST.SC2"
    path.write_bytes(city_file().getvalue())
    assert main.main([str(path), "--segments"]) == 0
    out = capsys.readouterr().out
    assert "XTER" in out and "ALTM" in out


def test_cli_reports_bad_files(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(config, "LOG_COLOR", False)
    path = tmp_path / "BROKEN.SC2"
    path.write_bytes(b"FORM\x00\x00")
    assert main.main([str(path)]) == 1
    assert "[ERROR MAIN]" in capsys.readouterr().out
    assert main.main([str(tmp_path / "missing.SC2")]) == 1


def test_cli_rejects_bad_region(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "LOG_LEVEL", config.LOG_LEVEL)
    monkeypatch.setattr(config, "LOG_CONVERT_PROGRESS", config.LOG_CONVERT_PROGRESS)
    path = tmp_path / "TEST.SC2"
    path.write_bytes(city_file().getvalue())
    assert main.main([str(path), "--quiet", "--region", "0", "0", "200", "1"]) == 2
