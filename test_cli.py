"""
Test CLI
========

summary / export / preview subcommands against a GeoJSON file on disk.

Usage:
    pytest test_cli.py -v
"""

import json

import cv2
import pytest

from beramap_cli.cli import main

COLLECTION = {
    'type': 'FeatureCollection',
    'features': [
        {'type': 'Feature', 'id': 'plaza',
         'geometry': {'type': 'Point', 'coordinates': [-63.9039, -8.7619]},
         'properties': {'name': 'Praça'}},
        {'type': 'Feature', 'id': 'radius',
         'geometry': {'type': 'Circle', 'coordinates': [-63.9000, -8.7600]},
         'properties': {'radius': 500}},
        {'type': 'Feature',
         'geometry': {'type': 'LineString', 'coordinates': [[-63.91, -8.77], [-63.90, -8.76]]},
         'properties': {}},
    ],
}


@pytest.fixture
def geojson_file(tmp_path):
    path = tmp_path / "areas.geojson"
    path.write_text(json.dumps(COLLECTION))
    return str(path)


def test_summary(geojson_file, capsys):
    main(["summary", geojson_file])
    report = json.loads(capsys.readouterr().out)

    assert report['stats']['total_count'] == 3
    assert report['stats']['count_by_type']['Circle'] == 1
    rows = {row['uuid']: row for row in report['geometries']}
    assert rows['radius']['metrics']['radius'] == 500.0
    assert rows['radius']['area'].endswith("ha")


def test_export_filters_kind_and_adds_metadata(geojson_file, capsys):
    main(["export", geojson_file, "--type", "Point", "--include-metadata"])
    exported = json.loads(capsys.readouterr().out)

    assert exported['type'] == 'FeatureCollection'
    assert len(exported['features']) == 1
    assert exported['features'][0]['properties']['_beramap_uuid'] == 'plaza'


def test_preview_writes_image(geojson_file, tmp_path, capsys):
    output = tmp_path / "preview.png"
    main(["preview", geojson_file, str(output), "--width", "320", "--height", "200"])

    image = cv2.imread(str(output))
    assert image.shape == (200, 320, 3)
    assert "3 geometries" in capsys.readouterr().out


def test_missing_file_exits_with_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["summary", str(tmp_path / "nope.geojson")])
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
