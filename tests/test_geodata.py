"""Reading JSON sources and locating the boundary document."""

from __future__ import annotations

import json

import pytest

from fauna_gui.geodata import (
    DataSourceError,
    is_remote,
    load_boundary_document,
    load_record_list,
    read_json_source,
    resolve_boundary_source,
)


def test_is_remote():
    assert is_remote("https://example.org/land.geojson")
    assert is_remote("HTTP://example.org/a.json")
    assert not is_remote("data/animals.json")


def test_read_local_json(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps({"type": "FeatureCollection", "features": []}), encoding="utf-8")
    assert read_json_source(path)["type"] == "FeatureCollection"
    assert load_boundary_document(str(path))["features"] == []


def test_invalid_json_raises_data_source_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataSourceError) as excinfo:
        read_json_source(path)
    assert "Invalid JSON" in str(excinfo.value)


def test_missing_file_raises_data_source_error(tmp_path):
    with pytest.raises(DataSourceError):
        read_json_source(tmp_path / "absent.json")


def test_document_shape_is_checked(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(DataSourceError):
        load_boundary_document(path)
    assert load_record_list(path) == [1, 2]

    path.write_text('{"type": "Polygon", "coordinates": []}', encoding="utf-8")
    with pytest.raises(DataSourceError):
        load_record_list(path)


def test_resolve_prefers_an_existing_hint(tmp_path):
    hint = tmp_path / "custom.geojson"
    hint.write_text("{}", encoding="utf-8")
    assert resolve_boundary_source(hint, data_dir=tmp_path, download_missing=False) == hint
    url = "https://example.org/land.geojson"
    assert resolve_boundary_source(url, data_dir=tmp_path, download_missing=False) == url


def test_resolve_falls_back_to_a_local_copy(tmp_path):
    nested = tmp_path / "natural_earth"
    nested.mkdir()
    local = nested / "ne_110m_land.geojson"
    local.write_text("{}", encoding="utf-8")
    resolved = resolve_boundary_source(tmp_path / "absent.geojson", data_dir=tmp_path, download_missing=False)
    assert resolved == local.resolve()


def test_resolve_without_download_returns_none(tmp_path):
    assert resolve_boundary_source(None, data_dir=tmp_path, download_missing=False) is None
