"""Geographic to globe projection and GeoJSON boundary decomposition."""

from __future__ import annotations

import math

import numpy as np
import pytest

from fauna import project, project_array, project_boundary, project_document


@pytest.mark.parametrize(
    "lat, lon",
    [(0.0, 0.0), (45.0, 45.0), (-33.9, 151.2), (89.99, -179.5), (-60.0, 12.0), (12.5, 180.0)],
)
def test_projected_points_lie_on_the_sphere(lat, lon):
    point = project(lat, lon, 2.1)
    assert point.norm() == pytest.approx(2.1, abs=1e-9)


@pytest.mark.parametrize("lon", [-180.0, -45.0, 0.0, 90.0, 179.0])
def test_poles_collapse_to_the_axis(lon):
    north = project(90.0, lon, 2.0)
    south = project(-90.0, lon, 2.0)
    assert (north.x, north.y, north.z) == (0.0, 2.0, 0.0)
    assert (south.x, south.y, south.z) == (0.0, -2.0, 0.0)


def test_origin_of_the_grid_maps_to_positive_x():
    point = project(0.0, 0.0, 2.0)
    assert point.x == pytest.approx(2.0)
    assert point.y == pytest.approx(0.0, abs=1e-12)
    assert point.z == pytest.approx(0.0, abs=1e-12)


def test_quarter_turn_longitudes():
    west = project(0.0, -90.0, 1.0)
    east = project(0.0, 90.0, 1.0)
    assert west.as_array() == pytest.approx([0.0, 0.0, 1.0], abs=1e-12)
    assert east.as_array() == pytest.approx([0.0, 0.0, -1.0], abs=1e-12)


def test_projection_is_deterministic():
    assert project(48.85, 2.35, 2.1) == project(48.85, 2.35, 2.1)


def test_project_array_matches_scalar_projection():
    lats = np.array([10.0, -45.0, 90.0, 0.0])
    lons = np.array([20.0, 170.0, 33.0, -90.0])
    points = project_array(lats, lons, 2.0)
    assert points.shape == (4, 3)
    for row, lat, lon in zip(points, lats, lons):
        expected = project(lat, lon, 2.0).as_array()
        np.testing.assert_allclose(row, expected, atol=1e-12)


def test_project_array_rejects_mismatched_shapes():
    with pytest.raises(ValueError):
        project_array([1.0, 2.0], [3.0], 2.0)


def test_polygon_with_hole_keeps_both_rings_closed():
    polygon = {
        "type": "Polygon",
        "coordinates": [
            [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]],
            [[2, 2], [4, 2], [4, 4], [2, 2]],
        ],
    }
    boundary = project_boundary(polygon, 2.0)
    assert len(boundary) == 2
    assert all(ring.closed for ring in boundary)
    assert boundary.vertex_count == 9
    norms = np.linalg.norm(boundary.rings[0].points, axis=1)
    np.testing.assert_allclose(norms, 2.0)


def test_multipolygon_flattens_every_ring():
    multipolygon = {
        "type": "MultiPolygon",
        "coordinates": [
            [[[0, 0], [1, 0], [1, 1], [0, 0]]],
            [[[5, 5], [6, 5], [6, 6], [5, 5]], [[5.2, 5.2], [5.5, 5.2], [5.5, 5.5], [5.2, 5.2]]],
        ],
    }
    assert len(project_boundary(multipolygon, 2.0)) == 3


def test_linestrings_are_open_unless_they_return_to_start():
    lines = {
        "type": "MultiLineString",
        "coordinates": [
            [[0, 0], [5, 5], [10, 0]],
            [[0, 0], [5, 5], [10, 0], [0, 0]],
            [[3, 3]],
        ],
    }
    boundary = project_boundary(lines, 2.0)
    assert [ring.closed for ring in boundary] == [False, True]


def test_projected_points_are_read_only():
    boundary = project_boundary({"type": "LineString", "coordinates": [[0, 0], [1, 1]]}, 2.0)
    with pytest.raises(ValueError):
        boundary.rings[0].points[0, 0] = 1.0


def test_unsupported_geometry_raises():
    with pytest.raises(ValueError):
        project_boundary({"type": "Point", "coordinates": [0, 0]}, 2.0)


@pytest.mark.parametrize(
    "coordinates",
    [
        [[0], [1, 1]],
        [[0, 0], [1, 1], [2]],
        [[0, 0], ["north", 1]],
        [[0, 0], None],
    ],
)
def test_malformed_positions_raise_value_error(coordinates):
    with pytest.raises(ValueError):
        project_boundary({"type": "LineString", "coordinates": coordinates}, 2.0)


def test_document_skips_unsupported_features():
    document = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [1, 2]}},
            {"type": "Feature", "geometry": None},
            {
                "type": "Feature",
                "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "GeometryCollection",
                    "geometries": [{"type": "LineString", "coordinates": [[0, 0], [0, 1]]}],
                },
            },
        ],
    }
    boundaries = project_document(document, 2.0)
    assert len(boundaries) == 2
    assert boundaries[0].rings[0].closed
    assert not boundaries[1].rings[0].closed
    assert boundaries[0].radius == 2.0


def test_longitude_wraps_to_same_point():
    a = project(10.0, 180.0, 1.0).as_array()
    b = project(10.0, -180.0, 1.0).as_array()
    np.testing.assert_allclose(a, b, atol=1e-12)
    assert math.isclose(np.linalg.norm(a), 1.0)
