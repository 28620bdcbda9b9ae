"""Ray casting against camera-facing marker quads."""

from __future__ import annotations

import math

import numpy as np
import pytest

from fauna import AnimalRecord, Camera, Marker, MarkerHandle, PointerState, SpherePoint, intersect_markers, pick
from fauna.common import GeoCoordinate
from fauna.picking import CAMERA_DISTANCE_MAX, CAMERA_DISTANCE_MIN


def _marker(name, position, index=0, base_scale=0.4):
    record = AnimalRecord(name=name, lat=1.0, lon=1.0)
    return Marker(
        record,
        GeoCoordinate(1.0, 1.0),
        SpherePoint(*position),
        MarkerHandle(index=index, generation=1),
        base_scale=base_scale,
        hover_factor=1.5,
    )


@pytest.fixture
def camera():
    return Camera(position=(0.0, 0.0, 0.0), target=(0.0, 0.0, -1.0))


def test_nearest_marker_wins(camera):
    far = _marker("far", (0.0, 0.0, -5.0), index=0)
    near = _marker("near", (0.0, 0.0, -3.0), index=1)
    hits = intersect_markers(camera.ray_from_ndc(0.0, 0.0), [far, near], camera)
    assert [hit.marker for hit in hits] == [near, far]
    assert hits[0].distance == pytest.approx(3.0)
    assert pick(PointerState(0.0, 0.0), camera, [far, near]) is near


def test_pointer_off_every_quad_misses(camera):
    marker = _marker("only", (0.0, 0.0, -3.0))
    assert pick(PointerState(0.9, 0.9), camera, [marker]) is None
    assert pick(PointerState(0.0, 0.0), camera, []) is None


def test_markers_behind_the_camera_are_ignored(camera):
    behind = _marker("behind", (0.0, 0.0, 3.0))
    assert pick(PointerState(0.0, 0.0), camera, [behind]) is None


def test_hovered_marker_has_a_larger_hit_area(camera):
    marker = _marker("edge", (0.25, 0.0, -3.0))
    pointer = PointerState(0.0, 0.0)
    assert pick(pointer, camera, [marker]) is None
    marker.is_hovered = True
    assert pick(pointer, camera, [marker]) is marker


def test_ray_through_projected_point_hits_it():
    camera = Camera(aspect=16 / 9)
    marker = _marker("side", (1.2, -0.7, 2.1))
    ndc = camera.project_to_ndc(marker.position.as_array())
    assert ndc is not None
    assert pick(PointerState(float(ndc[0]), float(ndc[1])), camera, [marker]) is marker


def test_pointer_state_from_screen():
    pointer = PointerState.from_screen(0, 0, 200, 100)
    assert (pointer.ndc_x, pointer.ndc_y) == (-1.0, 1.0)
    centre = PointerState.from_screen(100, 50, 200, 100)
    assert (centre.ndc_x, centre.ndc_y) == (0.0, 0.0)
    assert centre.screen_x == 100.0


def test_orbit_keeps_distance_and_clamps_pitch():
    camera = Camera()
    camera.orbit(math.radians(30.0), math.radians(200.0))
    assert np.linalg.norm(camera.position) == pytest.approx(5.0)
    pitch = math.degrees(math.asin(camera.position[1] / 5.0))
    assert pitch == pytest.approx(89.0)


def test_zoom_is_clamped():
    camera = Camera()
    camera.zoom(100.0)
    assert np.linalg.norm(camera.position) == pytest.approx(CAMERA_DISTANCE_MIN)
    camera.zoom(-100.0)
    assert np.linalg.norm(camera.position) == pytest.approx(CAMERA_DISTANCE_MAX)


def test_camera_rejects_degenerate_setup():
    with pytest.raises(ValueError):
        Camera(position=(1.0, 1.0, 1.0), target=(1.0, 1.0, 1.0))
