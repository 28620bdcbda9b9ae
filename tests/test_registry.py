"""Marker registry: display sets, occurrence expansion and handle lifetimes."""

from __future__ import annotations

import numpy as np
import pytest

from fauna import AnimalRecord, MarkerRegistry, Occurrence, project


def _animal(name, lat, lon, occurrences=(), **extra):
    return AnimalRecord(name=name, lat=lat, lon=lon, occurrences=tuple(occurrences), **extra)


def test_markers_are_placed_on_the_marker_shell():
    registry = MarkerRegistry(radius=2.1)
    markers = registry.set_display_set([_animal("Jaguar", -3.4, -62.2), _animal("Fox", 52.5, -1.5)])
    assert len(markers) == 2
    for marker in markers:
        assert marker.position.norm() == pytest.approx(2.1)
        assert marker.position == project(marker.coordinate.latitude, marker.coordinate.longitude, 2.1)
    assert registry.positions().shape == (2, 3)


def test_positions_are_deterministic_across_recomputes():
    records = [_animal("Jaguar", -3.4, -62.2), _animal("Fox", 52.5, -1.5)]
    registry = MarkerRegistry()
    registry.set_display_set(records)
    first = registry.positions()
    registry.set_display_set(records)
    np.testing.assert_array_equal(first, registry.positions())


def test_records_at_the_origin_are_excluded():
    registry = MarkerRegistry()
    markers = registry.set_display_set(
        [_animal("Nowhere", 0, 0), _animal("Equator", 0, 45), _animal("No coords", None, None)]
    )
    assert [m.record.name for m in markers] == ["Equator"]


def test_records_outside_the_coordinate_range_are_excluded():
    registry = MarkerRegistry()
    assert registry.set_display_set([AnimalRecord(name="Bogus", lat=120.0, lon=10.0)]) == []
    markers = registry.set_display_set(
        [_animal("Bogus", 10.0, 200.0), _animal("Edge", -90.0, 180.0)]
    )
    assert [m.record.name for m in markers] == ["Edge"]


def test_expand_occurrences_adds_one_marker_per_occurrence():
    record = _animal(
        "Snow Leopard",
        35.0,
        78.0,
        occurrences=[Occurrence("Nepal", 28.3, 84.1), Occurrence("Mongolia", 46.8, 103.8)],
        country="India",
    )
    registry = MarkerRegistry()
    markers = registry.expand_occurrences(record)
    assert [m.label for m in markers] == [
        "Snow Leopard",
        "Snow Leopard (occurrence 1)",
        "Snow Leopard (occurrence 2)",
    ]
    assert [m.location_text for m in markers] == ["India", "Nepal", "Mongolia"]
    assert all(m.record is record for m in markers)


def test_expand_occurrences_skips_unusable_locations():
    record = _animal(
        "Ghost",
        0,
        0,
        occurrences=[Occurrence("Null Island", 0, 0), Occurrence("Peru", -9.2, -75.0)],
    )
    markers = MarkerRegistry().expand_occurrences(record)
    assert [m.label for m in markers] == ["Ghost (occurrence 2)"]


def test_recompute_invalidates_old_handles():
    registry = MarkerRegistry()
    old = registry.set_display_set([_animal("Fox", 52.5, -1.5)])[0]
    assert registry.resolve(old.handle) is old
    new = registry.set_display_set([_animal("Fox", 52.5, -1.5)])[0]
    assert new is not old
    assert registry.resolve(old.handle) is None
    assert not registry.is_valid(old.handle)
    assert registry.resolve(new.handle) is new


def test_clear_leaves_hover_flags_to_the_hover_machine():
    registry = MarkerRegistry()
    old = registry.set_display_set([_animal("Fox", 52.5, -1.5)])[0]
    old.is_hovered = True
    registry.clear()
    assert old.is_hovered
    assert len(registry) == 0


def test_set_appearance_ignores_stale_handles():
    registry = MarkerRegistry()
    marker = registry.set_display_set([_animal("Fox", 52.5, -1.5)])[0]
    assert registry.set_appearance(marker.handle, "portrait")
    assert marker.appearance == "portrait"
    stale = marker.handle
    registry.set_display_set([_animal("Fox", 52.5, -1.5)])
    assert not registry.set_appearance(stale, "late portrait")
    assert registry.markers[0].appearance is None


def test_listeners_receive_the_new_generation():
    registry = MarkerRegistry()
    seen = []
    registry.subscribe(seen.append)
    registry.set_display_set([_animal("Fox", 52.5, -1.5)])
    registry.expand_occurrences(_animal("Wolf", 60.0, 10.0))
    registry.unsubscribe(seen.append)
    registry.clear()
    assert seen == [1, 2]
    assert registry.generation == 3


def test_hit_scale_grows_while_hovered():
    registry = MarkerRegistry(base_scale=0.4, hover_factor=1.5)
    marker = registry.set_display_set([_animal("Fox", 52.5, -1.5)])[0]
    assert marker.hit_scale == pytest.approx(0.4)
    marker.is_hovered = True
    assert marker.hit_scale == pytest.approx(0.6)


@pytest.mark.parametrize(
    "kwargs",
    [{"radius": 0.0}, {"base_scale": -1.0}, {"hover_factor": 0.5}],
)
def test_invalid_registry_arguments(kwargs):
    with pytest.raises(ValueError):
        MarkerRegistry(**kwargs)
