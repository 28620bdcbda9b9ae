"""Active marker set with generation-tagged handles.

Every recompute of the display set bumps the registry generation. Handles
issued for an earlier generation no longer resolve, so anything holding one
(hover state, pending image loads) can detect that its marker is gone.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

import numpy as np

from .common import HOVER_SCALE_FACTOR, MARKER_BASE_SCALE, MARKER_RADIUS, GeoCoordinate, SpherePoint
from .projection import project
from .records import AnimalRecord

LOGGER = logging.getLogger(__name__)

RegistryListener = Callable[[int], None]


@dataclass(frozen=True)
class MarkerHandle:
    index: int
    generation: int


class Marker:
    """One on-globe marker. Position is fixed at creation time."""

    __slots__ = (
        "record",
        "_coordinate",
        "_position",
        "base_scale",
        "hover_factor",
        "label",
        "location_text",
        "handle",
        "is_hovered",
        "appearance",
    )

    def __init__(
        self,
        record: AnimalRecord,
        coordinate: GeoCoordinate,
        position: SpherePoint,
        handle: MarkerHandle,
        *,
        base_scale: float = MARKER_BASE_SCALE,
        hover_factor: float = HOVER_SCALE_FACTOR,
        label: Optional[str] = None,
        location_text: Optional[str] = None,
    ) -> None:
        self.record = record
        self._coordinate = coordinate
        self._position = position
        self.handle = handle
        self.base_scale = base_scale
        self.hover_factor = hover_factor
        self.label = label or record.name
        self.location_text = location_text if location_text is not None else (record.country or "")
        self.is_hovered = False
        # Cosmetic only (e.g. a loaded portrait); never read by picking.
        self.appearance: Any = None

    @property
    def coordinate(self) -> GeoCoordinate:
        return self._coordinate

    @property
    def position(self) -> SpherePoint:
        return self._position

    @property
    def hit_scale(self) -> float:
        if self.is_hovered:
            return self.base_scale * self.hover_factor
        return self.base_scale

    def __repr__(self) -> str:
        return f"Marker({self.label!r}, handle={self.handle})"


class MarkerRegistry:
    def __init__(
        self,
        *,
        radius: float = MARKER_RADIUS,
        base_scale: float = MARKER_BASE_SCALE,
        hover_factor: float = HOVER_SCALE_FACTOR,
    ) -> None:
        if radius <= 0:
            raise ValueError("Display radius must be positive")
        if base_scale <= 0:
            raise ValueError("Marker base scale must be positive")
        if hover_factor < 1.0:
            raise ValueError("Hover factor must be at least 1")
        self.radius = radius
        self.base_scale = base_scale
        self.hover_factor = hover_factor
        self._markers: Tuple[Marker, ...] = ()
        self._generation = 0
        self._listeners: List[RegistryListener] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def markers(self) -> Tuple[Marker, ...]:
        return self._markers

    def __len__(self) -> int:
        return len(self._markers)

    def __iter__(self):
        return iter(self._markers)

    def subscribe(self, callback: RegistryListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: RegistryListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def set_display_set(self, records: Iterable[AnimalRecord]) -> List[Marker]:
        generation = self._generation + 1
        markers: List[Marker] = []
        skipped = 0
        for record in records:
            coordinate = record.coordinate
            if coordinate is None:
                skipped += 1
                continue
            markers.append(self._make_marker(record, coordinate, generation, len(markers)))
        if skipped:
            LOGGER.debug("Excluded %d records without a usable location", skipped)
        self._replace(markers, generation)
        return list(markers)

    def expand_occurrences(self, record: AnimalRecord) -> List[Marker]:
        generation = self._generation + 1
        markers: List[Marker] = []
        primary = record.coordinate
        if primary is not None:
            markers.append(self._make_marker(record, primary, generation, 0))
        else:
            LOGGER.debug("Primary location of %s is unusable; showing occurrences only", record.name)
        for number, occurrence in enumerate(record.occurrences, start=1):
            coordinate = occurrence.coordinate
            if coordinate is None:
                LOGGER.debug("Skipping occurrence %d of %s without a usable location", number, record.name)
                continue
            markers.append(
                self._make_marker(
                    record,
                    coordinate,
                    generation,
                    len(markers),
                    label=f"{record.name} (occurrence {number})",
                    location_text=occurrence.country or "",
                )
            )
        self._replace(markers, generation)
        return list(markers)

    def clear(self) -> None:
        self._replace([], self._generation + 1)

    def resolve(self, handle: Optional[MarkerHandle]) -> Optional[Marker]:
        if handle is None or handle.generation != self._generation:
            return None
        if not 0 <= handle.index < len(self._markers):
            return None
        return self._markers[handle.index]

    def is_valid(self, handle: Optional[MarkerHandle]) -> bool:
        return self.resolve(handle) is not None

    def set_appearance(self, handle: MarkerHandle, appearance: Any) -> bool:
        marker = self.resolve(handle)
        if marker is None:
            LOGGER.debug("Dropping appearance for stale marker %s", handle)
            return False
        marker.appearance = appearance
        return True

    def positions(self) -> np.ndarray:
        if not self._markers:
            return np.empty((0, 3), dtype=np.float64)
        return np.asarray([m.position.as_array() for m in self._markers], dtype=np.float64)

    def _make_marker(
        self,
        record: AnimalRecord,
        coordinate: GeoCoordinate,
        generation: int,
        index: int,
        *,
        label: Optional[str] = None,
        location_text: Optional[str] = None,
    ) -> Marker:
        position = project(coordinate.latitude, coordinate.longitude, self.radius)
        return Marker(
            record,
            coordinate,
            position,
            MarkerHandle(index=index, generation=generation),
            base_scale=self.base_scale,
            hover_factor=self.hover_factor,
            label=label,
            location_text=location_text,
        )

    def _replace(self, markers: List[Marker], generation: int) -> None:
        self._generation = generation
        self._markers = tuple(markers)
        LOGGER.debug("Display set generation %d holds %d markers", generation, len(markers))
        for listener in list(self._listeners):
            listener(generation)
