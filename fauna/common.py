from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

# Scene units: the wireframe globe has radius 2, markers float just above it.
GLOBE_RADIUS = 2.0
MARKER_RADIUS = 2.1
MARKER_BASE_SCALE = 0.4
HOVER_SCALE_FACTOR = 1.5
# Hover pulse, radians per second and scale units.
PULSE_RATE = 3.0
PULSE_AMPLITUDE = 0.1
TOOLTIP_OFFSET_PX = (10.0, -10.0)


@dataclass(frozen=True)
class GeoCoordinate:
    """Geographic position expressed in degrees."""

    latitude: float
    longitude: float

    def validate(self) -> None:
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValueError("Coordinates must be finite numbers")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("Latitude must lie within [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("Longitude must lie within [-180, 180]")

    def is_sentinel(self) -> bool:
        return self.latitude == 0.0 and self.longitude == 0.0


@dataclass(frozen=True)
class SpherePoint:
    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        return np.array((self.x, self.y, self.z), dtype=np.float64)

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


@dataclass(frozen=True)
class PointerState:
    """Last known pointer position, both in NDC and in window pixels."""

    ndc_x: float
    ndc_y: float
    screen_x: float = 0.0
    screen_y: float = 0.0

    @classmethod
    def from_screen(cls, x: float, y: float, width: int, height: int) -> "PointerState":
        width = max(1, int(width))
        height = max(1, int(height))
        ndc_x = (x / width) * 2.0 - 1.0
        ndc_y = -(y / height) * 2.0 + 1.0
        return cls(ndc_x=ndc_x, ndc_y=ndc_y, screen_x=float(x), screen_y=float(y))
