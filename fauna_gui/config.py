from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from fauna.common import GLOBE_RADIUS, HOVER_SCALE_FACTOR, MARKER_BASE_SCALE, MARKER_RADIUS

from .geodata import DEFAULT_DATA_DIR, DEFAULT_RECORDS_NAME


def _hex_to_rgb(value: str) -> Tuple[float, float, float]:
    value = value.lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Expected hex color in format RRGGBB, got: {value}")
    r = int(value[0:2], 16) / 255.0
    g = int(value[2:4], 16) / 255.0
    b = int(value[4:6], 16) / 255.0
    return r, g, b


THEME_BACKGROUND = _hex_to_rgb('#000000')
THEME_GRID = _hex_to_rgb('#ffffff')
THEME_GRID_ALPHA = 0.4
THEME_BOUNDARY = _hex_to_rgb('#80ff80')
THEME_STAR = _hex_to_rgb('#ffffff')


@dataclass
class ViewerConfig:
    width: int = 1280
    height: int = 720
    title: str = "Fauna Globe"
    boundary_source: str | Path | None = None
    records_source: str | Path = DEFAULT_DATA_DIR / DEFAULT_RECORDS_NAME
    download_missing_boundaries: bool = True
    globe_radius: float = GLOBE_RADIUS
    marker_radius: float = MARKER_RADIUS
    marker_base_scale: float = MARKER_BASE_SCALE
    hover_factor: float = HOVER_SCALE_FACTOR
    grid_segments: int = 32
    star_count: int = 1000
    image_workers: int = 4
    image_size: int = 128
    double_click_interval: float = 0.3

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Window size must be positive")
        if self.globe_radius <= 0 or self.marker_radius <= 0:
            raise ValueError("Globe and marker radii must be positive")
        if self.marker_base_scale <= 0:
            raise ValueError("marker_base_scale must be positive")
        if self.hover_factor < 1.0:
            raise ValueError("hover_factor must be at least 1")
        if self.grid_segments < 3:
            raise ValueError("grid_segments must be at least 3")
        if self.star_count < 0:
            raise ValueError("star_count cannot be negative")
        if self.double_click_interval <= 0:
            raise ValueError("double_click_interval must be positive")
