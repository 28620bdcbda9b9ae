"""Conversion of geographic coordinates and GeoJSON outlines onto the globe.

Positions follow the scene convention used by the renderer: +Y points at the
north pole and longitude is offset by 180 degrees so that the prime meridian
faces -X. GeoJSON positions are ``[lon, lat, ...]``; longitudes are projected
as given, without wrapping, and edges between vertices stay straight chords.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Sequence, Tuple

import numpy as np

from .common import SpherePoint

LOGGER = logging.getLogger(__name__)

SUPPORTED_GEOMETRIES = ("Polygon", "MultiPolygon", "LineString", "MultiLineString")


def project(lat: float, lon: float, radius: float) -> SpherePoint:
    phi = math.radians(90.0 - lat)
    theta = math.radians(lon + 180.0)
    if abs(lat) == 90.0:
        # sin(pi) is not exactly zero in floating point; pin the pole.
        return SpherePoint(0.0, radius * (1.0 if lat > 0 else -1.0), 0.0)
    sin_phi = math.sin(phi)
    x = -radius * sin_phi * math.cos(theta)
    y = radius * math.cos(phi)
    z = radius * sin_phi * math.sin(theta)
    return SpherePoint(x, y, z)


def project_array(lats: Sequence[float] | np.ndarray, lons: Sequence[float] | np.ndarray, radius: float) -> np.ndarray:
    lat_arr = np.asarray(lats, dtype=np.float64)
    lon_arr = np.asarray(lons, dtype=np.float64)
    if lat_arr.shape != lon_arr.shape:
        raise ValueError("Latitude and longitude arrays must share a shape")
    phi = np.radians(90.0 - lat_arr)
    theta = np.radians(lon_arr + 180.0)
    sin_phi = np.where(np.abs(lat_arr) == 90.0, 0.0, np.sin(phi))
    points = np.empty(lat_arr.shape + (3,), dtype=np.float64)
    points[..., 0] = -radius * sin_phi * np.cos(theta)
    points[..., 1] = radius * np.cos(phi)
    points[..., 2] = radius * sin_phi * np.sin(theta)
    return points


@dataclass(frozen=True)
class BoundaryRing:
    points: np.ndarray
    closed: bool

    def __len__(self) -> int:
        return int(self.points.shape[0])


@dataclass(frozen=True)
class BoundaryGeometry:
    """Outline rings of a single GeoJSON feature, already on the sphere."""

    rings: Tuple[BoundaryRing, ...]
    radius: float

    def __iter__(self) -> Iterator[BoundaryRing]:
        return iter(self.rings)

    def __len__(self) -> int:
        return len(self.rings)

    @property
    def vertex_count(self) -> int:
        return sum(len(ring) for ring in self.rings)


def project_boundary(geometry: Mapping[str, Any], radius: float) -> BoundaryGeometry:
    gtype = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if gtype == "Polygon":
        raw = [(ring, True) for ring in coords]
    elif gtype == "MultiPolygon":
        raw = [(ring, True) for polygon in coords for ring in polygon]
    elif gtype == "LineString":
        raw = [(coords, _same_position(coords))]
    elif gtype == "MultiLineString":
        raw = [(line, _same_position(line)) for line in coords]
    else:
        raise ValueError(f"Unsupported geometry type {gtype!r}")

    rings: List[BoundaryRing] = []
    for positions, closed in raw:
        if len(positions) < 2:
            LOGGER.debug("Skipping degenerate %s ring with %d positions", gtype, len(positions))
            continue
        rings.append(_project_ring(positions, radius, closed))
    return BoundaryGeometry(rings=tuple(rings), radius=radius)


def project_document(document: Mapping[str, Any], radius: float) -> List[BoundaryGeometry]:
    """Project every supported feature of a GeoJSON document."""
    results: List[BoundaryGeometry] = []
    for geometry in _iter_geometries(document):
        gtype = geometry.get("type")
        if gtype not in SUPPORTED_GEOMETRIES:
            LOGGER.warning("Skipping unsupported GeoJSON geometry %s", gtype)
            continue
        boundary = project_boundary(geometry, radius)
        if boundary.rings:
            results.append(boundary)
    LOGGER.debug(
        "Projected %d boundary features (%d vertices)",
        len(results),
        sum(b.vertex_count for b in results),
    )
    return results


def _iter_geometries(document: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
    if not isinstance(document, Mapping):
        raise ValueError(f"Malformed GeoJSON object {document!r}")
    dtype = document.get("type")
    if dtype == "FeatureCollection":
        for feature in document.get("features") or []:
            yield from _iter_geometries(feature)
    elif dtype == "Feature":
        geometry = document.get("geometry")
        if geometry:
            yield from _iter_geometries(geometry)
    elif dtype == "GeometryCollection":
        for geometry in document.get("geometries") or []:
            yield from _iter_geometries(geometry)
    elif dtype is not None:
        yield document


def _project_ring(positions: Sequence[Sequence[float]], radius: float, closed: bool) -> BoundaryRing:
    pairs = []
    for p in positions:
        if isinstance(p, (str, bytes)) or not isinstance(p, Sequence) or len(p) < 2:
            raise ValueError(f"Malformed position {p!r}")
        try:
            pairs.append((float(p[0]), float(p[1])))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Malformed position {p!r}") from exc
    arr = np.asarray(pairs, dtype=np.float64).reshape(-1, 2)
    points = project_array(arr[:, 1], arr[:, 0], radius)
    points.setflags(write=False)
    return BoundaryRing(points=points, closed=closed)


def _same_position(positions: Sequence[Sequence[float]]) -> bool:
    if len(positions) < 2:
        return False
    first, last = positions[0], positions[-1]
    try:
        return float(first[0]) == float(last[0]) and float(first[1]) == float(last[1])
    except (IndexError, TypeError, ValueError):
        # Malformed positions are reported by _project_ring.
        return False
