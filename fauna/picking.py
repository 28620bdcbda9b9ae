"""Camera model and ray casting against camera-facing marker quads."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .common import PointerState
from .registry import Marker

CAMERA_DISTANCE_MIN = 2.5
CAMERA_DISTANCE_MAX = 20.0
PITCH_LIMIT = math.radians(89.0)


@dataclass(frozen=True)
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    def at(self, t: float) -> np.ndarray:
        return self.origin + self.direction * t


@dataclass(frozen=True)
class Hit:
    marker: Marker
    distance: float


class Camera:
    """Perspective camera looking at a target, orbiting it on request."""

    def __init__(
        self,
        position: Sequence[float] = (0.0, 0.0, 5.0),
        target: Sequence[float] = (0.0, 0.0, 0.0),
        up: Sequence[float] = (0.0, 1.0, 0.0),
        *,
        fov_y_deg: float = 75.0,
        aspect: float = 1.0,
        near: float = 1.0,
        far: float = 100.0,
    ) -> None:
        self.position = np.asarray(position, dtype=np.float64)
        self.target = np.asarray(target, dtype=np.float64)
        self.up = np.asarray(up, dtype=np.float64)
        self.fov_y_deg = float(fov_y_deg)
        self.aspect = max(float(aspect), 1e-6)
        self.near = float(near)
        self.far = float(far)
        if np.linalg.norm(self.position - self.target) <= 1e-9:
            raise ValueError("Camera position and target must differ")

    def set_aspect(self, width: int, height: int) -> None:
        self.aspect = max(1, width) / max(1, height)

    def basis(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        forward = self.target - self.position
        forward = forward / np.linalg.norm(forward)
        right = np.cross(forward, self.up)
        norm = np.linalg.norm(right)
        if norm < 1e-9:
            # Looking straight along the up vector; pick any perpendicular.
            right = np.cross(forward, np.array([0.0, 0.0, 1.0]))
            norm = np.linalg.norm(right)
        right = right / norm
        true_up = np.cross(right, forward)
        return right, true_up, forward

    def view_matrix(self) -> np.ndarray:
        right, true_up, forward = self.basis()
        view = np.identity(4, dtype=np.float64)
        view[0, :3] = right
        view[1, :3] = true_up
        view[2, :3] = -forward
        view[0, 3] = -np.dot(right, self.position)
        view[1, 3] = -np.dot(true_up, self.position)
        view[2, 3] = np.dot(forward, self.position)
        return view

    def projection_matrix(self, *, far: Optional[float] = None) -> np.ndarray:
        f = 1.0 / math.tan(math.radians(self.fov_y_deg) / 2.0)
        z_near = self.near
        z_far = self.far if far is None else float(far)
        return np.asarray([
            [f / self.aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (z_far + z_near) / (z_near - z_far), (2.0 * z_far * z_near) / (z_near - z_far)],
            [0.0, 0.0, -1.0, 0.0],
        ], dtype=np.float64)

    def ray_from_ndc(self, ndc_x: float, ndc_y: float) -> Ray:
        right, true_up, forward = self.basis()
        tan_half = math.tan(math.radians(self.fov_y_deg) / 2.0)
        direction = forward + right * (ndc_x * tan_half * self.aspect) + true_up * (ndc_y * tan_half)
        direction = direction / np.linalg.norm(direction)
        return Ray(origin=self.position.copy(), direction=direction)

    def project_to_ndc(self, point: Sequence[float]) -> Optional[np.ndarray]:
        clip = self.projection_matrix() @ self.view_matrix() @ np.append(np.asarray(point, dtype=np.float64), 1.0)
        if clip[3] <= 1e-9:
            return None
        return clip[:3] / clip[3]

    def orbit(self, yaw: float, pitch: float) -> None:
        offset = self.position - self.target
        distance = float(np.linalg.norm(offset))
        current_pitch = math.asin(max(-1.0, min(1.0, offset[1] / distance)))
        current_yaw = math.atan2(offset[0], offset[2])
        new_pitch = max(-PITCH_LIMIT, min(PITCH_LIMIT, current_pitch + pitch))
        new_yaw = current_yaw + yaw
        self.position = self.target + distance * np.array(
            [
                math.cos(new_pitch) * math.sin(new_yaw),
                math.sin(new_pitch),
                math.cos(new_pitch) * math.cos(new_yaw),
            ],
            dtype=np.float64,
        )

    def zoom(self, delta: float) -> None:
        offset = self.position - self.target
        distance = float(np.linalg.norm(offset))
        direction = offset / distance
        distance = float(np.clip(distance - delta, CAMERA_DISTANCE_MIN, CAMERA_DISTANCE_MAX))
        self.position = self.target + direction * distance


def intersect_markers(ray: Ray, markers: Sequence[Marker], camera: Camera) -> List[Hit]:
    """All markers whose camera-facing quad is crossed by ``ray``, nearest first.

    Quads are sized by ``Marker.hit_scale`` and centred on the marker's base
    position; animated render scales play no part here.
    """
    if not markers:
        return []
    right, true_up, forward = camera.basis()
    centers = np.asarray([m.position.as_array() for m in markers], dtype=np.float64)
    half = np.asarray([m.hit_scale for m in markers], dtype=np.float64) * 0.5

    to_center = centers - ray.origin
    depth = to_center @ forward
    denom = float(np.dot(ray.direction, forward))
    if denom <= 1e-12:
        return []
    t = depth / denom
    hit_points = ray.origin + np.outer(t, ray.direction)
    offsets = hit_points - centers
    u = offsets @ right
    v = offsets @ true_up
    mask = (
        (depth > camera.near)
        & (depth <= camera.far)
        & (np.abs(u) <= half)
        & (np.abs(v) <= half)
    )
    indices = np.nonzero(mask)[0]
    order = indices[np.argsort(t[indices], kind="stable")]
    return [Hit(marker=markers[i], distance=float(t[i])) for i in order]


def pick(pointer: PointerState, camera: Camera, markers: Sequence[Marker]) -> Optional[Marker]:
    ray = camera.ray_from_ndc(pointer.ndc_x, pointer.ndc_y)
    hits = intersect_markers(ray, markers, camera)
    return hits[0].marker if hits else None
