"""Per-frame driver for the globe view.

The host supplies ``request_frame`` (schedule a callback for the next frame)
and ``render`` (draw a snapshot). The scheduler owns the ``FrameContext`` for
as long as the view is visible and stops rescheduling itself as soon as the
view is left.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np

from .common import HOVER_SCALE_FACTOR, MARKER_BASE_SCALE, MARKER_RADIUS, PointerState
from .hover import HoverEvent, HoverStateMachine, Tooltip
from .picking import Camera
from .projection import BoundaryGeometry
from .records import AnimalRecord
from .registry import Marker, MarkerHandle, MarkerRegistry

LOGGER = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


@dataclass(frozen=True)
class MarkerTransform:
    handle: MarkerHandle
    position: np.ndarray
    scale: float
    marker: Marker


@dataclass(frozen=True)
class FrameSnapshot:
    elapsed: float
    camera: Camera
    markers: Tuple[MarkerTransform, ...]
    boundaries: Tuple[BoundaryGeometry, ...]
    tooltip: Optional[Tooltip]


@dataclass
class FrameContext:
    camera: Camera
    registry: MarkerRegistry
    hover: HoverStateMachine
    started_at: float
    pointer: Optional[PointerState] = None
    boundaries: List[BoundaryGeometry] = field(default_factory=list)

    def teardown(self) -> None:
        self.hover.reset()
        self.hover.detach()
        self.registry.clear()
        self.boundaries.clear()
        self.pointer = None


class FrameScheduler:
    def __init__(
        self,
        request_frame: Callable[[FrameCallback], None],
        render: Callable[[FrameSnapshot], None],
        *,
        clock: Callable[[], float] = time.monotonic,
        marker_radius: float = MARKER_RADIUS,
        marker_base_scale: float = MARKER_BASE_SCALE,
        hover_factor: float = HOVER_SCALE_FACTOR,
    ) -> None:
        self._request_frame = request_frame
        self._render = render
        self._clock = clock
        self._marker_radius = marker_radius
        self._marker_base_scale = marker_base_scale
        self._hover_factor = hover_factor
        self._context: Optional[FrameContext] = None
        self._active = False
        self._hover_listeners: List[Callable[[HoverEvent], None]] = []

    @property
    def active(self) -> bool:
        return self._active

    @property
    def context(self) -> Optional[FrameContext]:
        return self._context

    def add_hover_listener(self, callback: Callable[[HoverEvent], None]) -> None:
        self._hover_listeners.append(callback)
        if self._context is not None:
            self._context.hover.subscribe(callback)

    def enter_view(self, camera: Optional[Camera] = None) -> FrameContext:
        if self._active:
            raise RuntimeError("Globe view is already active")
        registry = MarkerRegistry(
            radius=self._marker_radius,
            base_scale=self._marker_base_scale,
            hover_factor=self._hover_factor,
        )
        hover = HoverStateMachine(registry)
        for callback in self._hover_listeners:
            hover.subscribe(callback)
        self._context = FrameContext(
            camera=camera or Camera(),
            registry=registry,
            hover=hover,
            started_at=self._clock(),
        )
        self._active = True
        LOGGER.debug("Globe view entered")
        self._request_frame(self._tick)
        return self._context

    def exit_view(self) -> None:
        if not self._active:
            return
        self._active = False
        context, self._context = self._context, None
        if context is not None:
            context.teardown()
        LOGGER.debug("Globe view left")

    # ---- input and load completions ----
    def pointer_moved(self, x: float, y: float, width: int, height: int) -> List[HoverEvent]:
        context = self._context
        if context is None:
            return []
        pointer = PointerState.from_screen(x, y, width, height)
        context.pointer = pointer
        return context.hover.on_pointer_move(pointer, context.camera)

    def double_clicked(self, x: float, y: float, width: int, height: int) -> Optional[HoverEvent]:
        context = self._context
        if context is None:
            return None
        pointer = PointerState.from_screen(x, y, width, height)
        context.pointer = pointer
        return context.hover.on_select(pointer, context.camera)

    def add_boundaries(self, geometries: Iterable[BoundaryGeometry]) -> None:
        if self._context is None:
            LOGGER.debug("Boundaries arrived after the view closed; ignoring")
            return
        self._context.boundaries.extend(geometries)

    def show_records(self, records: Iterable[AnimalRecord]) -> List[Marker]:
        if self._context is None:
            LOGGER.debug("Records arrived after the view closed; ignoring")
            return []
        return self._context.registry.set_display_set(records)

    def show_occurrences(self, record: AnimalRecord) -> List[Marker]:
        if self._context is None:
            return []
        return self._context.registry.expand_occurrences(record)

    # ---- frame loop ----
    def snapshot(self, now: Optional[float] = None) -> Optional[FrameSnapshot]:
        context = self._context
        if context is None:
            return None
        current = self._clock() if now is None else now
        elapsed = max(0.0, current - context.started_at)
        markers = context.registry.markers
        positions = context.registry.positions()
        positions.setflags(write=False)
        transforms = tuple(
            MarkerTransform(
                handle=marker.handle,
                position=positions[index],
                scale=context.hover.animated_scale(marker, elapsed),
                marker=marker,
            )
            for index, marker in enumerate(markers)
        )
        return FrameSnapshot(
            elapsed=elapsed,
            camera=context.camera,
            markers=transforms,
            boundaries=tuple(context.boundaries),
            tooltip=context.hover.tooltip,
        )

    def _tick(self, now: float) -> None:
        if not self._active:
            return
        snapshot = self.snapshot(now)
        if snapshot is None:
            return
        self._render(snapshot)
        if self._active:
            self._request_frame(self._tick)
