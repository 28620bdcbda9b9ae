"""Hover and detail-selection state for the globe markers.

The machine has two independent parts: the hovered marker (``Idle`` or
``Hovering``) and the open detail record. Both are stored as registry
handles, so a display-set recompute makes them unresolvable. The registry
notifies the machine right after every recompute and the stale state is
cleared before anything else can observe it.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .common import PULSE_AMPLITUDE, PULSE_RATE, TOOLTIP_OFFSET_PX, PointerState
from .picking import Camera, pick
from .records import AnimalRecord
from .registry import Marker, MarkerHandle, MarkerRegistry

LOGGER = logging.getLogger(__name__)


class HoverEventKind(str, Enum):
    ENTER = "enter"
    LEAVE = "leave"
    SELECT = "select"
    DETAIL_CLOSED = "detail_closed"


@dataclass(frozen=True)
class Tooltip:
    title: str
    subtitle: str
    screen_x: float
    screen_y: float


@dataclass(frozen=True)
class HoverEvent:
    kind: HoverEventKind
    record: Optional[AnimalRecord] = None
    label: Optional[str] = None
    tooltip: Optional[Tooltip] = None


HoverListener = Callable[[HoverEvent], None]


class HoverStateMachine:
    def __init__(
        self,
        registry: MarkerRegistry,
        *,
        pulse_rate: float = PULSE_RATE,
        pulse_amplitude: float = PULSE_AMPLITUDE,
    ) -> None:
        self._registry = registry
        self._pulse_rate = pulse_rate
        self._pulse_amplitude = pulse_amplitude
        self._hovered: Optional[MarkerHandle] = None
        # Kept only to lower is_hovered once the handle stops resolving.
        self._hovered_marker: Optional[Marker] = None
        self._tooltip: Optional[Tooltip] = None
        self._detail_handle: Optional[MarkerHandle] = None
        self._detail_record: Optional[AnimalRecord] = None
        self._listeners: List[HoverListener] = []
        registry.subscribe(self._on_display_set_changed)

    # ---- state accessors ----
    @property
    def hovered(self) -> Optional[Marker]:
        marker = self._registry.resolve(self._hovered)
        if marker is None and self._hovered is not None:
            self._force_clear_hover()
        return marker

    @property
    def state(self) -> str:
        return "hovering" if self.hovered is not None else "idle"

    @property
    def tooltip(self) -> Optional[Tooltip]:
        if self.hovered is None:
            return None
        return self._tooltip

    @property
    def detail(self) -> Optional[AnimalRecord]:
        if self._detail_handle is not None and not self._registry.is_valid(self._detail_handle):
            self._force_close_detail()
        return self._detail_record

    @property
    def detail_open(self) -> bool:
        return self.detail is not None

    def subscribe(self, callback: HoverListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: HoverListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ---- transitions ----
    def on_pointer_move(self, pointer: PointerState, camera: Camera) -> List[HoverEvent]:
        target = pick(pointer, camera, self._registry.markers)
        current = self.hovered
        events: List[HoverEvent] = []
        if target is current:
            return events
        if current is not None:
            events.append(self._exit(current))
        if target is not None:
            events.append(self._enter(target, pointer))
        for event in events:
            self._emit(event)
        return events

    def on_select(self, pointer: PointerState, camera: Camera) -> Optional[HoverEvent]:
        target = pick(pointer, camera, self._registry.markers)
        if target is None:
            return None
        self._detail_handle = target.handle
        self._detail_record = target.record
        LOGGER.debug("Detail opened for %s", target.label)
        event = HoverEvent(kind=HoverEventKind.SELECT, record=target.record, label=target.label)
        self._emit(event)
        return event

    def close_detail(self) -> Optional[HoverEvent]:
        if self._detail_record is None:
            return None
        return self._force_close_detail()

    def reset(self) -> None:
        """Drop hover and detail state, e.g. when the view is torn down."""
        marker = self._registry.resolve(self._hovered)
        if marker is not None:
            self._emit(self._exit(marker))
        elif self._hovered is not None:
            self._force_clear_hover()
        self.close_detail()

    def detach(self) -> None:
        self._registry.unsubscribe(self._on_display_set_changed)

    # ---- animation ----
    def animated_scale(self, marker: Marker, elapsed: float) -> float:
        """Render-only scale for ``marker``; hit testing uses ``hit_scale``."""
        if not marker.is_hovered or self._registry.resolve(self._hovered) is not marker:
            return marker.base_scale
        pulse = math.sin(elapsed * self._pulse_rate) * self._pulse_amplitude
        return marker.base_scale * marker.hover_factor + pulse

    # ---- internals ----
    def _enter(self, marker: Marker, pointer: PointerState) -> HoverEvent:
        marker.is_hovered = True
        self._hovered = marker.handle
        self._hovered_marker = marker
        dx, dy = TOOLTIP_OFFSET_PX
        self._tooltip = Tooltip(
            title=marker.label,
            subtitle=marker.location_text,
            screen_x=pointer.screen_x + dx,
            screen_y=pointer.screen_y + dy,
        )
        return HoverEvent(kind=HoverEventKind.ENTER, record=marker.record, label=marker.label, tooltip=self._tooltip)

    def _exit(self, marker: Marker) -> HoverEvent:
        marker.is_hovered = False
        self._hovered = None
        self._tooltip = None
        self._hovered_marker = None
        return HoverEvent(kind=HoverEventKind.LEAVE, record=marker.record, label=marker.label)

    def _on_display_set_changed(self, generation: int) -> None:
        if self._hovered is not None and self._hovered.generation != generation:
            self._force_clear_hover()
        if self._detail_handle is not None and self._detail_handle.generation != generation:
            self._force_close_detail()

    def _force_clear_hover(self) -> None:
        marker = self._hovered_marker
        record = marker.record if marker is not None else None
        label = marker.label if marker is not None else None
        if marker is not None:
            marker.is_hovered = False
        self._hovered = None
        self._tooltip = None
        self._hovered_marker = None
        LOGGER.debug("Cleared hover on destroyed marker %s", label)
        self._emit(HoverEvent(kind=HoverEventKind.LEAVE, record=record, label=label))

    def _force_close_detail(self) -> HoverEvent:
        record = self._detail_record
        self._detail_handle = None
        self._detail_record = None
        event = HoverEvent(kind=HoverEventKind.DETAIL_CLOSED, record=record)
        self._emit(event)
        return event

    def _emit(self, event: HoverEvent) -> None:
        for listener in list(self._listeners):
            listener(event)
