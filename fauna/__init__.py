from .common import (
    GLOBE_RADIUS,
    HOVER_SCALE_FACTOR,
    MARKER_BASE_SCALE,
    MARKER_RADIUS,
    GeoCoordinate,
    PointerState,
    SpherePoint,
)
from .projection import BoundaryGeometry, BoundaryRing, project, project_array, project_boundary, project_document
from .records import (
    AnimalRecord,
    DiscrepancyReport,
    IucnStatus,
    Occurrence,
    RecordError,
    filter_records,
    parse_records,
)
from .registry import Marker, MarkerHandle, MarkerRegistry
from .picking import Camera, Hit, Ray, intersect_markers, pick
from .hover import HoverEvent, HoverEventKind, HoverStateMachine, Tooltip
from .scheduler import FrameContext, FrameScheduler, FrameSnapshot, MarkerTransform

__all__ = [
    'GLOBE_RADIUS',
    'HOVER_SCALE_FACTOR',
    'MARKER_BASE_SCALE',
    'MARKER_RADIUS',
    'GeoCoordinate',
    'PointerState',
    'SpherePoint',
    'BoundaryGeometry',
    'BoundaryRing',
    'project',
    'project_array',
    'project_boundary',
    'project_document',
    'AnimalRecord',
    'DiscrepancyReport',
    'IucnStatus',
    'Occurrence',
    'RecordError',
    'filter_records',
    'parse_records',
    'Marker',
    'MarkerHandle',
    'MarkerRegistry',
    'Camera',
    'Hit',
    'Ray',
    'intersect_markers',
    'pick',
    'HoverEvent',
    'HoverEventKind',
    'HoverStateMachine',
    'Tooltip',
    'FrameContext',
    'FrameScheduler',
    'FrameSnapshot',
    'MarkerTransform',
]
