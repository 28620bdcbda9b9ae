"""Background loading of boundary, record and portrait data.

Work runs on a small thread pool; the render loop calls ``poll()`` once per
frame on the main thread and applies whatever finished. Nothing here touches
the marker registry directly, so all scene mutation stays on the main thread.
"""
from __future__ import annotations

import io
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Hashable, List, Optional, Tuple

import requests
from PIL import Image, UnidentifiedImageError
from requests import exceptions as requests_exceptions

from fauna import AnimalRecord, BoundaryGeometry, MarkerHandle, parse_records, project_document

from .geodata import (
    DataSourceError,
    is_remote,
    load_boundary_document,
    load_record_list,
    resolve_boundary_source,
)
from .sprites import portrait_icon

LOGGER = logging.getLogger(__name__)


class LoadKind(str, Enum):
    BOUNDARIES = "boundaries"
    RECORDS = "records"
    IMAGE = "image"


@dataclass(frozen=True)
class LoadResult:
    kind: LoadKind
    key: Hashable
    payload: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AsyncLoader:
    def __init__(self, *, max_workers: int = 4, image_size: int = 128) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="fauna-load")
        self._futures: List[Tuple[LoadKind, Hashable, Future]] = []
        self._image_size = image_size
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._futures)

    def load_boundaries(self, source: str | Path | None, radius: float, *, download_missing: bool = False) -> None:
        self._submit(LoadKind.BOUNDARIES, str(source), _read_boundaries, source, radius, download_missing)

    def load_records(self, source: str | Path) -> None:
        self._submit(LoadKind.RECORDS, str(source), _read_records, source)

    def load_marker_image(self, handle: MarkerHandle, source: str, status: Optional[str]) -> None:
        self._submit(LoadKind.IMAGE, handle, _read_portrait, source, status, self._image_size)

    def poll(self) -> List[LoadResult]:
        if not self._futures:
            return []
        results: List[LoadResult] = []
        still_running: List[Tuple[LoadKind, Hashable, Future]] = []
        for kind, key, future in self._futures:
            if not future.done():
                still_running.append((kind, key, future))
                continue
            if future.cancelled():
                continue
            try:
                payload = future.result()
            except (DataSourceError, OSError, RuntimeError, ValueError) as exc:
                LOGGER.warning("Loading %s %s failed: %s", kind.value, key, exc)
                results.append(LoadResult(kind=kind, key=key, error=str(exc)))
                continue
            results.append(LoadResult(kind=kind, key=key, payload=payload))
        self._futures = still_running
        return results

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        for _, _, future in self._futures:
            future.cancel()
        self._futures = []
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _submit(self, kind: LoadKind, key: Hashable, fn, *args) -> None:
        if self._closed:
            raise RuntimeError("Loader has been shut down")
        self._futures.append((kind, key, self._executor.submit(fn, *args)))


def _read_boundaries(source: str | Path | None, radius: float, download_missing: bool) -> List[BoundaryGeometry]:
    resolved = resolve_boundary_source(source, download_missing=download_missing)
    if resolved is None:
        raise DataSourceError("No boundary document available")
    document = load_boundary_document(resolved)
    try:
        return project_document(document, radius)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise DataSourceError(f"Malformed boundary document {resolved}: {exc}") from exc


def _read_records(source: str | Path) -> List[AnimalRecord]:
    records = load_record_list(source)
    try:
        return parse_records(records)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise DataSourceError(f"Malformed record list {source}: {exc}") from exc


def _read_portrait(source: str, status: Optional[str], size: int) -> Image.Image:
    return portrait_icon(fetch_image(source), status, size=size)


def fetch_image(source: str, *, timeout: float = 20.0) -> Image.Image:
    if is_remote(source):
        try:
            response = requests.get(source, timeout=(5, timeout))
            response.raise_for_status()
        except requests_exceptions.RequestException as exc:
            raise RuntimeError(f"Image request failed: {exc}") from exc
        data = response.content or b""
    else:
        data = Path(source).expanduser().read_bytes()
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise RuntimeError(f"{source} is not a readable image") from exc
