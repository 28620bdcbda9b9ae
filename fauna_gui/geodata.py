"""Reading the static boundary and animal documents for the globe viewer.

Sources are either local paths or http(s) URLs. The Natural Earth land outline
can be fetched into ``data/`` on first use when no local copy exists.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Sequence

import requests

LOGGER = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_BOUNDARY_NAME = "ne_110m_land.geojson"
DEFAULT_RECORDS_NAME = "animals.json"

NE_DOWNLOADS = {
    'ne_110m_land.json': 'https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/geojson/ne_110m_land.geojson',
    'ne_110m_land.geojson': 'https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/geojson/ne_110m_land.geojson',
    'ne_50m_land.geojson': 'https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/geojson/ne_50m_land.geojson',
}


@dataclass
class DataSourceError(RuntimeError):
    """Raised when a JSON/GeoJSON source cannot be read or parsed."""

    message: str

    def __str__(self) -> str:
        return self.message


def is_remote(source: str | Path) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def read_json_source(source: str | Path, *, timeout: float = 30.0) -> Any:
    if is_remote(source):
        try:
            response = requests.get(str(source), timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DataSourceError(f"Failed to download {source}: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise DataSourceError(f"{source} did not return valid JSON") from exc

    path = Path(source).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DataSourceError(f"Cannot read {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataSourceError(f"Invalid JSON in {path}: {exc}") from exc


def load_boundary_document(source: str | Path) -> dict:
    data = read_json_source(source)
    if not isinstance(data, dict) or "type" not in data:
        raise DataSourceError(f"{source} is not a GeoJSON document")
    return data


def load_record_list(source: str | Path) -> List[Any]:
    data = read_json_source(source)
    if not isinstance(data, list):
        raise DataSourceError(f"{source} must contain a JSON list of animal records")
    return data


def resolve_boundary_source(
    hint: str | Path | None,
    *,
    data_dir: Path = DEFAULT_DATA_DIR,
    download_missing: bool = True,
) -> str | Path | None:
    """Pick the boundary document to load: explicit hint, local copy, then download."""
    if hint is not None and (is_remote(hint) or Path(hint).expanduser().exists()):
        return hint
    if hint is not None:
        LOGGER.warning("Boundary source %s not found, looking for a local copy", hint)
    names = (DEFAULT_BOUNDARY_NAME, DEFAULT_BOUNDARY_NAME.replace(".geojson", ".json"))
    local = next(_first_match_all([data_dir], names), None)
    if local is not None:
        return local
    if not download_missing:
        return None
    return _ensure_natural_earth_resource(data_dir, names)


def _first_match_all(roots: Sequence[Path], names: Sequence[str]) -> Iterator[Path]:
    seen: set[Path] = set()
    for root in roots:
        if not root.exists() or not root.is_dir():
            continue
        for name in names:
            for match in root.rglob(name):
                resolved = match.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                yield resolved


def _ensure_natural_earth_resource(data_dir: Path, names: Sequence[str]) -> Path | None:
    for name in names:
        url = NE_DOWNLOADS.get(name)
        if not url:
            continue
        target = data_dir / name
        try:
            response = requests.get(url, timeout=30)
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.warning("Failed to download %s: %s", name, exc)
            continue
        data_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(response.content)
        LOGGER.info("Downloaded %s to %s", name, target)
        return target
    return None
