"""Animal records as delivered by the static ``animals.json`` document."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .common import GeoCoordinate

LOGGER = logging.getLogger(__name__)


class RecordError(ValueError):
    """Raised when a record mapping cannot be turned into an AnimalRecord."""


class IucnStatus(str, Enum):
    CRITICALLY_ENDANGERED = "critically_endangered"
    ENDANGERED = "endangered"
    VULNERABLE = "vulnerable"
    NEAR_THREATENED = "near_threatened"
    LEAST_CONCERN = "least_concern"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def threatened(self) -> bool:
        return self in THREATENED_STATUSES

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["IucnStatus"]:
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


THREATENED_STATUSES = frozenset(
    {IucnStatus.CRITICALLY_ENDANGERED, IucnStatus.ENDANGERED, IucnStatus.VULNERABLE}
)


def status_label(raw: Optional[str]) -> str:
    status = IucnStatus.parse(raw)
    if status is not None:
        return status.label
    return raw or "Unknown"


def usable_location(lat: Any, lon: Any) -> Optional[GeoCoordinate]:
    """Return the coordinate when it is present, in range and not the (0, 0) sentinel.

    A record placed exactly at (0, 0) is treated as having no location at
    all; longitude is not normalised before the comparison. Latitudes outside
    [-90, 90] and longitudes outside [-180, 180] are not usable either.
    """
    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return None
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return None
    coordinate = GeoCoordinate(latitude=lat_f, longitude=lon_f)
    try:
        coordinate.validate()
    except ValueError:
        return None
    if coordinate.is_sentinel():
        return None
    return coordinate


@dataclass(frozen=True)
class Occurrence:
    country: Optional[str]
    lat: Optional[float]
    lon: Optional[float]

    @property
    def coordinate(self) -> Optional[GeoCoordinate]:
        return usable_location(self.lat, self.lon)


@dataclass(frozen=True)
class AnimalRecord:
    name: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    country: Optional[str] = None
    img: Optional[str] = None
    sound: Optional[str] = None
    iucn_status: Optional[str] = None
    habitat: Optional[str] = None
    fun_fact: Optional[str] = None
    occurrences: Tuple[Occurrence, ...] = field(default_factory=tuple)

    @property
    def coordinate(self) -> Optional[GeoCoordinate]:
        return usable_location(self.lat, self.lon)

    def has_location(self) -> bool:
        return self.coordinate is not None

    @property
    def status(self) -> Optional[IucnStatus]:
        return IucnStatus.parse(self.iucn_status)

    @property
    def initial(self) -> str:
        return self.name[:1].upper()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnimalRecord":
        if not isinstance(data, Mapping):
            raise RecordError(f"Expected a mapping, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise RecordError("Record is missing a name")
        raw_occurrences = data.get("occurrences")
        if raw_occurrences is None:
            raw_occurrences = []
        elif not isinstance(raw_occurrences, (list, tuple)):
            raise RecordError(f"Occurrences of {name!r} must be a list")
        occurrences: List[Occurrence] = []
        for item in raw_occurrences:
            if not isinstance(item, Mapping):
                raise RecordError(f"Invalid occurrence entry for {name!r}")
            occurrences.append(
                Occurrence(
                    country=_optional_text(item.get("country")),
                    lat=_optional_number(item.get("lat")),
                    lon=_optional_number(item.get("lon")),
                )
            )
        return cls(
            name=name.strip(),
            lat=_optional_number(data.get("lat")),
            lon=_optional_number(data.get("lon")),
            country=_optional_text(data.get("country")),
            img=_optional_text(data.get("img")),
            sound=_optional_text(data.get("sound")),
            iucn_status=_optional_text(data.get("iucn_status")),
            habitat=_optional_text(data.get("habitat")),
            fun_fact=_optional_text(data.get("fun_fact")),
            occurrences=tuple(occurrences),
        )


@dataclass(frozen=True)
class DiscrepancyReport:
    """A user note that a record's data looks wrong."""

    animal: str
    report: str

    @classmethod
    def from_input(cls, animal: str, text: Optional[str]) -> Optional["DiscrepancyReport"]:
        """Build a report from dialog input; blank input means the user backed out."""
        report = (text or "").strip()
        if not report:
            return None
        return cls(animal=animal, report=report)


def discrepancy_prompt(animal: str) -> str:
    return f"Report a discrepancy for: {animal}\n\nPlease describe the issue:"


def parse_records(items: Iterable[Any]) -> List[AnimalRecord]:
    records: List[AnimalRecord] = []
    for index, item in enumerate(items):
        try:
            records.append(AnimalRecord.from_mapping(item))
        except RecordError as exc:
            LOGGER.warning("Skipping animal record %d: %s", index, exc)
    LOGGER.debug("Parsed %d animal records", len(records))
    return records


def filter_records(
    records: Iterable[AnimalRecord],
    search: str = "",
    status: Optional[str] = None,
) -> List[AnimalRecord]:
    term = (search or "").strip().lower()
    wanted = status.value if isinstance(status, IucnStatus) else (status or None)
    return [
        record
        for record in records
        if term in record.name.lower() and (not wanted or record.iucn_status == wanted)
    ]


def _optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
