"""Parsing and filtering of animal records."""

from __future__ import annotations

import logging

import pytest

from fauna import AnimalRecord, DiscrepancyReport, IucnStatus, RecordError, filter_records, parse_records
from fauna.records import discrepancy_prompt, status_label, usable_location


def _record(name, status=None, lat=10.0, lon=20.0, **extra):
    return AnimalRecord(name=name, lat=lat, lon=lon, iucn_status=status, **extra)


def test_from_mapping_reads_all_fields():
    record = AnimalRecord.from_mapping(
        {
            "name": " Snow Leopard ",
            "lat": "35.5",
            "lon": 78,
            "country": "India",
            "img": "https://example.org/leopard.jpg",
            "iucn_status": "vulnerable",
            "habitat": "Mountains",
            "fun_fact": "",
            "occurrences": [{"country": "Nepal", "lat": 28.3, "lon": 84.1}],
        }
    )
    assert record.name == "Snow Leopard"
    assert record.lat == 35.5
    assert record.fun_fact is None
    assert record.status is IucnStatus.VULNERABLE
    assert record.initial == "S"
    assert record.occurrences[0].country == "Nepal"
    assert record.occurrences[0].coordinate.latitude == 28.3


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"lat": 1, "lon": 2},
        {"name": "   "},
        {"name": "Lynx", "occurrences": ["Spain"]},
    ],
)
def test_from_mapping_rejects_bad_input(data):
    with pytest.raises(RecordError):
        AnimalRecord.from_mapping(data)


def test_parse_records_skips_invalid_entries(caplog):
    with caplog.at_level(logging.WARNING, logger="fauna.records"):
        records = parse_records([{"name": "Wolf", "lat": 1, "lon": 1}, {"lat": 2}, 42])
    assert [r.name for r in records] == ["Wolf"]
    assert "Skipping animal record 1" in caplog.text


@pytest.mark.parametrize("occurrences", [5, True, "Kenya", {"country": "Kenya"}])
def test_non_list_occurrences_skip_the_record(caplog, occurrences):
    with caplog.at_level(logging.WARNING, logger="fauna.records"):
        records = parse_records(
            [
                {"name": "Bad", "lat": 1, "lon": 2, "occurrences": occurrences},
                {"name": "Good", "lat": 3, "lon": 4},
            ]
        )
    assert [r.name for r in records] == ["Good"]
    assert "Skipping animal record 0" in caplog.text


def test_zero_zero_is_treated_as_missing():
    assert not _record("Nowhere", lat=0, lon=0).has_location()
    assert _record("Equator", lat=0, lon=45).has_location()
    assert _record("Meridian", lat=45, lon=0).has_location()


@pytest.mark.parametrize(
    "lat, lon",
    [
        (None, 10.0),
        (10.0, None),
        (True, 1.0),
        ("north", 1.0),
        (float("nan"), 1.0),
        (1.0, float("inf")),
        (120.0, 10.0),
        (-90.5, 10.0),
        (10.0, 200.0),
        (10.0, -180.01),
    ],
)
def test_unusable_locations(lat, lon):
    assert usable_location(lat, lon) is None


def test_range_edges_are_usable():
    assert usable_location(90, 180) is not None
    assert usable_location(-90, -180) is not None
    assert not _record("Bogus", lat=120.0, lon=10.0).has_location()


def test_filter_by_search_is_case_insensitive():
    records = [_record("Red Fox"), _record("Arctic Fox"), _record("Wolf")]
    assert [r.name for r in filter_records(records, search="fox")] == ["Red Fox", "Arctic Fox"]
    assert [r.name for r in filter_records(records, search="  WOLF ")] == ["Wolf"]
    assert len(filter_records(records)) == 3


def test_filter_by_status_accepts_enum_or_string():
    records = [_record("Tiger", "endangered"), _record("Fox", "least_concern"), _record("Unknown")]
    assert [r.name for r in filter_records(records, status="endangered")] == ["Tiger"]
    assert [r.name for r in filter_records(records, status=IucnStatus.LEAST_CONCERN)] == ["Fox"]
    assert [r.name for r in filter_records(records, search="o", status="least_concern")] == ["Fox"]


def test_status_labels():
    assert status_label("critically_endangered") == "Critically Endangered"
    assert status_label("data_deficient") == "data_deficient"
    assert status_label(None) == "Unknown"
    assert IucnStatus.ENDANGERED.threatened
    assert not IucnStatus.NEAR_THREATENED.threatened
    assert IucnStatus.parse(" Vulnerable ") is IucnStatus.VULNERABLE
    assert IucnStatus.parse("extinct") is None


def test_discrepancy_report_from_dialog_input():
    report = DiscrepancyReport.from_input("Snow Leopard", "  Range is wrong  ")
    assert report == DiscrepancyReport(animal="Snow Leopard", report="Range is wrong")
    assert DiscrepancyReport.from_input("Snow Leopard", "   ") is None
    assert DiscrepancyReport.from_input("Snow Leopard", None) is None
    assert discrepancy_prompt("Snow Leopard").startswith("Report a discrepancy for: Snow Leopard\n")
