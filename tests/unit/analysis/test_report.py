"""
Tests for the descriptive report.
"""

import json

import pytest

from src.analysis.report import SENTINELS, ReportBuilder, build_report


@pytest.fixture
def report(sample_cleaned_data, test_config):
    return ReportBuilder(test_config).build(sample_cleaned_data)


def test_expected_sections(report):
    names = set(report.sections)
    for group_by in ["year", "month_name", "day_of_week", "hour", "time_of_day"]:
        assert f"incidents_by_{group_by}" in names
    assert "incidents_by_borough" in names
    assert "incidents_by_precinct" in names
    for field in SENTINELS:
        assert field in names
        assert f"{field}_known" in names
    assert "murder_rate_by_borough" in names
    assert "murder_rate_by_time_of_day" in names


def test_section_counts_cover_input(report, sample_cleaned_data):
    assert report.record_count == len(sample_cleaned_data)
    for section in report.sections.values():
        if section.name.startswith("murder_rate"):
            continue
        assert sum(b.count for b in section.buckets) == section.total


def test_sentinels_excluded_from_known_view(report):
    raw = {b.key for b in report["victim_sex"].buckets}
    known = report["victim_sex_known"]

    assert "U" in raw
    assert "U" not in {b.key for b in known.buckets}
    assert known.filtered
    assert known.total == 4
    assert sum(b.percentage for b in known.buckets) == pytest.approx(100.0)


def test_perp_unknowns_dropped_from_known_view(report):
    known_keys = {b.key for b in report["perp_race_known"].buckets}
    assert known_keys == {"BLACK", "WHITE"}


def test_time_of_day_section(report):
    buckets = {b.key: b.count for b in report["incidents_by_time_of_day"].buckets}
    # hours 14, 2, 21, 18, 0
    assert buckets == {"Afternoon": 1, "Night": 2, "Evening": 2}


def test_spatial_sections_only_count_geocoded(sample_raw_data, mutable_config):
    from src.datasets.shootings.preprocess import ShootingPreprocessor
    from src.shared.config import FieldPolicy

    mutable_config.cleaning.missing_policy["latitude"] = FieldPolicy(action="keep")
    mutable_config.cleaning.missing_policy["longitude"] = FieldPolicy(action="keep")
    preprocessor = ShootingPreprocessor(mutable_config)
    preprocessor.run(sample_raw_data)
    cleaned = preprocessor.get_data()

    report = build_report(cleaned, mutable_config)

    assert report.record_count == 6
    assert report["incidents_by_borough"].total == 5
    assert report["incidents_by_borough"].filtered
    assert report["incidents_by_year"].total == 6


def test_murder_rates(report):
    rates = {b.key: b.percentage for b in report["murder_rate_by_borough"].buckets}
    assert rates["BROOKLYN"] == pytest.approx(100.0)
    assert rates["BRONX"] == 0.0


def test_crosstabs(report, sample_cleaned_data):
    table = report.crosstabs["year_by_borough"]
    assert int(table.to_numpy().sum()) == len(sample_cleaned_data)
    assert table.loc[2022].sum() == 2


def test_to_dict_is_json_serializable(report):
    data = report.to_dict()
    text = json.dumps(data, default=str)
    assert "incidents_by_year" in text
    assert data["record_count"] == 5
