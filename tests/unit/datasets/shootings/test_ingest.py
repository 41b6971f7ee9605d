"""
Tests for the shooting incident ingester.
"""

from unittest.mock import patch

import pytest

from src.datasets.shootings.ingest import (
    ShootingIngester,
    ingest_shooting_data,
    load_shooting_data,
)
from src.shared.exceptions import DataSourceError, SchemaError


def test_run_reads_all_rows(sample_csv, sample_raw_data, test_config):
    ingester = ShootingIngester(test_config)
    result = ingester.run(sample_csv, execution_date="2024-01-01")

    assert result.success
    assert result.dataset == "shootings"
    assert result.rows_fetched == len(sample_raw_data)
    assert result.columns == list(sample_raw_data.columns)
    assert result.metadata["primary_key"] == "INCIDENT_KEY"

    df = ingester.get_data()
    assert len(df) == len(sample_raw_data)


def test_values_stay_raw_strings(sample_csv, test_config):
    """Nothing is converted at load time, including empty cells and keys."""
    df = load_shooting_data(sample_csv, test_config)

    assert df["INCIDENT_KEY"].iloc[0] == "100001"
    assert df["PRECINCT"].iloc[0] == "44"
    assert df["OCCUR_DATE"].iloc[5] == "not-a-date"
    assert df["BORO"].iloc[4] == ""
    assert df["Latitude"].iloc[4] == ""
    assert df["PERP_SEX"].iloc[1] == "(null)"


def test_duplicates_are_kept(sample_csv, test_config):
    df = load_shooting_data(sample_csv, test_config)
    assert (df["INCIDENT_KEY"] == "100001").sum() == 2


def test_byte_order_mark_and_padded_headers(tmp_path, sample_raw_data, test_config):
    path = tmp_path / "bom.csv"
    columns = list(sample_raw_data.columns)
    header = ", ".join(columns)
    row = ",".join(sample_raw_data.iloc[0])
    path.write_text(f"\ufeff{header}\n{row}\n", encoding="utf-8")

    df = load_shooting_data(path, test_config)
    assert list(df.columns) == columns


def test_missing_file(tmp_path, test_config):
    path = tmp_path / "nope.csv"
    with pytest.raises(DataSourceError) as exc_info:
        ShootingIngester(test_config).run(path)
    assert exc_info.value.path == str(path)
    assert "not found" in exc_info.value.reason


def test_directory_is_rejected(tmp_path, test_config):
    with pytest.raises(DataSourceError):
        ShootingIngester(test_config).run(tmp_path)


def test_empty_file(tmp_path, test_config):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(DataSourceError) as exc_info:
        ShootingIngester(test_config).run(path)
    assert "empty" in exc_info.value.reason


def test_malformed_table(tmp_path, test_config):
    path = tmp_path / "bad.csv"
    path.write_text("a,b\n1,2\n3,4,5,6\n")
    with pytest.raises(DataSourceError):
        ShootingIngester(test_config).run(path)


def test_missing_expected_column(tmp_path, test_config, sample_raw_data):
    path = tmp_path / "no_boro.csv"
    sample_raw_data.drop(columns=["BORO"]).to_csv(path, index=False)

    with pytest.raises(SchemaError) as exc_info:
        ShootingIngester(test_config).run(path)
    assert exc_info.value.missing_columns == ["BORO"]
    assert str(path) in str(exc_info.value)


def test_schema_check_can_be_disabled(tmp_path, mutable_config, sample_raw_data):
    mutable_config.validation.strict_schema = False
    path = tmp_path / "no_boro.csv"
    sample_raw_data.drop(columns=["BORO"]).to_csv(path, index=False)

    result = ShootingIngester(mutable_config).run(path)
    assert "BORO" not in result.columns


def test_read_error_is_wrapped(sample_csv, test_config, mocker):
    mocker.patch(
        "src.datasets.shootings.ingest.pd.read_csv",
        side_effect=OSError("permission denied"),
    )
    with pytest.raises(DataSourceError) as exc_info:
        ShootingIngester(test_config).run(sample_csv)
    assert "permission denied" in exc_info.value.reason


@patch("src.datasets.shootings.ingest.pd.read_csv")
def test_decode_error_is_wrapped(mock_read_csv, sample_csv, test_config):
    mock_read_csv.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
    with pytest.raises(DataSourceError) as exc_info:
        ShootingIngester(test_config).run(sample_csv)
    assert "invalid start byte" in exc_info.value.reason


def test_failure_leaves_no_data(tmp_path, test_config):
    ingester = ShootingIngester(test_config)
    with pytest.raises(DataSourceError):
        ingester.run(tmp_path / "missing.csv")
    assert ingester.get_data() is None


def test_ingest_shooting_data_returns_dict(sample_csv, sample_raw_data, test_config):
    result = ingest_shooting_data(sample_csv, config=test_config)
    assert result["rows_fetched"] == len(sample_raw_data)
    assert result["success"] is True


def test_expected_columns_from_config(test_config):
    expected = ShootingIngester(test_config).get_expected_columns()
    assert "INCIDENT_KEY" in expected
    assert "Latitude" in expected
    assert "LOC_OF_OCCUR_DESC" not in expected
