"""
Unit tests for ShootingFeatureBuilder.

Tests the model-ready feature table built from cleaned incidents.
"""

import pandas as pd
import pytest

from src.datasets.shootings.features import ShootingFeatureBuilder, build_shooting_features


class TestShootingFeatureBuilder:
    """Test cases for ShootingFeatureBuilder class."""

    @pytest.fixture
    def builder(self, test_config):
        """Create a ShootingFeatureBuilder instance."""
        return ShootingFeatureBuilder(test_config)

    def test_feature_columns(self, builder, sample_cleaned_data):
        """Test the builder emits predictors and target only."""
        builder.run(sample_cleaned_data)
        features = builder.get_data()

        assert list(features.columns) == ["borough", "precinct", "time_of_day", "is_murder"]
        assert features.index.name == "incident_key"
        assert features.index.tolist() == sample_cleaned_data.index.tolist()

    def test_time_of_day_buckets(self, builder, sample_cleaned_data):
        """Test hours 14, 2, 21, 18, 0 map to their buckets."""
        builder.run(sample_cleaned_data)
        features = builder.get_data()

        assert features["time_of_day"].astype(str).tolist() == [
            "Afternoon",
            "Night",
            "Evening",
            "Evening",
            "Night",
        ]

    def test_categorical_domains(self, builder, sample_cleaned_data):
        """Test categoricals carry observed domains, time of day in day order."""
        result = builder.run(sample_cleaned_data)
        features = builder.get_data()

        assert result.category_domains["time_of_day"] == ("Night", "Afternoon", "Evening")
        assert tuple(features["time_of_day"].cat.categories) == ("Night", "Afternoon", "Evening")
        assert builder.get_category_domains()["borough"] == tuple(
            sorted(["BRONX", "BROOKLYN", "QUEENS", "STATEN ISLAND", "Unknown"])
        )

    def test_target_is_bool(self, builder, sample_cleaned_data):
        """Test the target is a plain boolean column."""
        builder.run(sample_cleaned_data)
        features = builder.get_data()

        assert features["is_murder"].dtype == bool
        assert features["is_murder"].tolist() == [False, True, False, False, True]

    def test_incomplete_rows_dropped(self, builder, sample_cleaned_data):
        """Test rows missing a predictor are dropped here only."""
        cleaned = sample_cleaned_data.copy()
        cleaned["occur_hour"] = cleaned["occur_hour"].astype("Int64")
        cleaned.loc["100003", "occur_hour"] = pd.NA

        result = builder.run(cleaned)

        assert result.rows_input == 5
        assert result.rows_output == 4
        assert result.drop_reasons == {"incomplete_features": 1}
        assert "100003" not in builder.get_data().index
        assert len(cleaned) == 5

    def test_feature_stats(self, builder, sample_cleaned_data):
        """Test per-feature statistics are recorded."""
        result = builder.run(sample_cleaned_data)

        assert result.feature_stats["is_murder"]["true_ratio"] == pytest.approx(0.4)
        assert result.feature_stats["borough"]["unique_count"] == 5
        assert result.features_computed == 4

    def test_missing_source_column(self, builder, sample_cleaned_data):
        """Test a cleaned frame without occur_hour is rejected."""
        with pytest.raises(ValueError, match="occur_hour"):
            builder.run(sample_cleaned_data.drop(columns=["occur_hour"]))

    def test_rows_must_be_keyed(self, builder, sample_cleaned_data):
        """Test a frame not indexed by incident_key is rejected."""
        with pytest.raises(ValueError, match="incident_key"):
            builder.run(sample_cleaned_data.reset_index())

    def test_duplicate_keys_warn(self, builder, sample_cleaned_data, caplog):
        """Test repeated incident keys are reported."""
        doubled = pd.concat([sample_cleaned_data, sample_cleaned_data.iloc[[0]]])

        with caplog.at_level("WARNING"):
            result = builder.run(doubled)

        assert result.rows_output == 6
        assert "duplicate incident_key" in caplog.text

    def test_feature_definitions(self, builder):
        """Test every emitted feature is defined."""
        names = [f.name for f in builder.get_feature_definitions()]
        assert names == ShootingFeatureBuilder.FEATURE_COLUMNS
        assert builder.get_entity_key() == "incident_key"


def test_build_shooting_features(sample_cleaned_data, test_config):
    """Test convenience function returns the result dictionary."""
    result = build_shooting_features(sample_cleaned_data, config=test_config)

    assert result["success"] is True
    assert result["rows_output"] == 5
    assert result["category_domains"]["time_of_day"] == ["Night", "Afternoon", "Evening"]
