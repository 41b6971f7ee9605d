"""
NYC Shootings - Shooting Feature Builder

Builds the model-ready table for the murder classifier.

Features:
    - borough: categorical
    - precinct: categorical
    - time_of_day: Night / Morning / Afternoon / Evening from occur_hour
    - is_murder: target flag

Rows missing any of these are dropped here only; the descriptive
aggregations keep working on the full cleaned set.

Usage:
    from src.datasets.shootings.features import ShootingFeatureBuilder

    builder = ShootingFeatureBuilder()
    result = builder.run(cleaned_df)
    features_df = builder.get_data()
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from src.datasets.base import BaseFeatureBuilder, FeatureDefinition
from src.shared.config import Settings
from src.shared.temporal import TIME_OF_DAY_ORDER, assign_time_of_day

logger = logging.getLogger(__name__)


class ShootingFeatureBuilder(BaseFeatureBuilder):
    """
    Feature builder for NYPD shooting incidents.

    One feature row per cleaned incident, indexed by incident_key.
    """

    FEATURE_COLUMNS = ["borough", "precinct", "time_of_day", "is_murder"]
    CATEGORICAL_FEATURES = ["borough", "precinct", "time_of_day"]

    def __init__(self, config: Settings | None = None):
        """Initialize shooting feature builder."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_entity_key(self) -> str:
        """Return entity key."""
        return "incident_key"

    def get_feature_definitions(self) -> list[FeatureDefinition]:
        """Return feature definitions."""
        return [
            FeatureDefinition(
                name="borough",
                description="Borough where the incident occurred",
                dtype="category",
                source_columns=["borough"],
            ),
            FeatureDefinition(
                name="precinct",
                description="NYPD precinct code",
                dtype="category",
                source_columns=["precinct"],
            ),
            FeatureDefinition(
                name="time_of_day",
                description="Time-of-day bucket derived from the hour of occurrence",
                dtype="category",
                source_columns=["occur_hour"],
                allowed_values=TIME_OF_DAY_ORDER,
            ),
            FeatureDefinition(
                name="is_murder",
                description="Incident flagged as a murder",
                dtype="bool",
                source_columns=["is_murder"],
            ),
        ]

    def build_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Build the feature table from cleaned incidents.

        Args:
            df: Cleaned shooting DataFrame indexed by incident_key

        Returns:
            DataFrame with borough, precinct, time_of_day and is_murder
        """
        missing = {"borough", "precinct", "occur_hour", "is_murder"} - set(df.columns)
        if missing:
            raise ValueError(f"Cannot build features, missing columns: {sorted(missing)}")

        features = pd.DataFrame(
            {
                "borough": df["borough"].astype("string"),
                "precinct": df["precinct"].astype("string"),
                "time_of_day": assign_time_of_day(
                    df["occur_hour"], self.config.features.time_of_day
                ),
                "is_murder": df["is_murder"],
            },
            index=df.index,
        )

        features = self._drop_incomplete(features)
        features["is_murder"] = features["is_murder"].astype(bool)
        features = self._tag_categoricals(features)

        return features

    def _drop_incomplete(self, features: pd.DataFrame) -> pd.DataFrame:
        """Drop rows missing any feature, keeping input order."""
        incomplete = features.isna().any(axis=1)
        count = int(incomplete.sum())
        if count > 0:
            for col in self.FEATURE_COLUMNS:
                col_missing = int(features[col].isna().sum())
                if col_missing:
                    logger.debug(f"{col_missing} feature rows missing {col}")
            self.log_dropped_rows("incomplete_features", count)
            features = features[~incomplete].copy()
        return features

    def _tag_categoricals(self, features: pd.DataFrame) -> pd.DataFrame:
        """Re-tag categoricals with the domains observed in the feature set."""
        for col in self.CATEGORICAL_FEATURES:
            observed = set(features[col].astype(str))
            if col == "time_of_day":
                domain = [v for v in TIME_OF_DAY_ORDER if v in observed]
            else:
                domain = sorted(observed)
            features[col] = pd.Categorical(features[col].astype(str), categories=domain)
            self._category_domains[col] = tuple(domain)
        return features


# =============================================================================
# Convenience Functions
# =============================================================================


def build_shooting_features(
    df: pd.DataFrame,
    execution_date: str | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for building shooting features.

    Returns the result dictionary.
    """
    builder = ShootingFeatureBuilder(config)
    result = builder.run(df, execution_date)
    return result.to_dict()
