"""
NYC Shootings - Shooting Incident Preprocessor

Cleans and validates raw NYPD shooting incident records.

Transformations:
    - Column renaming to standardized names
    - Null token normalization ("(null)", "", ...)
    - Deduplication by incident_key (first occurrence wins)
    - Date, time-of-day, coordinate and flag parsing
    - Per-field missing value policy (fill / drop / keep)
    - Categorical tagging with observed domains

Rows whose present values fail to parse are dropped and counted under an
``invalid_<field>`` reason. Missing values follow the configured policy.

Usage:
    from src.datasets.shootings.preprocess import ShootingPreprocessor

    preprocessor = ShootingPreprocessor()
    result = preprocessor.run(raw_df)
    cleaned_df = preprocessor.get_data()
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from src.datasets.base import BasePreprocessor
from src.datasets.shootings.ingest import COLUMN_MAPPINGS, DATASET_CONFIG
from src.shared.config import Settings
from src.shared.exceptions import SchemaError
from src.shared.temporal import parse_dates, parse_hours

logger = logging.getLogger(__name__)

TRUE_VALUES = {v.upper() for v in DATASET_CONFIG.get("murder_flag_true_values", [])} or {
    "TRUE",
    "Y",
    "YES",
    "1",
}
FALSE_VALUES = {"FALSE", "N", "NO", "0"}

CATEGORICAL_COLUMNS = [
    "borough",
    "precinct",
    "victim_age_group",
    "victim_sex",
    "victim_race",
    "perp_age_group",
    "perp_sex",
    "perp_race",
]

OUTPUT_COLUMNS = [
    "occur_date",
    "occur_time",
    "occur_hour",
    "borough",
    "precinct",
    "victim_age_group",
    "victim_sex",
    "victim_race",
    "perp_age_group",
    "perp_sex",
    "perp_race",
    "latitude",
    "longitude",
    "is_murder",
]


class ShootingPreprocessor(BasePreprocessor):
    """
    Preprocessor for NYPD shooting incident data.

    The cleaned frame is indexed by ``incident_key`` and keeps the input
    order of the surviving rows.
    """

    COLUMN_MAPPINGS = COLUMN_MAPPINGS

    DTYPE_MAPPINGS = {
        "incident_key": "string",
        "precinct": "string",
    }

    REQUIRED_COLUMNS = OUTPUT_COLUMNS

    def __init__(self, config: Settings | None = None):
        """Initialize shooting preprocessor and check its missing value policy."""
        super().__init__(config)
        self.missing_policy = self.config.cleaning.missing_policy
        unknown = set(self.missing_policy) - set(self.COLUMN_MAPPINGS.values())
        if unknown:
            raise ValueError(f"Missing value policy names unknown fields: {sorted(unknown)}")

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_required_columns(self) -> list[str]:
        """Return required output columns."""
        return self.REQUIRED_COLUMNS

    def get_column_mappings(self) -> dict[str, str]:
        """Return column name mappings."""
        return self.COLUMN_MAPPINGS

    def get_dtype_mappings(self) -> dict[str, str]:
        """Return data type mappings."""
        return self.DTYPE_MAPPINGS

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply shooting-specific transformations.

        Args:
            df: Raw DataFrame with renamed columns

        Returns:
            Cleaned DataFrame indexed by incident_key
        """
        if "incident_key" not in df.columns:
            raise SchemaError(["incident_key"])

        df = self.normalize_missing(df, list(self.COLUMN_MAPPINGS.values()))

        df = self.drop_duplicates(df, subset=["incident_key"], keep="first", ignore_missing=True)

        df = self._process_dates(df)
        df = self._process_times(df)
        df = self._process_coordinates(df)
        df = self._process_murder_flag(df)

        df = self.apply_missing_policy(df, self.missing_policy)
        df = self._finalize_murder_flag(df)

        df = self.tag_categoricals(df, CATEGORICAL_COLUMNS)

        return self._select_output_columns(df)

    def _drop_invalid(self, df: pd.DataFrame, col: str, invalid: pd.Series) -> pd.DataFrame:
        """Drop rows whose present value failed to parse."""
        invalid = invalid.fillna(False).astype(bool)
        count = int(invalid.sum())
        if count > 0:
            logger.warning(f"Dropping {count} records with unparsable {col}")
            self.log_dropped_rows(f"invalid_{col}", count)
            df = df[~invalid].copy()
        return df

    def _process_dates(self, df: pd.DataFrame) -> pd.DataFrame:
        """Parse occur_date with the fixed configured format."""
        if "occur_date" in df.columns:
            raw = df["occur_date"]
            parsed = parse_dates(raw, self.config.cleaning.date_format)
            df = df.assign(occur_date=parsed)
            df = self._drop_invalid(df, "occur_date", raw.notna() & parsed.isna())
            self.log_transformation("process_occur_date")
        return df

    def _process_times(self, df: pd.DataFrame) -> pd.DataFrame:
        """Derive occur_hour from occur_time."""
        if "occur_time" in df.columns:
            hours = parse_hours(df["occur_time"])
            df = df.assign(occur_hour=hours)
            df = self._drop_invalid(df, "occur_time", df["occur_time"].notna() & hours.isna())
            self.log_transformation("derive_occur_hour")
        return df

    def _process_coordinates(self, df: pd.DataFrame) -> pd.DataFrame:
        """Convert coordinates to floats and report ones outside New York City."""
        for col in ("latitude", "longitude"):
            if col in df.columns:
                raw = df[col]
                values = pd.to_numeric(raw, errors="coerce").astype("Float64")
                df = df.assign(**{col: values})
                df = self._drop_invalid(df, col, raw.notna() & values.isna())
                df = df.assign(**{col: df[col].astype("float64")})

        if "latitude" in df.columns and "longitude" in df.columns:
            bounds = self.config.validation.geo_bounds
            out_of_bounds = (
                (df["latitude"] < bounds.min_lat)
                | (df["latitude"] > bounds.max_lat)
                | (df["longitude"] < bounds.min_lon)
                | (df["longitude"] > bounds.max_lon)
            )
            out_of_bounds_count = int(out_of_bounds.sum())
            if out_of_bounds_count > 0:
                logger.warning(
                    f"Found {out_of_bounds_count} records with coordinates outside New York City"
                )
            self.log_transformation("validate_coordinates")

        return df

    def _process_murder_flag(self, df: pd.DataFrame) -> pd.DataFrame:
        """Convert the statistical murder flag to a nullable boolean."""
        if "is_murder" in df.columns:
            raw = df["is_murder"]
            upper = raw.astype("string").str.upper()
            flag = pd.Series(pd.NA, index=df.index, dtype="boolean")
            flag[upper.isin(TRUE_VALUES).fillna(False).astype(bool)] = True
            flag[upper.isin(FALSE_VALUES).fillna(False).astype(bool)] = False
            df = df.assign(is_murder=flag)
            df = self._drop_invalid(df, "is_murder", raw.notna() & flag.isna())
            self.log_transformation("convert_murder_flag_to_boolean")
        return df

    def _finalize_murder_flag(self, df: pd.DataFrame) -> pd.DataFrame:
        """Use a plain bool dtype once no flag is missing."""
        if "is_murder" in df.columns and not df["is_murder"].isna().any():
            df = df.assign(is_murder=df["is_murder"].astype(bool))
        return df

    def _select_output_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Select output columns and key the frame by incident_key."""
        available_columns = [c for c in OUTPUT_COLUMNS if c in df.columns]
        df = df.set_index("incident_key")[available_columns].copy()
        self.log_transformation("select_output_columns")
        return df


# =============================================================================
# Convenience Functions
# =============================================================================


def preprocess_shooting_data(
    df: pd.DataFrame,
    execution_date: str | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for preprocessing shooting data.

    Returns the result dictionary.
    """
    preprocessor = ShootingPreprocessor(config)
    result = preprocessor.run(df, execution_date)
    return result.to_dict()
