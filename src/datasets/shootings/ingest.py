"""
NYC Shootings - Shooting Incident Ingester

Loads the NYPD shooting incident CSV into a DataFrame of raw string columns.

Data Source:
    NYPD Shooting Incident Data (Historic)
    https://data.cityofnewyork.us/Public-Safety/NYPD-Shooting-Incident-Data-Historic-/833y-fsy8

Configuration:
    Raw column names loaded from configs/datasets/shootings.yaml

Usage:
    from src.datasets.shootings.ingest import ShootingIngester

    ingester = ShootingIngester()
    result = ingester.run("data/raw/NYPD_Shooting_Incident_Data__Historic_.csv")
    raw_df = ingester.get_data()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd

from src.datasets.base import BaseIngester
from src.shared.config import Settings, get_dataset_config
from src.shared.exceptions import DataSourceError

logger = logging.getLogger(__name__)

# =============================================================================
# Source Configuration (loaded from shootings.yaml)
# =============================================================================
DATASET_CONFIG = get_dataset_config("shootings")

DEFAULT_COLUMNS = {
    "INCIDENT_KEY": "incident_key",
    "OCCUR_DATE": "occur_date",
    "OCCUR_TIME": "occur_time",
    "BORO": "borough",
    "PRECINCT": "precinct",
    "STATISTICAL_MURDER_FLAG": "is_murder",
    "PERP_AGE_GROUP": "perp_age_group",
    "PERP_SEX": "perp_sex",
    "PERP_RACE": "perp_race",
    "VIC_AGE_GROUP": "victim_age_group",
    "VIC_SEX": "victim_sex",
    "VIC_RACE": "victim_race",
    "Latitude": "latitude",
    "Longitude": "longitude",
}

COLUMN_MAPPINGS: dict[str, str] = DATASET_CONFIG.get("columns") or DEFAULT_COLUMNS
PRIMARY_KEY = DATASET_CONFIG.get("ingestion", {}).get("primary_key", "INCIDENT_KEY")
DELIMITER = DATASET_CONFIG.get("source", {}).get("delimiter", ",")


class ShootingIngester(BaseIngester):
    """
    Ingester for NYPD shooting incident data.

    Reads a delimited file into raw string columns. No value is converted or
    dropped here; empty cells stay as empty strings.
    """

    def __init__(self, config: Settings | None = None):
        """Initialize shooting ingester."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "shootings"

    def get_expected_columns(self) -> list[str]:
        """Return the raw columns the source must carry (from config)."""
        return list(COLUMN_MAPPINGS.keys())

    def get_primary_key(self) -> str:
        """Return the primary key field (from config)."""
        return PRIMARY_KEY

    def fetch_data(self, source: str | Path) -> pd.DataFrame:
        """
        Read the incident file.

        Args:
            source: Path to the CSV file

        Returns:
            DataFrame with every column as a string

        Raises:
            DataSourceError: If the file is missing, unreadable or not a table
        """
        path = Path(source)
        if not path.exists():
            raise DataSourceError(path, "file not found")
        if not path.is_file():
            raise DataSourceError(path, "not a regular file")

        logger.info(f"Reading shooting incidents from {path}", extra={"source": str(path)})

        try:
            df = pd.read_csv(
                path,
                sep=DELIMITER,
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
            )
        except pd.errors.EmptyDataError as e:
            raise DataSourceError(path, "file is empty") from e
        except pd.errors.ParserError as e:
            raise DataSourceError(path, f"not a valid delimited table ({e})") from e
        except (OSError, UnicodeDecodeError) as e:
            raise DataSourceError(path, str(e)) from e

        df.columns = [str(c).strip() for c in df.columns]

        logger.info(
            f"Read {len(df)} raw shooting records",
            extra={"rows": len(df), "columns": list(df.columns)},
        )

        return df


# =============================================================================
# Convenience Functions
# =============================================================================


def ingest_shooting_data(
    source: str | Path,
    execution_date: str | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for ingesting shooting data.

    Returns the result dictionary.
    """
    ingester = ShootingIngester(config)
    result = ingester.run(source, execution_date)
    return result.to_dict()


def load_shooting_data(source: str | Path, config: Settings | None = None) -> pd.DataFrame:
    """Convenience function returning the raw DataFrame."""
    ingester = ShootingIngester(config)
    ingester.run(source)
    return ingester.get_data()
