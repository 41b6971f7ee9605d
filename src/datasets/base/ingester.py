"""
NYC Shootings - Base Ingester

Abstract base class for dataset ingesters. Provides a consistent interface
for loading raw tabular data with:
- Schema checks against the expected raw columns
- Error handling with file context
- Structured result reporting

Usage:
    class ShootingIngester(BaseIngester):
        def fetch_data(self, source: str | Path) -> pd.DataFrame:
            ...
        def get_expected_columns(self) -> list[str]:
            return ["INCIDENT_KEY", "OCCUR_DATE", ...]
        def get_primary_key(self) -> str:
            return "INCIDENT_KEY"
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from src.shared.config import Settings, get_config
from src.shared.exceptions import SchemaError

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Result of a data ingestion operation."""

    dataset: str
    execution_date: str | None
    source: str
    rows_fetched: int
    columns: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "source": self.source,
            "rows_fetched": self.rows_fetched,
            "columns": self.columns,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "metadata": self.metadata,
        }


class BaseIngester(ABC):
    """
    Abstract base class for dataset ingestion.

    Subclasses must implement:
    - fetch_data(): Read raw data from the source
    - get_expected_columns(): Return the raw columns the source must carry
    - get_primary_key(): Return the primary key field
    - get_dataset_name(): Return the dataset name
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the ingester.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @abstractmethod
    def fetch_data(self, source: str | Path) -> pd.DataFrame:
        """
        Read raw data from the source.

        Args:
            source: Location of the raw data

        Returns:
            DataFrame containing the raw data
        """
        pass

    @abstractmethod
    def get_expected_columns(self) -> list[str]:
        """
        Get the raw column names the source must provide.

        Returns:
            List of raw column names
        """
        pass

    @abstractmethod
    def get_primary_key(self) -> str:
        """
        Get the primary key field name.

        Returns:
            Column name that identifies each record
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """
        Get the dataset name.

        Returns:
            Dataset name (e.g., "shootings")
        """
        pass

    def run(
        self,
        source: str | Path,
        execution_date: str | None = None,
    ) -> IngestionResult:
        """
        Run the ingestion process.

        Args:
            source: Location of the raw data
            execution_date: Optional execution date in YYYY-MM-DD format

        Returns:
            IngestionResult with details about the ingestion

        Raises:
            DataSourceError: If the source cannot be read
            SchemaError: If expected columns are absent
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()

        logger.info(
            f"Starting ingestion for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "source": str(source),
            },
        )

        try:
            df = self.fetch_data(source)

            if self.config.validation.strict_schema:
                self.validate_schema(df, source=source)

            duration = time.time() - start_time

            result = IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                source=str(source),
                rows_fetched=len(df),
                columns=list(df.columns),
                duration_seconds=duration,
                success=True,
                metadata={"primary_key": self.get_primary_key()},
            )

            logger.info(
                f"Ingestion complete for {dataset_name}: {len(df)} rows",
                extra=result.to_dict(),
            )

            # Store the dataframe for downstream access
            self._data = df

            return result

        except Exception as e:
            logger.error(
                f"Ingestion failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "source": str(source), "error": str(e)},
                exc_info=True,
            )
            raise

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently fetched data."""
        return getattr(self, "_data", None)

    def validate_schema(self, df: pd.DataFrame, source: str | Path | None = None) -> None:
        """
        Check that every expected raw column is present.

        Args:
            df: DataFrame to validate
            source: Where the data came from, for the error message

        Raises:
            SchemaError: If any expected column is absent
        """
        missing = set(self.get_expected_columns()) - set(df.columns)
        if missing:
            raise SchemaError(missing, source=source)
