"""
NYC Shootings - Base Preprocessor

Abstract base class for dataset preprocessors. Provides a consistent interface
for data cleaning and transformation with:
- Column standardization
- Data type conversion
- Per-field missing value policy
- Categorical domain tagging

Usage:
    class ShootingPreprocessor(BasePreprocessor):
        def transform(self, df: pd.DataFrame) -> pd.DataFrame:
            ...
        def get_column_mappings(self) -> dict[str, str]:
            return {"BORO": "borough"}
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from src.shared.config import FieldPolicy, Settings, get_config
from src.shared.exceptions import SchemaError

logger = logging.getLogger(__name__)


@dataclass
class PreprocessingResult:
    """Result of a preprocessing operation."""

    dataset: str
    execution_date: str | None
    rows_input: int
    rows_output: int
    rows_dropped: int
    columns_input: int
    columns_output: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    transformations_applied: list[str] = field(default_factory=list)
    drop_reasons: dict[str, int] = field(default_factory=dict)
    category_domains: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "rows_output": self.rows_output,
            "rows_dropped": self.rows_dropped,
            "columns_input": self.columns_input,
            "columns_output": self.columns_output,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "transformations_applied": self.transformations_applied,
            "drop_reasons": self.drop_reasons,
            "category_domains": {k: list(v) for k, v in self.category_domains.items()},
        }


class BasePreprocessor(ABC):
    """
    Abstract base class for dataset preprocessing.

    Subclasses must implement:
    - transform(): Apply dataset-specific transformations
    - get_dataset_name(): Return the dataset name
    - get_required_columns(): Return list of required output columns
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the preprocessor.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self._transformations: list[str] = []
        self._drop_reasons: dict[str, int] = {}
        self._category_domains: dict[str, tuple[str, ...]] = {}

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply dataset-specific transformations.

        Args:
            df: Raw DataFrame with renamed columns

        Returns:
            Transformed DataFrame
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

    @abstractmethod
    def get_required_columns(self) -> list[str]:
        """
        Get list of required columns in the output.

        Returns:
            List of column names that must be present after preprocessing
        """
        pass

    def get_column_mappings(self) -> dict[str, str]:
        """
        Get column name mappings (old -> new).

        Override this method to rename columns during preprocessing.
        """
        return {}

    def get_dtype_mappings(self) -> dict[str, str]:
        """
        Get data type mappings for columns.

        Override this method to specify target data types.
        """
        return {}

    def run(
        self,
        df: pd.DataFrame,
        execution_date: str | None = None,
    ) -> PreprocessingResult:
        """
        Run the preprocessing pipeline.

        The input frame is never modified; all work happens on a copy.

        Args:
            df: Raw DataFrame to preprocess
            execution_date: Optional execution date in YYYY-MM-DD format

        Returns:
            PreprocessingResult with details about the preprocessing

        Raises:
            SchemaError: If required columns are missing after transformation
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)
        columns_input = len(df.columns)

        logger.info(
            f"Starting preprocessing for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "rows_input": rows_input,
            },
        )

        try:
            # Reset tracking
            self._transformations = []
            self._drop_reasons = {}
            self._category_domains = {}

            df = df.copy()

            # Apply column mappings
            df = self._apply_column_mappings(df)

            # Apply data type conversions
            df = self._apply_dtype_conversions(df)

            # Apply dataset-specific transformations
            df = self.transform(df)

            # Validate required columns
            self._validate_required_columns(df)

            duration = time.time() - start_time
            rows_output = len(df)

            result = PreprocessingResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=rows_output,
                rows_dropped=rows_input - rows_output,
                columns_input=columns_input,
                columns_output=len(df.columns),
                duration_seconds=duration,
                success=True,
                transformations_applied=self._transformations,
                drop_reasons=self._drop_reasons,
                category_domains=self._category_domains,
            )

            logger.info(
                f"Preprocessing complete for {dataset_name}: {rows_input} -> {rows_output} rows",
                extra=result.to_dict(),
            )

            # Store processed data
            self._data = df

            return result

        except Exception as e:
            logger.error(
                f"Preprocessing failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )
            raise

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently processed data."""
        return getattr(self, "_data", None)

    def get_category_domains(self) -> dict[str, tuple[str, ...]]:
        """Get the categorical domains observed in the most recent run."""
        return dict(self._category_domains)

    def _apply_column_mappings(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply column name mappings."""
        mappings = self.get_column_mappings()
        if mappings:
            df = df.rename(columns=mappings)
            self._transformations.append(f"renamed_columns: {list(mappings.keys())}")
        return df

    def _apply_dtype_conversions(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply data type conversions."""
        dtype_mappings = self.get_dtype_mappings()
        for col, dtype in dtype_mappings.items():
            if col in df.columns:
                try:
                    if dtype == "int":
                        df[col] = pd.to_numeric(df[col], errors="coerce").astype("Int64")
                    elif dtype == "float":
                        df[col] = pd.to_numeric(df[col], errors="coerce")
                    elif dtype == "string":
                        df[col] = df[col].astype("string").str.strip()
                    else:
                        df[col] = df[col].astype(dtype)
                    self._transformations.append(f"converted_{col}_to_{dtype}")
                except (TypeError, ValueError) as e:
                    logger.warning(f"Failed to convert {col} to {dtype}: {e}")
        return df

    def _validate_required_columns(self, df: pd.DataFrame) -> None:
        """Validate that all required columns are present."""
        required = set(self.get_required_columns())
        present = set(df.columns)
        missing = required - present

        if missing:
            raise SchemaError(missing)

    def log_transformation(self, name: str) -> None:
        """Log a transformation that was applied."""
        self._transformations.append(name)

    def log_dropped_rows(self, reason: str, count: int) -> None:
        """Log rows that were dropped."""
        self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + count

    # ==========================================================================
    # Common Preprocessing Utilities
    # ==========================================================================

    def normalize_missing(self, df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
        """Replace configured null tokens (e.g. "(null)") with missing values."""
        tokens = {t.strip().upper() for t in self.config.cleaning.null_tokens}
        for col in columns:
            if col not in df.columns:
                continue
            values = df[col].astype("string").str.strip()
            is_token = values.str.upper().isin(tokens).fillna(False).astype(bool)
            df[col] = values.mask(is_token, pd.NA)
        self.log_transformation("normalize_missing")
        return df

    def drop_duplicates(
        self,
        df: pd.DataFrame,
        subset: list[str] | None = None,
        keep: str = "first",
        ignore_missing: bool = False,
    ) -> pd.DataFrame:
        """
        Drop duplicate rows, preserving input order.

        With ``ignore_missing`` rows with a missing value in ``subset`` are
        never treated as duplicates of each other.
        """
        before_count = len(df)
        duplicated = df.duplicated(subset=subset, keep=keep)
        if ignore_missing and subset:
            duplicated &= df[subset].notna().all(axis=1)
        df = df[~duplicated].copy()
        dropped = before_count - len(df)

        if dropped > 0:
            reason = f"duplicate_{subset[0]}" if subset and len(subset) == 1 else "duplicates"
            self.log_dropped_rows(reason, dropped)
            self.log_transformation("drop_duplicates")

        return df

    def fill_missing(
        self,
        df: pd.DataFrame,
        col: str,
        value: Any,
    ) -> pd.DataFrame:
        """Fill missing values in a column."""
        missing_count = df[col].isna().sum()
        if missing_count > 0:
            df[col] = df[col].fillna(value)
            self.log_transformation(f"fill_missing_{col}")
        return df

    def drop_missing(self, df: pd.DataFrame, col: str, reason: str | None = None) -> pd.DataFrame:
        """Drop rows with a missing value in a column."""
        mask = df[col].isna()
        missing_count = int(mask.sum())
        if missing_count > 0:
            self.log_dropped_rows(reason or f"missing_{col}", missing_count)
            df = df[~mask].copy()
            self.log_transformation(f"drop_missing_{col}")
        return df

    def apply_missing_policy(
        self,
        df: pd.DataFrame,
        policy: Mapping[str, FieldPolicy],
    ) -> pd.DataFrame:
        """
        Apply a per-field missing value policy.

        Each field is either filled with a value, has its incomplete rows
        dropped, or is kept as is. Drops are applied in policy order and are
        stable filters over the input order.
        """
        for col, rule in policy.items():
            if col not in df.columns:
                continue
            if rule.action == "fill":
                df = self.fill_missing(df, col, rule.value)
            elif rule.action == "drop":
                df = self.drop_missing(df, col)
        return df

    def tag_categoricals(self, df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
        """
        Convert columns to pandas categoricals with observed, sorted domains.

        The domains are recorded and exposed through get_category_domains().
        """
        for col in columns:
            if col not in df.columns:
                continue
            observed = sorted(str(v) for v in df[col].dropna().unique())
            df[col] = pd.Categorical(df[col].astype("string"), categories=observed)
            self._category_domains[col] = tuple(observed)
        self.log_transformation("tag_categoricals")
        return df
