"""
NYC Shootings - Base Feature Builder

Abstract base class for dataset feature builders. Provides a consistent interface
for feature engineering with:
- Feature definitions and validation
- Per-feature statistics
- Categorical domains for model encoding

Usage:
    class ShootingFeatureBuilder(BaseFeatureBuilder):
        def build_features(self, df: pd.DataFrame) -> pd.DataFrame:
            ...
        def get_feature_definitions(self) -> list[FeatureDefinition]:
            ...
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from src.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class FeatureDefinition:
    """Definition of a computed feature."""

    name: str
    description: str
    dtype: str
    source_columns: list[str]
    nullable: bool = False
    allowed_values: list[Any] | None = None
    min_value: float | None = None
    max_value: float | None = None


@dataclass
class FeatureBuildResult:
    """Result of a feature building operation."""

    dataset: str
    execution_date: str | None
    rows_input: int
    rows_output: int
    features_computed: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    drop_reasons: dict[str, int] = field(default_factory=dict)
    feature_stats: dict[str, dict[str, Any]] = field(default_factory=dict)
    category_domains: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "rows_output": self.rows_output,
            "features_computed": self.features_computed,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "drop_reasons": self.drop_reasons,
            "feature_stats": self.feature_stats,
            "category_domains": {k: list(v) for k, v in self.category_domains.items()},
        }


class BaseFeatureBuilder(ABC):
    """
    Abstract base class for feature building.

    Subclasses must implement:
    - build_features(): Compute features from processed data
    - get_dataset_name(): Return the dataset name
    - get_feature_definitions(): Return list of feature definitions
    - get_entity_key(): Return the entity key column
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the feature builder.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self._feature_stats: dict[str, dict[str, Any]] = {}
        self._drop_reasons: dict[str, int] = {}
        self._category_domains: dict[str, tuple[str, ...]] = {}

    @abstractmethod
    def build_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Build features from processed data.

        Args:
            df: Processed DataFrame

        Returns:
            DataFrame with computed features
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
    def get_feature_definitions(self) -> list[FeatureDefinition]:
        """
        Get list of feature definitions.

        Returns:
            List of FeatureDefinition objects describing each feature
        """
        pass

    @abstractmethod
    def get_entity_key(self) -> str:
        """
        Get the entity key column that identifies each feature row.

        Returns:
            Column name
        """
        pass

    def run(
        self,
        df: pd.DataFrame,
        execution_date: str | None = None,
    ) -> FeatureBuildResult:
        """
        Run the feature building pipeline.

        Args:
            df: Processed DataFrame
            execution_date: Optional execution date in YYYY-MM-DD format

        Returns:
            FeatureBuildResult with details about the feature building
        """
        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)

        logger.info(
            f"Starting feature building for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "rows_input": rows_input,
            },
        )

        try:
            # Reset tracking
            self._feature_stats = {}
            self._drop_reasons = {}
            self._category_domains = {}

            # Build features
            features_df = self.build_features(df)

            # Compute feature statistics
            self._compute_feature_stats(features_df)

            # Validate features
            self._validate_features(features_df)

            duration = time.time() - start_time

            result = FeatureBuildResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=len(features_df),
                features_computed=len(features_df.columns),
                duration_seconds=duration,
                success=True,
                drop_reasons=self._drop_reasons,
                feature_stats=self._feature_stats,
                category_domains=self._category_domains,
            )

            logger.info(
                f"Feature building complete for {dataset_name}: "
                f"{len(features_df)} rows, {len(features_df.columns)} features",
                extra=result.to_dict(),
            )

            # Store features
            self._data = features_df

            return result

        except Exception as e:
            logger.error(
                f"Feature building failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )
            raise

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently built features."""
        return getattr(self, "_data", None)

    def get_category_domains(self) -> dict[str, tuple[str, ...]]:
        """Get the categorical domains observed in the most recent build."""
        return dict(self._category_domains)

    def log_dropped_rows(self, reason: str, count: int) -> None:
        """Log rows that were dropped."""
        self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + count

    def _compute_feature_stats(self, df: pd.DataFrame) -> None:
        """Compute statistics for each feature."""
        for col in df.columns:
            stats: dict[str, Any] = {
                "dtype": str(df[col].dtype),
                "null_count": int(df[col].isna().sum()),
                "null_ratio": float(df[col].isna().mean()) if len(df) else 0.0,
            }

            if pd.api.types.is_bool_dtype(df[col]):
                stats["true_ratio"] = float(df[col].mean()) if len(df) else 0.0
            elif pd.api.types.is_numeric_dtype(df[col]):
                non_null = df[col].dropna()
                if len(non_null) > 0:
                    stats.update(
                        {
                            "mean": float(non_null.mean()),
                            "min": float(non_null.min()),
                            "max": float(non_null.max()),
                        }
                    )
            else:
                stats["unique_count"] = int(df[col].nunique())

            self._feature_stats[col] = stats

    def _validate_features(self, df: pd.DataFrame) -> None:
        """Validate features against definitions."""
        entity_key = self.get_entity_key()
        if df.index.name != entity_key:
            raise ValueError(
                f"Feature rows must be indexed by '{entity_key}', got '{df.index.name}'"
            )
        if df.index.duplicated().any():
            logger.warning(f"Feature rows have duplicate {entity_key} values")

        definitions = {f.name: f for f in self.get_feature_definitions()}

        for col in df.columns:
            if col not in definitions:
                continue

            defn = definitions[col]

            # Check for nulls if not nullable
            if not defn.nullable and df[col].isna().any():
                logger.warning(f"Feature '{col}' has null values but is marked as non-nullable")

            # Check categorical values
            if defn.allowed_values is not None:
                unexpected = set(df[col].dropna().unique()) - set(defn.allowed_values)
                if unexpected:
                    logger.warning(f"Feature '{col}' has unexpected values: {sorted(unexpected)}")

            # Check value ranges for numeric features
            if pd.api.types.is_numeric_dtype(df[col]) and not pd.api.types.is_bool_dtype(df[col]):
                if defn.min_value is not None and (df[col] < defn.min_value).any():
                    logger.warning(f"Feature '{col}' has values below minimum {defn.min_value}")
                if defn.max_value is not None and (df[col] > defn.max_value).any():
                    logger.warning(f"Feature '{col}' has values above maximum {defn.max_value}")
