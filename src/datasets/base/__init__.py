"""
NYC Shootings - Base Classes for Datasets

Abstract base classes that dataset implementations inherit from.
These provide a consistent interface for:
- Data ingestion (BaseIngester)
- Data preprocessing (BasePreprocessor)
- Feature building (BaseFeatureBuilder)

Usage:
    from src.datasets.base import BaseIngester, BasePreprocessor, BaseFeatureBuilder

    class ShootingIngester(BaseIngester):
        def fetch_data(self, source: str | Path) -> pd.DataFrame:
            ...
"""

from src.datasets.base.feature_builder import (
    BaseFeatureBuilder,
    FeatureBuildResult,
    FeatureDefinition,
)
from src.datasets.base.ingester import BaseIngester, IngestionResult
from src.datasets.base.preprocessor import BasePreprocessor, PreprocessingResult

__all__ = [
    "BaseIngester",
    "IngestionResult",
    "BasePreprocessor",
    "PreprocessingResult",
    "BaseFeatureBuilder",
    "FeatureBuildResult",
    "FeatureDefinition",
]
