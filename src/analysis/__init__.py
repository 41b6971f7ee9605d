"""
NYC Shootings - Descriptive Analysis

Aggregations over cleaned incident records:
- Aggregator: counts and percentages by direct or derived fields
- Pre-filters: sentinel exclusion, geocoded-only, flagged-only
- ReportBuilder: the standard temporal, spatial and demographic sections
"""

from src.analysis.aggregator import (
    AggregateBucket,
    Aggregator,
    buckets_to_frame,
    exclude_values,
    only_flagged,
    require_coordinates,
)
from src.analysis.report import ReportBuilder, ReportSection, ShootingReport, build_report

__all__ = [
    "Aggregator",
    "AggregateBucket",
    "buckets_to_frame",
    "exclude_values",
    "only_flagged",
    "require_coordinates",
    "ReportBuilder",
    "ReportSection",
    "ShootingReport",
    "build_report",
]
