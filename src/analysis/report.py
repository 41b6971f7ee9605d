"""
NYC Shootings - Descriptive Report

Assembles the standard descriptive sections over the cleaned incident set:
temporal (year, month, hour, time of day), spatial (borough, precinct) and
demographic (victim and perpetrator age group, sex, race). Demographic
sections come in a raw view and a view with sentinel categories excluded.

The report returns data only; rendering is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from src.analysis.aggregator import (
    AggregateBucket,
    Aggregator,
    exclude_values,
    require_coordinates,
)
from src.shared.config import Settings, get_config

logger = logging.getLogger(__name__)

# Sentinel categories excluded from the "known" demographic views
SENTINELS: dict[str, list[str]] = {
    "victim_age_group": ["UNKNOWN", "1022"],
    "victim_sex": ["U", "UNKNOWN"],
    "victim_race": ["UNKNOWN"],
    "perp_age_group": ["UNKNOWN", "1020", "224", "940"],
    "perp_sex": ["U", "UNKNOWN"],
    "perp_race": ["UNKNOWN"],
}

TEMPORAL_SECTIONS = ["year", "month_name", "day_of_week", "hour", "time_of_day"]
DEMOGRAPHIC_SECTIONS = list(SENTINELS)


@dataclass
class ReportSection:
    """One aggregation in the report."""

    name: str
    group_by: str
    buckets: list[AggregateBucket]
    filtered: bool = False
    total: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "group_by": self.group_by,
            "filtered": self.filtered,
            "total": self.total,
            "buckets": [b.to_dict() for b in self.buckets],
        }


@dataclass
class ShootingReport:
    """All descriptive sections plus cross tabulations."""

    record_count: int
    sections: dict[str, ReportSection] = field(default_factory=dict)
    crosstabs: dict[str, pd.DataFrame] = field(default_factory=dict)

    def __getitem__(self, name: str) -> ReportSection:
        return self.sections[name]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "record_count": self.record_count,
            "sections": {name: s.to_dict() for name, s in self.sections.items()},
            "crosstabs": {
                name: {str(k): v for k, v in table.to_dict(orient="index").items()}
                for name, table in self.crosstabs.items()
            },
        }


class ReportBuilder:
    """Builds a ShootingReport from cleaned incidents."""

    def __init__(self, config: Settings | None = None):
        self.config = config or get_config()
        self.aggregator = Aggregator(self.config)

    def build(self, df: pd.DataFrame) -> ShootingReport:
        """
        Compute every report section.

        Args:
            df: Cleaned incident DataFrame

        Returns:
            ShootingReport
        """
        report = ShootingReport(record_count=len(df))

        for group_by in TEMPORAL_SECTIONS:
            self._add(report, f"incidents_by_{group_by}", df, group_by)

        # Spatial sections only count geocoded incidents
        geocoded = require_coordinates(df)
        dropped_ungeocoded = len(geocoded) < len(df)
        self._add(report, "incidents_by_borough", geocoded, "borough", dropped_ungeocoded)
        self._add(report, "incidents_by_precinct", geocoded, "precinct", dropped_ungeocoded)

        for group_by in DEMOGRAPHIC_SECTIONS:
            self._add(report, group_by, df, group_by)
            known = exclude_values(df, group_by, SENTINELS[group_by])
            self._add(report, f"{group_by}_known", known, group_by, filtered=True)

        report.sections["murder_rate_by_borough"] = ReportSection(
            name="murder_rate_by_borough",
            group_by="borough",
            buckets=self.aggregator.rate_by(df, "borough"),
            total=len(df),
        )
        report.sections["murder_rate_by_time_of_day"] = ReportSection(
            name="murder_rate_by_time_of_day",
            group_by="time_of_day",
            buckets=self.aggregator.rate_by(df, "time_of_day"),
            total=len(df),
        )

        report.crosstabs["year_by_borough"] = self.aggregator.crosstab(df, "year", "borough")
        report.crosstabs["victim_race_by_sex"] = self.aggregator.crosstab(
            df, "victim_race", "victim_sex"
        )

        logger.info(
            f"Built shooting report with {len(report.sections)} sections",
            extra={"record_count": report.record_count, "num_sections": len(report.sections)},
        )

        return report

    def _add(
        self,
        report: ShootingReport,
        name: str,
        df: pd.DataFrame,
        group_by: str,
        filtered: bool = False,
    ) -> None:
        report.sections[name] = ReportSection(
            name=name,
            group_by=group_by,
            buckets=self.aggregator.aggregate(df, group_by, metric="percentage"),
            filtered=filtered,
            total=len(df),
        )


def build_report(df: pd.DataFrame, config: Settings | None = None) -> ShootingReport:
    """Convenience function to build the descriptive report."""
    return ReportBuilder(config).build(df)
