"""
NYC Shootings - Incident Aggregator

Group cleaned incident records and tally them:
- Direct fields (borough, victim age group / sex / race, ...)
- Derived fields (year, month name, day of week, hour, time of day)
- Counts and percentages of the input set
- Cross tabulations and per-group flag rates

Sentinel categories (e.g. victim sex "U") are removed by explicit
pre-filters, never inside aggregate(), so one aggregator serves both the
raw and the sentinel-excluded views.

Usage:
    aggregator = Aggregator(config)

    # Incidents per borough
    buckets = aggregator.aggregate(df, "borough")

    # Victim race share, unknowns excluded first
    known = exclude_values(df, "victim_race", ["UNKNOWN"])
    buckets = aggregator.aggregate(known, "victim_race", metric="percentage")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Literal

import pandas as pd

from src.shared.config import Settings, get_config
from src.shared.temporal import assign_time_of_day

logger = logging.getLogger(__name__)

MISSING_KEY = "Missing"

DIRECT_FIELDS = [
    "borough",
    "precinct",
    "victim_age_group",
    "victim_sex",
    "victim_race",
    "perp_age_group",
    "perp_sex",
    "perp_race",
    "is_murder",
]

Metric = Literal["count", "percentage"]


@dataclass(frozen=True)
class AggregateBucket:
    """
    One group of an aggregation.

    Represents the number of records sharing a group key, and their share of
    the records passed to the aggregation.
    """

    key: Any
    count: int
    percentage: float | None = None

    def __repr__(self) -> str:
        if self.percentage is None:
            return f"AggregateBucket({self.key}, count={self.count})"
        return f"AggregateBucket({self.key}, count={self.count}, {self.percentage:.2f}%)"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"key": self.key, "count": self.count, "percentage": self.percentage}


def _year(df: pd.DataFrame, config: Settings) -> pd.Series:
    return df["occur_date"].dt.year.astype("Int64")


def _month(df: pd.DataFrame, config: Settings) -> pd.Series:
    return df["occur_date"].dt.month.astype("Int64")


def _month_name(df: pd.DataFrame, config: Settings) -> pd.Series:
    return df["occur_date"].dt.month_name()


def _day_of_week(df: pd.DataFrame, config: Settings) -> pd.Series:
    return df["occur_date"].dt.day_name()


def _hour(df: pd.DataFrame, config: Settings) -> pd.Series:
    return df["occur_hour"]


def _time_of_day(df: pd.DataFrame, config: Settings) -> pd.Series:
    return assign_time_of_day(df["occur_hour"], config.features.time_of_day)


DERIVED_FIELDS: dict[str, Callable[[pd.DataFrame, Settings], pd.Series]] = {
    "year": _year,
    "month": _month,
    "month_name": _month_name,
    "day_of_week": _day_of_week,
    "hour": _hour,
    "time_of_day": _time_of_day,
}


class Aggregator:
    """
    Count and percentage aggregations over cleaned incident records.

    Bucket ordering is deterministic: descending count, ties broken by group
    key ascending.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize aggregator.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @staticmethod
    def group_fields() -> list[str]:
        """All accepted group_by names."""
        return DIRECT_FIELDS + list(DERIVED_FIELDS)

    def group_keys(self, df: pd.DataFrame, group_by: str) -> pd.Series:
        """
        Extract the grouping key of every record.

        Args:
            df: Cleaned incident DataFrame
            group_by: Direct field name or derived field name

        Returns:
            Series aligned with df, missing keys as <NA>

        Raises:
            ValueError: If group_by is not a known field
        """
        if group_by in DERIVED_FIELDS:
            keys = DERIVED_FIELDS[group_by](df, self.config)
        elif group_by in DIRECT_FIELDS:
            if group_by not in df.columns:
                raise ValueError(f"Column '{group_by}' not found in DataFrame")
            keys = df[group_by]
        else:
            raise ValueError(f"Unknown group_by '{group_by}'. Choose one of: {self.group_fields()}")

        return keys.astype(object).where(keys.notna(), MISSING_KEY)

    def aggregate(
        self,
        df: pd.DataFrame,
        group_by: str,
        metric: Metric = "count",
    ) -> list[AggregateBucket]:
        """
        Tally records per group.

        Args:
            df: Cleaned (optionally pre-filtered) incident DataFrame
            group_by: Direct or derived field to group by
            metric: "count" for tallies only, "percentage" to add each
                    group's share of len(df)

        Returns:
            Buckets ordered by descending count, then key ascending.
            Bucket counts sum to len(df).
        """
        if metric not in ("count", "percentage"):
            raise ValueError(f"Unknown metric '{metric}'. Choose 'count' or 'percentage'")

        keys = self.group_keys(df, group_by)
        counts = keys.value_counts(sort=False, dropna=False)
        total = len(df)

        buckets = [
            AggregateBucket(
                key=_plain(key),
                count=int(count),
                percentage=(100.0 * int(count) / total) if metric == "percentage" else None,
            )
            for key, count in counts.items()
        ]
        buckets.sort(key=lambda b: (-b.count, _sort_key(b.key)))

        logger.debug(
            f"Aggregated {total} records by '{group_by}' into {len(buckets)} buckets",
            extra={"group_by": group_by, "metric": metric, "num_buckets": len(buckets)},
        )

        return buckets

    def crosstab(self, df: pd.DataFrame, row: str, column: str) -> pd.DataFrame:
        """
        Count records for every (row, column) key pair.

        Returns:
            DataFrame with row keys as index, column keys as columns, sorted
            by key on both axes
        """
        rows = self.group_keys(df, row).rename(row)
        cols = self.group_keys(df, column).rename(column)
        table = pd.crosstab(rows, cols)
        table = table.reindex(
            index=sorted(table.index, key=_sort_key),
            columns=sorted(table.columns, key=_sort_key),
        )
        return table

    def rate_by(
        self,
        df: pd.DataFrame,
        group_by: str,
        flag: str = "is_murder",
    ) -> list[AggregateBucket]:
        """
        Share of flagged records within each group.

        Each bucket's count is the number of flagged records in the group and
        its percentage is relative to the group's own size.
        """
        if flag not in df.columns:
            raise ValueError(f"Column '{flag}' not found in DataFrame")

        keys = self.group_keys(df, group_by)
        flags = df[flag].fillna(False).astype(bool)
        grouped = flags.groupby(keys, sort=False).agg(["sum", "size"])

        buckets = [
            AggregateBucket(
                key=_plain(key),
                count=int(row["sum"]),
                percentage=100.0 * int(row["sum"]) / int(row["size"]),
            )
            for key, row in grouped.iterrows()
        ]
        buckets.sort(key=lambda b: (-b.percentage, _sort_key(b.key)))
        return buckets


# =============================================================================
# Pre-filters
# =============================================================================


def exclude_values(df: pd.DataFrame, field: str, values: Iterable[Any]) -> pd.DataFrame:
    """
    Drop records whose field holds one of the given sentinel values.

    Example:
        known_sex = exclude_values(df, "victim_sex", ["U"])
    """
    if field not in df.columns:
        raise ValueError(f"Column '{field}' not found in DataFrame")
    mask = df[field].astype(object).isin(list(values))
    return df[~mask]


def require_coordinates(df: pd.DataFrame) -> pd.DataFrame:
    """Keep only records with both latitude and longitude."""
    return df[df["latitude"].notna() & df["longitude"].notna()]


def only_flagged(df: pd.DataFrame, flag: str = "is_murder") -> pd.DataFrame:
    """Keep only records where the flag is set."""
    return df[df[flag].fillna(False).astype(bool)]


def buckets_to_frame(buckets: list[AggregateBucket]) -> pd.DataFrame:
    """Tabulate buckets for display."""
    return pd.DataFrame([b.to_dict() for b in buckets], columns=["key", "count", "percentage"])


def _plain(value: Any) -> Any:
    """Unwrap numpy scalars so bucket keys compare and serialize cleanly."""
    return value.item() if hasattr(value, "item") else value


def _sort_key(value: Any) -> tuple[int, Any]:
    """Order keys of mixed types: numbers, then strings, then the missing key."""
    if value == MISSING_KEY:
        return (2, "")
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, int | float):
        return (0, value)
    return (1, str(value))
