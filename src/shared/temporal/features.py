"""
Time-of-day buckets.

Hours are bucketed with half-open boundaries:

    [0, 6)   -> Night
    [6, 12)  -> Morning
    [12, 18) -> Afternoon
    [18, 24] -> Evening

Both 0 and 24 are inclusive endpoints of the bucketed range.
"""

from __future__ import annotations

from enum import StrEnum

import numpy as np
import pandas as pd

from src.shared.config import TimeOfDayConfig


class TimeOfDay(StrEnum):
    """Time-of-day bucket."""

    NIGHT = "Night"
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"


TIME_OF_DAY_ORDER = [
    TimeOfDay.NIGHT.value,
    TimeOfDay.MORNING.value,
    TimeOfDay.AFTERNOON.value,
    TimeOfDay.EVENING.value,
]


def time_of_day(hour: float, boundaries: TimeOfDayConfig | None = None) -> TimeOfDay:
    """
    Map an hour of day to its bucket.

    Args:
        hour: Hour in [0, 24], integer or fractional
        boundaries: Bucket start hours (defaults to 0/6/12/18)

    Returns:
        The TimeOfDay bucket

    Raises:
        ValueError: If the hour is missing or outside [0, 24]
    """
    if hour is None or pd.isna(hour):
        raise ValueError("hour is missing")
    if hour < 0 or hour > 24:
        raise ValueError(f"hour must be in [0, 24], got {hour}")

    b = boundaries or TimeOfDayConfig()
    if hour < b.morning:
        return TimeOfDay.NIGHT
    if hour < b.afternoon:
        return TimeOfDay.MORNING
    if hour < b.evening:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


def assign_time_of_day(
    hours: pd.Series,
    boundaries: TimeOfDayConfig | None = None,
) -> pd.Series:
    """
    Vectorized time_of_day over a column of hours.

    Missing hours map to <NA>. Hours outside [0, 24] raise ValueError.
    """
    b = boundaries or TimeOfDayConfig()
    values = pd.to_numeric(hours, errors="coerce").astype("Float64")
    present = values.notna()

    out_of_range = (present & ((values < 0) | (values > 24))).fillna(False).astype(bool)
    if out_of_range.any():
        bad = values[out_of_range].tolist()
        raise ValueError(f"hours must be in [0, 24], got {bad[:5]}")

    v = values.to_numpy(dtype=float, na_value=np.nan)
    labels = np.select(
        [v < b.morning, v < b.afternoon, v < b.evening],
        TIME_OF_DAY_ORDER[:3],
        default=TimeOfDay.EVENING.value,
    )

    result = pd.Series(labels, index=hours.index, dtype="object")
    result[~present.to_numpy(dtype=bool)] = pd.NA
    return result
