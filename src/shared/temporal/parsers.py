"""
Parsers for the date and time-of-day strings found in incident records.
"""

from __future__ import annotations

import re
from typing import Any

import pandas as pd

from src.shared.exceptions import ParseError

# HH:MM or HH:MM:SS, hour may be a single digit
_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):([0-5]\d)(?::([0-5]\d))?\s*$")


def parse_hour(value: Any) -> int:
    """
    Parse a time-of-day string to its hour.

    Args:
        value: Time string such as "14:30:00", "7:05" or "24:00:00"

    Returns:
        Hour of day in [0, 24]

    Raises:
        ParseError: If the value is not a valid time of day
    """
    if not isinstance(value, str):
        raise ParseError("occur_time", value, "HH:MM[:SS]")

    match = _TIME_PATTERN.match(value)
    if match is None:
        raise ParseError("occur_time", value, "HH:MM[:SS]")

    hour = int(match.group(1))
    # 24 is only valid as the exact end of the day
    if hour > 24 or (hour == 24 and value.strip() not in ("24:00", "24:00:00")):
        raise ParseError("occur_time", value, "HH:MM[:SS]")

    return hour


def parse_hours(times: pd.Series) -> pd.Series:
    """
    Parse a column of time strings to hours.

    Unparsable or missing values become <NA>; nothing is raised.
    """

    def _safe(value: Any) -> Any:
        try:
            return parse_hour(value)
        except ParseError:
            return pd.NA

    return times.astype(object).map(_safe).astype("Int64")


def parse_dates(dates: pd.Series, date_format: str) -> pd.Series:
    """
    Parse a column of date strings with a fixed format.

    Values that do not match the format become NaT.
    """
    return pd.to_datetime(dates, format=date_format, errors="coerce")
