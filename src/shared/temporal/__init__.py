"""
NYC Shootings - Temporal Utilities

Temporal processing utilities for incident records:
- Time-of-day string parsing to hour
- Time-of-day buckets (Night, Morning, Afternoon, Evening)
"""

from src.shared.temporal.features import (
    TIME_OF_DAY_ORDER,
    TimeOfDay,
    assign_time_of_day,
    time_of_day,
)
from src.shared.temporal.parsers import parse_dates, parse_hour, parse_hours

__all__ = [
    "parse_hour",
    "parse_hours",
    "parse_dates",
    "TimeOfDay",
    "TIME_OF_DAY_ORDER",
    "time_of_day",
    "assign_time_of_day",
]
