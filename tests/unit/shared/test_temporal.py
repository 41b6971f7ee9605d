"""
Tests for time parsing and time-of-day bucketing.
"""

import pandas as pd
import pytest

from src.shared.config import TimeOfDayConfig
from src.shared.exceptions import ParseError
from src.shared.temporal import (
    TIME_OF_DAY_ORDER,
    TimeOfDay,
    assign_time_of_day,
    parse_dates,
    parse_hour,
    parse_hours,
    time_of_day,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("00:00:00", 0),
        ("14:30:00", 14),
        ("7:05", 7),
        ("23:59:59", 23),
        (" 18:00 ", 18),
        ("24:00:00", 24),
    ],
)
def test_parse_hour(value, expected):
    assert parse_hour(value) == expected


@pytest.mark.parametrize("value", ["", "noon", "25:00:00", "24:30:00", "12:60", "12", None, 1430])
def test_parse_hour_invalid(value):
    with pytest.raises(ParseError) as exc_info:
        parse_hour(value)
    assert exc_info.value.column == "occur_time"


def test_parse_hours_maps_bad_values_to_na():
    times = pd.Series(["14:30:00", None, "bogus", "00:05:00"], index=[10, 11, 12, 13])
    hours = parse_hours(times)

    assert str(hours.dtype) == "Int64"
    assert hours.index.tolist() == [10, 11, 12, 13]
    assert hours[10] == 14
    assert pd.isna(hours[11])
    assert pd.isna(hours[12])
    assert hours[13] == 0


def test_parse_dates():
    dates = parse_dates(pd.Series(["01/15/2021", "2021-01-15", None]), "%m/%d/%Y")
    assert dates[0] == pd.Timestamp("2021-01-15")
    assert pd.isna(dates[1])
    assert pd.isna(dates[2])


@pytest.mark.parametrize(
    "hour,expected",
    [
        (0, TimeOfDay.NIGHT),
        (5.99, TimeOfDay.NIGHT),
        (6, TimeOfDay.MORNING),
        (11, TimeOfDay.MORNING),
        (12, TimeOfDay.AFTERNOON),
        (17.5, TimeOfDay.AFTERNOON),
        (18, TimeOfDay.EVENING),
        (23, TimeOfDay.EVENING),
        (24, TimeOfDay.EVENING),
    ],
)
def test_time_of_day_boundaries(hour, expected):
    assert time_of_day(hour) == expected


def test_time_of_day_is_total():
    """Every hour in [0, 24] lands in exactly one bucket."""
    for hour in range(25):
        assert time_of_day(hour).value in TIME_OF_DAY_ORDER


@pytest.mark.parametrize("hour", [-1, 24.5, 30, None, float("nan"), pd.NA])
def test_time_of_day_rejects_bad_hours(hour):
    with pytest.raises(ValueError):
        time_of_day(hour)


def test_time_of_day_custom_boundaries():
    boundaries = TimeOfDayConfig(night=0, morning=5, afternoon=12, evening=20)
    assert time_of_day(5, boundaries) == TimeOfDay.MORNING
    assert time_of_day(19, boundaries) == TimeOfDay.AFTERNOON
    assert time_of_day(20, boundaries) == TimeOfDay.EVENING


def test_assign_time_of_day_matches_scalar():
    hours = pd.Series([0, 5, 6, 12, 18, 24, None], dtype="Int64")
    labels = assign_time_of_day(hours)

    expected = [time_of_day(h).value for h in [0, 5, 6, 12, 18, 24]]
    assert labels.iloc[:6].tolist() == expected
    assert pd.isna(labels.iloc[6])


def test_assign_time_of_day_out_of_range():
    with pytest.raises(ValueError):
        assign_time_of_day(pd.Series([3, 25]))


def test_time_of_day_order():
    assert TIME_OF_DAY_ORDER == ["Night", "Morning", "Afternoon", "Evening"]
