"""
Look-back windows for the volatility chart.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Union

import pandas as pd

from voldash.errors import InvalidArgument


class TimeRange(str, Enum):
    """Named chart ranges."""

    ONE_MONTH = "1M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"
    TEN_YEARS = "10Y"

    @property
    def label(self) -> str:
        return TIME_RANGE_LABELS[self]


TIME_RANGE_LABELS = {
    TimeRange.ONE_MONTH: "1 month",
    TimeRange.ONE_YEAR: "1 year",
    TimeRange.THREE_YEARS: "3 years",
    TimeRange.FIVE_YEARS: "5 years",
    TimeRange.TEN_YEARS: "10 years",
}

DEFAULT_TIME_RANGE = TimeRange.ONE_YEAR

# Calendar offsets; pandas clamps to the last day of the target month.
_OFFSETS = {
    TimeRange.ONE_MONTH: pd.DateOffset(months=1),
    TimeRange.ONE_YEAR: pd.DateOffset(years=1),
    TimeRange.THREE_YEARS: pd.DateOffset(years=3),
    TimeRange.FIVE_YEARS: pd.DateOffset(years=5),
    TimeRange.TEN_YEARS: pd.DateOffset(years=10),
}


@dataclass(frozen=True)
class Window:
    """Inclusive [start, end] date window."""

    start: date
    end: date

    @property
    def start_iso(self) -> str:
        return self.start.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end.isoformat()


def parse_time_range(value: Union[str, TimeRange]) -> TimeRange:
    """
    Parse a range name such as "1Y".

    Raises:
        InvalidArgument: If the name is not a known range
    """
    if isinstance(value, TimeRange):
        return value
    try:
        return TimeRange(str(value).strip().upper())
    except ValueError:
        raise InvalidArgument(f"Unknown time range: {value!r}") from None


def parse_date(value: Union[str, date]) -> date:
    """
    Parse an ISO ``YYYY-MM-DD`` date.

    Raises:
        InvalidArgument: If the value is not a calendar date
    """
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidArgument(f"Not a calendar date: {value!r}") from None


def resolve_from_date(
    time_range: Union[str, TimeRange], anchor_date: Union[str, date]
) -> date:
    """
    Compute the inclusive start date of a window ending at anchor_date.

    Months and years are subtracted on the calendar. A day that does not
    exist in the target month is clamped to that month's last day, so
    2024-01-31 minus 1M is 2023-12-31 and 2024-03-31 minus 1M is 2024-02-29.

    Args:
        time_range: Range name or TimeRange
        anchor_date: Upper bound of the window

    Returns:
        Lower bound of the window

    Raises:
        InvalidArgument: If the range or anchor date is malformed
    """
    rng = parse_time_range(time_range)
    anchor = parse_date(anchor_date)
    return (pd.Timestamp(anchor) - _OFFSETS[rng]).date()


def resolve_window(
    time_range: Union[str, TimeRange], anchor_date: Union[str, date]
) -> Window:
    """Build the full [from, to] window for a range and anchor date."""
    anchor = parse_date(anchor_date)
    return Window(start=resolve_from_date(time_range, anchor), end=anchor)
