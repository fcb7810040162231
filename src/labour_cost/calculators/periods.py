"""Reporting periods and parsing of period parameters."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from labour_cost.errors import InputRangeError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


@dataclass(frozen=True)
class Period:
    """A half-open date range [start, end)."""

    start: date
    end: date
    label: str

    @classmethod
    def for_month(cls, year: int, month: int) -> Period:
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        return cls(start=start, end=end, label=f"{year:04d}-{month:02d}")

    @classmethod
    def for_week(cls, week_start: date) -> Period:
        return cls(
            start=week_start,
            end=week_start + timedelta(days=7),
            label=week_start.isoformat(),
        )

    @property
    def last_day(self) -> date:
        return self.end - timedelta(days=1)

    def contains(self, moment: datetime) -> bool:
        """True if the moment's calendar date falls in the period."""
        return self.start <= moment.date() < self.end

    def previous_month(self) -> Period:
        """The calendar month before the one this period starts in."""
        if self.start.month == 1:
            return Period.for_month(self.start.year - 1, 12)
        return Period.for_month(self.start.year, self.start.month - 1)


def parse_month(value: str | None) -> Period:
    """Parse a ``YYYY-MM`` month parameter.

    Raises:
        InputRangeError: If the value is missing or not a valid month
    """
    if not value:
        raise InputRangeError("month", value, "month is required (format: YYYY-MM)")

    match = _MONTH_RE.match(value.strip())
    if match is None:
        raise InputRangeError("month", value, "expected format YYYY-MM")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InputRangeError("month", value, "month must be between 01 and 12")
    if year < 1:
        raise InputRangeError("month", value, "year must be positive")

    try:
        period = Period.for_month(year, month)
        # Reports compare with the month before, which must exist too
        period.previous_month()
    except ValueError:
        raise InputRangeError("month", value, "month is outside the supported range") from None
    return period


def current_week_start(today: date | None = None) -> date:
    """Monday of the week containing today."""
    today = today or date.today()
    return today - timedelta(days=today.weekday())


def parse_week_start(value: str | None, today: date | None = None) -> date:
    """Parse a week-start parameter; absent means this week's Monday.

    Accepts an ISO date or datetime. The date is used as given; it is not
    snapped to a Monday.

    Raises:
        InputRangeError: If the value cannot be parsed
    """
    if not value:
        return current_week_start(today)

    text = value.strip()
    try:
        week_start = date.fromisoformat(text)
    except ValueError:
        try:
            week_start = datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise InputRangeError(
                "week_start", value, "expected an ISO date (YYYY-MM-DD)"
            ) from None

    try:
        Period.for_week(week_start)
    except OverflowError:
        raise InputRangeError(
            "week_start", value, "week ends outside the supported range"
        ) from None
    return week_start
