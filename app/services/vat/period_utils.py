"""Period date range utilities for VAT reports.

Provides:
- DateWindow: inclusive calendar-day window tested as a half-open interval
- quick_range: the preset windows offered on the reports screen
- vat_quarter_label / financial_year_label: HMRC period labels
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.exceptions import InvalidReportRangeError

QUICK_RANGES = ("today", "week", "month", "6month", "1year")

_QUARTER_MONTHS = {
    1: "Jan-Mar",
    2: "Apr-Jun",
    3: "Jul-Sep",
    4: "Oct-Dec",
}


@dataclass(frozen=True)
class DateWindow:
    """Report window covering whole calendar days in the report timezone.

    ``end_date`` is inclusive to the end of its day; membership is tested as
    ``lower <= created_at < upper`` where ``upper`` is midnight after ``end_date``.
    """

    start_date: date
    end_date: date
    tz: ZoneInfo

    @classmethod
    def from_dates(
        cls,
        start: date,
        end: Optional[date] = None,
        tz: str | ZoneInfo = "Europe/London",
    ) -> "DateWindow":
        """Build a window; a missing end means the single day ``start``.

        Raises:
            InvalidReportRangeError: If start falls after end
        """
        if isinstance(start, datetime):
            start = start.date()
        if isinstance(end, datetime):
            end = end.date()
        end = end or start
        if start > end:
            raise InvalidReportRangeError(start, end)
        zone = tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)
        return cls(start_date=start, end_date=end, tz=zone)

    @property
    def lower(self) -> datetime:
        return datetime.combine(self.start_date, time.min)

    @property
    def upper(self) -> datetime:
        return datetime.combine(self.end_date + timedelta(days=1), time.min)

    def to_local(self, moment: datetime) -> datetime:
        """Naive wall-clock time in the report timezone."""
        if moment.tzinfo is not None:
            moment = moment.astimezone(self.tz).replace(tzinfo=None)
        return moment

    def contains(self, moment: datetime) -> bool:
        local = self.to_local(moment)
        return self.lower <= local < self.upper


def quick_range(kind: str, today: Optional[date] = None) -> Tuple[date, date]:
    """Preset (start, end) ranges ending today.

    Args:
        kind: 'today', 'week' (last 7 days), 'month' (last 30 days),
            '6month' or '1year'
        today: Reference date (defaults to the current date)

    Raises:
        ValueError: If kind is not a known preset
    """
    today = today or date.today()
    if kind == "today":
        return (today, today)
    elif kind == "week":
        return (today - timedelta(days=7), today)
    elif kind == "month":
        return (today - timedelta(days=30), today)
    elif kind == "6month":
        return (_months_back(today, 6), today)
    elif kind == "1year":
        return (_months_back(today, 12), today)
    raise ValueError(f"Invalid quick range: {kind}. Must be one of {', '.join(QUICK_RANGES)}")


def _months_back(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp to the last day of a shorter month (31 Aug -> 28/29 Feb)
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def vat_quarter_label(day: date) -> str:
    """Calendar VAT quarter, e.g. ``Q1 2024 (Jan-Mar)``."""
    quarter = (day.month - 1) // 3 + 1
    return f"Q{quarter} {day.year} ({_QUARTER_MONTHS[quarter]})"


def financial_year_label(day: date) -> str:
    """UK financial year starting in April, e.g. ``2024-25``."""
    start_year = day.year if day.month >= 4 else day.year - 1
    return f"{start_year}-{str(start_year + 1)[-2:]}"
